"""Default sector catalogs, preset library, and catalog/caps loading.

Catalogs are validated once when loaded; the engine assumes a valid
catalog on every call.
"""

import json
import logging
import math
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

from sector_allocation.engine._common import TOTAL, round_share
from sector_allocation.models import Preset, Sector, SectorCatalog

logger = logging.getLogger(__name__)

DEFAULT_AMOUNT = 100000
DEFAULT_PRESET_KEY = "recommended"

DEFAULT_CATALOG = SectorCatalog(
    [
        Sector(
            "education",
            "Education",
            10,
            50,
            "Improve school infrastructure, teacher training, and digital kits",
            "https://vikaspedia.in/education",
        ),
        Sector(
            "healthcare",
            "Healthcare",
            10,
            50,
            "Primary care, equipment, vaccines and maternal health",
            "https://nhm.gov.in/",
        ),
        Sector(
            "infrastructure",
            "Infrastructure",
            10,
            40,
            "Rural roads, water, electricity, and public transport",
            "https://www.indiainvestmentgrid.gov.in/",
        ),
        Sector("defense", "Defense", 5, 30, "Modernisation, veterans welfare and R&D", "https://mod.gov.in/"),
        Sector("other", "Other", 0, 30, "Arts, environment and contingency reserves", "https://moef.gov.in/"),
    ]
)

UNION_BUDGET_CATALOG = SectorCatalog(
    [
        Sector("education", "Education", 10, 40),
        Sector("healthcare", "Healthcare", 10, 40),
        Sector("infrastructure", "Infrastructure", 5, 35),
        Sector("defense", "Defense", 10, 30),
        Sector("agriculture", "Agriculture", 5, 25),
        Sector("social", "Social Welfare", 5, 25),
        Sector("climate", "Climate & Environment", 0, 20),
    ]
)

DEFAULT_PRESETS: dict[str, Preset] = {
    p.key: p
    for p in [
        Preset(
            "recommended",
            "Govt Recommended",
            {"education": 28, "healthcare": 25, "infrastructure": 25, "defense": 15, "other": 7},
            "A diversified allocation aligned with typical Union Budget priorities.",
        ),
        Preset(
            "balanced",
            "Balanced",
            {"education": 25, "healthcare": 25, "infrastructure": 25, "defense": 15, "other": 10},
            "Equal emphasis across socio-economic development areas.",
        ),
        Preset(
            "education",
            "Education Focus",
            {"education": 45, "healthcare": 20, "infrastructure": 20, "defense": 10, "other": 5},
            "Boost human capital development through higher education spend.",
        ),
        Preset(
            "healthcare",
            "Healthcare Focus",
            {"education": 20, "healthcare": 45, "infrastructure": 20, "defense": 10, "other": 5},
            "Stronger public health outcomes via increased healthcare allocation.",
        ),
    ]
}

_SECTOR_FIELDS = ("key", "label", "min", "max", "description", "link")


def _read_json(source: str | Path | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    try:
        with open(source) as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {source}: {exc}") from exc


def load_catalog(source: str | Path | Mapping[str, Any]) -> SectorCatalog:
    """Build a validated catalog from a dict or JSON file.

    Parameters
    ----------
    source : str | Path | Mapping[str, Any]
        Path to a JSON file, or an already parsed mapping, shaped
        ``{"sectors": [{"key", "label", "min", "max", ...}, ...]}``.

    Returns
    -------
    SectorCatalog

    Raises
    ------
    ValueError
        If the document is malformed or the catalog is infeasible.
    """
    data = _read_json(source)
    entries = data.get("sectors")
    if not isinstance(entries, list):
        raise ValueError("Catalog document must contain a 'sectors' list.")

    sectors = []
    for entry in entries:
        try:
            fields = {name: entry[name] for name in _SECTOR_FIELDS if name in entry}
            sectors.append(Sector(**fields))
        except TypeError as exc:
            raise ValueError(f"Invalid sector entry {entry!r}: {exc}") from exc
    catalog = SectorCatalog(sectors)
    logger.info("Loaded catalog with %d sectors", len(catalog))
    return catalog


def load_presets(source: str | Path | Mapping[str, Any]) -> dict[str, Preset]:
    """Build a preset library from a dict or JSON file.

    Parameters
    ----------
    source : str | Path | Mapping[str, Any]
        Document shaped ``{"presets": {key: {"name", "mix", "rationale"}}}``.

    Returns
    -------
    dict[str, Preset]

    Raises
    ------
    ValueError
        If the document is malformed.
    """
    data = _read_json(source)
    entries = data.get("presets")
    if not isinstance(entries, Mapping):
        raise ValueError("Preset document must contain a 'presets' mapping.")
    presets = {}
    for key, entry in entries.items():
        if not isinstance(entry, Mapping) or not isinstance(entry.get("mix"), Mapping):
            raise ValueError(f"Preset '{key}' must define a 'mix' mapping.")
        presets[key] = Preset(key, entry.get("name", key), dict(entry["mix"]), entry.get("rationale", ""))
    return presets


def normalize_caps(caps: Mapping[str, float], decimals: int = 0) -> dict[str, float]:
    """Rescale non-negative caps proportionally so they total 100.

    Parameters
    ----------
    caps : Mapping[str, float]
        Sector key to raw cap weight.
    decimals : int
        Rounding precision of the rescaled caps.

    Returns
    -------
    dict[str, float]
        Rescaled caps, or a copy of ``caps`` if they total 0. Rounding is
        per sector, so the result may drift from 100 by a few units.

    Raises
    ------
    ValueError
        If any cap is negative.
    """
    if any(v < 0 for v in caps.values()):
        raise ValueError("Caps must be non-negative.")
    total = math.fsum(caps.values())
    if total == 0:
        return dict(caps)
    factor = TOTAL / total
    return {key: round_share(value * factor, decimals) for key, value in caps.items()}


def apply_caps(catalog: SectorCatalog, caps: Mapping[str, float]) -> SectorCatalog:
    """Build a catalog whose sector maximums are the normalized ``caps``.

    Caps are rescaled to total 100 in whole percentages first. Sectors
    without a cap keep their maximum.

    Parameters
    ----------
    catalog : SectorCatalog
        Catalog supplying order, labels and minimums.
    caps : Mapping[str, float]
        Sector key to raw cap weight.

    Returns
    -------
    SectorCatalog

    Raises
    ------
    ValueError
        If a cap names an unknown sector, falls below its sector's minimum,
        or the capped catalog is infeasible.
    """
    unknown = sorted(set(caps) - set(catalog.keys))
    if unknown:
        raise ValueError(f"Caps reference unknown sectors: {unknown}")
    normalized = normalize_caps(caps)
    sectors = [replace(s, max=int(normalized[s.key])) if s.key in normalized else s for s in catalog]
    capped = SectorCatalog(sectors)
    logger.info("Applied caps to %d sectors", len(normalized))
    return capped


def load_caps(source: str | Path | Mapping[str, Any]) -> dict[str, float]:
    """Read a ``{"caps": {...}}`` document.

    Raises
    ------
    ValueError
        If the document has no ``caps`` mapping.
    """
    data = _read_json(source)
    caps = data.get("caps")
    if not isinstance(caps, Mapping):
        raise ValueError("Caps document must contain a 'caps' mapping.")
    return {key: float(value) for key, value in caps.items()}


def dump_caps(caps: Mapping[str, float], path: str | Path) -> None:
    """Write caps as a ``{"caps": {...}}`` JSON document."""
    with open(path, "w") as f:
        json.dump({"caps": dict(caps)}, f, indent=2)
