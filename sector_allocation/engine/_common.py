"""Shared utilities for allocation normalizers.

Contains decimal-exact rounding and totals, and the residual correction
that moves a rounded mix onto its target total without leaving sector
bounds.
"""

import logging
from collections.abc import Collection, Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from sector_allocation.engine._types import Mix
from sector_allocation.models import SectorCatalog

logger = logging.getLogger(__name__)

TOTAL = 100
DEFAULT_DECIMALS = 1


def to_decimal(value: float) -> Decimal:
    """Convert a share to ``Decimal`` through its display representation."""
    return Decimal(str(value))


def round_share(value: float, decimals: int = DEFAULT_DECIMALS) -> float:
    """Round a share half-up to ``decimals`` places.

    Parameters
    ----------
    value : float
        Share in percent.
    decimals : int
        Number of decimal places to keep. ``0`` gives whole percentages.

    Returns
    -------
    float
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def exact_total(values: Iterable[float]) -> Decimal:
    """Sum shares exactly as they would be displayed.

    ``33.3 + 33.3 + 33.4`` is exactly ``100`` here, unlike a float sum.
    """
    return sum((to_decimal(v) for v in values), Decimal(0))


def correct_residual(
    catalog: SectorCatalog,
    mix: Mapping[str, float],
    target: float = TOTAL,
    frozen: Collection[str] = (),
) -> Mix:
    """Shift rounding residual onto sectors in catalog order, within bounds.

    The signed difference between ``target`` and the mix total is added to
    the first sector, clamped to its ``[min, max]``; whatever it cannot
    absorb moves on to the next sector. A residual no sector can absorb is
    left in place and shows up as a total mismatch.

    Parameters
    ----------
    catalog : SectorCatalog
        Sector order and bounds.
    mix : Mapping[str, float]
        Rounded shares keyed by sector. Not mutated.
    target : float
        Total the mix should reach.
    frozen : Collection[str]
        Sector keys that must keep their value (e.g. locked sectors).

    Returns
    -------
    dict[str, float]
        New mix.
    """
    result = dict(mix)
    residual = to_decimal(target) - exact_total(result[s.key] for s in catalog)
    if residual == 0:
        return result

    logger.debug("Correcting rounding residual of %s", residual)
    for sector in catalog:
        if residual == 0:
            break
        if sector.key in frozen:
            continue
        current = to_decimal(result[sector.key])
        if residual > 0:
            delta = min(residual, Decimal(sector.max) - current)
            if delta <= 0:
                continue
        else:
            delta = max(residual, Decimal(sector.min) - current)
            if delta >= 0:
                continue
        result[sector.key] = float(current + delta)
        residual -= delta

    if residual != 0:
        logger.warning("Residual of %s could not be absorbed within sector bounds", residual)
    return result
