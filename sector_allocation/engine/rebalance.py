"""Lock-aware rebalancing after a single-sector edit."""

import logging
import math
from collections.abc import Mapping

from sector_allocation.engine._common import DEFAULT_DECIMALS, TOTAL, round_share
from sector_allocation.engine._types import LockSet, Mix
from sector_allocation.models import SectorCatalog

logger = logging.getLogger(__name__)


def edit_sector(
    catalog: SectorCatalog,
    mix: Mapping[str, float],
    locks: LockSet | None,
    key: str,
    value: float,
    decimals: int = DEFAULT_DECIMALS,
) -> Mix:
    """Set one sector's share and rescale the unlocked others.

    The edited value is clamped into the sector's bounds. Locked sectors
    keep their current share; the free sectors are scaled proportionally
    to absorb whatever budget is left. Rounding drift is not corrected.

    Parameters
    ----------
    catalog : SectorCatalog
        Sector order and bounds.
    mix : Mapping[str, float]
        Current shares. Not mutated.
    locks : LockSet, optional
        Sector key to lock flag. Missing keys are unlocked.
    key : str
        Sector being edited.
    value : float
        Requested share for ``key``.
    decimals : int
        Rounding precision of the rescaled free sectors.

    Returns
    -------
    dict[str, float]
        New mix over the catalog's sectors.

    Raises
    ------
    ValueError
        If ``key`` is not in the catalog.
    """
    if key not in catalog:
        raise ValueError(f"Unknown sector '{key}'.")
    locks = locks or {}
    unknown = set(locks) - set(catalog.keys)
    if unknown:
        logger.warning("Ignoring locks for unknown sectors: %s", sorted(unknown))

    new_value = float(catalog[key].clamp(float(value)))
    current = {s.key: float(mix.get(s.key, 0)) for s in catalog}

    free_keys = [k for k in catalog.keys if k != key and not locks.get(k, False)]
    locked_sum = math.fsum(current[k] for k in catalog.keys if k != key and locks.get(k, False))
    remaining = TOTAL - new_value - locked_sum
    free_total = math.fsum(current[k] for k in free_keys)
    factor = remaining / free_total if free_total else 0.0

    if remaining < 0:
        logger.warning(
            "Edit of '%s' to %s leaves no room: locked sectors already hold %s%%",
            key,
            new_value,
            locked_sum,
        )

    result = dict(current)
    result[key] = new_value
    for k in free_keys:
        result[k] = max(0.0, round_share(current[k] * factor, decimals))

    logger.debug("Rebalanced %d free sectors with factor %.4f", len(free_keys), factor)
    return result
