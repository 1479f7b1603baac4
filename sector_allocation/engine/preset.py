"""Capped-scale normalization for preset selection.

Clamps every requested share into its sector's bounds, then scales the
amounts above each sector's minimum so that the mix totals 100. Sectors
that scaling would push past their maximum are pinned there and the
rest of the budget is rescaled over the remaining sectors, or spread by
headroom once none of them carries weight above its floor.
"""

import logging
import math
from collections.abc import Mapping

from sector_allocation.engine._common import DEFAULT_DECIMALS, TOTAL, correct_residual, round_share
from sector_allocation.engine._types import LockSet, Mix
from sector_allocation.models import SectorCatalog

logger = logging.getLogger(__name__)


def _scale_with_caps(catalog: SectorCatalog, clamped: Mix, extra_target: float) -> Mix:
    """Distribute ``extra_target`` above the floors, pinning overflowing sectors.

    When every unpinned sector sits at its floor there is no weight left to
    scale, so the rest of the budget is spread over the unpinned sectors in
    proportion to their headroom below ``max``. Catalog validation
    guarantees that headroom covers the remaining budget.

    Parameters
    ----------
    catalog : SectorCatalog
        Sector order and bounds.
    clamped : dict[str, float]
        Shares already clamped into ``[min, max]``.
    extra_target : float
        Budget to distribute above the sector minimums.

    Returns
    -------
    dict[str, float]
        Scaled mix totalling ``min_sum + extra_target``.
    """
    result = dict(clamped)
    pinned: set[str] = set()
    remaining = extra_target

    while True:
        free = [s for s in catalog if s.key not in pinned]
        weight = math.fsum(clamped[s.key] - s.min for s in free)
        if weight <= 0:
            headroom = {s.key: s.max - result[s.key] for s in free}
            room = math.fsum(headroom.values())
            if remaining > 0 and room > 0:
                logger.debug("No weight above floors; spreading %.4f over headroom %.4f", remaining, room)
                for s in free:
                    result[s.key] += remaining * headroom[s.key] / room
            break
        scale = remaining / weight
        overflow = [s for s in free if s.min + (clamped[s.key] - s.min) * scale > s.max]
        if not overflow:
            for s in free:
                result[s.key] = s.min + (clamped[s.key] - s.min) * scale
            break
        for s in overflow:
            pinned.add(s.key)
            result[s.key] = float(s.max)
            remaining -= s.max - s.min
        logger.debug("Pinned %s at their maximum; %.4f left to distribute", sorted(pinned), remaining)

    return result


class CappedScaleNormalizer:
    """Normalize a requested mix to 100 within sector bounds.

    Locks are ignored: selecting a preset replaces the whole mix.

    Parameters
    ----------
    decimals : int
        Rounding precision of the returned shares.
    """

    rule = "capped_scale"

    def __init__(self, decimals: int = DEFAULT_DECIMALS) -> None:
        if decimals < 0:
            raise ValueError("decimals must be non-negative.")
        self.decimals = decimals

    def __call__(
        self,
        catalog: SectorCatalog,
        values: Mapping[str, float],
        locks: LockSet | None = None,
    ) -> Mix:
        """Clamp, scale and round ``values``.

        Parameters
        ----------
        catalog : SectorCatalog
            Sector order and bounds.
        values : Mapping[str, float]
            Requested shares. Missing sectors are read as 0.
        locks : LockSet, optional
            Accepted for protocol compatibility and ignored.

        Returns
        -------
        dict[str, float]
            Normalized mix. When every sector sits at its minimum there is
            nothing to scale and the floors are returned as they are.
        """
        clamped = {s.key: float(s.clamp(float(values.get(s.key, 0)))) for s in catalog}

        extra_target = TOTAL - catalog.min_sum
        current_extra = math.fsum(clamped.values()) - catalog.min_sum
        if current_extra <= 0:
            logger.info("All sectors at their minimum; returning floors (total=%d)", catalog.min_sum)
            return clamped

        scaled = _scale_with_caps(catalog, clamped, extra_target)

        rounded = {key: round_share(value, self.decimals) for key, value in scaled.items()}
        result = correct_residual(catalog, rounded, TOTAL)
        logger.info("Preset normalized: %s", result)
        return result
