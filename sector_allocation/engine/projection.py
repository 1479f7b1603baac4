"""Closest-feasible-mix normalization.

Solves a linear program that finds the mix nearest (in L1 distance) to
the requested shares while respecting every sector's bounds, the 100%
total and any locked sectors. Uses PuLP with the CBC solver.
"""

import logging
from collections.abc import Mapping

import pulp as lp

from sector_allocation.engine._common import DEFAULT_DECIMALS, TOTAL, correct_residual, round_share
from sector_allocation.engine._types import LockSet, Mix, MixNormalizer, NormalizeResult
from sector_allocation.engine.preset import CappedScaleNormalizer
from sector_allocation.models import SectorCatalog

logger = logging.getLogger(__name__)


class ProjectionNormalizer:
    """Project a requested mix onto the feasible set.

    Unlike :class:`CappedScaleNormalizer`, this rule always reaches 100%
    when the bounds and locks allow it, even if every requested share sits
    at its floor. Locked sectors are fixed at their requested share, also
    in the fallback result.

    Parameters
    ----------
    decimals : int
        Rounding precision of the returned shares.
    fallback : MixNormalizer, optional
        Rule used when the LP is not optimal. Defaults to
        :class:`CappedScaleNormalizer`.
    """

    rule = "projection"

    def __init__(self, decimals: int = DEFAULT_DECIMALS, fallback: MixNormalizer | None = None) -> None:
        if decimals < 0:
            raise ValueError("decimals must be non-negative.")
        self.decimals = decimals
        self._fallback = fallback or CappedScaleNormalizer(decimals)

    def _fallback_result(
        self,
        status: str,
        catalog: SectorCatalog,
        values: Mapping[str, float],
        locks: LockSet | None,
    ) -> NormalizeResult:
        locked = {k for k in catalog.keys if (locks or {}).get(k, False)}
        mix = self._fallback(catalog, values, locks)
        if locked:
            mix = {**mix, **{k: float(values.get(k, 0)) for k in locked}}
            mix = correct_residual(catalog, mix, TOTAL, frozen=locked)
        return {
            "status": status,
            "mix": mix,
            "objective_value": None,
            "rule": self.rule,
        }

    def solve(
        self,
        catalog: SectorCatalog,
        values: Mapping[str, float],
        locks: LockSet | None = None,
    ) -> NormalizeResult:
        """Solve the projection problem.

        Parameters
        ----------
        catalog : SectorCatalog
            Sector order and bounds.
        values : Mapping[str, float]
            Requested shares. Missing sectors are read as 0.
        locks : LockSet, optional
            Locked sectors are fixed at their requested share.

        Returns
        -------
        NormalizeResult
        """
        locks = locks or {}
        target = {s.key: float(values.get(s.key, 0)) for s in catalog}
        locked = {k for k in catalog.keys if locks.get(k, False)}

        logger.info("Formulating mix projection problem")
        prob = lp.LpProblem("Closest_Feasible_Mix", lp.LpMinimize)
        x = {}
        for s in catalog:
            if s.key in locked:
                x[s.key] = lp.LpVariable(f"Share_{s.key}", lowBound=target[s.key], upBound=target[s.key])
            else:
                x[s.key] = lp.LpVariable(f"Share_{s.key}", lowBound=s.min, upBound=s.max)
        deviation = lp.LpVariable.dicts("Deviation", catalog.keys, lowBound=0)

        prob += lp.lpSum(deviation[k] for k in catalog.keys)
        for k in catalog.keys:
            prob += deviation[k] >= x[k] - target[k]
            prob += deviation[k] >= target[k] - x[k]
        prob += lp.lpSum(x[k] for k in catalog.keys) == TOTAL

        logger.info("Solving the mix projection problem")
        try:
            prob.solve(lp.PULP_CBC_CMD(msg=False))
        except Exception:
            logger.exception("Error solving mix projection problem")
            return self._fallback_result("Error solving projection problem", catalog, values, locks)

        status = lp.LpStatus[prob.status]
        if prob.status != lp.LpStatusOptimal:
            logger.warning(
                "Projection returned non-optimal status: %s, falling back to %s",
                status,
                getattr(self._fallback, "rule", type(self._fallback).__name__),
            )
            return self._fallback_result(status, catalog, values, locks)

        rounded = {k: round_share(x[k].varValue, self.decimals) for k in catalog.keys}
        mix = correct_residual(catalog, rounded, TOTAL, frozen=locked)
        for k in locked:
            mix[k] = target[k]

        return {
            "status": status,
            "mix": mix,
            "objective_value": lp.value(prob.objective),
            "rule": self.rule,
        }

    def __call__(
        self,
        catalog: SectorCatalog,
        values: Mapping[str, float],
        locks: LockSet | None = None,
    ) -> Mix:
        """Return only the projected mix."""
        return self.solve(catalog, values, locks)["mix"]
