"""Sector allocation engine.

Provides the normalization rules for preset selection, lock-aware
rebalancing after a single-sector edit, guardrail evaluation, and the
``MixNormalizer`` protocol that all preset rules satisfy.

Convenience function ``apply_preset`` runs the default capped-scale rule
in a single call for standalone usage.
"""

from collections.abc import Mapping

from sector_allocation.engine._common import (
    DEFAULT_DECIMALS,
    TOTAL,
    correct_residual,
    exact_total,
    round_share,
)
from sector_allocation.engine._types import LockSet, Mix, MixNormalizer, NormalizeResult
from sector_allocation.engine.guardrails import evaluate_guardrails
from sector_allocation.engine.preset import CappedScaleNormalizer
from sector_allocation.engine.projection import ProjectionNormalizer
from sector_allocation.engine.rebalance import edit_sector
from sector_allocation.models import SectorCatalog, Violation

__all__ = [
    "AllocationEngine",
    "CappedScaleNormalizer",
    "DEFAULT_DECIMALS",
    "LockSet",
    "Mix",
    "MixNormalizer",
    "NormalizeResult",
    "ProjectionNormalizer",
    "TOTAL",
    "apply_preset",
    "correct_residual",
    "edit_sector",
    "evaluate_guardrails",
    "exact_total",
    "round_share",
]


class AllocationEngine:
    """Stateless operations over a fixed sector catalog.

    All state (current mix, locks, amount) is owned by the caller and
    passed in on every call.

    Parameters
    ----------
    catalog : SectorCatalog
        Validated sector catalog.
    decimals : int
        Rounding precision shared by every operation.
    normalizer : MixNormalizer, optional
        Rule for preset selection. Defaults to
        :class:`CappedScaleNormalizer` with the same precision.
    """

    def __init__(
        self,
        catalog: SectorCatalog,
        decimals: int = DEFAULT_DECIMALS,
        normalizer: MixNormalizer | None = None,
    ) -> None:
        self.catalog = catalog
        self.decimals = decimals
        self._normalizer = normalizer or CappedScaleNormalizer(decimals)

    def apply_preset(self, values: Mapping[str, float], locks: LockSet | None = None) -> Mix:
        """Normalize a requested mix to 100 within bounds."""
        return self._normalizer(self.catalog, values, locks)

    def edit_sector(self, mix: Mapping[str, float], locks: LockSet | None, key: str, value: float) -> Mix:
        """Set ``key`` to ``value`` and rescale the unlocked sectors."""
        return edit_sector(self.catalog, mix, locks, key, value, self.decimals)

    def evaluate_guardrails(self, mix: Mapping[str, float]) -> list[Violation]:
        """Return guardrail violations of ``mix`` against this catalog."""
        return evaluate_guardrails(mix, self.catalog)


def apply_preset(
    catalog: SectorCatalog,
    values: Mapping[str, float],
    decimals: int = DEFAULT_DECIMALS,
) -> Mix:
    """Normalize ``values`` with the capped-scale rule in one call.

    Parameters
    ----------
    catalog : SectorCatalog
        Sector order and bounds.
    values : Mapping[str, float]
        Requested shares.
    decimals : int
        Rounding precision.

    Returns
    -------
    dict[str, float]
    """
    return CappedScaleNormalizer(decimals)(catalog, values)
