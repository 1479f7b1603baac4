"""Type definitions for the normalizer protocol and result contract."""

from collections.abc import Mapping
from typing import Protocol, TypedDict

from sector_allocation.models import SectorCatalog

Mix = dict[str, float]
LockSet = Mapping[str, bool]


class NormalizeResult(TypedDict):
    """Output contract for normalizers that report solver diagnostics.

    Parameters
    ----------
    status : str
        Termination status (e.g. ``"Optimal"``).
    mix : dict[str, float]
        Normalized shares keyed by sector.
    objective_value : float | None
        Value of the rule's objective function, or ``None`` if non-optimal.
    rule : str
        Identifier for the normalization rule (e.g. ``"projection"``).
    """

    status: str
    mix: Mix
    objective_value: float | None
    rule: str


class MixNormalizer(Protocol):
    """Protocol for preset normalization rules.

    Implementations receive the catalog and a requested mix and return a
    new mix. They must not mutate their inputs.
    """

    def __call__(
        self,
        catalog: SectorCatalog,
        values: Mapping[str, float],
        locks: LockSet | None = None,
    ) -> Mix: ...
