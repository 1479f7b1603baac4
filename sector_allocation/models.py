"""Data models for sector catalogs, presets and guardrail violations."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Sector:
    """Budget category with a policy-defined percentage range.

    Parameters
    ----------
    key : str
        Unique identifier, e.g. ``"education"``.
    label : str
        Display name.
    min : int
        Minimum allowed share in percent.
    max : int
        Maximum allowed share in percent.
    description : str
        Free-text explanation shown next to the slider.
    link : str
        Evidence URL for the sector.

    Raises
    ------
    ValueError
        If the bounds do not satisfy ``0 <= min <= max <= 100``.
    """

    key: str
    label: str
    min: int
    max: int
    description: str = ""
    link: str = ""

    def __post_init__(self) -> None:
        """Validate the policy bounds."""
        if not self.key:
            raise ValueError("Sector key must be non-empty.")
        if not (0 <= self.min <= self.max <= 100):
            raise ValueError(f"Sector '{self.key}' bounds must satisfy 0 <= min <= max <= 100.")

    def clamp(self, value: float) -> float:
        """Clamp ``value`` into ``[min, max]``."""
        return min(max(value, self.min), self.max)


class SectorCatalog:
    """Ordered, immutable collection of sectors.

    Validated once at construction so the engine can assume a feasible
    catalog on every call.

    Parameters
    ----------
    sectors : iterable of Sector
        Sectors in display order. Order is the engine's tie-break order.

    Raises
    ------
    ValueError
        If the catalog is empty, has duplicate keys, or admits no mix
        summing to 100 within bounds.
    """

    def __init__(self, sectors: Iterable[Sector]) -> None:
        self._sectors: tuple[Sector, ...] = tuple(sectors)
        if not self._sectors:
            raise ValueError("Catalog must contain at least one sector.")
        keys = [s.key for s in self._sectors]
        if len(set(keys)) != len(keys):
            raise ValueError("Sector keys must be unique.")
        if self.min_sum > 100:
            raise ValueError("Sector minimums must sum to at most 100.")
        if self.max_sum < 100:
            raise ValueError("Sector maximums must sum to at least 100.")
        self._by_key = {s.key: s for s in self._sectors}

    @property
    def min_sum(self) -> int:
        return sum(s.min for s in self._sectors)

    @property
    def max_sum(self) -> int:
        return sum(s.max for s in self._sectors)

    @property
    def keys(self) -> list[str]:
        return [s.key for s in self._sectors]

    def __getitem__(self, key: str) -> Sector:
        return self._by_key[key]

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[Sector]:
        return iter(self._sectors)

    def __len__(self) -> int:
        return len(self._sectors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SectorCatalog):
            return NotImplemented
        return self._sectors == other._sectors

    def __hash__(self) -> int:
        return hash(self._sectors)

    def __repr__(self) -> str:
        return f"SectorCatalog({', '.join(self.keys)})"


@dataclass(frozen=True)
class Preset:
    """Named target mix a user can start from.

    Parameters
    ----------
    key : str
        Identifier stored alongside a saved mix.
    name : str
        Display name.
    mix : Mapping[str, float]
        Requested shares. Need not respect bounds or sum to 100.
    rationale : str
        Short explanation of the split.
    """

    key: str
    name: str
    mix: Mapping[str, float] = field(default_factory=dict)
    rationale: str = ""


class ViolationKind(str, Enum):
    """Guardrail condition reported for a mix."""

    BELOW_MINIMUM = "below_minimum"
    ABOVE_MAXIMUM = "above_maximum"
    TOTAL_MISMATCH = "total_mismatch"


@dataclass(frozen=True)
class Violation:
    """Informational guardrail finding.

    Parameters
    ----------
    kind : ViolationKind
        Which guardrail was breached.
    sector_key : str | None
        Offending sector, or ``None`` for total mismatches.
    value : float
        The sector's share, or the actual total for total mismatches.
    detail : str
        Human-readable message for display.
    """

    kind: ViolationKind
    sector_key: str | None
    value: float
    detail: str


@dataclass
class AllocateResult:
    """Allocation state returned to the presentation layer.

    Parameters
    ----------
    mix : dict[str, float]
        Shares keyed by sector.
    breakdown : dict[str, int]
        Rupee amount per sector.
    violations : list[dict]
        Serialized guardrail violations.
    preset_key : str
        Preset the mix was derived from.
    """

    mix: dict[str, float]
    breakdown: dict[str, int]
    violations: list[dict]
    preset_key: str

    def __post_init__(self) -> None:
        """Validate that the rupee breakdown covers exactly the mix's sectors."""
        if set(self.breakdown) != set(self.mix):
            raise ValueError("breakdown keys must match mix keys")
