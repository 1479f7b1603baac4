"""Guardrail evaluation for a mix.

Validation only: never modifies the mix. Findings are returned as data,
per-sector checks first in catalog order, then the total check.
"""

from collections.abc import Mapping
from decimal import Decimal

from sector_allocation.engine._common import TOTAL, exact_total
from sector_allocation.models import SectorCatalog, Violation, ViolationKind


def _format_percent(value: Decimal) -> str:
    return format(value.normalize(), "f")


def evaluate_guardrails(mix: Mapping[str, float], catalog: SectorCatalog) -> list[Violation]:
    """Check a mix against sector bounds and the 100% total.

    Parameters
    ----------
    mix : Mapping[str, float]
        Shares keyed by sector. Missing sectors are read as 0.
    catalog : SectorCatalog
        Sector order and bounds.

    Returns
    -------
    list[Violation]
        Empty when every sector is within bounds and the total is exactly 100.
    """
    violations: list[Violation] = []
    for sector in catalog:
        value = float(mix.get(sector.key, 0))
        if value < sector.min:
            violations.append(
                Violation(
                    kind=ViolationKind.BELOW_MINIMUM,
                    sector_key=sector.key,
                    value=value,
                    detail=f"{sector.label} is below policy minimum ({sector.min}%).",
                )
            )
        if value > sector.max:
            violations.append(
                Violation(
                    kind=ViolationKind.ABOVE_MAXIMUM,
                    sector_key=sector.key,
                    value=value,
                    detail=f"{sector.label} exceeds policy maximum ({sector.max}%).",
                )
            )

    total = exact_total(mix.values())
    if total != TOTAL:
        violations.append(
            Violation(
                kind=ViolationKind.TOTAL_MISMATCH,
                sector_key=None,
                value=float(total),
                detail=f"Total is {_format_percent(total)}%. Adjust sliders to make it 100%.",
            )
        )
    return violations
