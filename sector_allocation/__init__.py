"""Constrained sector allocation for tax contributions."""

from sector_allocation.adapter import AllocateComponent
from sector_allocation.catalog import DEFAULT_CATALOG, DEFAULT_PRESETS, apply_caps, load_catalog, normalize_caps
from sector_allocation.engine import (
    AllocationEngine,
    CappedScaleNormalizer,
    ProjectionNormalizer,
    apply_preset,
    edit_sector,
    evaluate_guardrails,
)
from sector_allocation.models import AllocateResult, Preset, Sector, SectorCatalog, Violation, ViolationKind
from sector_allocation.session import AllocationSession

__all__ = [
    "AllocateComponent",
    "AllocateResult",
    "AllocationEngine",
    "AllocationSession",
    "CappedScaleNormalizer",
    "DEFAULT_CATALOG",
    "DEFAULT_PRESETS",
    "Preset",
    "ProjectionNormalizer",
    "Sector",
    "SectorCatalog",
    "Violation",
    "ViolationKind",
    "apply_caps",
    "apply_preset",
    "edit_sector",
    "evaluate_guardrails",
    "load_catalog",
    "normalize_caps",
]
