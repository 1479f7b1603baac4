"""ALLOCATE component: sector mix normalization for the tax-allocation pipeline."""

import logging
from collections.abc import Mapping
from dataclasses import asdict
from typing import Any, Protocol

from sector_allocation.catalog import DEFAULT_AMOUNT, DEFAULT_CATALOG, DEFAULT_PRESET_KEY, DEFAULT_PRESETS
from sector_allocation.engine import DEFAULT_DECIMALS, AllocationEngine, MixNormalizer
from sector_allocation.models import AllocateResult, Preset, SectorCatalog, Violation
from sector_allocation.session import AllocationSession

logger = logging.getLogger(__name__)


class PipelineComponent(Protocol):
    """Structural interface for pipeline stage components."""

    def execute(self, event: dict) -> dict:
        """Process event and return result."""
        ...


_FIELD_MAP_IN: dict[str, str] = {
    "presetKey": "preset_key",
    "sectorKey": "sector",
    "locked": "locks",
}


def _to_engine_format(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Map storage-layer field names to engine field names.

    Parameters
    ----------
    payload : Mapping[str, Any]
        Event or edit dict with storage-layer field names.

    Returns
    -------
    dict[str, Any]
        Dict with engine field names.
    """
    return {_FIELD_MAP_IN.get(key, key): value for key, value in payload.items()}


def _serialize_violation(violation: Violation) -> dict[str, Any]:
    return {**asdict(violation), "kind": violation.kind.value}


class AllocateComponent(PipelineComponent):
    """Apply one allocation action to a caller-supplied mix.

    Handles field mapping, then delegates to an :class:`AllocationSession`
    built from the event so no state survives between calls.

    Parameters
    ----------
    catalog : SectorCatalog, optional
        Sector catalog. Defaults to :data:`DEFAULT_CATALOG`.
    presets : Mapping[str, Preset], optional
        Preset library. Defaults to :data:`DEFAULT_PRESETS`.
    normalizer : MixNormalizer, optional
        Preset normalization rule. Defaults to the capped-scale rule.
    decimals : int
        Rounding precision of every operation.
    """

    def __init__(
        self,
        catalog: SectorCatalog | None = None,
        presets: Mapping[str, Preset] | None = None,
        normalizer: MixNormalizer | None = None,
        decimals: int = DEFAULT_DECIMALS,
    ) -> None:
        self._engine = AllocationEngine(catalog or DEFAULT_CATALOG, decimals=decimals, normalizer=normalizer)
        self._presets = presets if presets is not None else DEFAULT_PRESETS

    def execute(self, event: dict) -> dict:
        """Run the requested action and return an ``AllocateResult`` dict.

        Parameters
        ----------
        event : dict
            May contain ``mix``, ``locks``, ``amount`` and ``preset_key``
            (or their storage-layer names), plus at most one action:
            ``preset`` (a preset key) or ``edit`` (``{"sector", "value"}``).
            Without an action the mix is only evaluated.

        Returns
        -------
        dict
            Serialized ``AllocateResult`` with ``mix``, ``breakdown``,
            ``violations`` and ``preset_key``.

        Raises
        ------
        ValueError
            If both actions are given or the edit is malformed.
        """
        event = _to_engine_format(event)
        if "preset" in event and "edit" in event:
            raise ValueError("Event must contain at most one of 'preset' and 'edit'.")

        session = AllocationSession(
            engine=self._engine,
            presets=self._presets,
            amount=event.get("amount", DEFAULT_AMOUNT),
            mix=event.get("mix"),
            locks=event.get("locks"),
            preset_key=event.get("preset_key", DEFAULT_PRESET_KEY),
        )

        if "preset" in event:
            session.apply_preset(event["preset"])
        elif "edit" in event:
            edit = _to_engine_format(event["edit"])
            if "sector" not in edit or "value" not in edit:
                raise ValueError("Edit must contain 'sector' and 'value'.")
            session.set_value(edit["sector"], edit["value"])

        violations = session.violations
        if violations:
            logger.warning(
                "Allocation has %d guardrail violation(s): %s",
                len(violations),
                "; ".join(v.detail for v in violations),
            )
        else:
            logger.info("Allocation complete: preset=%s, total=100", session.preset_key)

        return asdict(
            AllocateResult(
                mix=session.mix,
                breakdown=session.breakdown(),
                violations=[_serialize_violation(v) for v in violations],
                preset_key=session.preset_key,
            )
        )
