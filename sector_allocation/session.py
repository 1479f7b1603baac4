"""Caller-owned allocation state for one user session."""

import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sector_allocation.catalog import DEFAULT_AMOUNT, DEFAULT_CATALOG, DEFAULT_PRESET_KEY, DEFAULT_PRESETS
from sector_allocation.engine import AllocationEngine, Mix
from sector_allocation.engine._common import TOTAL, to_decimal
from sector_allocation.models import Preset, SectorCatalog, Violation

logger = logging.getLogger(__name__)

_EXPLANATIONS = {
    "education": "Focused on Education {who}, prioritizing learning outcomes while preserving minimums "
    "in health and infrastructure.",
    "healthcare": "Healthcare-forward {who}, with strong allocations to primary care and vaccines.",
    "balanced": "A balanced split {who} to distribute impact evenly across core sectors.",
}

_PRESET_SUMMARIES = {
    "recommended": "Government recommended balance",
    "balanced": "Balanced mix",
    "education": "Education-oriented mix",
    "healthcare": "Healthcare-oriented mix",
}


def rupee_breakdown(amount: int, mix: Mapping[str, float]) -> dict[str, int]:
    """Split a contribution into whole rupees per sector.

    Parameters
    ----------
    amount : int
        Contribution in rupees.
    mix : Mapping[str, float]
        Shares in percent.

    Returns
    -------
    dict[str, int]
        ``amount * share / 100`` per sector, rounded half-up.
    """
    return {
        key: int((Decimal(amount) * to_decimal(share) / TOTAL).quantize(Decimal(1), rounding=ROUND_HALF_UP))
        for key, share in mix.items()
    }


class AllocationSession:
    """Mix, locks, contribution and preset choice owned by one caller.

    Every interaction goes through the engine and replaces ``mix`` with the
    engine's result. Persistence is up to the caller via :meth:`to_dict`.

    Parameters
    ----------
    engine : AllocationEngine, optional
        Engine over the session's catalog. Defaults to the default catalog.
    presets : Mapping[str, Preset], optional
        Preset library. Defaults to :data:`DEFAULT_PRESETS`.
    amount : int
        Contribution in rupees.
    mix : Mapping[str, float], optional
        Starting mix, taken as is. Defaults to the normalized ``preset_key``.
    locks : Mapping[str, bool], optional
        Initial lock flags. Unlisted sectors start unlocked.
    preset_key : str
        Preset the starting mix derives from.

    Raises
    ------
    ValueError
        If ``amount`` is negative.
    """

    def __init__(
        self,
        engine: AllocationEngine | None = None,
        presets: Mapping[str, Preset] | None = None,
        amount: int = DEFAULT_AMOUNT,
        mix: Mapping[str, float] | None = None,
        locks: Mapping[str, bool] | None = None,
        preset_key: str = DEFAULT_PRESET_KEY,
    ) -> None:
        self.engine = engine or AllocationEngine(DEFAULT_CATALOG)
        self.presets = dict(presets if presets is not None else DEFAULT_PRESETS)
        self.amount = amount
        self.locks = {key: False for key in self.engine.catalog.keys}
        self.locks.update({k: bool(v) for k, v in (locks or {}).items() if k in self.locks})
        self.preset_key = preset_key
        if mix is None:
            self.mix: Mix = self.engine.apply_preset(self._preset(preset_key).mix)
        else:
            self.mix = {key: float(value) for key, value in mix.items()}

    @property
    def catalog(self) -> SectorCatalog:
        return self.engine.catalog

    @property
    def amount(self) -> int:
        return self._amount

    @amount.setter
    def amount(self, value: int) -> None:
        if value < 0:
            raise ValueError("Contribution amount must be non-negative.")
        self._amount = int(value)

    def _preset(self, key: str) -> Preset:
        try:
            return self.presets[key]
        except KeyError:
            raise KeyError(f"Unknown preset '{key}'") from None

    def apply_preset(self, key: str) -> Mix:
        """Replace the mix with the normalized preset ``key``.

        Locked sectors are requested at their current share, so a normalizer
        that honours locks keeps them where they are.
        """
        preset = self._preset(key)
        request = {**preset.mix, **{k: self.mix[k] for k, locked in self.locks.items() if locked and k in self.mix}}
        self.mix = self.engine.apply_preset(request, self.locks)
        self.preset_key = key
        logger.info("Applied preset '%s'", key)
        return self.mix

    def set_value(self, key: str, value: float) -> Mix:
        """Edit one sector's share and rebalance the unlocked ones."""
        self.mix = self.engine.edit_sector(self.mix, self.locks, key, value)
        return self.mix

    def toggle_lock(self, key: str) -> bool:
        """Flip the lock flag of ``key`` and return the new state.

        Raises
        ------
        ValueError
            If ``key`` is not in the catalog.
        """
        if key not in self.locks:
            raise ValueError(f"Unknown sector '{key}'.")
        self.locks[key] = not self.locks[key]
        return self.locks[key]

    @property
    def total(self) -> float:
        return float(sum(to_decimal(v) for v in self.mix.values()))

    @property
    def violations(self) -> list[Violation]:
        return self.engine.evaluate_guardrails(self.mix)

    def breakdown(self) -> dict[str, int]:
        """Rupee allocation of the contribution per sector."""
        return rupee_breakdown(self.amount, self.mix)

    def explain(self, user_name: str | None = None) -> str:
        """One-sentence rationale for the current split."""
        who = f"for {user_name}" if user_name else "for you"
        if self.preset_key in _EXPLANATIONS:
            return _EXPLANATIONS[self.preset_key].format(who=who)
        top = max(self.catalog, key=lambda s: self.mix.get(s.key, 0))
        summary = _PRESET_SUMMARIES.get(self.preset_key, "Custom mix")
        return f"{summary} {who}. Highest share goes to {top.label} based on selected preset and guardrails."

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the shape stored by the persistence layer."""
        return {"amount": self.amount, "mix": dict(self.mix), "presetKey": self.preset_key}

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        engine: AllocationEngine | None = None,
        presets: Mapping[str, Preset] | None = None,
    ) -> "AllocationSession":
        """Restore a session saved with :meth:`to_dict`; missing fields fall back to defaults."""
        return cls(
            engine=engine,
            presets=presets,
            amount=data.get("amount", DEFAULT_AMOUNT),
            mix=data.get("mix"),
            preset_key=data.get("presetKey", DEFAULT_PRESET_KEY),
        )
