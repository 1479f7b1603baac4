"""Tests for catalog loading and caps normalization."""

import json

import pytest

from sector_allocation.catalog import (
    DEFAULT_CATALOG,
    DEFAULT_PRESETS,
    UNION_BUDGET_CATALOG,
    apply_caps,
    dump_caps,
    load_caps,
    load_catalog,
    load_presets,
    normalize_caps,
)
from sector_allocation.engine import apply_preset, evaluate_guardrails

CATALOG_DOC = {
    "sectors": [
        {"key": "education", "label": "Education", "min": 10, "max": 60},
        {"key": "healthcare", "label": "Healthcare", "min": 10, "max": 60, "description": "Primary care"},
    ]
}


class TestLoadCatalog:
    def test_from_mapping(self):
        catalog = load_catalog(CATALOG_DOC)
        assert catalog.keys == ["education", "healthcare"]
        assert catalog["healthcare"].description == "Primary care"

    def test_from_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(CATALOG_DOC))
        assert load_catalog(path) == load_catalog(CATALOG_DOC)

    def test_missing_sectors_raises(self):
        with pytest.raises(ValueError, match="'sectors' list"):
            load_catalog({"caps": {}})

    def test_missing_field_raises(self):
        with pytest.raises(ValueError, match="Invalid sector entry"):
            load_catalog({"sectors": [{"key": "education", "min": 0, "max": 100}]})

    def test_infeasible_catalog_raises(self):
        doc = {"sectors": [{"key": "a", "label": "A", "min": 0, "max": 40}]}
        with pytest.raises(ValueError, match="maximums"):
            load_catalog(doc)

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_catalog(path)


class TestLoadPresets:
    def test_from_mapping(self):
        presets = load_presets({"presets": {"flat": {"name": "Flat", "mix": {"education": 50, "healthcare": 50}}}})
        assert presets["flat"].name == "Flat"
        assert presets["flat"].mix == {"education": 50, "healthcare": 50}

    def test_missing_mix_raises(self):
        with pytest.raises(ValueError, match="'mix' mapping"):
            load_presets({"presets": {"flat": {"name": "Flat"}}})

    def test_missing_presets_raises(self):
        with pytest.raises(ValueError, match="'presets' mapping"):
            load_presets({})


class TestDefaults:
    def test_default_presets_cover_catalog(self):
        for preset in DEFAULT_PRESETS.values():
            assert set(preset.mix) == set(DEFAULT_CATALOG.keys)

    def test_union_budget_catalog_normalizes(self):
        values = {"education": 15, "healthcare": 15, "infrastructure": 20, "defense": 15, "agriculture": 15, "social": 10, "climate": 10}
        result = apply_preset(UNION_BUDGET_CATALOG, values)
        assert evaluate_guardrails(result, UNION_BUDGET_CATALOG) == []


class TestCaps:
    def test_normalize_caps(self):
        caps = {"education": 30, "healthcare": 25, "infrastructure": 20, "defense": 15, "other": 10}
        assert normalize_caps(caps) == {k: float(v) for k, v in caps.items()}

    def test_normalize_scales_up(self):
        assert normalize_caps({"a": 10, "b": 30}) == {"a": 25.0, "b": 75.0}

    def test_zero_total_unchanged(self):
        assert normalize_caps({"a": 0, "b": 0}) == {"a": 0, "b": 0}

    def test_negative_cap_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            normalize_caps({"a": -1, "b": 50})

    def test_dump_and_load(self, tmp_path):
        path = tmp_path / "sector_caps.json"
        caps = {"education": 30, "healthcare": 70}
        dump_caps(caps, path)
        assert json.loads(path.read_text()) == {"caps": caps}
        assert load_caps(path) == {"education": 30.0, "healthcare": 70.0}

    def test_load_caps_without_caps_raises(self):
        with pytest.raises(ValueError, match="'caps' mapping"):
            load_caps({"sectors": []})


class TestApplyCaps:
    def test_caps_become_maximums(self):
        caps = {"education": 30, "healthcare": 25, "infrastructure": 20, "defense": 15, "other": 10}
        capped = apply_caps(DEFAULT_CATALOG, caps)
        assert [s.max for s in capped] == [30, 25, 20, 15, 10]
        assert [s.min for s in capped] == [s.min for s in DEFAULT_CATALOG]

    def test_capped_catalog_drives_presets(self):
        caps = {"education": 30, "healthcare": 25, "infrastructure": 20, "defense": 15, "other": 10}
        capped = apply_caps(DEFAULT_CATALOG, caps)
        result = apply_preset(capped, DEFAULT_PRESETS["recommended"].mix)
        assert result == {"education": 30.0, "healthcare": 25.0, "infrastructure": 20.0, "defense": 15.0, "other": 10.0}
        assert evaluate_guardrails(result, capped) == []

    def test_raw_caps_rescaled_first(self):
        capped = apply_caps(DEFAULT_CATALOG, {"education": 15, "healthcare": 15, "infrastructure": 10, "defense": 5, "other": 5})
        assert capped["education"].max == 30
        assert capped["other"].max == 10

    def test_uncapped_sector_keeps_maximum(self):
        capped = apply_caps(DEFAULT_CATALOG, {"education": 40, "healthcare": 60})
        assert capped["education"].max == 40
        assert capped["infrastructure"].max == DEFAULT_CATALOG["infrastructure"].max

    def test_unknown_sector_raises(self):
        with pytest.raises(ValueError, match="unknown sectors"):
            apply_caps(DEFAULT_CATALOG, {"climate": 100})

    def test_cap_below_minimum_raises(self):
        with pytest.raises(ValueError, match="bounds"):
            apply_caps(DEFAULT_CATALOG, {"education": 5, "healthcare": 95})
