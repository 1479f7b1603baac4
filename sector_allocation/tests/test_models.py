"""Unit tests for catalog and sector validation."""

import pytest

from sector_allocation.models import AllocateResult, Sector, SectorCatalog


class TestSector:
    def test_valid_bounds(self):
        sector = Sector("education", "Education", 10, 50)
        assert sector.min == 10
        assert sector.max == 50

    def test_min_above_max_raises(self):
        with pytest.raises(ValueError, match="0 <= min <= max <= 100"):
            Sector("education", "Education", 60, 50)

    def test_negative_min_raises(self):
        with pytest.raises(ValueError, match="0 <= min <= max <= 100"):
            Sector("education", "Education", -1, 50)

    def test_max_above_hundred_raises(self):
        with pytest.raises(ValueError, match="0 <= min <= max <= 100"):
            Sector("education", "Education", 0, 101)

    def test_empty_key_raises(self):
        with pytest.raises(ValueError, match="non-empty"):
            Sector("", "Education", 0, 50)

    @pytest.mark.parametrize(("value", "expected"), [(5, 10), (30, 30), (70, 50)])
    def test_clamp(self, value, expected):
        assert Sector("education", "Education", 10, 50).clamp(value) == expected


class TestSectorCatalog:
    def test_order_preserved(self, catalog):
        assert catalog.keys == ["education", "healthcare", "infrastructure", "defense", "other"]

    def test_sums(self, catalog):
        assert catalog.min_sum == 35
        assert catalog.max_sum == 200

    def test_lookup(self, catalog):
        assert catalog["defense"].max == 30
        assert "defense" in catalog
        assert "climate" not in catalog

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="at least one"):
            SectorCatalog([])

    def test_duplicate_keys_raise(self):
        with pytest.raises(ValueError, match="unique"):
            SectorCatalog([Sector("a", "A", 0, 60), Sector("a", "A2", 0, 60)])

    def test_minimums_above_hundred_raise(self):
        with pytest.raises(ValueError, match="minimums"):
            SectorCatalog([Sector("a", "A", 60, 100), Sector("b", "B", 50, 100)])

    def test_maximums_below_hundred_raise(self):
        with pytest.raises(ValueError, match="maximums"):
            SectorCatalog([Sector("a", "A", 0, 40), Sector("b", "B", 0, 40)])

    def test_equality(self):
        a = SectorCatalog([Sector("a", "A", 0, 100)])
        b = SectorCatalog([Sector("a", "A", 0, 100)])
        assert a == b
        assert hash(a) == hash(b)


class TestAllocateResult:
    def test_mismatched_breakdown_raises(self):
        with pytest.raises(ValueError, match="breakdown keys"):
            AllocateResult(mix={"a": 100.0}, breakdown={"b": 10}, violations=[], preset_key="custom")
