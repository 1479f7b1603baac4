"""Shared fixtures for sector allocation tests."""

import pytest

from sector_allocation.catalog import DEFAULT_CATALOG
from sector_allocation.engine import AllocationEngine
from sector_allocation.models import Sector, SectorCatalog


@pytest.fixture()
def catalog():
    """Five-sector catalog: education[10,50], healthcare[10,50], infrastructure[10,40], defense[5,30], other[0,30]."""
    return DEFAULT_CATALOG


@pytest.fixture()
def engine(catalog):
    return AllocationEngine(catalog)


@pytest.fixture()
def valid_mix():
    """Compliant mix summing to exactly 100."""
    return {"education": 45, "healthcare": 20, "infrastructure": 20, "defense": 10, "other": 5}


@pytest.fixture()
def working_mix():
    """Compliant mix used as the starting point for edits."""
    return {"education": 30, "healthcare": 25, "infrastructure": 20, "defense": 15, "other": 10}


@pytest.fixture()
def open_catalog():
    """Three unconstrained sectors, for rounding behaviour."""
    return SectorCatalog([Sector("a", "A", 0, 100), Sector("b", "B", 0, 100), Sector("c", "C", 0, 100)])


@pytest.fixture()
def capped_catalog():
    """First sector capped at 30, three open sectors after it."""
    return SectorCatalog(
        [
            Sector("a", "A", 0, 30),
            Sector("b", "B", 0, 100),
            Sector("c", "C", 0, 100),
            Sector("d", "D", 0, 100),
        ]
    )


@pytest.fixture()
def event_mix(working_mix):
    """Storage-shaped event carrying a mix and a contribution."""
    return {"amount": 100000, "mix": dict(working_mix), "presetKey": "recommended"}
