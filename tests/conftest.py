"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from spectrum_allocator.allocation import SpectrumAllocator, SpectrumService
from spectrum_allocator.core.config import AllocatorConfig
from spectrum_allocator.storage import Band, Holder, SpectrumDB


@pytest.fixture
def config() -> AllocatorConfig:
    """Configuration pointing at an in-memory database."""
    return AllocatorConfig(db_path=":memory:")


@pytest.fixture
def db() -> Iterator[SpectrumDB]:
    """Create in-memory database for testing."""
    db = SpectrumDB(":memory:")
    db.connect()
    yield db
    db.close()


@pytest.fixture
def band(db: SpectrumDB) -> Band:
    """Band 100..200 with spacing 10 (grid 100, 110, ..., 200)."""
    band = Band(name="Test", from_hz=100, to_hz=200, spacing_hz=10)
    db.insert_band(band)
    return band


@pytest.fixture
def holder() -> Holder:
    return Holder(holder_id="user-1", email="one@example.com", latitude=12.97, longitude=77.59)


@pytest.fixture
def other_holder() -> Holder:
    return Holder(holder_id="user-2", email="two@example.com", latitude=28.61, longitude=77.21)


@pytest.fixture
def allocator(db: SpectrumDB, config: AllocatorConfig) -> SpectrumAllocator:
    return SpectrumAllocator(db, config)


@pytest.fixture
def service(db: SpectrumDB, config: AllocatorConfig) -> SpectrumService:
    return SpectrumService(db, config)


@pytest.fixture
def occupy(db: SpectrumDB) -> Callable[[list[int], Holder], None]:
    """Seed occupancy directly through the store."""

    def _occupy(values: list[int], holder: Holder) -> None:
        with db.transaction():
            db.insert_allocations(values, holder)

    return _occupy
