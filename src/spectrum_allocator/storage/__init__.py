"""Storage layer for spectrum occupancy.

This module provides DuckDB-based storage for:
- Band definitions
- Current channel occupancy (one row per assigned value)
- Append-only allocation history
"""

from __future__ import annotations

from spectrum_allocator.storage.models import (
    AllocationRecord,
    Band,
    ChannelStatus,
    Holder,
    Occupancy,
)
from spectrum_allocator.storage.spectrum_db import SpectrumDB

__all__ = [
    # Main database class
    "SpectrumDB",
    # Models
    "Band",
    "Holder",
    "Occupancy",
    "AllocationRecord",
    "ChannelStatus",
]
