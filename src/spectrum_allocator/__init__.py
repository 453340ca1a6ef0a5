"""Spectrum Allocator - channel allocation engine for fixed-grid frequency bands."""

from spectrum_allocator.allocation import (
    AllocationResult,
    SpectrumAllocator,
    SpectrumService,
)
from spectrum_allocator.core.config import FORBIDDEN_HOLDER, KHZ, MHZ
from spectrum_allocator.core.exceptions import (
    InsufficientAvailabilityError,
    NotFoundError,
    SpectrumError,
    ValidationError,
    WriteConflictError,
)
from spectrum_allocator.storage import Band, Holder, SpectrumDB

__version__ = "0.1.0"

__all__ = [
    # Engine
    "SpectrumAllocator",
    "SpectrumService",
    "AllocationResult",
    # Storage
    "SpectrumDB",
    "Band",
    "Holder",
    # Config
    "FORBIDDEN_HOLDER",
    "MHZ",
    "KHZ",
    # Exceptions
    "SpectrumError",
    "ValidationError",
    "InsufficientAvailabilityError",
    "WriteConflictError",
    "NotFoundError",
]
