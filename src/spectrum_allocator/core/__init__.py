"""Core functionality - grid arithmetic, configuration, exceptions."""

from spectrum_allocator.core.config import (
    DEFAULT_DB_PATH,
    DEFAULT_SECONDARY_SPACING,
    FORBIDDEN_HOLDER,
    KHZ,
    MHZ,
    AllocatorConfig,
    get_config,
)
from spectrum_allocator.core.exceptions import (
    InsufficientAvailabilityError,
    NotFoundError,
    SpectrumError,
    StorageError,
    ValidationError,
    WriteConflictError,
)
from spectrum_allocator.core.grid import (
    channel_count,
    channel_grid,
    first_channel,
    format_units,
    is_channel,
    to_base_units,
    validate_band,
    validate_range,
)

__all__ = [
    "AllocatorConfig",
    "get_config",
    "DEFAULT_DB_PATH",
    "DEFAULT_SECONDARY_SPACING",
    "FORBIDDEN_HOLDER",
    "MHZ",
    "KHZ",
    "channel_grid",
    "channel_count",
    "first_channel",
    "is_channel",
    "format_units",
    "to_base_units",
    "validate_band",
    "validate_range",
    "SpectrumError",
    "ValidationError",
    "InsufficientAvailabilityError",
    "WriteConflictError",
    "NotFoundError",
    "StorageError",
]
