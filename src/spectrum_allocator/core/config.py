"""Configuration constants and runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# =============================================================================
# Units
# =============================================================================
HZ: int = 1
KHZ: int = 1_000
MHZ: int = 1_000_000  # Display unit for band bounds and sub-ranges

# =============================================================================
# Holders
# =============================================================================
FORBIDDEN_HOLDER: str = "forbidden"  # Sentinel holder for debarred channels

# =============================================================================
# Choose-in-range secondary spacing (Hz)
# =============================================================================
SECONDARY_SPACING_BY_BAND: dict[str, int] = {
    "VHF": 1 * MHZ,
    "HF": 500 * KHZ,
}
DEFAULT_SECONDARY_SPACING: int = 1_500 * KHZ

# =============================================================================
# Storage
# =============================================================================
DEFAULT_DB_PATH: str = "data/spectrum.duckdb"
DB_PATH_ENV: str = "SPECTRUM_DB_PATH"


@dataclass
class AllocatorConfig:
    """Runtime settings for the allocation engine."""

    db_path: str = DEFAULT_DB_PATH
    default_secondary_spacing: int = DEFAULT_SECONDARY_SPACING
    secondary_spacing_by_band: dict[str, int] = field(
        default_factory=lambda: dict(SECONDARY_SPACING_BY_BAND)
    )

    def secondary_spacing_for(self, band_name: str) -> int:
        """Return the choose-in-range spacing used for a band name."""
        return self.secondary_spacing_by_band.get(band_name, self.default_secondary_spacing)


def get_config() -> AllocatorConfig:
    """Get configuration, honouring the database path environment override.

    Returns:
        AllocatorConfig: Settings for the current process.
    """
    db_path = os.environ.get(DB_PATH_ENV)
    if db_path:
        return AllocatorConfig(db_path=db_path)
    return AllocatorConfig()
