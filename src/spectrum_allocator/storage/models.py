"""Pydantic data models for spectrum allocation storage.

Defines bands, holders, current occupancy and the append-only
allocation history.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from spectrum_allocator.core.config import FORBIDDEN_HOLDER, KHZ, MHZ
from spectrum_allocator.core.grid import channel_count, format_units, is_channel, validate_band

# ============================================================================
# Band
# ============================================================================


class Band(BaseModel):
    """A named interval with a fixed channel spacing.

    All bounds are integer Hz. Invariants are checked on construction,
    so a ``Band`` read back from storage is always usable as a grid.
    """

    id: str = Field(default_factory=lambda: str(uuid4()), description="Band ID")
    name: str = Field(..., description="Display name")
    from_hz: int = Field(..., description="Inclusive lower bound in Hz")
    to_hz: int = Field(..., description="Inclusive upper bound in Hz")
    spacing_hz: int = Field(..., description="Channel step in Hz")
    created_at: datetime = Field(default_factory=datetime.now, description="Created")
    updated_at: datetime = Field(default_factory=datetime.now, description="Last edited")

    @model_validator(mode="after")
    def check_grid(self) -> "Band":
        """Reject bands whose bounds do not form a grid."""
        validate_band(self.from_hz, self.to_hz, self.spacing_hz)
        return self

    @property
    def from_mhz(self) -> str:
        return format_units(self.from_hz, MHZ)

    @property
    def to_mhz(self) -> str:
        return format_units(self.to_hz, MHZ)

    @property
    def spacing_khz(self) -> str:
        return format_units(self.spacing_hz, KHZ)

    @property
    def channel_count(self) -> int:
        """Number of grid values in the band."""
        return channel_count(self.from_hz, self.to_hz, self.spacing_hz)

    def contains_channel(self, value: int) -> bool:
        """Whether ``value`` lies on this band's grid."""
        return is_channel(value, self.from_hz, self.to_hz, self.spacing_hz)


# ============================================================================
# Holder
# ============================================================================


class Holder(BaseModel):
    """Identity and contact data attached to an allocation."""

    holder_id: str = Field(..., min_length=1, description="User or sentinel ID")
    email: str = Field(..., description="Contact address")
    latitude: float = Field(default=0.0, ge=-90.0, le=90.0, description="Latitude")
    longitude: float = Field(default=0.0, ge=-180.0, le=180.0, description="Longitude")

    @classmethod
    def forbidden(cls) -> Holder:
        """Sentinel holder for administratively blocked channels."""
        return cls(holder_id=FORBIDDEN_HOLDER, email=FORBIDDEN_HOLDER)

    @property
    def is_forbidden(self) -> bool:
        return self.holder_id == FORBIDDEN_HOLDER


# ============================================================================
# Occupancy and History
# ============================================================================


class Occupancy(BaseModel):
    """One currently assigned channel value."""

    value: int = Field(..., description="Channel value in Hz")
    holder_id: str = Field(..., description="Holder ID")
    email: str = Field(..., description="Holder contact")
    latitude: float = Field(default=0.0, description="Holder latitude")
    longitude: float = Field(default=0.0, description="Holder longitude")
    created_at: datetime = Field(default_factory=datetime.now, description="Assigned at")

    @classmethod
    def for_holder(cls, value: int, holder: Holder, created_at: datetime | None = None) -> Occupancy:
        return cls(
            value=value,
            holder_id=holder.holder_id,
            email=holder.email,
            latitude=holder.latitude,
            longitude=holder.longitude,
            created_at=created_at or datetime.now(),
        )

    @property
    def is_forbidden(self) -> bool:
        return self.holder_id == FORBIDDEN_HOLDER

    @property
    def value_mhz(self) -> str:
        return format_units(self.value, MHZ)


class AllocationRecord(BaseModel):
    """Append-only audit entry for an assignment event."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Record ID")
    value: int = Field(..., description="Channel value in Hz")
    holder_id: str = Field(..., description="Holder ID")
    email: str = Field(..., description="Holder contact")
    latitude: float = Field(default=0.0, description="Holder latitude")
    longitude: float = Field(default=0.0, description="Holder longitude")
    created_at: datetime = Field(default_factory=datetime.now, description="Assigned at")

    @classmethod
    def from_occupancy(cls, occupancy: Occupancy) -> AllocationRecord:
        return cls(**occupancy.model_dump())


class ChannelStatus(BaseModel):
    """Grid value paired with its occupancy, if any."""

    value: int = Field(..., description="Channel value in Hz")
    occupancy: Occupancy | None = Field(default=None, description="Current holder record")

    @property
    def is_free(self) -> bool:
        return self.occupancy is None

    @property
    def is_forbidden(self) -> bool:
        return self.occupancy is not None and self.occupancy.is_forbidden

    @property
    def value_mhz(self) -> str:
        return format_units(self.value, MHZ)
