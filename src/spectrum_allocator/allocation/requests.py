"""Validated allocation request variants.

Every request carries the band bounds it is evaluated against, so
validation happens before any store access. All values are integer Hz.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from spectrum_allocator.core.config import FORBIDDEN_HOLDER
from spectrum_allocator.core.exceptions import ValidationError
from spectrum_allocator.core.grid import channel_grid, is_channel, validate_band, validate_range
from spectrum_allocator.storage.models import Band, Holder

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def check_holder(holder: Holder) -> None:
    """Require a real contact address for non-sentinel holders."""
    if holder.holder_id != FORBIDDEN_HOLDER and not _EMAIL_RE.match(holder.email):
        raise ValidationError("email", "(Email) must be a valid email address", holder.email)


def check_count(n: int) -> None:
    if n < 1:
        raise ValidationError("n", "(N) must be at least 1")


class BandRequest(BaseModel):
    """Base for requests evaluated against a band."""

    model_config = ConfigDict(frozen=True)

    from_hz: int = Field(..., description="Band lower bound in Hz")
    to_hz: int = Field(..., description="Band upper bound in Hz")
    spacing_hz: int = Field(..., description="Band channel step in Hz")

    @model_validator(mode="after")
    def check_band(self) -> "BandRequest":
        validate_band(self.from_hz, self.to_hz, self.spacing_hz)
        return self


class RangeRequest(BandRequest):
    """Base for requests over a sub-range ``[start, end]`` of a band."""

    start: int = Field(..., description="Inclusive sub-range start in Hz")
    end: int = Field(..., description="Inclusive sub-range end in Hz")

    @model_validator(mode="after")
    def check_range(self) -> "RangeRequest":
        validate_range(self.from_hz, self.to_hz, self.start, self.end)
        return self

    @classmethod
    def for_band(cls, band: Band, start: int | None = None, end: int | None = None, **kwargs):
        """Build a request from a stored band; the range defaults to the whole band."""
        return cls(
            from_hz=band.from_hz,
            to_hz=band.to_hz,
            spacing_hz=band.spacing_hz,
            start=band.from_hz if start is None else start,
            end=band.to_hz if end is None else end,
            **kwargs,
        )

    def grid(self) -> range:
        """Candidate channel values of the sub-range."""
        return channel_grid(self.from_hz, self.to_hz, self.spacing_hz, self.start, self.end)


class AllocateAll(RangeRequest):
    """Take every free channel in the sub-range."""

    kind: Literal["allocate_all"] = "allocate_all"
    holder: Holder

    @model_validator(mode="after")
    def check_contact(self) -> "AllocateAll":
        check_holder(self.holder)
        return self


class AllocateFirstN(RangeRequest):
    """Take the ``n`` lowest free channels in the sub-range."""

    kind: Literal["allocate_first_n"] = "allocate_first_n"
    holder: Holder
    n: int

    @model_validator(mode="after")
    def check_fields(self) -> "AllocateFirstN":
        check_count(self.n)
        check_holder(self.holder)
        return self


class AllocateSpacedN(RangeRequest):
    """Preview ``n`` channels spread apart by ``secondary_spacing_hz``."""

    kind: Literal["allocate_spaced_n"] = "allocate_spaced_n"
    n: int
    secondary_spacing_hz: int

    @model_validator(mode="after")
    def check_fields(self) -> "AllocateSpacedN":
        check_count(self.n)
        if self.secondary_spacing_hz <= 0:
            raise ValidationError("secondary_spacing", "(Secondary spacing) must be greater than 0")
        return self


AllocationRequest = Annotated[
    AllocateAll | AllocateFirstN | AllocateSpacedN,
    Field(discriminator="kind"),
]


class ReleaseRange(RangeRequest):
    """Release a holder's channels in the sub-range."""

    kind: Literal["release_range"] = "release_range"
    holder_id: str = Field(..., min_length=1)


class AcquireChannel(BandRequest):
    """Take one specific channel."""

    kind: Literal["acquire_channel"] = "acquire_channel"
    value: int
    holder: Holder

    @model_validator(mode="after")
    def check_value(self) -> "AcquireChannel":
        if not is_channel(self.value, self.from_hz, self.to_hz, self.spacing_hz):
            raise ValidationError("value", "(Value) is not a channel of the band", str(self.value))
        check_holder(self.holder)
        return self


class ConfirmSelection(RangeRequest):
    """Commit values previously returned by a spaced preview.

    Values must lie in ``[start, end]`` but need not sit on the primary
    grid: spaced picks step by the secondary spacing.
    """

    kind: Literal["confirm_selection"] = "confirm_selection"
    values: list[int]
    holder: Holder

    @model_validator(mode="after")
    def check_values(self) -> "ConfirmSelection":
        if not self.values:
            raise ValidationError("values", "(Values) must not be empty")
        if len(set(self.values)) != len(self.values):
            raise ValidationError("values", "(Values) must not contain duplicates")
        outside = [value for value in self.values if not self.start <= value <= self.end]
        if outside:
            raise ValidationError(
                "values", "(Values) must lie within (Start) and (End)", ", ".join(map(str, outside))
            )
        check_holder(self.holder)
        return self
