"""Discriminated result returned across the service boundary."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from spectrum_allocator.core.exceptions import (
    InsufficientAvailabilityError,
    SpectrumError,
    ValidationError,
    WriteConflictError,
)
from spectrum_allocator.storage.models import Band

INTERNAL_ERROR_MESSAGE = "Something went wrong!"

ErrorKind = Literal["validation", "insufficient", "conflict", "not_found", "internal"]


class AllocationResult(BaseModel):
    """Success with data, or failure with a kind and message."""

    state: Literal["success", "error"]
    message: str = ""
    data: list[int] = Field(default_factory=list, description="Allocated or selected values")
    count: int | None = Field(default=None, description="Rows affected by a release")
    band: Band | None = Field(default=None, description="Band for band operations")
    exact: bool = Field(default=True, description="False when a closest match was substituted")

    # Failure details
    kind: ErrorKind | None = None
    field: str | None = Field(default=None, description="Offending field on validation errors")
    available: int | None = None
    requested: int | None = None
    conflicts: list[int] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state == "success"

    @classmethod
    def success(cls, message: str = "", **kwargs) -> AllocationResult:
        return cls(state="success", message=message, **kwargs)

    @classmethod
    def failure(cls, error: SpectrumError) -> AllocationResult:
        """Map a typed error to a failure result.

        Internal errors are reported without storage-layer detail.
        """
        if error.kind == "internal":
            return cls.internal()

        result = cls(state="error", kind=error.kind, message=error.message)
        if isinstance(error, ValidationError):
            result.field = error.field
        elif isinstance(error, InsufficientAvailabilityError):
            result.available = error.available
            result.requested = error.requested
        elif isinstance(error, WriteConflictError):
            result.conflicts = list(error.values)
        return result

    @classmethod
    def internal(cls) -> AllocationResult:
        return cls(state="error", kind="internal", message=INTERNAL_ERROR_MESSAGE)
