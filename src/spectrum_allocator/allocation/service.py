"""Caller-facing allocation service.

Every method takes primitive values (Hz, holder identity, counts) and
returns an :class:`AllocationResult`. No exception crosses this
boundary: typed errors become failure results and anything else is
reported as an internal failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import duckdb
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from spectrum_allocator.allocation.engine import SpectrumAllocator
from spectrum_allocator.allocation.requests import (
    AcquireChannel,
    AllocateAll,
    AllocateFirstN,
    AllocateSpacedN,
    AllocationRequest,
    ConfirmSelection,
    ReleaseRange,
)
from spectrum_allocator.allocation.results import AllocationResult
from spectrum_allocator.core.config import AllocatorConfig, get_config
from spectrum_allocator.core.exceptions import SpectrumError, ValidationError
from spectrum_allocator.storage.models import Band, Holder
from spectrum_allocator.storage.spectrum_db import SpectrumDB

logger = logging.getLogger(__name__)

_request_adapter: TypeAdapter[AllocationRequest] = TypeAdapter(AllocationRequest)
_REQUEST_KINDS = ("allocate_all", "allocate_first_n", "allocate_spaced_n")


def _from_pydantic(error: PydanticValidationError) -> ValidationError:
    """Reduce a pydantic error to the first offending field."""
    first = error.errors()[0]
    loc = tuple(first.get("loc", ()))
    if len(loc) > 1 and loc[0] in _REQUEST_KINDS:
        loc = loc[1:]
    field = ".".join(str(part) for part in loc) or "request"
    return ValidationError(field, f"({field}) {first.get('msg', 'is invalid')}")


class SpectrumService:
    """Request/response boundary over :class:`SpectrumAllocator`."""

    def __init__(self, db: SpectrumDB, config: AllocatorConfig | None = None) -> None:
        self.db = db
        self.config = config or get_config()
        self.allocator = SpectrumAllocator(db, self.config)

    def _run(self, action: str, operation: Callable[[], AllocationResult]) -> AllocationResult:
        try:
            return operation()
        except PydanticValidationError as e:
            error = _from_pydantic(e)
            logger.info("%s rejected: %s", action, error)
            return AllocationResult.failure(error)
        except SpectrumError as e:
            if e.kind == "internal":
                logger.error("%s failed: %s", action, e)
            elif e.kind == "validation":
                logger.info("%s rejected: %s", action, e)
            else:
                logger.warning("%s failed (%s): %s", action, e.kind, e)
            return AllocationResult.failure(e)
        except duckdb.Error:
            logger.exception("%s failed in storage", action)
            return AllocationResult.internal()

    # =========================================================================
    # Allocation
    # =========================================================================

    def allocate(self, payload: dict[str, Any]) -> AllocationResult:
        """Run a request given as a mapping tagged by ``kind``.

        ``kind`` is one of ``allocate_all``, ``allocate_first_n`` or
        ``allocate_spaced_n``; the remaining keys are the request fields,
        with ``holder`` as a nested mapping.
        """

        def operation() -> AllocationResult:
            request = _request_adapter.validate_python(payload)
            selection = self.allocator.allocate(request)
            return AllocationResult.success(
                selection.message, data=selection.values, exact=selection.exact
            )

        return self._run(f"allocate {payload.get('kind', '?')}", operation)

    def range_allocate(
        self,
        from_hz: int,
        to_hz: int,
        spacing_hz: int,
        start: int,
        end: int,
        holder_id: str,
        email: str,
        latitude: float = 0.0,
        longitude: float = 0.0,
    ) -> AllocationResult:
        """Allocate every free channel in ``[start, end]``."""

        def operation() -> AllocationResult:
            request = AllocateAll(
                from_hz=from_hz,
                to_hz=to_hz,
                spacing_hz=spacing_hz,
                start=start,
                end=end,
                holder=Holder(holder_id=holder_id, email=email, latitude=latitude, longitude=longitude),
            )
            selection = self.allocator.allocate_range(request)
            return AllocationResult.success(selection.message, data=selection.values)

        return self._run("range allocate", operation)

    def range_allocate_first_n(
        self,
        from_hz: int,
        to_hz: int,
        spacing_hz: int,
        start: int,
        end: int,
        n: int,
        holder_id: str,
        email: str,
        latitude: float = 0.0,
        longitude: float = 0.0,
    ) -> AllocationResult:
        """Allocate the ``n`` lowest free channels in ``[start, end]``."""

        def operation() -> AllocationResult:
            request = AllocateFirstN(
                from_hz=from_hz,
                to_hz=to_hz,
                spacing_hz=spacing_hz,
                start=start,
                end=end,
                n=n,
                holder=Holder(holder_id=holder_id, email=email, latitude=latitude, longitude=longitude),
            )
            selection = self.allocator.allocate_first_n(request)
            return AllocationResult.success(selection.message, data=selection.values)

        return self._run("range allocate first n", operation)

    def choose_range(
        self,
        from_hz: int,
        to_hz: int,
        spacing_hz: int,
        start: int,
        end: int,
        n: int,
        secondary_spacing_hz: int,
    ) -> AllocationResult:
        """Preview ``n`` spaced channels; confirm with :meth:`confirm_range`."""

        def operation() -> AllocationResult:
            request = AllocateSpacedN(
                from_hz=from_hz,
                to_hz=to_hz,
                spacing_hz=spacing_hz,
                start=start,
                end=end,
                n=n,
                secondary_spacing_hz=secondary_spacing_hz,
            )
            selection = self.allocator.choose_range(request)
            return AllocationResult.success(
                selection.message, data=selection.values, exact=selection.exact
            )

        return self._run("choose range", operation)

    def confirm_range(
        self,
        from_hz: int,
        to_hz: int,
        spacing_hz: int,
        start: int,
        end: int,
        values: list[int],
        holder_id: str,
        email: str,
        latitude: float = 0.0,
        longitude: float = 0.0,
    ) -> AllocationResult:
        """Commit a selection previewed over ``[start, end]`` in a new transaction."""

        def operation() -> AllocationResult:
            request = ConfirmSelection(
                from_hz=from_hz,
                to_hz=to_hz,
                spacing_hz=spacing_hz,
                start=start,
                end=end,
                values=values,
                holder=Holder(holder_id=holder_id, email=email, latitude=latitude, longitude=longitude),
            )
            selection = self.allocator.confirm_selection(request)
            return AllocationResult.success(selection.message, data=selection.values)

        return self._run("confirm range", operation)

    def acquire_frequency(
        self,
        from_hz: int,
        to_hz: int,
        spacing_hz: int,
        value: int,
        holder_id: str,
        email: str,
        latitude: float = 0.0,
        longitude: float = 0.0,
    ) -> AllocationResult:
        """Allocate a single channel."""

        def operation() -> AllocationResult:
            request = AcquireChannel(
                from_hz=from_hz,
                to_hz=to_hz,
                spacing_hz=spacing_hz,
                value=value,
                holder=Holder(holder_id=holder_id, email=email, latitude=latitude, longitude=longitude),
            )
            selection = self.allocator.acquire_channel(request)
            return AllocationResult.success(selection.message, data=selection.values)

        return self._run("acquire frequency", operation)

    # =========================================================================
    # Release
    # =========================================================================

    def range_delete(
        self,
        from_hz: int,
        to_hz: int,
        spacing_hz: int,
        start: int,
        end: int,
        holder_id: str,
    ) -> AllocationResult:
        """Release the holder's channels in ``[start, end]``."""

        def operation() -> AllocationResult:
            request = ReleaseRange(
                from_hz=from_hz,
                to_hz=to_hz,
                spacing_hz=spacing_hz,
                start=start,
                end=end,
                holder_id=holder_id,
            )
            released = self.allocator.release_range(request)
            return AllocationResult.success(f"Released {released} frequencies.", count=released)

        return self._run("range delete", operation)

    def release_frequency(self, value: int, holder_id: str | None = None) -> AllocationResult:
        def operation() -> AllocationResult:
            released = self.allocator.release_channel(value, holder_id)
            return AllocationResult.success("Frequency released.", data=[value], count=released)

        return self._run("release frequency", operation)

    def release_all(self, holder_id: str) -> AllocationResult:
        def operation() -> AllocationResult:
            released = self.allocator.release_holder(holder_id)
            return AllocationResult.success(f"Released {released} frequencies.", count=released)

        return self._run("release all", operation)

    # =========================================================================
    # Debarment
    # =========================================================================

    def debar_range(self, band_id: str, start: int, end: int) -> AllocationResult:
        """Block every free channel in ``[start, end]`` of a stored band."""

        def operation() -> AllocationResult:
            band = self.db.get_band(band_id)
            selection = self.allocator.debar_range(band, start, end)
            return AllocationResult.success(selection.message, data=selection.values, band=band)

        return self._run("debar range", operation)

    def allow_range(self, band_id: str, start: int, end: int) -> AllocationResult:
        """Lift debarment in ``[start, end]`` of a stored band."""

        def operation() -> AllocationResult:
            band = self.db.get_band(band_id)
            released = self.allocator.allow_range(band, start, end)
            return AllocationResult.success(f"Allowed {released} frequencies.", count=released, band=band)

        return self._run("allow range", operation)

    # =========================================================================
    # Bands
    # =========================================================================

    def create_band(self, name: str, from_hz: int, to_hz: int, spacing_hz: int) -> AllocationResult:
        def operation() -> AllocationResult:
            band = Band(name=name, from_hz=from_hz, to_hz=to_hz, spacing_hz=spacing_hz)
            with self.db.transaction():
                self.db.insert_band(band)
            return AllocationResult.success("Band created.", band=band)

        return self._run("create band", operation)

    def update_band(
        self,
        band_id: str,
        name: str | None = None,
        from_hz: int | None = None,
        to_hz: int | None = None,
        spacing_hz: int | None = None,
    ) -> AllocationResult:
        """Edit a band; omitted fields keep their current value."""

        def operation() -> AllocationResult:
            with self.db.transaction():
                current = self.db.get_band(band_id)
                band = Band(
                    id=current.id,
                    name=current.name if name is None else name,
                    from_hz=current.from_hz if from_hz is None else from_hz,
                    to_hz=current.to_hz if to_hz is None else to_hz,
                    spacing_hz=current.spacing_hz if spacing_hz is None else spacing_hz,
                    created_at=current.created_at,
                )
                self.db.update_band(band)
            return AllocationResult.success("Band updated.", band=band)

        return self._run("update band", operation)

    def delete_band(self, band_id: str) -> AllocationResult:
        def operation() -> AllocationResult:
            with self.db.transaction():
                self.db.delete_band(band_id)
            return AllocationResult.success("Band deleted.")

        return self._run("delete band", operation)
