"""Spectrum allocation engine.

Runs each operation as one transaction against :class:`SpectrumDB`:
snapshot the occupied values of the sub-range, apply a policy, commit.
Failures are raised as :mod:`spectrum_allocator.core.exceptions` types
and roll the transaction back.
"""

from __future__ import annotations

import logging

from spectrum_allocator.allocation.policies import (
    Selection,
    allocate_all_free,
    allocate_first_n,
    choose_spaced_n,
)
from spectrum_allocator.allocation.requests import (
    AcquireChannel,
    AllocateAll,
    AllocateFirstN,
    AllocateSpacedN,
    ConfirmSelection,
    ReleaseRange,
)
from spectrum_allocator.core.config import FORBIDDEN_HOLDER, AllocatorConfig, get_config
from spectrum_allocator.core.exceptions import NotFoundError, WriteConflictError
from spectrum_allocator.core.grid import channel_grid
from spectrum_allocator.storage.models import AllocationRecord, Band, ChannelStatus, Holder, Occupancy
from spectrum_allocator.storage.spectrum_db import SpectrumDB

logger = logging.getLogger(__name__)

ACQUIRED_MESSAGE = "Frequencies acquired successfully!"


class SpectrumAllocator:
    """Allocate channels from bands with a no-double-booking guarantee.

    One allocator works on one :class:`SpectrumDB` handle. Concurrent
    callers each need their own handle (``db.cursor()``).

    Example:
        >>> allocator = SpectrumAllocator(db)
        >>> request = AllocateFirstN.for_band(band, n=3, holder=holder)
        >>> allocator.allocate_first_n(request).values
        [100, 110, 120]
    """

    def __init__(self, db: SpectrumDB, config: AllocatorConfig | None = None) -> None:
        self.db = db
        self.config = config or get_config()

    def allocate(self, request: AllocateAll | AllocateFirstN | AllocateSpacedN) -> Selection:
        """Dispatch a request to the matching policy."""
        if isinstance(request, AllocateAll):
            return self.allocate_range(request)
        if isinstance(request, AllocateFirstN):
            return self.allocate_first_n(request)
        if isinstance(request, AllocateSpacedN):
            return self.choose_range(request)
        raise TypeError(f"Unsupported allocation request: {type(request).__name__}")

    # =========================================================================
    # Allocation
    # =========================================================================

    def allocate_range(self, request: AllocateAll) -> Selection:
        """Allocate every free channel of the sub-range to the holder."""
        with self.db.transaction():
            occupied = self.db.occupied_in_range(request.start, request.end)
            values = allocate_all_free(request.grid(), occupied)
            self.db.insert_allocations(values, request.holder)

        logger.info(
            "Allocated %d free values in [%d, %d] to %s",
            len(values),
            request.start,
            request.end,
            request.holder.holder_id,
        )
        return Selection(values=values, message=f"Allocated {len(values)} frequencies.")

    def allocate_first_n(self, request: AllocateFirstN) -> Selection:
        """Allocate the ``n`` lowest free channels of the sub-range.

        Raises:
            InsufficientAvailabilityError: Nothing is written.
        """
        with self.db.transaction():
            occupied = self.db.occupied_in_range(request.start, request.end)
            values = allocate_first_n(request.grid(), occupied, request.n)
            self.db.insert_allocations(values, request.holder)

        logger.info("Allocated first %d values %s to %s", request.n, values, request.holder.holder_id)
        return Selection(values=values, message=ACQUIRED_MESSAGE)

    def choose_range(self, request: AllocateSpacedN) -> Selection:
        """Preview a spaced selection. Nothing is written.

        The caller confirms with :meth:`confirm_selection` in a separate
        transaction.
        """
        with self.db.transaction():
            occupied = self.db.occupied_in_range(request.start, request.end)
            selection = choose_spaced_n(
                request.from_hz,
                request.spacing_hz,
                request.secondary_spacing_hz,
                request.start,
                request.end,
                occupied,
                request.n,
            )

        logger.debug("Previewed %s (exact=%s)", selection.values, selection.exact)
        return selection

    def confirm_selection(self, request: ConfirmSelection) -> Selection:
        """Commit a previewed selection.

        Time has passed since the preview, so the values are checked again
        and the unique key on value still guards the insert.

        Raises:
            WriteConflictError: If any value was taken since the preview.
        """
        with self.db.transaction():
            taken = self.db.occupied_values(request.values)
            if taken:
                logger.warning("Previewed values taken before confirm: %s", sorted(taken))
                raise WriteConflictError(taken.keys())
            self.db.insert_allocations(list(request.values), request.holder)

        logger.info("Confirmed %d values for %s", len(request.values), request.holder.holder_id)
        return Selection(values=list(request.values), message=ACQUIRED_MESSAGE)

    def acquire_channel(self, request: AcquireChannel) -> Selection:
        """Allocate one specific channel.

        Raises:
            WriteConflictError: If the channel is already held.
        """
        with self.db.transaction():
            if self.db.get_occupancy(request.value) is not None:
                raise WriteConflictError([request.value])
            self.db.insert_allocations([request.value], request.holder)

        logger.info("Acquired %d for %s", request.value, request.holder.holder_id)
        return Selection(values=[request.value], message=ACQUIRED_MESSAGE)

    # =========================================================================
    # Release
    # =========================================================================

    def release_range(self, request: ReleaseRange) -> int:
        """Release the holder's channels in the sub-range.

        Returns:
            Number of channels released; zero when nothing matched.
        """
        with self.db.transaction():
            released = self.db.delete_range(request.start, request.end, request.holder_id)

        logger.info(
            "Released %d values in [%d, %d] for %s",
            released,
            request.start,
            request.end,
            request.holder_id,
        )
        return released

    def release_channel(self, value: int, holder_id: str | None = None) -> int:
        """Release one channel, optionally only if held by ``holder_id``.

        Raises:
            NotFoundError: If no matching occupancy exists.
        """
        with self.db.transaction():
            released = self.db.delete_value(value, holder_id)
            if not released:
                raise NotFoundError("Frequency", value)

        logger.info("Released %d", value)
        return released

    def release_holder(self, holder_id: str) -> int:
        """Release every channel held by ``holder_id``."""
        with self.db.transaction():
            released = self.db.delete_holder(holder_id)

        logger.info("Released all %d values of %s", released, holder_id)
        return released

    # =========================================================================
    # Debarment
    # =========================================================================

    def debar_range(self, band: Band, start: int, end: int) -> Selection:
        """Block every free channel of the sub-range for the sentinel holder."""
        request = AllocateAll.for_band(band, start, end, holder=Holder.forbidden())
        return self.allocate_range(request)

    def allow_range(self, band: Band, start: int, end: int) -> int:
        """Lift debarment in the sub-range. User allocations are untouched."""
        request = ReleaseRange.for_band(band, start, end, holder_id=FORBIDDEN_HOLDER)
        return self.release_range(request)

    # =========================================================================
    # Queries
    # =========================================================================

    def band_status(self, band: Band, start: int | None = None, end: int | None = None) -> list[ChannelStatus]:
        """Every grid value of the sub-range with its current occupancy."""
        start = band.from_hz if start is None else start
        end = band.to_hz if end is None else end
        grid = channel_grid(band.from_hz, band.to_hz, band.spacing_hz, start, end)
        with self.db.transaction():
            occupied = self.db.occupied_in_range(start, end)
        return [ChannelStatus(value=value, occupancy=occupied.get(value)) for value in grid]

    def holder_channels(self, holder_id: str) -> list[Occupancy]:
        return self.db.get_holder_channels(holder_id)

    def channel_history(self, value: int) -> list[AllocationRecord]:
        return self.db.get_history(value)
