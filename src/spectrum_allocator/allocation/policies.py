"""Allocation policies.

Pure functions over a candidate grid and an occupancy snapshot. None of
them touch the store; the engine runs them between the snapshot read and
the commit of one transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Container, Iterable
from dataclasses import dataclass

from spectrum_allocator.core.config import MHZ
from spectrum_allocator.core.exceptions import InsufficientAvailabilityError
from spectrum_allocator.core.grid import first_channel, format_units

logger = logging.getLogger(__name__)

CLOSEST_MATCH_MESSAGE = "Unable to get requested frequencies, returning closest match."


@dataclass
class Selection:
    """Channels chosen by a policy, with a caller-facing status message."""

    values: list[int]
    message: str
    exact: bool = True

    def __len__(self) -> int:
        return len(self.values)


def available_channels(grid: Iterable[int], occupied: Container[int]) -> list[int]:
    """Grid values not present in the snapshot, in grid order."""
    return [value for value in grid if value not in occupied]


def allocate_all_free(grid: Iterable[int], occupied: Container[int]) -> list[int]:
    """Select every free channel of the grid."""
    return available_channels(grid, occupied)


def allocate_first_n(grid: Iterable[int], occupied: Container[int], n: int) -> list[int]:
    """Select the ``n`` lowest free channels.

    Raises:
        InsufficientAvailabilityError: If fewer than ``n`` are free.
    """
    available = available_channels(grid, occupied)
    if len(available) < n:
        raise InsufficientAvailabilityError(len(available), n)
    return available[:n]


def spaced_candidates(
    band_from: int,
    spacing: int,
    secondary_spacing: int,
    start: int,
    end: int,
    occupied: Container[int],
    limit: int | None = None,
) -> list[int]:
    """Walk ``[start, end]`` preferring picks ``secondary_spacing`` apart.

    A free value is taken and the walk jumps by the secondary spacing; an
    occupied value is skipped by one primary step.
    """
    picks: list[int] = []
    value = first_channel(band_from, spacing, start)
    while value <= end:
        if value in occupied:
            value += spacing
            continue
        picks.append(value)
        if limit is not None and len(picks) >= limit:
            break
        value += secondary_spacing
    return picks


def spread_pick(available: list[int], n: int) -> list[int]:
    """Pick ``n`` entries at indices ``0, delta, 2*delta, ...``.

    ``delta`` is ``len(available) // n``; the tail of ``available`` may go
    unused when ``n`` does not divide the count.
    """
    delta = len(available) // n
    if delta == 0:
        delta = 1
    return available[: delta * n : delta][:n]


def choose_spaced_n(
    band_from: int,
    spacing: int,
    secondary_spacing: int,
    start: int,
    end: int,
    occupied: Container[int],
    n: int,
) -> Selection:
    """Best-effort selection of ``n`` well separated channels.

    Tries the secondary spacing first. If that yields fewer than ``n``
    values, falls back to spreading ``n`` picks evenly over every free
    channel of the primary grid.

    Raises:
        InsufficientAvailabilityError: If fewer than ``n`` channels are free.
    """
    picks = spaced_candidates(band_from, spacing, secondary_spacing, start, end, occupied, limit=n)
    if len(picks) >= n:
        message = f"Acquire {n} frequencies {format_units(secondary_spacing, MHZ)} MHz apart."
        return Selection(values=picks[:n], message=message)

    logger.debug("Spaced walk found %d of %d, falling back to primary grid", len(picks), n)
    grid = range(first_channel(band_from, spacing, start), end + 1, spacing)
    available = available_channels(grid, occupied)
    if len(available) < n:
        raise InsufficientAvailabilityError(len(available), n)
    return Selection(values=spread_pick(available, n), message=CLOSEST_MATCH_MESSAGE, exact=False)
