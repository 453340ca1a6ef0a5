"""Tests for the pure allocation policies."""

from __future__ import annotations

import pytest

from spectrum_allocator.allocation.policies import (
    CLOSEST_MATCH_MESSAGE,
    allocate_all_free,
    allocate_first_n,
    available_channels,
    choose_spaced_n,
    spaced_candidates,
    spread_pick,
)
from spectrum_allocator.core.exceptions import InsufficientAvailabilityError

GRID = range(100, 201, 10)


class TestAllocateAllFree:
    """Tests for allocate_all_free."""

    def test_empty_snapshot_takes_whole_grid(self) -> None:
        assert allocate_all_free(GRID, set()) == list(GRID)

    def test_skips_occupied(self) -> None:
        assert allocate_all_free(GRID, {100, 150, 200}) == [110, 120, 130, 140, 160, 170, 180, 190]

    def test_fully_occupied_returns_nothing(self) -> None:
        assert allocate_all_free(GRID, set(GRID)) == []


class TestAllocateFirstN:
    """Tests for allocate_first_n."""

    def test_lowest_free_values(self) -> None:
        assert allocate_first_n(GRID, set(), 3) == [100, 110, 120]

    def test_second_request_continues_after_first(self) -> None:
        occupied = {100, 110, 120}
        assert allocate_first_n(GRID, occupied, 3) == [130, 140, 150]

    def test_gaps_are_filled_first(self) -> None:
        assert allocate_first_n(GRID, {100, 120}, 2) == [110, 130]

    def test_exact_availability(self) -> None:
        assert allocate_first_n(GRID, set(), 11) == list(GRID)

    def test_insufficient(self) -> None:
        with pytest.raises(InsufficientAvailabilityError) as exc_info:
            allocate_first_n(GRID, {100, 110}, 10)

        error = exc_info.value
        assert error.available == 9
        assert error.requested == 10
        assert error.message == "Available 9, requesting 10"


class TestSpacedCandidates:
    """Tests for the secondary-spacing walk."""

    def test_jumps_by_secondary_spacing(self) -> None:
        assert spaced_candidates(100, 10, 30, 100, 200, set()) == [100, 130, 160, 190]

    def test_occupied_value_advances_one_primary_step(self) -> None:
        assert spaced_candidates(100, 10, 30, 100, 200, {100}) == [110, 140, 170, 200]

    def test_limit_stops_early(self) -> None:
        assert spaced_candidates(100, 10, 30, 100, 200, set(), limit=2) == [100, 130]

    def test_unaligned_start(self) -> None:
        assert spaced_candidates(100, 10, 50, 101, 200, set()) == [110, 160]


class TestSpreadPick:
    """Tests for the even-spread fallback."""

    def test_even_indices(self) -> None:
        assert spread_pick(list(range(10)), 3) == [0, 3, 6]

    def test_delta_of_one(self) -> None:
        assert spread_pick([1, 2, 3], 2) == [1, 2]

    def test_exact_count(self) -> None:
        assert spread_pick([5, 6, 7], 3) == [5, 6, 7]


class TestChooseSpacedN:
    """Tests for choose_spaced_n."""

    def test_fast_phase(self) -> None:
        selection = choose_spaced_n(100, 10, 30, 100, 200, set(), 3)

        assert selection.values == [100, 130, 160]
        assert selection.exact is True
        assert selection.message == "Acquire 3 frequencies 0.00003 MHz apart."

    def test_fast_phase_message_in_mhz(self) -> None:
        selection = choose_spaced_n(
            144_000_000, 12_500, 1_000_000, 144_000_000, 148_000_000, set(), 2
        )
        assert selection.values == [144_000_000, 145_000_000]
        assert selection.message == "Acquire 2 frequencies 1 MHz apart."

    def test_fallback_spreads_over_primary_grid(self) -> None:
        """Occupied 100..130, two picks that cannot be 100 apart."""
        selection = choose_spaced_n(100, 10, 100, 100, 200, {100, 110, 120, 130}, 2)

        assert selection.values == [140, 170]
        assert selection.exact is False
        assert selection.message == CLOSEST_MATCH_MESSAGE

    def test_results_are_free_and_ascending(self) -> None:
        occupied = {110, 150, 160}
        selection = choose_spaced_n(100, 10, 40, 100, 200, occupied, 4)

        assert len(selection) == 4
        assert not set(selection.values) & occupied
        assert selection.values == sorted(selection.values)

    def test_insufficient(self) -> None:
        occupied = set(GRID) - {150}
        with pytest.raises(InsufficientAvailabilityError) as exc_info:
            choose_spaced_n(100, 10, 30, 100, 200, occupied, 2)
        assert exc_info.value.available == 1


def test_available_channels_preserves_grid_order() -> None:
    assert available_channels(range(200, 99, -10), {150}) == [
        200, 190, 180, 170, 160, 140, 130, 120, 110, 100
    ]
