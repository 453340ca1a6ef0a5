"""Tests for channel grid arithmetic and unit scaling."""

from __future__ import annotations

from decimal import Decimal

import pytest

from spectrum_allocator.core.config import KHZ, MHZ
from spectrum_allocator.core.exceptions import ValidationError
from spectrum_allocator.core.grid import (
    channel_count,
    channel_grid,
    first_channel,
    format_units,
    is_channel,
    to_base_units,
    validate_band,
)

GRID_CASES = [
    # (from, to, spacing, start, end)
    (100, 200, 10, 100, 200),
    (100, 200, 10, 101, 199),
    (100, 200, 10, 105, 105),
    (0, 1_000, 7, 13, 990),
    (144_000_000, 148_000_000, 12_500, 144_006_000, 144_100_000),
    (30_000_000, 300_000_000, 25_000, 299_999_999, 300_000_000),
]


class TestFirstChannel:
    """Tests for first_channel."""

    def test_aligned_start_is_kept(self) -> None:
        assert first_channel(100, 10, 130) == 130

    def test_unaligned_start_rounds_up(self) -> None:
        assert first_channel(100, 10, 131) == 140
        assert first_channel(100, 10, 139) == 140

    def test_band_start(self) -> None:
        assert first_channel(100, 10, 100) == 100

    def test_large_values_stay_exact(self) -> None:
        """No float rounding on Hz-scale bounds."""
        assert first_channel(144_000_000, 12_500, 144_000_001) == 144_012_500


class TestChannelGrid:
    """Tests for channel_grid."""

    def test_example_grid(self) -> None:
        assert list(channel_grid(100, 200, 10, 100, 200)) == list(range(100, 201, 10))

    @pytest.mark.parametrize("band_from,band_to,spacing,start,end", GRID_CASES)
    def test_grid_properties(self, band_from, band_to, spacing, start, end) -> None:
        """Ascending, aligned, minimal first element, all within range."""
        values = list(channel_grid(band_from, band_to, spacing, start, end))

        assert all(b > a for a, b in zip(values, values[1:]))
        assert all((v - band_from) % spacing == 0 for v in values)
        assert all(start <= v <= end for v in values)
        if values:
            assert values[0] >= start
            assert values[0] - spacing < start

    def test_empty_when_no_grid_point_in_range(self) -> None:
        assert list(channel_grid(100, 200, 10, 101, 109)) == []

    def test_inverted_range_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            channel_grid(100, 200, 10, 150, 140)
        assert exc_info.value.field == "start"

    def test_start_outside_band_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            channel_grid(100, 200, 10, 90, 150)
        assert exc_info.value.field == "start"

    def test_end_outside_band_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            channel_grid(100, 200, 10, 150, 210)
        assert exc_info.value.field == "end"

    def test_non_positive_spacing_rejected(self) -> None:
        with pytest.raises(ValidationError):
            channel_grid(100, 200, 0, 100, 200)


class TestValidateBand:
    """Tests for band invariants."""

    def test_valid_band(self) -> None:
        validate_band(100, 200, 10)

    def test_from_not_less_than_to(self) -> None:
        with pytest.raises(ValidationError, match="less than \\(To\\)") as exc_info:
            validate_band(200, 200, 10)
        assert exc_info.value.field == "from"

    def test_spacing_too_large(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_band(100, 200, 100)
        assert exc_info.value.field == "spacing"

    def test_spacing_zero(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_band(100, 200, 0)
        assert exc_info.value.field == "spacing"

    def test_negative_from(self) -> None:
        with pytest.raises(ValidationError):
            validate_band(-10, 200, 10)


class TestChannelHelpers:
    """Tests for is_channel and channel_count."""

    def test_is_channel(self) -> None:
        assert is_channel(150, 100, 200, 10)
        assert not is_channel(155, 100, 200, 10)
        assert not is_channel(210, 100, 200, 10)

    def test_channel_count(self) -> None:
        assert channel_count(100, 200, 10) == 11
        assert channel_count(100, 205, 10) == 11


class TestUnitScaling:
    """Tests for exact display-unit conversion."""

    def test_mhz_to_hz(self) -> None:
        assert to_base_units("100.1", MHZ) == 100_100_000
        assert to_base_units(100.1, MHZ) == 100_100_000
        assert to_base_units(145, MHZ) == 145_000_000

    def test_khz_to_hz(self) -> None:
        assert to_base_units("12.5", KHZ) == 12_500

    def test_decimal_input(self) -> None:
        assert to_base_units(Decimal("0.000001"), MHZ) == 1

    def test_sub_unit_value_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            to_base_units("100.0000001", MHZ, "start")
        assert exc_info.value.field == "start"

    def test_non_numeric_rejected(self) -> None:
        with pytest.raises(ValidationError):
            to_base_units("abc", MHZ)

    def test_format_units(self) -> None:
        assert format_units(1_000_000) == "1"
        assert format_units(500_000) == "0.5"
        assert format_units(1_500_000) == "1.5"
        assert format_units(10_000_000) == "10"
        assert format_units(12_500, KHZ) == "12.5"

    def test_round_trip_is_exact(self) -> None:
        for text in ["87.5", "100.1", "144.0125", "1090"]:
            assert Decimal(format_units(to_base_units(text))) == Decimal(text)
