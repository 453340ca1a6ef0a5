"""Channel grid arithmetic.

A band ``(from, to, spacing)`` defines the grid ``from + k * spacing`` for
``k >= 0`` up to ``to``. Everything here is integer arithmetic on base units
(Hz); display units are converted exactly at the boundary.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from spectrum_allocator.core.config import MHZ
from spectrum_allocator.core.exceptions import ValidationError


def validate_band(band_from: int, band_to: int, spacing: int) -> None:
    """Check band invariants.

    Raises:
        ValidationError: If ``from < to`` or ``0 < spacing < to - from`` fails.
    """
    if band_from < 0:
        raise ValidationError("from", "(From) must be greater than or equal to 0")
    if band_from >= band_to:
        raise ValidationError("from", "(From) must be less than (To)")
    if spacing <= 0:
        raise ValidationError("spacing", "(Spacing) must be greater than 0")
    if spacing >= band_to - band_from:
        raise ValidationError("spacing", "(Spacing) must be less than (To - From)")


def validate_range(band_from: int, band_to: int, start: int, end: int) -> None:
    """Check that ``[start, end]`` is a non-empty sub-range of the band."""
    if start > end:
        raise ValidationError("start", "(Start) must not be greater than (End)")
    if not band_from <= start <= band_to:
        raise ValidationError("start", "(Start) must lie within the band")
    if not band_from <= end <= band_to:
        raise ValidationError("end", "(End) must lie within the band")


def first_channel(band_from: int, spacing: int, start: int) -> int:
    """Return the smallest grid value ``>= start``."""
    steps = -(-(start - band_from) // spacing)  # ceil without floats
    return band_from + steps * spacing


def channel_grid(
    band_from: int,
    band_to: int,
    spacing: int,
    start: int,
    end: int,
) -> range:
    """Ascending grid-aligned values in ``[start, end]``.

    Args:
        band_from: Inclusive lower band bound.
        band_to: Inclusive upper band bound.
        spacing: Channel step.
        start: Inclusive sub-range start.
        end: Inclusive sub-range end.

    Returns:
        A ``range`` over the channel values; empty if no grid point falls
        inside the sub-range.

    Raises:
        ValidationError: If spacing is not positive or the sub-range is
            inverted or outside the band.
    """
    if spacing <= 0:
        raise ValidationError("spacing", "(Spacing) must be greater than 0")
    validate_range(band_from, band_to, start, end)
    return range(first_channel(band_from, spacing, start), end + 1, spacing)


def is_channel(value: int, band_from: int, band_to: int, spacing: int) -> bool:
    """Whether ``value`` is a grid point of the band."""
    return band_from <= value <= band_to and (value - band_from) % spacing == 0


def channel_count(band_from: int, band_to: int, spacing: int) -> int:
    """Number of channels in the whole band."""
    return (band_to - band_from) // spacing + 1


# =============================================================================
# Unit Scaling
# =============================================================================


def to_base_units(value: str | int | float | Decimal, unit: int = MHZ, field: str = "value") -> int:
    """Convert a display value (e.g. MHz) to integer base units.

    Floats are read through their shortest ``repr`` so ``100.1`` MHz maps to
    ``100100000`` rather than a binary approximation.

    Raises:
        ValidationError: If the value is not numeric or does not scale to a
            whole number of base units.
    """
    try:
        scaled = Decimal(str(value)) * unit
    except InvalidOperation as e:
        raise ValidationError(field, f"({field.title()}) must be a number", str(value)) from e
    if not scaled.is_finite() or scaled != scaled.to_integral_value():
        raise ValidationError(
            field, f"({field.title()}) is not a whole number of base units", str(value)
        )
    return int(scaled)


def format_units(value: int, unit: int = MHZ) -> str:
    """Render base units in a display unit without rounding.

    ``format_units(1_000_000)`` gives ``"1"`` and ``format_units(500_000)``
    gives ``"0.5"``.
    """
    scaled = (Decimal(value) / Decimal(unit)).normalize()
    return f"{scaled:f}"
