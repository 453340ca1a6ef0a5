"""Rich terminal UI components for Spectrum Allocator."""

from spectrum_allocator.ui.display import (
    display_bands,
    display_channels,
    display_history,
    display_occupancies,
    display_result,
    display_statistics,
    display_values,
    print_banner,
    print_error,
    print_success,
    print_warning,
)

__all__ = [
    "display_bands",
    "display_channels",
    "display_history",
    "display_occupancies",
    "display_result",
    "display_statistics",
    "display_values",
    "print_banner",
    "print_error",
    "print_success",
    "print_warning",
]
