"""CLI entry points for Spectrum Allocator."""

from spectrum_allocator.cli.main import alloc, band

__all__ = ["band", "alloc"]
