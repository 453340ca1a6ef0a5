"""Allocation policies, engine and service boundary."""

from spectrum_allocator.allocation.engine import SpectrumAllocator
from spectrum_allocator.allocation.policies import (
    Selection,
    allocate_all_free,
    allocate_first_n,
    available_channels,
    choose_spaced_n,
    spaced_candidates,
    spread_pick,
)
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
from spectrum_allocator.allocation.service import SpectrumService

__all__ = [
    "SpectrumAllocator",
    "SpectrumService",
    "AllocationResult",
    "Selection",
    # Requests
    "AllocationRequest",
    "AllocateAll",
    "AllocateFirstN",
    "AllocateSpacedN",
    "ConfirmSelection",
    "ReleaseRange",
    "AcquireChannel",
    # Policies
    "available_channels",
    "allocate_all_free",
    "allocate_first_n",
    "choose_spaced_n",
    "spaced_candidates",
    "spread_pick",
]
