"""Concurrency tests: isolated transactions on separate cursors."""

from __future__ import annotations

import threading

import pytest

from spectrum_allocator.allocation import AllocationResult, SpectrumAllocator, SpectrumService
from spectrum_allocator.allocation.requests import AllocateFirstN
from spectrum_allocator.core.exceptions import WriteConflictError
from spectrum_allocator.storage import Band, Holder, SpectrumDB


class TestCursorIsolation:
    """Two handles on one database."""

    def test_cursor_sees_committed_data(self, db: SpectrumDB, holder: Holder) -> None:
        other = db.cursor()
        with db.transaction():
            db.insert_allocations([100], holder)

        assert other.get_occupancy(100).holder_id == holder.holder_id

    def test_snapshot_is_stable_within_transaction(
        self, db: SpectrumDB, holder: Holder, other_holder: Holder
    ) -> None:
        first = db.cursor()
        second = db.cursor()

        with second.transaction():
            assert second.occupied_in_range(100, 200) == {}
            with first.transaction():
                first.insert_allocations([100], holder)
            assert second.occupied_in_range(100, 200) == {}

        assert sorted(second.occupied_in_range(100, 200)) == [100]

    def test_later_commit_loses(self, db: SpectrumDB, holder: Holder, other_holder: Holder) -> None:
        """Both transactions saw 100 as free; only the first commit keeps it."""
        first = db.cursor()
        second = db.cursor()

        with pytest.raises(WriteConflictError):
            with second.transaction():
                assert second.occupied_in_range(100, 200) == {}
                with first.transaction():
                    first.insert_allocations([100], holder)
                second.insert_allocations([100, 110], other_holder)

        assert db.get_occupancy(100).holder_id == holder.holder_id
        assert db.get_occupancy(110) is None
        assert [r.holder_id for r in db.get_history(100)] == [holder.holder_id]

    def test_disjoint_values_both_commit(self, db: SpectrumDB, band: Band, holder: Holder, other_holder: Holder) -> None:
        first = SpectrumAllocator(db.cursor())
        second = SpectrumAllocator(db.cursor())

        first.allocate_first_n(AllocateFirstN.for_band(band, 100, 140, n=2, holder=holder))
        second.allocate_first_n(AllocateFirstN.for_band(band, 150, 200, n=2, holder=other_holder))

        assert sorted(db.occupied_in_range(100, 200)) == [100, 110, 150, 160]


class TestConcurrentAllocation:
    """Many threads racing for the same band."""

    def test_no_double_booking(self, db: SpectrumDB, band: Band) -> None:
        workers = 6
        per_request = 3
        results: dict[str, AllocationResult] = {}
        barrier = threading.Barrier(workers)
        services = [SpectrumService(db.cursor()) for _ in range(workers)]

        def run(index: int) -> None:
            holder_id = f"user-{index}"
            barrier.wait()
            results[holder_id] = services[index].range_allocate_first_n(
                band.from_hz,
                band.to_hz,
                band.spacing_hz,
                band.from_hz,
                band.to_hz,
                per_request,
                holder_id,
                f"{holder_id}@example.com",
            )

        threads = [threading.Thread(target=run, args=(i,)) for i in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert len(results) == workers
        granted = [set(r.data) for r in results.values() if r.ok]
        all_values = [value for values in granted for value in values]

        # No value granted twice, never more than the band holds
        assert len(all_values) == len(set(all_values))
        assert len(all_values) <= band.channel_count
        assert all(len(values) == per_request for values in granted)

        for result in results.values():
            if not result.ok:
                assert result.kind in ("insufficient", "conflict")

        # The store agrees with what callers were told
        stored = db.occupied_in_range(band.from_hz, band.to_hz)
        assert sorted(stored) == sorted(all_values)
        for holder_id, result in results.items():
            if result.ok:
                assert all(stored[value].holder_id == holder_id for value in result.data)
