import asyncio

import pytest

from services.errors import AllocationError
from services.sequence_allocator import SequenceAllocator


def test_first_allocation_is_one_then_increments(db_path):
    async def run():
        allocator = SequenceAllocator(db_path)
        return [await allocator.next_sequence(16) for _ in range(3)]

    assert asyncio.run(run()) == [1, 2, 3]


def test_facilities_count_independently(db_path):
    async def run():
        allocator = SequenceAllocator(db_path)
        a = await allocator.next_sequence(16)
        b = await allocator.next_sequence(21)
        c = await allocator.next_sequence(16)
        return a, b, c, await allocator.peek(16), await allocator.peek(7)

    assert asyncio.run(run()) == (1, 1, 2, 2, 0)


def test_concurrent_allocations_are_distinct(db_path):
    async def run():
        allocators = [SequenceAllocator(db_path) for _ in range(4)]
        calls = [allocators[i % 4].next_sequence(16) for i in range(20)]
        return await asyncio.gather(*calls)

    values = asyncio.run(run())
    assert sorted(values) == list(range(1, 21))


def test_storage_failure_raises_allocation_error(tmp_path):
    # no schema in this file
    allocator = SequenceAllocator(str(tmp_path / "empty.db"))
    with pytest.raises(AllocationError):
        asyncio.run(allocator.next_sequence(16))


def test_negative_facility_is_rejected(db_path):
    with pytest.raises(AllocationError):
        asyncio.run(SequenceAllocator(db_path).next_sequence(-1))
