"""
Unit tests for KeyedLocks.

Tests verify:
- Same-key callers serialize, different keys do not contend
- A key's lock is dropped once nobody holds or waits for it
"""

import asyncio

import pytest

from src.domain.locks import KeyedLocks


class TestSerialization:
    @pytest.mark.asyncio
    async def test_same_key_serializes(self) -> None:
        locks = KeyedLocks()
        inside = 0
        peak = 0

        async def worker() -> None:
            nonlocal inside, peak
            async with locks("acc"):
                inside += 1
                peak = max(peak, inside)
                await asyncio.sleep(0)
                inside -= 1

        await asyncio.gather(*(worker() for _ in range(5)))

        assert peak == 1

    @pytest.mark.asyncio
    async def test_different_keys_run_together(self) -> None:
        locks = KeyedLocks()
        entered = asyncio.Event()

        async def first() -> None:
            async with locks("a"):
                await entered.wait()

        async def second() -> None:
            async with locks("b"):
                entered.set()

        await asyncio.wait_for(asyncio.gather(first(), second()), timeout=1)


class TestEviction:
    @pytest.mark.asyncio
    async def test_lock_dropped_after_release(self) -> None:
        locks = KeyedLocks()

        async with locks("acc"):
            assert len(locks) == 1

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_lock_kept_while_waiters_remain(self) -> None:
        locks = KeyedLocks()
        seen: list[int] = []

        async def worker() -> None:
            async with locks("acc"):
                seen.append(len(locks))
                await asyncio.sleep(0)

        await asyncio.gather(*(worker() for _ in range(3)))

        assert seen == [1, 1, 1]
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_lock_dropped_when_body_raises(self) -> None:
        locks = KeyedLocks()

        with pytest.raises(RuntimeError):
            async with locks("acc"):
                raise RuntimeError("boom")

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_many_distinct_keys_do_not_accumulate(self) -> None:
        locks = KeyedLocks()

        for i in range(1000):
            async with locks(f"user{i}@example.com"):
                pass

        assert len(locks) == 0
