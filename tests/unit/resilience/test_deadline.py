"""Unit tests for deadlines and their propagation."""
import asyncio
from datetime import timedelta

import pytest

from depcache.kernel.errors import TimeoutError
from depcache.resilience import Deadline, DeadlineContext, DeadlineExceededError, deadline_aware


class TestDeadline:
    def test_after_accepts_seconds_and_timedelta(self):
        assert 4 < Deadline.after(5).remaining_seconds <= 5
        assert 4 < Deadline.after(timedelta(seconds=5)).remaining_seconds <= 5

    def test_expired(self):
        dl = Deadline.after(-1)
        assert dl.is_expired
        assert dl.remaining_seconds == 0.0

    def test_earliest_wins(self):
        soon = Deadline.after(1)
        later = Deadline.after(10)
        assert soon.earliest(later) is soon
        assert later.earliest(soon) is soon
        assert later.earliest(None) is later


class TestDeadlineContext:
    def test_set_and_get(self):
        dl = Deadline.after(5)
        token = DeadlineContext.set(dl)
        try:
            assert DeadlineContext.get() is dl
        finally:
            DeadlineContext.reset(token)

    def test_scoped_restores_previous(self):
        async def run():
            dl = Deadline.after(10)
            before = DeadlineContext.get()
            async with DeadlineContext.scoped(dl) as d:
                assert DeadlineContext.get() is dl
                assert d is dl
            assert DeadlineContext.get() is before

        asyncio.run(run())

    def test_raise_if_exceeded(self):
        token = DeadlineContext.set(Deadline.after(-1))
        try:
            with pytest.raises(DeadlineExceededError):
                DeadlineContext.raise_if_exceeded()
        finally:
            DeadlineContext.reset(token)

    def test_exceeded_is_application_timeout(self):
        assert issubclass(DeadlineExceededError, TimeoutError)
        assert DeadlineExceededError("late").code == "deadline_exceeded"


class TestDeadlineAware:
    def test_completes_within_deadline(self):
        async def fast():
            return "ok"

        assert asyncio.run(deadline_aware(fast(), Deadline.after(5))) == "ok"

    def test_no_deadline_at_all(self):
        async def fast():
            return "ok"

        assert asyncio.run(deadline_aware(fast())) == "ok"

    def test_raises_when_already_expired(self):
        async def run():
            with pytest.raises(DeadlineExceededError):
                await deadline_aware(asyncio.sleep(0), Deadline.after(-1))

        asyncio.run(run())

    def test_raises_on_timeout(self):
        async def slow():
            await asyncio.sleep(10)

        with pytest.raises(DeadlineExceededError):
            asyncio.run(deadline_aware(slow(), Deadline.after(0.01)))

    def test_context_deadline_applies(self):
        async def slow():
            await asyncio.sleep(10)

        async def run():
            async with DeadlineContext.scoped(Deadline.after(0.01)):
                await deadline_aware(slow())

        with pytest.raises(DeadlineExceededError):
            asyncio.run(run())

    def test_explicit_deadline_cannot_extend_context(self):
        async def slow():
            await asyncio.sleep(10)

        async def run():
            async with DeadlineContext.scoped(Deadline.after(0.01)):
                await deadline_aware(slow(), Deadline.after(60))

        with pytest.raises(DeadlineExceededError):
            asyncio.run(run())
