"""Pytest configuration and fixtures for cronkit tests."""

import asyncio
from datetime import datetime

import pytest

from cronkit.engines.base import BaseEngine
from cronkit.engines.local import LocalEngine
from cronkit.handle import Handle

# 50ms before a minute boundary, so "* * * * *" ticks almost immediately
ALMOST_NEXT_MINUTE = datetime(2024, 6, 15, 10, 0, 59, 950000)


class ScriptedEngine(BaseEngine):
    """Engine that grants a fixed number of ticks to every registration."""

    def __init__(self, ticks: int = 1):
        self.ticks = ticks
        self.created: list[tuple] = []
        self.handles: list[Handle] = []
        self.requests: dict[str, list[bool]] = {}
        self.released: list[str] = []
        self._remaining: dict[int, int] = {}

    def create_registration(self, name, schedule, backoff_schedule=None):
        self.created.append((name, schedule, backoff_schedule))
        handle = Handle(len(self.created), name, self)
        self.handles.append(handle)
        self._remaining[handle.rid] = self.ticks
        self.requests[name] = []
        return handle

    async def await_next_tick(self, handle, last_success):
        self.requests[handle.name].append(last_success)
        await asyncio.sleep(0)
        if handle.closed or self._remaining.get(handle.rid, 0) == 0:
            return False
        self._remaining[handle.rid] -= 1
        return True

    def release(self, handle):
        self.released.append(handle.name)
        self._remaining.pop(handle.rid, None)


@pytest.fixture
def scripted_engine():
    """Factory for engines granting a fixed number of ticks."""
    return ScriptedEngine


@pytest.fixture
def fast_engine():
    """LocalEngine whose clock is always just before a minute boundary."""
    return LocalEngine(time_source=lambda: ALMOST_NEXT_MINUTE)


@pytest.fixture
def engine():
    """LocalEngine on the real clock."""
    return LocalEngine()
