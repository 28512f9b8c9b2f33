"""
Shared fixtures for signaling tests
===================================

FakeSocket stands in for a FastAPI WebSocket: it records every frame
passed to ``send_json`` and can be told to fail or delay sends.
StalledSocket never finishes a send, like a client that stopped reading.
"""

import asyncio

import pytest

from lifecycle import LifecycleCoordinator
from registry import ConnectionRegistry
from rooms import SessionTable


class FakeSocket:
    """Mock WebSocket connection"""

    def __init__(self, fail=False, delay=0.0):
        self.fail = fail
        self.delay = delay
        self.frames = []

    async def send_json(self, data):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("socket closed")
        self.frames.append(data)

    def events(self, name=None):
        return [f["data"] for f in self.frames if name is None or f["event"] == name]

    def names(self):
        return [f["event"] for f in self.frames]


class StalledSocket(FakeSocket):
    """Mock connection whose transport never drains"""

    def __init__(self):
        super().__init__()
        self.never = asyncio.Event()

    async def send_json(self, data):
        await self.never.wait()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def table():
    return SessionTable()


@pytest.fixture
def coordinator(registry, table):
    return LifecycleCoordinator(registry, table)
