"""Shared fakes for the bot tests.

- FakeWebSocket: scripted inbound frames, records outbound ones
- RecordingConnection: stands in for Connection in dispatch tests
- StubScheduler: records started tasks and runs them on demand, in order
"""
import json
from typing import Any, List, Optional

import pytest
from trio_websocket import CloseReason, ConnectionClosed

from core.dispatcher import Bot
from core.models import Message

BOT_ID = "U1"


class FakeWebSocket:
    def __init__(self, frames: Optional[List[Any]] = None) -> None:
        self.frames = list(frames or [])
        self.sent: List[str] = []
        self.closed = False

    async def get_message(self) -> Any:
        if not self.frames:
            raise ConnectionClosed(CloseReason(1000, "bye"))
        return self.frames.pop(0)

    async def send_message(self, data: str) -> None:
        self.sent.append(data)

    async def aclose(self) -> None:
        self.closed = True

    def sent_frames(self) -> List[dict]:
        return [json.loads(s) for s in self.sent]


class RecordingConnection:
    def __init__(self) -> None:
        self.sent: List[Message] = []

    async def send(self, message: Message) -> None:
        self.sent.append(message)


class StubScheduler:
    def __init__(self) -> None:
        self.pending: List[tuple] = []
        self.names: List[str] = []

    def start_soon(self, async_fn, *args, name=None) -> None:
        self.pending.append((async_fn, args))
        self.names.append(name)

    async def run_all(self) -> None:
        while self.pending:
            async_fn, args = self.pending.pop(0)
            await async_fn(*args)


def event_frame(text: str, user: str = "U2", channel: str = "C1", **extra: Any) -> str:
    event = {"type": "message", "text": text, "user": user, "channel": channel}
    event.update(extra)
    return json.dumps(event)


@pytest.fixture
def connection() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture
def scheduler() -> StubScheduler:
    return StubScheduler()


@pytest.fixture
def bot(connection: RecordingConnection) -> Bot:
    return Bot(connection, BOT_ID)  # type: ignore[arg-type]
