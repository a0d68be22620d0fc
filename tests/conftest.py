import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

import pytest
from websockets.exceptions import ConnectionClosedError

from vtuber_bridge.config_manager import Config
from vtuber_bridge.i18n import set_language

_CLOSE = object()


@dataclass
class FakeSession:
    """Chat session recording the replies sent through it."""

    platform: str = "discord"
    channel_id: str = "42"
    channel_type: str = "0"
    content: str = ""
    images: List[str] = field(default_factory=list)
    replies: List[Tuple[str, str]] = field(default_factory=list)
    fail: bool = False

    async def send(self, text: str) -> None:
        if self.fail:
            raise RuntimeError("chat unavailable")
        self.replies.append(("send", text))

    async def send_queued(self, text: str) -> None:
        if self.fail:
            raise RuntimeError("chat unavailable")
        self.replies.append(("queued", text))

    @property
    def texts(self) -> List[str]:
        return [text for _, text in self.replies]


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self):
        self.sent: List[str] = []
        self.closed = False
        self.fail_send = False
        self._incoming: asyncio.Queue = asyncio.Queue()

    @property
    def sent_messages(self) -> List[dict]:
        return [json.loads(frame) for frame in self.sent]

    async def send(self, data: str) -> None:
        if self.fail_send:
            raise ConnectionError("socket is gone")
        self.sent.append(data)

    def feed(self, frame: Any) -> None:
        self._incoming.put_nowait(frame)

    def feed_json(self, **data: Any) -> None:
        self.feed(json.dumps(data))

    def remote_close(self) -> None:
        self._incoming.put_nowait(_CLOSE)

    def drop(self) -> None:
        self._incoming.put_nowait(ConnectionClosedError(None, None))

    async def close(self) -> None:
        self.closed = True
        self._incoming.put_nowait(_CLOSE)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._incoming.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeConnector:
    """Connector handing out FakeWebSocket instances."""

    def __init__(self):
        self.urls: List[str] = []
        self.sockets: List[FakeWebSocket] = []
        self.error: Optional[BaseException] = None
        self.gate: Optional[asyncio.Event] = None

    async def __call__(self, url: str) -> FakeWebSocket:
        self.urls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        ws = FakeWebSocket()
        self.sockets.append(ws)
        return ws

    @property
    def last(self) -> FakeWebSocket:
        return self.sockets[-1]


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


@pytest.fixture(autouse=True)
def english():
    set_language("en")
    yield
    set_language("en")


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def reasoning_config() -> Config:
    return Config.model_validate(
        {
            "bridge_config": {
                "reasoning_model": True,
                "show_reasoning": True,
                "remove_emoji": True,
            }
        }
    )


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()
