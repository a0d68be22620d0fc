"""
Lifecycle of one WebSocket connection to the vtuber backend.

CONNECTING -> OPEN -> CLOSED, with no way back: a closed connection is
removed from the registry and must be re-established with a new ``up``.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional

import websockets
from loguru import logger
from websockets.exceptions import ConnectionClosedError, WebSocketException

from .chat.session import ChatSession
from .config_manager import BridgeConfig
from .i18n import t
from .logging_utils import set_session_key
from .messages import VtuberMessage, encode_message
from .registry import ConnectionEntry, SessionKey, SessionRegistry
from .translator import ProtocolTranslator

# Audio messages carry base64 encoded speech
MAX_FRAME_SIZE = 16 * 2**20

Connector = Callable[[str], Awaitable[Any]]


def default_connector(url: str) -> Awaitable[Any]:
    return websockets.connect(url, max_size=MAX_FRAME_SIZE)


class ConnectionState(Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class ConnectionManager:
    """Owns one backend connection and routes its events.

    Events of a connection are handled by a single reader task, strictly in
    arrival order.
    """

    def __init__(
        self,
        key: SessionKey,
        registry: SessionRegistry,
        config: BridgeConfig,
        connector: Optional[Connector] = None,
        ws_log: bool = False,
    ):
        """
        Args:
            key: Session key of the channel this connection serves.
            registry: Registry holding this connection's entry.
            config: Backend endpoint and reply post-processing settings.
            connector: Coroutine factory opening the WebSocket.
            ws_log: Log every frame at DEBUG level.
        """
        self.key = key
        self.url = config.ws_url
        self.state = ConnectionState.CONNECTING
        self.ws_log = ws_log
        self.translator = ProtocolTranslator(config, self.send, self._current_session)

        self._registry = registry
        self._connector = connector or default_connector
        self._ws = None
        self._task: Optional[asyncio.Task] = None
        self._close_task: Optional[asyncio.Task] = None
        self._notice_task: Optional[asyncio.Future] = None
        self._closing = False

    def start(self) -> None:
        """Start connecting in the background."""
        self._task = asyncio.create_task(self._run(), name=f"vtuber-ws:{self.key}")
        self._task.add_done_callback(self._on_task_done)

    def close(self) -> None:
        """Request the connection to close.

        Returns immediately; the close event removes the registry entry.
        """
        if self.state is ConnectionState.CLOSED or self._closing:
            return
        self._closing = True
        if self._ws is not None:
            self._close_task = asyncio.create_task(self._close_ws())
        elif self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the connection reached CLOSED and the chat was told."""
        if self._task is not None:
            await asyncio.wait({self._task})
        if self._close_task is not None:
            await asyncio.wait({self._close_task})
        # Only set once the reader task is done
        if self._notice_task is not None:
            await asyncio.wait({self._notice_task})

    async def send(self, message: VtuberMessage) -> None:
        """Send a message to the backend.

        Failures are logged and not retried.
        """
        payload = encode_message(message)
        if self._ws is None or self.state is not ConnectionState.OPEN:
            logger.bind(component="vtuber_ws").warning(
                f"Dropping message on {self.state.value} connection: {payload}"
            )
            return
        if self.ws_log:
            logger.bind(component="vtuber_ws").debug(f"WebSocket send: {payload}")
        try:
            await self._ws.send(payload)
        except Exception as e:
            logger.bind(component="vtuber_ws").warning(
                f"Failed to send {payload}: {e}"
            )

    async def send_text_input(self, text: str, images: Optional[List[str]] = None) -> bool:
        """Forward user text to the backend if the connection is open."""
        if self.state is not ConnectionState.OPEN:
            logger.bind(component="vtuber_ws").debug(
                f"Connection {self.key} is {self.state.value}, text not forwarded"
            )
            return False
        await self.send(self.translator.text_input(text, images))
        return True

    def _entry(self) -> Optional[ConnectionEntry]:
        entry = self._registry.get(self.key)
        if entry is not None and entry.connection is self:
            return entry
        return None

    def _current_session(self) -> Optional[ChatSession]:
        entry = self._entry()
        return entry.session if entry else None

    async def _run(self) -> None:
        set_session_key(str(self.key))
        try:
            try:
                self._ws = await self._connector(self.url)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                await self._on_error(e)
                return

            await self._on_open()
            async for raw in self._ws:
                if self.ws_log:
                    logger.bind(component="vtuber_ws").debug(f"WebSocket receive: {raw}")
                await self.translator.handle_frame(raw)
        except ConnectionClosedError as e:
            await self._on_error(e)
        except Exception as e:
            logger.bind(component="vtuber_ws").exception(
                f"Reader task of {self.key} failed: {e}"
            )
            await self._on_error(e)
        finally:
            if self._ws is not None:
                await self._close_ws()
            await self._on_close()

    async def _close_ws(self) -> None:
        try:
            await self._ws.close()
        except Exception as e:
            logger.bind(component="vtuber_ws").warning(
                f"Error closing WebSocket {self.url}: {e}"
            )

    async def _on_open(self) -> None:
        self.state = ConnectionState.OPEN
        entry = self._entry()
        history_uid = entry.history_uid if entry else ""

        # The backend must know which history to use before any user text
        await self.send(self.translator.history_command(history_uid))
        await self._notify(t("bridge.ready"), queued=True)
        logger.bind(component="vtuber_ws").info(
            f"WebSocket connected: {{session: {self.key}, url: {self.url}}}"
        )

    async def _on_error(self, error: BaseException) -> None:
        logger.bind(component="vtuber_ws").warning(
            f"WebSocket error: {{session: {self.key}, url: {self.url}, error: {error!r}}}"
        )
        await self._notify(t("bridge.error"))

    async def _on_close(self) -> None:
        if self.state is ConnectionState.CLOSED:
            return
        self.state = ConnectionState.CLOSED
        session = self._current_session()
        if session is not None:
            self._registry.remove(self.key)
            await self._deliver(session, t("bridge.closed"))
        logger.bind(component="vtuber_ws").info(
            f"WebSocket closed: {{session: {self.key}, url: {self.url}}}"
        )

    def _on_task_done(self, task: asyncio.Task) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.bind(component="vtuber_ws").error(
                f"Reader task of {self.key} ended with: {task.exception()!r}"
            )

        # A task cancelled before its first step never runs its close path
        if self.state is not ConnectionState.CLOSED:
            self.state = ConnectionState.CLOSED
            session = self._current_session()
            if session is not None:
                self._registry.remove(self.key)
                self._notice_task = asyncio.ensure_future(
                    self._deliver(session, t("bridge.closed"))
                )

    async def _notify(self, text: str, queued: bool = False) -> None:
        session = self._current_session()
        if session is not None:
            await self._deliver(session, text, queued)

    async def _deliver(
        self, session: ChatSession, text: str, queued: bool = False
    ) -> None:
        try:
            if queued:
                await session.send_queued(text)
            else:
                await session.send(text)
        except Exception as e:
            logger.bind(component="vtuber_ws").warning(
                f"Failed to notify chat session {self.key}: {e}"
            )
