"""
Twitch chat adapter for vtuber-bridge
Joins a Twitch channel and feeds its chat messages and commands to the bridge.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from loguru import logger
from twitchAPI.chat import Chat, ChatMessage, EventData
from twitchAPI.oauth import UserAuthenticator
from twitchAPI.twitch import Twitch
from twitchAPI.type import AuthScope, ChatEvent

from ..bridge import VtuberBridge
from ..config_manager import TwitchConfig
from ..i18n import t

USER_SCOPE = [AuthScope.CHAT_READ, AuthScope.CHAT_EDIT]


def split_message(text: str, limit: int) -> List[str]:
    """Split ``text`` into chunks of at most ``limit`` characters, preferring line breaks."""
    chunks = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(text[:cut])
        text = text[cut:].lstrip("\n")
    if text:
        chunks.append(text)
    return [chunk for chunk in chunks if chunk.strip()]


@dataclass
class TwitchChatSession:
    """A Twitch chat message seen as a bridge chat session."""

    adapter: "TwitchChatAdapter"
    room: str
    room_id: str
    user: str
    content: str
    images: List[str] = field(default_factory=list)
    platform: str = "twitch"
    channel_type: str = "text"

    @property
    def channel_id(self) -> str:
        return self.room_id or self.room

    async def send(self, text: str) -> None:
        await self.adapter.send_message(self.room, text)

    async def send_queued(self, text: str) -> None:
        await self.adapter.send_queued(self.room, text)


class TwitchChatAdapter:
    """
    Hosts a ``VtuberBridge`` on Twitch chat.
    """

    def __init__(self, config: TwitchConfig, bridge: VtuberBridge):
        """
        Args:
            config: Twitch credentials and reply limits.
            bridge: The bridge receiving chat messages and commands.
        """
        self.config = config
        self.bridge = bridge

        self.twitch: Optional[Twitch] = None
        self.chat: Optional[Chat] = None
        self.is_connected = False

        self._room_locks: Dict[str, asyncio.Lock] = {}
        self._stopped = asyncio.Event()

        logger.bind(component="twitch_chat").info(t("twitch.initialized"))

    async def initialize(self) -> bool:
        """
        Authenticate against the Twitch API and create the chat client.

        Returns:
            bool: True if initialization successful
        """
        if not self.config.enabled:
            logger.bind(component="twitch_chat").info(t("twitch.disabled"))
            return False

        try:
            self.twitch = await Twitch(self.config.app_id, self.config.app_secret)
            logger.bind(component="twitch_chat").info(
                f"Requesting user OAuth with scopes: {USER_SCOPE}"
            )
            authenticator = UserAuthenticator(self.twitch, USER_SCOPE)
            token, refresh_token = await authenticator.authenticate()
            await self.twitch.set_user_authentication(token, USER_SCOPE, refresh_token)

            self.chat = await Chat(self.twitch)
            logger.bind(component="twitch_chat").info("Chat client initialized")
            return True

        except Exception as e:
            logger.bind(component="twitch_chat").error(
                t("twitch.init_error", error=str(e))
            )
            return False

    async def connect(self) -> bool:
        """
        Register chat handlers and start the chat loop.

        Returns:
            bool: True if connection successful
        """
        if not self.chat:
            logger.bind(component="twitch_chat").error(t("twitch.not_initialized"))
            return False

        try:
            self.chat.register_event(ChatEvent.READY, self._on_ready)
            self.chat.register_event(ChatEvent.MESSAGE, self._on_message)
            self.chat.start()
            self.is_connected = True
            return True
        except Exception as e:
            logger.bind(component="twitch_chat").error(
                t("twitch.connection_error", error=str(e))
            )
            return False

    async def run(self) -> None:
        """Initialize, connect and serve until ``disconnect`` is called."""
        if not await self.initialize() or not await self.connect():
            return
        await self._stopped.wait()

    async def disconnect(self) -> None:
        """Stop the chat loop and close the Twitch API client."""
        if self.chat:
            logger.bind(component="twitch_chat").info("Stopping Twitch chat loop")
            self.chat.stop()
        if self.twitch:
            await self.twitch.close()

        self.is_connected = False
        self._stopped.set()
        logger.bind(component="twitch_chat").info(t("twitch.disconnected"))

    async def _on_ready(self, ready_event: EventData) -> None:
        """Called when chat signals READY: join the configured channel."""
        await ready_event.chat.join_room(self.config.channel_name)
        logger.bind(component="twitch_chat").info(
            t("twitch.connected", channel=self.config.channel_name)
        )

    async def _on_message(self, msg: ChatMessage) -> None:
        """
        Route a chat message: commands get a status reply, everything else is
        forwarded to the channel's vtuber connection.
        """
        try:
            session = TwitchChatSession(
                adapter=self,
                room=msg.room.name,
                room_id=str(msg.room.room_id or ""),
                user=msg.user.name,
                content=msg.text,
            )
            logger.bind(component="twitch_chat").debug(
                f"[Twitch] MESSAGE in {session.room}: {session.user}: {session.content}"
            )

            reply = await self.bridge.handle_command(session)
            if reply is not None:
                await session.send(reply)
            else:
                await self.bridge.on_message(session)
        except Exception as e:
            logger.bind(component="twitch_chat").error(
                t("twitch.message_error", error=str(e))
            )

    async def send_message(self, room: str, text: str) -> None:
        """Send ``text`` to ``room``, split to the configured message length."""
        if self.chat is None:
            logger.bind(component="twitch_chat").warning(t("twitch.not_initialized"))
            return
        for chunk in split_message(text, self.config.max_message_length):
            await self.chat.send_message(room, chunk)

    async def send_queued(self, room: str, text: str) -> None:
        """Send ``text`` after every previously queued reply of ``room``."""
        lock = self._room_locks.setdefault(room, asyncio.Lock())
        async with lock:
            await self.send_message(room, text)
            await asyncio.sleep(self.config.queued_send_delay)
