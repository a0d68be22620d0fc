"""
Bridge between chat channels and the vtuber backend.

The host application creates one ``VtuberBridge``, feeds it every inbound chat
message and calls ``dispose()`` on shutdown.
"""

from typing import Optional

from loguru import logger

from .chat.session import ChatSession
from .commands import CommandAction, parse_command
from .config_manager import Config
from .connection import ConnectionManager, Connector
from .i18n import t
from .registry import ConnectionEntry, SessionKey, SessionRegistry


class VtuberBridge:
    """Per-channel vtuber connections driven by chat commands and messages."""

    def __init__(
        self,
        config: Config,
        registry: Optional[SessionRegistry] = None,
        connector: Optional[Connector] = None,
    ):
        self.config = config
        self.registry = registry if registry is not None else SessionRegistry()
        self._connector = connector

    async def up(self, session: ChatSession, history_uid: str = "") -> str:
        """
        Connect the vtuber for the session's channel, or rebind the session of
        an existing connection.

        Args:
            session: The chat session issuing the command.
            history_uid: Backend history to resume; empty creates a new one.

        Returns:
            str: Status reply; the connection result is reported later.
        """
        key = SessionKey.from_session(session)
        entry = self.registry.get(key)
        if entry is not None:
            entry.session = session
            return t("bridge.already_connected")

        connection = ConnectionManager(
            key,
            self.registry,
            self.config.bridge_config,
            connector=self._connector,
            ws_log=self.config.system_config.ws_log,
        )
        self.registry.put(
            key,
            ConnectionEntry(
                session=session, connection=connection, history_uid=history_uid or ""
            ),
        )
        connection.start()
        logger.bind(component="bridge").info(
            f"Connecting session {key} to {connection.url}"
            + (f" with history {history_uid}" if history_uid else "")
        )
        return t("bridge.connecting")

    async def down(self, session: ChatSession) -> str:
        """Close the vtuber connection of the session's channel."""
        key = SessionKey.from_session(session)
        entry = self.registry.get(key)
        if entry is None:
            return t("bridge.not_connected")

        entry.session = session
        entry.connection.close()
        logger.bind(component="bridge").info(f"Closing session: {key}")
        return t("bridge.disconnecting")

    async def handle_command(self, session: ChatSession) -> Optional[str]:
        """
        Run the ``vtuber`` command contained in the session's message.

        Returns:
            The status reply, or None when the message is not a command.
        """
        prefix = self.config.chat_config.command_prefix
        command = parse_command(session.content, prefix)
        if command is None:
            return None
        if command.action is CommandAction.UP:
            return await self.up(session, command.history_uid)
        if command.action is CommandAction.DOWN:
            return await self.down(session)
        return t("bridge.usage", prefix=prefix)

    async def on_message(self, session: ChatSession) -> None:
        """Forward a chat message to the channel's vtuber connection, if any."""
        key = SessionKey.from_session(session)
        entry = self.registry.get(key)
        if entry is None:
            return

        # Replies follow the most recent session of the channel
        entry.session = session
        await entry.connection.send_text_input(session.content, session.images)

    async def dispose(self) -> None:
        """Close every connection and clear the registry."""
        logger.bind(component="bridge").info(
            f"Disposing bridge with {len(self.registry)} connection(s)"
        )
        await self.registry.close_all()
