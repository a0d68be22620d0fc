"""
Per-channel registry of live backend connections.

All access happens on the asyncio event loop, so no locking is done here.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterator, NamedTuple, Optional, Tuple

from loguru import logger

from .chat.session import ChatSession

if TYPE_CHECKING:
    from .connection import ConnectionManager


class SessionKey(NamedTuple):
    """Identifies one logical chat channel."""

    platform: str
    channel_id: str
    channel_type: str

    @classmethod
    def from_session(cls, session: ChatSession) -> "SessionKey":
        return cls(
            str(session.platform), str(session.channel_id), str(session.channel_type)
        )

    def __str__(self) -> str:
        return f"{self.platform};{self.channel_id};{self.channel_type}"


@dataclass
class ConnectionEntry:
    """Latest chat session, connection handle and stored history id of a key.

    An empty ``history_uid`` means a new history is created on open.
    """

    session: ChatSession
    connection: "ConnectionManager"
    history_uid: str = ""


class SessionRegistry:
    """Maps session keys to their single active connection entry."""

    def __init__(self):
        self._entries: Dict[SessionKey, ConnectionEntry] = {}

    def get(self, key: SessionKey) -> Optional[ConnectionEntry]:
        return self._entries.get(key)

    def put(self, key: SessionKey, entry: ConnectionEntry) -> None:
        """Register ``entry`` for ``key``, replacing any previous entry."""
        self._entries[key] = entry

    def remove(self, key: SessionKey) -> Optional[ConnectionEntry]:
        entry = self._entries.pop(key, None)
        if entry is not None:
            logger.bind(component="bridge").info(f"Delete session: {key}")
        return entry

    def entries(self) -> Iterator[Tuple[SessionKey, ConnectionEntry]]:
        return iter(list(self._entries.items()))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def close_all(self) -> None:
        """Close every live connection and clear the registry.

        Each connection's own close path removes its entry; the final clear
        only drops entries whose close did not complete.
        """
        connections = [entry.connection for _, entry in self.entries()]
        for connection in connections:
            connection.close()
        for connection in connections:
            await connection.wait_closed()
        self._entries.clear()
