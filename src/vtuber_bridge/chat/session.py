from typing import List, Protocol, runtime_checkable


@runtime_checkable
class ChatSession(Protocol):
    """One inbound chat message and the channel it came from.

    The bridge derives the session key from ``platform``, ``channel_id`` and
    ``channel_type`` and replies through ``send`` and ``send_queued``.
    """

    platform: str
    channel_id: str
    channel_type: str
    content: str
    images: List[str]

    async def send(self, text: str) -> None:
        """Send a single reply to the channel."""
        ...

    async def send_queued(self, text: str) -> None:
        """Send a reply that must appear after previously queued replies."""
        ...
