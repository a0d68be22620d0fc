"""
WebSocket message types exchanged with the vtuber backend.

Inbound frames are decoded once by ``decode_message`` into one of the models
of the ``InboundMessage`` union, keyed by the ``type`` field. Outbound models
are serialized with ``encode_message``.
"""

import json
from typing import Annotated, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    TypeAdapter,
    model_serializer,
)


class MessageDecodeError(ValueError):
    """Raised when an inbound frame cannot be decoded into a message."""


class DisplayText(BaseModel):
    """Text shown alongside a synthesized audio chunk.

    Extra keys are kept so the payload can be echoed back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    text: str
    avatar: Optional[str] = None
    name: Optional[str] = None

    @model_serializer(mode="wrap")
    def _dump_received_keys(self, handler: SerializerFunctionWrapHandler):
        # Optional keys the backend left out stay out of the echo
        data = handler(self)
        received = self.model_fields_set | set(self.model_extra or {})
        return {key: value for key, value in data.items() if key in received}


class VtuberMessage(BaseModel):
    """Base for all messages. Unknown fields sent by the backend are ignored."""

    model_config = ConfigDict(extra="ignore")


# Inbound


class FullTextMessage(VtuberMessage):
    type: Literal["full-text"] = "full-text"
    text: str


class AudioMessage(VtuberMessage):
    type: Literal["audio"] = "audio"
    audio: Optional[str] = None
    display_text: DisplayText


class ControlMessage(VtuberMessage):
    type: Literal["control"] = "control"
    text: str


class BackendSynthCompleteMessage(VtuberMessage):
    type: Literal["backend-synth-complete"] = "backend-synth-complete"


class HistoryCreatedMessage(VtuberMessage):
    type: Literal["new-history-created"] = "new-history-created"
    history_uid: str


class UnknownMessage(VtuberMessage):
    """A well-formed message whose type the bridge does not handle."""

    type: str


InboundMessage = Annotated[
    Union[
        FullTextMessage,
        AudioMessage,
        ControlMessage,
        BackendSynthCompleteMessage,
        HistoryCreatedMessage,
    ],
    Field(discriminator="type"),
]

_inbound_adapter = TypeAdapter(InboundMessage)
INBOUND_TYPES = frozenset(
    {
        "full-text",
        "audio",
        "control",
        "backend-synth-complete",
        "new-history-created",
    }
)


# Outbound


class TextInputMessage(VtuberMessage):
    type: Literal["text-input"] = "text-input"
    text: str
    images: List[str] = Field(default_factory=list)


class AudioPlayStartMessage(VtuberMessage):
    type: Literal["audio-play-start"] = "audio-play-start"
    display_text: DisplayText
    forwarded: bool = True


class FetchAndSetHistoryMessage(VtuberMessage):
    type: Literal["fetch-and-set-history"] = "fetch-and-set-history"
    history_uid: str


class CreateNewHistoryMessage(VtuberMessage):
    type: Literal["create-new-history"] = "create-new-history"


class FrontendPlaybackCompleteMessage(VtuberMessage):
    type: Literal["frontend-playback-complete"] = "frontend-playback-complete"


def decode_message(raw: Union[str, bytes]) -> Union[InboundMessage, UnknownMessage]:
    """
    Decode one inbound WebSocket frame.

    Args:
        raw: The frame payload (binary frames are decoded as UTF-8).

    Returns:
        The typed message, or ``UnknownMessage`` for a well-formed message of a
        type the bridge does not handle.

    Raises:
        MessageDecodeError: If the frame is not a JSON object with a string
            ``type``, or a known type has the wrong shape.
    """
    # ValueError covers bad UTF-8, bad JSON and over-long integer literals;
    # deeply nested arrays raise RecursionError
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise MessageDecodeError(f"Invalid JSON frame: {e}") from e

    if not isinstance(data, dict):
        raise MessageDecodeError("Frame is not a JSON object")
    msg_type = data.get("type")
    if not isinstance(msg_type, str):
        raise MessageDecodeError("Frame has no string 'type' field")

    if msg_type not in INBOUND_TYPES:
        return UnknownMessage(type=msg_type)

    try:
        return _inbound_adapter.validate_python(data)
    except ValueError as e:
        raise MessageDecodeError(f"Invalid '{msg_type}' message: {e}") from e


def encode_message(message: VtuberMessage) -> str:
    """Serialize an outbound message to a compact JSON text frame."""
    return message.model_dump_json()
