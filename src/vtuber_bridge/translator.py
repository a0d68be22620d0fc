from typing import Awaitable, Callable, Dict, List, Optional, Union

from loguru import logger

from .chat.session import ChatSession
from .config_manager import BridgeConfig
from .logging_utils import truncate_and_hash
from .messages import (
    AudioMessage,
    AudioPlayStartMessage,
    BackendSynthCompleteMessage,
    ControlMessage,
    CreateNewHistoryMessage,
    FetchAndSetHistoryMessage,
    FrontendPlaybackCompleteMessage,
    FullTextMessage,
    HistoryCreatedMessage,
    MessageDecodeError,
    TextInputMessage,
    VtuberMessage,
    decode_message,
)
from .text_processing import finalize_turn

CHAIN_START = "conversation-chain-start"
CHAIN_END = "conversation-chain-end"

SendFrame = Callable[[VtuberMessage], Awaitable[None]]
SessionGetter = Callable[[], Optional[ChatSession]]


class ProtocolTranslator:
    """Translates between backend WebSocket messages and chat replies.

    One instance exists per connection and owns that connection's accumulated
    display text.
    """

    def __init__(
        self,
        config: BridgeConfig,
        send_frame: SendFrame,
        get_session: SessionGetter,
    ):
        """
        Args:
            config: Reply post-processing settings.
            send_frame: Coroutine sending an outbound message on the connection.
            get_session: Returns the latest chat session of the channel, if any.
        """
        self.config = config
        self._send_frame = send_frame
        self._get_session = get_session
        self.buffer = ""

        self._message_handlers = self._init_message_handlers()

    def _init_message_handlers(self) -> Dict[str, Callable]:
        """Initialize message type to handler mapping"""
        return {
            "full-text": self._handle_full_text,
            "audio": self._handle_audio,
            "control": self._handle_control,
            "backend-synth-complete": self._handle_synth_complete,
            "new-history-created": self._handle_history_created,
        }

    @staticmethod
    def history_command(
        history_uid: str,
    ) -> Union[FetchAndSetHistoryMessage, CreateNewHistoryMessage]:
        """The first message of a connection: resume a history or create one."""
        if history_uid:
            return FetchAndSetHistoryMessage(history_uid=history_uid)
        return CreateNewHistoryMessage()

    @staticmethod
    def text_input(text: str, images: Optional[List[str]] = None) -> TextInputMessage:
        return TextInputMessage(text=text, images=list(images or []))

    async def handle_frame(self, raw: Union[str, bytes]) -> None:
        """
        Decode one inbound frame and dispatch it by type.

        Malformed frames are logged with their payload and dropped without
        touching the buffer.
        """
        try:
            message = decode_message(raw)
        except MessageDecodeError as e:
            sample = truncate_and_hash(raw)
            logger.bind(component="vtuber_ws", **sample).info(
                f"Dropping malformed frame ({e}): {sample['payload']}"
            )
            return

        handler = self._message_handlers.get(message.type)
        if handler is None:
            logger.bind(component="vtuber_ws").debug(
                f"Ignoring message type: {message.type}"
            )
            return

        try:
            await handler(message)
        except Exception as e:
            sample = truncate_and_hash(raw)
            logger.bind(component="vtuber_ws", **sample).error(
                f"Error handling '{message.type}' message: {e}"
            )

    async def _handle_full_text(self, message: FullTextMessage) -> None:
        await self._reply(message.text)

    async def _handle_audio(self, message: AudioMessage) -> None:
        self.buffer += message.display_text.text
        await self._send_frame(
            AudioPlayStartMessage(display_text=message.display_text, forwarded=True)
        )

    async def _handle_control(self, message: ControlMessage) -> None:
        if message.text == CHAIN_START:
            self.buffer = ""
        elif message.text == CHAIN_END:
            full_text, self.buffer = self.buffer, ""
            logger.bind(component="vtuber_ws").debug(f"full_text: {full_text}")
            await self._emit_turn(full_text)

    async def _handle_synth_complete(
        self, message: BackendSynthCompleteMessage
    ) -> None:
        if self.buffer:
            await self._send_frame(FrontendPlaybackCompleteMessage())

    async def _handle_history_created(self, message: HistoryCreatedMessage) -> None:
        logger.bind(component="vtuber_ws").info(
            f"Backend created history: {message.history_uid}"
        )
        await self._reply(message.history_uid, queued=True)

    async def _emit_turn(self, full_text: str) -> None:
        """End-of-turn pipeline: post-process the turn and send it to chat."""
        replies = finalize_turn(
            full_text,
            reasoning_model=self.config.reasoning_model,
            show_reasoning=self.config.show_reasoning,
            remove_emoji=self.config.remove_emoji,
        )
        # Reasoning and answer must arrive in order
        for reply in replies:
            await self._reply(reply, queued=self.config.reasoning_model)

    async def _reply(self, text: str, queued: bool = False) -> None:
        session = self._get_session()
        if session is None:
            logger.bind(component="vtuber_ws").warning(
                f"No chat session to deliver reply: {text!r}"
            )
            return
        try:
            if queued:
                await session.send_queued(text)
            else:
                await session.send(text)
        except Exception as e:
            logger.bind(component="vtuber_ws").warning(
                f"Failed to send chat reply {text!r}: {e}"
            )
