"""
vtuber-bridge
=============

Connects chat channels to an Open-LLM-VTuber backend over WebSocket.
"""

from .bridge import VtuberBridge
from .config_manager import Config, read_yaml, validate_config
from .registry import ConnectionEntry, SessionKey, SessionRegistry
from .text_processing import finalize_turn, split_reasoning_text, strip_emoji_tokens

__all__ = [
    "VtuberBridge",
    "Config",
    "read_yaml",
    "validate_config",
    "ConnectionEntry",
    "SessionKey",
    "SessionRegistry",
    "finalize_turn",
    "split_reasoning_text",
    "strip_emoji_tokens",
]
