# config_manager/bridge.py
from pydantic import Field, field_validator
from typing import Dict, ClassVar
from .i18n import I18nMixin, Description


class BridgeConfig(I18nMixin):
    """Connection and reply post-processing settings for the vtuber backend.

    ``show_reasoning`` and ``remove_emoji`` are only consulted when
    ``reasoning_model`` is enabled.
    """

    ws_url: str = Field("ws://127.0.0.1:12393/client-ws", alias="ws_url")
    reasoning_model: bool = Field(False, alias="reasoning_model")
    show_reasoning: bool = Field(True, alias="show_reasoning")
    remove_emoji: bool = Field(True, alias="remove_emoji")

    DESCRIPTIONS: ClassVar[Dict[str, Description]] = {
        "ws_url": Description(i18n_key="config.ws_url"),
        "reasoning_model": Description(i18n_key="config.reasoning_model"),
        "show_reasoning": Description(i18n_key="config.show_reasoning"),
        "remove_emoji": Description(i18n_key="config.remove_emoji"),
    }

    @field_validator("ws_url")
    @classmethod
    def check_ws_url(cls, value: str) -> str:
        if not value.startswith(("ws://", "wss://")):
            raise ValueError("ws_url must start with ws:// or wss://")
        return value
