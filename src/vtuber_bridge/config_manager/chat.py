# config_manager/chat.py
from pydantic import Field, model_validator
from typing import Dict, ClassVar
from .i18n import I18nMixin, Description
from ..i18n import t


class TwitchConfig(I18nMixin):
    """Twitch chat adapter configuration."""

    enabled: bool = Field(False, alias="enabled")
    channel_name: str = Field("", alias="channel_name")
    app_id: str = Field("", alias="app_id")
    app_secret: str = Field("", alias="app_secret")
    max_message_length: int = Field(500, ge=1, alias="max_message_length")
    queued_send_delay: float = Field(0.5, ge=0, alias="queued_send_delay")

    DESCRIPTIONS: ClassVar[Dict[str, Description]] = {
        "enabled": Description(i18n_key="config.twitch_enabled"),
        "channel_name": Description(i18n_key="config.channel_name"),
        "app_id": Description(i18n_key="config.app_id"),
        "app_secret": Description(i18n_key="config.app_secret"),
        "max_message_length": Description(i18n_key="config.max_message_length"),
        "queued_send_delay": Description(i18n_key="config.queued_send_delay"),
    }

    @model_validator(mode="after")
    def check_credentials(self) -> "TwitchConfig":
        if self.enabled and not (self.channel_name and self.app_id and self.app_secret):
            raise ValueError(t("twitch.missing_credentials"))
        return self


class ChatConfig(I18nMixin):
    """Chat platform settings."""

    command_prefix: str = Field("!", alias="command_prefix")
    twitch: TwitchConfig = Field(default_factory=TwitchConfig, alias="twitch")

    DESCRIPTIONS: ClassVar[Dict[str, Description]] = {
        "command_prefix": Description(i18n_key="config.command_prefix"),
        "twitch": Description(i18n_key="config.twitch"),
    }
