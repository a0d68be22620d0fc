# config_manager/main.py
from pydantic import Field
from typing import Dict, ClassVar

from .system import SystemConfig
from .bridge import BridgeConfig
from .chat import ChatConfig
from .i18n import I18nMixin, Description


class Config(I18nMixin):
    """
    Main configuration for the bridge.
    """

    system_config: SystemConfig = Field(
        default_factory=SystemConfig, alias="system_config"
    )
    bridge_config: BridgeConfig = Field(
        default_factory=BridgeConfig, alias="bridge_config"
    )
    chat_config: ChatConfig = Field(default_factory=ChatConfig, alias="chat_config")

    DESCRIPTIONS: ClassVar[Dict[str, Description]] = {
        "system_config": Description(i18n_key="config.system_config"),
        "bridge_config": Description(i18n_key="config.bridge_config"),
        "chat_config": Description(i18n_key="config.chat_config"),
    }
