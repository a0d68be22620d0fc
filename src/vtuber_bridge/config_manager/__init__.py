from .main import Config
from .system import SystemConfig
from .bridge import BridgeConfig
from .chat import ChatConfig, TwitchConfig
from .i18n import I18nMixin, Description
from .utils import read_yaml, validate_config

__all__ = [
    "Config",
    "SystemConfig",
    "BridgeConfig",
    "ChatConfig",
    "TwitchConfig",
    "I18nMixin",
    "Description",
    "read_yaml",
    "validate_config",
]
