# config_manager/system.py
from pydantic import Field, field_validator
from typing import Dict, ClassVar
from .i18n import I18nMixin, Description
from ..i18n.translations import get_available_languages


class SystemConfig(I18nMixin):
    """System configuration settings."""

    conf_version: str = Field("v1.0.0", alias="conf_version")
    language: str = Field("en", alias="language")
    ws_log: bool = Field(False, alias="ws_log")

    DESCRIPTIONS: ClassVar[Dict[str, Description]] = {
        "conf_version": Description(i18n_key="config.conf_version"),
        "language": Description(i18n_key="config.language"),
        "ws_log": Description(i18n_key="config.ws_log"),
    }

    @field_validator("language")
    @classmethod
    def check_language(cls, value: str) -> str:
        if value not in get_available_languages():
            raise ValueError(
                f"Unsupported language '{value}', expected one of {get_available_languages()}"
            )
        return value
