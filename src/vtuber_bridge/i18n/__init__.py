"""
I18n for vtuber-bridge
======================

Status replies sent to chat and config descriptions go through ``t()``.
Set the language once at startup from ``system_config.language``.
"""

from .translations import get_translation, get_available_languages, format_translation


class I18nManager:
    """
    Simple i18n manager holding the current language.
    """

    def __init__(self, default_language: str = "en"):
        self.default_language = default_language
        self.current_language = default_language
        self.available_languages = get_available_languages()

    def set_language(self, language: str) -> bool:
        """
        Set the current language.

        Returns:
            bool: True if language was set successfully
        """
        if language in self.available_languages:
            self.current_language = language
            return True
        return False

    def get(self, key: str, **kwargs) -> str:
        if kwargs:
            return format_translation(key, self.current_language, **kwargs)
        return get_translation(key, self.current_language)

    def get_language(self) -> str:
        """Get current language code."""
        return self.current_language


# Global i18n manager instance
i18n_manager = I18nManager()


def t(key: str, **kwargs) -> str:
    """Translate ``key`` into the current language."""
    return i18n_manager.get(key, **kwargs)


def set_language(language: str) -> bool:
    """Set the global language."""
    return i18n_manager.set_language(language)


def get_language() -> str:
    """Get current language."""
    return i18n_manager.get_language()


__all__ = ["I18nManager", "i18n_manager", "t", "set_language", "get_language"]
