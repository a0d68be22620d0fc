"""
Centralized translations for vtuber-bridge
This file contains all user-facing text strings used by the bridge.
"""

# Base translations structure
TRANSLATIONS = {
    "en": {
        "bridge": {
            "connecting": "vtuber connecting...",
            "already_connected": "vtuber connected",
            "disconnecting": "vtuber disconnecting...",
            "not_connected": "vtuber is not connected in this channel",
            "ready": "vtuber connected, you can start talking\n",
            "closed": "vtuber disconnected",
            "error": "an error occurred on the vtuber connection, please contact the administrator",
            "usage": "usage: {prefix}vtuber -p [history_uid] to start, {prefix}vtuber -d to stop",
        },
        "twitch": {
            "initialized": "Twitch chat adapter initialized",
            "disabled": "Twitch chat adapter is disabled",
            "missing_credentials": "Twitch channel name, app id and app secret are required",
            "not_initialized": "Twitch chat is not initialized",
            "connected": "Connected to Twitch channel {channel}",
            "disconnected": "Disconnected from Twitch",
            "init_error": "Twitch initialization error: {error}",
            "connection_error": "Twitch connection error: {error}",
            "message_error": "Error handling Twitch message: {error}",
        },
        "config": {
            "system_config": "System settings",
            "bridge_config": "Backend connection settings",
            "chat_config": "Chat platform settings",
            "conf_version": "Configuration file version",
            "language": "Language of status replies and descriptions",
            "ws_log": "Log every WebSocket frame at DEBUG level",
            "ws_url": "WebSocket endpoint of the vtuber backend (the /client-ws route)",
            "reasoning_model": "Whether the backend model is a reasoning model",
            "show_reasoning": "For reasoning models, whether to show the reasoning segment",
            "remove_emoji": "For reasoning models, whether to remove [emoji] tokens",
            "command_prefix": "Prefix of the vtuber chat command",
            "twitch": "Twitch chat settings",
            "twitch_enabled": "Enable the Twitch chat adapter",
            "channel_name": "Twitch channel to join",
            "app_id": "Twitch application ID",
            "app_secret": "Twitch application secret",
            "max_message_length": "Maximum length of one chat reply before it is split",
            "queued_send_delay": "Delay in seconds between queued replies",
        },
    },
    "zh": {
        "bridge": {
            "connecting": "vtuber 连接中...",
            "already_connected": "vtuber 已连接",
            "disconnecting": "vtuber 断开连接中...",
            "not_connected": "当前会话中 vtuber 未连接",
            "ready": "vtuber 连接完毕，可以通话\n",
            "closed": "vtuber 已断开连接",
            "error": "vtuber 连接过程中发生错误，请联系管理员",
            "usage": "用法: {prefix}vtuber -p [history_uid] 启动当前会话中的vtuber回复, {prefix}vtuber -d 关闭当前会话中的vtuber回复",
        },
        "twitch": {
            "initialized": "Twitch 聊天适配器已初始化",
            "disabled": "Twitch 聊天适配器未启用",
            "missing_credentials": "需要 Twitch 频道名、应用 ID 和应用密钥",
            "not_initialized": "Twitch 聊天未初始化",
            "connected": "已连接到 Twitch 频道 {channel}",
            "disconnected": "已断开 Twitch 连接",
            "init_error": "Twitch 初始化错误: {error}",
            "connection_error": "Twitch 连接错误: {error}",
            "message_error": "处理 Twitch 消息时出错: {error}",
        },
        "config": {
            "system_config": "系统设置",
            "bridge_config": "基础设置",
            "chat_config": "聊天平台设置",
            "conf_version": "配置文件版本",
            "language": "状态回复与描述的语言",
            "ws_log": "以 DEBUG 级别记录每个 WebSocket 帧",
            "ws_url": "ws连接地址，注意端点为/client-ws",
            "reasoning_model": "是否Reasoning模型",
            "show_reasoning": "对于Reasoning模型是否显示思考过程",
            "remove_emoji": "对于Emoji表情是否移除",
            "command_prefix": "vtuber 指令前缀",
            "twitch": "Twitch 聊天设置",
            "twitch_enabled": "启用 Twitch 聊天适配器",
            "channel_name": "要加入的 Twitch 频道",
            "app_id": "Twitch 应用 ID",
            "app_secret": "Twitch 应用密钥",
            "max_message_length": "单条回复的最大长度，超出将被拆分",
            "queued_send_delay": "顺序回复之间的间隔秒数",
        },
    },
}


def get_translation(key: str, lang_code: str = "en") -> str:
    """
    Get a translation by key and language code.

    Args:
        key: Translation key (e.g., "bridge.connecting")
        lang_code: Language code (e.g., "en", "zh")

    Returns:
        Translated text or the key itself if not found
    """
    if lang_code not in TRANSLATIONS:
        lang_code = "en"

    translation = TRANSLATIONS[lang_code]
    for k in key.split("."):
        if isinstance(translation, dict) and k in translation:
            translation = translation[k]
        else:
            if lang_code != "en":
                return get_translation(key, "en")
            return key

    if isinstance(translation, str):
        return translation

    if lang_code != "en":
        return get_translation(key, "en")

    return key


def get_available_languages() -> list[str]:
    """Get list of available language codes."""
    return list(TRANSLATIONS.keys())


def format_translation(key: str, lang_code: str = "en", **kwargs) -> str:
    """
    Get a formatted translation with placeholders.

    Args:
        key: Translation key
        lang_code: Language code
        **kwargs: Format arguments

    Returns:
        Formatted translated text
    """
    translation = get_translation(key, lang_code)

    try:
        return translation.format(**kwargs)
    except (KeyError, ValueError):
        # If formatting fails, return the translation as is
        return translation
