import os
import sys
import asyncio
import argparse

import tomli
import yaml
from loguru import logger
from pydantic import ValidationError

from vtuber_bridge.bridge import VtuberBridge
from vtuber_bridge.chat.twitch import TwitchChatAdapter
from vtuber_bridge.config_manager import Config, read_yaml, validate_config
from vtuber_bridge.i18n import set_language
from vtuber_bridge.logging_utils import configure_stdlib_bridge, get_session_key


def get_version() -> str:
    with open("pyproject.toml", "rb") as f:
        pyproject = tomli.load(f)
    return pyproject["project"]["version"]


def init_logger(console_log_level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        "logs/bridge_{time:YYYY-MM-DD_HH-mm-ss_SSS}.jsonl",
        serialize=True,
        enqueue=True,
        filter=lambda x: x["level"].no >= 20,
        rotation="10 MB",
        retention="30 days",
        backtrace=False,
        diagnose=False,
    )

    # Optional DEBUG sink (controlled by console level or env APP_DEBUG)
    app_debug = os.environ.get("APP_DEBUG", "0").lower() in ("1", "true", "yes")
    if console_log_level.upper() == "DEBUG" or app_debug:
        logger.add(
            "logs/bridge_debug_{time:YYYY-MM-DD_HH-mm-ss_SSS}.jsonl",
            serialize=True,
            enqueue=True,
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            backtrace=False,
            diagnose=False,
        )

    logger.add(
        sys.stderr,
        level=console_log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "{extra[component]}{extra[session_key]}{message}"
        ),
        colorize=True,
        enqueue=True,
    )

    # Tag every record with its component and the connection it belongs to
    def _patcher(record):  # pragma: no cover
        component_raw = record["extra"].get("component") or "app"
        record["extra"]["component"] = f"[{component_raw}] "
        key = get_session_key()
        record["extra"]["session_key"] = f"[key:{key}] " if key else ""

    logger.configure(patcher=_patcher)

    configure_stdlib_bridge()


def parse_args():
    parser = argparse.ArgumentParser(description="vtuber-bridge")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--config", default="conf.yaml", help="Path to the YAML configuration file"
    )
    return parser.parse_args()


async def serve(config: Config) -> None:
    bridge = VtuberBridge(config)
    adapter = TwitchChatAdapter(config.chat_config.twitch, bridge)
    try:
        await adapter.run()
    finally:
        await bridge.dispose()
        if adapter.is_connected:
            await adapter.disconnect()


@logger.catch
def run(config_path: str, console_log_level: str):
    init_logger(console_log_level)
    logger.info(f"vtuber-bridge, version v{get_version()}")

    try:
        config: Config = validate_config(read_yaml(config_path))
    except (OSError, yaml.YAMLError, ValidationError) as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        sys.exit(1)

    lang = config.system_config.language
    if set_language(lang):
        logger.info(f"Language set to: {lang}")
    else:
        logger.warning(f"Language '{lang}' not available, using English")
        set_language("en")

    if not config.chat_config.twitch.enabled:
        logger.error("No chat platform enabled, set chat_config.twitch.enabled")
        sys.exit(1)

    logger.info(f"Backend endpoint: {config.bridge_config.ws_url}")
    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, bridge stopped")


if __name__ == "__main__":
    args = parse_args()
    console_log_level = "DEBUG" if args.verbose else "INFO"
    run(config_path=args.config, console_log_level=console_log_level)
