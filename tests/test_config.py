"""Tests for vtuber_bridge.config_manager."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from vtuber_bridge.config_manager import (
    BridgeConfig,
    Config,
    TwitchConfig,
    read_yaml,
    validate_config,
)
from vtuber_bridge.i18n import set_language

CONF_PATH = Path(__file__).resolve().parent.parent / "conf.yaml"


class TestDefaults:
    def test_empty_config_is_valid(self) -> None:
        config = validate_config({})
        assert config.system_config.language == "en"
        assert config.system_config.ws_log is False
        assert config.bridge_config.ws_url == "ws://127.0.0.1:12393/client-ws"
        assert config.bridge_config.reasoning_model is False
        assert config.bridge_config.show_reasoning is True
        assert config.bridge_config.remove_emoji is True
        assert config.chat_config.command_prefix == "!"
        assert config.chat_config.twitch.enabled is False

    def test_partial_override(self) -> None:
        config = validate_config(
            {"bridge_config": {"reasoning_model": True, "ws_url": "wss://vt/ws"}}
        )
        assert config.bridge_config.reasoning_model is True
        assert config.bridge_config.ws_url == "wss://vt/ws"
        assert config.bridge_config.remove_emoji is True


class TestValidation:
    def test_rejects_non_websocket_url(self) -> None:
        with pytest.raises(ValidationError):
            BridgeConfig(ws_url="http://127.0.0.1:12393/client-ws")

    def test_rejects_unknown_keys(self) -> None:
        with pytest.raises(ValidationError):
            validate_config({"bridge_config": {"ws_uri": "ws://x"}})

    def test_rejects_unsupported_language(self) -> None:
        with pytest.raises(ValidationError):
            validate_config({"system_config": {"language": "fr"}})

    def test_twitch_requires_credentials_when_enabled(self) -> None:
        with pytest.raises(ValidationError):
            TwitchConfig(enabled=True, channel_name="mychannel")

        config = TwitchConfig(
            enabled=True, channel_name="mychannel", app_id="id", app_secret="secret"
        )
        assert config.max_message_length == 500

    def test_rejects_negative_delay(self) -> None:
        with pytest.raises(ValidationError):
            TwitchConfig(queued_send_delay=-1)


class TestDescriptions:
    def test_every_field_is_described(self) -> None:
        descriptions = Config().get_all_descriptions()
        assert set(descriptions) == set(Config.model_fields)
        assert all(descriptions.values())

    def test_follow_language(self) -> None:
        config = BridgeConfig()
        english = config.get_field_description("ws_url")
        set_language("zh")
        assert config.get_field_description("ws_url") != english


class TestReadYaml:
    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            read_yaml(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "conf.yaml"
        path.write_text("", encoding="utf-8")
        assert read_yaml(str(path)) == {}

    def test_expands_environment_variables(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("TEST_APP_ID", "abc")
        monkeypatch.delenv("TEST_APP_SECRET", raising=False)
        path = tmp_path / "conf.yaml"
        path.write_text(
            "chat_config:\n"
            "  twitch:\n"
            "    app_id: ${TEST_APP_ID}\n"
            "    app_secret: ${TEST_APP_SECRET}\n",
            encoding="utf-8",
        )
        twitch = read_yaml(str(path))["chat_config"]["twitch"]
        assert twitch["app_id"] == "abc"
        assert twitch["app_secret"] == "${TEST_APP_SECRET}"

    def test_shipped_config_validates(self) -> None:
        config = validate_config(read_yaml(str(CONF_PATH)))
        assert config.chat_config.twitch.enabled is False
