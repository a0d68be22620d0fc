"""Tests for vtuber_bridge.bridge: up/down, message forwarding, teardown."""

import pytest

from conftest import FakeConnector, FakeSession, wait_until
from vtuber_bridge.bridge import VtuberBridge
from vtuber_bridge.config_manager import Config
from vtuber_bridge.connection import ConnectionState
from vtuber_bridge.i18n import set_language, t
from vtuber_bridge.registry import SessionKey


@pytest.fixture
async def bridge(config: Config, connector: FakeConnector):
    bridge = VtuberBridge(config, connector=connector)
    yield bridge
    await bridge.dispose()


async def bring_up(bridge: VtuberBridge, session: FakeSession, history_uid: str = ""):
    status = await bridge.up(session, history_uid)
    entry = bridge.registry.get(SessionKey.from_session(session))
    await wait_until(lambda: entry.connection.state is ConnectionState.OPEN)
    await wait_until(lambda: t("bridge.ready") in session.texts)
    return status, entry


class TestUp:
    async def test_connects_and_registers(self, bridge, connector, session) -> None:
        status, entry = await bring_up(bridge, session)
        assert status == t("bridge.connecting")
        assert entry.session is session
        assert entry.history_uid == ""
        assert len(connector.urls) == 1

    async def test_stored_history_is_resumed(
        self, bridge, connector, session
    ) -> None:
        await bring_up(bridge, session, history_uid="abc123")
        assert connector.last.sent_messages[0] == {
            "type": "fetch-and-set-history",
            "history_uid": "abc123",
        }

    async def test_second_up_rebinds(self, bridge, connector, session) -> None:
        await bring_up(bridge, session)
        newer = FakeSession(content="!vtuber -p")
        status = await bridge.up(newer)

        assert status == t("bridge.already_connected")
        assert len(bridge.registry) == 1
        assert bridge.registry.get(SessionKey.from_session(newer)).session is newer
        assert len(connector.urls) == 1

    async def test_channels_are_independent(self, bridge, connector) -> None:
        a = FakeSession(channel_id="1")
        b = FakeSession(channel_id="2")
        await bring_up(bridge, a)
        await bring_up(bridge, b)
        assert len(bridge.registry) == 2

        connector.sockets[0].remote_close()
        await wait_until(lambda: len(bridge.registry) == 1)
        assert SessionKey.from_session(b) in bridge.registry


class TestDown:
    async def test_not_connected(self, bridge, session) -> None:
        assert await bridge.down(session) == t("bridge.not_connected")

    async def test_closes_and_removes(self, bridge, connector, session) -> None:
        _, entry = await bring_up(bridge, session)
        status = await bridge.down(session)
        assert status == t("bridge.disconnecting")

        await entry.connection.wait_closed()
        assert connector.last.closed
        assert len(bridge.registry) == 0
        assert session.replies[-1] == ("send", t("bridge.closed"))

    async def test_down_right_after_up_reports_closed(self, bridge, session) -> None:
        await bridge.up(session)
        entry = bridge.registry.get(SessionKey.from_session(session))
        assert await bridge.down(session) == t("bridge.disconnecting")

        await entry.connection.wait_closed()
        assert session.replies == [("send", t("bridge.closed"))]
        assert len(bridge.registry) == 0

    async def test_up_after_down_reconnects(self, bridge, connector, session) -> None:
        _, entry = await bring_up(bridge, session)
        await bridge.down(session)
        await entry.connection.wait_closed()

        await bring_up(bridge, session)
        assert len(connector.urls) == 2


class TestOnMessage:
    async def test_ignored_without_connection(self, bridge, connector) -> None:
        await bridge.on_message(FakeSession(content="hello"))
        assert connector.urls == []

    async def test_forwards_text_input(self, bridge, connector, session) -> None:
        await bring_up(bridge, session)
        await bridge.on_message(FakeSession(content="hello vtuber"))
        assert connector.last.sent_messages[-1] == {
            "type": "text-input",
            "text": "hello vtuber",
            "images": [],
        }

    async def test_replies_go_to_latest_session(
        self, bridge, connector, session
    ) -> None:
        await bring_up(bridge, session)
        latest = FakeSession(content="hi")
        await bridge.on_message(latest)

        ws = connector.last
        ws.feed_json(type="control", text="conversation-chain-start")
        ws.feed_json(type="audio", display_text={"text": "Hi!"})
        ws.feed_json(type="control", text="conversation-chain-end")
        await wait_until(lambda: latest.replies)

        assert latest.replies == [("send", "Hi!")]
        assert "Hi!" not in session.texts


class TestEndToEnd:
    async def test_reasoning_turn(self, reasoning_config, connector, session) -> None:
        bridge = VtuberBridge(reasoning_config, connector=connector)
        await bring_up(bridge, session)
        ws = connector.last
        ws.feed_json(type="control", text="conversation-chain-start")
        ws.feed_json(type="audio", display_text={"text": "(user greets me)"})
        ws.feed_json(type="audio", display_text={"text": "Hello [joy]"})
        ws.feed_json(type="backend-synth-complete")
        ws.feed_json(type="control", text="conversation-chain-end")
        await wait_until(lambda: len(session.replies) == 3)

        assert session.replies[1:] == [
            ("queued", "(user greets me)"),
            ("queued", "Hello "),
        ]
        assert ws.sent_messages[-1] == {"type": "frontend-playback-complete"}
        await bridge.dispose()


class TestCommands:
    async def test_not_a_command(self, bridge, session) -> None:
        session.content = "just chatting"
        assert await bridge.handle_command(session) is None

    async def test_up_command_with_history(self, bridge, connector, session) -> None:
        session.content = "!vtuber -p abc123"
        assert await bridge.handle_command(session) == t("bridge.connecting")
        entry = bridge.registry.get(SessionKey.from_session(session))
        assert entry.history_uid == "abc123"
        await wait_until(lambda: connector.sockets and connector.last.sent)

    async def test_down_command(self, bridge, session) -> None:
        session.content = "!v -d"
        assert await bridge.handle_command(session) == t("bridge.not_connected")

    async def test_usage(self, bridge, session) -> None:
        session.content = "!vtuber"
        assert "!vtuber -d" in await bridge.handle_command(session)

    async def test_status_language(self, bridge, session) -> None:
        set_language("zh")
        assert await bridge.down(session) == "当前会话中 vtuber 未连接"


class TestDispose:
    async def test_closes_every_connection(self, bridge, connector) -> None:
        sessions = [FakeSession(channel_id=str(i)) for i in range(3)]
        for s in sessions:
            await bring_up(bridge, s)

        await bridge.dispose()

        assert len(bridge.registry) == 0
        assert all(ws.closed for ws in connector.sockets)
        assert all(s.replies[-1] == ("send", t("bridge.closed")) for s in sessions)
