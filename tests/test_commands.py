"""Tests for the chat command handlers."""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from aiogram.filters import CommandObject
from aiogram.types import Chat, Message, User

from tuberelay.core.errors import MappingWriteError
from tuberelay.core.middleware import RelayContext
from tuberelay.core.scheduler import CycleRunner
from tuberelay.handlers import commands
from tests.fakes import make_video


def _message(text: str = "") -> AsyncMock:
    message = AsyncMock()
    message.text = text
    message.from_user.id = 7
    message.from_user.is_bot = False
    return message


def _command(name: str, args: str = None) -> CommandObject:
    return CommandObject(prefix="!", command=name, args=args)


@pytest_asyncio.fixture
async def relay(state, poller):
    runner = CycleRunner()
    await runner.start()
    yield RelayContext(state=state, poller=poller, runner=runner, recent_window_hours=2)
    await runner.stop()


class TestAdd:
    @pytest.mark.asyncio
    async def test_add_tracks_and_confirms(self, relay, store):
        message = _message("!add abc123 999888777")

        await commands.cmd_add(message, _command("add", "abc123 999888777"), relay)

        assert relay.state.mappings() == {"abc123": "999888777"}
        assert store.load() == {"abc123": "999888777"}
        message.reply.assert_awaited_once_with("Added YouTube Channel abc123 to Telegram Chat 999888777")

    @pytest.mark.asyncio
    async def test_add_needs_two_arguments(self, relay, map_path):
        message = _message("!add abc123")

        await commands.cmd_add(message, _command("add", "abc123"), relay)

        assert relay.state.mappings() == {}
        assert not map_path.exists()
        assert "Usage: !add" in message.reply.await_args.args[0]

    @pytest.mark.asyncio
    async def test_add_without_arguments(self, relay):
        message = _message("!add")

        await commands.cmd_add(message, _command("add"), relay)

        assert "Usage: !add" in message.reply.await_args.args[0]

    @pytest.mark.asyncio
    async def test_add_write_failure_propagates_without_reply(self, relay):
        message = _message("!add abc123 999")

        with patch.object(relay.state.store, "save", side_effect=MappingWriteError("x", "read-only")):
            with pytest.raises(MappingWriteError):
                await commands.cmd_add(message, _command("add", "abc123 999"), relay)

        assert relay.state.mappings() == {}
        message.reply.assert_not_awaited()


class TestRemove:
    @pytest.mark.asyncio
    async def test_remove_untracks_and_confirms(self, relay, store):
        relay.state.add_mapping("abc123", "999888777")
        message = _message("!remove abc123")

        await commands.cmd_remove(message, _command("remove", "abc123"), relay)

        assert relay.state.mappings() == {}
        assert store.load() == {}
        message.reply.assert_awaited_once_with("Removed YouTube Channel abc123")

    @pytest.mark.asyncio
    async def test_remove_needs_an_argument(self, relay):
        relay.state.add_mapping("abc123", "999888777")
        message = _message("!remove")

        await commands.cmd_remove(message, _command("remove"), relay)

        assert relay.state.mappings() == {"abc123": "999888777"}
        assert "Usage: !remove" in message.reply.await_args.args[0]


class TestList:
    @pytest.mark.asyncio
    async def test_list_empty(self, relay):
        message = _message("!list")

        await commands.cmd_list(message, relay)

        assert message.reply.await_args.args[0] == "No channels are tracked yet."

    @pytest.mark.asyncio
    async def test_list_shows_pairs(self, relay):
        relay.state.add_mapping("a", "1")
        relay.state.add_mapping("b", "@news")
        message = _message("!list")

        await commands.cmd_list(message, relay)

        assert message.reply.await_args.args[0] == "Tracked channels:\na → 1\nb → @news"


class TestTriggers:
    @pytest.mark.asyncio
    async def test_testcheck_replies_then_polls(self, relay, source, notifier):
        relay.state.add_mapping("abc123", "999888777")
        source.set_videos("abc123", make_video("vX"))
        message = _message("!testcheck")

        await commands.cmd_testcheck(message, relay)

        message.answer.assert_awaited_once_with("Test check executed.")
        assert notifier.sent_to("999888777") == ["vX"]

    @pytest.mark.asyncio
    async def test_checkrecent_runs_scan_each_time(self, relay, source, notifier):
        relay.state.add_mapping("abc123", "999888777")
        source.set_videos("abc123", make_video("v1"), make_video("v2"), make_video("v3"))
        message = _message("!checkrecent")

        await commands.cmd_checkrecent(message, relay)
        await commands.cmd_checkrecent(message, relay)

        assert len(notifier.sent_to("999888777")) == 6

    @pytest.mark.asyncio
    async def test_help_and_unknown_reply_with_usage(self, relay):
        help_message = _message("!help")
        unknown = _message("!frobnicate")

        await commands.cmd_help(help_message, relay)
        await commands.cmd_unknown(unknown, relay)

        for message in (help_message, unknown):
            text = message.reply.await_args.args[0]
            assert "!add [YouTube Channel ID] [Telegram Chat ID]" in text
            assert "!checkrecent" in text
        assert relay.state.mappings() == {}


class TestScenarios:
    @pytest.mark.asyncio
    async def test_add_then_two_polls_notifies_once(self, relay, source, notifier, clock):
        await commands.cmd_add(_message(), _command("add", "abc123 999888777"), relay)
        source.set_videos("abc123", make_video("vX", hours_ago=1))

        await relay.poller.run_poll_cycle()
        clock.advance(hours=2, seconds=1)
        await relay.poller.run_poll_cycle()

        assert notifier.sent_to("999888777") == ["vX"]
        assert len(notifier.sent) == 1

    @pytest.mark.asyncio
    async def test_remove_then_poll_does_not_query(self, relay, source):
        await commands.cmd_add(_message(), _command("add", "abc123 999888777"), relay)
        await commands.cmd_remove(_message(), _command("remove", "abc123"), relay)

        await relay.poller.run_poll_cycle()

        assert source.calls == []


class TestCommandFilter:
    def _chat_message(self, text: str) -> Message:
        return Message(
            message_id=1,
            date=datetime(2026, 10, 19, 12, 0),
            chat=Chat(id=1, type="private"),
            from_user=User(id=7, is_bot=False, first_name="Op"),
            text=text,
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["!add a b", "!ADD a b", "!Add a b"])
    async def test_command_word_is_case_insensitive(self, text):
        result = await commands.relay_command("add")(self._chat_message(text), AsyncMock())

        assert result
        assert result["command"].args == "a b"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["/add a b", "add a b", "!remove a"])
    async def test_other_text_does_not_match(self, text):
        result = await commands.relay_command("add")(self._chat_message(text), AsyncMock())

        assert not result
