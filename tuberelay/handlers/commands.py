"""
Command handlers (!add, !remove, !list, !testcheck, !checkrecent, !help).
"""

import html
import logging
from aiogram import Router, F
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from tuberelay.core.errors import PersistenceError
from tuberelay.core.middleware import RelayContext
from tuberelay.texts import get_texts

logger = logging.getLogger(__name__)
router = Router()
router.message.filter(~F.from_user.is_bot)

PREFIX = "!"
texts = get_texts()


def relay_command(*names: str) -> Command:
    """Command filter for the `!` prefix, case-insensitive."""
    return Command(*names, prefix=PREFIX, ignore_case=True)


def _args(command: CommandObject) -> list[str]:
    return command.args.split() if command.args else []


def usage_text(relay: RelayContext) -> str:
    return texts.get("usage", prefix=PREFIX, recent_hours=relay.recent_window_hours)


@router.message(relay_command("add"))
async def cmd_add(message: Message, command: CommandObject, relay: RelayContext):
    """Start announcing a YouTube channel's uploads in a chat."""
    args = _args(command)
    if len(args) < 2:
        await message.reply(texts.get("usage_add", prefix=PREFIX))
        return
    
    source_id, destination_id = args[0], args[1]
    try:
        relay.state.add_mapping(source_id, destination_id)
    except PersistenceError as e:
        logger.error(f"Could not add {source_id} -> {destination_id}: {e}")
        raise
    
    await message.reply(texts.get(
        "added",
        source=html.escape(source_id),
        destination=html.escape(destination_id),
    ))


@router.message(relay_command("remove"))
async def cmd_remove(message: Message, command: CommandObject, relay: RelayContext):
    """Stop announcing a YouTube channel."""
    args = _args(command)
    if len(args) < 1:
        await message.reply(texts.get("usage_remove", prefix=PREFIX))
        return
    
    source_id = args[0]
    try:
        relay.state.remove_mapping(source_id)
    except PersistenceError as e:
        logger.error(f"Could not remove {source_id}: {e}")
        raise
    
    await message.reply(texts.get("removed", source=html.escape(source_id)))


@router.message(relay_command("list"))
async def cmd_list(message: Message, relay: RelayContext):
    """Show tracked channels."""
    mapping = relay.state.mappings()
    if not mapping:
        await message.reply(texts.get("list_empty"))
        return
    
    lines = [texts.get("list_header")]
    for source_id, destination_id in mapping.items():
        lines.append(texts.get(
            "list_item",
            source=html.escape(source_id),
            destination=html.escape(destination_id),
        ))
    await message.reply("\n".join(lines))


@router.message(relay_command("testcheck"))
async def cmd_testcheck(message: Message, relay: RelayContext):
    """Run a Poll Cycle now."""
    logger.info(f"Manually triggered video check in chat {message.chat.id}")
    await message.answer(texts.get("test_check"))
    await relay.runner.submit("testcheck", relay.poller.run_poll_cycle)


@router.message(relay_command("checkrecent"))
async def cmd_checkrecent(message: Message, relay: RelayContext):
    """Announce everything uploaded in the recent window, even if already announced."""
    logger.info(f"Manually triggered recent scan in chat {message.chat.id}")
    await message.answer(texts.get("check_recent", recent_hours=relay.recent_window_hours))
    await relay.runner.submit("checkrecent", relay.poller.run_recent_scan)


@router.message(relay_command("help"))
async def cmd_help(message: Message, relay: RelayContext):
    await message.reply(usage_text(relay))


@router.message(F.text.startswith(PREFIX))
async def cmd_unknown(message: Message, relay: RelayContext):
    """Any other `!` command gets the usage text."""
    await message.reply(usage_text(relay))
