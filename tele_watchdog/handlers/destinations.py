"""Commands run inside a destination chat to manage its subscription."""

from __future__ import annotations

import html
import logging

from telegram.error import TelegramError

from ..models.watch_config import Destination
from .common import command_text, get_watchdog, guard, reply_html

logger = logging.getLogger(__name__)

MAX_MESSAGE_LEN = 1000
MAX_ROLE_LEN = 100


def _chat_name(chat) -> str:
    title = getattr(chat, "title", None) or getattr(chat, "username", None)
    return str(title) if title else f"chat {chat.id}"


def _describe_user(update) -> str:
    user = update.effective_user
    username = f"@{user.username}" if getattr(user, "username", None) else "?"
    return f"{username} ({user.id})"


async def _registered(update, context) -> Destination | None:
    watchdog = get_watchdog(context.application)
    dest = watchdog.config.destinations.get(update.effective_chat.id)
    if dest is None:
        await update.message.reply_text(
            "This chat is not registered yet! Use /register first."
        )
    return dest


async def cmd_register(update, context) -> None:
    if not await guard(update, context):
        return
    watchdog = get_watchdog(context.application)
    chat = update.effective_chat
    watch = watchdog.config
    if chat.id in watch.destinations:
        await update.message.reply_text("This chat is already registered!")
        return
    if len(watch.destinations) >= watch.max_destinations:
        await update.message.reply_text(
            f"There are already {len(watch.destinations)} chats registered and only "
            f"{watch.max_destinations} are allowed. Ask the bot owner to raise /limit."
        )
        return

    watch.destinations[chat.id] = Destination(
        id=chat.id, name=_chat_name(chat), channel=chat.id
    )
    logger.info(
        "[destination %s] registered by %s", chat.id, _describe_user(update)
    )
    await watchdog.save()
    await update.message.reply_text(
        "Chat registered! Status updates will be posted here. "
        "See /role, /channel and /message to customize them."
    )


async def cmd_unregister(update, context) -> None:
    if not await guard(update, context):
        return
    if await _registered(update, context) is None:
        return
    watchdog = get_watchdog(context.application)
    chat_id = update.effective_chat.id
    await watchdog.forget_destination(chat_id)
    logger.info("[destination %s] unregistered by %s", chat_id, _describe_user(update))
    await watchdog.save()
    await update.message.reply_text("Chat unregistered.")


async def cmd_channel(update, context) -> None:
    if not await guard(update, context):
        return
    dest = await _registered(update, context)
    if dest is None:
        return
    raw = (context.args[0] if context.args else "here").strip().lower()
    if raw == "here":
        channel_id = update.effective_chat.id
    else:
        try:
            channel_id = int(raw)
        except ValueError:
            await update.message.reply_text("Usage: /channel [chat_id|here]")
            return
        try:
            await context.bot.get_chat(chat_id=channel_id)
        except TelegramError as e:
            await update.message.reply_text(f"❌ Cannot access chat {channel_id}: {e}")
            return

    watchdog = get_watchdog(context.application)
    await watchdog.move_destination(dest.id, channel_id)
    logger.info(
        "[destination %s] channel set to %s by %s",
        dest.id,
        channel_id,
        _describe_user(update),
    )
    await watchdog.save()
    await reply_html(
        update, f"Status messages will go to <code>{channel_id}</code>."
    )


async def cmd_role(update, context) -> None:
    if not await guard(update, context):
        return
    dest = await _registered(update, context)
    if dest is None:
        return
    mention = command_text(update)
    if len(mention) > MAX_ROLE_LEN:
        await update.message.reply_text(
            f"Mention is too long (max {MAX_ROLE_LEN} characters)."
        )
        return
    dest.role = mention or None
    logger.info("[destination %s] role set to %r", dest.id, dest.role)
    await get_watchdog(context.application).save()
    if dest.role:
        await reply_html(update, f"Will mention {html.escape(dest.role)}.")
    else:
        await update.message.reply_text("Role mention cleared.")


async def cmd_message(update, context) -> None:
    if not await guard(update, context):
        return
    dest = await _registered(update, context)
    if dest is None:
        return
    parts = command_text(update).split(None, 1)
    kind = parts[0].lower() if parts else ""
    text = parts[1].strip() if len(parts) > 1 else ""
    if kind not in {"up", "down"} or not text:
        await update.message.reply_text(
            "Usage: /message up|down <text>\n"
            "Placeholders: %%RESOURCE%% (resource name), %%ROLE%% (mention)"
        )
        return
    if len(text) > MAX_MESSAGE_LEN:
        await update.message.reply_text(
            f"Message is too long (max {MAX_MESSAGE_LEN} characters)."
        )
        return
    if kind == "up":
        dest.up_message = text
    else:
        dest.down_message = text
    logger.info("[destination %s] %s message changed", dest.id, kind)
    await get_watchdog(context.application).save()
    await update.message.reply_text(f"Changed {kind} message!")
