"""Shared handler helpers: auth guards, rate limit, error replies."""

from __future__ import annotations

import functools
import html
import logging
import time
from typing import TYPE_CHECKING, Callable

from telegram.constants import ParseMode

from .. import config
from ..models.bot_state import BOT_STATE_KEY, WATCHDOG_KEY, BotState
from ..watchdog import Watchdog

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from telegram import Update
    from telegram.ext import ContextTypes


# Global rate limit (seconds) for all commands.
_last_command_ts = 0.0


def get_state(app) -> BotState:
    """Retrieve or initialize the bot state from application data."""
    return app.bot_data.setdefault(BOT_STATE_KEY, BotState())


def get_watchdog(app) -> Watchdog:
    return app.bot_data[WATCHDOG_KEY]


async def record_error(
    command: str,
    message: str,
    exc: Exception,
    reply,
    log: logging.Logger | None = None,
):
    (log or logger).exception("[/%s] %s", command, message)
    await reply(f"❌ Error: {html.escape(str(exc))}", parse_mode=ParseMode.HTML)


def _user_id(update: "Update") -> int | None:
    effective_user = getattr(update, "effective_user", None)
    return getattr(effective_user, "id", None)


def is_admin(update: "Update") -> bool:
    """True if the sender is one of the configured administrators.

    Returns False if ALLOWED_CHAT_IDS is empty or the update has no user.
    """
    if not config.ALLOWED:
        return False
    user_id = _user_id(update)
    return user_id is not None and user_id in config.ALLOWED


def is_master_chat(update: "Update") -> bool:
    """True for a private chat with an administrator."""
    if not is_admin(update) or not update.effective_chat:
        return False
    return update.effective_chat.id == _user_id(update)


async def _deny(update: "Update", text: str) -> None:
    if update and update.effective_chat:
        await update.effective_chat.send_message(text)


async def guard(update: "Update", context: "ContextTypes.DEFAULT_TYPE") -> bool:
    """Allow administrators in any chat (destination commands)."""
    if is_admin(update):
        return True
    await _deny(update, "⛔ Not authorized")
    return False


async def guard_master(update: "Update", context: "ContextTypes.DEFAULT_TYPE") -> bool:
    """Allow administrators in their private chat with the bot (monitor commands)."""
    if is_master_chat(update):
        return True
    if is_admin(update):
        await _deny(update, "⛔ This command only works in a private chat with the bot.")
    else:
        await _deny(update, "⛔ Not authorized")
    return False


def rate_limit(func: Callable, name: str | None = None) -> Callable:
    """Decorator to enforce global rate limiting on command handlers.

    Rate limit applies across all commands. If the limit is exceeded the user
    gets a wait notice; every run is recorded in the command metrics.
    """

    command_name = name or func.__name__.removeprefix("cmd_")

    @functools.wraps(func)
    async def wrapper(
        update: "Update", context: "ContextTypes.DEFAULT_TYPE", *args, **kwargs
    ):
        global _last_command_ts
        now = time.monotonic()
        elapsed = now - _last_command_ts

        if elapsed < config.RATE_LIMIT_S:
            try:
                if update and getattr(update, "effective_message", None):
                    await update.effective_message.reply_text(
                        f"⏱ Rate limit: please wait {config.RATE_LIMIT_S - elapsed:.1f}s",
                    )
            except Exception as e:
                logger.debug("rate-limit notice failed to send: %s", e)
            get_state(context.application).record_rate_limited(command_name)
            return

        _last_command_ts = now
        start = time.perf_counter()
        state = get_state(context.application)
        try:
            result = await func(update, context, *args, **kwargs)
        except Exception as e:
            state.record_command(
                command_name, time.perf_counter() - start, ok=False, error_msg=str(e)
            )
            raise
        state.record_command(
            command_name, time.perf_counter() - start, ok=True, error_msg=None
        )
        return result

    return wrapper


def command_text(update: "Update") -> str:
    """Return the message text after the command word, whitespace preserved."""
    text = getattr(update.message, "text", None) or ""
    parts = text.split(None, 1)
    return parts[1].strip() if len(parts) > 1 else ""


async def reply_html(update: "Update", text: str) -> None:
    await update.message.reply_text(text, parse_mode=ParseMode.HTML)
