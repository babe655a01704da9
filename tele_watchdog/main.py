"""Entrypoint for running the watchdog bot from the package.

This module wires up the Application, restores saved state, registers
handlers, starts the probe loop and runs polling.
"""

from __future__ import annotations

import asyncio
import logging

from telegram import BotCommand
from telegram.ext import Application, CommandHandler

from . import config
from .channel import TelegramChannel
from .commands import COMMANDS
from .handlers import dispatch
from .logger import setup_logging
from .models.bot_state import BOT_STATE_KEY, WATCHDOG_KEY, BotState
from .persistence import StateFile
from .runtime import VERSION
from .scheduler import ensure_started
from .watchdog import Watchdog

logger = logging.getLogger(__name__)


def build_application() -> Application:
    if config.TOKEN is None:
        raise RuntimeError("BOT_TOKEN environment variable is not set")

    app = Application.builder().token(config.TOKEN).build()

    app.bot_data.setdefault(BOT_STATE_KEY, BotState())
    app.bot_data[WATCHDOG_KEY] = Watchdog.from_disk(
        TelegramChannel(app.bot), StateFile(config.DATA_PATH), config.CONFIG_PATH
    )

    for spec in COMMANDS:
        fn = getattr(dispatch, spec.handler)
        triggers = [spec.name, *spec.aliases]
        app.add_handler(CommandHandler(triggers, fn))

    return app


async def register_bot_commands(app: Application) -> None:
    """Register bot commands for Telegram autocomplete."""
    try:
        bot_commands = [BotCommand(spec.name, spec.description) for spec in COMMANDS]
        await app.bot.set_my_commands(bot_commands)
        logger.info("Registered %d commands for autocomplete", len(bot_commands))
    except Exception as e:
        logger.warning("Failed to register bot commands: %s", e)


async def post_init(app: Application) -> None:
    watchdog: Watchdog = app.bot_data[WATCHDOG_KEY]
    if watchdog.needs_initial_save:
        await watchdog.save()
        watchdog.needs_initial_save = False
    ensure_started(app)
    await register_bot_commands(app)


def _probe_failure(app: Application) -> BaseException | None:
    task = app.bot_data.get(BOT_STATE_KEY, BotState()).tasks.get("probe")
    if isinstance(task, asyncio.Task) and task.done() and not task.cancelled():
        return task.exception()
    return None


def run() -> None:
    setup_logging(config.LOG_FILE)
    logger.info("Starting tele_watchdog v%s", VERSION)
    app = build_application()
    app.post_init = post_init

    # run polling; keep the stop_signals None so container shutdown behaves normally
    app.run_polling(stop_signals=None)

    failure = _probe_failure(app)
    if failure is not None:
        raise SystemExit(f"Probe loop failed: {failure}")


if __name__ == "__main__":
    run()
