from __future__ import annotations

import logging

from .. import view
from ..commands import COMMANDS, GROUP_ORDER
from ..runtime import STARTUP_TIME, VERSION
from .common import get_state, get_watchdog, guard_master, reply_html

logger = logging.getLogger(__name__)


def _render_help() -> str:
    by_group: dict[str, list[str]] = {}
    for spec in COMMANDS:
        line = f"{spec.usage} – {spec.description}"
        by_group.setdefault(spec.group, []).append(line)
    lines: list[str] = ["Hi! I watch one resource and post its status here.\n"]
    for group in GROUP_ORDER:
        entries = by_group.get(group, [])
        if not entries:
            continue
        lines.append(group)
        lines.extend(entries)
        lines.append("")
    return "\n".join(lines).strip()


async def cmd_start(update, context) -> None:
    await update.message.reply_text(_render_help())


async def cmd_help(update, context) -> None:
    await cmd_start(update, context)


async def cmd_info(update, context) -> None:
    await reply_html(update, view.render_info(VERSION, STARTUP_TIME))


async def cmd_status(update, context) -> None:
    watchdog = get_watchdog(context.application)
    snapshot = await watchdog.runtime_snapshot()
    await reply_html(update, view.render_status_report(snapshot, watchdog.config))


async def cmd_metrics(update, context) -> None:
    if not await guard_master(update, context):
        return
    state = get_state(context.application)
    await reply_html(update, view.render_command_metrics(state.command_metrics))
