"""Owner-only commands that change the watched resource and the registry."""

from __future__ import annotations

import html
import logging

from .. import probe, view
from ..errors import ResolutionError
from .common import command_text, get_watchdog, guard_master, record_error, reply_html

logger = logging.getLogger(__name__)

MAX_NAME_LEN = 25
MAX_ADDRESS_LEN = 253


def _parse_bounded(raw: str, low: int, high: int) -> int | None:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    if value < low or value > high:
        return None
    return value


async def _set_bounded(
    update, context, usage: str, low: int, high: int, apply, label: str
) -> None:
    if not await guard_master(update, context):
        return
    value = _parse_bounded(context.args[0], low, high) if context.args else None
    if value is None:
        await update.message.reply_text(f"Usage: {usage} ({low}-{high})")
        return
    watchdog = get_watchdog(context.application)
    apply(watchdog.config, value)
    logger.info("Changed %s to %s", label, value)
    await watchdog.save()
    await update.message.reply_text(f"Changed {label} to {value}!")


async def cmd_name(update, context) -> None:
    if not await guard_master(update, context):
        return
    name = command_text(update)
    if not name or len(name) > MAX_NAME_LEN:
        await update.message.reply_text(
            f"Usage: /name <name> (1-{MAX_NAME_LEN} characters)"
        )
        return
    watchdog = get_watchdog(context.application)
    watchdog.config.probe.resource_name = name
    logger.info("Changed resource name to %s", name)
    await watchdog.save()
    await update.message.reply_text(f"Changed resource name to {name}!")


async def cmd_address(update, context) -> None:
    if not await guard_master(update, context):
        return
    addr = context.args[0].strip() if context.args else ""
    if not addr or len(addr) > MAX_ADDRESS_LEN:
        await update.message.reply_text("Usage: /address <host>")
        return
    try:
        ip = await probe.resolve(addr)
    except ResolutionError as e:
        await update.message.reply_text(f"❌ Failed to resolve your address: {e}")
        return
    watchdog = get_watchdog(context.application)
    watchdog.config.probe.resource_addr = addr
    logger.info("Changed resource address to %s (%s)", addr, ip)
    await watchdog.save()
    await reply_html(
        update,
        f"Changed resource address to {view.code(addr)} ({view.code(ip)})!",
    )


async def cmd_interval(update, context) -> None:
    def apply(watch, value: int) -> None:
        watch.probe.interval_s = float(value)

    await _set_bounded(
        update, context, "/interval <seconds>", 1, 86_400, apply, "interval"
    )


async def cmd_timeout(update, context) -> None:
    def apply(watch, value: int) -> None:
        watch.probe.timeout_s = float(value)

    await _set_bounded(update, context, "/timeout <seconds>", 1, 60, apply, "timeout")


async def cmd_attempts(update, context) -> None:
    def apply(watch, value: int) -> None:
        watch.probe.threshold = value

    await _set_bounded(
        update, context, "/attempts <n>", 1, 255, apply, "required attempts"
    )


async def cmd_limit(update, context) -> None:
    def apply(watch, value: int) -> None:
        watch.max_destinations = value

    await _set_bounded(update, context, "/limit <n>", 1, 100, apply, "destination limit")


async def cmd_destinations(update, context) -> None:
    if not await guard_master(update, context):
        return
    watchdog = get_watchdog(context.application)
    snapshot = await watchdog.runtime_snapshot()
    for part in view.chunk(view.render_destinations(watchdog.config, snapshot)):
        await reply_html(update, part)


async def cmd_remove(update, context) -> None:
    if not await guard_master(update, context):
        return
    target = context.args[0].strip().lower() if context.args else ""
    watchdog = get_watchdog(context.application)
    if target == "all":
        ids = list(watchdog.config.destinations)
        for dest_id in ids:
            await watchdog.forget_destination(dest_id)
        logger.info("Unregistered all %d destinations", len(ids))
        await watchdog.save()
        await update.message.reply_text(f"Removed {len(ids)} destinations!")
        return
    try:
        dest_id = int(target)
    except ValueError:
        await update.message.reply_text("Usage: /remove <chat_id|all>")
        return
    dest = watchdog.config.destinations.get(dest_id)
    if dest is None:
        await update.message.reply_text(f"No destination with id {dest_id}.")
        return
    await watchdog.forget_destination(dest_id)
    logger.info("Unregistered destination %s (%s)", dest.name, dest_id)
    await watchdog.save()
    await reply_html(
        update, f"Destination {html.escape(dest.name)} ({view.code(dest_id)}) removed!"
    )


async def cmd_reset(update, context) -> None:
    if not await guard_master(update, context):
        return
    watchdog = get_watchdog(context.application)
    try:
        await watchdog.reload()
    except ValueError as e:
        await record_error("reset", "config reload failed", e, update.message.reply_text)
        return
    logger.info("Configuration reset from %s", watchdog.config_path or "defaults")
    await watchdog.save()
    await update.message.reply_text(
        "Configuration reloaded! All destinations were reset."
    )
