"""View layer for formatting Telegram messages (HTML)."""

from __future__ import annotations

import html
import math
import time
from datetime import datetime, timezone

from .models.embed import StatusEmbed
from .models.runtime_state import RuntimeSnapshot
from .models.status import ResourceStatus
from .models.watch_config import WatchConfig

STATUS_ICONS: dict[ResourceStatus, str] = {
    ResourceStatus.UP: "🟢",
    ResourceStatus.DOWN: "🔴",
    ResourceStatus.UNKNOWN: "🟡",
}


def bold(text: str) -> str:
    return f"<b>{html.escape(str(text))}</b>"


def code(text: str) -> str:
    return f"<code>{html.escape(str(text))}</code>"


def italic(text: str) -> str:
    return f"<i>{html.escape(str(text))}</i>"


def chunk(msg: str, size: int = 4000) -> list[str]:
    """Split message into chunks ensuring no chunk exceeds size limit."""
    if len(msg) <= size:
        return [msg]

    lines = msg.splitlines()
    chunks: list[str] = []
    current = ""
    for line in lines:
        if len(line) > size:
            if current:
                chunks.append(current)
                current = ""
            start = 0
            while start < len(line):
                chunks.append(line[start : start + size])
                start += size
            continue
        added_length = len(line) + (1 if current else 0)
        if len(current) + added_length > size and current:
            chunks.append(current)
            current = line
        else:
            current = f"{current}\n{line}" if current else line
    if current:
        chunks.append(current)
    return chunks


def format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def format_ago(value: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - value).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h {seconds % 3600 // 60}m ago"
    return f"{seconds // 86400}d {seconds % 86400 // 3600}h ago"


def render_status_embed(embed: StatusEmbed) -> str:
    """Render the live status message for a destination."""
    lines = [f"{STATUS_ICONS[embed.status]} {bold(embed.title)}"]
    if embed.description:
        lines.append(italic(embed.description))
    lines.append("")
    lines.append(f"{bold('Since:')} {html.escape(format_datetime(embed.since))}")
    lines.append(f"{bold('Address:')} {code(embed.address)}")
    return "\n".join(lines)


def render_status_report(snapshot: RuntimeSnapshot, watch: WatchConfig) -> str:
    probe = watch.probe
    lines = [
        f"{STATUS_ICONS[snapshot.status]} {bold(probe.resource_name)} is "
        f"{bold(str(snapshot.status))}",
        f"{bold('Since:')} {html.escape(format_datetime(snapshot.last_change))} "
        f"({html.escape(format_ago(snapshot.last_change))})",
        f"{bold('Address:')} {code(probe.resource_addr)}",
        f"{bold('Pending mismatches:')} {snapshot.counter}/{probe.threshold}",
        f"{bold('Interval:')} {probe.interval_s:g}s | "
        f"{bold('Timeout:')} {probe.timeout_s:g}s",
        f"{bold('Destinations:')} {len(watch.destinations)}/{watch.max_destinations}",
    ]
    return "\n".join(lines)


def render_destinations(watch: WatchConfig, snapshot: RuntimeSnapshot) -> str:
    if not watch.destinations:
        return "<i>No destinations registered.</i>"
    lines = [bold("Registered destinations:")]
    for dest in watch.ordered_destinations():
        channel = code(dest.channel) if dest.channel is not None else "no channel"
        role = code(dest.role) if dest.role else "no role"
        pointer = snapshot.messages.get(dest.id)
        message = f"message {code(pointer)}" if pointer is not None else "no message"
        lines.append(
            f"• {html.escape(dest.name)} {code(dest.id)} → {channel}, {role}, {message}"
        )
    return "\n".join(lines)


def render_info(version: str, started: datetime) -> str:
    return "\n".join(
        [
            bold(f"tele_watchdog v{version}"),
            f"{bold('Running since:')} {html.escape(format_datetime(started))} "
            f"({html.escape(format_ago(started))})",
        ]
    )


def _format_timestamp(ts: float | None) -> str:
    if not ts:
        return "never"
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts))


def _p95(samples: list[float]) -> float:
    if not samples:
        return 0.0
    ordered = sorted(samples)
    idx = max(0, math.ceil(0.95 * len(ordered)) - 1)
    return ordered[idx]


def render_command_metrics(metrics: dict) -> str:
    if not metrics:
        return "<i>No command metrics recorded yet.</i>"

    lines = [bold("Command Metrics:")]
    for name in sorted(metrics.keys()):
        entry = metrics[name]
        avg = entry.avg_latency_s
        p95 = _p95(entry.latencies_s)
        last_run = _format_timestamp(entry.last_run_ts)
        line = (
            f"{code(name)} runs {entry.count} ok {entry.success} err {entry.error} "
            f"rl {entry.rate_limited} avg {avg * 1000:.1f}ms "
            f"p95 {p95 * 1000:.1f}ms max {entry.max_latency_s * 1000:.1f}ms "
            f"last {html.escape(last_run)}"
        )
        lines.append(line)
    return "\n".join(lines)
