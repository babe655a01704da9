"""Command registry (single source of truth for help + wiring)."""

from __future__ import annotations

from .models.command_spec import CommandSpec, Group


_INFO_COMMANDS = (
    CommandSpec("start", "Info", "/start", "show help", "cmd_start"),
    CommandSpec("help", "Info", "/help", "this menu", "cmd_help"),
    CommandSpec("info", "Info", "/info", "bot version and uptime", "cmd_info"),
    CommandSpec(
        "status",
        "Info",
        "/status",
        "current status of the watched resource",
        "cmd_status",
    ),
)

_DESTINATION_COMMANDS = (
    CommandSpec(
        "register",
        "Destination",
        "/register",
        "subscribe this chat to status updates",
        "cmd_register",
        scope="destination",
    ),
    CommandSpec(
        "unregister",
        "Destination",
        "/unregister",
        "stop sending updates to this chat",
        "cmd_unregister",
        scope="destination",
    ),
    CommandSpec(
        "channel",
        "Destination",
        "/channel [chat_id|here]",
        "chat that receives status messages",
        "cmd_channel",
        scope="destination",
    ),
    CommandSpec(
        "role",
        "Destination",
        "/role [mention]",
        "who to mention on up/down (empty clears)",
        "cmd_role",
        scope="destination",
    ),
    CommandSpec(
        "message",
        "Destination",
        "/message up|down <text>",
        "announcement text (%%RESOURCE%%, %%ROLE%%)",
        "cmd_message",
        scope="destination",
    ),
)

_MONITOR_COMMANDS = (
    CommandSpec(
        "name",
        "Monitor",
        "/name <name>",
        "display name of the resource",
        "cmd_name",
        scope="master",
    ),
    CommandSpec(
        "address",
        "Monitor",
        "/address <host>",
        "host or IP to ping",
        "cmd_address",
        scope="master",
    ),
    CommandSpec(
        "interval",
        "Monitor",
        "/interval <seconds>",
        "time between pings (1-86400)",
        "cmd_interval",
        scope="master",
    ),
    CommandSpec(
        "timeout",
        "Monitor",
        "/timeout <seconds>",
        "ping reply deadline (1-60)",
        "cmd_timeout",
        scope="master",
    ),
    CommandSpec(
        "attempts",
        "Monitor",
        "/attempts <n>",
        "consecutive samples needed to change status",
        "cmd_attempts",
        scope="master",
    ),
    CommandSpec(
        "limit",
        "Monitor",
        "/limit <n>",
        "maximum number of destinations (1-100)",
        "cmd_limit",
        scope="master",
    ),
    CommandSpec(
        "destinations",
        "Monitor",
        "/destinations",
        "list registered destinations",
        "cmd_destinations",
        scope="master",
    ),
    CommandSpec(
        "remove",
        "Monitor",
        "/remove <chat_id|all>",
        "unregister one or all destinations",
        "cmd_remove",
        scope="master",
    ),
    CommandSpec(
        "reset",
        "Monitor",
        "/reset",
        "reload configuration from the config file",
        "cmd_reset",
        scope="master",
    ),
    CommandSpec(
        "metrics",
        "Monitor",
        "/metrics",
        "command metrics summary",
        "cmd_metrics",
        scope="master",
    ),
)

COMMANDS: tuple[CommandSpec, ...] = (
    _INFO_COMMANDS + _DESTINATION_COMMANDS + _MONITOR_COMMANDS
)

GROUP_ORDER: tuple[Group, ...] = ("Info", "Destination", "Monitor")
