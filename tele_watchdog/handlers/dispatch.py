"""Dispatch layer: applies rate limiting then calls the real handlers."""

from __future__ import annotations

from .common import rate_limit
from . import destinations, meta, monitor


# Info
cmd_start = rate_limit(meta.cmd_start, name="start")
cmd_help = rate_limit(meta.cmd_help, name="help")
cmd_info = rate_limit(meta.cmd_info, name="info")
cmd_status = rate_limit(meta.cmd_status, name="status")
cmd_metrics = rate_limit(meta.cmd_metrics, name="metrics")

# Destination
cmd_register = rate_limit(destinations.cmd_register, name="register")
cmd_unregister = rate_limit(destinations.cmd_unregister, name="unregister")
cmd_channel = rate_limit(destinations.cmd_channel, name="channel")
cmd_role = rate_limit(destinations.cmd_role, name="role")
cmd_message = rate_limit(destinations.cmd_message, name="message")

# Monitor
cmd_name = rate_limit(monitor.cmd_name, name="name")
cmd_address = rate_limit(monitor.cmd_address, name="address")
cmd_interval = rate_limit(monitor.cmd_interval, name="interval")
cmd_timeout = rate_limit(monitor.cmd_timeout, name="timeout")
cmd_attempts = rate_limit(monitor.cmd_attempts, name="attempts")
cmd_limit = rate_limit(monitor.cmd_limit, name="limit")
cmd_destinations = rate_limit(monitor.cmd_destinations, name="destinations")
cmd_remove = rate_limit(monitor.cmd_remove, name="remove")
cmd_reset = rate_limit(monitor.cmd_reset, name="reset")
