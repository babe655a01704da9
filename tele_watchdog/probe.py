"""Single reachability probe (ICMP echo via the system ping binary)."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import math
import socket

from . import cli, config
from .errors import ProbeError, ProbeTransportError, ResolutionError
from .models.status import ProbeOutcome

logger = logging.getLogger(__name__)

SEQUENCE_MODULO = 1 << 16
# Extra time granted to the ping process on top of its own reply deadline.
_PROCESS_GRACE_S = 2.0
_TRANSPORT_MARKERS = ("operation not permitted", "permission denied")


def next_sequence(sequence: int) -> int:
    """Return the next ICMP echo sequence number, wrapping at 16 bits."""
    return (sequence + 1) % SEQUENCE_MODULO


async def resolve(address: str) -> str:
    """Resolve a hostname or literal IP to a single network address.

    Raises:
        ResolutionError: if the name has no address records.
    """
    host = (address or "").strip()
    if not host:
        raise ResolutionError("Empty address")
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        pass
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError) as e:
        raise ResolutionError(f"Failed to resolve {host}: {e}") from e
    for family, _, _, _, sockaddr in infos:
        if family in (socket.AF_INET, socket.AF_INET6):
            return str(sockaddr[0])
    raise ResolutionError(f"Failed to resolve {host}: no IP associated with it")


def build_ping_cmd(ip: str, timeout_s: float) -> list[str]:
    cmd = [config.PING_BIN, "-n", "-c", "1", "-W", str(max(1, math.ceil(timeout_s)))]
    if ipaddress.ip_address(ip).version == 6:
        cmd.insert(1, "-6")
    cmd.append(ip)
    return cmd


async def probe(address: str, timeout_s: float, sequence: int = 0) -> ProbeOutcome:
    """Send one echo request to ``address`` and classify the result.

    Returns REACHABLE on a reply and UNREACHABLE when no reply arrives before
    the deadline.

    Raises:
        ResolutionError: the address could not be resolved.
        ProbeTransportError: the ping mechanism cannot run at all.
        ProbeError: any other failure.
    """
    ip = await resolve(address)
    cmd = build_ping_cmd(ip, timeout_s)
    rc, out, err = await cli.run_cmd(cmd, timeout=timeout_s + _PROCESS_GRACE_S)

    if rc == 0:
        logger.debug("Ping %s (%s) seq=%d succeeded", address, ip, sequence)
        return ProbeOutcome.REACHABLE
    if rc in (1, cli.RC_TIMEOUT):
        logger.debug("Ping %s (%s) seq=%d timed out", address, ip, sequence)
        return ProbeOutcome.UNREACHABLE
    if rc in (cli.RC_NOT_FOUND, cli.RC_NOT_EXECUTABLE):
        raise ProbeTransportError(f"Cannot run {cmd[0]}: {err or 'unavailable'}")
    detail = (err or out or f"exit code {rc}").strip()
    if any(marker in detail.lower() for marker in _TRANSPORT_MARKERS):
        raise ProbeTransportError(f"Cannot open ICMP socket: {detail}")
    raise ProbeError(f"Failed to ping {address}: {detail}")
