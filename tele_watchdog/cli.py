"""Async subprocess helper used by the ping probe."""

from __future__ import annotations

import asyncio
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

RC_TIMEOUT = 124
RC_NOT_EXECUTABLE = 126
RC_NOT_FOUND = 127


async def run_cmd(cmd: list[str], timeout: float = 10) -> Tuple[int, str, str]:
    """Run a command asynchronously and return (returncode, stdout, stderr).

    Args:
        cmd: Command and arguments as a list (e.g., ["ping", "-c", "1", "host"])
        timeout: Maximum time in seconds to wait for command completion

    Returns:
        Tuple of (return_code, stdout, stderr) where return_code is the
        process exit code, or 124 on timeout, 126 when the binary cannot be
        executed and 127 when it is not found.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.debug("Command not found: %s", cmd[0] if cmd else "")
        return RC_NOT_FOUND, "", "not found"
    except PermissionError as e:
        logger.debug("Command not executable: %s (%s)", cmd[0] if cmd else "", e)
        return RC_NOT_EXECUTABLE, "", str(e)

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
        logger.debug("Command timed out after %.1fs: %s", timeout, " ".join(cmd))
        return RC_TIMEOUT, "", "timeout"
    return (
        process.returncode or 0,
        stdout.decode(errors="replace").strip(),
        stderr.decode(errors="replace").strip(),
    )
