"""Periodic probe loop (started once per Application)."""
from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable

from . import probe
from .errors import ProbeError, ProbeTransportError
from .models.bot_state import BOT_STATE_KEY, WATCHDOG_KEY, BotState
from .models.status import ProbeOutcome
from .watchdog import Watchdog

if TYPE_CHECKING:
    from telegram.ext import Application

logger = logging.getLogger(__name__)

_TASK_PROBE = "probe"
# Pause after an unexpected loop error before the next tick.
_ERROR_BACKOFF_S = 5.0

ProbeFn = Callable[[str, float, int], Awaitable[ProbeOutcome]]


class SchedulerState(str, Enum):
    IDLE = "idle"
    PROBING = "probing"


class ProbeScheduler:
    """Runs one probe per tick and feeds its outcome to the watchdog.

    Probes never overlap: the next tick starts only after the previous
    sample, including any notification pass and persistence, is done.
    The interval and timeout are re-read at the start of every tick.
    """

    def __init__(
        self,
        watchdog: Watchdog,
        probe_fn: ProbeFn | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.watchdog = watchdog
        self.state = SchedulerState.IDLE
        self.sequence = 0
        self._probe = probe_fn or probe.probe
        self._sleep = sleep
        self._clock = clock

    async def tick(self) -> float:
        """Run one probe cycle and return the interval to wait afterwards."""
        watch = self.watchdog.snapshot_config()
        cfg = watch.probe
        self.sequence = probe.next_sequence(self.sequence)

        self.state = SchedulerState.PROBING
        try:
            raw: ProbeOutcome | ProbeError = await self._probe(
                cfg.resource_addr, cfg.timeout_s, self.sequence
            )
        except ProbeTransportError:
            raise
        except ProbeError as e:
            logger.error("Failed to healthcheck %s: %s", cfg.resource_addr, e)
            raw = e
        finally:
            self.state = SchedulerState.IDLE

        await self.watchdog.observe_and_propagate(raw)
        return cfg.interval_s

    async def run(self) -> None:
        logger.info("Starting probe loop")
        while True:
            start = self._clock()
            try:
                interval = await self.tick()
            except (asyncio.CancelledError, ProbeTransportError):
                raise
            except Exception:
                logger.exception("Probe loop error")
                await self._sleep(_ERROR_BACKOFF_S)
                continue
            elapsed = self._clock() - start
            await self._sleep(max(0.0, interval - elapsed))


def _get_state(app: "Application") -> BotState:
    return app.bot_data.setdefault(BOT_STATE_KEY, BotState())


def _on_done(app: "Application", task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        logger.warning("Probe loop exited. Stopping the bot.")
    else:
        logger.critical("Probe loop failed: %s. Stopping the bot.", exc, exc_info=exc)
    app.stop_running()


def ensure_started(app: "Application") -> asyncio.Task:
    state = _get_state(app)
    task = state.tasks.get(_TASK_PROBE)
    if isinstance(task, asyncio.Task) and not task.done():
        return task
    watchdog: Watchdog = app.bot_data[WATCHDOG_KEY]
    scheduler = ProbeScheduler(watchdog)
    task = asyncio.create_task(scheduler.run())
    task.add_done_callback(lambda t: _on_done(app, t))
    state.tasks[_TASK_PROBE] = task
    return task
