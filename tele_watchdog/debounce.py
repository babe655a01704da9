"""Hysteresis between raw probe samples and the confirmed resource status."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from .errors import ProbeError
from .models.runtime_state import RuntimeState, utcnow
from .models.status import OUTCOME_STATUS, ProbeOutcome, ResourceStatus

logger = logging.getLogger(__name__)

Transition = tuple[ResourceStatus, ResourceStatus]


def candidate_status(raw: ProbeOutcome | ProbeError) -> ResourceStatus:
    if isinstance(raw, ProbeError):
        return ResourceStatus.UNKNOWN
    return OUTCOME_STATUS[raw]


class StatusDebouncer:
    """Confirms a status flip only after ``threshold`` consecutive mismatches.

    The counter is shared by the whole resource. A sample matching the
    confirmed status resets it; the sample that brings it up to the
    threshold flips the status, resets the counter and stamps the change.
    """

    def __init__(
        self, state: RuntimeState, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._state = state
        self._clock = clock

    async def observe(
        self, raw: ProbeOutcome | ProbeError, threshold: int
    ) -> Transition | None:
        candidate = candidate_status(raw)
        required = max(1, int(threshold))
        state = self._state
        async with state.status_lock:
            old = state.status
            if candidate == old:
                if state.counter:
                    logger.debug(
                        "Sample %s matches confirmed status, counter reset from %d",
                        candidate,
                        state.counter,
                    )
                state.counter = 0
                return None

            state.counter += 1
            if state.counter < required:
                logger.debug(
                    "Sample %s disagrees with %s (%d/%d)",
                    candidate,
                    old,
                    state.counter,
                    required,
                )
                return None

            state.status = candidate
            state.counter = 0
            state.last_change = self._clock()
        logger.info("Changed status from %s to %s", old, candidate)
        return old, candidate
