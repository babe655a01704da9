"""Process-wide runtime state shared by the debouncer and the reconcilers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .status import ResourceStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RuntimeSnapshot:
    status: ResourceStatus
    counter: int
    last_change: datetime
    messages: dict[int, int]


@dataclass
class RuntimeState:
    """Confirmed status plus per-destination status message pointers.

    Two lock groups: ``status_lock`` guards status, counter and last_change;
    ``messages_lock`` guards the pointer mapping. Neither lock may be held
    across a network call.
    """

    status: ResourceStatus = ResourceStatus.UNKNOWN
    counter: int = 0
    last_change: datetime = field(default_factory=utcnow)
    messages: dict[int, int] = field(default_factory=dict)

    status_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, repr=False, compare=False
    )
    messages_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, repr=False, compare=False
    )

    async def snapshot(self) -> RuntimeSnapshot:
        async with self.status_lock:
            status, counter, last_change = self.status, self.counter, self.last_change
        async with self.messages_lock:
            messages = dict(self.messages)
        return RuntimeSnapshot(
            status=status, counter=counter, last_change=last_change, messages=messages
        )

    async def get_message(self, destination_id: int) -> int | None:
        async with self.messages_lock:
            return self.messages.get(destination_id)

    async def set_message(self, destination_id: int, message_id: int) -> None:
        async with self.messages_lock:
            self.messages[destination_id] = message_id

    async def forget_message(self, destination_id: int) -> int | None:
        async with self.messages_lock:
            return self.messages.pop(destination_id, None)

    async def retain_messages(self, destination_ids) -> list[int]:
        """Drop pointers for destinations not in ``destination_ids``."""
        keep = set(destination_ids)
        async with self.messages_lock:
            stale = [key for key in self.messages if key not in keep]
            for key in stale:
                del self.messages[key]
        return stale
