"""Watchdog facade: debounce, propagate and persist confirmed status changes."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from .channel import MessageRef, NotificationChannel
from .debounce import StatusDebouncer, Transition
from .errors import ChannelError, ProbeError
from .models.runtime_state import RuntimeSnapshot, RuntimeState, utcnow
from .models.status import ProbeOutcome, ResourceStatus
from .models.watch_config import WatchConfig
from .notify import DestinationResult, NotificationDispatcher
from .persistence import SavedData, StateFile, load_config_file

logger = logging.getLogger(__name__)


class Watchdog:
    """Owns the live configuration and the runtime state of one resource.

    The administration surface edits ``config`` in place; every tick and
    every notification pass works on a deep-copied snapshot of it.
    """

    def __init__(
        self,
        channel: NotificationChannel,
        state_file: StateFile,
        config: WatchConfig | None = None,
        state: RuntimeState | None = None,
        config_path: str | Path | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config or WatchConfig()
        self.state = state or RuntimeState()
        self.state_file = state_file
        self.config_path = Path(config_path) if config_path else None
        self.channel = channel
        self.debouncer = StatusDebouncer(self.state, clock=clock)
        self.dispatcher = NotificationDispatcher(self.state, channel)
        self.last_results: list[DestinationResult] = []
        self.needs_initial_save = False

    @classmethod
    def from_disk(
        cls,
        channel: NotificationChannel,
        state_file: StateFile,
        config_path: str | Path | None = None,
    ) -> "Watchdog":
        """Restore from the state file, else the config file, else defaults."""
        try:
            saved = state_file.load()
        except ValueError as e:
            logger.error("Failed to load saved state: %s", e)
            return cls(channel, state_file, config_path=config_path)

        if saved is not None:
            logger.info("Loaded saved state from %s", state_file.path)
            state = RuntimeState(
                status=saved.status,
                counter=saved.counter,
                last_change=saved.last_change,
                messages=dict(saved.messages),
            )
            return cls(
                channel, state_file, saved.config, state, config_path=config_path
            )

        logger.info("No saved state detected. Initializing...")
        watchdog = cls(
            channel,
            state_file,
            _load_config_or_default(config_path),
            config_path=config_path,
        )
        watchdog.needs_initial_save = True
        return watchdog

    def snapshot_config(self) -> WatchConfig:
        return self.config.snapshot()

    async def reload(self, config: WatchConfig | None = None) -> WatchConfig:
        """Swap the live configuration; the next tick picks it up.

        Without an argument the operator config file is re-read, falling
        back to built-in defaults when it does not exist. Status message
        pointers of destinations missing from the new configuration are
        dropped.
        """
        if config is None:
            config = _load_config_or_default(self.config_path, raise_errors=True)
        self.config = config
        stale = await self.state.retain_messages(config.destinations)
        if stale:
            logger.info("Dropped status message pointers for %s", sorted(stale))
        return config

    def current_status(self) -> ResourceStatus:
        return self.state.status

    async def runtime_snapshot(self) -> RuntimeSnapshot:
        return await self.state.snapshot()

    async def save(self) -> bool:
        snapshot = await self.state.snapshot()
        return await self.state_file.save(
            SavedData.from_snapshot(snapshot, self.config)
        )

    async def observe_and_propagate(
        self, raw: ProbeOutcome | ProbeError
    ) -> Transition | None:
        """Feed one raw sample; fully propagate a confirmed change before returning."""
        threshold = self.snapshot_config().probe.threshold
        transition = await self.debouncer.observe(raw, threshold)
        if transition is None:
            return None
        old, new = transition
        self.last_results = await self.dispatcher.dispatch(
            old, new, self.snapshot_config()
        )
        failed = [r for r in self.last_results if not r.ok]
        if failed:
            logger.warning(
                "Status %s -> %s: %d/%d destinations not updated",
                old,
                new,
                len(failed),
                len(self.last_results),
            )
        await self.save()
        return transition

    async def forget_destination(self, destination_id: int) -> None:
        self.config.destinations.pop(destination_id, None)
        await self.state.forget_message(destination_id)

    async def move_destination(self, destination_id: int, channel_id: int) -> None:
        """Point a destination at another chat.

        Message ids are only meaningful inside their own chat, so the old
        status message is deleted (best effort) and its pointer forgotten;
        the next confirmed change posts a fresh one in the new chat.
        """
        dest = self.config.destinations[destination_id]
        old_channel = dest.channel
        dest.channel = channel_id
        if old_channel == channel_id:
            return
        message_id = await self.state.forget_message(destination_id)
        if old_channel is None or message_id is None:
            return
        try:
            await self.channel.delete_message(MessageRef(old_channel, message_id))
        except ChannelError as e:
            logger.warning(
                "[destination %s] Failed to delete status message in old chat: %s",
                destination_id,
                e,
            )
            return
        logger.info(
            "[destination %s] Deleted status message %s in chat %s",
            destination_id,
            message_id,
            old_channel,
        )


def _load_config_or_default(
    config_path: Path | str | None, raise_errors: bool = False
) -> WatchConfig:
    if config_path is None:
        return WatchConfig()
    try:
        config = load_config_file(config_path)
    except ValueError as e:
        if raise_errors:
            raise
        logger.error("Failed to load config: %s", e)
        return WatchConfig()
    if config is None:
        logger.info("No config file detected. Default values will be used.")
        return WatchConfig()
    logger.info("Loaded config from %s", config_path)
    return config
