"""Per-destination notification fan-out and status message reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .channel import ChannelRef, NotificationChannel
from .errors import ChannelError
from .models.embed import StatusEmbed
from .models.runtime_state import RuntimeState
from .models.status import ResourceStatus
from .models.watch_config import Destination, WatchConfig

logger = logging.getLogger(__name__)

TEMPLATE_RESOURCE_NAME = "%%RESOURCE%%"
TEMPLATE_ROLE_PING = "%%ROLE%%"
ROLE_FALLBACK_STRING = "people"


def replace_templates(message: str, resource_name: str, role: str | None) -> str:
    """Substitute every resource and role placeholder in ``message``."""
    role_ping = role or ROLE_FALLBACK_STRING
    return message.replace(TEMPLATE_RESOURCE_NAME, resource_name).replace(
        TEMPLATE_ROLE_PING, role_ping
    )


@dataclass(frozen=True)
class DestinationResult:
    destination_id: int
    ok: bool
    reason: str | None = None


class MessageReconciler:
    """Keeps exactly one live status message per destination.

    The previous message is deleted before a new one is sent. A failed delete
    or send leaves the stored pointer untouched so the next confirmed change
    retries from the same place.
    """

    def __init__(self, state: RuntimeState, channel: NotificationChannel) -> None:
        self._state = state
        self._channel = channel

    async def reconcile(
        self, destination: Destination, channel: ChannelRef, embed: StatusEmbed
    ) -> DestinationResult:
        dest_id = destination.id
        previous = await self._state.get_message(dest_id)

        if previous is None:
            logger.info(
                "[destination %s] No status message detected. Creating new one...",
                dest_id,
            )
        else:
            try:
                message = await self._channel.get_message(channel, previous)
            except ChannelError as e:
                logger.warning(
                    "[destination %s] Failed to fetch status message: %s. "
                    "Creating new one...",
                    dest_id,
                    e,
                )
            else:
                try:
                    await self._channel.delete_message(message)
                except ChannelError as e:
                    logger.error(
                        "[destination %s] Failed to delete old status message: %s",
                        dest_id,
                        e,
                    )
                    return DestinationResult(dest_id, False, "delete failed")
                logger.info("[destination %s] Deleted old status message", dest_id)

        try:
            message_id = await self._channel.send_embed(channel, embed)
        except ChannelError as e:
            logger.error(
                "[destination %s] Failed to send new status message: %s", dest_id, e
            )
            return DestinationResult(dest_id, False, "send failed")

        await self._state.set_message(dest_id, message_id)
        logger.info(
            "[destination %s] Sent new status message with id %s", dest_id, message_id
        )
        return DestinationResult(dest_id, True)


class NotificationDispatcher:
    """Fans one confirmed status change out to every destination, in id order."""

    def __init__(self, state: RuntimeState, channel: NotificationChannel) -> None:
        self._state = state
        self._channel = channel
        self.reconciler = MessageReconciler(state, channel)

    async def dispatch(
        self, old: ResourceStatus, new: ResourceStatus, watch: WatchConfig
    ) -> list[DestinationResult]:
        async with self._state.status_lock:
            since = self._state.last_change
        probe = watch.probe
        embed = StatusEmbed.build(probe.resource_name, new, probe.resource_addr, since)

        results: list[DestinationResult] = []
        for destination in watch.ordered_destinations():
            try:
                result = await self._notify_destination(
                    destination, old, new, embed, probe.resource_name
                )
            except Exception as e:
                logger.exception(
                    "[destination %s] Unexpected notification failure", destination.id
                )
                result = DestinationResult(destination.id, False, str(e))
            results.append(result)
        return results

    async def _notify_destination(
        self,
        destination: Destination,
        old: ResourceStatus,
        new: ResourceStatus,
        embed: StatusEmbed,
        resource_name: str,
    ) -> DestinationResult:
        dest_id = destination.id
        if destination.channel is None:
            logger.warning(
                "[destination %s] No notification channel specified. "
                "Notification aborted.",
                dest_id,
            )
            return DestinationResult(dest_id, False, "no channel")
        try:
            channel = await self._channel.get_channel(destination.channel)
        except ChannelError as e:
            logger.warning(
                "[destination %s] Failed to fetch channel: %s. Notification aborted.",
                dest_id,
                e,
            )
            return DestinationResult(dest_id, False, "channel unavailable")

        template = _announcement_template(destination, old, new)
        if template is not None:
            text = replace_templates(template, resource_name, destination.role)
            try:
                message_id = await self._channel.send_text(channel, text)
            except ChannelError as e:
                logger.error(
                    "[destination %s] Failed to send %s message: %s", dest_id, new, e
                )
                return DestinationResult(dest_id, False, "announcement failed")
            logger.info(
                "[destination %s] Sent %s message with id %s", dest_id, new, message_id
            )

        return await self.reconciler.reconcile(destination, channel, embed)


def _announcement_template(
    destination: Destination, old: ResourceStatus, new: ResourceStatus
) -> str | None:
    if old == ResourceStatus.UP and new == ResourceStatus.DOWN:
        return destination.down_message
    if old == ResourceStatus.DOWN and new == ResourceStatus.UP:
        return destination.up_message
    return None
