"""Notification channel capability and its Telegram implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError

from . import view
from .errors import ChannelUnavailable, DeleteFailed, MessageUnavailable, SendFailed
from .models.embed import StatusEmbed

if TYPE_CHECKING:
    from telegram import Bot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelRef:
    id: int
    title: str = ""


@dataclass(frozen=True)
class MessageRef:
    channel_id: int
    message_id: int


class NotificationChannel(Protocol):
    async def get_channel(self, channel_id: int) -> ChannelRef: ...

    async def get_message(self, channel: ChannelRef, message_id: int) -> MessageRef: ...

    async def delete_message(self, message: MessageRef) -> None: ...

    async def send_text(self, channel: ChannelRef, content: str) -> int: ...

    async def send_embed(self, channel: ChannelRef, embed: StatusEmbed) -> int: ...


def _is_not_found(exc: TelegramError) -> bool:
    text = str(exc).lower()
    return "not found" in text or "chat_id is empty" in text


class TelegramChannel:
    """NotificationChannel backed by a python-telegram-bot ``Bot``."""

    def __init__(self, bot: "Bot") -> None:
        self._bot = bot

    async def get_channel(self, channel_id: int) -> ChannelRef:
        try:
            chat = await self._bot.get_chat(chat_id=channel_id)
        except TelegramError as e:
            raise ChannelUnavailable(
                f"Failed to fetch chat {channel_id}: {e}", not_found=_is_not_found(e)
            ) from e
        title = getattr(chat, "title", None) or getattr(chat, "username", None) or ""
        return ChannelRef(id=chat.id, title=str(title))

    async def get_message(self, channel: ChannelRef, message_id: int) -> MessageRef:
        # The Bot API cannot fetch a message by id. Clearing the (absent) reply
        # markup is a no-op edit: "not modified" proves the message exists.
        try:
            await self._bot.edit_message_reply_markup(
                chat_id=channel.id, message_id=message_id, reply_markup=None
            )
        except BadRequest as e:
            text = str(e).lower()
            if "not modified" in text or "can't be edited" in text:
                return MessageRef(channel.id, message_id)
            raise MessageUnavailable(
                f"Failed to fetch message {message_id}: {e}",
                not_found=_is_not_found(e),
            ) from e
        except TelegramError as e:
            raise MessageUnavailable(
                f"Failed to fetch message {message_id}: {e}"
            ) from e
        return MessageRef(channel.id, message_id)

    async def delete_message(self, message: MessageRef) -> None:
        try:
            await self._bot.delete_message(
                chat_id=message.channel_id, message_id=message.message_id
            )
        except TelegramError as e:
            raise DeleteFailed(
                f"Failed to delete message {message.message_id}: {e}",
                not_found=_is_not_found(e),
            ) from e

    async def send_text(self, channel: ChannelRef, content: str) -> int:
        # Announcements are operator text and go out verbatim.
        return await self._send(channel, content)

    async def send_embed(self, channel: ChannelRef, embed: StatusEmbed) -> int:
        return await self._send(
            channel, view.render_status_embed(embed), parse_mode=ParseMode.HTML
        )

    async def _send(
        self, channel: ChannelRef, text: str, parse_mode: str | None = None
    ) -> int:
        try:
            message = await self._bot.send_message(
                chat_id=channel.id, text=text, parse_mode=parse_mode
            )
        except TelegramError as e:
            raise SendFailed(
                f"Failed to send message to {channel.id}: {e}",
                not_found=_is_not_found(e),
            ) from e
        return message.message_id
