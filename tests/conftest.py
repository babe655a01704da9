"""Shared test fixtures and dummy classes."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from telegram.error import BadRequest

from tele_watchdog.channel import ChannelRef, MessageRef
from tele_watchdog.errors import (
    ChannelUnavailable,
    DeleteFailed,
    MessageUnavailable,
    SendFailed,
)
from tele_watchdog.models.bot_state import WATCHDOG_KEY
from tele_watchdog.models.embed import StatusEmbed
from tele_watchdog.models.runtime_state import RuntimeState
from tele_watchdog.models.status import ResourceStatus
from tele_watchdog.models.watch_config import Destination, ProbeConfig, WatchConfig
from tele_watchdog.persistence import StateFile
from tele_watchdog.watchdog import Watchdog

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class DummyChat:
    """Dummy Telegram chat for testing."""

    def __init__(self, chat_id: int, title: str | None = None) -> None:
        self.id = chat_id
        self.title = title
        self.username = None
        self.type = "private" if chat_id > 0 else "group"
        self.sent: list[str] = []

    async def send_message(self, text: str, **_: Any) -> None:
        self.sent.append(text)


class DummyUser:
    """Dummy Telegram user for testing."""

    def __init__(self, user_id: int, username: str | None = None) -> None:
        self.id = user_id
        self.username = username


class DummyMessage:
    """Dummy Telegram message for testing."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.replies: list[str] = []

    async def reply_text(self, text: str, **_: Any) -> None:
        self.replies.append(text)


class DummyUpdate:
    """Dummy Telegram update for testing."""

    def __init__(
        self, chat_id: int, user_id: int, text: str = "", title: str | None = None
    ) -> None:
        self.effective_chat = DummyChat(chat_id, title)
        self.effective_user = DummyUser(user_id)
        self.message = DummyMessage(text)
        self.effective_message = self.message


class DummyBot:
    """Records get_chat lookups; ids in ``missing`` raise like Telegram does."""

    def __init__(self) -> None:
        self.missing: set[int] = set()

    async def get_chat(self, chat_id: int) -> DummyChat:
        if chat_id in self.missing:
            raise BadRequest("Chat not found")
        return DummyChat(chat_id)


class DummyApplication:
    """Dummy Telegram application for testing."""

    def __init__(self) -> None:
        self.bot_data: dict[str, object] = {}


class DummyContext:
    """Dummy Telegram context for testing."""

    def __init__(
        self, args: list[str] | None = None, watchdog: Watchdog | None = None
    ) -> None:
        self.args = args or []
        self.application = DummyApplication()
        self.bot = DummyBot()
        if watchdog is not None:
            self.application.bot_data[WATCHDOG_KEY] = watchdog


class FakeChannel:
    """In-memory NotificationChannel with per-channel failure switches."""

    def __init__(self) -> None:
        # keyed by (chat id, message id); ids are only unique within a chat
        self.messages: dict[tuple[int, int], object] = {}
        self.calls: list[tuple] = []
        self.fail_channels: set[int] = set()
        self.fail_send_text: set[int] = set()
        self.fail_send_embed: set[int] = set()
        self.fail_delete: set[int] = set()
        self._next_id = 100

    def _store(self, channel_id: int, content: object) -> int:
        self._next_id += 1
        self.messages[(channel_id, self._next_id)] = content
        return self._next_id

    async def get_channel(self, channel_id: int) -> ChannelRef:
        self.calls.append(("get_channel", channel_id))
        if channel_id in self.fail_channels:
            raise ChannelUnavailable("Chat not found", not_found=True)
        return ChannelRef(channel_id)

    async def get_message(self, channel: ChannelRef, message_id: int) -> MessageRef:
        self.calls.append(("get_message", channel.id, message_id))
        if (channel.id, message_id) not in self.messages:
            raise MessageUnavailable("Message not found", not_found=True)
        return MessageRef(channel.id, message_id)

    async def delete_message(self, message: MessageRef) -> None:
        self.calls.append(("delete_message", message.channel_id, message.message_id))
        if message.channel_id in self.fail_delete:
            raise DeleteFailed("Message can't be deleted")
        self.messages.pop((message.channel_id, message.message_id), None)

    async def send_text(self, channel: ChannelRef, content: str) -> int:
        self.calls.append(("send_text", channel.id, content))
        if channel.id in self.fail_send_text:
            raise SendFailed("Forbidden")
        return self._store(channel.id, content)

    async def send_embed(self, channel: ChannelRef, embed: StatusEmbed) -> int:
        self.calls.append(("send_embed", channel.id, embed.status))
        if channel.id in self.fail_send_embed:
            raise SendFailed("Forbidden")
        return self._store(channel.id, embed)

    def texts(self, channel_id: int) -> list[str]:
        return [
            content
            for (cid, _), content in self.messages.items()
            if cid == channel_id and isinstance(content, str)
        ]

    def embeds(self, channel_id: int) -> list[StatusEmbed]:
        return [
            content
            for (cid, _), content in self.messages.items()
            if cid == channel_id and isinstance(content, StatusEmbed)
        ]


def make_destination(dest_id: int, **kwargs: Any) -> Destination:
    kwargs.setdefault("channel", dest_id)
    kwargs.setdefault("name", f"chat {dest_id}")
    return Destination(id=dest_id, **kwargs)


def make_watchdog(
    tmp_path: Path,
    channel: FakeChannel | None = None,
    destinations: list[Destination] | None = None,
    status: ResourceStatus = ResourceStatus.UP,
    threshold: int = 3,
) -> Watchdog:
    watch = WatchConfig(
        probe=ProbeConfig(
            resource_name="API", resource_addr="api.example.com", threshold=threshold
        ),
        destinations={d.id: d for d in destinations or []},
    )
    state = RuntimeState(status=status, last_change=FIXED_NOW)
    return Watchdog(
        channel or FakeChannel(),
        StateFile(tmp_path / "state.json"),
        config=watch,
        state=state,
        clock=lambda: FIXED_NOW,
    )
