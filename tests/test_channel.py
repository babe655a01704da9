from types import SimpleNamespace

import pytest
from telegram.constants import ParseMode
from telegram.error import BadRequest, Forbidden

from tele_watchdog.channel import ChannelRef, MessageRef, TelegramChannel
from tele_watchdog.errors import (
    ChannelUnavailable,
    DeleteFailed,
    MessageUnavailable,
    SendFailed,
)
from tele_watchdog.models.embed import StatusEmbed
from tele_watchdog.models.status import ResourceStatus

from conftest import FIXED_NOW


class DummyBot:
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.deleted: list[tuple[int, int]] = []
        self.edit_error: Exception | None = None
        self.errors: dict[str, Exception] = {}

    def _maybe_raise(self, name: str) -> None:
        if name in self.errors:
            raise self.errors[name]

    async def get_chat(self, chat_id: int):
        self._maybe_raise("get_chat")
        return SimpleNamespace(id=chat_id, title="Ops", username=None)

    async def edit_message_reply_markup(self, chat_id, message_id, reply_markup=None):
        if self.edit_error is not None:
            raise self.edit_error
        return True

    async def delete_message(self, chat_id: int, message_id: int) -> bool:
        self._maybe_raise("delete_message")
        self.deleted.append((chat_id, message_id))
        return True

    async def send_message(self, chat_id: int, text: str, parse_mode=None):
        self._maybe_raise("send_message")
        self.sent.append({"chat_id": chat_id, "text": text, "parse_mode": parse_mode})
        return SimpleNamespace(message_id=500 + len(self.sent))


@pytest.mark.asyncio
async def test_get_channel_returns_ref() -> None:
    channel = TelegramChannel(DummyBot())

    ref = await channel.get_channel(-100)

    assert ref == ChannelRef(-100, "Ops")


@pytest.mark.asyncio
async def test_get_channel_not_found() -> None:
    bot = DummyBot()
    bot.errors["get_chat"] = BadRequest("Chat not found")

    with pytest.raises(ChannelUnavailable) as exc:
        await TelegramChannel(bot).get_channel(-100)
    assert exc.value.not_found


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        BadRequest(
            "Message is not modified: specified new message content and reply "
            "markup are exactly the same"
        ),
        BadRequest("Message can't be edited"),
    ],
)
async def test_get_message_exists_on_noop_edit(error) -> None:
    bot = DummyBot()
    bot.edit_error = error

    ref = await TelegramChannel(bot).get_message(ChannelRef(1), 42)

    assert ref == MessageRef(1, 42)


@pytest.mark.asyncio
async def test_get_message_missing() -> None:
    bot = DummyBot()
    bot.edit_error = BadRequest("Message to edit not found")

    with pytest.raises(MessageUnavailable) as exc:
        await TelegramChannel(bot).get_message(ChannelRef(1), 42)
    assert exc.value.not_found


@pytest.mark.asyncio
async def test_delete_failure_wrapped() -> None:
    bot = DummyBot()
    bot.errors["delete_message"] = BadRequest("Message can't be deleted")

    with pytest.raises(DeleteFailed):
        await TelegramChannel(bot).delete_message(MessageRef(1, 42))


@pytest.mark.asyncio
async def test_send_embed_uses_html() -> None:
    bot = DummyBot()
    embed = StatusEmbed.build("API", ResourceStatus.UP, "api.example.com", FIXED_NOW)

    message_id = await TelegramChannel(bot).send_embed(ChannelRef(1), embed)

    assert message_id == 501
    assert bot.sent[0]["parse_mode"] == ParseMode.HTML
    assert "<b>API is online!</b>" in bot.sent[0]["text"]


@pytest.mark.asyncio
async def test_send_text_is_verbatim() -> None:
    bot = DummyBot()

    await TelegramChannel(bot).send_text(ChannelRef(1), "API is back, <@&42>!")

    assert bot.sent[0] == {
        "chat_id": 1,
        "text": "API is back, <@&42>!",
        "parse_mode": None,
    }


@pytest.mark.asyncio
async def test_send_failure_wrapped() -> None:
    bot = DummyBot()
    bot.errors["send_message"] = Forbidden(
        "Forbidden: bot was kicked from the group chat"
    )

    with pytest.raises(SendFailed) as exc:
        await TelegramChannel(bot).send_text(ChannelRef(1), "hi")
    assert not exc.value.not_found
