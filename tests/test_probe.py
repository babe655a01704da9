import socket
from unittest.mock import AsyncMock

import pytest

from tele_watchdog import probe as probe_mod
from tele_watchdog.errors import ProbeError, ProbeTransportError, ResolutionError
from tele_watchdog.models.status import ProbeOutcome


@pytest.fixture
def fake_resolve(monkeypatch):
    async def resolve(address):
        return "192.0.2.10"

    monkeypatch.setattr(probe_mod, "resolve", resolve)


def _fake_run(monkeypatch, rc: int, out: str = "", err: str = "") -> AsyncMock:
    mock = AsyncMock(return_value=(rc, out, err))
    monkeypatch.setattr(probe_mod.cli, "run_cmd", mock)
    return mock


@pytest.mark.asyncio
async def test_reply_is_reachable(monkeypatch, fake_resolve) -> None:
    run = _fake_run(monkeypatch, 0, "1 packets transmitted, 1 received")

    outcome = await probe_mod.probe("api.example.com", 2.5, sequence=7)

    assert outcome == ProbeOutcome.REACHABLE
    cmd = run.await_args.args[0]
    assert cmd[1:] == ["-n", "-c", "1", "-W", "3", "192.0.2.10"]
    assert run.await_args.kwargs["timeout"] == pytest.approx(4.5)


@pytest.mark.asyncio
@pytest.mark.parametrize("rc", [1, 124])
async def test_no_reply_is_unreachable(monkeypatch, fake_resolve, rc) -> None:
    _fake_run(monkeypatch, rc)

    assert await probe_mod.probe("api.example.com", 1.0) == ProbeOutcome.UNREACHABLE


@pytest.mark.asyncio
@pytest.mark.parametrize("rc", [126, 127])
async def test_missing_binary_is_transport_error(monkeypatch, fake_resolve, rc) -> None:
    _fake_run(monkeypatch, rc, err="not found")

    with pytest.raises(ProbeTransportError) as exc:
        await probe_mod.probe("api.example.com", 1.0)
    assert exc.value.cause == "transport"


@pytest.mark.asyncio
async def test_permission_denied_is_transport_error(monkeypatch, fake_resolve) -> None:
    _fake_run(monkeypatch, 2, err="ping: socket: Operation not permitted")

    with pytest.raises(ProbeTransportError):
        await probe_mod.probe("api.example.com", 1.0)


@pytest.mark.asyncio
async def test_other_failure_is_probe_error(monkeypatch, fake_resolve) -> None:
    _fake_run(monkeypatch, 2, err="ping: sendmsg: Network is unreachable")

    with pytest.raises(ProbeError) as exc:
        await probe_mod.probe("api.example.com", 1.0)
    assert not isinstance(exc.value, ProbeTransportError)
    assert exc.value.cause == "other"
    assert "Network is unreachable" in str(exc.value)


@pytest.mark.asyncio
async def test_literal_ip_skips_dns(monkeypatch) -> None:
    def no_dns(*args, **kwargs):
        raise AssertionError("DNS lookup not expected")

    monkeypatch.setattr(socket, "getaddrinfo", no_dns)

    assert await probe_mod.resolve(" 10.0.0.1 ") == "10.0.0.1"


@pytest.mark.asyncio
async def test_resolution_failure(monkeypatch) -> None:
    def fail(*args, **kwargs):
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

    monkeypatch.setattr(socket, "getaddrinfo", fail)

    with pytest.raises(ResolutionError) as exc:
        await probe_mod.resolve("does-not-exist.invalid")
    assert exc.value.cause == "resolution"


@pytest.mark.asyncio
async def test_resolution_picks_first_ip(monkeypatch) -> None:
    def lookup(host, port, *args, **kwargs):
        return [
            (socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("2001:db8::1", 0, 0, 0)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("192.0.2.1", 0)),
        ]

    monkeypatch.setattr(socket, "getaddrinfo", lookup)

    assert await probe_mod.resolve("dual.example.com") == "2001:db8::1"


@pytest.mark.asyncio
async def test_empty_address_is_resolution_error() -> None:
    with pytest.raises(ResolutionError):
        await probe_mod.resolve("   ")


def test_ipv6_ping_command() -> None:
    cmd = probe_mod.build_ping_cmd("2001:db8::1", 0.2)

    assert cmd[1] == "-6"
    assert cmd[-3:] == ["-W", "1", "2001:db8::1"]


def test_next_sequence_wraps() -> None:
    assert probe_mod.next_sequence(0) == 1
    assert probe_mod.next_sequence(probe_mod.SEQUENCE_MODULO - 1) == 0
