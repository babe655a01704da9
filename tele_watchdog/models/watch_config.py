"""Watched resource and destination configuration dataclasses."""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field

DEFAULT_RESOURCE_NAME = "BYOND"
DEFAULT_RESOURCE_ADDR = "hub.byond.com"
DEFAULT_THRESHOLD = 3
DEFAULT_TIMEOUT_S = 5.0
DEFAULT_INTERVAL_S = 10.0
DEFAULT_MAX_DESTINATIONS = 10

DEFAULT_UP_MESSAGE = "%%RESOURCE%% is back online, %%ROLE%%!"
DEFAULT_DOWN_MESSAGE = "Nevermind, it's dead again. Boowomp 😭."


def _as_float(raw: object, default: float) -> float:
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def _as_mapping(data: object, what: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _as_int(raw: object, default: int) -> int:
    try:
        return int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


@dataclass
class ProbeConfig:
    resource_name: str = DEFAULT_RESOURCE_NAME
    resource_addr: str = DEFAULT_RESOURCE_ADDR
    threshold: int = DEFAULT_THRESHOLD
    timeout_s: float = DEFAULT_TIMEOUT_S
    interval_s: float = DEFAULT_INTERVAL_S

    @classmethod
    def from_dict(cls, data: dict | None) -> "ProbeConfig":
        data = _as_mapping(data, "probe")
        return cls(
            resource_name=str(data.get("resource_name") or DEFAULT_RESOURCE_NAME),
            resource_addr=str(data.get("resource_addr") or DEFAULT_RESOURCE_ADDR),
            threshold=max(1, _as_int(data.get("threshold"), DEFAULT_THRESHOLD)),
            timeout_s=_as_float(data.get("timeout_s"), DEFAULT_TIMEOUT_S),
            interval_s=_as_float(data.get("interval_s"), DEFAULT_INTERVAL_S),
        )


@dataclass
class Destination:
    """One subscriber chat.

    ``id`` is the chat the destination was registered from; ``channel`` is the
    chat that receives the status message and announcements. ``role`` is the
    mention text substituted for ``%%ROLE%%`` (for example ``@oncall``).
    """

    id: int
    name: str = "Noname chat"
    channel: int | None = None
    role: str | None = None
    up_message: str = DEFAULT_UP_MESSAGE
    down_message: str = DEFAULT_DOWN_MESSAGE

    @classmethod
    def from_dict(cls, data: dict) -> "Destination":
        data = _as_mapping(data, "destination")
        channel = data.get("channel")
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or "Noname chat"),
            channel=int(channel) if channel is not None else None,
            role=data.get("role") or None,
            up_message=str(data.get("up_message") or DEFAULT_UP_MESSAGE),
            down_message=str(data.get("down_message") or DEFAULT_DOWN_MESSAGE),
        )


@dataclass
class WatchConfig:
    """Everything the administration surface can edit."""

    probe: ProbeConfig = field(default_factory=ProbeConfig)
    destinations: dict[int, Destination] = field(default_factory=dict)
    max_destinations: int = DEFAULT_MAX_DESTINATIONS

    def snapshot(self) -> "WatchConfig":
        return copy.deepcopy(self)

    def ordered_destinations(self) -> list[Destination]:
        return [self.destinations[key] for key in sorted(self.destinations)]

    def to_dict(self) -> dict:
        return {
            "probe": asdict(self.probe),
            "max_destinations": self.max_destinations,
            "destinations": [asdict(d) for d in self.ordered_destinations()],
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "WatchConfig":
        data = _as_mapping(data, "config")
        destinations: dict[int, Destination] = {}
        for raw in data.get("destinations") or []:
            try:
                dest = Destination.from_dict(raw)
            except (KeyError, TypeError, ValueError):
                continue
            destinations[dest.id] = dest
        return cls(
            probe=ProbeConfig.from_dict(data.get("probe")),
            destinations=destinations,
            max_destinations=max(
                1, _as_int(data.get("max_destinations"), DEFAULT_MAX_DESTINATIONS)
            ),
        )
