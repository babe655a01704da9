"""Resource status and raw probe outcome enums."""

from __future__ import annotations

from enum import Enum


class ResourceStatus(str, Enum):
    UP = "up"
    DOWN = "down"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, raw: object) -> "ResourceStatus":
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class ProbeOutcome(str, Enum):
    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"
    ERROR = "error"


OUTCOME_STATUS: dict[ProbeOutcome, ResourceStatus] = {
    ProbeOutcome.REACHABLE: ResourceStatus.UP,
    ProbeOutcome.UNREACHABLE: ResourceStatus.DOWN,
    ProbeOutcome.ERROR: ResourceStatus.UNKNOWN,
}
