"""Status message content."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .status import ResourceStatus

Colour = tuple[int, int, int]

STATUS_COLOURS: dict[ResourceStatus, Colour] = {
    ResourceStatus.UP: (21, 250, 59),
    ResourceStatus.DOWN: (220, 23, 30),
    ResourceStatus.UNKNOWN: (215, 187, 10),
}


@dataclass(frozen=True)
class StatusEmbed:
    resource_name: str
    status: ResourceStatus
    title: str
    colour: Colour
    since: datetime
    address: str
    description: str | None = None

    @classmethod
    def build(
        cls,
        resource_name: str,
        status: ResourceStatus,
        address: str,
        since: datetime,
    ) -> "StatusEmbed":
        description = None
        if status == ResourceStatus.UP:
            title = f"{resource_name} is online!"
        elif status == ResourceStatus.DOWN:
            title = f"{resource_name} is offline!"
        else:
            title = f"{resource_name} status is unknown..."
            description = "Some kind of error occurred. Notify maintainers!"
        return cls(
            resource_name=resource_name,
            status=status,
            title=title,
            colour=STATUS_COLOURS[status],
            since=since,
            address=address,
            description=description,
        )
