"""Exception taxonomy for probing and notification delivery."""

from __future__ import annotations


class ProbeError(Exception):
    """A probe attempt failed for a reason other than a timeout.

    ``cause`` is one of ``"resolution"``, ``"transport"`` or ``"other"``.
    """

    cause = "other"

    def __init__(self, message: str, cause: str | None = None) -> None:
        super().__init__(message)
        if cause is not None:
            self.cause = cause


class ResolutionError(ProbeError):
    """The address has no resolvable network target."""

    cause = "resolution"


class ProbeTransportError(ProbeError):
    """The probe mechanism itself is unusable (missing binary, no permission)."""

    cause = "transport"


class ChannelError(Exception):
    """Base class for notification channel failures."""

    def __init__(self, message: str, not_found: bool = False) -> None:
        super().__init__(message)
        self.not_found = not_found


class ChannelUnavailable(ChannelError):
    pass


class MessageUnavailable(ChannelError):
    pass


class SendFailed(ChannelError):
    pass


class DeleteFailed(ChannelError):
    pass
