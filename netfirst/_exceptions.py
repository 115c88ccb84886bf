from __future__ import annotations

import typing as tp

if tp.TYPE_CHECKING:
    from netfirst._core.models import Request, RequestIdentity

__all__ = (
    "NetfirstError",
    "InstallationFailure",
    "CacheWriteFailure",
    "NetworkFailure",
    "NotificationUnavailable",
    "WorkerStateError",
)


class NetfirstError(Exception): ...


class InstallationFailure(NetfirstError):
    """A critical manifest resource could not be fetched or stored."""

    def __init__(self, message: str, identity: RequestIdentity | None = None) -> None:
        super().__init__(message)
        self.identity = identity


class CacheWriteFailure(NetfirstError):
    def __init__(self, message: str, identity: RequestIdentity | None = None) -> None:
        super().__init__(message)
        self.identity = identity


class NetworkFailure(NetfirstError):
    """
    Raised by request senders when the network could not produce a response.

    Non-ok responses are not failures at the transport level and are returned
    normally; the fetch strategy treats both the same way.
    """

    def __init__(self, message: str, request: Request | None = None) -> None:
        super().__init__(message)
        self.request = request


class NotificationUnavailable(NetfirstError): ...


class WorkerStateError(NetfirstError): ...
