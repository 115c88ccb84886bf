from __future__ import annotations

import typing as tp

import anyio
import anyio.abc

from netfirst._core.models import Request
from netfirst._exceptions import WorkerStateError

if tp.TYPE_CHECKING:
    from netfirst._notifications import Notification

__all__ = (
    "ExtendableEvent",
    "InstallEvent",
    "ActivateEvent",
    "FetchEvent",
    "PushEvent",
    "NotificationClickEvent",
    "MessageEvent",
    "AnyEvent",
)


class ExtendableEvent:
    """
    An event whose lifetime can be extended by asynchronous work.

    Work passed to `wait_until` starts immediately on the dispatching worker's
    task group. `settled` is the future the host must await before it treats
    the event as resolved; it re-raises the first failure of the extensions.
    """

    type: tp.ClassVar[str] = ""

    def __init__(self) -> None:
        self._task_group: tp.Optional[anyio.abc.TaskGroup] = None
        self._pending = 0
        self._done: tp.Optional[anyio.Event] = None
        self._failures: tp.List[Exception] = []

    def bind(self, task_group: anyio.abc.TaskGroup) -> None:
        self._task_group = task_group

    def wait_until(self, func: tp.Callable[..., tp.Awaitable[tp.Any]], *args: tp.Any) -> None:
        if self._task_group is None:
            raise WorkerStateError(f"{self.type!r} event is not being dispatched")
        if self._pending == 0:
            self._done = anyio.Event()
        self._pending += 1
        self._task_group.start_soon(self._run_extension, func, args)

    async def _run_extension(self, func: tp.Callable[..., tp.Awaitable[tp.Any]], args: tp.Tuple[tp.Any, ...]) -> None:
        try:
            await func(*args)
        except Exception as exc:
            self._failures.append(exc)
        finally:
            self._pending -= 1
            if self._pending == 0 and self._done is not None:
                self._done.set()

    @property
    def pending(self) -> int:
        return self._pending

    async def settled(self) -> None:
        while self._pending and self._done is not None:
            await self._done.wait()
        if self._failures:
            raise self._failures[0]


class InstallEvent(ExtendableEvent):
    type = "install"


class ActivateEvent(ExtendableEvent):
    type = "activate"


class FetchEvent(ExtendableEvent):
    type = "fetch"

    def __init__(self, request: Request) -> None:
        super().__init__()
        self.request = request


class PushEvent(ExtendableEvent):
    type = "push"

    def __init__(self, data: tp.Any = None) -> None:
        super().__init__()
        self.data = data


class NotificationClickEvent(ExtendableEvent):
    type = "notificationclick"

    def __init__(self, notification: Notification) -> None:
        super().__init__()
        self.notification = notification


class MessageEvent(ExtendableEvent):
    type = "message"

    def __init__(self, data: tp.Any) -> None:
        super().__init__()
        self.data = data


AnyEvent = tp.Union[
    InstallEvent,
    ActivateEvent,
    FetchEvent,
    PushEvent,
    NotificationClickEvent,
    MessageEvent,
]
