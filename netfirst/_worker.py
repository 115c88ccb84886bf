from __future__ import annotations

import logging
import types
from typing import Literal, Optional, Sequence

import anyio
import anyio.abc
from typing_extensions import assert_never

from netfirst._core.models import ManifestEntry, Response
from netfirst._events import (
    ActivateEvent,
    AnyEvent,
    FetchEvent,
    InstallEvent,
    MessageEvent,
    NotificationClickEvent,
    PushEvent,
)
from netfirst._exceptions import WorkerStateError
from netfirst._notifications import NotificationBridge
from netfirst._service import AsyncCacheService

logger = logging.getLogger("netfirst.worker")

WorkerState = Literal["parsed", "installing", "installed", "activating", "activated", "redundant"]


class AsyncServiceWorker:
    """
    Event-driven host of an `AsyncCacheService`.

    The worker must be used as an async context manager. It owns the task group
    that runs every lifetime extension, and leaving the context waits for all of
    them, so work started by an event is never dropped.

    Example:
        ```
        async with AsyncServiceWorker(service, manifest=manifest) as worker:
            await worker.start()
            response = await worker.dispatch(FetchEvent(request))
        ```
    """

    def __init__(
        self,
        service: AsyncCacheService,
        manifest: Sequence[ManifestEntry] = (),
        notifications: Optional[NotificationBridge] = None,
    ) -> None:
        self.service = service
        self.manifest = list(manifest)
        self.notifications = (
            notifications if notifications is not None else NotificationBridge(entry_path=service.options.entry_path)
        )
        self.state: WorkerState = "parsed"
        self.skip_waiting = False
        self._task_group: Optional[anyio.abc.TaskGroup] = None

    async def __aenter__(self) -> "AsyncServiceWorker":
        self._task_group = anyio.create_task_group()
        await self._task_group.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        assert self._task_group is not None
        task_group, self._task_group = self._task_group, None
        # Extensions record their own failures, so the group only ever waits here.
        # The host's exception, if any, propagates on its own once they are done.
        await task_group.__aexit__(None, None, None)

    async def start(self) -> None:
        """
        Install, then activate right away when installation asked to skip waiting.
        """
        install = InstallEvent()
        await self.dispatch(install)
        await install.settled()

        if self.skip_waiting:
            activate = ActivateEvent()
            await self.dispatch(activate)
            await activate.settled()

    async def dispatch(self, event: AnyEvent) -> Optional[Response]:
        """
        Hand an event to its handler.

        Fetch events resolve to the response; every other event resolves to
        None. In both cases the caller must still await ``event.settled()``.
        """
        if self._task_group is None:
            raise WorkerStateError("The worker is not running, use it with 'async with'")
        event.bind(self._task_group)
        logger.debug(f"Dispatching {event.type!r} event")

        if isinstance(event, InstallEvent):
            event.wait_until(self._install)
        elif isinstance(event, ActivateEvent):
            event.wait_until(self._activate)
        elif isinstance(event, FetchEvent):
            return await self._fetch(event)
        elif isinstance(event, PushEvent):
            event.wait_until(self.notifications.handle_push, event.data)
        elif isinstance(event, NotificationClickEvent):
            event.wait_until(self.notifications.handle_click, event.notification)
        elif isinstance(event, MessageEvent):
            event.wait_until(self.notifications.handle_message, event.data)
        else:
            assert_never(event)
        return None

    async def _install(self) -> None:
        self.state = "installing"
        try:
            outcome = await self.service.initialize(self.manifest)
        except Exception:
            self.state = "redundant"
            raise
        self.skip_waiting = outcome.skip_waiting
        self.state = "installed"

    async def _activate(self) -> None:
        if self.state not in ("installed", "activated"):
            raise WorkerStateError(f"Cannot activate a worker in state {self.state!r}")
        self.state = "activating"
        await self.service.promote()
        self.state = "activated"

    async def _fetch(self, event: FetchEvent) -> Response:
        if self.state != "activated":
            # Clients are only controlled by an active worker.
            logger.debug(f"Worker is {self.state}, passing {event.request.url} to the network")
            return await self.service.send_request(event.request)
        return await self.service.fetch(event.request, event.wait_until)
