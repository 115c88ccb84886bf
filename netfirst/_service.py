from __future__ import annotations

from typing import Awaitable, Callable, Iterable, Optional

from netfirst._activation import ActivationOutcome, AsyncActivationManager
from netfirst._core._storages._async_sqlite import AsyncSqliteStorage
from netfirst._core._storages._base import AsyncBaseStorage
from netfirst._core._strategy import WorkerOptions
from netfirst._core.models import ManifestEntry, Request, Response
from netfirst._install import AsyncInstallManager, InstallOutcome
from netfirst._interceptor import AsyncFetchInterceptor, WaitUntil
from netfirst._notifications import BaseClients


class AsyncCacheService:
    """
    The cache engine of one worker instance.

    It has an explicit two-phase lifecycle: `initialize` populates the
    generation named by ``options.cache_name`` and `promote` makes it the only
    one left. `fetch` serves requests in between and afterwards.

    Args:
        request_sender: Callable that sends requests to the network.
        options: Worker configuration.
        storage: Storage backend. Defaults to AsyncSqliteStorage.
        clients: Window capability claimed on promotion.
    """

    def __init__(
        self,
        request_sender: Callable[[Request], Awaitable[Response]],
        options: WorkerOptions,
        storage: AsyncBaseStorage | None = None,
        clients: BaseClients | None = None,
    ) -> None:
        self.send_request = request_sender
        self.options = options
        self.storage = storage if storage is not None else AsyncSqliteStorage()
        self.installer = AsyncInstallManager(request_sender, self.storage, options)
        self.activator = AsyncActivationManager(self.storage, clients)
        self.interceptor = AsyncFetchInterceptor(request_sender, self.storage, options)

    async def initialize(self, manifest: Iterable[ManifestEntry]) -> InstallOutcome:
        return await self.installer.install(manifest)

    async def promote(self, generation: Optional[str] = None) -> ActivationOutcome:
        return await self.activator.activate(generation if generation is not None else self.options.cache_name)

    async def fetch(self, request: Request, wait_until: Optional[WaitUntil] = None) -> Response:
        return await self.interceptor.handle_request(request, wait_until)

    async def close(self) -> None:
        await self.storage.close()
