from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List

from netfirst._core._storages._base import AsyncBaseStorage, AsyncGeneration
from netfirst._core._strategy import WorkerOptions
from netfirst._core.models import ManifestEntry, Request, RequestIdentity, Response
from netfirst._exceptions import CacheWriteFailure, InstallationFailure, NetworkFailure

logger = logging.getLogger("netfirst.install")


@dataclass
class InstallOutcome:
    generation: str
    stored: List[RequestIdentity] = field(default_factory=list)
    skipped: List[RequestIdentity] = field(default_factory=list)

    skip_waiting: bool = True
    """Installation asks to be activated right away instead of waiting for old clients to close."""


class AsyncInstallManager:
    """
    Populates a fresh generation from the pre-cache manifest.

    Entries are fetched one by one, in manifest order. A failing optional entry
    is logged and skipped. A failing critical entry aborts the installation with
    `InstallationFailure`; whatever was stored before stays in the generation,
    which is simply never promoted.
    """

    def __init__(
        self,
        request_sender: Callable[[Request], Awaitable[Response]],
        storage: AsyncBaseStorage,
        options: WorkerOptions,
    ) -> None:
        self.send_request = request_sender
        self.storage = storage
        self.options = options

    async def install(self, manifest: Iterable[ManifestEntry]) -> InstallOutcome:
        entries = list(manifest)
        logger.info(f"Installing generation {self.options.cache_name!r} with {len(entries)} manifest entries")

        generation = await self.storage.open(self.options.cache_name)
        outcome = InstallOutcome(generation=generation.name)

        for entry in entries:
            identity = entry.identity
            try:
                await self._precache(generation, identity)
            except (NetworkFailure, CacheWriteFailure) as exc:
                if entry.critical:
                    logger.error(f"Could not pre-cache critical resource {identity.url}: {exc}")
                    raise InstallationFailure(
                        f"Critical resource {identity.method} {identity.url} could not be cached",
                        identity=identity,
                    ) from exc
                logger.warning(f"Skipping optional resource {identity.url}: {exc}")
                outcome.skipped.append(identity)
            else:
                outcome.stored.append(identity)

        logger.info(f"Generation {generation.name!r} installed, {len(outcome.stored)} resources cached")
        return outcome

    async def _precache(self, generation: AsyncGeneration, identity: RequestIdentity) -> None:
        if identity.method != "GET":
            raise CacheWriteFailure(f"Method {identity.method} is not cacheable", identity=identity)

        request = identity.to_request()
        response = await self.send_request(request)
        if not response.ok:
            raise NetworkFailure(f"Server responded with status {response.status_code}", request=request)

        try:
            await generation.put(identity, response)
        except Exception as exc:
            raise CacheWriteFailure(f"Could not write to generation {generation.name!r}", identity=identity) from exc
