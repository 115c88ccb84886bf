from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from typing_extensions import assert_never

from netfirst._core._storages._base import AsyncBaseStorage
from netfirst._core._strategy import (
    AnyState,
    Bypass,
    CacheFallback,
    CacheWrite,
    Classify,
    FallbackHit,
    FallbackMiss,
    Intercept,
    NetworkAttempt,
    WorkerOptions,
)
from netfirst._core.models import CachedResponse, Request, RequestIdentity, Response
from netfirst._exceptions import NetworkFailure

logger = logging.getLogger("netfirst.interceptor")

WaitUntil = Callable[..., None]


class AsyncFetchInterceptor:
    """
    Applies the network-first, cache-fallback strategy to a single request.

    The decisions live in the states of `netfirst._core._strategy`; this class
    only performs the I/O each state asks for.

    Args:
        request_sender: Callable that sends requests to the network. It must raise
            `NetworkFailure` when no response could be obtained.
        storage: Storage holding the generations.
        options: Worker configuration. ``options.cache_name`` is the active generation.
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

    async def handle_request(self, request: Request, wait_until: Optional[WaitUntil] = None) -> Response:
        """
        Return the response for ``request``.

        ``wait_until`` schedules the background cache write and extends the
        event's lifetime until it finishes. Without it the write is awaited
        before the response is returned.
        """
        state: AnyState = Classify(options=self.options)

        while state:
            logger.debug(f"Handling state: {state.__class__.__name__}")
            if isinstance(state, Classify):
                state = state.next(request)
            elif isinstance(state, Bypass):
                logger.debug(f"Passing {request.method} {request.url} to the network: {state.reason}")
                return await self.send_request(state.request)
            elif isinstance(state, Intercept):
                state = state.next()
            elif isinstance(state, NetworkAttempt):
                state = state.next(await self._attempt_network(state.request))
            elif isinstance(state, CacheWrite):
                return await self._handle_cache_write(state, wait_until)
            elif isinstance(state, CacheFallback):
                state = await self._handle_fallback(state)
            elif isinstance(state, FallbackHit):
                return state.response
            elif isinstance(state, FallbackMiss):
                logger.warning(f"{request.url} is neither reachable nor cached, responding offline")
                return state.response
            else:
                assert_never(state)

        raise RuntimeError("Unreachable")

    async def _attempt_network(self, request: Request) -> Optional[Response]:
        try:
            return await self.send_request(request)
        except NetworkFailure as exc:
            logger.warning(f"Network request for {request.url} failed: {exc}")
            return None

    async def _handle_cache_write(self, state: CacheWrite, wait_until: Optional[WaitUntil]) -> Response:
        snapshot = await CachedResponse.capture(state.response)
        if wait_until is not None:
            wait_until(self.store, state.identity, snapshot)
        else:
            await self.store(state.identity, snapshot)
        return state.response

    async def _handle_fallback(self, state: CacheFallback) -> AnyState:
        if state.network_response is not None:
            logger.warning(
                f"Network responded {state.network_response.status_code} for {state.request.url}, trying the cache"
            )
        cached = await self.storage.get(self.options.cache_name, state.identity)
        return state.next(cached)

    async def store(self, identity: RequestIdentity, snapshot: CachedResponse) -> None:
        """
        Write a snapshot to the active generation. Failures are logged, never raised.
        """
        try:
            generation = await self.storage.open(self.options.cache_name)
            await generation.put(identity, snapshot)
        except Exception:
            logger.warning(
                f"Could not store {identity.method} {identity.url} in generation {self.options.cache_name!r}",
                exc_info=True,
            )
