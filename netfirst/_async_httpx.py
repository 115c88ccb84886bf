from __future__ import annotations

import types
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Awaitable,
    Callable,
    Mapping,
    Sequence,
    Union,
    cast,
    overload,
)

import httpx

from netfirst._core._headers import Headers
from netfirst._core._storages._base import AsyncBaseStorage
from netfirst._core._strategy import WorkerOptions
from netfirst._core.models import ManifestEntry, Request, Response
from netfirst._events import FetchEvent
from netfirst._exceptions import NetworkFailure
from netfirst._notifications import BaseClients, NotificationBridge, NotificationDisplay
from netfirst._service import AsyncCacheService
from netfirst._utils import make_async_iterator
from netfirst._worker import AsyncServiceWorker


@overload
def _internal_to_httpx(
    value: Request,
) -> httpx.Request: ...
@overload
def _internal_to_httpx(
    value: Response,
) -> httpx.Response: ...
def _internal_to_httpx(
    value: Union[Request, Response],
) -> Union[httpx.Request, httpx.Response]:
    """
    Convert internal Request/Response to httpx.Request/httpx.Response.
    """
    if isinstance(value, Request):
        return httpx.Request(
            method=value.method,
            url=value.url,
            headers=value.headers.multi_items(),
            stream=_IteratorStream(value._aiter_stream()),
            extensions=dict(value.metadata),
        )
    extensions: dict[str, Any] = dict(value.metadata)
    if value.reason_phrase:
        extensions["reason_phrase"] = value.reason_phrase.encode("ascii", errors="replace")
    return httpx.Response(
        status_code=value.status_code,
        headers=value.headers.multi_items(),
        stream=_IteratorStream(value._aiter_stream()),
        extensions=extensions,
    )


def _httpx_headers(headers: httpx.Headers) -> Headers:
    internal = Headers({})
    for key, value in headers.multi_items():
        internal[key] = value
    return internal


@overload
def _httpx_to_internal(
    value: httpx.Request,
) -> Request: ...
@overload
def _httpx_to_internal(
    value: httpx.Response,
) -> Response: ...
def _httpx_to_internal(
    value: Union[httpx.Request, httpx.Response],
) -> Union[Request, Response]:
    """
    Convert httpx.Request/httpx.Response to internal Request/Response.

    Responses must have been read already.
    """
    headers = _httpx_headers(value.headers)
    if isinstance(value, httpx.Request):
        try:
            stream = make_async_iterator([value.content])
        except httpx.RequestNotRead:
            stream = cast(AsyncIterator[bytes], value.stream.__aiter__())  # type: ignore[union-attr]
        return Request(
            method=value.method,
            url=str(value.url),
            headers=headers,
            stream=stream,
        )
    # The body was decoded by httpx, the original encoding no longer applies.
    for name in ("content-encoding", "transfer-encoding", "content-length"):
        if name in headers:
            del headers[name]
    headers["content-length"] = str(len(value.content))
    return Response(
        status_code=value.status_code,
        reason_phrase=value.reason_phrase,
        headers=headers,
        stream=make_async_iterator([value.content]),
    )


class _IteratorStream(httpx.AsyncByteStream):
    def __init__(self, iterator: AsyncIterator[bytes]) -> None:
        self.iterator = iterator

    async def __aiter__(self) -> AsyncIterator[bytes]:
        assert isinstance(self.iterator, (AsyncIterator, AsyncIterable))
        async for chunk in self.iterator:
            yield chunk


def httpx_request_sender(transport: httpx.AsyncBaseTransport) -> Callable[[Request], Awaitable[Response]]:
    """
    Adapt an httpx transport into a request sender.

    Transport errors (connection refused, timeouts, ...) and bodies that cannot
    be decoded are raised as `NetworkFailure`. Responses are read completely
    before they are returned.
    """

    async def send_request(request: Request) -> Response:
        try:
            httpx_response = await transport.handle_async_request(_internal_to_httpx(request))
            await httpx_response.aread()
        except httpx.RequestError as exc:
            raise NetworkFailure(str(exc) or exc.__class__.__name__, request=request) from exc
        return _httpx_to_internal(httpx_response)

    return send_request


class AsyncOfflineTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that routes requests through a worker.

    Entering the transport (which `httpx.AsyncClient` does on ``async with``)
    starts the worker: the manifest is pre-cached and the generation activated.
    Leaving it waits for pending cache writes.
    """

    def __init__(
        self,
        next_transport: httpx.AsyncBaseTransport,
        options: WorkerOptions,
        storage: AsyncBaseStorage | None = None,
        manifest: Sequence[ManifestEntry] = (),
        clients: BaseClients | None = None,
        display: NotificationDisplay | None = None,
    ) -> None:
        self.next_transport = next_transport
        self.service = AsyncCacheService(
            request_sender=httpx_request_sender(next_transport),
            options=options,
            storage=storage,
            clients=clients,
        )
        self.storage = self.service.storage
        self.worker = AsyncServiceWorker(
            self.service,
            manifest=manifest,
            notifications=NotificationBridge(display=display, clients=clients, entry_path=options.entry_path),
        )

    async def __aenter__(self) -> "AsyncOfflineTransport":
        await self.worker.__aenter__()
        try:
            await self.worker.start()
        except BaseException as exc:
            await self.worker.__aexit__(type(exc), exc, exc.__traceback__)
            await self.aclose()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        await self.worker.__aexit__(exc_type, exc_value, traceback)
        await self.aclose()

    async def handle_async_request(
        self,
        request: httpx.Request,
    ) -> httpx.Response:
        try:
            response = await self.worker.dispatch(FetchEvent(_httpx_to_internal(request)))
        except NetworkFailure as exc:
            # Only bypassed requests get here; give httpx users the error they expect.
            if isinstance(exc.__cause__, httpx.RequestError):
                raise exc.__cause__
            raise
        assert response is not None
        return _internal_to_httpx(response)

    async def aclose(self) -> None:
        await self.next_transport.aclose()
        await self.storage.close()


def metadata_of(response: httpx.Response) -> Mapping[str, Any]:
    """Return the netfirst_* flags carried by a response produced by `AsyncOfflineTransport`."""
    return {key: value for key, value in response.extensions.items() if key.startswith("netfirst_")}


__all__ = (
    "AsyncOfflineTransport",
    "httpx_request_sender",
    "metadata_of",
)

