from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import (
    Any,
    AsyncIterable,
    AsyncIterator,
    Mapping,
    TypedDict,
    cast,
)

from netfirst._core._headers import Headers
from netfirst._utils import make_async_iterator


class RequestMetadata(TypedDict, total=False):
    # All the names here should be prefixed with "netfirst_" to avoid collisions with user data
    netfirst_client_id: str
    """Identifier of the window client that issued the request, if known."""


@dataclass
class Request:
    method: str
    url: str
    headers: Headers = field(default_factory=lambda: Headers({}))
    stream: AsyncIterator[bytes] = field(default_factory=lambda: make_async_iterator([]))
    metadata: RequestMetadata | Mapping[str, Any] = field(default_factory=dict)

    async def _aiter_stream(self) -> AsyncIterator[bytes]:
        if hasattr(self, "collected_body"):
            yield getattr(self, "collected_body")
            return
        if isinstance(self.stream, (AsyncIterator, AsyncIterable)):
            async for chunk in self.stream:
                yield chunk
            return
        raise TypeError("Request stream is not an AsyncIterator")

    async def aread(self) -> bytes:
        """
        Asynchronously reads the entire request body without consuming the stream.
        """
        if hasattr(self, "collected_body"):
            return cast(bytes, getattr(self, "collected_body"))

        if not isinstance(self.stream, AsyncIterator):
            raise TypeError("Request stream is not an AsyncIterator")

        collected = b"".join([chunk async for chunk in self.stream])
        setattr(self, "collected_body", collected)
        self.stream = make_async_iterator([collected])
        return collected


class ResponseMetadata(TypedDict, total=False):
    # All the names here should be prefixed with "netfirst_" to avoid collisions with user data
    netfirst_from_cache: bool
    """Indicates whether the response was served from a cache generation."""

    netfirst_stored: bool
    """Indicates whether the response was scheduled to be written to the active generation."""

    netfirst_offline: bool
    """Indicates whether the response was synthesized because neither network nor cache could answer."""

    netfirst_created_at: float
    """Timestamp when the cached snapshot was captured."""


@dataclass
class Response:
    status_code: int
    reason_phrase: str = ""
    headers: Headers = field(default_factory=lambda: Headers({}))
    stream: AsyncIterator[bytes] = field(default_factory=lambda: make_async_iterator([]))
    metadata: ResponseMetadata | Mapping[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299

    async def _aiter_stream(self) -> AsyncIterator[bytes]:
        if hasattr(self, "collected_body"):
            yield getattr(self, "collected_body")
            return
        if isinstance(self.stream, (AsyncIterator, AsyncIterable)):
            async for chunk in self.stream:
                yield chunk
            return
        raise TypeError("Response stream is not an AsyncIterator")

    async def aread(self) -> bytes:
        """
        Asynchronously reads the entire response body without consuming the stream.

        Reading twice returns the same bytes, so a response can be snapshotted
        for the cache and still be handed to the caller.
        """
        if hasattr(self, "collected_body"):
            return cast(bytes, getattr(self, "collected_body"))

        if not isinstance(self.stream, AsyncIterator):
            raise TypeError("Response stream is not an AsyncIterator")

        collected = b"".join([chunk async for chunk in self.stream])
        setattr(self, "collected_body", collected)
        self.stream = make_async_iterator([collected])
        return collected


@dataclass(frozen=True)
class RequestIdentity:
    """The (method, absolute URL) pair used as a cache key. The method is always uppercase."""

    method: str
    url: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())

    @classmethod
    def from_request(cls, request: Request) -> "RequestIdentity":
        return cls(method=request.method, url=request.url)

    def to_request(self) -> Request:
        return Request(method=self.method, url=self.url)


@dataclass(frozen=True)
class CachedResponse:
    """
    Snapshot of a response captured when it was written to a generation.

    Snapshots are never revalidated and never changed after capture. A later
    write to the same identity replaces the whole snapshot.
    """

    status_code: int
    reason_phrase: str
    headers: Headers
    body: bytes
    created_at: float = field(default_factory=time.time)

    @classmethod
    async def capture(cls, response: Response) -> "CachedResponse":
        body = await response.aread()
        return cls(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=Headers({key: list(values) for key, values in response.headers._headers.items()}),
            body=body,
        )

    def to_response(self) -> Response:
        response_meta = ResponseMetadata(
            netfirst_from_cache=True,
            netfirst_stored=False,
            netfirst_offline=False,
            netfirst_created_at=self.created_at,
        )
        response = Response(
            status_code=self.status_code,
            reason_phrase=self.reason_phrase,
            headers=Headers({key: list(values) for key, values in self.headers._headers.items()}),
            stream=make_async_iterator([self.body]),
            metadata=dict(response_meta),
        )
        setattr(response, "collected_body", self.body)
        return response


@dataclass(frozen=True)
class ManifestEntry:
    identity: RequestIdentity
    critical: bool = True
