from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import (
    Any,
    Optional,
    Union,
)

from netfirst._core._headers import Headers
from netfirst._core.models import CachedResponse, Request, RequestIdentity, Response, ResponseMetadata
from netfirst._utils import make_async_iterator, origin_of

OFFLINE_STATUS_CODE = 404
OFFLINE_REASON_PHRASE = "Not Found"


@dataclass
class WorkerOptions:
    """
    Fixed configuration of a worker instance.

    Attributes:
    ----------
    origin : str
        The worker's own origin, e.g. ``"https://app.example.com"``. Requests to
        any other origin are never intercepted.

    cache_name : str
        Version tag of the generation this worker installs, serves from and
        secures on activation. Bump it on every release to purge old entries.

        Examples:
        --------
        >>> options = WorkerOptions(origin="https://app.example.com", cache_name="app-cache-v2")

    exclusions : tuple[str, ...]
        URL substrings that always bypass the cache, typically hosts of
        external data APIs. This is fixed configuration, not a policy hook.

    bypass_schemes : tuple[str, ...]
        URL schemes that are never intercepted.

    entry_path : str
        Path of the application's entry document. Notification clicks focus a
        window showing it, or open a new one.

    offline_body : str
        Body of the response synthesized when neither the network nor the
        active generation can answer.
    """

    origin: str
    cache_name: str = "netfirst-cache-v1"
    exclusions: tuple[str, ...] = ("firestore.googleapis.com",)
    bypass_schemes: tuple[str, ...] = ("chrome-extension",)
    entry_path: str = "/admin.html"
    offline_body: str = "Offline and not found in cache."


@dataclass
class State(ABC):
    options: WorkerOptions

    @abstractmethod
    def next(self, *args: Any, **kwargs: Any) -> Union["State", None]:
        raise NotImplementedError("Subclasses must implement this method")


AnyState = Union[
    "Classify",
    "Bypass",
    "Intercept",
    "NetworkAttempt",
    "CacheWrite",
    "CacheFallback",
    "FallbackHit",
    "FallbackMiss",
]


def is_same_origin(url: str, origin: str) -> bool:
    return origin_of(url) == origin_of(origin)


def get_bypass_reason(request: Request, options: WorkerOptions) -> Optional[str]:
    """
    Returns why a request must not be intercepted, or None when it may be.

    The checks run in a fixed order: method, scheme, origin, exclusions.
    """
    if request.method.upper() != "GET":
        return f"method {request.method.upper()} is not cacheable"

    scheme = request.url.split(":", 1)[0].lower()
    if scheme in options.bypass_schemes:
        return f"scheme {scheme!r} is never intercepted"

    if not is_same_origin(request.url, options.origin):
        return "cross-origin request"

    for exclusion in options.exclusions:
        if exclusion in request.url:
            return f"url matches exclusion {exclusion!r}"
    return None


def make_offline_response(options: WorkerOptions) -> Response:
    body = options.offline_body.encode("utf-8")
    response_meta = ResponseMetadata(
        netfirst_from_cache=False,
        netfirst_stored=False,
        netfirst_offline=True,
    )
    response = Response(
        status_code=OFFLINE_STATUS_CODE,
        reason_phrase=OFFLINE_REASON_PHRASE,
        headers=Headers({"Content-Type": "text/plain"}),
        stream=make_async_iterator([body]),
        metadata=dict(response_meta),
    )
    setattr(response, "collected_body", body)
    return response


@dataclass
class Classify(State):
    """
    Entry point of the fetch state machine.

    State Transitions:
    -----------------
    - Bypass: the request is not a GET, uses a bypassed scheme, targets another
      origin or matches an exclusion. It goes to the network untouched.
    - Intercept: everything else.
    """

    def next(self, request: Request) -> Union["Bypass", "Intercept"]:
        reason = get_bypass_reason(request, self.options)
        if reason is not None:
            return Bypass(options=self.options, request=request, reason=reason)
        return Intercept(options=self.options, request=request)


@dataclass
class Bypass(State):
    """
    Terminal state for requests the cache never observes.

    Neither the cache nor its logs see the response of a bypassed request.
    """

    request: Request
    reason: str

    def next(self) -> None:
        return None


@dataclass
class Intercept(State):
    request: Request

    @property
    def identity(self) -> RequestIdentity:
        return RequestIdentity.from_request(self.request)

    def next(self) -> "NetworkAttempt":
        return NetworkAttempt(options=self.options, request=self.request)


@dataclass
class NetworkAttempt(State):
    """
    The network is always tried first.

    State Transitions:
    -----------------
    - CacheWrite: the network answered with a 2xx status.
    - CacheFallback: the network answered with any other status, or failed
      (``response`` is None).
    """

    request: Request

    def next(self, response: Optional[Response]) -> Union["CacheWrite", "CacheFallback"]:
        if response is not None and response.ok:
            return CacheWrite(options=self.options, request=self.request, response=response)
        return CacheFallback(options=self.options, request=self.request, network_response=response)


class CacheWrite(State):
    """
    Terminal state: the network response is returned and written to the
    active generation in the background.

    ``netfirst_stored`` means the write was scheduled; it does not wait for
    the write to succeed.
    """

    def __init__(self, options: WorkerOptions, request: Request, response: Response) -> None:
        super().__init__(options)
        self.request = request
        self.response = response
        response_meta = ResponseMetadata(
            netfirst_from_cache=False,
            netfirst_stored=True,
            netfirst_offline=False,
        )
        self.response.metadata.update(response_meta)  # type: ignore

    @property
    def identity(self) -> RequestIdentity:
        return RequestIdentity.from_request(self.request)

    def next(self) -> None:
        return None


@dataclass
class CacheFallback(State):
    """
    The network could not produce a usable response.

    ``network_response`` keeps the non-ok response when there was one; it is
    discarded in favour of the cache or the offline response.

    State Transitions:
    -----------------
    - FallbackHit: the active generation has a snapshot for the identity.
    - FallbackMiss: it has none.
    """

    request: Request
    network_response: Optional[Response] = None

    @property
    def identity(self) -> RequestIdentity:
        return RequestIdentity.from_request(self.request)

    def next(self, cached: Optional[CachedResponse]) -> Union["FallbackHit", "FallbackMiss"]:
        if cached is not None:
            return FallbackHit(options=self.options, cached=cached)
        return FallbackMiss(options=self.options)


class FallbackHit(State):
    def __init__(self, options: WorkerOptions, cached: CachedResponse) -> None:
        super().__init__(options)
        self.cached = cached
        self.response = cached.to_response()

    def next(self) -> None:
        return None


class FallbackMiss(State):
    def __init__(self, options: WorkerOptions) -> None:
        super().__init__(options)
        self.response = make_offline_response(options)

    def next(self) -> None:
        return None
