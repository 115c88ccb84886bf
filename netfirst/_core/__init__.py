from netfirst._core._headers import Headers as Headers
from netfirst._core._strategy import (
    AnyState as AnyState,
    Bypass as Bypass,
    CacheFallback as CacheFallback,
    CacheWrite as CacheWrite,
    Classify as Classify,
    FallbackHit as FallbackHit,
    FallbackMiss as FallbackMiss,
    Intercept as Intercept,
    NetworkAttempt as NetworkAttempt,
    State as State,
    WorkerOptions as WorkerOptions,
)
from netfirst._core.models import (
    CachedResponse as CachedResponse,
    ManifestEntry as ManifestEntry,
    Request as Request,
    RequestIdentity as RequestIdentity,
    RequestMetadata as RequestMetadata,
    Response as Response,
    ResponseMetadata as ResponseMetadata,
)

__all__ = (
    ## States
    "AnyState",
    "State",
    "Classify",
    "Bypass",
    "Intercept",
    "NetworkAttempt",
    "CacheWrite",
    "CacheFallback",
    "FallbackHit",
    "FallbackMiss",
    "WorkerOptions",
    ## Models
    "Request",
    "Response",
    "RequestIdentity",
    "CachedResponse",
    "ManifestEntry",
    "RequestMetadata",
    "ResponseMetadata",
    ## Headers
    "Headers",
)
