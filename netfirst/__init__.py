from netfirst._core._headers import Headers as Headers
from netfirst._core._storages import (
    AsyncBaseStorage as AsyncBaseStorage,
    AsyncGeneration as AsyncGeneration,
    AsyncInMemoryStorage as AsyncInMemoryStorage,
    AsyncSqliteStorage as AsyncSqliteStorage,
)
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
from netfirst._exceptions import (
    CacheWriteFailure as CacheWriteFailure,
    InstallationFailure as InstallationFailure,
    NetfirstError as NetfirstError,
    NetworkFailure as NetworkFailure,
    NotificationUnavailable as NotificationUnavailable,
    WorkerStateError as WorkerStateError,
)
from netfirst._activation import ActivationOutcome as ActivationOutcome, AsyncActivationManager as AsyncActivationManager
from netfirst._install import AsyncInstallManager as AsyncInstallManager, InstallOutcome as InstallOutcome
from netfirst._interceptor import AsyncFetchInterceptor as AsyncFetchInterceptor
from netfirst._notifications import (
    BaseClients as BaseClients,
    BaseWindowClient as BaseWindowClient,
    Notification as Notification,
    NotificationBridge as NotificationBridge,
)
from netfirst._events import (
    ActivateEvent as ActivateEvent,
    ExtendableEvent as ExtendableEvent,
    FetchEvent as FetchEvent,
    InstallEvent as InstallEvent,
    MessageEvent as MessageEvent,
    NotificationClickEvent as NotificationClickEvent,
    PushEvent as PushEvent,
)
from netfirst._service import AsyncCacheService as AsyncCacheService
from netfirst._worker import AsyncServiceWorker as AsyncServiceWorker

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
    ## Storages
    "AsyncBaseStorage",
    "AsyncGeneration",
    "AsyncInMemoryStorage",
    "AsyncSqliteStorage",
    ## Errors
    "NetfirstError",
    "InstallationFailure",
    "CacheWriteFailure",
    "NetworkFailure",
    "NotificationUnavailable",
    "WorkerStateError",
    ## Lifecycle
    "AsyncInstallManager",
    "InstallOutcome",
    "AsyncActivationManager",
    "ActivationOutcome",
    "AsyncFetchInterceptor",
    "AsyncCacheService",
    ## Worker
    "AsyncServiceWorker",
    "ExtendableEvent",
    "InstallEvent",
    "ActivateEvent",
    "FetchEvent",
    "PushEvent",
    "NotificationClickEvent",
    "MessageEvent",
    ## Notifications
    "Notification",
    "NotificationBridge",
    "BaseClients",
    "BaseWindowClient",
)
