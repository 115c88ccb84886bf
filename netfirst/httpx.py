try:
    import httpx  # noqa: F401
except ImportError as e:
    raise ImportError(
        "httpx is required to use netfirst.httpx module. "
        "Please install netfirst with the 'httpx' extra, "
        "e.g., 'pip install netfirst[httpx]'."
    ) from e


from ._async_httpx import (
    AsyncOfflineTransport as AsyncOfflineTransport,
    httpx_request_sender as httpx_request_sender,
    metadata_of as metadata_of,
)

__all__ = (
    "AsyncOfflineTransport",
    "httpx_request_sender",
    "metadata_of",
)
