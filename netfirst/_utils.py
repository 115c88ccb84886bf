from __future__ import annotations

import typing as tp
from pathlib import Path
from typing import AsyncIterator, Iterable
from urllib.parse import urlsplit

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


async def make_async_iterator(
    iterable: Iterable[bytes],
) -> AsyncIterator[bytes]:
    for item in iterable:
        yield item


def origin_of(url: str) -> tp.Tuple[str, str, tp.Optional[int]]:
    """
    Return the (scheme, host, port) origin tuple of an absolute URL.

    Missing ports are replaced by the scheme's default port so that
    `https://example.com` and `https://example.com:443` share one origin.

    Example:
        ```
        origin_of("https://Example.com/index.html")
        # ("https", "example.com", 443)
        ```
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    try:
        port = parts.port
    except ValueError:
        port = None
    if port is None:
        port = DEFAULT_PORTS.get(scheme)
    return scheme, host, port


def ensure_cache_dict(base_path: Path | None = None) -> Path:
    _base_path = base_path if base_path is not None else Path(".cache/netfirst")
    _gitignore_file = _base_path / ".gitignore"

    _base_path.mkdir(parents=True, exist_ok=True)

    if not _gitignore_file.is_file():
        with open(_gitignore_file, "w", encoding="utf-8") as f:
            f.write("# Automatically created by netfirst\n*")
    return _base_path
