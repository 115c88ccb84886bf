from __future__ import annotations

from typing import Optional

import msgpack
from typing_extensions import cast

from netfirst._core._headers import Headers
from netfirst._core.models import CachedResponse


def pack(value: CachedResponse, /) -> bytes:
    """
    Serialize a snapshot's status line and headers.

    The body is stored separately by the storages and is not part of the packed value.
    """
    return cast(
        bytes,
        msgpack.packb(
            {
                "status_code": value.status_code,
                "reason_phrase": value.reason_phrase,
                "headers": value.headers._headers,
                "created_at": value.created_at,
            }
        ),
    )


def unpack(value: Optional[bytes], /, body: bytes) -> Optional[CachedResponse]:
    if value is None:
        return None
    data = msgpack.unpackb(value)
    return CachedResponse(
        status_code=data["status_code"],
        reason_phrase=data["reason_phrase"],
        headers=Headers(data["headers"]),
        body=body,
        created_at=data["created_at"],
    )
