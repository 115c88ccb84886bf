from __future__ import annotations

from typing import Dict, List, Optional

from netfirst._core._storages._base import AsyncBaseStorage
from netfirst._core.models import CachedResponse, RequestIdentity


class AsyncInMemoryStorage(AsyncBaseStorage):
    """
    Process-local storage.

    Every operation completes without yielding to the event loop, so each one is
    atomic with respect to other tasks of the same process. Nothing survives the
    process.
    """

    def __init__(self) -> None:
        self._generations: Dict[str, Dict[RequestIdentity, CachedResponse]] = {}

    async def create_generation(self, generation: str) -> None:
        self._generations.setdefault(generation, {})

    async def put(self, generation: str, identity: RequestIdentity, response: CachedResponse) -> None:
        self._generations.setdefault(generation, {})[identity] = response

    async def get(self, generation: str, identity: RequestIdentity) -> Optional[CachedResponse]:
        return self._generations.get(generation, {}).get(identity)

    async def list_generations(self) -> List[str]:
        return list(self._generations)

    async def delete(self, generation: str) -> bool:
        return self._generations.pop(generation, None) is not None
