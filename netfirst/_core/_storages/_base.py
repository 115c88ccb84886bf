import abc
import typing as tp
from abc import ABC

from netfirst._core.models import CachedResponse, RequestIdentity, Response


class AsyncBaseStorage(ABC):
    """
    Key/value store of response snapshots, partitioned into named generations.

    Implementations guarantee that every single operation is atomic for the key
    it touches. There are no transactions spanning several keys, and concurrent
    writers to the same identity are not ordered: the last write the backend
    observes wins.
    """

    async def open(self, generation: str) -> "AsyncGeneration":
        """
        Return a handle to the named generation, creating it if it does not exist.
        """
        await self.create_generation(generation)
        return AsyncGeneration(self, generation)

    @abc.abstractmethod
    async def create_generation(self, generation: str) -> None:
        """
        Register a generation name. Registering an existing name is a no-op.

        Raises:
            NotImplementedError: Must be implemented in subclasses.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    async def put(self, generation: str, identity: RequestIdentity, response: CachedResponse) -> None:
        """
        Write a snapshot under the given identity, replacing any previous one.

        Args:
            generation: Name of the generation to write into.
            identity: The (method, URL) key.
            response: The snapshot to store.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    async def get(self, generation: str, identity: RequestIdentity) -> tp.Optional[CachedResponse]:
        """
        Return the snapshot stored under the identity, or None.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    async def list_generations(self) -> tp.List[str]:
        """
        Return the names of all known generations, oldest first.
        """
        raise NotImplementedError()

    @abc.abstractmethod
    async def delete(self, generation: str) -> bool:
        """
        Remove a generation and every entry it holds.

        Returns:
            True if the generation existed.
        """
        raise NotImplementedError()

    async def close(self) -> None:
        return None


class AsyncGeneration:
    """Handle to one named generation of an `AsyncBaseStorage`."""

    def __init__(self, storage: AsyncBaseStorage, name: str) -> None:
        self.storage = storage
        self.name = name

    async def put(self, identity: RequestIdentity, response: tp.Union[Response, CachedResponse]) -> CachedResponse:
        snapshot = response if isinstance(response, CachedResponse) else await CachedResponse.capture(response)
        await self.storage.put(self.name, identity, snapshot)
        return snapshot

    async def get(self, identity: RequestIdentity) -> tp.Optional[CachedResponse]:
        return await self.storage.get(self.name, identity)

    def __repr__(self) -> str:
        return f"<AsyncGeneration {self.name!r}>"
