from netfirst._core._storages._async_sqlite import AsyncSqliteStorage as AsyncSqliteStorage
from netfirst._core._storages._base import (
    AsyncBaseStorage as AsyncBaseStorage,
    AsyncGeneration as AsyncGeneration,
)
from netfirst._core._storages._in_memory import AsyncInMemoryStorage as AsyncInMemoryStorage

__all__ = (
    "AsyncBaseStorage",
    "AsyncGeneration",
    "AsyncInMemoryStorage",
    "AsyncSqliteStorage",
)
