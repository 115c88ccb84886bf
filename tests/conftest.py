import os
from typing import Callable, Dict, List, Optional, Union

import pytest

from netfirst import (
    AsyncInMemoryStorage,
    Headers,
    NetworkFailure,
    Request,
    Response,
    WorkerOptions,
)
from netfirst._utils import make_async_iterator

ORIGIN = "https://app.example.com"


class FakeNetwork:
    """
    In-process request sender.

    Unknown URLs behave like an unreachable network.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Union[Callable[[], Response], Exception]] = {}
        self.requests: List[Request] = []

    def respond(
        self,
        url: str,
        status_code: int = 200,
        body: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        reason_phrase: str = "OK",
    ) -> None:
        self.routes[url] = lambda: Response(
            status_code=status_code,
            reason_phrase=reason_phrase,
            headers=Headers(headers or {}),
            stream=make_async_iterator([body]),
        )

    def fail(self, url: str) -> None:
        self.routes[url] = NetworkFailure("connection refused")

    async def __call__(self, request: Request) -> Response:
        self.requests.append(request)
        route = self.routes.get(request.url)
        if route is None:
            raise NetworkFailure(f"no route to {request.url}", request=request)
        if isinstance(route, Exception):
            raise route
        return route()


class FailingStorage(AsyncInMemoryStorage):
    async def put(self, generation, identity, response):  # type: ignore[no-untyped-def]
        raise RuntimeError("disk I/O error")


@pytest.fixture()
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture()
def options() -> WorkerOptions:
    return WorkerOptions(origin=ORIGIN, cache_name="v2")


@pytest.fixture()
def storage() -> AsyncInMemoryStorage:
    return AsyncInMemoryStorage()


@pytest.fixture()
def failing_storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture()
def use_temp_dir(tmpdir):
    cur_dir = os.getcwd()
    os.chdir(tmpdir)
    yield
    os.chdir(cur_dir)
