from typing import Any, Dict

import anyio
import httpx
import pytest

from netfirst import (
    AsyncInMemoryStorage,
    InstallationFailure,
    ManifestEntry,
    NetworkFailure,
    Request,
    RequestIdentity,
    WorkerOptions,
)
from netfirst.httpx import AsyncOfflineTransport, httpx_request_sender, metadata_of

ORIGIN = "https://app.example.com"
ADMIN = RequestIdentity("GET", f"{ORIGIN}/admin.html")


class Backend:
    def __init__(self) -> None:
        self.online = True
        self.corrupt = False
        self.pages: Dict[str, bytes] = {}
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if not self.online:
            raise httpx.ConnectError("connection refused", request=request)
        if self.corrupt:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip"))
        if request.method == "POST":
            return httpx.Response(201, content=b"created")
        body = self.pages.get(str(request.url))
        if body is None:
            return httpx.Response(404, content=b"missing")
        return httpx.Response(200, headers={"Content-Type": "text/html"}, content=body)


def create_transport(backend: Backend, storage: AsyncInMemoryStorage, **kwargs: Any) -> AsyncOfflineTransport:
    return AsyncOfflineTransport(
        httpx.MockTransport(backend),
        WorkerOptions(origin=ORIGIN, cache_name="v2"),
        storage=storage,
        **kwargs,
    )


@pytest.mark.anyio
async def test_responses_are_cached_for_offline_use() -> None:
    backend = Backend()
    backend.pages[f"{ORIGIN}/orders.html"] = b"<h1>orders</h1>"
    storage = AsyncInMemoryStorage()

    async with httpx.AsyncClient(transport=create_transport(backend, storage)) as client:
        online = await client.get(f"{ORIGIN}/orders.html")
        assert online.status_code == 200
        assert online.text == "<h1>orders</h1>"
        assert metadata_of(online)["netfirst_stored"] is True
        await anyio.wait_all_tasks_blocked()

        backend.online = False
        offline = await client.get(f"{ORIGIN}/orders.html")
        assert offline.status_code == 200
        assert offline.reason_phrase == "OK"
        assert offline.headers["content-type"] == "text/html"
        assert offline.text == "<h1>orders</h1>"
        assert metadata_of(offline)["netfirst_from_cache"] is True


@pytest.mark.anyio
async def test_offline_and_not_cached() -> None:
    backend = Backend()
    backend.online = False

    async with httpx.AsyncClient(transport=create_transport(backend, AsyncInMemoryStorage())) as client:
        response = await client.get(f"{ORIGIN}/reports.html")

    assert response.status_code == 404
    assert response.headers["content-type"] == "text/plain"
    assert response.text == "Offline and not found in cache."
    assert metadata_of(response)["netfirst_offline"] is True


@pytest.mark.anyio
async def test_manifest_is_precached_on_enter() -> None:
    backend = Backend()
    backend.pages[ADMIN.url] = b"<h1>admin</h1>"
    storage = AsyncInMemoryStorage()
    await storage.open("v1")

    async with httpx.AsyncClient(
        transport=create_transport(backend, storage, manifest=[ManifestEntry(ADMIN)])
    ) as client:
        assert await storage.list_generations() == ["v2"]
        backend.online = False
        response = await client.get(ADMIN.url)

    assert response.text == "<h1>admin</h1>"


@pytest.mark.anyio
async def test_bypassed_request_raises_httpx_error() -> None:
    backend = Backend()
    backend.online = False

    async with httpx.AsyncClient(transport=create_transport(backend, AsyncInMemoryStorage())) as client:
        with pytest.raises(httpx.ConnectError):
            await client.post(f"{ORIGIN}/api/orders", content=b"{}")


@pytest.mark.anyio
async def test_bypassed_request_is_not_cached() -> None:
    backend = Backend()
    storage = AsyncInMemoryStorage()

    async with httpx.AsyncClient(transport=create_transport(backend, storage)) as client:
        response = await client.post(f"{ORIGIN}/api/orders", content=b"{}")
        assert response.status_code == 201
        assert metadata_of(response) == {}

    assert await storage.get("v2", RequestIdentity("POST", f"{ORIGIN}/api/orders")) is None


@pytest.mark.anyio
async def test_critical_install_failure() -> None:
    backend = Backend()
    storage = AsyncInMemoryStorage()
    transport = create_transport(backend, storage, manifest=[ManifestEntry(ADMIN)])

    with pytest.raises(InstallationFailure):
        async with httpx.AsyncClient(transport=transport):
            pass


@pytest.mark.anyio
async def test_request_sender_maps_transport_errors() -> None:
    backend = Backend()
    backend.online = False
    send_request = httpx_request_sender(httpx.MockTransport(backend))

    with pytest.raises(NetworkFailure) as exc_info:
        await send_request(Request(method="GET", url=ADMIN.url))

    assert str(exc_info.value) == "connection refused"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.anyio
async def test_request_sender_returns_non_ok_responses() -> None:
    send_request = httpx_request_sender(httpx.MockTransport(Backend()))

    response = await send_request(Request(method="GET", url=f"{ORIGIN}/unknown.html"))

    assert response.status_code == 404
    assert response.reason_phrase == "Not Found"
    assert await response.aread() == b"missing"
    assert response.headers["content-length"] == "7"


@pytest.mark.anyio
async def test_undecodable_body_serves_cached_snapshot() -> None:
    backend = Backend()
    backend.pages[f"{ORIGIN}/orders.html"] = b"good"
    storage = AsyncInMemoryStorage()

    async with httpx.AsyncClient(transport=create_transport(backend, storage)) as client:
        assert (await client.get(f"{ORIGIN}/orders.html")).text == "good"
        await anyio.wait_all_tasks_blocked()

        backend.corrupt = True
        response = await client.get(f"{ORIGIN}/orders.html")

    assert response.status_code == 200
    assert response.text == "good"
    assert metadata_of(response)["netfirst_from_cache"] is True


@pytest.mark.anyio
async def test_request_sender_maps_decoding_errors() -> None:
    backend = Backend()
    backend.corrupt = True
    send_request = httpx_request_sender(httpx.MockTransport(backend))

    with pytest.raises(NetworkFailure) as exc_info:
        await send_request(Request(method="GET", url=ADMIN.url))

    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
