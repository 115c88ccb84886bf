import pytest
from inline_snapshot import snapshot

from netfirst import (
    AsyncFetchInterceptor,
    AsyncInstallManager,
    CacheWriteFailure,
    InstallationFailure,
    ManifestEntry,
    NetworkFailure,
    Request,
    RequestIdentity,
)

ADMIN = RequestIdentity("GET", "https://app.example.com/admin.html")
MANIFEST = RequestIdentity("GET", "https://app.example.com/manifest.json")
ICON = RequestIdentity("GET", "https://app.example.com/icons/icon-192x192.png")


@pytest.mark.anyio
async def test_optional_failure_is_skipped(network, storage, options, caplog: pytest.LogCaptureFixture) -> None:
    network.respond(ADMIN.url, body=b"<html>admin</html>", headers={"Content-Type": "text/html"})
    network.fail(MANIFEST.url)
    installer = AsyncInstallManager(network, storage, options)

    with caplog.at_level("INFO", logger="netfirst"):
        outcome = await installer.install(
            [
                ManifestEntry(ADMIN, critical=True),
                ManifestEntry(MANIFEST, critical=False),
            ]
        )

    assert outcome.generation == "v2"
    assert outcome.stored == [ADMIN]
    assert outcome.skipped == [MANIFEST]
    assert outcome.skip_waiting is True

    cached = await storage.get("v2", ADMIN)
    assert cached is not None
    assert cached.body == b"<html>admin</html>"
    assert cached.headers["content-type"] == "text/html"
    assert await storage.get("v2", MANIFEST) is None

    assert caplog.messages == snapshot(
        [
            "Installing generation 'v2' with 2 manifest entries",
            "Skipping optional resource https://app.example.com/manifest.json: connection refused",
            "Generation 'v2' installed, 1 resources cached",
        ]
    )


@pytest.mark.anyio
async def test_critical_failure_aborts(network, storage, options) -> None:
    network.fail(ADMIN.url)
    installer = AsyncInstallManager(network, storage, options)

    with pytest.raises(InstallationFailure) as exc_info:
        await installer.install([ManifestEntry(ADMIN, critical=True)])

    assert exc_info.value.identity == ADMIN
    assert isinstance(exc_info.value.__cause__, NetworkFailure)


@pytest.mark.anyio
async def test_critical_non_ok_response_aborts(network, storage, options) -> None:
    network.respond(ADMIN.url, status_code=404, reason_phrase="Not Found")
    installer = AsyncInstallManager(network, storage, options)

    with pytest.raises(InstallationFailure) as exc_info:
        await installer.install([ManifestEntry(ADMIN)])

    assert str(exc_info.value.__cause__) == "Server responded with status 404"
    assert await storage.get("v2", ADMIN) is None


@pytest.mark.anyio
async def test_failed_install_leaves_partial_generation(network, storage, options) -> None:
    network.respond(ADMIN.url, body=b"admin")
    installer = AsyncInstallManager(network, storage, options)

    with pytest.raises(InstallationFailure):
        await installer.install([ManifestEntry(ADMIN), ManifestEntry(ICON)])

    assert await storage.list_generations() == ["v2"]
    assert await storage.get("v2", ADMIN) is not None


@pytest.mark.anyio
async def test_entries_are_fetched_in_manifest_order(network, storage, options) -> None:
    for identity in (ICON, ADMIN, MANIFEST):
        network.respond(identity.url)
    installer = AsyncInstallManager(network, storage, options)

    await installer.install([ManifestEntry(ICON), ManifestEntry(ADMIN), ManifestEntry(MANIFEST)])

    assert [request.url for request in network.requests] == [ICON.url, ADMIN.url, MANIFEST.url]
    assert all(request.method == "GET" for request in network.requests)


@pytest.mark.anyio
async def test_storage_failure(network, failing_storage, options) -> None:
    network.respond(ADMIN.url)
    network.respond(ICON.url)
    installer = AsyncInstallManager(network, failing_storage, options)

    outcome = await installer.install([ManifestEntry(ICON, critical=False)])
    assert outcome.skipped == [ICON]

    with pytest.raises(InstallationFailure) as exc_info:
        await installer.install([ManifestEntry(ADMIN, critical=True)])
    assert isinstance(exc_info.value.__cause__, CacheWriteFailure)


@pytest.mark.anyio
async def test_empty_manifest_creates_generation(network, storage, options) -> None:
    outcome = await AsyncInstallManager(network, storage, options).install([])

    assert outcome.stored == []
    assert await storage.list_generations() == ["v2"]


@pytest.mark.anyio
async def test_lowercase_manifest_method_is_served_offline(network, storage, options) -> None:
    network.respond(ADMIN.url, body=b"<html>admin</html>")
    await AsyncInstallManager(network, storage, options).install(
        [ManifestEntry(RequestIdentity("get", ADMIN.url))]
    )

    assert await storage.get("v2", RequestIdentity("GET", ADMIN.url)) is not None

    network.fail(ADMIN.url)
    response = await AsyncFetchInterceptor(network, storage, options).handle_request(
        Request(method="GET", url=ADMIN.url)
    )

    assert response.status_code == 200
    assert await response.aread() == b"<html>admin</html>"


@pytest.mark.anyio
async def test_non_get_manifest_entries_are_never_stored(
    network, storage, options, caplog: pytest.LogCaptureFixture
) -> None:
    post = RequestIdentity("POST", ADMIN.url)
    network.respond(ADMIN.url, body=b"<html>admin</html>")
    installer = AsyncInstallManager(network, storage, options)

    with caplog.at_level("WARNING", logger="netfirst"):
        outcome = await installer.install([ManifestEntry(post, critical=False)])

    assert outcome.skipped == [post]
    assert await storage.get("v2", post) is None
    assert network.requests == []
    assert caplog.messages == snapshot(
        ["Skipping optional resource https://app.example.com/admin.html: Method POST is not cacheable"]
    )

    with pytest.raises(InstallationFailure) as exc_info:
        await installer.install([ManifestEntry(post, critical=True)])

    assert exc_info.value.identity == post
    assert await storage.get("v2", post) is None
