#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.9"
# dependencies = [
#     "netfirst[httpx]",
# ]
#
# [tool.uv.sources]
# netfirst = { path = "../", editable = true }
# ///

import logging

import anyio
import anysqlite
import httpx

from netfirst import AsyncSqliteStorage, ManifestEntry, RequestIdentity, WorkerOptions
from netfirst.httpx import AsyncOfflineTransport, metadata_of

logging.basicConfig(level=logging.DEBUG)

ORIGIN = "https://example.com"


async def main() -> None:
    storage = AsyncSqliteStorage(connection=await anysqlite.connect(":memory:"))
    transport = AsyncOfflineTransport(
        httpx.AsyncHTTPTransport(),
        options=WorkerOptions(origin=ORIGIN, cache_name="example-v1"),
        storage=storage,
        manifest=[ManifestEntry(RequestIdentity("GET", f"{ORIGIN}/"), critical=False)],
    )

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.get(f"{ORIGIN}/")
        print(response.status_code, metadata_of(response))


anyio.run(main)
