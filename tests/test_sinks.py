"""Delivery sinks: HTTP store and local SQLite store."""

from __future__ import annotations

import pytest
from aiohttp import web

from ovm_oracle.models.config import SinkConfig, SinkKind
from ovm_oracle.sink import HttpProofSink, SQLiteProofStore, open_sink

from tests.factories import make_proof


@pytest.fixture
async def proof_store_server():
    """Local json-server stand-in. Returns (base_url, received, status)."""
    received: list[dict] = []
    status = {"code": 201}

    async def handle_post(request):
        received.append(await request.json())
        if status["code"] >= 400:
            return web.Response(status=status["code"])
        return web.json_response(received[-1], status=status["code"])

    app = web.Application()
    app.router.add_post("/proofs", handle_post)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    yield f"http://127.0.0.1:{port}", received, status
    await runner.cleanup()


# ── HTTP ──────────────────────────────────────────────────────────


async def test_http_posts_proof_keyed_by_index(proof_store_server):
    base_url, received, _ = proof_store_server
    sink = HttpProofSink(base_url)

    result = await sink.deliver(make_proof(index=98))

    assert result.success
    assert result.index == 98
    assert len(received) == 1
    body = received[0]
    assert body["index"] == 98
    assert body["id"] == 98
    assert body["stateRoot"].startswith("0x")
    assert body["stateRootBatchHeader"]["prevTotalElements"] == 96
    assert body["stateRootProof"]["index"] == 2


async def test_http_error_status_is_failed_delivery(proof_store_server):
    base_url, received, status = proof_store_server
    status["code"] = 500

    result = await HttpProofSink(base_url).deliver(make_proof())

    assert not result.success
    assert result.error == "store HTTP 500"
    assert len(received) == 1  # single attempt


async def test_http_unreachable_store_is_failed_delivery():
    result = await HttpProofSink("http://127.0.0.1:1", timeout=2).deliver(make_proof())

    assert not result.success
    assert result.error


def test_http_url_joins_base_and_path():
    assert HttpProofSink("http://store:3000/", "/proofs/").url == "http://store:3000/proofs"


# ── SQLite ────────────────────────────────────────────────────────


async def test_sqlite_stores_payload(store):
    proof = make_proof(index=97)

    result = await store.deliver(proof)

    assert result.success
    assert await store.get_proof(97) == proof.to_payload()
    assert await store.count() == 1


async def test_sqlite_redelivery_upserts(store):
    await store.deliver(make_proof(index=99))
    newer = make_proof(index=99, batch_size=8, prev_total_elements=96)
    await store.deliver(newer)

    assert await store.count() == 1
    assert await store.get_deliveries(99) == 2
    assert await store.get_proof(99) == newer.to_payload()


async def test_sqlite_unknown_index(store):
    assert await store.get_proof(12345) is None
    assert await store.get_deliveries(12345) == 0


async def test_sqlite_lists_highest_index_first(store):
    for index in (96, 98, 97):
        await store.deliver(make_proof(index=index))

    rows = await store.list_indices(limit=2)

    assert [r[0] for r in rows] == [98, 97]
    assert all(r[1] == 0 for r in rows)


async def test_sqlite_file_database_created(tmp_path):
    path = tmp_path / "nested" / "proofs.db"
    store = SQLiteProofStore(str(path))
    await store.initialize()
    await store.deliver(make_proof())
    await store.close()

    assert path.exists()
    reopened = SQLiteProofStore(str(path))
    await reopened.initialize()
    assert await reopened.count() == 1
    await reopened.close()


async def test_sqlite_requires_initialize():
    with pytest.raises(AssertionError):
        await SQLiteProofStore().deliver(make_proof())


# ── Selection ─────────────────────────────────────────────────────


async def test_open_sink_selects_by_kind(tmp_path):
    http = await open_sink(SinkConfig(kind=SinkKind.HTTP, url="http://store:3000"))
    assert isinstance(http, HttpProofSink)
    assert http.url == "http://store:3000/proofs"

    sqlite = await open_sink(SinkConfig(kind=SinkKind.SQLITE, db_path=str(tmp_path / "p.db")))
    try:
        assert isinstance(sqlite, SQLiteProofStore)
        assert await sqlite.count() == 0
    finally:
        await sqlite.close()
