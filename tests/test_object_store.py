"""
tests.test_object_store

Object store implementations: path collisions, the filesystem store used in tests,
and the hosted storage REST client.
"""

from __future__ import annotations

import httpx
import pytest

from bookstore.errors import StoreFailure, ValidationFailed
from bookstore.settings import Settings
from bookstore.storage.object_store import (
    LocalObjectStore,
    RemoteObjectStore,
    UploadedFile,
    build_object_store,
    object_path,
    store_file,
)

PDF = UploadedFile(filename="book.pdf", content_type="application/pdf", data=b"%PDF-1.4 x")


def test_same_name_in_the_same_millisecond_gets_distinct_paths() -> None:
    first = object_path("u-1", "book.pdf", now_ms=1700000000000)
    second = object_path("u-1", "book.pdf", now_ms=1700000000000)
    assert first != second
    assert first.startswith("u-1/1700000000000-") and first.endswith("-book.pdf")


async def test_repeated_uploads_of_one_file_both_land(tmp_path) -> None:
    store = LocalObjectStore(root=tmp_path, public_base="http://test/storage")
    a = await store_file(store, bucket="book-pdfs", owner_id="u-1", file=PDF)
    b = await store_file(store, bucket="book-pdfs", owner_id="u-1", file=PDF)

    assert a.path != b.path
    assert len(list((tmp_path / "book-pdfs" / "u-1").iterdir())) == 2
    assert a.url == f"http://test/storage/book-pdfs/{a.path}"


async def test_local_store_never_overwrites_or_escapes_its_bucket(tmp_path) -> None:
    store = LocalObjectStore(root=tmp_path, public_base="http://test/storage")
    await store.upload("b", "u-1/x.pdf", b"one", "application/pdf")

    with pytest.raises(StoreFailure):
        await store.upload("b", "u-1/x.pdf", b"two", "application/pdf")
    with pytest.raises(ValidationFailed):
        await store.upload("b", "../escape.pdf", b"x", "application/pdf")
    assert (tmp_path / "b" / "u-1" / "x.pdf").read_bytes() == b"one"


async def test_remote_store_uploads_without_upsert() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Key": "book-pdfs/u-1/1-n-book.pdf"})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://store")
    store = RemoteObjectStore(base_url="http://store/", api_key="service-key", timeout=1, http=http)
    try:
        obj = await store_file(store, bucket="book-pdfs", owner_id="u-1", file=PDF)
    finally:
        await store.aclose()

    [request] = seen
    assert request.method == "POST"
    assert request.url.path == f"/storage/v1/object/book-pdfs/{obj.path}"
    assert request.headers["Authorization"] == "Bearer service-key"
    assert request.headers["apikey"] == "service-key"
    assert request.headers["Content-Type"] == "application/pdf"
    assert request.headers["x-upsert"] == "false"
    assert request.content == PDF.data
    assert obj.url == f"http://store/storage/v1/object/public/book-pdfs/{obj.path}"


@pytest.mark.parametrize(
    ("response", "message"),
    [
        (
            httpx.Response(409, json={"statusCode": "409", "message": "The resource already exists"}),
            "The resource already exists",
        ),
        (httpx.Response(400, json={"error": "Bucket not found"}), "Bucket not found"),
        (httpx.Response(502, text="<html>bad gateway</html>"), "status 502"),
    ],
)
async def test_remote_store_failures_carry_the_store_message(response, message) -> None:
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: response), base_url="http://store"
    )
    store = RemoteObjectStore(base_url="http://store", api_key="k", timeout=1, http=http)
    try:
        with pytest.raises(StoreFailure, match=message):
            await store.upload("book-pdfs", "u-1/1-n-book.pdf", b"x", "application/pdf")
    finally:
        await store.aclose()


async def test_remote_store_unreachable_is_a_store_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://store")
    store = RemoteObjectStore(base_url="http://store", api_key="k", timeout=1, http=http)
    try:
        with pytest.raises(StoreFailure, match="connection refused"):
            await store.upload("book-pdfs", "u-1/1-n-book.pdf", b"x", "application/pdf")
    finally:
        await store.aclose()


async def test_build_object_store_follows_the_provider_setting(tmp_path) -> None:
    local = build_object_store(Settings(storage_root=str(tmp_path)))
    assert isinstance(local, LocalObjectStore)

    remote = build_object_store(
        Settings(storage_provider="remote", storage_url="http://store", storage_api_key="k")
    )
    try:
        assert isinstance(remote, RemoteObjectStore)
        assert remote.public_url("covers", "u-1/a.png") == (
            "http://store/storage/v1/object/public/covers/u-1/a.png"
        )
    finally:
        await remote.aclose()
