"""
tests.test_author_api

Author profile and dashboard endpoints plus the public catalog, over HTTP.
"""

from __future__ import annotations

import pytest

from tests.factories import ADMIN_EMAIL, seed_admin, seed_author, seed_book

PDF_BYTES = b"%PDF-1.4 minimal"


@pytest.fixture
def writer(auth_header) -> dict[str, str]:
    return auth_header("w1", "w1@example.com")


async def test_profile_lifecycle(client, writer) -> None:
    r = await client.get("/v1/authors/me", headers=writer)
    assert r.status_code == 404

    r = await client.put("/v1/authors/me", json={"full_name": " Kamala ", "bio": "poet"}, headers=writer)
    assert r.status_code == 200
    created = r.json()
    assert created["id"] == "w1" and created["full_name"] == "Kamala"

    r = await client.put("/v1/authors/me", json={"full_name": "Kamala D.", "bio": None}, headers=writer)
    assert r.json()["created_at"] == created["created_at"]
    assert r.json()["bio"] is None

    r = await client.put("/v1/authors/me", json={"full_name": "   "}, headers=writer)
    assert r.status_code == 400

    r = await client.put(
        "/v1/authors/me/image",
        files={"image": ("me.jpg", b"\xff\xd8jpeg", "image/jpeg")},
        headers=writer,
    )
    assert r.status_code == 200
    assert r.json()["profile_image_url"].startswith("http://test/storage/author-images/w1/")


async def test_profile_requires_session(client) -> None:
    r = await client.get("/v1/authors/me")
    assert r.status_code == 401
    assert r.json() == {"error": "no session"}


async def test_author_routes_require_a_profile(client, writer) -> None:
    r = await client.get("/v1/author/books", headers=writer)
    assert r.status_code == 403
    assert r.json() == {"error": "author profile required"}


async def test_upload_edit_and_delete(client, session, writer) -> None:
    await seed_author(session, "w1")

    r = await client.post(
        "/v1/author/books",
        data={"title": "Rain", "price_lkr": "450", "tags": "poems, rain", "allow_download": "true"},
        files={
            "pdf": ("rain.pdf", PDF_BYTES, "application/pdf"),
            "cover": ("rain.png", b"\x89PNG", "image/png"),
        },
        headers=writer,
    )
    assert r.status_code == 201, r.text
    book = r.json()
    assert book["is_published"] is False and book["published_at"] is None
    assert book["tags"] == ["poems", "rain"]

    r = await client.get(book["pdf_url"].removeprefix("http://test"))
    assert r.status_code == 200 and r.content == PDF_BYTES

    r = await client.get("/v1/author/books", headers=writer)
    assert r.json()["stats"] == {"total": 1, "published": 0, "drafts": 1}

    r = await client.patch(f"/v1/author/books/{book['id']}", json={"price_lkr": 500}, headers=writer)
    assert r.status_code == 200 and r.json()["price_lkr"] == 500

    r = await client.patch(
        f"/v1/author/books/{book['id']}", json={"is_published": True}, headers=writer
    )
    assert r.status_code == 403

    r = await client.put(
        f"/v1/author/books/{book['id']}/pdf",
        files={"pdf": ("rain-v2.pdf", PDF_BYTES, "application/pdf")},
        headers=writer,
    )
    assert r.status_code == 200
    assert r.json()["pdf_path"].endswith("-rain-v2.pdf")

    r = await client.delete(f"/v1/author/books/{book['id']}", headers=writer)
    assert r.status_code == 200 and r.json() == {"ok": True}
    assert (await client.get("/v1/author/books", headers=writer)).json()["books"] == []


async def test_upload_requires_pdf(client, session, writer) -> None:
    await seed_author(session, "w1")
    r = await client.post("/v1/author/books", data={"title": "No file"}, headers=writer)
    assert r.status_code == 400
    assert r.json() == {"error": "Please select a PDF file."}


async def test_other_authors_books_are_off_limits(client, session, auth_header) -> None:
    await seed_author(session, "w1")
    await seed_author(session, "w2")
    book = await seed_book(session, "w1")
    intruder = auth_header("w2", "w2@example.com")

    r = await client.patch(f"/v1/author/books/{book.id}", json={"title": "Mine"}, headers=intruder)
    assert r.status_code == 403
    r = await client.delete(f"/v1/author/books/{book.id}", headers=intruder)
    assert r.status_code == 403


async def test_book_detail_visibility(client, session, auth_header) -> None:
    await seed_author(session, "w1")
    draft = await seed_book(session, "w1")
    live = await seed_book(session, "w1", published=True)
    await seed_admin(session, "admin-1")

    assert (await client.get(f"/v1/books/{live.id}")).status_code == 200
    assert (await client.get(f"/v1/books/{draft.id}")).status_code == 404

    stranger = auth_header("w2", "w2@example.com")
    assert (await client.get(f"/v1/books/{draft.id}", headers=stranger)).status_code == 404

    owner = auth_header("w1", "w1@example.com")
    assert (await client.get(f"/v1/books/{draft.id}", headers=owner)).status_code == 200

    admin = auth_header("admin-1", ADMIN_EMAIL)
    assert (await client.get(f"/v1/books/{draft.id}", headers=admin)).status_code == 200

    listing = (await client.get("/v1/books")).json()["books"]
    assert [b["id"] for b in listing] == [live.id]
