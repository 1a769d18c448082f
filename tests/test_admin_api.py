"""
tests.test_admin_api

Admin endpoints over HTTP: the isAdmin probe, dashboard listings and the publish toggle.
"""

from __future__ import annotations

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from bookstore.db.repositories.books import BookRepo
from tests.factories import ADMIN_EMAIL, days_ago, seed_admin, seed_author, seed_book


@pytest.fixture
async def admin_headers(session, auth_header) -> dict[str, str]:
    await seed_admin(session, "admin-1")
    return auth_header("admin-1", ADMIN_EMAIL)


async def test_me_probe_never_fails(client: httpx.AsyncClient, session, auth_header) -> None:
    r = await client.get("/v1/admin/me")
    assert r.status_code == 200 and r.json() == {"isAdmin": False}

    r = await client.get("/v1/admin/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 200 and r.json() == {"isAdmin": False}

    # Grant row present but the email is not on the allow-list.
    await seed_admin(session, "u-a")
    r = await client.get("/v1/admin/me", headers=auth_header("u-a", "a@x.com"))
    assert r.json() == {"isAdmin": False}

    await seed_admin(session, "admin-1")
    r = await client.get("/v1/admin/me", headers=auth_header("admin-1", ADMIN_EMAIL))
    assert r.json() == {"isAdmin": True}


@pytest.mark.parametrize("path", ["/v1/admin/authors", "/v1/admin/books"])
async def test_listings_require_admin(client, session, auth_header, path) -> None:
    r = await client.get(path)
    assert r.status_code == 401
    assert r.json() == {"error": "no session"}

    r = await client.get(path, headers=auth_header("u-1", "u1@example.com"))
    assert r.status_code == 403
    assert r.json() == {"error": "not allowed"}

    # Allow-listed email but no grant row.
    r = await client.get(path, headers=auth_header("someone", ADMIN_EMAIL))
    assert r.status_code == 403
    assert r.json() == {"error": "no grant"}


async def test_authors_with_book_counts(client, session, admin_headers) -> None:
    await seed_author(session, "old", full_name="Old Hand", created_at=days_ago(10))
    await seed_author(session, "new", full_name="Newcomer", created_at=days_ago(1))
    await seed_book(session, "old", published=True)
    await seed_book(session, "old")

    r = await client.get("/v1/admin/authors", headers=admin_headers)
    assert r.status_code == 200
    authors = r.json()["authors"]
    assert [a["id"] for a in authors] == ["new", "old"]
    assert [a["books_count"] for a in authors] == [0, 2]
    assert set(authors[0]) == {
        "id",
        "full_name",
        "bio",
        "profile_image_url",
        "created_at",
        "books_count",
    }


async def test_all_books_include_drafts_newest_first(client, session, admin_headers) -> None:
    await seed_author(session, "w1")
    old = await seed_book(session, "w1", published=True, created_at=days_ago(5))
    new = await seed_book(session, "w1", created_at=days_ago(1))

    r = await client.get("/v1/admin/books", headers=admin_headers)
    assert r.status_code == 200
    books = r.json()["books"]
    assert [b["id"] for b in books] == [new.id, old.id]
    assert [b["is_published"] for b in books] == [False, True]


async def test_publish_toggle(client, session, admin_headers) -> None:
    await seed_author(session, "w1")
    book = await seed_book(session, "w1")

    r = await client.post(
        "/v1/admin/books/publish", json={"bookId": book.id, "publish": True}, headers=admin_headers
    )
    assert r.status_code == 200 and r.json() == {"ok": True}
    assert [b["id"] for b in (await client.get("/v1/books")).json()["books"]] == [book.id]

    r = await client.post(
        "/v1/admin/books/publish", json={"bookId": book.id, "publish": False}, headers=admin_headers
    )
    assert r.status_code == 200
    assert (await client.get("/v1/books")).json()["books"] == []


@pytest.mark.parametrize(
    "body",
    [
        {"bookId": "b-1", "publish": "yes"},
        {"bookId": "b-1"},
        {"publish": True},
        {"bookId": "", "publish": True},
        ["not", "an", "object"],
    ],
)
async def test_publish_toggle_validation(client, admin_headers, body) -> None:
    r = await client.post("/v1/admin/books/publish", json=body, headers=admin_headers)
    assert r.status_code == 400
    assert "error" in r.json()


async def test_publish_toggle_missing_book(client, admin_headers) -> None:
    r = await client.post(
        "/v1/admin/books/publish",
        json={"bookId": "missing-id", "publish": True},
        headers=admin_headers,
    )
    assert r.status_code == 404
    assert r.json() == {"error": "Book not found"}


async def test_publish_toggle_checks_auth_before_anything(client, session, auth_header) -> None:
    await seed_author(session, "w1")
    book = await seed_book(session, "w1")

    r = await client.post("/v1/admin/books/publish", json={"bookId": book.id, "publish": True})
    assert r.status_code == 401

    # The author owns the book but is not an admin.
    r = await client.post(
        "/v1/admin/books/publish",
        json={"bookId": book.id, "publish": True},
        headers=auth_header("w1", "w1@example.com"),
    )
    assert r.status_code == 403
    assert (await client.get("/v1/books")).json()["books"] == []


async def test_publish_toggle_store_failure_passes_message_through(
    client, session, admin_headers, monkeypatch
) -> None:
    await seed_author(session, "w1")
    book = await seed_book(session, "w1")

    async def failing_update(self, **kwargs):
        raise OperationalError("UPDATE books", {}, Exception("database is locked"))

    monkeypatch.setattr(BookRepo, "set_publish_state", failing_update)
    r = await client.post(
        "/v1/admin/books/publish", json={"bookId": book.id, "publish": True}, headers=admin_headers
    )
    assert r.status_code == 500
    assert "database is locked" in r.json()["error"]

    monkeypatch.undo()
    books = (await client.get("/v1/admin/books", headers=admin_headers)).json()["books"]
    assert [(b["id"], b["is_published"], b["published_at"]) for b in books] == [
        (book.id, False, None)
    ]
