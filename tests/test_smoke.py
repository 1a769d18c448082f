"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.
"""

from __future__ import annotations

import httpx


async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"

    assert r.headers["x-request-id"]


async def test_dev_token_is_accepted_by_the_identity_provider(client: httpx.AsyncClient) -> None:
    r = await client.post("/v1/dev/token", json={"subject": "u-1", "email": "u1@example.com"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await client.put(
        "/v1/authors/me",
        json={"full_name": "Dev User"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 200
    assert r.json()["id"] == "u-1"


async def test_unexpected_errors_keep_the_error_body(app) -> None:
    async def boom() -> None:
        raise RuntimeError("secret internals")

    app.add_api_route("/boom", boom)
    # Starlette re-raises after the 500 handler runs; keep the response instead.
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        r = await c.get("/boom")

    assert r.status_code == 500
    assert r.json() == {"error": "internal error"}
