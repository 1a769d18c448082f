"""
bookstore.auth.identity

Identity provider collaborator boundary.

Responsibilities:
- Turn a bearer token into a `Principal`, or `None` when the provider rejects it.
- Offer a local JWT verifier and a client for the hosted auth service.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from bookstore.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from bookstore.auth.models import Principal
from bookstore.observability.logging import get_logger
from bookstore.settings import Settings

log = get_logger(__name__)


class IdentityProvider(Protocol):
    async def verify(self, token: str) -> Principal | None: ...

    async def aclose(self) -> None: ...


def _principal_from_claims(claims: dict[str, Any]) -> Principal | None:
    subject = str(claims.get("sub") or claims.get("id") or "")
    if not subject:
        return None
    return Principal(id=subject, email=str(claims.get("email") or ""))


class JwtIdentityProvider:
    """
    Verifies tokens locally against the shared signing secret.
    """

    def __init__(self, cfg: JwtConfig) -> None:
        self._cfg = cfg

    async def verify(self, token: str) -> Principal | None:
        try:
            claims = decode_and_validate(cfg=self._cfg, token=token)
        except JwtValidationError as e:
            log.info("identity.rejected", provider="jwt", reason=str(e))
            return None
        return _principal_from_claims(claims)

    async def aclose(self) -> None:
        return None


class RemoteIdentityProvider:
    """
    Asks the hosted auth service who owns the token (`GET /auth/v1/user`).
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._http = http or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def verify(self, token: str) -> Principal | None:
        try:
            r = await self._http.get(
                "/auth/v1/user",
                headers={"Authorization": f"Bearer {token}", "apikey": self._api_key},
            )
        except httpx.HTTPError as e:
            log.warning("identity.unreachable", provider="remote", error=str(e))
            return None
        if r.status_code != 200:
            log.info("identity.rejected", provider="remote", status=r.status_code)
            return None
        try:
            body = r.json()
        except ValueError:
            log.info("identity.rejected", provider="remote", reason="malformed body")
            return None
        if not isinstance(body, dict):
            log.info("identity.rejected", provider="remote", reason="unexpected body")
            return None
        return _principal_from_claims(body)

    async def aclose(self) -> None:
        await self._http.aclose()


def build_identity_provider(settings: Settings) -> IdentityProvider:
    if settings.identity_provider == "remote":
        return RemoteIdentityProvider(
            base_url=settings.identity_url,
            api_key=settings.identity_api_key,
            timeout=settings.identity_timeout_seconds,
        )
    return JwtIdentityProvider(JwtConfig.from_settings(settings))


# --- Module Notes -----------------------------------------------------------
# Sign-in/sign-up with email+password stay with the hosted provider; this service only verifies.
