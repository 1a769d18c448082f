"""
bookstore.storage.object_store

Object store collaborator boundary.

Responsibilities:
- Upload bytes to a bucket/path and hand back a retrievable public URL.
- Build collision-resistant object paths scoped to the uploading principal.
- Offer a client for the hosted storage REST API and a filesystem store for dev/test.
"""

from __future__ import annotations

import asyncio
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import quote
from uuid import uuid4

import httpx

from bookstore.errors import StoreFailure, ValidationFailed
from bookstore.observability.logging import get_logger
from bookstore.settings import Settings

log = get_logger(__name__)

_UNSAFE = re.compile(r"[^a-zA-Z0-9._-]")


@dataclass(frozen=True, slots=True)
class UploadedFile:
    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True, slots=True)
class StoredObject:
    bucket: str
    path: str
    url: str


class ObjectStore(Protocol):
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None: ...

    def public_url(self, bucket: str, path: str) -> str: ...

    async def aclose(self) -> None: ...


def safe_file_name(name: str) -> str:
    return _UNSAFE.sub("_", name)


def object_path(
    owner_id: str, filename: str, *, now_ms: int | None = None, nonce: str | None = None
) -> str:
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    # The nonce keeps same-name uploads within one millisecond apart.
    nonce = nonce if nonce is not None else uuid4().hex[:8]
    return f"{owner_id}/{stamp}-{nonce}-{safe_file_name(filename or 'file')}"


def _check_path(path: str) -> None:
    if not path or path.startswith("/") or ".." in path.split("/"):
        raise ValidationFailed("invalid object path")


class LocalObjectStore:
    """
    Filesystem-backed store laid out as `<root>/<bucket>/<path>`, served under `public_base`.
    """

    def __init__(self, *, root: str | Path, public_base: str) -> None:
        self._root = Path(root)
        self._public_base = public_base.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def _target(self, bucket: str, path: str) -> Path:
        target = (self._root / bucket / path).resolve()
        if not target.is_relative_to((self._root / bucket).resolve()):
            raise ValidationFailed("invalid object path")
        return target

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        target = self._target(bucket, path)
        try:
            await asyncio.to_thread(_write_new_file, target, data)
        except OSError as e:
            log.error("storage.upload_failed", bucket=bucket, path=path, error=str(e))
            raise StoreFailure(f"upload failed: {e}") from e
        log.info("storage.uploaded", bucket=bucket, path=path, size=len(data), content_type=content_type)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._public_base}/{bucket}/{path}"

    async def aclose(self) -> None:
        return None


def _write_new_file(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    # "x": an object path is never overwritten.
    with target.open("xb") as fh:
        fh.write(data)


class RemoteObjectStore:
    """
    Client for the hosted storage REST API.

    Uploads go to `POST /storage/v1/object/<bucket>/<path>` without upsert, so an existing
    object is never replaced. Public URLs point at `/storage/v1/object/public/<bucket>/<path>`.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._http = http or httpx.AsyncClient(base_url=self._base_url, timeout=timeout)

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        _check_path(path)
        try:
            r = await self._http.post(
                f"/storage/v1/object/{quote(bucket)}/{quote(path)}",
                content=data,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "apikey": self._api_key,
                    "Content-Type": content_type or "application/octet-stream",
                    "x-upsert": "false",
                },
            )
        except httpx.HTTPError as e:
            log.error("storage.upload_failed", bucket=bucket, path=path, error=str(e))
            raise StoreFailure(f"upload failed: {e}") from e
        if r.status_code >= 300:
            message = _error_message(r)
            log.error(
                "storage.upload_failed", bucket=bucket, path=path, status=r.status_code, error=message
            )
            raise StoreFailure(message)
        log.info("storage.uploaded", bucket=bucket, path=path, size=len(data), content_type=content_type)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{quote(bucket)}/{quote(path)}"

    async def aclose(self) -> None:
        await self._http.aclose()


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return f"upload failed with status {r.status_code}"


async def store_file(
    store: ObjectStore, *, bucket: str, owner_id: str, file: UploadedFile
) -> StoredObject:
    path = object_path(owner_id, file.filename)
    await store.upload(bucket, path, file.data, file.content_type)
    return StoredObject(bucket=bucket, path=path, url=store.public_url(bucket, path))


def build_object_store(settings: Settings) -> ObjectStore:
    if settings.storage_provider == "remote":
        return RemoteObjectStore(
            base_url=settings.storage_url,
            api_key=settings.storage_api_key,
            timeout=settings.storage_timeout_seconds,
        )
    return LocalObjectStore(root=settings.storage_root, public_base=settings.storage_public_url)


# --- Module Notes -----------------------------------------------------------
# Uploads are not transactional with the row writes that reference them; a failed
# write after `store_file` leaves the object orphaned (see services.catalog).
