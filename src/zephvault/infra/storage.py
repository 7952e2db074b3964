"""Object storage gateway over the Supabase Storage REST API.

Documents live in a single bucket; their public URLs look like
``https://<project>.supabase.co/storage/v1/object/public/documents/<category>/<file>``.
Reads, uploads and deletes go through the authenticated object API with
async HTTP via httpx.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from zephvault.app.config import get_settings

logger = logging.getLogger(__name__)

_TIMEOUT = 30.0


class StorageError(Exception):
    """Raised when the storage API rejects or fails a request."""


@dataclass(frozen=True)
class BucketInfo:
    name: str
    public: bool


@dataclass(frozen=True)
class UrlCheck:
    accessible: bool
    status: int
    error: str = ""
    content_length: Optional[int] = None


def extract_storage_path(file_url: str, bucket: str = "documents") -> Optional[str]:
    """Return the object path after the bucket segment of *file_url*.

    ``.../public/documents/lease/1700000000.pdf`` -> ``lease/1700000000.pdf``.
    Returns None when the bucket segment is missing.
    """
    if not file_url:
        return None
    parts = file_url.split("/")
    try:
        bucket_index = parts.index(bucket)
    except ValueError:
        return None
    path = "/".join(parts[bucket_index + 1:])
    return path or None


class StorageGateway:
    """Async client for one storage bucket."""

    def __init__(self, base_url: str, service_key: str, bucket: str = "documents") -> None:
        self._base_url = base_url.rstrip("/")
        self._service_key = service_key
        self.bucket = bucket

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
        }

    def _object_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/{self.bucket}/{path}"

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def path_for(self, file_url: str) -> Optional[str]:
        return extract_storage_path(file_url, self.bucket)

    # ------------------------------------------------------------------
    # Object API
    # ------------------------------------------------------------------

    async def download(self, path: str) -> bytes:
        """Fetch an object's bytes. Raises StorageError on any failure."""
        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
                resp = await client.get(self._object_url(path), headers=self._headers)
                resp.raise_for_status()
                return resp.content
        except httpx.HTTPStatusError as exc:
            raise StorageError(
                f"Download of {path} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageError(f"Download of {path} failed: {exc}") from exc

    async def upload(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Store *content* at *path* and return its public URL."""
        headers = {**self._headers, "Content-Type": content_type}
        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
                resp = await client.post(self._object_url(path), headers=headers, content=content)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageError(
                f"Upload of {path} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageError(f"Upload of {path} failed: {exc}") from exc
        logger.info("Stored %s (%d bytes)", path, len(content))
        return self.public_url(path)

    async def remove(self, paths: list[str]) -> None:
        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
                resp = await client.request(
                    "DELETE",
                    f"{self._base_url}/storage/v1/object/{self.bucket}",
                    headers=self._headers,
                    json={"prefixes": paths},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise StorageError(
                f"Delete of {paths} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageError(f"Delete of {paths} failed: {exc}") from exc

    async def list_buckets(self) -> list[BucketInfo]:
        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT) as client:
                resp = await client.get(f"{self._base_url}/storage/v1/bucket", headers=self._headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise StorageError(f"Bucket listing failed with HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise StorageError(f"Bucket listing failed: {exc}") from exc
        except ValueError as exc:
            raise StorageError("Bucket listing returned invalid JSON") from exc
        if not isinstance(data, list) or not all(isinstance(b, dict) for b in data):
            raise StorageError(f"Unexpected bucket listing: {str(data)[:200]}")
        return [BucketInfo(name=b.get("name", ""), public=bool(b.get("public"))) for b in data]

    # ------------------------------------------------------------------
    # Public URL check
    # ------------------------------------------------------------------

    async def check_public_url(self, url: str) -> UrlCheck:
        """HEAD the public URL. Never raises."""
        try:
            async with httpx.AsyncClient(timeout=10.0, follow_redirects=True) as client:
                resp = await client.head(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return UrlCheck(accessible=False, status=0, error=str(exc) or "Network error")

        length = resp.headers.get("content-length")
        return UrlCheck(
            accessible=resp.is_success,
            status=resp.status_code,
            error="" if resp.is_success else f"HTTP {resp.status_code}: {resp.reason_phrase}",
            content_length=int(length) if length and length.isdigit() else None,
        )


def get_storage() -> StorageGateway:
    """FastAPI dependency: storage gateway built from settings."""
    settings = get_settings()
    return StorageGateway(
        base_url=settings.supabase_url,
        service_key=settings.supabase_service_key,
        bucket=settings.storage_bucket,
    )
