'''
Blob storage client for the avatars and resources buckets.
'''
import re
import uuid
from urllib.parse import quote

import httpx

from ..common.config import settings
from ..common.exceptions import StorageError
from ..common.logger import log


def build_object_path(owner_id, filename: str) -> str:
    """'<owner>/<random>_<sanitised filename>', unique per upload."""
    safe_name = re.sub(r"[^A-Za-z0-9._-]+", "_", filename or "file").strip("._") or "file"
    return f"{owner_id}/{uuid.uuid4().hex}_{safe_name}"


def download_name(title: str, path: str) -> str:
    """Name offered to the browser: the resource title plus the stored file name."""
    basename = path.rsplit("/", 1)[-1]
    return f"{title}_{basename}"


class StorageService:
    """
    Thin async client over the storage REST API:
    {STORAGE_URL}/storage/v1/object/{bucket}/{path}, authorised with the
    service key as a bearer token.
    """

    def __init__(self):
        self.base_url = settings.STORAGE_URL.rstrip("/")
        self.service_key = settings.STORAGE_SERVICE_KEY
        self.timeout = settings.STORAGE_TIMEOUT_SECONDS

    def _object_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{bucket}/{quote(path)}"

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.service_key}"}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Stores `content` under `path` and returns the path."""
        log.info(f"Uploading {len(content)} bytes to storage {bucket}/{path}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self._object_url(bucket, path),
                    content=content,
                    headers={**self._headers(content_type), "x-upsert": "true"},
                )
                response.raise_for_status()
            return path
        except httpx.HTTPStatusError as e:
            log.error(f"Storage upload to {bucket}/{path} failed: {e.response.status_code} - {e.response.text}", exc_info=True)
            raise StorageError("The file could not be uploaded.", status_code=e.response.status_code)
        except httpx.RequestError as e:
            log.error(f"Storage service unreachable during upload to {bucket}/{path}: {e}", exc_info=True)
            raise StorageError("The storage service is currently unavailable.")

    async def download(self, bucket: str, path: str) -> bytes:
        log.info(f"Downloading storage object {bucket}/{path}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self._object_url(bucket, path), headers=self._headers())
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as e:
            log.error(f"Storage download of {bucket}/{path} failed: {e.response.status_code}", exc_info=True)
            raise StorageError("The file could not be downloaded.", status_code=e.response.status_code)
        except httpx.RequestError as e:
            log.error(f"Storage service unreachable during download of {bucket}/{path}: {e}", exc_info=True)
            raise StorageError("The storage service is currently unavailable.")

    async def remove(self, bucket: str, path: str) -> bool:
        """
        Deletes an object. Returns False when it was already gone, so a
        repeated delete succeeds.
        """
        log.info(f"Removing storage object {bucket}/{path}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.delete(self._object_url(bucket, path), headers=self._headers())
                if response.status_code == 404:
                    log.warning(f"Storage object {bucket}/{path} was already removed.")
                    return False
                response.raise_for_status()
            return True
        except httpx.HTTPStatusError as e:
            log.error(f"Storage removal of {bucket}/{path} failed: {e.response.status_code}", exc_info=True)
            raise StorageError("The file could not be removed.", status_code=e.response.status_code)
        except httpx.RequestError as e:
            log.error(f"Storage service unreachable during removal of {bucket}/{path}: {e}", exc_info=True)
            raise StorageError("The storage service is currently unavailable.")
