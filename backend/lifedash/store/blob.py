"""
Blob Store

Upload, fetch and delete of binary objects (avatar images) by key.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union
import asyncio
import logging

from .base import StoreError
from ..config import settings

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Abstract blob storage keyed by slash-separated names."""

    @abstractmethod
    async def upload(self, key: str, data: bytes) -> str:
        """Store bytes under a key and return a URL to fetch them."""
        pass

    @abstractmethod
    async def read(self, key: str) -> Optional[bytes]:
        """Return the bytes stored under a key, or None if there are none."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object stored under a key."""
        pass


class LocalBlobStore(BlobStore):
    """Blob store writing files under a local directory."""

    def __init__(self, root: Union[str, Path], base_url: str = ""):
        self.root = Path(root).resolve()
        self.base_url = base_url.rstrip("/")

    def _resolve(self, key: str) -> Path:
        target = (self.root / key).resolve()
        if self.root not in target.parents:
            raise StoreError(f"Blob key escapes the storage root: {key!r}")
        return target

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def upload(self, key: str, data: bytes) -> str:
        target = self._resolve(key)

        def _write():
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error(f"Failed to upload blob {key}: {e}")
            raise StoreError(f"Failed to upload {key}") from e

        logger.info(f"Stored blob {key} ({len(data)} bytes)")
        return self.url_for(key)

    async def read(self, key: str) -> Optional[bytes]:
        target = self._resolve(key)
        if not target.is_file():
            return None
        try:
            return await asyncio.to_thread(target.read_bytes)
        except OSError as e:
            logger.error(f"Failed to read blob {key}: {e}")
            raise StoreError(f"Failed to read {key}") from e

    async def delete(self, key: str) -> None:
        target = self._resolve(key)
        try:
            await asyncio.to_thread(target.unlink, True)
        except OSError as e:
            logger.error(f"Failed to delete blob {key}: {e}")
            raise StoreError(f"Failed to delete {key}") from e


# Singleton blob store instance
_blob_store: Optional[BlobStore] = None


def get_blob_store() -> BlobStore:
    """Get or create the configured blob store."""
    global _blob_store
    if _blob_store is None:
        _blob_store = LocalBlobStore(settings.blob_dir, settings.blob_base_url)
    return _blob_store
