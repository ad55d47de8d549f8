# Document and blob stores
from typing import Optional
import logging

from .base import (
    DocumentStore,
    DocumentSnapshot,
    FieldFilter,
    StoreError,
    DocumentNotFoundError,
    join_path,
    utc_now_iso,
)
from .memory import MemoryDocumentStore
from .sql import SQLDocumentStore
from .blob import BlobStore, LocalBlobStore, get_blob_store
from ..config import settings
from ..events import get_event_publisher

logger = logging.getLogger(__name__)

# Singleton store instance
_store_instance: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """
    Get or create the document store instance.

    Backend is selected by the DOCUMENT_BACKEND environment variable.
    """
    global _store_instance

    if _store_instance is None:
        publisher = get_event_publisher()
        if settings.document_backend == "sql":
            from ..database import async_session

            logger.info("Initializing SQL document store")
            _store_instance = SQLDocumentStore(async_session, publisher)
        elif settings.document_backend == "memory":
            logger.info("Initializing in-memory document store")
            _store_instance = MemoryDocumentStore(publisher)
        else:
            raise ValueError(f"Unknown document backend: {settings.document_backend}")

    return _store_instance


__all__ = [
    "DocumentStore",
    "DocumentSnapshot",
    "FieldFilter",
    "StoreError",
    "DocumentNotFoundError",
    "MemoryDocumentStore",
    "SQLDocumentStore",
    "BlobStore",
    "LocalBlobStore",
    "get_blob_store",
    "get_document_store",
    "join_path",
    "utc_now_iso",
]
