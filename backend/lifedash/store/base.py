"""
Document Store Base Class

Abstract interface over a document database addressed by slash paths.
Collections and documents alternate: ``users/{uid}/projects/{id}``.
Writes are single-document and atomic; there are no transactions.
"""
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from typing import Any, AsyncGenerator, Dict, List, Literal, Optional
import asyncio
import logging
import uuid

from ..events import ChangeType, DocumentEvent, EventPublisher

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base exception for store read/write failures."""
    pass


class DocumentNotFoundError(StoreError):
    """An update targeted a document that does not exist."""
    pass


@dataclass
class DocumentSnapshot:
    """A document read from a collection."""
    id: str
    path: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class FieldFilter:
    """A single query condition on a top-level document field."""
    field: str
    op: Literal["==", "array-contains"]
    value: Any

    def matches(self, data: Dict[str, Any]) -> bool:
        if self.field not in data:
            return False
        current = data[self.field]
        if self.op == "==":
            return current == self.value
        if self.op == "array-contains":
            return isinstance(current, list) and self.value in current
        raise ValueError(f"Unsupported filter operator: {self.op}")


def join_path(*segments: str) -> str:
    """Join path segments, rejecting empty segments or embedded slashes."""
    for segment in segments:
        if not segment or "/" in segment:
            raise ValueError(f"Invalid path segment: {segment!r}")
    return "/".join(segments)


def split_path(path: str) -> tuple[str, str]:
    """Split a document path into (collection path, document id)."""
    collection, _, doc_id = path.rpartition("/")
    if not collection or not doc_id:
        raise ValueError(f"Not a document path: {path!r}")
    return collection, doc_id


def new_document_id() -> str:
    """Generate an opaque document id."""
    return uuid.uuid4().hex[:20]


def utc_now_iso() -> str:
    """Timestamp stored in ``createdAt`` style fields."""
    return datetime.utcnow().isoformat()


def deep_merge(base: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``changes`` into a copy of ``base``; nested mappings merge recursively."""
    merged = deepcopy(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


class DocumentStore(ABC):
    """
    Abstract base class for document stores.

    All persistence goes through this interface so the SQL backend and
    the in-memory backend are interchangeable. Implementations publish
    every successful write to the attached ``EventPublisher`` so that
    ``subscribe`` sees live changes.
    """

    def __init__(self, publisher: Optional[EventPublisher] = None):
        self.publisher = publisher

    @abstractmethod
    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a document; None when it does not exist."""
        pass

    @abstractmethod
    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        """
        Create or overwrite a document.

        With ``merge=True`` the given fields are merged into the existing
        document instead of replacing it.
        """
        pass

    @abstractmethod
    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        """
        Replace top-level fields of an existing document.

        Raises:
            DocumentNotFoundError: the document does not exist
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        pass

    @abstractmethod
    async def list_collection(self, collection_path: str) -> List[DocumentSnapshot]:
        """All documents directly inside a collection, oldest first."""
        pass

    async def add(self, collection_path: str, data: Dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""
        doc_id = new_document_id()
        await self.set(join_path(collection_path, doc_id), data)
        return doc_id

    async def query(self, collection_path: str, *filters: FieldFilter) -> List[DocumentSnapshot]:
        """Documents in a collection matching every filter."""
        docs = await self.list_collection(collection_path)
        return [d for d in docs if all(f.matches(d.data) for f in filters)]

    async def watch(self, path: str) -> asyncio.Queue:
        """Register interest in a document now; pass the queue to subscribe()."""
        if self.publisher is None:
            raise StoreError("This store has no change publisher attached")
        return await self.publisher.register(path)

    async def subscribe(
        self, path: str, queue: Optional[asyncio.Queue] = None
    ) -> AsyncGenerator[DocumentEvent, None]:
        """Follow changes of one document until it is deleted."""
        if queue is None:
            queue = await self.watch(path)
        async for event in self.publisher.listen(path, queue):
            yield event

    async def _notify(self, path: str, change_type: ChangeType, data: Optional[Dict[str, Any]] = None):
        """Publish a change after a successful write."""
        if self.publisher is not None:
            await self.publisher.publish(path, change_type, data)
