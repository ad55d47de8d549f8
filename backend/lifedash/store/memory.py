"""
In-Memory Document Store

Process-local store for tests and throwaway development runs.
Values are deep-copied on the way in and out so callers never share
state with the store.
"""
from copy import deepcopy
from typing import Any, Dict, List, Optional

from .base import DocumentStore, DocumentSnapshot, DocumentNotFoundError, deep_merge, split_path
from ..events import ChangeType, EventPublisher


class MemoryDocumentStore(DocumentStore):
    """Dict-backed implementation of the document store."""

    def __init__(self, publisher: Optional[EventPublisher] = None):
        super().__init__(publisher)
        # path -> document data, insertion ordered
        self._documents: Dict[str, Dict[str, Any]] = {}

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        split_path(path)
        data = self._documents.get(path)
        return deepcopy(data) if data is not None else None

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        split_path(path)
        existing = self._documents.get(path)
        if merge and existing is not None:
            stored = deep_merge(existing, data)
        else:
            stored = deepcopy(data)
        self._documents[path] = stored
        await self._notify(path, ChangeType.SET, deepcopy(stored))

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        existing = self._documents.get(path)
        if existing is None:
            raise DocumentNotFoundError(f"No document at {path}")
        existing.update(deepcopy(fields))
        await self._notify(path, ChangeType.UPDATE, deepcopy(existing))

    async def delete(self, path: str) -> None:
        if self._documents.pop(path, None) is not None:
            await self._notify(path, ChangeType.DELETE)

    async def list_collection(self, collection_path: str) -> List[DocumentSnapshot]:
        snapshots = []
        for path, data in self._documents.items():
            collection, doc_id = split_path(path)
            if collection == collection_path:
                snapshots.append(DocumentSnapshot(id=doc_id, path=path, data=deepcopy(data)))
        return snapshots

    def __len__(self) -> int:
        return len(self._documents)
