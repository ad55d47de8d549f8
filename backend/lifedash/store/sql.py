"""
SQL Document Store

Document store backed by the ``documents`` table through the SQLAlchemy
async engine. Each operation runs in its own short session; a write is
one committed statement, which is the single-document atomicity the
rest of the system relies on.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..events import ChangeType, EventPublisher
from ..models.document import Document
from .base import DocumentStore, DocumentSnapshot, DocumentNotFoundError, StoreError, deep_merge, split_path

logger = logging.getLogger(__name__)


class SQLDocumentStore(DocumentStore):
    """Document store persisting JSON payloads in a relational table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(publisher)
        self.session_factory = session_factory

    @staticmethod
    def _dump(data: Dict[str, Any]) -> str:
        try:
            return json.dumps(data)
        except (TypeError, ValueError) as e:
            raise StoreError(f"Document is not JSON serializable: {e}") from e

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        split_path(path)
        try:
            async with self.session_factory() as session:
                row = await session.get(Document, path)
                return json.loads(row.data) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StoreError(f"Failed to read {path}") from e

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        collection, doc_id = split_path(path)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = await session.get(Document, path)
                    if row is None:
                        stored = data
                        session.add(Document(
                            path=path,
                            collection=collection,
                            doc_id=doc_id,
                            data=self._dump(stored),
                        ))
                    else:
                        stored = deep_merge(json.loads(row.data), data) if merge else data
                        row.data = self._dump(stored)
        except SQLAlchemyError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StoreError(f"Failed to write {path}") from e

        await self._notify(path, ChangeType.SET, stored)

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        split_path(path)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    row = await session.get(Document, path)
                    if row is None:
                        raise DocumentNotFoundError(f"No document at {path}")
                    stored = json.loads(row.data)
                    stored.update(fields)
                    row.data = self._dump(stored)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update {path}: {e}")
            raise StoreError(f"Failed to update {path}") from e

        await self._notify(path, ChangeType.UPDATE, stored)

    async def delete(self, path: str) -> None:
        split_path(path)
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(delete(Document).where(Document.path == path))
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete {path}: {e}")
            raise StoreError(f"Failed to delete {path}") from e

        if result.rowcount:
            await self._notify(path, ChangeType.DELETE)

    async def list_collection(self, collection_path: str) -> List[DocumentSnapshot]:
        stmt = (
            select(Document)
            .where(Document.collection == collection_path)
            .order_by(Document.created_at.asc())
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list {collection_path}: {e}")
            raise StoreError(f"Failed to list {collection_path}") from e

        return [
            DocumentSnapshot(id=row.doc_id, path=row.path, data=json.loads(row.data))
            for row in rows
        ]
