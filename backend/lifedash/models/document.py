"""
Document Model

Every persisted document (private projects, shared projects, profiles,
per-user settings) is one row addressed by its slash-separated path,
e.g. ``users/u1/projects/abc`` or ``shareProjects/xyz``.
"""
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Document(Base):
    """
    A schemaless JSON document.

    The payload is stored as a JSON string (SQLite has no native JSON
    column worth relying on). Queries filter on the parent collection
    path and evaluate field conditions in Python.
    """
    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(String(512), primary_key=True)

    # Parent collection path, e.g. "users/u1/projects"
    collection: Mapped[str] = mapped_column(String(512), nullable=False)

    # Last path segment
    doc_id: Mapped[str] = mapped_column(String(128), nullable=False)

    data: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    __table_args__ = (
        Index("idx_documents_collection", "collection"),
    )

    def __repr__(self) -> str:
        return f"<Document(path={self.path})>"
