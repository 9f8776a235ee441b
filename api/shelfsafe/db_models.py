# shelfsafe/db_models.py
"""
SQLAlchemy ORM model for documents kept in PostgreSQL.

One row per document; `body` is the document exactly as it would be
exported from MongoDB (Extended JSON), `collection` names its collection.
"""
from __future__ import annotations
from typing import Any, Dict

from sqlalchemy import BigInteger, Index, JSON, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from shelfsafe.database import Base


class DocumentRow(Base):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(100), nullable=False)
    body: Mapped[Dict[str, Any]] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=False)

    __table_args__ = (
        Index("ix_documents_collection_id", "collection", "id"),
    )

    def __repr__(self) -> str:
        return f"<DocumentRow {self.collection}#{self.id}>"
