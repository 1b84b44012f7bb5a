"""
API Base — Example SQLAlchemy Model
====================================

What:  ORM model for the `examples` table.
Why:   The sample resource every starter module is modelled on.

Table Design Rationale:
    - id: UUID stored as a 36-char string so the same schema works on
      SQLite and PostgreSQL; generated in Python on insert
    - name: unique, at most 255 characters
    - description: optional free text
    - created_at / updated_at: UTC; updated_at refreshed on every UPDATE
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from api_base.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Example(Base):
    """A named example item."""

    __tablename__ = "examples"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Listing is newest-first
    __table_args__ = (
        Index("idx_examples_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Example(id={self.id}, name={self.name!r})>"
