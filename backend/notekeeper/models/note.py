"""
NoteKeeper Backend — Note SQLAlchemy Model
============================================

What:  ORM model for the `notes` table and the `note_labels` association.
Who:   Used by NoteService, ReorderService and LabelService.

Table Design:
    - sort_order: the manual, per-owner display order (exposed as `order`);
      named sort_order in SQL because ORDER is a reserved word
    - is_pinned / is_archived: never both true (enforced in the services)
    - note_labels: composite primary key gives set semantics to a note's
      labels; both foreign keys cascade on delete

Query Patterns:
    - Default listing: WHERE owner_id = ? ORDER BY is_pinned DESC, created_at DESC
      → idx_notes_owner_pinned_created
    - Archive views: WHERE owner_id = ? AND is_archived = ?
      → idx_notes_owner_archived
    - Reorder shifts: WHERE owner_id = ? AND sort_order BETWEEN ...
      → idx_notes_owner_order
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notekeeper.database import Base, generate_object_id
from notekeeper.models.label import Label

DEFAULT_NOTE_COLOR = "#ffffff"


note_labels = Table(
    "note_labels",
    Base.metadata,
    Column(
        "note_id",
        String(24),
        ForeignKey("notes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "label_id",
        String(24),
        ForeignKey("labels.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A personal note.

    Lifecycle:
        1. Created by its owner at the end of the owner's order sequence
        2. Mutated (content, pin, archive, labels, order) only by its owner
        3. Hard-deleted; association rows go with it, labels are untouched
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=generate_object_id,
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        default=DEFAULT_NOTE_COLOR,
    )

    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    order: Mapped[int] = mapped_column("sort_order", Integer, nullable=False, default=0)

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

    # selectin: async sessions cannot lazy-load on attribute access
    labels: Mapped[List[Label]] = relationship(
        Label,
        secondary=note_labels,
        lazy="selectin",
        order_by=Label.name,
    )

    __table_args__ = (
        Index("idx_notes_owner_pinned_created", "owner_id", "is_pinned", "created_at"),
        Index("idx_notes_owner_archived", "owner_id", "is_archived"),
        Index("idx_notes_owner_order", "owner_id", "sort_order"),
    )

    def touch(self) -> None:
        """Refresh updated_at; called by every mutating service operation."""
        self.updated_at = _utcnow()

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, owner_id='{self.owner_id}', order={self.order}, "
            f"pinned={self.is_pinned}, archived={self.is_archived})>"
        )
