"""
NoteKeeper Backend — Label SQLAlchemy Model
=============================================

What:  ORM model for the `labels` table.
Who:   Used by LabelService (CRUD, linkage) and NoteService (label validation).

Table Design:
    - id: 24-hex string generated by the service (see database.generate_object_id)
    - owner_id: external user id; every query is scoped by it
    - (owner_id, name) unique: no two labels with the same name per owner
    - note_count is NOT a column; it is computed per request
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from notekeeper.database import Base, generate_object_id

DEFAULT_LABEL_COLOR = "#808080"


class Label(Base):
    """A user-defined tag that can be attached to any of the owner's notes."""

    __tablename__ = "labels"

    id: Mapped[str] = mapped_column(
        String(24),
        primary_key=True,
        default=generate_object_id,
    )

    name: Mapped[str] = mapped_column(String(30), nullable=False)

    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        default=DEFAULT_LABEL_COLOR,
        comment="Hex color, #RGB or #RRGGBB",
    )

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_labels_owner_name"),
    )

    def __repr__(self) -> str:
        return f"<Label(id={self.id}, name='{self.name}', owner_id='{self.owner_id}')>"
