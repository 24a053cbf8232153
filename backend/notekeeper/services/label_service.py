"""
NoteKeeper Backend — Label Service (Business Logic)
=====================================================

What:  Label CRUD with per-owner name uniqueness, live note counts, cascade
       unlink on delete, and bulk attach/detach of a label across notes.
Who:   Called by the /api/labels route handlers.

Rules enforced here:
    - (owner, name) is unique: checked before writing, and a unique
      constraint violation raised by the store is reported the same way
    - note_count is computed per request from note_labels, never stored
    - Deleting a label removes it from every note of the owner first
    - Bulk attach/detach only touches the caller's notes; others are skipped
      silently and only notes that actually changed are counted
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.exceptions import ConflictError, DatabaseError, NoteKeeperError
from notekeeper.models import Label, Note, note_labels
from notekeeper.models.label import DEFAULT_LABEL_COLOR
from notekeeper.schemas.common import ModifiedCount
from notekeeper.schemas.label import LabelCreate, LabelDetail, LabelResponse, LabelUpdate
from notekeeper.schemas.note import DEFAULT_NOTE_SORT
from notekeeper.services.note_query import parse_sort
from notekeeper.services.note_service import note_to_response
from notekeeper.services.ownership import get_owned

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "Label with this name already exists"


def _note_count_subquery(owner_id: str):
    """Correlated COUNT of the owner's notes carrying the enclosing Label."""
    return (
        select(func.count())
        .select_from(note_labels.join(Note, Note.id == note_labels.c.note_id))
        .where(note_labels.c.label_id == Label.id, Note.owner_id == owner_id)
        .correlate(Label)
        .scalar_subquery()
    )


def label_to_response(label: Label, note_count: int = 0) -> LabelResponse:
    return LabelResponse(
        id=label.id,
        name=label.name,
        color=label.color,
        created_at=label.created_at,
        note_count=note_count,
    )


class LabelService:
    """
    Business logic layer for labels.

    Error Handling Strategy:
        Same as NoteService: application errors propagate, SQLAlchemy errors
        are wrapped in DatabaseError. IntegrityError on the (owner, name)
        constraint becomes ConflictError.
    """

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _count_notes(self, db: AsyncSession, label_id: str, owner_id: str) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(note_labels.join(Note, Note.id == note_labels.c.note_id))
            .where(note_labels.c.label_id == label_id, Note.owner_id == owner_id)
        )
        return result.scalar() or 0

    async def _ensure_name_free(
        self,
        db: AsyncSession,
        owner_id: str,
        name: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        query = select(Label.id).where(Label.owner_id == owner_id, Label.name == name)
        if exclude_id:
            query = query.where(Label.id != exclude_id)
        result = await db.execute(query.limit(1))
        if result.scalar_one_or_none() is not None:
            logger.warning("Duplicate label name %r for owner %s", name, owner_id)
            raise ConflictError(DUPLICATE_NAME_MESSAGE, context={"name": name})

    async def _flush_label(self, db: AsyncSession, name: str) -> None:
        """Flush, reporting a lost uniqueness race as a conflict."""
        try:
            await db.flush()
        except IntegrityError:
            logger.warning("Unique constraint rejected label name %r", name)
            raise ConflictError(DUPLICATE_NAME_MESSAGE, context={"name": name})

    def _wrap(self, action: str, label_id: Optional[str], e: SQLAlchemyError) -> DatabaseError:
        logger.error("Database error during label %s (%s): %s", action, label_id, str(e), exc_info=True)
        return DatabaseError(
            message=f"Could not {action} the label. Please try again.",
            context={"label_id": label_id, "error_type": type(e).__name__},
        )

    # ── Label Store ───────────────────────────────────────────────────────

    async def list_labels(self, db: AsyncSession, owner_id: str) -> List[LabelResponse]:
        """All labels of the owner by name, each with its live note count."""
        count_column = _note_count_subquery(owner_id).label("note_count")
        try:
            result = await db.execute(
                select(Label, count_column)
                .where(Label.owner_id == owner_id)
                .order_by(Label.name.asc())
            )
            rows = result.all()
        except SQLAlchemyError as e:
            raise self._wrap("list", None, e)
        return [label_to_response(label, count or 0) for label, count in rows]

    async def get_label(self, db: AsyncSession, label_id: str, owner_id: str) -> LabelDetail:
        """The label plus every note of the owner that carries it."""
        try:
            label = await get_owned(db, Label, label_id, owner_id, "label")
            result = await db.execute(
                select(Note)
                .where(Note.owner_id == owner_id, Note.labels.any(Label.id == label.id))
                .order_by(*parse_sort(DEFAULT_NOTE_SORT))
            )
            notes = [note_to_response(note) for note in result.scalars().all()]
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            raise self._wrap("load", label_id, e)

        return LabelDetail(
            label=label_to_response(label, len(notes)),
            notes=notes,
            note_count=len(notes),
        )

    async def create_label(
        self,
        db: AsyncSession,
        owner_id: str,
        payload: LabelCreate,
    ) -> LabelResponse:
        """Create a label; ConflictError if the owner already has that name."""
        try:
            await self._ensure_name_free(db, owner_id, payload.name)
            label = Label(
                name=payload.name,
                color=payload.color or DEFAULT_LABEL_COLOR,
                owner_id=owner_id,
            )
            db.add(label)
            await self._flush_label(db, payload.name)
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            raise self._wrap("create", None, e)

        logger.info("Label %s (%r) created for owner %s", label.id, label.name, owner_id)
        return label_to_response(label, 0)

    async def update_label(
        self,
        db: AsyncSession,
        label_id: str,
        owner_id: str,
        payload: LabelUpdate,
    ) -> LabelResponse:
        """Rename and/or recolor; a new name is re-checked for uniqueness."""
        try:
            label = await get_owned(db, Label, label_id, owner_id, "label", action="update")

            if payload.name is not None and payload.name != label.name:
                await self._ensure_name_free(db, owner_id, payload.name, exclude_id=label.id)
                label.name = payload.name
            if payload.color is not None:
                label.color = payload.color

            await self._flush_label(db, label.name)
            note_count = await self._count_notes(db, label.id, owner_id)
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            raise self._wrap("update", label_id, e)

        logger.info("Label %s updated", label_id)
        return label_to_response(label, note_count)

    async def delete_label(self, db: AsyncSession, label_id: str, owner_id: str) -> None:
        """
        Delete a label after unlinking it from every note of the owner.

        Unlinked notes get a fresh updated_at. Any association row left over
        afterwards is removed with the label so no note references it.
        """
        try:
            label = await get_owned(db, Label, label_id, owner_id, "label", action="delete")

            result = await db.execute(
                select(Note).where(Note.owner_id == owner_id, Note.labels.any(Label.id == label.id))
            )
            notes = result.scalars().all()
            for note in notes:
                note.labels.remove(label)
                note.touch()
            await db.flush()

            await db.execute(delete(note_labels).where(note_labels.c.label_id == label.id))
            await db.delete(label)
            await db.flush()
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            raise self._wrap("delete", label_id, e)

        logger.info("Label %s deleted; unlinked from %d notes", label_id, len(notes))

    # ── Label-Note Linkage ────────────────────────────────────────────────

    async def add_label_to_notes(
        self,
        db: AsyncSession,
        label_id: str,
        owner_id: str,
        note_ids: Sequence[str],
    ) -> ModifiedCount:
        """
        Attach the label to each listed note of the owner that lacks it.

        Notes of other users, unknown ids and notes already carrying the
        label are skipped without error.
        """
        wanted = list(dict.fromkeys(note_ids))
        try:
            label = await get_owned(db, Label, label_id, owner_id, "label", action="use")
            result = await db.execute(
                select(Note).where(
                    Note.id.in_(wanted),
                    Note.owner_id == owner_id,
                    ~Note.labels.any(Label.id == label.id),
                )
            )
            notes = result.scalars().all()
            for note in notes:
                note.labels.append(label)
                note.touch()
            await db.flush()
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            raise self._wrap("attach", label_id, e)

        logger.info("Label %s attached to %d of %d notes", label_id, len(notes), len(wanted))
        return ModifiedCount(modified_count=len(notes))

    async def remove_label_from_notes(
        self,
        db: AsyncSession,
        label_id: str,
        owner_id: str,
        note_ids: Sequence[str],
    ) -> ModifiedCount:
        """Detach the label from each listed note of the owner that has it."""
        wanted = list(dict.fromkeys(note_ids))
        try:
            label = await get_owned(db, Label, label_id, owner_id, "label", action="use")
            result = await db.execute(
                select(Note).where(
                    Note.id.in_(wanted),
                    Note.owner_id == owner_id,
                    Note.labels.any(Label.id == label.id),
                )
            )
            notes = result.scalars().all()
            for note in notes:
                note.labels.remove(label)
                note.touch()
            await db.flush()
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            raise self._wrap("detach", label_id, e)

        logger.info("Label %s detached from %d of %d notes", label_id, len(notes), len(wanted))
        return ModifiedCount(modified_count=len(notes))


# ── Singleton Instance ────────────────────────────────────────────────────
label_service = LabelService()
