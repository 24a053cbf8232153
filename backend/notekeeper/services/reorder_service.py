"""
NoteKeeper Backend — Reorder Service
======================================

What:  Moves one note to a new position in its owner's manual order and
       shifts the notes in between by one slot.
How:   One bulk UPDATE for the intervening notes plus one UPDATE for the
       moved note, inside the request's transaction.

Moving N1 from 0 to 2 in [N1=0, N2=1, N3=2]:
    old < new → notes with 0 < order <= 2 move up one slot (order - 1)
              → N2=0, N3=1, then N1=2

Moving N3 from 2 to 0 in [N1=0, N2=1, N3=2]:
    new < old → notes with 0 <= order < 2 move down one slot (order + 1)
              → N1=1, N2=2, then N3=0

The set of order values held by the owner's notes is the same before and
after the call, so a dense sequence stays dense.

Concurrency:
    Before reading the old position, every note row of the owner is locked
    with SELECT ... FOR UPDATE. Two concurrent reorders for the same owner
    therefore run one after the other on PostgreSQL. SQLite ignores the
    clause and relies on its single-writer lock instead.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.exceptions import DatabaseError, NoteKeeperError
from notekeeper.models import Note
from notekeeper.schemas.note import NoteResponse
from notekeeper.services.note_service import note_to_response
from notekeeper.services.ownership import get_owned

logger = logging.getLogger(__name__)


class ReorderService:
    """Maintains the per-owner `order` sequence of notes."""

    async def _lock_owner_notes(self, db: AsyncSession, owner_id: str) -> None:
        await db.execute(
            select(Note.id).where(Note.owner_id == owner_id).with_for_update()
        )

    async def reorder(
        self,
        db: AsyncSession,
        note_id: str,
        owner_id: str,
        new_order: int,
    ) -> NoteResponse:
        """
        Move `note_id` to `new_order`.

        Raises:
            NotFoundError: no such note
            UnauthorizedError: note belongs to another user
            DatabaseError: store failure (the whole move is rolled back)
        """
        try:
            note = await get_owned(db, Note, note_id, owner_id, "note", action="update")
            await self._lock_owner_notes(db, owner_id)

            # Re-read under the lock; another request may have shifted it
            await db.refresh(note, attribute_names=["order"])
            old_order = note.order

            # Past the end means "last"; the set of order values must not change
            result = await db.execute(
                select(func.max(Note.order)).where(Note.owner_id == owner_id)
            )
            highest = result.scalar() or 0
            if new_order > highest:
                new_order = highest
            now = datetime.now(timezone.utc)

            shift = None
            if new_order > old_order:
                shift = (
                    update(Note)
                    .where(
                        Note.owner_id == owner_id,
                        Note.id != note.id,
                        Note.order > old_order,
                        Note.order <= new_order,
                    )
                    .values({Note.order: Note.order - 1, Note.updated_at: now})
                )
            elif new_order < old_order:
                shift = (
                    update(Note)
                    .where(
                        Note.owner_id == owner_id,
                        Note.id != note.id,
                        Note.order >= new_order,
                        Note.order < old_order,
                    )
                    .values({Note.order: Note.order + 1, Note.updated_at: now})
                )

            shifted = 0
            if shift is not None:
                result = await db.execute(
                    shift.execution_options(synchronize_session="fetch")
                )
                shifted = result.rowcount

            note.order = new_order
            note.updated_at = now
            await db.flush()

            logger.info(
                "Note %s moved %d → %d for owner %s (%d shifted)",
                note_id, old_order, new_order, owner_id, shifted,
            )
            return note_to_response(note)

        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error reordering note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not reorder the note. Please try again.",
                context={"note_id": note_id, "new_order": new_order},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
reorder_service = ReorderService()
