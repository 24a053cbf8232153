"""
NoteKeeper Backend — Note Service (Business Logic)
====================================================

What:  Note CRUD, pin/archive toggles and filtered listing.
How:   Every single-note operation goes through the ownership guard first;
       label references are validated against the caller's labels before
       anything is written.
Who:   Called by the /api/notes route handlers.

Rules enforced here:
    - A note's labels must all belong to the note's owner (InvalidLabelsError)
    - A note is never both archived and pinned
    - New notes go to the end of the owner's order sequence
    - updated_at is refreshed on every mutation

Design Decision:
    NoteService is stateless; the session and the caller's id are passed to
    every call. Services only flush; the request's session dependency commits.
"""

import logging
from datetime import datetime, timezone
from typing import List, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.exceptions import DatabaseError, InvalidLabelsError, NoteKeeperError, ValidationError
from notekeeper.models import Label, Note
from notekeeper.models.note import DEFAULT_NOTE_COLOR
from notekeeper.schemas.note import NoteCreate, NoteListParams, NoteResponse, NoteUpdate
from notekeeper.services.note_query import build_note_query
from notekeeper.services.ownership import get_owned

logger = logging.getLogger(__name__)


def note_to_response(note: Note) -> NoteResponse:
    """Serialize a note with its labels resolved to {id, name, color}, by name."""
    response = NoteResponse.model_validate(note)
    response.labels.sort(key=lambda label: label.name)
    return response


def enforce_archive_unpins(note: Note) -> None:
    """An archived note is never pinned."""
    if note.is_archived:
        note.is_pinned = False


async def resolve_owned_labels(
    db: AsyncSession,
    owner_id: str,
    label_ids: Sequence[str],
) -> List[Label]:
    """
    Load the labels referenced by a note request.

    Duplicate ids collapse (labels are a set). Every remaining id must match a
    label of `owner_id`; ids of other users' labels are treated exactly like
    ids that do not exist.

    Raises:
        InvalidLabelsError: at least one id did not resolve
    """
    wanted = list(dict.fromkeys(label_ids))
    if not wanted:
        return []

    result = await db.execute(
        select(Label).where(Label.id.in_(wanted), Label.owner_id == owner_id)
    )
    labels = list(result.scalars().all())

    if len(labels) != len(wanted):
        found = {label.id for label in labels}
        missing = [label_id for label_id in wanted if label_id not in found]
        logger.warning("Rejected labels %s for owner %s", missing, owner_id)
        raise InvalidLabelsError(missing)

    return labels


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        Application errors (NotFound, Unauthorized, InvalidLabels, Validation)
        propagate unchanged. SQLAlchemy failures are logged and wrapped in
        DatabaseError so no SQL detail reaches the client.
    """

    async def list_notes(
        self,
        db: AsyncSession,
        owner_id: str,
        params: NoteListParams,
    ) -> List[NoteResponse]:
        """
        List the caller's notes matching `params`.

        See services/note_query.py for the filter and sort semantics.
        """
        query = build_note_query(owner_id, params)
        try:
            result = await db.execute(query)
            notes = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [note_to_response(note) for note in notes]

    async def get_note(self, db: AsyncSession, note_id: str, owner_id: str) -> NoteResponse:
        """Retrieve a single note; guard applies."""
        try:
            note = await get_owned(db, Note, note_id, owner_id, "note")
            return note_to_response(note)
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )

    async def create_note(
        self,
        db: AsyncSession,
        owner_id: str,
        payload: NoteCreate,
    ) -> NoteResponse:
        """
        Create a note at the end of the owner's order sequence.

        Workflow Steps:
            1. Resolve labels (InvalidLabelsError → nothing written)
            2. order = max(order) + 1, or 0 for the owner's first note
            3. Insert with both timestamps set to now
        """
        try:
            labels = await resolve_owned_labels(db, owner_id, payload.labels)

            result = await db.execute(
                select(func.max(Note.order)).where(Note.owner_id == owner_id)
            )
            highest = result.scalar()
            next_order = 0 if highest is None else highest + 1

            now = datetime.now(timezone.utc)
            note = Note(
                title=payload.title,
                description=payload.description,
                color=payload.color or DEFAULT_NOTE_COLOR,
                is_pinned=payload.is_pinned,
                is_archived=payload.is_archived,
                owner_id=owner_id,
                order=next_order,
                labels=labels,
                created_at=now,
                updated_at=now,
            )
            enforce_archive_unpins(note)

            db.add(note)
            await db.flush()
            logger.info("Note %s created for owner %s (order=%d)", note.id, owner_id, note.order)
            return note_to_response(note)

        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the note. Please try again.",
                context={"owner_id": owner_id},
            )

    async def update_note(
        self,
        db: AsyncSession,
        note_id: str,
        owner_id: str,
        payload: NoteUpdate,
    ) -> NoteResponse:
        """
        Apply the fields present in `payload`.

        `labels`, when present, replaces the whole set after the same
        ownership validation as create.
        """
        try:
            note = await get_owned(db, Note, note_id, owner_id, "note", action="update")

            changes = payload.model_dump(exclude_unset=True, exclude_none=True)
            if "labels" in changes:
                note.labels = await resolve_owned_labels(db, owner_id, changes.pop("labels"))

            for field, value in changes.items():
                setattr(note, field, value)

            enforce_archive_unpins(note)
            note.touch()
            await db.flush()
            logger.info("Note %s updated (%s)", note_id, ", ".join(sorted(payload.model_fields_set)))
            return note_to_response(note)

        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the note. Please try again.",
                context={"note_id": note_id},
            )

    async def delete_note(self, db: AsyncSession, note_id: str, owner_id: str) -> None:
        """Hard delete; the note's label links go with it, labels stay."""
        try:
            note = await get_owned(db, Note, note_id, owner_id, "note", action="delete")
            await db.delete(note)
            await db.flush()
            logger.info("Note %s deleted by owner %s", note_id, owner_id)
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not delete the note. Please try again.",
                context={"note_id": note_id},
            )

    async def toggle_pin(self, db: AsyncSession, note_id: str, owner_id: str) -> NoteResponse:
        """
        Flip is_pinned. Archive state is left alone.

        Raises:
            ValidationError: pinning an archived note (unpinning is allowed)
        """
        try:
            note = await get_owned(db, Note, note_id, owner_id, "note", action="update")
            if note.is_archived and not note.is_pinned:
                logger.warning("Rejected pin of archived note %s", note_id)
                raise ValidationError(
                    message="Archived notes cannot be pinned",
                    field="isPinned",
                    context={"note_id": note_id},
                )
            note.is_pinned = not note.is_pinned
            note.touch()
            await db.flush()
            logger.info("Note %s pin toggled → %s", note_id, note.is_pinned)
            return note_to_response(note)
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error toggling pin on %s: %s", note_id, str(e))
            raise DatabaseError(context={"note_id": note_id})

    async def toggle_archive(self, db: AsyncSession, note_id: str, owner_id: str) -> NoteResponse:
        """
        Flip is_archived. Archiving always unpins; un-archiving does not
        restore a previous pin.
        """
        try:
            note = await get_owned(db, Note, note_id, owner_id, "note", action="update")
            note.is_archived = not note.is_archived
            enforce_archive_unpins(note)
            note.touch()
            await db.flush()
            logger.info("Note %s archive toggled → %s", note_id, note.is_archived)
            return note_to_response(note)
        except NoteKeeperError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error toggling archive on %s: %s", note_id, str(e))
            raise DatabaseError(context={"note_id": note_id})


# ── Singleton Instance ────────────────────────────────────────────────────
note_service = NoteService()
