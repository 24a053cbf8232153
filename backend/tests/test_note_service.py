"""
NoteKeeper Backend — Note Service Unit Tests
===============================================

What:  Tests for NoteService business logic against an in-memory database.

What we test:
    ✅ Create appends to the owner's order sequence and applies defaults
    ✅ Labels must belong to the caller; nothing is written otherwise
    ✅ Update applies only present fields; labels replace the whole set
    ✅ Archiving always unpins, un-archiving does not restore the pin
    ✅ Guard order: missing → NotFound, foreign → Unauthorized
    ✅ Store failures surface as DatabaseError
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from notekeeper.exceptions import (
    DatabaseError,
    InvalidLabelsError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from notekeeper.models import Note
from notekeeper.models.note import DEFAULT_NOTE_COLOR
from notekeeper.schemas.label import LabelCreate
from notekeeper.schemas.note import NoteCreate, NoteListParams, NoteUpdate
from notekeeper.services.label_service import label_service
from notekeeper.services.note_service import NoteService

USER_A = "user-a-0001"
USER_B = "user-b-0002"


def _payload(title="Groceries", **fields):
    return NoteCreate(title=title, description="milk, eggs", **fields)


class TestNoteServiceCreate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_create_applies_defaults_and_order(self, db_session):
        first = await self.service.create_note(db_session, USER_A, _payload("one"))
        second = await self.service.create_note(db_session, USER_A, _payload("two"))
        other = await self.service.create_note(db_session, USER_B, _payload("theirs"))

        assert (first.order, second.order, other.order) == (0, 1, 0)
        assert first.color == DEFAULT_NOTE_COLOR
        assert first.is_pinned is False and first.is_archived is False
        assert first.labels == []
        assert len(first.id) == 24

    @pytest.mark.asyncio
    async def test_create_trims_title(self, db_session):
        note = await self.service.create_note(db_session, USER_A, _payload("  padded  "))
        assert note.title == "padded"

    @pytest.mark.asyncio
    async def test_create_archived_is_never_pinned(self, db_session):
        note = await self.service.create_note(
            db_session, USER_A, _payload(is_pinned=True, is_archived=True)
        )
        assert note.is_archived is True
        assert note.is_pinned is False

    @pytest.mark.asyncio
    async def test_create_resolves_labels_sorted_by_name(self, db_session):
        work = await label_service.create_label(db_session, USER_A, LabelCreate(name="Work", color="#ff0000"))
        home = await label_service.create_label(db_session, USER_A, LabelCreate(name="Home"))

        note = await self.service.create_note(
            db_session, USER_A, _payload(labels=[work.id, home.id, work.id])
        )
        assert [(label.name, label.color) for label in note.labels] == [
            ("Home", "#808080"),
            ("Work", "#ff0000"),
        ]

    @pytest.mark.asyncio
    async def test_create_with_foreign_label_writes_nothing(self, db_session):
        theirs = await label_service.create_label(db_session, USER_B, LabelCreate(name="Work"))

        with pytest.raises(InvalidLabelsError) as exc_info:
            await self.service.create_note(db_session, USER_A, _payload(labels=[theirs.id]))
        assert exc_info.value.message == "Invalid labels"

        count = await db_session.execute(select(func.count()).select_from(Note))
        assert count.scalar() == 0


class TestNoteServiceUpdate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, db_session):
        note = await self.service.create_note(db_session, USER_A, _payload(color="#abcdef"))

        updated = await self.service.update_note(
            db_session, note.id, USER_A, NoteUpdate(title="Renamed")
        )
        assert updated.title == "Renamed"
        assert updated.description == "milk, eggs"
        assert updated.color == "#abcdef"

    @pytest.mark.asyncio
    async def test_labels_replace_whole_set(self, db_session):
        work = await label_service.create_label(db_session, USER_A, LabelCreate(name="Work"))
        home = await label_service.create_label(db_session, USER_A, LabelCreate(name="Home"))
        note = await self.service.create_note(db_session, USER_A, _payload(labels=[work.id]))

        updated = await self.service.update_note(
            db_session, note.id, USER_A, NoteUpdate(labels=[home.id])
        )
        assert [label.id for label in updated.labels] == [home.id]

        cleared = await self.service.update_note(db_session, note.id, USER_A, NoteUpdate(labels=[]))
        assert cleared.labels == []

    @pytest.mark.asyncio
    async def test_update_with_foreign_label_is_rejected(self, db_session):
        theirs = await label_service.create_label(db_session, USER_B, LabelCreate(name="Work"))
        note = await self.service.create_note(db_session, USER_A, _payload())

        with pytest.raises(InvalidLabelsError):
            await self.service.update_note(db_session, note.id, USER_A, NoteUpdate(labels=[theirs.id]))

    @pytest.mark.asyncio
    async def test_update_to_archived_unpins(self, db_session):
        note = await self.service.create_note(db_session, USER_A, _payload(is_pinned=True))
        updated = await self.service.update_note(
            db_session, note.id, USER_A, NoteUpdate(is_archived=True)
        )
        assert (updated.is_archived, updated.is_pinned) == (True, False)

    @pytest.mark.asyncio
    async def test_update_foreign_note_is_unauthorized(self, db_session):
        theirs = await self.service.create_note(db_session, USER_B, _payload())
        with pytest.raises(UnauthorizedError):
            await self.service.update_note(db_session, theirs.id, USER_A, NoteUpdate(title="x"))


class TestNoteServiceToggles:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_archive_unpins_and_unarchive_keeps_unpinned(self, db_session):
        note = await self.service.create_note(db_session, USER_A, _payload(is_pinned=True))

        archived = await self.service.toggle_archive(db_session, note.id, USER_A)
        assert (archived.is_archived, archived.is_pinned) == (True, False)

        restored = await self.service.toggle_archive(db_session, note.id, USER_A)
        assert (restored.is_archived, restored.is_pinned) == (False, False)

    @pytest.mark.asyncio
    async def test_pin_toggles(self, db_session):
        note = await self.service.create_note(db_session, USER_A, _payload())
        pinned = await self.service.toggle_pin(db_session, note.id, USER_A)
        unpinned = await self.service.toggle_pin(db_session, note.id, USER_A)
        assert (pinned.is_pinned, unpinned.is_pinned) == (True, False)

    @pytest.mark.asyncio
    async def test_pin_on_archived_note_is_rejected(self, db_session):
        note = await self.service.create_note(db_session, USER_A, _payload())
        await self.service.toggle_archive(db_session, note.id, USER_A)

        with pytest.raises(ValidationError) as exc_info:
            await self.service.toggle_pin(db_session, note.id, USER_A)
        assert exc_info.value.field == "isPinned"

        renamed = await self.service.update_note(db_session, note.id, USER_A, NoteUpdate(title="Renamed"))
        assert (renamed.is_archived, renamed.is_pinned) == (True, False)


class TestNoteServiceGetDelete:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_get_note_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_note(db_session, "0" * 24, USER_A)

    @pytest.mark.asyncio
    async def test_get_foreign_note_is_unauthorized(self, db_session):
        theirs = await self.service.create_note(db_session, USER_B, _payload())
        with pytest.raises(UnauthorizedError):
            await self.service.get_note(db_session, theirs.id, USER_A)

    @pytest.mark.asyncio
    async def test_delete_keeps_labels(self, db_session):
        work = await label_service.create_label(db_session, USER_A, LabelCreate(name="Work"))
        note = await self.service.create_note(db_session, USER_A, _payload(labels=[work.id]))

        await self.service.delete_note(db_session, note.id, USER_A)

        assert await self.service.list_notes(db_session, USER_A, NoteListParams()) == []
        labels = await label_service.list_labels(db_session, USER_A)
        assert [(label.name, label.note_count) for label in labels] == [("Work", 0)]

    @pytest.mark.asyncio
    async def test_list_store_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection lost")
        with pytest.raises(DatabaseError):
            await self.service.list_notes(mock_db_session, USER_A, NoteListParams())
