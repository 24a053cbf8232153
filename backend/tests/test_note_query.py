"""
NoteKeeper Backend — Note Listing Query Tests
===============================================

What we test:
    ✅ Sort string parsing (direction, unknown fields, default)
    ✅ Label filter parsing and id validation
    ✅ Filters against a real database: archive, pin, labels (any), search (any term)
    ✅ Search wildcards are matched literally
    ✅ Listing never returns another user's notes
"""

import pytest

from notekeeper.exceptions import ValidationError
from notekeeper.schemas.label import LabelCreate
from notekeeper.schemas.note import NoteCreate, NoteListParams
from notekeeper.services.label_service import label_service
from notekeeper.services.note_query import parse_label_ids, parse_sort, search_clause
from notekeeper.services.note_service import note_service

USER_A = "user-a-0001"
USER_B = "user-b-0002"


class TestParseSort:

    def test_descending_and_ascending_fields(self):
        clauses = parse_sort("-isPinned,title")
        rendered = [str(c) for c in clauses]
        assert rendered[0] == "notes.is_pinned DESC"
        assert rendered[1] == "notes.title ASC"
        # tie-breaker
        assert rendered[-1] == "notes.id ASC"

    def test_empty_spec_uses_default(self):
        rendered = [str(c) for c in parse_sort("")]
        assert rendered[:2] == ["notes.is_pinned DESC", "notes.created_at DESC"]

    def test_order_maps_to_sort_order_column(self):
        assert str(parse_sort("order")[0]) == "notes.sort_order ASC"

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_sort("-ownerId")
        assert exc_info.value.field == "sortBy"


class TestParseLabelIds:

    def test_splits_and_lowercases(self):
        ids = parse_label_ids(" " + "A" * 24 + ", " + "b" * 24 + ",")
        assert ids == ["a" * 24, "b" * 24]

    def test_malformed_id_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_label_ids("not-an-id")


class TestSearchClause:

    def test_blank_search_has_no_clause(self):
        assert search_clause("   ") is None


class TestListingFilters:

    async def _note(self, db, owner, title, description="body", **fields):
        return await note_service.create_note(
            db, owner, NoteCreate(title=title, description=description, **fields)
        )

    @pytest.mark.asyncio
    async def test_archive_and_pin_filters(self, db_session):
        await self._note(db_session, USER_A, "plain")
        await self._note(db_session, USER_A, "pinned", is_pinned=True)
        await self._note(db_session, USER_A, "archived", is_archived=True)

        archived = await note_service.list_notes(db_session, USER_A, NoteListParams(is_archived=True))
        assert [n.title for n in archived] == ["archived"]

        pinned = await note_service.list_notes(db_session, USER_A, NoteListParams(is_pinned=True))
        assert [n.title for n in pinned] == ["pinned"]

    @pytest.mark.asyncio
    async def test_default_sort_puts_pinned_first(self, db_session):
        await self._note(db_session, USER_A, "first")
        await self._note(db_session, USER_A, "second", is_pinned=True)

        notes = await note_service.list_notes(db_session, USER_A, NoteListParams())
        assert notes[0].title == "second"

    @pytest.mark.asyncio
    async def test_label_filter_matches_any(self, db_session):
        work = await label_service.create_label(db_session, USER_A, LabelCreate(name="Work"))
        home = await label_service.create_label(db_session, USER_A, LabelCreate(name="Home"))
        misc = await label_service.create_label(db_session, USER_A, LabelCreate(name="Misc"))

        await self._note(db_session, USER_A, "w", labels=[work.id])
        await self._note(db_session, USER_A, "h", labels=[home.id])
        await self._note(db_session, USER_A, "m", labels=[misc.id])
        await self._note(db_session, USER_A, "none")

        params = NoteListParams(labels=f"{work.id},{home.id}", sort_by="order")
        notes = await note_service.list_notes(db_session, USER_A, params)
        assert [n.title for n in notes] == ["w", "h"]

    @pytest.mark.asyncio
    async def test_search_matches_any_term_in_title_or_description(self, db_session):
        await self._note(db_session, USER_A, "Groceries", "milk and eggs")
        await self._note(db_session, USER_A, "Hardware", "buy BREAD knife")
        await self._note(db_session, USER_A, "Unrelated", "nothing here")

        params = NoteListParams(search="bread groceries", sort_by="order")
        notes = await note_service.list_notes(db_session, USER_A, params)
        assert [n.title for n in notes] == ["Groceries", "Hardware"]

    @pytest.mark.asyncio
    async def test_search_wildcards_are_literal(self, db_session):
        await self._note(db_session, USER_A, "Discount", "50% off")
        await self._note(db_session, USER_A, "Other", "500 items")

        notes = await note_service.list_notes(db_session, USER_A, NoteListParams(search="0%"))
        assert [n.title for n in notes] == ["Discount"]

    @pytest.mark.asyncio
    async def test_listing_is_scoped_to_owner(self, db_session):
        await self._note(db_session, USER_A, "mine")
        await self._note(db_session, USER_B, "theirs")

        notes = await note_service.list_notes(db_session, USER_A, NoteListParams())
        assert [n.title for n in notes] == ["mine"]

    @pytest.mark.asyncio
    async def test_unknown_sort_field_is_validation_error(self, db_session):
        with pytest.raises(ValidationError):
            await note_service.list_notes(db_session, USER_A, NoteListParams(sort_by="owner"))
