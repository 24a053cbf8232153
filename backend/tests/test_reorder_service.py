"""
NoteKeeper Backend — Reorder Service Unit Tests
=================================================

What we test:
    ✅ Moving down and up shifts the notes in between by one
    ✅ Same position is a no-op
    ✅ The multiset of order values is preserved
    ✅ Other users' notes never move
    ✅ Guard: unknown note → NotFound, foreign note → Unauthorized
"""

import pytest
from sqlalchemy import select

from notekeeper.exceptions import NotFoundError, UnauthorizedError
from notekeeper.models import Note
from notekeeper.schemas.note import NoteCreate
from notekeeper.services.note_service import note_service
from notekeeper.services.reorder_service import ReorderService

USER_A = "user-a-0001"
USER_B = "user-b-0002"


async def _orders(db, owner):
    """{title: order} for the owner's notes, read from the database."""
    result = await db.execute(select(Note.title, Note.order).where(Note.owner_id == owner))
    return dict(result.all())


class TestReorderService:

    def setup_method(self):
        self.service = ReorderService()

    async def _seed(self, db, owner, titles):
        notes = {}
        for title in titles:
            notes[title] = await note_service.create_note(
                db, owner, NoteCreate(title=title, description="body")
            )
        return notes

    @pytest.mark.asyncio
    async def test_move_down_shifts_intervening_up(self, db_session):
        notes = await self._seed(db_session, USER_A, ["N1", "N2", "N3"])

        moved = await self.service.reorder(db_session, notes["N1"].id, USER_A, 2)

        assert moved.order == 2
        assert await _orders(db_session, USER_A) == {"N1": 2, "N2": 0, "N3": 1}

    @pytest.mark.asyncio
    async def test_move_up_shifts_intervening_down(self, db_session):
        notes = await self._seed(db_session, USER_A, ["N1", "N2", "N3"])

        await self.service.reorder(db_session, notes["N3"].id, USER_A, 0)

        assert await _orders(db_session, USER_A) == {"N1": 1, "N2": 2, "N3": 0}

    @pytest.mark.asyncio
    async def test_same_position_changes_nothing(self, db_session):
        notes = await self._seed(db_session, USER_A, ["N1", "N2", "N3"])

        await self.service.reorder(db_session, notes["N2"].id, USER_A, 1)

        assert await _orders(db_session, USER_A) == {"N1": 0, "N2": 1, "N3": 2}

    @pytest.mark.asyncio
    async def test_move_past_the_end_lands_last(self, db_session):
        notes = await self._seed(db_session, USER_A, ["N1", "N2", "N3"])

        moved = await self.service.reorder(db_session, notes["N1"].id, USER_A, 10)

        assert moved.order == 2
        assert await _orders(db_session, USER_A) == {"N1": 2, "N2": 0, "N3": 1}

    @pytest.mark.asyncio
    async def test_order_values_stay_a_permutation(self, db_session):
        notes = await self._seed(db_session, USER_A, ["A", "B", "C", "D", "E"])
        before = sorted((await _orders(db_session, USER_A)).values())

        await self.service.reorder(db_session, notes["B"].id, USER_A, 4)
        await self.service.reorder(db_session, notes["E"].id, USER_A, 0)
        await self.service.reorder(db_session, notes["C"].id, USER_A, 2)

        after = sorted((await _orders(db_session, USER_A)).values())
        assert before == after

    @pytest.mark.asyncio
    async def test_other_owner_notes_do_not_move(self, db_session):
        notes = await self._seed(db_session, USER_A, ["N1", "N2"])
        await self._seed(db_session, USER_B, ["X1", "X2"])

        await self.service.reorder(db_session, notes["N2"].id, USER_A, 0)

        assert await _orders(db_session, USER_B) == {"X1": 0, "X2": 1}

    @pytest.mark.asyncio
    async def test_unknown_note_is_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.reorder(db_session, "0" * 24, USER_A, 0)

    @pytest.mark.asyncio
    async def test_foreign_note_is_unauthorized(self, db_session):
        theirs = await self._seed(db_session, USER_B, ["X1"])
        with pytest.raises(UnauthorizedError):
            await self.service.reorder(db_session, theirs["X1"].id, USER_A, 0)
