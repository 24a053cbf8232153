"""
NoteKeeper Backend — Notes Route Handlers
===========================================

What:  /api/notes: list with filters, detail, create, update, delete,
       pin/archive toggles and manual reordering.
How:   Thin handlers: resolve the caller, validate input, delegate to the
       note/reorder services, wrap the result in the envelope.

Route order:
    PUT /notes/reorder is declared before PUT /notes/{note_id} so "reorder"
    is never captured as an id.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.database import get_db_session
from notekeeper.schemas.common import OBJECT_ID_PATTERN, EmptyData, Envelope, ErrorResponse
from notekeeper.schemas.note import (
    DEFAULT_NOTE_SORT,
    NoteCreate,
    NoteListParams,
    NoteResponse,
    NoteUpdate,
    ReorderRequest,
)
from notekeeper.security import get_current_user_id
from notekeeper.services.note_service import note_service
from notekeeper.services.reorder_service import reorder_service


router = APIRouter(prefix="/api/notes", tags=["Notes"])

NoteId = Annotated[str, Path(pattern=OBJECT_ID_PATTERN, description="24-hex note id")]

_errors = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing token or note of another user", "model": ErrorResponse},
    404: {"description": "Note not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=Envelope[List[NoteResponse]],
    response_model_exclude_none=True,
    responses={400: _errors[400], 401: _errors[401]},
    summary="List the caller's notes",
)
async def list_notes(
    is_archived: Optional[bool] = Query(default=None, alias="isArchived"),
    is_pinned: Optional[bool] = Query(default=None, alias="isPinned"),
    labels: Optional[str] = Query(default=None, description="Comma-separated label ids (any match)"),
    search: Optional[str] = Query(default=None, description="Terms matched in title or description"),
    sort_by: str = Query(default=DEFAULT_NOTE_SORT, alias="sortBy"),
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    """
    Example:
        GET /api/notes?isArchived=false&labels=65a...,65b...&search=milk&sortBy=order
    """
    params = NoteListParams(
        is_archived=is_archived,
        is_pinned=is_pinned,
        labels=labels,
        search=search,
        sort_by=sort_by,
    )
    notes = await note_service.list_notes(db, owner_id, params)
    return Envelope(data=notes, count=len(notes))


@router.put(
    "/reorder",
    response_model=Envelope[NoteResponse],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Move a note to a new position",
)
async def reorder_note(
    payload: ReorderRequest,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    note = await reorder_service.reorder(db, payload.note_id, owner_id, payload.new_order)
    return Envelope(data=note)


@router.get(
    "/{note_id}",
    response_model=Envelope[NoteResponse],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Get a single note",
)
async def get_note(
    note_id: NoteId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    note = await note_service.get_note(db, note_id.lower(), owner_id)
    return Envelope(data=note)


@router.post(
    "",
    status_code=201,
    response_model=Envelope[NoteResponse],
    response_model_exclude_none=True,
    responses={400: _errors[400], 401: _errors[401]},
    summary="Create a note",
)
async def create_note(
    payload: NoteCreate,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    note = await note_service.create_note(db, owner_id, payload)
    return Envelope(data=note)


@router.put(
    "/{note_id}",
    response_model=Envelope[NoteResponse],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Update a note",
)
async def update_note(
    payload: NoteUpdate,
    note_id: NoteId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    note = await note_service.update_note(db, note_id.lower(), owner_id, payload)
    return Envelope(data=note)


@router.delete(
    "/{note_id}",
    response_model=Envelope[EmptyData],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Delete a note",
)
async def delete_note(
    note_id: NoteId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    await note_service.delete_note(db, note_id.lower(), owner_id)
    return Envelope(data=EmptyData())


@router.put(
    "/{note_id}/pin",
    response_model=Envelope[NoteResponse],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Toggle the pinned flag",
)
async def toggle_pin(
    note_id: NoteId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    note = await note_service.toggle_pin(db, note_id.lower(), owner_id)
    return Envelope(data=note)


@router.put(
    "/{note_id}/archive",
    response_model=Envelope[NoteResponse],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Toggle the archived flag (archiving unpins)",
)
async def toggle_archive(
    note_id: NoteId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    note = await note_service.toggle_archive(db, note_id.lower(), owner_id)
    return Envelope(data=note)
