"""
NoteKeeper Backend — Labels Route Handlers
============================================

What:  /api/labels: label CRUD plus bulk attach/detach of a label across
       several notes.
Who:   Called by the frontend sidebar (label list, counts) and the
       multi-select toolbar (bulk labeling).
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.database import get_db_session
from notekeeper.schemas.common import (
    OBJECT_ID_PATTERN,
    EmptyData,
    Envelope,
    ErrorResponse,
    ModifiedCount,
)
from notekeeper.schemas.label import (
    LabelCreate,
    LabelDetail,
    LabelNotesRequest,
    LabelResponse,
    LabelUpdate,
)
from notekeeper.security import get_current_user_id
from notekeeper.services.label_service import label_service


router = APIRouter(prefix="/api/labels", tags=["Labels"])

LabelId = Annotated[str, Path(pattern=OBJECT_ID_PATTERN, description="24-hex label id")]

_errors = {
    400: {"description": "Invalid input or duplicate name", "model": ErrorResponse},
    401: {"description": "Missing token or label of another user", "model": ErrorResponse},
    404: {"description": "Label not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=Envelope[List[LabelResponse]],
    response_model_exclude_none=True,
    responses={401: _errors[401]},
    summary="List the caller's labels with note counts",
)
async def list_labels(
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    labels = await label_service.list_labels(db, owner_id)
    return Envelope(data=labels, count=len(labels))


@router.get(
    "/{label_id}",
    response_model=Envelope[LabelDetail],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Get a label and the notes carrying it",
)
async def get_label(
    label_id: LabelId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    detail = await label_service.get_label(db, label_id.lower(), owner_id)
    return Envelope(data=detail)


@router.post(
    "",
    status_code=201,
    response_model=Envelope[LabelResponse],
    response_model_exclude_none=True,
    responses={400: _errors[400], 401: _errors[401]},
    summary="Create a label",
)
async def create_label(
    payload: LabelCreate,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    label = await label_service.create_label(db, owner_id, payload)
    return Envelope(data=label)


@router.put(
    "/{label_id}",
    response_model=Envelope[LabelResponse],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Rename or recolor a label",
)
async def update_label(
    payload: LabelUpdate,
    label_id: LabelId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    label = await label_service.update_label(db, label_id.lower(), owner_id, payload)
    return Envelope(data=label)


@router.delete(
    "/{label_id}",
    response_model=Envelope[EmptyData],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Delete a label and unlink it from every note",
)
async def delete_label(
    label_id: LabelId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    await label_service.delete_label(db, label_id.lower(), owner_id)
    return Envelope(data=EmptyData())


@router.post(
    "/{label_id}/notes",
    response_model=Envelope[ModifiedCount],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Attach a label to several notes",
)
async def add_label_to_notes(
    payload: LabelNotesRequest,
    label_id: LabelId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    result = await label_service.add_label_to_notes(db, label_id.lower(), owner_id, payload.note_ids)
    return Envelope(data=result)


@router.delete(
    "/{label_id}/notes",
    response_model=Envelope[ModifiedCount],
    response_model_exclude_none=True,
    responses=_errors,
    summary="Detach a label from several notes",
)
async def remove_label_from_notes(
    payload: LabelNotesRequest,
    label_id: LabelId,
    owner_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
):
    result = await label_service.remove_label_from_notes(db, label_id.lower(), owner_id, payload.note_ids)
    return Envelope(data=result)
