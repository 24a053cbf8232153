"""
NoteKeeper Backend — Label Schemas
====================================

What:  Request bodies and responses for /api/labels.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints

from notekeeper.schemas.common import CamelModel, HexColor, ObjectId
from notekeeper.schemas.note import NoteResponse

LabelName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)]


class LabelCreate(CamelModel):
    """Body of POST /api/labels. Color defaults to gray when omitted."""

    name: LabelName
    color: Optional[HexColor] = None


class LabelUpdate(CamelModel):
    """Body of PUT /api/labels/{id}; only present fields are applied."""

    name: Optional[LabelName] = None
    color: Optional[HexColor] = None


class LabelNotesRequest(CamelModel):
    """Body of POST/DELETE /api/labels/{id}/notes."""

    note_ids: List[ObjectId] = Field(min_length=1, description="Notes to attach to / detach from")


class LabelResponse(CamelModel):
    """
    A label with its live note count.

    note_count is computed on every request from the notes table; it is
    never stored.
    """

    id: str
    name: str
    color: str
    created_at: datetime
    note_count: int = 0


class LabelDetail(CamelModel):
    """GET /api/labels/{id}: the label plus every note carrying it."""

    label: LabelResponse
    notes: List[NoteResponse]
    note_count: int
