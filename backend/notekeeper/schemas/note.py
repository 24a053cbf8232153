"""
NoteKeeper Backend — Note Schemas
===================================

What:  Request bodies, query parameters and responses for /api/notes.
How:   Field constraints mirror the model limits; titles and descriptions are
       trimmed before their length is checked.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import Field, StringConstraints

from notekeeper.schemas.common import CamelModel, HexColor, ObjectId

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]

DEFAULT_NOTE_SORT = "-isPinned,-createdAt"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(CamelModel):
    """Body of POST /api/notes."""

    title: Title
    description: Description
    color: Optional[HexColor] = None
    is_pinned: bool = False
    is_archived: bool = False
    labels: List[ObjectId] = Field(default_factory=list)


class NoteUpdate(CamelModel):
    """
    Body of PUT /api/notes/{id}.

    Only fields present in the request are applied. `labels: []` clears
    every label; omitting `labels` leaves them untouched.
    """

    title: Optional[Title] = None
    description: Optional[Description] = None
    color: Optional[HexColor] = None
    is_pinned: Optional[bool] = None
    is_archived: Optional[bool] = None
    labels: Optional[List[ObjectId]] = None


class ReorderRequest(CamelModel):
    """Body of PUT /api/notes/reorder."""

    note_id: ObjectId
    new_order: int = Field(ge=0, description="Target position in the owner's sequence")


class NoteListParams(CamelModel):
    """
    Filters for GET /api/notes. Every filter is optional; active ones are
    combined with AND.

    labels: comma-separated label ids; a note matches if it has any of them
    search: free text matched against title and description
    sort_by: comma-separated fields, `-` prefix for descending
    """

    is_archived: Optional[bool] = None
    is_pinned: Optional[bool] = None
    labels: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = DEFAULT_NOTE_SORT


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteLabel(CamelModel):
    """A label as embedded in a note: `{id, name, color}`."""

    id: str
    name: str
    color: str


class NoteResponse(CamelModel):
    """Full representation of a note, labels resolved."""

    id: str
    title: str
    description: str
    color: str
    is_pinned: bool
    is_archived: bool
    labels: List[NoteLabel]
    order: int
    created_at: datetime
    updated_at: datetime
