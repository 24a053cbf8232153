"""
NoteKeeper Backend — Note Query Builder
=========================================

What:  Translates GET /api/notes filter parameters into a SQLAlchemy SELECT.
How:   Each active filter contributes one WHERE clause; clauses are ANDed.
       Always scoped to the caller's notes.

Filter semantics:
    is_archived / is_pinned  exact boolean match
    labels                   "id1,id2"  → note carries ANY of the ids
    search                   any whitespace-separated term found
                             (case-insensitive) in title or description
    sort_by                  "-isPinned,-createdAt" → is_pinned DESC, created_at DESC

Example:
    ?isArchived=false&labels=a1...,b2...&search=groceries&sortBy=order
    →  WHERE owner_id = :owner AND is_archived = false
         AND EXISTS (label in (a1, b2))
         AND (title ILIKE '%groceries%' OR description ILIKE '%groceries%')
       ORDER BY sort_order ASC, id ASC
"""

import re
from typing import List

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.sql.elements import ColumnElement

from notekeeper.exceptions import ValidationError
from notekeeper.models import Label, Note
from notekeeper.schemas.common import OBJECT_ID_PATTERN
from notekeeper.schemas.note import DEFAULT_NOTE_SORT, NoteListParams

# API field name → column
SORTABLE_FIELDS = {
    "title": Note.title,
    "description": Note.description,
    "color": Note.color,
    "isPinned": Note.is_pinned,
    "isArchived": Note.is_archived,
    "order": Note.order,
    "createdAt": Note.created_at,
    "updatedAt": Note.updated_at,
}

_OBJECT_ID_RE = re.compile(OBJECT_ID_PATTERN)
_LIKE_ESCAPE = "\\"


def parse_sort(sort_by: str) -> List[ColumnElement]:
    """
    Parse a sortBy string into ORDER BY clauses.

    Fields are separated by commas (spaces are accepted too). A trailing
    `id ASC` keeps the order deterministic when all fields tie.

    Raises:
        ValidationError: unknown field name
    """
    tokens = [t for t in re.split(r"[,\s]+", sort_by or "") if t]
    if not tokens:
        tokens = DEFAULT_NOTE_SORT.split(",")

    clauses: List[ColumnElement] = []
    for token in tokens:
        descending = token.startswith("-")
        name = token.lstrip("+-")
        column = SORTABLE_FIELDS.get(name)
        if column is None:
            raise ValidationError(
                message=f"Cannot sort by '{name}'",
                field="sortBy",
                context={"allowed": sorted(SORTABLE_FIELDS)},
            )
        clauses.append(column.desc() if descending else column.asc())

    clauses.append(Note.id.asc())
    return clauses


def parse_label_ids(labels: str) -> List[str]:
    """Split the comma-separated `labels` filter and validate each id."""
    ids = [part.strip().lower() for part in labels.split(",") if part.strip()]
    invalid = [i for i in ids if not _OBJECT_ID_RE.match(i)]
    if invalid:
        raise ValidationError(
            message="Invalid label ID format",
            field="labels",
            context={"invalid": invalid},
        )
    return ids


def _escape_like(term: str) -> str:
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def search_clause(search: str):
    """
    Free-text condition: any term matches title or description.

    Returns None when the search string holds no terms.
    """
    terms = search.split()
    if not terms:
        return None

    matches = []
    for term in terms:
        pattern = f"%{_escape_like(term)}%"
        matches.append(Note.title.ilike(pattern, escape=_LIKE_ESCAPE))
        matches.append(Note.description.ilike(pattern, escape=_LIKE_ESCAPE))
    return or_(*matches)


def build_note_query(owner_id: str, params: NoteListParams) -> Select:
    """Build the listing query for `owner_id` from validated parameters."""
    conditions = [Note.owner_id == owner_id]

    if params.is_archived is not None:
        conditions.append(Note.is_archived == params.is_archived)

    if params.is_pinned is not None:
        conditions.append(Note.is_pinned == params.is_pinned)

    if params.labels:
        label_ids = parse_label_ids(params.labels)
        if label_ids:
            conditions.append(Note.labels.any(Label.id.in_(label_ids)))

    if params.search:
        clause = search_clause(params.search)
        if clause is not None:
            conditions.append(clause)

    return select(Note).where(and_(*conditions)).order_by(*parse_sort(params.sort_by))
