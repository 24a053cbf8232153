"""
NoteKeeper Backend — Ownership Guard
======================================

What:  The single access rule for notes and labels: a record is visible and
       mutable only by the user in its `owner_id` column.
How:   `authorize_owner` checks an already-loaded record; `get_owned` loads a
       record by primary key and applies the same check.
Who:   Every LabelService, NoteService and ReorderService operation that reads
       one record or mutates one.

Order of checks:
    1. Record absent         → NotFoundError     (404)
    2. Owner differs         → UnauthorizedError (401)
    3. Otherwise the record is returned unchanged
"""

import logging
from typing import Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.exceptions import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


def authorize_owner(
    record: Optional[RecordT],
    owner_id: str,
    resource: str,
    record_id: Optional[str] = None,
    action: str = "access",
) -> RecordT:
    """
    Apply the ownership rule to a record that may be None.

    Args:
        record: The loaded ORM instance, or None when the lookup found nothing
        owner_id: The caller's user id
        resource: Resource name used in error messages ("note", "label")
        record_id: Requested id, included in the NotFound context
        action: Verb used in the Unauthorized message ("update", "delete", ...)

    Returns:
        The record, narrowed to non-None.
    """
    if record is None:
        raise NotFoundError(resource=resource, resource_id=record_id)

    if record.owner_id != owner_id:
        logger.warning(
            "Owner mismatch on %s %s: requested by %s",
            resource,
            getattr(record, "id", record_id),
            owner_id,
        )
        raise UnauthorizedError(resource=resource, action=action)

    return record


async def get_owned(
    db: AsyncSession,
    model: Type[RecordT],
    record_id: str,
    owner_id: str,
    resource: str,
    action: str = "access",
    for_update: bool = False,
) -> RecordT:
    """
    Load `model` by primary key and apply `authorize_owner`.

    for_update=True adds SELECT ... FOR UPDATE (ignored by SQLite).
    """
    query = select(model).where(model.id == record_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return authorize_owner(
        result.scalar_one_or_none(),
        owner_id,
        resource,
        record_id=record_id,
        action=action,
    )
