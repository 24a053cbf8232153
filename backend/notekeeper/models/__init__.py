"""ORM models. Importing this package registers every table on Base.metadata."""

from notekeeper.models.label import Label
from notekeeper.models.note import Note, note_labels

__all__ = ["Label", "Note", "note_labels"]
