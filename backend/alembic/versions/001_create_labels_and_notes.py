"""Create labels, notes and note_labels tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial schema: per-owner labels, notes and the many-to-many link.
How:   24-hex string ids generated by the application; both link foreign
       keys cascade on delete.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "labels",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("name", sa.String(30), nullable=False),
        sa.Column(
            "color",
            sa.String(7),
            nullable=False,
            server_default=sa.text("'#808080'"),
        ),
        sa.Column("owner_id", sa.String(64), nullable=False, comment="Id issued by the auth service"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "name", name="uq_labels_owner_name"),
    )
    op.create_index("ix_labels_owner_id", "labels", ["owner_id"])

    op.create_table(
        "notes",
        sa.Column("id", sa.String(24), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "color",
            sa.String(7),
            nullable=False,
            server_default=sa.text("'#ffffff'"),
        ),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("owner_id", sa.String(64), nullable=False, comment="Id issued by the auth service"),
        sa.Column(
            "sort_order",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Manual display position within the owner's notes",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notes_owner_id", "notes", ["owner_id"])
    op.create_index("idx_notes_owner_pinned_created", "notes", ["owner_id", "is_pinned", "created_at"])
    op.create_index("idx_notes_owner_archived", "notes", ["owner_id", "is_archived"])
    op.create_index("idx_notes_owner_order", "notes", ["owner_id", "sort_order"])

    op.create_table(
        "note_labels",
        sa.Column("note_id", sa.String(24), nullable=False),
        sa.Column("label_id", sa.String(24), nullable=False),
        sa.ForeignKeyConstraint(["note_id"], ["notes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["label_id"], ["labels.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("note_id", "label_id"),
    )
    op.create_index("ix_note_labels_label_id", "note_labels", ["label_id"])


def downgrade() -> None:
    op.drop_index("ix_note_labels_label_id", table_name="note_labels")
    op.drop_table("note_labels")

    op.drop_index("idx_notes_owner_order", table_name="notes")
    op.drop_index("idx_notes_owner_archived", table_name="notes")
    op.drop_index("idx_notes_owner_pinned_created", table_name="notes")
    op.drop_index("ix_notes_owner_id", table_name="notes")
    op.drop_table("notes")

    op.drop_index("ix_labels_owner_id", table_name="labels")
    op.drop_table("labels")
