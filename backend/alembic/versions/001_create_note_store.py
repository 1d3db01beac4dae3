"""Create note store tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates notes, note_contents, branches, attributes, note_revisions and
       options.
How:   Column types are portable (String ids, DateTime with timezone,
       LargeBinary content) so the same migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops every table (destructive, all data lost).
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
        "notes",
        sa.Column("note_id", sa.String(12), nullable=False),
        sa.Column("title", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("type", sa.String(50), nullable=False, server_default=sa.text("'text'")),
        sa.Column("mime", sa.String(255), nullable=False, server_default=sa.text("'text/html'")),
        sa.Column("is_protected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("date_modified", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("note_id"),
    )

    op.create_table(
        "note_contents",
        sa.Column("note_id", sa.String(12), nullable=False),
        sa.Column("content", sa.LargeBinary(), nullable=False),
        sa.Column("date_modified", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["note_id"], ["notes.note_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("note_id"),
    )

    op.create_table(
        "branches",
        sa.Column("branch_id", sa.String(12), nullable=False),
        sa.Column("note_id", sa.String(12), nullable=False),
        sa.Column("parent_note_id", sa.String(12), nullable=False),
        sa.Column("note_position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["note_id"], ["notes.note_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_note_id"], ["notes.note_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("branch_id"),
    )
    op.create_index("idx_branches_parent_note_id", "branches", ["parent_note_id"])

    op.create_table(
        "attributes",
        sa.Column("attribute_id", sa.String(12), nullable=False),
        sa.Column("note_id", sa.String(12), nullable=False),
        sa.Column("type", sa.String(50), nullable=False, server_default=sa.text("'label'")),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["note_id"], ["notes.note_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("attribute_id"),
    )
    op.create_index("idx_attributes_note_id_name", "attributes", ["note_id", "name"])

    op.create_table(
        "note_revisions",
        sa.Column("note_revision_id", sa.String(12), nullable=False),
        sa.Column("note_id", sa.String(12), nullable=False),
        sa.Column("title", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("mime", sa.String(255), nullable=False),
        sa.Column("is_protected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("content", sa.LargeBinary(), nullable=True),
        sa.Column("date_last_edited", sa.DateTime(timezone=True), nullable=False),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.ForeignKeyConstraint(["note_id"], ["notes.note_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("note_revision_id"),
    )
    op.create_index("idx_note_revisions_note_id", "note_revisions", ["note_id"])

    op.create_table(
        "options",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("date_modified", sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("name"),
    )


def downgrade() -> None:
    op.drop_table("options")
    op.drop_index("idx_note_revisions_note_id", table_name="note_revisions")
    op.drop_table("note_revisions")
    op.drop_index("idx_attributes_note_id_name", table_name="attributes")
    op.drop_table("attributes")
    op.drop_index("idx_branches_parent_note_id", table_name="branches")
    op.drop_table("branches")
    op.drop_table("note_contents")
    op.drop_table("notes")
