"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the `notes` table: one row per uploaded study file and its summary.
How:   PostgreSQL UUID primary key, TIMESTAMP WITH TIME ZONE columns.

Rollback: downgrade() drops the table (all notes are lost; stored files stay on disk).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "title",
            sa.String(255),
            nullable=False,
            comment="Display title, derived from the uploaded filename",
        ),
        sa.Column(
            "file_path",
            sa.String(255),
            nullable=False,
            comment="Relative path from storage root to the uploaded study file",
        ),
        sa.Column(
            "file_size",
            sa.Integer(),
            nullable=True,
            comment="Size of the uploaded file in bytes",
        ),
        sa.Column(
            "summary",
            sa.Text(),
            nullable=True,
            comment="Markdown summary returned by the LLM provider",
        ),
        sa.Column(
            "status",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'pending'"),
            comment="Summary state: pending, processing, completed, failed",
        ),
        sa.Column(
            "error_message",
            sa.Text(),
            nullable=True,
            comment="Last summarization error, shown to the user on failed notes",
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

    # Dashboard and search both read newest first
    op.create_index(
        "idx_notes_created_at",
        "notes",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_notes_created_at", table_name="notes")
    op.drop_table("notes")
