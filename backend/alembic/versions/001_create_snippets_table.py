"""Create snippets table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `snippets` table and its list/author/title indexes.
Rollback: downgrade() drops the table (all snippets are lost).
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
    """Column rules mirror codearchive/models/snippet.py."""
    op.create_table(
        "snippets",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(40), nullable=False),
        sa.Column("language", sa.String(20), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        # Free-form label, intentionally without a foreign key
        sa.Column("author", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("version BETWEEN 1 AND 999", name="ck_snippets_version_range"),
        sa.CheckConstraint(
            "language IN ('JavaScript', 'Python', 'HTML', 'CSS', 'Markdown')",
            name="ck_snippets_language",
        ),
    )

    op.create_index("idx_snippets_created_at", "snippets", [sa.text("created_at DESC")])
    op.create_index(
        "idx_snippets_author_created_at",
        "snippets",
        ["author", sa.text("created_at DESC")],
    )
    op.create_index("idx_snippets_title", "snippets", ["title"])


def downgrade() -> None:
    op.drop_index("idx_snippets_title", table_name="snippets")
    op.drop_index("idx_snippets_author_created_at", table_name="snippets")
    op.drop_index("idx_snippets_created_at", table_name="snippets")
    op.drop_table("snippets")
