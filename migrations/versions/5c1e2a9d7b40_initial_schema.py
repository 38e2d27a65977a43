"""initial schema

Revision ID: 5c1e2a9d7b40
Revises:
Create Date: 2026-10-17 09:12:44.318205

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e2a9d7b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create accounts, roles, confessions and their child tables."""
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
    op.create_table(
        "confessions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("slug", sa.String(length=120), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("device_info", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_confessions_created_at", "confessions", ["created_at"])

    op.create_table(
        "confession_votes",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("confession_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("vote_identifier", sa.Text(), nullable=True),
        sa.Column("vote_type", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "vote_type IN ('upvote', 'downvote')",
            name="ck_confession_votes_vote_type",
        ),
        sa.ForeignKeyConstraint(["confession_id"], ["confessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_confession_votes_confession_id", "confession_votes", ["confession_id"]
    )
    op.create_index(
        "ix_confession_votes_identifier",
        "confession_votes",
        ["confession_id", "vote_identifier"],
    )

    op.create_table(
        "confession_comments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("confession_id", sa.String(length=36), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("device_info", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["confession_id"], ["confessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["accounts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_confession_comments_confession_id", "confession_comments", ["confession_id"]
    )

    op.create_table(
        "confession_reports",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("confession_id", sa.String(length=36), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("reporter_identifier", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.Text(), nullable=True),
        sa.Column("device_info", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["confession_id"], ["confessions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_confession_reports_confession_id", "confession_reports", ["confession_id"]
    )


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_index("ix_confession_reports_confession_id", table_name="confession_reports")
    op.drop_table("confession_reports")
    op.drop_index("ix_confession_comments_confession_id", table_name="confession_comments")
    op.drop_table("confession_comments")
    op.drop_index("ix_confession_votes_identifier", table_name="confession_votes")
    op.drop_index("ix_confession_votes_confession_id", table_name="confession_votes")
    op.drop_table("confession_votes")
    op.drop_index("ix_confessions_created_at", table_name="confessions")
    op.drop_table("confessions")
    op.drop_table("user_roles")
    op.drop_table("accounts")
