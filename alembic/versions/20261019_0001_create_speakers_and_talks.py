"""create speakers and talks tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "speakers",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Display name as first imported; unique ignoring case"),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_speakers_name_lower",
        "speakers",
        [sa.text("lower(name)")],
        unique=True,
    )

    op.create_table(
        "talks",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("speaker_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("talk_year", sa.Integer(), nullable=False),
        sa.Column("talk_month", sa.Integer(), nullable=False),
        sa.Column("views", sa.BigInteger(), nullable=False),
        sa.Column("likes", sa.BigInteger(), nullable=False),
        sa.Column("link", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("talk_month BETWEEN 1 AND 12", name="ck_talks_month_range"),
        sa.CheckConstraint("views >= 0", name="ck_talks_views_non_negative"),
        sa.CheckConstraint("likes >= 0", name="ck_talks_likes_non_negative"),
        sa.ForeignKeyConstraint(["speaker_id"], ["speakers.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("title", "speaker_id", name="uq_talks_title_speaker"),
    )
    op.create_index("ix_talks_speaker_id", "talks", ["speaker_id"], unique=False)
    op.create_index("ix_talks_talk_year", "talks", ["talk_year"], unique=False)
    op.create_index("ix_talks_created_at", "talks", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_talks_created_at", table_name="talks")
    op.drop_index("ix_talks_talk_year", table_name="talks")
    op.drop_index("ix_talks_speaker_id", table_name="talks")
    op.drop_table("talks")
    op.drop_index("uq_speakers_name_lower", table_name="speakers")
    op.drop_table("speakers")
