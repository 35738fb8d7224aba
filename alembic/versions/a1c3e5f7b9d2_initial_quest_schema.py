"""initial_quest_schema

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "a1c3e5f7b9d2"
down_revision = None
branch_labels = None
depends_on = None

_ENUMS = {
    "questcategory": ("environment", "elderly_care", "food_rescue", "education", "community"),
    "questdifficulty": ("easy", "medium", "hard"),
    "userqueststatus": ("accepted", "in_progress", "submitted", "completed", "failed"),
    "submissionstatus": ("pending", "verified", "rejected"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*_ENUMS[name], name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    conn = op.get_bind()

    # ── PostgreSQL enums ──────────────────────────────────────────────────────

    for name, values in _ENUMS.items():
        postgresql.ENUM(*values, name=name).create(conn, checkfirst=True)

    # ── profiles ──────────────────────────────────────────────────────────────

    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(512), nullable=True),
        sa.Column("total_xp", sa.Integer, server_default="0", nullable=False),
        sa.Column("level", sa.Integer, server_default="1", nullable=False),
        sa.Column("quests_completed", sa.Integer, server_default="0", nullable=False),
        sa.Column("current_streak", sa.Integer, server_default="0", nullable=False),
        sa.Column("longest_streak", sa.Integer, server_default="0", nullable=False),
        sa.Column("badges", postgresql.ARRAY(sa.String), server_default="{}", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("username"),
    )
    op.create_index("ix_profiles_total_xp", "profiles", ["total_xp"])

    # ── quests ────────────────────────────────────────────────────────────────

    op.create_table(
        "quests",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, server_default="", nullable=False),
        sa.Column("category", _enum("questcategory"), nullable=False),
        sa.Column("difficulty", _enum("questdifficulty"), server_default="easy", nullable=False),
        sa.Column("xp_reward", sa.Integer, nullable=False),
        sa.Column("estimated_time", sa.Integer, server_default="30", nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("address", sa.String(500), server_default="", nullable=False),
        sa.Column("is_active", sa.Boolean, server_default="true", nullable=False),
        sa.Column("is_featured", sa.Boolean, server_default="false", nullable=False),
        sa.Column("times_completed", sa.Integer, server_default="0", nullable=False),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_quests_category", "quests", ["category"])
    op.create_index("ix_quests_is_active", "quests", ["is_active"])

    # ── user_quests ───────────────────────────────────────────────────────────

    op.create_table(
        "user_quests",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quest_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", _enum("userqueststatus"), server_default="accepted", nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("xp_earned", sa.Integer, server_default="0", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["quest_id"], ["quests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_quests_user_id_status", "user_quests", ["user_id", "status"])

    # ── quest_submissions (append-only) ───────────────────────────────────────

    op.create_table(
        "quest_submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quest_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_quest_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("image_url", sa.String(1024), server_default="", nullable=False),
        sa.Column("image_hash", sa.String(64), nullable=True),
        sa.Column("submitted_latitude", sa.Float, nullable=False),
        sa.Column("submitted_longitude", sa.Float, nullable=False),
        sa.Column("ai_confidence", sa.Integer, server_default="0", nullable=False),
        sa.Column("ai_labels", postgresql.ARRAY(sa.String), server_default="{}", nullable=False),
        sa.Column("verification_status", _enum("submissionstatus"), server_default="pending", nullable=False),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["quest_id"], ["quests.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_quest_id"], ["user_quests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_quest_submissions_user_id", "quest_submissions", ["user_id"])
    op.create_index("ix_quest_submissions_user_quest_id", "quest_submissions", ["user_quest_id"])


def downgrade() -> None:
    op.drop_table("quest_submissions")
    op.drop_table("user_quests")
    op.drop_table("quests")
    op.drop_table("profiles")

    conn = op.get_bind()
    for name in reversed(list(_ENUMS)):
        postgresql.ENUM(name=name).drop(conn, checkfirst=True)
