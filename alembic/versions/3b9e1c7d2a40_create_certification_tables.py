"""create certification tables

Revision ID: 3b9e1c7d2a40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e1c7d2a40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "advocate_profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("institution", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("streak_days", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "scored_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("advocate_profiles.id"),
            nullable=False,
        ),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("area_of_law", sa.String(length=128), nullable=False),
        sa.Column("mode", sa.String(length=32), nullable=False, server_default="judge"),
        sa.Column("overall_score", sa.Integer(), nullable=True),
        sa.Column("dimension_scores", postgresql.JSONB(), nullable=True),
        sa.Column(
            "saved_to_portfolio", sa.Boolean(), nullable=False, server_default="false"
        ),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_scored_sessions_profile_id", "scored_sessions", ["profile_id"]
    )

    op.create_table(
        "session_participants",
        sa.Column(
            "profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("advocate_profiles.id"),
            primary_key=True,
        ),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default="false"),
    )

    op.create_table(
        "tournament_entries",
        sa.Column(
            "profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("advocate_profiles.id"),
            primary_key=True,
        ),
        sa.Column("tournament_id", postgresql.UUID(as_uuid=True), primary_key=True),
    )

    op.create_table(
        "contributions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("advocate_profiles.id"),
            nullable=False,
        ),
    )
    op.create_index("ix_contributions_profile_id", "contributions", ["profile_id"])

    op.create_table(
        "feedback",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "to_profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("advocate_profiles.id"),
            nullable=False,
        ),
        sa.Column("from_profile_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column(
            "is_ai_feedback", sa.Boolean(), nullable=False, server_default="false"
        ),
    )
    op.create_index("ix_feedback_to_profile_id", "feedback", ["to_profile_id"])

    op.create_table(
        "saved_authorities",
        sa.Column(
            "profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("advocate_profiles.id"),
            primary_key=True,
        ),
        sa.Column("authority_id", postgresql.UUID(as_uuid=True), primary_key=True),
    )

    op.create_table(
        "certificates",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "profile_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("advocate_profiles.id"),
            nullable=False,
        ),
        sa.Column("tier", sa.String(length=32), nullable=False),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default="issued"
        ),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("credential_number", sa.String(length=64), nullable=False),
        sa.Column("verification_code", sa.String(length=16), nullable=False),
        sa.Column("overall_average", sa.Integer(), nullable=False),
        sa.Column("total_sessions", sa.Integer(), nullable=False),
        sa.Column("areas_of_law", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("strengths", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("improvements", postgresql.ARRAY(sa.String()), nullable=False),
        sa.Column("skills_snapshot", postgresql.JSONB(), nullable=True),
        sa.Column("payment_status", sa.String(length=32), nullable=False),
        sa.Column("payment_reference", sa.Text(), nullable=True),
        sa.UniqueConstraint(
            "verification_code", name="uq_certificates_verification_code"
        ),
        sa.UniqueConstraint(
            "credential_number", name="uq_certificates_credential_number"
        ),
    )
    op.create_index("ix_certificates_profile_id", "certificates", ["profile_id"])
    op.create_index(
        "uq_certificates_issued_profile_tier",
        "certificates",
        ["profile_id", "tier"],
        unique=True,
        postgresql_where=sa.text("status = 'issued'"),
    )

    op.create_table(
        "credential_sequences",
        sa.Column("year", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    op.drop_table("credential_sequences")
    op.drop_index("uq_certificates_issued_profile_tier", table_name="certificates")
    op.drop_index("ix_certificates_profile_id", table_name="certificates")
    op.drop_table("certificates")
    op.drop_table("saved_authorities")
    op.drop_index("ix_feedback_to_profile_id", table_name="feedback")
    op.drop_table("feedback")
    op.drop_index("ix_contributions_profile_id", table_name="contributions")
    op.drop_table("contributions")
    op.drop_table("tournament_entries")
    op.drop_index("ix_scored_sessions_profile_id", table_name="scored_sessions")
    op.drop_table("scored_sessions")
    op.drop_table("advocate_profiles")
