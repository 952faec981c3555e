"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in cert_engine/models/.
Repos convert between rows and dataclasses; nothing outside repos/ sees
a Row class.

The activity tables are owned by the practice, moot and research services
and are only read here.  certificates and credential_sequences are this
service's own.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from cert_engine.db.engine import Base

# Constraint names are matched by PgCredentialRepo to tell a duplicate
# issuance apart from an identifier collision.
UQ_ISSUED_PER_TIER = "uq_certificates_issued_profile_tier"
UQ_VERIFICATION_CODE = "uq_certificates_verification_code"
UQ_CREDENTIAL_NUMBER = "uq_certificates_credential_number"

# --- Activity (read-only) ---


class AdvocateProfileRow(Base):
    __tablename__ = "advocate_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    institution: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    streak_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ScoredSessionRow(Base):
    __tablename__ = "scored_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("advocate_profiles.id"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False
    )  # in_progress|completed
    area_of_law: Mapped[str] = mapped_column(String(128), nullable=False)
    mode: Mapped[str] = mapped_column(
        String(32), nullable=False, default="judge"
    )  # judge|mentor|examiner|opponent
    overall_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    dimension_scores: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    saved_to_portfolio: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )


class SessionParticipantRow(Base):
    __tablename__ = "session_participants"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("advocate_profiles.id"), primary_key=True
    )
    session_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    attended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class TournamentEntryRow(Base):
    __tablename__ = "tournament_entries"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("advocate_profiles.id"), primary_key=True
    )
    tournament_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True
    )


class ContributionRow(Base):
    """Law Book contributions."""

    __tablename__ = "contributions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("advocate_profiles.id"),
        nullable=False,
        index=True,
    )


class FeedbackRow(Base):
    __tablename__ = "feedback"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    to_profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("advocate_profiles.id"),
        nullable=False,
        index=True,
    )
    from_profile_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True
    )
    is_ai_feedback: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class SavedAuthorityRow(Base):
    __tablename__ = "saved_authorities"

    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("advocate_profiles.id"), primary_key=True
    )
    authority_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True
    )


# --- Certification (owned) ---


class CertificateRow(Base):
    """Append-only.  Rows are inserted once and never updated."""

    __tablename__ = "certificates"
    __table_args__ = (
        Index(
            UQ_ISSUED_PER_TIER,
            "profile_id",
            "tier",
            unique=True,
            postgresql_where=text("status = 'issued'"),
        ),
        UniqueConstraint("verification_code", name=UQ_VERIFICATION_CODE),
        UniqueConstraint("credential_number", name=UQ_CREDENTIAL_NUMBER),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("advocate_profiles.id"),
        nullable=False,
        index=True,
    )
    tier: Mapped[str] = mapped_column(
        String(32), nullable=False
    )  # foundation|intermediate|advanced
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="issued"
    )  # issued|revoked
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    credential_number: Mapped[str] = mapped_column(String(64), nullable=False)
    verification_code: Mapped[str] = mapped_column(String(16), nullable=False)
    overall_average: Mapped[int] = mapped_column(Integer, nullable=False)
    total_sessions: Mapped[int] = mapped_column(Integer, nullable=False)
    areas_of_law: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    strengths: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    improvements: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=[]
    )
    skills_snapshot: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    payment_status: Mapped[str] = mapped_column(
        String(32), nullable=False
    )  # paid|included_in_subscription
    payment_reference: Mapped[str | None] = mapped_column(Text, nullable=True)


class CredentialSequenceRow(Base):
    """One counter per calendar year, shared by every subject."""

    __tablename__ = "credential_sequences"

    year: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
