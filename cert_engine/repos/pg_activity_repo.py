"""PostgreSQL implementation of ActivityRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cert_engine.db.tables import (
    AdvocateProfileRow,
    ContributionRow,
    FeedbackRow,
    SavedAuthorityRow,
    ScoredSessionRow,
    SessionParticipantRow,
    TournamentEntryRow,
)
from cert_engine.models.activity import (
    AdvocateProfile,
    ContributionRecord,
    FeedbackRecord,
    ParticipationRecord,
    SavedAuthorityRecord,
    ScoredSession,
    TournamentEntry,
)


class PgActivityRepo:
    """Satisfies the ActivityRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_profile_by_user(self, user_id: str) -> AdvocateProfile | None:
        stmt = select(AdvocateProfileRow).where(AdvocateProfileRow.user_id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_profile(row)

    async def get_profile(self, profile_id: UUID) -> AdvocateProfile | None:
        row = await self._session.get(AdvocateProfileRow, profile_id)
        if row is None:
            return None
        return _row_to_profile(row)

    async def list_sessions(self, profile_id: UUID) -> list[ScoredSession]:
        stmt = (
            select(ScoredSessionRow)
            .where(ScoredSessionRow.profile_id == profile_id)
            .order_by(ScoredSessionRow.occurred_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_session(r) for r in rows]

    async def list_participation(self, profile_id: UUID) -> list[ParticipationRecord]:
        stmt = select(SessionParticipantRow).where(
            SessionParticipantRow.profile_id == profile_id
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            ParticipationRecord(
                profile_id=r.profile_id, session_id=r.session_id, attended=r.attended
            )
            for r in rows
        ]

    async def list_tournament_entries(self, profile_id: UUID) -> list[TournamentEntry]:
        stmt = select(TournamentEntryRow).where(
            TournamentEntryRow.profile_id == profile_id
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            TournamentEntry(profile_id=r.profile_id, tournament_id=r.tournament_id)
            for r in rows
        ]

    async def list_contributions(self, profile_id: UUID) -> list[ContributionRecord]:
        stmt = select(ContributionRow).where(ContributionRow.profile_id == profile_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            ContributionRecord(profile_id=r.profile_id, contribution_id=r.id)
            for r in rows
        ]

    async def list_feedback_received(self, profile_id: UUID) -> list[FeedbackRecord]:
        stmt = select(FeedbackRow).where(FeedbackRow.to_profile_id == profile_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            FeedbackRecord(
                to_profile_id=r.to_profile_id,
                from_profile_id=r.from_profile_id,
                is_ai_feedback=r.is_ai_feedback,
            )
            for r in rows
        ]

    async def list_saved_authorities(
        self, profile_id: UUID
    ) -> list[SavedAuthorityRecord]:
        stmt = select(SavedAuthorityRow).where(
            SavedAuthorityRow.profile_id == profile_id
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            SavedAuthorityRecord(profile_id=r.profile_id, authority_id=r.authority_id)
            for r in rows
        ]


def _row_to_profile(row: AdvocateProfileRow) -> AdvocateProfile:
    return AdvocateProfile(
        id=row.id,
        user_id=row.user_id,
        full_name=row.full_name,
        institution=row.institution,
        email=row.email,
        streak_days=row.streak_days or 0,
    )


def _row_to_session(row: ScoredSessionRow) -> ScoredSession:
    return ScoredSession(
        id=row.id,
        profile_id=row.profile_id,
        status=row.status,
        area_of_law=row.area_of_law,
        mode=row.mode,
        overall_score=row.overall_score,
        dimension_scores=dict(row.dimension_scores) if row.dimension_scores else None,
        saved_to_portfolio=row.saved_to_portfolio,
        occurred_at=row.occurred_at,
    )
