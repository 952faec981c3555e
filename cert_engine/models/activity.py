"""Activity records read by the progress aggregator.

These are owned by other parts of the platform (practice sessions, group
moots, tournaments, the Law Book, research tools).  This service only
reads them, so every record is a frozen dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

SESSION_COMPLETED = "completed"
EXAMINER_MODE = "examiner"  # timed, SQE2-style assessment


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class AdvocateProfile:
    """The subject's activity profile.

    user_id is the identity provider's subject (JWT `sub`); everything else
    in the activity stores hangs off the profile id.
    """

    id: UUID
    user_id: str
    full_name: str
    institution: str | None = None
    email: str | None = None
    streak_days: int = 0

    @staticmethod
    def new(
        *,
        user_id: str,
        full_name: str,
        institution: str | None = None,
        email: str | None = None,
        streak_days: int = 0,
    ) -> AdvocateProfile:
        return AdvocateProfile(
            id=uuid4(),
            user_id=user_id,
            full_name=full_name,
            institution=institution,
            email=email,
            streak_days=streak_days,
        )


@dataclass(frozen=True, slots=True)
class ScoredSession:
    """An AI-assessed practice session.

    overall_score is only set once the session has been judged;
    dimension_scores is optional even then (older sessions were scored
    without the per-dimension breakdown).
    """

    id: UUID
    profile_id: UUID
    status: str  # in_progress|completed
    area_of_law: str
    mode: str  # judge|mentor|examiner|opponent
    overall_score: int | None = None
    dimension_scores: dict[str, int] | None = None
    saved_to_portfolio: bool = False
    occurred_at: datetime = field(default_factory=_now)

    @property
    def is_scored(self) -> bool:
        return self.status == SESSION_COMPLETED and self.overall_score is not None

    @staticmethod
    def new(
        *,
        profile_id: UUID,
        area_of_law: str,
        overall_score: int | None,
        status: str = SESSION_COMPLETED,
        mode: str = "judge",
        dimension_scores: dict[str, int] | None = None,
        saved_to_portfolio: bool = False,
    ) -> ScoredSession:
        return ScoredSession(
            id=uuid4(),
            profile_id=profile_id,
            status=status,
            area_of_law=area_of_law,
            mode=mode,
            overall_score=overall_score,
            dimension_scores=dimension_scores,
            saved_to_portfolio=saved_to_portfolio,
        )


@dataclass(frozen=True, slots=True)
class ParticipationRecord:
    """A seat in a live group moot."""

    profile_id: UUID
    session_id: UUID
    attended: bool


@dataclass(frozen=True, slots=True)
class TournamentEntry:
    profile_id: UUID
    tournament_id: UUID


@dataclass(frozen=True, slots=True)
class ContributionRecord:
    """A Law Book contribution."""

    profile_id: UUID
    contribution_id: UUID


@dataclass(frozen=True, slots=True)
class FeedbackRecord:
    """Feedback received by a profile, from a peer or from the AI judge."""

    to_profile_id: UUID
    from_profile_id: UUID | None
    is_ai_feedback: bool


@dataclass(frozen=True, slots=True)
class SavedAuthorityRecord:
    """A case or statute saved from the research tools."""

    profile_id: UUID
    authority_id: UUID
