from __future__ import annotations

from typing import Protocol
from uuid import UUID

from cert_engine.models.activity import (
    AdvocateProfile,
    ContributionRecord,
    FeedbackRecord,
    ParticipationRecord,
    SavedAuthorityRecord,
    ScoredSession,
    TournamentEntry,
)


class ActivityRepo(Protocol):
    """Read-only access to every activity store the aggregator needs.

    Each list_* method is "all records of type T for profile X"; filtering
    beyond that happens in the progress service.
    """

    async def get_profile_by_user(self, user_id: str) -> AdvocateProfile | None: ...
    async def get_profile(self, profile_id: UUID) -> AdvocateProfile | None: ...
    async def list_sessions(self, profile_id: UUID) -> list[ScoredSession]: ...
    async def list_participation(
        self, profile_id: UUID
    ) -> list[ParticipationRecord]: ...
    async def list_tournament_entries(
        self, profile_id: UUID
    ) -> list[TournamentEntry]: ...
    async def list_contributions(
        self, profile_id: UUID
    ) -> list[ContributionRecord]: ...
    async def list_feedback_received(
        self, profile_id: UUID
    ) -> list[FeedbackRecord]: ...
    async def list_saved_authorities(
        self, profile_id: UUID
    ) -> list[SavedAuthorityRecord]: ...


class InMemoryActivityRepo:
    """Dict-backed activity stores for dev and tests.

    Writers (add_*) exist only so tests and the dev seed can populate data;
    the certification core never calls them.
    """

    def __init__(self) -> None:
        self._profiles: dict[UUID, AdvocateProfile] = {}
        self._by_user: dict[str, UUID] = {}
        self._sessions: list[ScoredSession] = []
        self._participation: list[ParticipationRecord] = []
        self._tournaments: list[TournamentEntry] = []
        self._contributions: list[ContributionRecord] = []
        self._feedback: list[FeedbackRecord] = []
        self._authorities: list[SavedAuthorityRecord] = []

    def clear(self) -> None:
        self._profiles.clear()
        self._by_user.clear()
        for records in (
            self._sessions,
            self._participation,
            self._tournaments,
            self._contributions,
            self._feedback,
            self._authorities,
        ):
            records.clear()

    # --- reads ---

    async def get_profile_by_user(self, user_id: str) -> AdvocateProfile | None:
        profile_id = self._by_user.get(user_id)
        return self._profiles.get(profile_id) if profile_id else None

    async def get_profile(self, profile_id: UUID) -> AdvocateProfile | None:
        return self._profiles.get(profile_id)

    async def list_sessions(self, profile_id: UUID) -> list[ScoredSession]:
        return [s for s in self._sessions if s.profile_id == profile_id]

    async def list_participation(self, profile_id: UUID) -> list[ParticipationRecord]:
        return [p for p in self._participation if p.profile_id == profile_id]

    async def list_tournament_entries(self, profile_id: UUID) -> list[TournamentEntry]:
        return [t for t in self._tournaments if t.profile_id == profile_id]

    async def list_contributions(self, profile_id: UUID) -> list[ContributionRecord]:
        return [c for c in self._contributions if c.profile_id == profile_id]

    async def list_feedback_received(self, profile_id: UUID) -> list[FeedbackRecord]:
        return [f for f in self._feedback if f.to_profile_id == profile_id]

    async def list_saved_authorities(
        self, profile_id: UUID
    ) -> list[SavedAuthorityRecord]:
        return [a for a in self._authorities if a.profile_id == profile_id]

    # --- writes (fixtures / seed only) ---

    def add_profile(self, profile: AdvocateProfile) -> None:
        if profile.user_id in self._by_user:
            raise ValueError("profile already exists for user")
        self._profiles[profile.id] = profile
        self._by_user[profile.user_id] = profile.id

    def add_session(self, session: ScoredSession) -> None:
        self._sessions.append(session)

    def add_participation(self, record: ParticipationRecord) -> None:
        self._participation.append(record)

    def add_tournament_entry(self, entry: TournamentEntry) -> None:
        self._tournaments.append(entry)

    def add_contribution(self, record: ContributionRecord) -> None:
        self._contributions.append(record)

    def add_feedback(self, record: FeedbackRecord) -> None:
        self._feedback.append(record)

    def add_saved_authority(self, record: SavedAuthorityRecord) -> None:
        self._authorities.append(record)
