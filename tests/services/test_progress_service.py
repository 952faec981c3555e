from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from cert_engine.api.dependencies import activity_repo, credential_repo
from cert_engine.models.activity import (
    ContributionRecord,
    FeedbackRecord,
    ParticipationRecord,
    SavedAuthorityRecord,
    ScoredSession,
    TournamentEntry,
)
from cert_engine.models.credential import Credential
from cert_engine.services import progress_service
from cert_engine.services.errors import ProfileNotFound
from tests.conftest import (
    add_group_moots,
    add_sessions,
    make_foundation_eligible,
    seed_profile,
)


def _progress(user_id: str = "test-user"):
    return asyncio.run(
        progress_service.get_progress(activity_repo, credential_repo, user_id)
    )


def test_unknown_user_raises_profile_not_found() -> None:
    with pytest.raises(ProfileNotFound):
        _progress("nobody")


def test_zero_state_report() -> None:
    seed_profile()
    report = _progress()

    assert [t.tier for t in report.tiers] == ["foundation", "intermediate", "advanced"]
    foundation = report.for_tier("foundation")
    assert foundation is not None
    assert foundation.total_count == 4
    assert foundation.completed_count == 0
    assert foundation.percent_complete == 0
    assert not foundation.all_requirements_met
    assert foundation.skill_snapshot is None
    assert foundation.areas_of_law == ()
    assert [c.current for c in foundation.checks] == [0, 0, 0, 0]


def test_end_to_end_foundation_met() -> None:
    make_foundation_eligible()
    foundation = _progress().for_tier("foundation")

    assert foundation is not None
    assert [(c.current, c.target) for c in foundation.checks] == [
        (6, 5),
        (65, 50),
        (1, 1),
        (1, 1),
    ]
    assert foundation.all_requirements_met
    assert foundation.completed_count == 4
    assert foundation.percent_complete == 100
    assert foundation.areas_of_law == ("Contract",)
    assert foundation.skill_snapshot is not None
    assert foundation.skill_snapshot["oralDelivery"] == 65


def test_repeated_calls_return_equal_reports() -> None:
    make_foundation_eligible()
    assert _progress() == _progress()


def test_percent_complete_rounds_half_up() -> None:
    profile = seed_profile()
    # intermediate has 8 checks; satisfy exactly one (areas of law: 3)
    for area in ("Contract", "Tort", "Crime"):
        add_sessions(profile, [10], area_of_law=area)
    intermediate = _progress().for_tier("intermediate")
    assert intermediate is not None
    assert intermediate.total_count == 8
    assert intermediate.completed_count == 1
    assert intermediate.percent_complete == 13  # 12.5 rounds up


def test_only_completed_scored_sessions_count() -> None:
    profile = seed_profile()
    add_sessions(profile, [80, 90])
    activity_repo.add_session(
        ScoredSession.new(
            profile_id=profile.id,
            area_of_law="Tort",
            overall_score=None,
        )
    )
    activity_repo.add_session(
        ScoredSession.new(
            profile_id=profile.id,
            area_of_law="Crime",
            overall_score=20,
            status="in_progress",
        )
    )
    foundation = _progress().for_tier("foundation")
    assert foundation is not None
    assert foundation.checks[0].current == 2
    assert foundation.checks[1].current == 85
    assert foundation.areas_of_law == ("Contract",)


def test_metrics_filter_each_record_store() -> None:
    profile = seed_profile(streak_days=21)
    add_sessions(profile, [90], saved_to_portfolio=True)
    add_sessions(profile, [85], mode="examiner")
    add_group_moots(profile, 2)
    activity_repo.add_participation(
        ParticipationRecord(profile_id=profile.id, session_id=uuid4(), attended=False)
    )
    activity_repo.add_tournament_entry(
        TournamentEntry(profile_id=profile.id, tournament_id=uuid4())
    )
    activity_repo.add_contribution(
        ContributionRecord(profile_id=profile.id, contribution_id=uuid4())
    )
    activity_repo.add_feedback(
        FeedbackRecord(
            to_profile_id=profile.id, from_profile_id=uuid4(), is_ai_feedback=False
        )
    )
    activity_repo.add_feedback(
        FeedbackRecord(
            to_profile_id=profile.id, from_profile_id=None, is_ai_feedback=True
        )
    )
    activity_repo.add_saved_authority(
        SavedAuthorityRecord(profile_id=profile.id, authority_id=uuid4())
    )

    metrics, scored = asyncio.run(
        progress_service.load_activity(activity_repo, profile)
    )
    assert len(scored) == 2
    assert metrics.group_moots == 2
    assert metrics.portfolio_saves == 1
    assert metrics.timed_assessments == 1
    assert metrics.has_tournament
    assert metrics.has_contribution
    assert metrics.peer_feedback == 1
    assert metrics.research_saves == 1
    assert metrics.streak_days == 21


def test_other_profiles_activity_is_ignored() -> None:
    make_foundation_eligible("someone-else")
    seed_profile()
    foundation = _progress().for_tier("foundation")
    assert foundation is not None
    assert foundation.completed_count == 0


def test_issued_credential_is_attached_to_its_tier() -> None:
    profile = make_foundation_eligible()
    credential = Credential.new(
        profile_id=profile.id,
        tier="foundation",
        issued_at=datetime.now(UTC),
        credential_number="RATIO-2026-00001",
        verification_code="ABCD-EFGH-JKMN",
        overall_average=65,
        total_sessions=6,
        areas_of_law=("Contract",),
        strengths=(),
        improvements=(),
        payment_status="paid",
    )
    asyncio.run(credential_repo.insert(credential))

    report = _progress()
    foundation = report.for_tier("foundation")
    intermediate = report.for_tier("intermediate")
    assert foundation is not None and intermediate is not None
    assert foundation.credential == credential
    assert intermediate.credential is None
