"""Progress aggregator — activity records in, per-tier checklists out.

Every call recomputes from the activity stores; nothing is cached, so two
calls over unchanged records return equal reports.  A store failure
propagates and aborts the whole report rather than returning a partial one.

The metrics bundle is computed once and every tier's checklist is
evaluated against it (see services/requirements.py).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from cert_engine.core.metrics import PROGRESS_COMPUTATIONS
from cert_engine.models.activity import (
    EXAMINER_MODE,
    AdvocateProfile,
    ContributionRecord,
    FeedbackRecord,
    ParticipationRecord,
    SavedAuthorityRecord,
    ScoredSession,
    TournamentEntry,
)
from cert_engine.models.credential import Credential
from cert_engine.models.progress import ActivityMetrics, ProgressReport, TierProgress
from cert_engine.models.requirement import RequirementProfile
from cert_engine.models.skills import DIMENSIONS
from cert_engine.repos.activity_repo import ActivityRepo
from cert_engine.repos.credential_repo import CredentialRepo
from cert_engine.services import catalog, requirements
from cert_engine.services.errors import ProfileNotFound
from cert_engine.services.skill_snapshot import dimension_averages, round_half_up

logger = logging.getLogger(__name__)


def scored_sessions(sessions: Sequence[ScoredSession]) -> list[ScoredSession]:
    """Completed sessions that received an overall score."""
    return [s for s in sessions if s.is_scored]


def compute_metrics(
    profile: AdvocateProfile,
    scored: Sequence[ScoredSession],
    participation: Sequence[ParticipationRecord],
    tournaments: Sequence[TournamentEntry],
    contributions: Sequence[ContributionRecord],
    feedback: Sequence[FeedbackRecord],
    authorities: Sequence[SavedAuthorityRecord],
) -> ActivityMetrics:
    total = len(scored)
    average = (
        round_half_up(sum(s.overall_score or 0 for s in scored) / total) if total else 0
    )
    averages = dimension_averages(scored)

    return ActivityMetrics(
        total_sessions=total,
        average_score=average,
        # dict.fromkeys keeps first-seen order while de-duplicating
        areas_of_law=tuple(dict.fromkeys(s.area_of_law for s in scored)),
        dimension_averages=averages or dict.fromkeys(DIMENSIONS, 0),
        has_dimension_data=averages is not None,
        group_moots=sum(1 for p in participation if p.attended),
        portfolio_saves=sum(1 for s in scored if s.saved_to_portfolio),
        has_tournament=len(tournaments) > 0,
        has_contribution=len(contributions) > 0,
        peer_feedback=sum(1 for f in feedback if not f.is_ai_feedback),
        research_saves=len(authorities),
        streak_days=profile.streak_days,
        timed_assessments=sum(1 for s in scored if s.mode == EXAMINER_MODE),
    )


async def load_activity(
    activity_repo: ActivityRepo, profile: AdvocateProfile
) -> tuple[ActivityMetrics, list[ScoredSession]]:
    """Fetch every record type for the profile and fold it into metrics.

    Awaited one after another: an AsyncSession cannot run concurrent queries.
    """
    scored = scored_sessions(await activity_repo.list_sessions(profile.id))
    metrics = compute_metrics(
        profile,
        scored,
        await activity_repo.list_participation(profile.id),
        await activity_repo.list_tournament_entries(profile.id),
        await activity_repo.list_contributions(profile.id),
        await activity_repo.list_feedback_received(profile.id),
        await activity_repo.list_saved_authorities(profile.id),
    )
    return metrics, scored


def _existing_credential(
    credentials: Sequence[Credential], tier_key: str
) -> Credential | None:
    for_tier = [c for c in credentials if c.tier == tier_key]
    issued = [c for c in for_tier if c.is_issued]
    if issued:
        return issued[0]
    return for_tier[-1] if for_tier else None


def evaluate_tier(
    tier: RequirementProfile,
    metrics: ActivityMetrics,
    credential: Credential | None = None,
) -> TierProgress:
    checks = requirements.evaluate(tier, metrics)
    completed = sum(1 for c in checks if c.satisfied)
    total = len(checks)

    return TierProgress(
        tier=tier.key,
        name=tier.name,
        short_name=tier.short_name,
        description=tier.description,
        color=tier.color,
        price=tier.price,
        checks=checks,
        completed_count=completed,
        total_count=total,
        percent_complete=round_half_up(completed / total * 100) if total else 100,
        all_requirements_met=completed == total,
        skill_snapshot=(
            dict(metrics.dimension_averages) if metrics.has_dimension_data else None
        ),
        areas_of_law=metrics.areas_of_law,
        credential=credential,
    )


def build_report(
    profile: AdvocateProfile,
    metrics: ActivityMetrics,
    credentials: Sequence[Credential] = (),
) -> ProgressReport:
    return ProgressReport(
        profile_id=profile.id,
        profile_name=profile.full_name,
        tiers=tuple(
            evaluate_tier(tier, metrics, _existing_credential(credentials, tier.key))
            for tier in catalog.list_all()
        ),
    )


async def get_profile(activity_repo: ActivityRepo, user_id: str) -> AdvocateProfile:
    profile = await activity_repo.get_profile_by_user(user_id)
    if profile is None:
        # "Never joined" is distinct from "joined but inactive" (a zeroed report)
        logger.info("No activity profile for user=%s", user_id)
        raise ProfileNotFound()
    return profile


async def get_progress(
    activity_repo: ActivityRepo,
    credential_repo: CredentialRepo,
    user_id: str,
) -> ProgressReport:
    """Compute the subject's progress towards every tier, in catalog order.

    Raises ProfileNotFound when the subject has no activity profile.
    """
    with PROGRESS_COMPUTATIONS.time():
        profile = await get_profile(activity_repo, user_id)
        metrics, _ = await load_activity(activity_repo, profile)
        credentials = await credential_repo.list_by_profile(profile.id)
        report = build_report(profile, metrics, credentials)

    logger.debug(
        "Progress computed profile=%s sessions=%d met=%s",
        profile.id,
        metrics.total_sessions,
        [t.tier for t in report.tiers if t.all_requirements_met],
    )
    return report
