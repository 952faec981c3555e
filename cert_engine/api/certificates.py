"""Certificate tiers, progress, claims and public verification.

- GET  /v1/certificates/tiers               — public tier catalog
- GET  /v1/certificates/tiers/{tier_key}    — one tier with its checklist
- GET  /v1/certificates/progress            — caller's progress per tier
- POST /v1/certificates/{tier_key}/claim    — issue a credential (201)
- GET  /v1/certificates/mine                — caller's credentials
- GET  /v1/certificates/verify/{code}       — public verification

Domain errors (CertificationError) propagate out of the handlers and are
rendered by the exception handler in main.py.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from cert_engine.api.dependencies import (
    get_activity_repo,
    get_credential_repo,
    get_credential_sequence,
    require_user,
)
from cert_engine.api.ratelimit import require_rate_limit
from cert_engine.models.credential import Credential
from cert_engine.models.principal import Principal
from cert_engine.models.progress import TierProgress
from cert_engine.models.requirement import RequirementProfile
from cert_engine.repos.activity_repo import ActivityRepo
from cert_engine.repos.credential_repo import CredentialRepo
from cert_engine.repos.credential_sequence import CredentialSequence
from cert_engine.services import (
    catalog,
    issuance_service,
    progress_service,
    requirements,
    verification_service,
)
from cert_engine.services.rate_limiter import CLAIM_LIMIT, VERIFY_LIMIT

router = APIRouter(prefix="/v1/certificates", tags=["certificates"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class TierSummaryOut(BaseModel):
    key: str
    name: str
    short_name: str
    description: str
    price: int
    color: str
    requirements: list[str]


class TierDetailOut(TierSummaryOut):
    checklist: list[str]
    min_scored_sessions: int
    min_average_score: int
    min_group_moots: int
    min_areas_of_law: int
    min_portfolio_saves: int
    min_dimension_score: int
    min_dimensions_above: int
    requires_tournament_entry: bool
    requires_contribution: bool
    min_streak_days: int
    requires_timed_assessment: bool
    min_peer_feedback: int
    min_research_saves: int


class CheckOut(BaseModel):
    label: str
    satisfied: bool
    current: int
    target: int


class CredentialOut(BaseModel):
    id: str
    tier: str
    status: str
    issued_at: datetime
    credential_number: str
    verification_code: str
    overall_average: int
    total_sessions: int
    areas_of_law: list[str]
    strengths: list[str]
    improvements: list[str]
    skills_snapshot: dict[str, int] | None
    payment_status: str


class TierProgressOut(BaseModel):
    tier: str
    name: str
    short_name: str
    description: str
    color: str
    price: int
    checks: list[CheckOut]
    completed_count: int
    total_count: int
    percent_complete: int
    all_requirements_met: bool
    skill_snapshot: dict[str, int] | None
    areas_of_law: list[str]
    credential: CredentialOut | None


class ProgressOut(BaseModel):
    profile_id: str
    profile_name: str
    tiers: list[TierProgressOut]


class ClaimIn(BaseModel):
    payment_status: Literal["paid", "included_in_subscription"]
    payment_reference: str | None = None


class ClaimOut(BaseModel):
    credential_id: str
    credential_number: str
    verification_code: str


class VerificationOut(BaseModel):
    valid: bool
    credential_number: str
    tier: str
    tier_name: str
    issued_at: datetime
    recipient_name: str
    recipient_institution: str | None
    skills_snapshot: dict[str, int] | None
    overall_average: int
    total_sessions: int
    areas_of_law: list[str]
    strengths: list[str]
    improvements: list[str]


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------


def _tier_summary(tier: RequirementProfile) -> TierSummaryOut:
    return TierSummaryOut(
        key=tier.key,
        name=tier.name,
        short_name=tier.short_name,
        description=tier.description,
        price=tier.price,
        color=tier.color,
        requirements=catalog.requirements_summary(tier),
    )


def _credential_out(c: Credential) -> CredentialOut:
    return CredentialOut(
        id=str(c.id),
        tier=c.tier,
        status=c.status,
        issued_at=c.issued_at,
        credential_number=c.credential_number,
        verification_code=c.verification_code,
        overall_average=c.overall_average,
        total_sessions=c.total_sessions,
        areas_of_law=list(c.areas_of_law),
        strengths=list(c.strengths),
        improvements=list(c.improvements),
        skills_snapshot=c.skills_snapshot,
        payment_status=c.payment_status,
    )


def _tier_progress_out(t: TierProgress) -> TierProgressOut:
    return TierProgressOut(
        tier=t.tier,
        name=t.name,
        short_name=t.short_name,
        description=t.description,
        color=t.color,
        price=t.price,
        checks=[
            CheckOut(
                label=c.label, satisfied=c.satisfied, current=c.current, target=c.target
            )
            for c in t.checks
        ],
        completed_count=t.completed_count,
        total_count=t.total_count,
        percent_complete=t.percent_complete,
        all_requirements_met=t.all_requirements_met,
        skill_snapshot=t.skill_snapshot,
        areas_of_law=list(t.areas_of_law),
        credential=_credential_out(t.credential) if t.credential else None,
    )


# ---------------------------------------------------------------------------
# Public catalog
# ---------------------------------------------------------------------------


@router.get("/tiers", response_model=list[TierSummaryOut])
async def list_tiers() -> list[TierSummaryOut]:
    return [_tier_summary(t) for t in catalog.list_all()]


@router.get("/tiers/{tier_key}", response_model=TierDetailOut)
async def get_tier(tier_key: str) -> TierDetailOut:
    tier = catalog.lookup(tier_key)
    return TierDetailOut(
        **_tier_summary(tier).model_dump(),
        checklist=[r.label for r in requirements.build_checklist(tier)],
        min_scored_sessions=tier.min_scored_sessions,
        min_average_score=tier.min_average_score,
        min_group_moots=tier.min_group_moots,
        min_areas_of_law=tier.min_areas_of_law,
        min_portfolio_saves=tier.min_portfolio_saves,
        min_dimension_score=tier.min_dimension_score,
        min_dimensions_above=tier.min_dimensions_above,
        requires_tournament_entry=tier.requires_tournament_entry,
        requires_contribution=tier.requires_contribution,
        min_streak_days=tier.min_streak_days,
        requires_timed_assessment=tier.requires_timed_assessment,
        min_peer_feedback=tier.min_peer_feedback,
        min_research_saves=tier.min_research_saves,
    )


# ---------------------------------------------------------------------------
# Authenticated
# ---------------------------------------------------------------------------


@router.get("/progress", response_model=ProgressOut)
async def get_progress(
    principal: Annotated[Principal, Depends(require_user)],
    activity: Annotated[ActivityRepo, Depends(get_activity_repo)],
    credentials: Annotated[CredentialRepo, Depends(get_credential_repo)],
) -> ProgressOut:
    report = await progress_service.get_progress(
        activity, credentials, principal.user_id
    )
    return ProgressOut(
        profile_id=str(report.profile_id),
        profile_name=report.profile_name,
        tiers=[_tier_progress_out(t) for t in report.tiers],
    )


@router.post(
    "/{tier_key}/claim",
    response_model=ClaimOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_rate_limit(CLAIM_LIMIT))],
)
async def claim_certificate(
    tier_key: str,
    body: ClaimIn,
    principal: Annotated[Principal, Depends(require_user)],
    activity: Annotated[ActivityRepo, Depends(get_activity_repo)],
    credentials: Annotated[CredentialRepo, Depends(get_credential_repo)],
    sequence: Annotated[CredentialSequence, Depends(get_credential_sequence)],
) -> ClaimOut:
    issued = await issuance_service.claim(
        activity,
        credentials,
        sequence,
        user_id=principal.user_id,
        tier_key=tier_key,
        payment_status=body.payment_status,
        payment_reference=body.payment_reference,
    )
    return ClaimOut(
        credential_id=str(issued.credential_id),
        credential_number=issued.credential_number,
        verification_code=issued.verification_code,
    )


@router.get("/mine", response_model=list[CredentialOut])
async def list_my_credentials(
    principal: Annotated[Principal, Depends(require_user)],
    activity: Annotated[ActivityRepo, Depends(get_activity_repo)],
    credentials: Annotated[CredentialRepo, Depends(get_credential_repo)],
) -> list[CredentialOut]:
    profile = await progress_service.get_profile(activity, principal.user_id)
    return [_credential_out(c) for c in await credentials.list_by_profile(profile.id)]


# ---------------------------------------------------------------------------
# Public verification
# ---------------------------------------------------------------------------


@router.get(
    "/verify/{code}",
    response_model=VerificationOut,
    dependencies=[Depends(require_rate_limit(VERIFY_LIMIT, by="ip"))],
)
async def verify_credential(
    code: str,
    activity: Annotated[ActivityRepo, Depends(get_activity_repo)],
    credentials: Annotated[CredentialRepo, Depends(get_credential_repo)],
) -> VerificationOut:
    view = await verification_service.verify(credentials, activity, code)
    if view is None:
        # Same answer for unknown, malformed and revoked codes
        raise HTTPException(status_code=404, detail="credential not found")

    return VerificationOut(
        valid=True,
        credential_number=view.credential_number,
        tier=view.tier,
        tier_name=view.tier_name,
        issued_at=view.issued_at,
        recipient_name=view.recipient_name,
        recipient_institution=view.recipient_institution,
        skills_snapshot=view.skills_snapshot,
        overall_average=view.overall_average,
        total_sessions=view.total_sessions,
        areas_of_law=list(view.areas_of_law),
        strengths=list(view.strengths),
        improvements=list(view.improvements),
    )
