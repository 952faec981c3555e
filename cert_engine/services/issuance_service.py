"""Claim-to-credential conversion.

A claim is accepted only when a fresh aggregator run says every requirement
of the tier is met.  The client-side progress screen is never trusted, and
there is no staff override path.

Issuance order:
  1. resolve tier and profile, reject if an issued credential exists
  2. re-evaluate the tier against fresh activity → RequirementsNotMet
  3. freeze the skill snapshot from the scored sessions
  4. take the next number from the shared year-bucketed sequence
  5. roll a verification code and attempt the insert

Step 5 is generate → insert → retry.  Uniqueness of the code, of the
number and of "one issued credential per (profile, tier)" is enforced by
the store itself; the pre-check in step 1 only saves work in the common
case.  Two concurrent claims can both pass it, and the loser gets
DuplicateIssuance from the store, surfaced as AlreadyIssued.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from cert_engine.core.config import SETTINGS
from cert_engine.core.metrics import (
    CLAIMS_REJECTED,
    CREDENTIALS_ISSUED,
    IDENTIFIER_CONFLICTS,
)
from cert_engine.models.credential import (
    PAYMENT_STATUSES,
    Credential,
    IssuedCredential,
    PaymentStatus,
)
from cert_engine.repos.activity_repo import ActivityRepo
from cert_engine.repos.credential_repo import CredentialRepo
from cert_engine.repos.credential_sequence import CredentialSequence
from cert_engine.services import catalog, progress_service
from cert_engine.services.errors import (
    AlreadyIssued,
    CertificationError,
    DuplicateIssuance,
    InternalError,
    PersistenceConflict,
    RequirementsNotMet,
)
from cert_engine.services.identifiers import (
    format_credential_number,
    generate_verification_code,
)
from cert_engine.services.skill_snapshot import build_skill_snapshot

logger = logging.getLogger(__name__)


async def claim(
    activity_repo: ActivityRepo,
    credential_repo: CredentialRepo,
    sequence: CredentialSequence,
    *,
    user_id: str,
    tier_key: str,
    payment_status: PaymentStatus,
    payment_reference: str | None = None,
    now: datetime | None = None,
    number_prefix: str | None = None,
    max_attempts: int | None = None,
    code_factory: Callable[[], str] = generate_verification_code,
) -> IssuedCredential:
    """Issue the `tier_key` credential to `user_id`.

    Raises InvalidTier, ProfileNotFound, AlreadyIssued, RequirementsNotMet,
    or InternalError when identifiers could not be allocated within
    `max_attempts` inserts.
    """
    try:
        return await _claim(
            activity_repo,
            credential_repo,
            sequence,
            user_id=user_id,
            tier_key=tier_key,
            payment_status=payment_status,
            payment_reference=payment_reference,
            now=now or datetime.now(UTC),
            number_prefix=number_prefix or SETTINGS.credential_number_prefix,
            max_attempts=max_attempts or SETTINGS.issuance_max_attempts,
            code_factory=code_factory,
        )
    except CertificationError as exc:
        CLAIMS_REJECTED.labels(reason=exc.kind).inc()
        logger.warning(
            "Claim rejected user=%s tier=%s kind=%s", user_id, tier_key, exc.kind
        )
        raise


async def _claim(
    activity_repo: ActivityRepo,
    credential_repo: CredentialRepo,
    sequence: CredentialSequence,
    *,
    user_id: str,
    tier_key: str,
    payment_status: PaymentStatus,
    payment_reference: str | None,
    now: datetime,
    number_prefix: str,
    max_attempts: int,
    code_factory: Callable[[], str],
) -> IssuedCredential:
    tier = catalog.lookup(tier_key)
    if payment_status not in PAYMENT_STATUSES:
        raise ValueError(f"unsupported payment_status {payment_status!r}")

    profile = await progress_service.get_profile(activity_repo, user_id)

    existing = await credential_repo.list_by_profile(profile.id)
    if any(c.tier == tier.key and c.is_issued for c in existing):
        raise AlreadyIssued()

    metrics, scored = await progress_service.load_activity(activity_repo, profile)
    progress = progress_service.evaluate_tier(tier, metrics)
    if not progress.all_requirements_met:
        raise RequirementsNotMet(progress.unmet_labels)

    snapshot = build_skill_snapshot(scored)
    year = now.year

    async def next_number() -> str:
        return format_credential_number(
            number_prefix, year, await sequence.next_value(year)
        )

    credential_number = await next_number()
    for attempt in range(1, max_attempts + 1):
        credential = Credential.new(
            profile_id=profile.id,
            tier=tier.key,
            issued_at=now,
            credential_number=credential_number,
            verification_code=code_factory(),
            overall_average=metrics.average_score,
            total_sessions=metrics.total_sessions,
            areas_of_law=metrics.areas_of_law,
            strengths=snapshot.strengths,
            improvements=snapshot.improvements,
            payment_status=payment_status,
            skills_snapshot=snapshot.averages,
            payment_reference=payment_reference,
        )
        try:
            await credential_repo.insert(credential)
        except DuplicateIssuance:
            raise AlreadyIssued() from None
        except PersistenceConflict as exc:
            IDENTIFIER_CONFLICTS.labels(field=exc.field).inc()
            logger.warning(
                "Identifier conflict on %s (attempt %d/%d)",
                exc.field,
                attempt,
                max_attempts,
            )
            if exc.field == "credential_number":
                credential_number = await next_number()
            continue

        CREDENTIALS_ISSUED.labels(tier=tier.key).inc()
        logger.info(
            "Credential issued profile=%s tier=%s number=%s payment=%s",
            profile.id,
            tier.key,
            credential.credential_number,
            payment_status,
            extra={"tier": tier.key, "credential_number": credential_number},
        )
        return IssuedCredential(
            credential_id=credential.id,
            credential_number=credential.credential_number,
            verification_code=credential.verification_code,
        )

    logger.error(
        "Gave up allocating identifiers user=%s tier=%s after %d attempts",
        user_id,
        tier.key,
        max_attempts,
    )
    raise InternalError()
