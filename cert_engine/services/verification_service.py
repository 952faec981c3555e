"""Public credential verification.

Anyone holding a verification code can confirm a credential is genuine.
The answer is either the public view or None, and None is returned for
BOTH an unknown code and a credential that exists but is not issued.
A prober must not be able to tell "revoked" from "never existed".
"""

from __future__ import annotations

import logging

from cert_engine.core.metrics import VERIFICATIONS
from cert_engine.models.credential import PublicCredentialView
from cert_engine.repos.activity_repo import ActivityRepo
from cert_engine.repos.credential_repo import CredentialRepo
from cert_engine.services import catalog
from cert_engine.services.identifiers import (
    is_well_formed_code,
    normalize_verification_code,
)

logger = logging.getLogger(__name__)

UNKNOWN_RECIPIENT = "Unknown"


async def verify(
    credential_repo: CredentialRepo,
    activity_repo: ActivityRepo,
    code: str,
) -> PublicCredentialView | None:
    normalized = normalize_verification_code(code)

    credential = None
    if is_well_formed_code(normalized):
        credential = await credential_repo.get_by_verification_code(normalized)

    if credential is None or not credential.is_issued:
        VERIFICATIONS.labels(result="not_found").inc()
        return None

    profile = await activity_repo.get_profile(credential.profile_id)
    tier_name = (
        catalog.lookup(credential.tier).name
        if catalog.is_known(credential.tier)
        else credential.tier
    )

    VERIFICATIONS.labels(result="valid").inc()
    logger.info("Credential verified number=%s", credential.credential_number)
    return PublicCredentialView(
        credential_number=credential.credential_number,
        tier=credential.tier,
        tier_name=tier_name,
        issued_at=credential.issued_at,
        recipient_name=profile.full_name if profile else UNKNOWN_RECIPIENT,
        recipient_institution=profile.institution if profile else None,
        skills_snapshot=(
            dict(credential.skills_snapshot) if credential.skills_snapshot else None
        ),
        overall_average=credential.overall_average,
        total_sessions=credential.total_sessions,
        areas_of_law=credential.areas_of_law,
        strengths=credential.strengths,
        improvements=credential.improvements,
    )
