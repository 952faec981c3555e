from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from uuid import UUID, uuid4

CredentialStatus = Literal["issued", "revoked"]
PaymentStatus = Literal["paid", "included_in_subscription"]

PAYMENT_STATUSES: tuple[str, ...] = ("paid", "included_in_subscription")


@dataclass(frozen=True, slots=True)
class Credential:
    """An issued certificate.  Append-only: created once, never updated.

    The skills snapshot is frozen at issue time so later practice does not
    change what a verifier sees.  "revoked" is reserved; nothing in this
    service sets it yet.
    """

    id: UUID
    profile_id: UUID
    tier: str
    issued_at: datetime
    credential_number: str
    verification_code: str
    overall_average: int
    total_sessions: int
    areas_of_law: tuple[str, ...]
    strengths: tuple[str, ...]
    improvements: tuple[str, ...]
    payment_status: PaymentStatus
    skills_snapshot: dict[str, int] | None = None
    payment_reference: str | None = None
    status: CredentialStatus = "issued"

    @property
    def is_issued(self) -> bool:
        return self.status == "issued"

    @staticmethod
    def new(
        *,
        profile_id: UUID,
        tier: str,
        issued_at: datetime,
        credential_number: str,
        verification_code: str,
        overall_average: int,
        total_sessions: int,
        areas_of_law: tuple[str, ...],
        strengths: tuple[str, ...],
        improvements: tuple[str, ...],
        payment_status: PaymentStatus,
        skills_snapshot: dict[str, int] | None = None,
        payment_reference: str | None = None,
    ) -> Credential:
        return Credential(
            id=uuid4(),
            profile_id=profile_id,
            tier=tier,
            issued_at=issued_at,
            credential_number=credential_number,
            verification_code=verification_code,
            overall_average=overall_average,
            total_sessions=total_sessions,
            areas_of_law=areas_of_law,
            strengths=strengths,
            improvements=improvements,
            payment_status=payment_status,
            skills_snapshot=skills_snapshot,
            payment_reference=payment_reference,
        )


@dataclass(frozen=True, slots=True)
class IssuedCredential:
    """What a successful claim hands back to the caller."""

    credential_id: UUID
    credential_number: str
    verification_code: str


@dataclass(frozen=True, slots=True)
class PublicCredentialView:
    """The only shape of a credential exposed to unauthenticated verifiers.

    Deliberately has no ids, payment fields or contact details.
    """

    credential_number: str
    tier: str
    tier_name: str
    issued_at: datetime
    recipient_name: str
    recipient_institution: str | None
    skills_snapshot: dict[str, int] | None
    overall_average: int
    total_sessions: int
    areas_of_law: tuple[str, ...]
    strengths: tuple[str, ...]
    improvements: tuple[str, ...]
