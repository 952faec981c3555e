"""PostgreSQL implementations of CredentialRepo and CredentialSequence.

Uniqueness lives in the certificates table (see db/tables.py):

  uq_certificates_issued_profile_tier  partial unique index WHERE status='issued'
  uq_certificates_verification_code    unique
  uq_certificates_credential_number    unique

insert() runs inside a SAVEPOINT so a violation rolls back only the failed
row and the claim's transaction stays usable for the retry.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cert_engine.db.tables import (
    UQ_CREDENTIAL_NUMBER,
    UQ_ISSUED_PER_TIER,
    UQ_VERIFICATION_CODE,
    CertificateRow,
    CredentialSequenceRow,
)
from cert_engine.models.credential import Credential
from cert_engine.services.errors import DuplicateIssuance, PersistenceConflict

logger = logging.getLogger(__name__)


class PgCredentialRepo:
    """Satisfies the CredentialRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert(self, credential: Credential) -> None:
        row = CertificateRow(
            id=credential.id,
            profile_id=credential.profile_id,
            tier=credential.tier,
            status=credential.status,
            issued_at=credential.issued_at,
            credential_number=credential.credential_number,
            verification_code=credential.verification_code,
            overall_average=credential.overall_average,
            total_sessions=credential.total_sessions,
            areas_of_law=list(credential.areas_of_law),
            strengths=list(credential.strengths),
            improvements=list(credential.improvements),
            skills_snapshot=(
                dict(credential.skills_snapshot)
                if credential.skills_snapshot
                else None
            ),
            payment_status=credential.payment_status,
            payment_reference=credential.payment_reference,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except IntegrityError as exc:
            raise _translate_integrity_error(exc) from exc

    async def get_by_verification_code(self, code: str) -> Credential | None:
        stmt = select(CertificateRow).where(CertificateRow.verification_code == code)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_credential(row)

    async def list_by_profile(self, profile_id: UUID) -> list[Credential]:
        stmt = (
            select(CertificateRow)
            .where(CertificateRow.profile_id == profile_id)
            .order_by(CertificateRow.issued_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_credential(r) for r in rows]


class PgCredentialSequence:
    """Counter row per year, bumped with a single upsert ... RETURNING.

    The row lock taken by the upsert is held until the claim transaction
    ends, so concurrent claims in the same year serialize here and a
    rolled-back claim gives its number back.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def next_value(self, year: int) -> int:
        stmt = (
            pg_insert(CredentialSequenceRow)
            .values(year=year, last_value=1)
            .on_conflict_do_update(
                index_elements=[CredentialSequenceRow.year],
                set_={"last_value": CredentialSequenceRow.last_value + 1},
            )
            .returning(CredentialSequenceRow.last_value)
        )
        return int((await self._session.execute(stmt)).scalar_one())


def _translate_integrity_error(exc: IntegrityError) -> Exception:
    """Map a unique violation to the domain error for the constraint hit."""
    constraint = getattr(getattr(exc.orig, "__cause__", None), "constraint_name", None)
    message = constraint or str(exc.orig)

    if UQ_ISSUED_PER_TIER in message:
        return DuplicateIssuance()
    if UQ_VERIFICATION_CODE in message:
        return PersistenceConflict("verification_code")
    if UQ_CREDENTIAL_NUMBER in message:
        return PersistenceConflict("credential_number")

    logger.error("Unexpected integrity error on certificate insert: %s", exc.orig)
    return exc


def _row_to_credential(row: CertificateRow) -> Credential:
    return Credential(
        id=row.id,
        profile_id=row.profile_id,
        tier=row.tier,
        issued_at=row.issued_at,
        credential_number=row.credential_number,
        verification_code=row.verification_code,
        overall_average=row.overall_average,
        total_sessions=row.total_sessions,
        areas_of_law=tuple(row.areas_of_law or ()),
        strengths=tuple(row.strengths or ()),
        improvements=tuple(row.improvements or ()),
        payment_status=row.payment_status,  # type: ignore[arg-type]
        skills_snapshot=dict(row.skills_snapshot) if row.skills_snapshot else None,
        payment_reference=row.payment_reference,
        status=row.status,  # type: ignore[arg-type]
    )
