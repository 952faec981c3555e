"""Unit tests for the Postgres repo pieces that need no live database."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from cert_engine.db.tables import CertificateRow
from cert_engine.repos.pg_credential_repo import _translate_integrity_error
from cert_engine.services.errors import DuplicateIssuance, PersistenceConflict


def _integrity_error(constraint: str) -> IntegrityError:
    orig = Exception(
        f'duplicate key value violates unique constraint "{constraint}"'
    )
    return IntegrityError("INSERT INTO certificates ...", {}, orig)


def test_issued_per_tier_violation_is_duplicate_issuance() -> None:
    err = _translate_integrity_error(
        _integrity_error("uq_certificates_issued_profile_tier")
    )
    assert isinstance(err, DuplicateIssuance)


@pytest.mark.parametrize(
    ("constraint", "field"),
    [
        ("uq_certificates_verification_code", "verification_code"),
        ("uq_certificates_credential_number", "credential_number"),
    ],
)
def test_identifier_violations_name_the_field(constraint: str, field: str) -> None:
    err = _translate_integrity_error(_integrity_error(constraint))
    assert isinstance(err, PersistenceConflict)
    assert err.field == field


def test_unrecognised_violation_is_passed_through() -> None:
    original = _integrity_error("fk_something_else")
    assert _translate_integrity_error(original) is original


def test_certificates_table_declares_uniqueness() -> None:
    table = CertificateRow.__table__
    unique_names = {c.name for c in table.constraints if c.name}
    assert "uq_certificates_verification_code" in unique_names
    assert "uq_certificates_credential_number" in unique_names

    [partial] = [
        i for i in table.indexes if i.name == "uq_certificates_issued_profile_tier"
    ]
    assert partial.unique
    assert partial.dialect_options["postgresql"]["where"] is not None
