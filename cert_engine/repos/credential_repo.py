from __future__ import annotations

import threading
from typing import Protocol
from uuid import UUID

from cert_engine.models.credential import Credential
from cert_engine.services.errors import DuplicateIssuance, PersistenceConflict


class CredentialRepo(Protocol):
    """Append-only credential store.

    insert() is insert-if-absent: it must enforce, atomically and at the
    storage level,
      - one status=issued credential per (profile_id, tier)  → DuplicateIssuance
      - unique verification_code                              → PersistenceConflict
      - unique credential_number                              → PersistenceConflict
    Callers never pre-check uniqueness; they attempt the insert and react.
    """

    async def insert(self, credential: Credential) -> None: ...
    async def get_by_verification_code(self, code: str) -> Credential | None: ...
    async def list_by_profile(self, profile_id: UUID) -> list[Credential]: ...


class InMemoryCredentialRepo:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[UUID, Credential] = {}
        self._by_code: dict[str, UUID] = {}
        self._by_number: dict[str, UUID] = {}
        self._issued: dict[tuple[UUID, str], UUID] = {}

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
            self._by_code.clear()
            self._by_number.clear()
            self._issued.clear()

    async def insert(self, credential: Credential) -> None:
        # Check-and-write under one lock; this is the in-memory stand-in
        # for the partial unique index the Postgres table carries.
        issued_key = (credential.profile_id, credential.tier)
        with self._lock:
            if credential.is_issued and issued_key in self._issued:
                raise DuplicateIssuance()
            if credential.verification_code in self._by_code:
                raise PersistenceConflict("verification_code")
            if credential.credential_number in self._by_number:
                raise PersistenceConflict("credential_number")

            self._by_id[credential.id] = credential
            self._by_code[credential.verification_code] = credential.id
            self._by_number[credential.credential_number] = credential.id
            if credential.is_issued:
                self._issued[issued_key] = credential.id

    async def get_by_verification_code(self, code: str) -> Credential | None:
        credential_id = self._by_code.get(code)
        return self._by_id.get(credential_id) if credential_id else None

    async def list_by_profile(self, profile_id: UUID) -> list[Credential]:
        return sorted(
            (c for c in self._by_id.values() if c.profile_id == profile_id),
            key=lambda c: c.issued_at,
        )

    def all(self) -> list[Credential]:
        return list(self._by_id.values())
