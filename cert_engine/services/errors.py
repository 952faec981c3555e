"""Error taxonomy for eligibility and issuance.

Every failure the certification core can surface is a CertificationError
with a stable ``kind`` so callers (the HTTP layer, an admin CLI) can render
an exact message without string-matching.  The API layer maps ``status_code``
straight onto the response.
"""

from __future__ import annotations

from collections.abc import Sequence


class CertificationError(Exception):
    kind = "certification_error"
    status_code = 400
    message = "Certification request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class NotAuthenticated(CertificationError):
    kind = "not_authenticated"
    status_code = 401
    message = "Not authenticated"


class ProfileNotFound(CertificationError):
    kind = "profile_not_found"
    status_code = 404
    message = "Profile not found"


class InvalidTier(CertificationError):
    kind = "invalid_tier"
    status_code = 404
    message = "Unknown certificate tier"

    def __init__(self, tier_key: str) -> None:
        super().__init__(f"Unknown certificate tier: {tier_key!r}")
        self.tier_key = tier_key


class AlreadyIssued(CertificationError):
    kind = "already_issued"
    status_code = 409
    message = "Certificate already issued for this level"


class RequirementsNotMet(CertificationError):
    kind = "requirements_not_met"
    status_code = 422
    message = "Requirements not met for this level"

    def __init__(self, unmet: Sequence[str]) -> None:
        super().__init__()
        self.unmet = list(unmet)


class PersistenceConflict(CertificationError):
    """A unique identifier collided in the credential store.

    Raised by repositories, retried inside the issuance service and never
    returned to a caller directly.
    """

    kind = "persistence_conflict"
    status_code = 409
    message = "Identifier conflict"

    def __init__(self, field: str) -> None:
        super().__init__(f"Identifier conflict on {field}")
        self.field = field


class DuplicateIssuance(CertificationError):
    """Store-level signal: (profile, tier) already holds an issued credential."""

    kind = "already_issued"
    status_code = 409
    message = AlreadyIssued.message


class InternalError(CertificationError):
    kind = "internal_error"
    status_code = 500
    message = "Could not allocate credential identifiers"
