from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from cert_engine.api.dependencies import (
    activity_repo,
    credential_repo,
    credential_sequence,
)
from cert_engine.repos.credential_sequence import InMemoryCredentialSequence
from cert_engine.services import issuance_service
from cert_engine.services.errors import (
    AlreadyIssued,
    InternalError,
    InvalidTier,
    ProfileNotFound,
    RequirementsNotMet,
)
from cert_engine.services.identifiers import CODE_PATTERN
from tests.conftest import add_sessions, make_foundation_eligible, seed_profile

NOW = datetime(2026, 3, 14, 12, 0, tzinfo=UTC)


def _claim(user_id: str = "test-user", tier_key: str = "foundation", **kwargs):
    kwargs.setdefault("payment_status", "included_in_subscription")
    kwargs.setdefault("now", NOW)
    kwargs.setdefault("sequence", credential_sequence)
    sequence = kwargs.pop("sequence")
    return issuance_service.claim(
        activity_repo,
        credential_repo,
        sequence,
        user_id=user_id,
        tier_key=tier_key,
        **kwargs,
    )


def _codes(*codes: str):
    it = iter(codes)
    return lambda: next(it)


def test_end_to_end_claim() -> None:
    make_foundation_eligible()
    issued = asyncio.run(_claim())

    assert issued.credential_number == "RATIO-2026-00001"
    assert CODE_PATTERN.match(issued.verification_code)

    [stored] = credential_repo.all()
    assert stored.id == issued.credential_id
    assert stored.status == "issued"
    assert stored.tier == "foundation"
    assert stored.overall_average == 65
    assert stored.total_sessions == 6
    assert stored.areas_of_law == ("Contract",)
    assert stored.payment_status == "included_in_subscription"
    assert stored.skills_snapshot is not None
    assert len(stored.strengths) == 3
    assert len(stored.improvements) == 2


def test_second_claim_is_already_issued() -> None:
    make_foundation_eligible()
    asyncio.run(_claim())
    with pytest.raises(AlreadyIssued) as exc_info:
        asyncio.run(_claim())

    assert str(exc_info.value) == "Certificate already issued for this level"
    assert len(credential_repo.all()) == 1


def test_concurrent_claims_for_same_tier_issue_once() -> None:
    make_foundation_eligible()

    async def race():
        return await asyncio.gather(
            *(_claim() for _ in range(5)), return_exceptions=True
        )

    results = asyncio.run(race())
    issued = [r for r in results if not isinstance(r, BaseException)]
    rejected = [r for r in results if isinstance(r, BaseException)]

    assert len(issued) == 1
    assert all(isinstance(r, AlreadyIssued) for r in rejected)
    assert len(credential_repo.all()) == 1


def test_store_level_duplicate_surfaces_as_already_issued() -> None:
    """A claim that slips past the pre-check is stopped by the store."""
    make_foundation_eligible()
    asyncio.run(_claim())

    class _StalePrecheck:
        # Simulates a concurrent claim that read before the first insert
        def __getattr__(self, name):
            return getattr(credential_repo, name)

        async def list_by_profile(self, profile_id):
            return []

    with pytest.raises(AlreadyIssued):
        asyncio.run(
            issuance_service.claim(
                activity_repo,
                _StalePrecheck(),  # type: ignore[arg-type]
                credential_sequence,
                user_id="test-user",
                tier_key="foundation",
                payment_status="paid",
                now=NOW,
            )
        )
    assert len(credential_repo.all()) == 1


def test_numbers_are_sequential_across_subjects() -> None:
    users = [f"user-{i}" for i in range(5)]
    for user in users:
        make_foundation_eligible(user)

    async def claim_all():
        return await asyncio.gather(*(_claim(u) for u in users))

    numbers = sorted(i.credential_number for i in asyncio.run(claim_all()))
    assert numbers == [f"RATIO-2026-{n:05d}" for n in range(1, 6)]
    codes = {c.verification_code for c in credential_repo.all()}
    assert len(codes) == 5


def test_sequence_restarts_each_year() -> None:
    make_foundation_eligible("a")
    make_foundation_eligible("b")
    asyncio.run(_claim("a"))
    issued = asyncio.run(_claim("b", now=datetime(2027, 1, 1, tzinfo=UTC)))
    assert issued.credential_number == "RATIO-2027-00001"


def test_custom_number_prefix() -> None:
    make_foundation_eligible()
    issued = asyncio.run(_claim(number_prefix="ADVX"))
    assert issued.credential_number == "ADVX-2026-00001"


def test_code_collision_is_retried_with_a_new_code() -> None:
    make_foundation_eligible("a")
    make_foundation_eligible("b")
    asyncio.run(_claim("a", code_factory=_codes("AAAA-AAAA-AAAA")))

    issued = asyncio.run(
        _claim("b", code_factory=_codes("AAAA-AAAA-AAAA", "BBBB-BBBB-BBBB"))
    )
    assert issued.verification_code == "BBBB-BBBB-BBBB"
    assert issued.credential_number == "RATIO-2026-00002"


def test_number_collision_allocates_a_fresh_number() -> None:
    make_foundation_eligible("a")
    make_foundation_eligible("b")
    asyncio.run(_claim("a"))

    # A second counter that starts from scratch collides with 00001 once
    issued = asyncio.run(_claim("b", sequence=InMemoryCredentialSequence()))
    assert issued.credential_number == "RATIO-2026-00002"


def test_gives_up_after_max_attempts() -> None:
    make_foundation_eligible("a")
    make_foundation_eligible("b")
    asyncio.run(_claim("a", code_factory=lambda: "AAAA-AAAA-AAAA"))

    with pytest.raises(InternalError):
        asyncio.run(
            _claim("b", code_factory=lambda: "AAAA-AAAA-AAAA", max_attempts=3)
        )
    assert len(credential_repo.all()) == 1


def test_requirements_not_met_lists_unmet_checks() -> None:
    profile = seed_profile()
    add_sessions(profile, [90, 90])

    with pytest.raises(RequirementsNotMet) as exc_info:
        asyncio.run(_claim())

    assert exc_info.value.unmet == [
        "Complete 5 AI Judge sessions",
        "1 group moot session",
    ]
    assert credential_repo.all() == []


def test_unknown_tier() -> None:
    make_foundation_eligible()
    with pytest.raises(InvalidTier):
        asyncio.run(_claim(tier_key="platinum"))


def test_missing_profile() -> None:
    with pytest.raises(ProfileNotFound):
        asyncio.run(_claim(user_id="ghost"))


def test_unsupported_payment_status() -> None:
    make_foundation_eligible()
    with pytest.raises(ValueError):
        asyncio.run(_claim(payment_status="free"))


def test_issued_snapshot_is_frozen() -> None:
    profile = make_foundation_eligible()
    asyncio.run(_claim())
    add_sessions(profile, [10, 10, 10], area_of_law="Tort")

    [stored] = credential_repo.all()
    assert stored.overall_average == 65
    assert stored.areas_of_law == ("Contract",)


def test_payment_reference_is_kept() -> None:
    make_foundation_eligible()
    asyncio.run(_claim(payment_status="paid", payment_reference="pi_123"))
    [stored] = credential_repo.all()
    assert stored.payment_status == "paid"
    assert stored.payment_reference == "pi_123"
