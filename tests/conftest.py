from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from cert_engine.api.dependencies import (
    activity_repo,
    credential_repo,
    credential_sequence,
)
from cert_engine.api.ratelimit import rate_limiter
from cert_engine.main import app
from cert_engine.models.activity import (
    AdvocateProfile,
    ParticipationRecord,
    ScoredSession,
)
from cert_engine.models.skills import DIMENSIONS
from cert_engine.services import token_service

# Ensure repo root is on sys.path so `import cert_engine` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

E2E_SCORES = (40, 50, 60, 70, 80, 90)


@pytest.fixture(autouse=True)
def reset_activity_state() -> None:
    activity_repo.clear()


@pytest.fixture(autouse=True)
def reset_credential_state() -> None:
    """Clear issued credentials and the number sequence between tests."""
    credential_repo.clear()
    if hasattr(credential_sequence, "clear"):
        credential_sequence.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets between tests so limits don't bleed."""
    if hasattr(rate_limiter, "clear"):
        rate_limiter.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth_headers(username: str = "test-user") -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(username)}"}


@pytest.fixture
def token() -> str:
    return mint_token()


# ---------------------------------------------------------------------------
# Activity helpers (write to the in-memory store the API uses)
# ---------------------------------------------------------------------------


def seed_profile(
    user_id: str = "test-user",
    full_name: str = "Ada Advocate",
    institution: str | None = "City Law School",
    streak_days: int = 0,
) -> AdvocateProfile:
    profile = AdvocateProfile.new(
        user_id=user_id,
        full_name=full_name,
        institution=institution,
        email=f"{user_id}@example.com",
        streak_days=streak_days,
    )
    activity_repo.add_profile(profile)
    return profile


def all_dimensions(score: int) -> dict[str, int]:
    return dict.fromkeys(DIMENSIONS, score)


def add_sessions(
    profile: AdvocateProfile,
    scores: Sequence[int],
    area_of_law: str = "Contract",
    *,
    with_dimensions: bool = True,
    **kwargs,
) -> list[ScoredSession]:
    sessions = []
    for score in scores:
        session = ScoredSession.new(
            profile_id=profile.id,
            area_of_law=area_of_law,
            overall_score=score,
            dimension_scores=all_dimensions(score) if with_dimensions else None,
            **kwargs,
        )
        activity_repo.add_session(session)
        sessions.append(session)
    return sessions


def add_group_moots(profile: AdvocateProfile, count: int = 1) -> None:
    for _ in range(count):
        activity_repo.add_participation(
            ParticipationRecord(
                profile_id=profile.id, session_id=uuid4(), attended=True
            )
        )


def make_foundation_eligible(user_id: str = "test-user") -> AdvocateProfile:
    """Six scored Contract sessions averaging 65 plus one attended moot."""
    profile = seed_profile(user_id=user_id)
    add_sessions(profile, E2E_SCORES)
    add_group_moots(profile, 1)
    return profile
