from __future__ import annotations

from datetime import UTC, datetime

from fastapi.testclient import TestClient

from cert_engine.services.identifiers import CODE_PATTERN
from tests.conftest import (
    add_sessions,
    auth_headers,
    make_foundation_eligible,
    seed_profile,
)

CLAIM_BODY = {"payment_status": "included_in_subscription"}


def _claim(client: TestClient, tier: str = "foundation", user: str = "test-user"):
    return client.post(
        f"/v1/certificates/{tier}/claim", json=CLAIM_BODY, headers=auth_headers(user)
    )


# ---- tier catalog (public) ----


def test_list_tiers_is_public(client: TestClient) -> None:
    resp = client.get("/v1/certificates/tiers")
    assert resp.status_code == 200
    body = resp.json()
    assert [t["key"] for t in body] == ["foundation", "intermediate", "advanced"]
    assert body[0]["price"] == 2999
    assert body[0]["color"] == "#CD7F32"
    assert body[0]["requirements"][0] == "5 AI sessions"


def test_get_tier_includes_checklist(client: TestClient) -> None:
    resp = client.get("/v1/certificates/tiers/advanced")
    assert resp.status_code == 200
    body = resp.json()
    assert body["min_streak_days"] == 14
    assert body["requires_timed_assessment"] is True
    assert len(body["checklist"]) == 12


def test_get_unknown_tier_is_404(client: TestClient) -> None:
    resp = client.get("/v1/certificates/tiers/platinum")
    assert resp.status_code == 404
    assert resp.json()["kind"] == "invalid_tier"


# ---- progress ----


def test_progress_requires_token(client: TestClient) -> None:
    resp = client.get("/v1/certificates/progress")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


def test_progress_rejects_garbage_token(client: TestClient) -> None:
    resp = client.get(
        "/v1/certificates/progress", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_progress_without_profile_is_404(client: TestClient) -> None:
    resp = client.get("/v1/certificates/progress", headers=auth_headers())
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Profile not found", "kind": "profile_not_found"}


def test_progress_zero_state(client: TestClient) -> None:
    seed_profile()
    resp = client.get("/v1/certificates/progress", headers=auth_headers())
    assert resp.status_code == 200
    foundation = resp.json()["tiers"][0]
    assert foundation["completed_count"] == 0
    assert foundation["total_count"] == 4
    assert foundation["skill_snapshot"] is None


def test_progress_for_eligible_subject(client: TestClient) -> None:
    make_foundation_eligible()
    resp = client.get("/v1/certificates/progress", headers=auth_headers())
    assert resp.status_code == 200
    body = resp.json()
    assert body["profile_name"] == "Ada Advocate"

    foundation = body["tiers"][0]
    assert foundation["all_requirements_met"] is True
    assert foundation["percent_complete"] == 100
    assert foundation["credential"] is None
    assert [c["satisfied"] for c in foundation["checks"]] == [True] * 4


# ---- claim ----


def test_claim_end_to_end(client: TestClient) -> None:
    make_foundation_eligible()
    resp = _claim(client)
    assert resp.status_code == 201
    body = resp.json()
    year = datetime.now(UTC).year
    assert body["credential_number"] == f"RATIO-{year}-00001"
    assert CODE_PATTERN.match(body["verification_code"])

    progress = client.get("/v1/certificates/progress", headers=auth_headers()).json()
    credential = progress["tiers"][0]["credential"]
    assert credential["credential_number"] == body["credential_number"]
    assert credential["status"] == "issued"


def test_second_claim_is_409(client: TestClient) -> None:
    make_foundation_eligible()
    assert _claim(client).status_code == 201

    resp = _claim(client)
    assert resp.status_code == 409
    assert resp.json() == {
        "detail": "Certificate already issued for this level",
        "kind": "already_issued",
    }


def test_claim_when_not_eligible_is_422(client: TestClient) -> None:
    profile = seed_profile()
    add_sessions(profile, [90] * 5)

    resp = _claim(client)
    assert resp.status_code == 422
    body = resp.json()
    assert body["kind"] == "requirements_not_met"
    assert body["unmet"] == ["1 group moot session"]


def test_claim_unknown_tier_is_404(client: TestClient) -> None:
    make_foundation_eligible()
    assert _claim(client, tier="platinum").status_code == 404


def test_claim_rejects_unknown_payment_status(client: TestClient) -> None:
    make_foundation_eligible()
    resp = client.post(
        "/v1/certificates/foundation/claim",
        json={"payment_status": "free"},
        headers=auth_headers(),
    )
    assert resp.status_code == 422


def test_claim_requires_token(client: TestClient) -> None:
    make_foundation_eligible()
    resp = client.post("/v1/certificates/foundation/claim", json=CLAIM_BODY)
    assert resp.status_code == 401


def test_claims_are_rate_limited_per_subject(client: TestClient) -> None:
    seed_profile()
    statuses = [_claim(client).status_code for _ in range(10)]
    assert 422 in statuses
    assert statuses[-1] == 429


# ---- mine ----


def test_mine_lists_only_callers_credentials(client: TestClient) -> None:
    make_foundation_eligible("alice")
    make_foundation_eligible("bob")
    _claim(client, user="alice")
    _claim(client, user="bob")

    resp = client.get("/v1/certificates/mine", headers=auth_headers("alice"))
    assert resp.status_code == 200
    [credential] = resp.json()
    assert credential["tier"] == "foundation"
    assert credential["credential_number"].endswith("00001")


# ---- verify (public) ----


def test_verify_valid_code(client: TestClient) -> None:
    make_foundation_eligible()
    code = _claim(client).json()["verification_code"]

    resp = client.get(f"/v1/certificates/verify/{code.lower()}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["valid"] is True
    assert body["recipient_name"] == "Ada Advocate"
    assert body["tier_name"] == "Foundation Certificate in Advocacy Practice"
    assert not {"id", "profile_id", "payment_status", "verification_code"} & set(body)


def test_verify_unknown_code_is_uniform_404(client: TestClient) -> None:
    for code in ("ABCD-EFGH-JKMN", "garbage"):
        resp = client.get(f"/v1/certificates/verify/{code}")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "credential not found"}


def test_verify_sets_rate_limit_headers(client: TestClient) -> None:
    resp = client.get("/v1/certificates/verify/ABCD-EFGH-JKMN")
    assert resp.headers["x-ratelimit-limit"] == "30"
    assert "x-ratelimit-remaining" in resp.headers


def test_verify_is_rate_limited_per_ip(client: TestClient) -> None:
    last = None
    for _ in range(40):
        last = client.get("/v1/certificates/verify/ABCD-EFGH-JKMN")
    assert last is not None
    assert last.status_code == 429
    assert int(last.headers["retry-after"]) > 0
