from __future__ import annotations

import pytest

from cert_engine.services import catalog
from cert_engine.services.errors import InvalidTier


def test_tiers_listed_foundation_to_advanced() -> None:
    assert [t.key for t in catalog.list_all()] == [
        "foundation",
        "intermediate",
        "advanced",
    ]


def test_lookup_returns_profile() -> None:
    tier = catalog.lookup("intermediate")
    assert tier.min_scored_sessions == 15
    assert tier.min_average_score == 65
    assert tier.min_dimension_score == 70
    assert tier.min_dimensions_above == 3


def test_lookup_unknown_tier_raises() -> None:
    with pytest.raises(InvalidTier) as exc_info:
        catalog.lookup("platinum")
    assert exc_info.value.kind == "invalid_tier"
    assert exc_info.value.status_code == 404


def test_thresholds_increase_with_tier() -> None:
    tiers = catalog.list_all()
    for lower, higher in zip(tiers, tiers[1:]):
        assert higher.min_scored_sessions > lower.min_scored_sessions
        assert higher.min_average_score > lower.min_average_score
        assert higher.min_group_moots > lower.min_group_moots
        assert higher.price > lower.price


def test_only_advanced_requires_tournament_and_contribution() -> None:
    flags = {
        t.key: (t.requires_tournament_entry, t.requires_contribution)
        for t in catalog.list_all()
    }
    assert flags == {
        "foundation": (False, False),
        "intermediate": (False, False),
        "advanced": (True, True),
    }


def test_profiles_are_immutable() -> None:
    with pytest.raises(AttributeError):
        catalog.FOUNDATION.min_scored_sessions = 1  # type: ignore[misc]


def test_requirements_summary_lists_core_thresholds() -> None:
    assert catalog.requirements_summary(catalog.FOUNDATION) == [
        "5 AI sessions",
        "50+ average score",
        "1+ group moots",
        "1+ areas of law",
    ]


def test_is_known() -> None:
    assert catalog.is_known("advanced")
    assert not catalog.is_known("Advanced")
