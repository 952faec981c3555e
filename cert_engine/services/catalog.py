"""Requirement catalog — the three certificate tiers and their thresholds.

Static configuration, read-only at runtime.  Order of TIERS is the order
tiers are listed and evaluated everywhere (Foundation → Advanced).
"""

from __future__ import annotations

from types import MappingProxyType

from cert_engine.models.requirement import RequirementProfile
from cert_engine.services.errors import InvalidTier

FOUNDATION = RequirementProfile(
    key="foundation",
    name="Foundation Certificate in Advocacy Practice",
    short_name="Foundation",
    description=(
        "Demonstrates foundational competence in oral advocacy through "
        "structured AI-assessed practice sessions and peer mooting."
    ),
    price=2999,
    color="#CD7F32",
    min_scored_sessions=5,
    min_average_score=50,
    min_group_moots=1,
    min_areas_of_law=1,
)

INTERMEDIATE = RequirementProfile(
    key="intermediate",
    name="Intermediate Certificate in Advocacy & Legal Reasoning",
    short_name="Intermediate",
    description=(
        "Demonstrates intermediate proficiency in advocacy, including strong "
        "legal reasoning, effective use of authorities, and developing "
        "judicial handling skills."
    ),
    price=4999,
    color="#C0C0C0",
    min_scored_sessions=15,
    min_average_score=65,
    min_group_moots=5,
    min_areas_of_law=3,
    min_portfolio_saves=1,
    min_dimension_score=70,
    min_dimensions_above=3,
    min_peer_feedback=3,
    min_research_saves=1,
)

ADVANCED = RequirementProfile(
    key="advanced",
    name="Advanced Certificate in Advocacy Excellence",
    short_name="Advanced",
    description=(
        "Demonstrates advanced mastery of oral advocacy, consistently "
        "performing at a high level across multiple areas of law, under "
        "timed conditions, and in competitive settings."
    ),
    price=7999,
    color="#FFD700",
    min_scored_sessions=30,
    min_average_score=80,
    min_group_moots=10,
    min_areas_of_law=5,
    min_portfolio_saves=1,
    min_dimension_score=80,
    min_dimensions_above=5,
    requires_tournament_entry=True,
    requires_contribution=True,
    min_streak_days=14,
    requires_timed_assessment=True,
    min_peer_feedback=5,
    min_research_saves=3,
)

TIERS: tuple[RequirementProfile, ...] = (FOUNDATION, INTERMEDIATE, ADVANCED)

_BY_KEY = MappingProxyType({t.key: t for t in TIERS})


def list_all() -> list[RequirementProfile]:
    return list(TIERS)


def lookup(tier_key: str) -> RequirementProfile:
    try:
        return _BY_KEY[tier_key]
    except KeyError:
        raise InvalidTier(tier_key) from None


def is_known(tier_key: str) -> bool:
    return tier_key in _BY_KEY


def requirements_summary(profile: RequirementProfile) -> list[str]:
    """One-liners for the always-present requirements, for tier listings."""
    return [
        f"{profile.min_scored_sessions} AI sessions",
        f"{profile.min_average_score}+ average score",
        f"{profile.min_group_moots}+ group moots",
        f"{profile.min_areas_of_law}+ areas of law",
    ]
