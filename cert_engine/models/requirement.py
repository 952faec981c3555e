from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RequirementProfile:
    """Thresholds a subject must meet to claim one certificate tier.

    Defined at deploy time and never mutated.  A zero / False threshold
    means "not required" and drops the matching check from the checklist;
    sessions, average score, group moots and areas of law are always checked.
    """

    key: str
    name: str
    short_name: str
    description: str
    price: int  # minor units (pence)
    color: str

    min_scored_sessions: int
    min_average_score: int
    min_group_moots: int
    min_areas_of_law: int
    min_portfolio_saves: int = 0
    min_dimension_score: int = 0
    min_dimensions_above: int = 0  # paired with min_dimension_score
    requires_tournament_entry: bool = False
    requires_contribution: bool = False
    min_streak_days: int = 0
    requires_timed_assessment: bool = False
    min_peer_feedback: int = 0
    min_research_saves: int = 0
