from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from cert_engine.models.credential import Credential


@dataclass(frozen=True, slots=True)
class ActivityMetrics:
    """Everything the requirement checks read, computed once per report.

    dimension_averages always holds all seven dimensions (0 where no session
    carried data); has_dimension_data tells a real 0 from "never scored".
    """

    total_sessions: int
    average_score: int
    areas_of_law: tuple[str, ...]
    dimension_averages: dict[str, int]
    has_dimension_data: bool
    group_moots: int
    portfolio_saves: int
    has_tournament: bool
    has_contribution: bool
    peer_feedback: int
    research_saves: int
    streak_days: int
    timed_assessments: int

    def dimensions_above(self, threshold: int) -> int:
        return sum(1 for v in self.dimension_averages.values() if v >= threshold)


@dataclass(frozen=True, slots=True)
class CheckResult:
    """One line of a tier checklist, e.g. "Complete 5 AI Judge sessions" 3/5."""

    label: str
    satisfied: bool
    current: int
    target: int


@dataclass(frozen=True, slots=True)
class TierProgress:
    """Read model for one tier — computed per request, never stored."""

    tier: str
    name: str
    short_name: str
    description: str
    color: str
    price: int
    checks: tuple[CheckResult, ...]
    completed_count: int
    total_count: int
    percent_complete: int
    all_requirements_met: bool
    skill_snapshot: dict[str, int] | None
    areas_of_law: tuple[str, ...]
    credential: Credential | None = None

    @property
    def unmet_labels(self) -> list[str]:
        return [c.label for c in self.checks if not c.satisfied]


@dataclass(frozen=True, slots=True)
class ProgressReport:
    profile_id: UUID
    profile_name: str
    tiers: tuple[TierProgress, ...]

    def for_tier(self, tier_key: str) -> TierProgress | None:
        return next((t for t in self.tiers if t.tier == tier_key), None)
