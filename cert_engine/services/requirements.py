"""Requirement kinds and per-tier checklist construction.

A checklist is a tuple of small tagged variants, each pairing a target with
a pure accessor over ActivityMetrics:

  CountAtLeast              accessor(metrics) >= target
  ScoreAtLeast              like CountAtLeast, but never satisfied with no
                            scored sessions (an empty average is not a pass)
  BooleanFlag               accessor(metrics) is True; reported as 0/1 of 1
  DimensionsAboveThreshold  dimensions averaging >= threshold, at least target

build_checklist() is a pure function of the RequirementProfile: the four
core checks are always present, every other one only when its threshold is
non-zero / True.  Adding a requirement kind means adding a variant here,
not another branch in the aggregator.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from cert_engine.models.progress import ActivityMetrics, CheckResult
from cert_engine.models.requirement import RequirementProfile
from cert_engine.models.skills import DIMENSIONS


@dataclass(frozen=True, slots=True)
class CountAtLeast:
    label: str
    target: int
    accessor: Callable[[ActivityMetrics], int]

    def evaluate(self, metrics: ActivityMetrics) -> CheckResult:
        current = self.accessor(metrics)
        return CheckResult(self.label, current >= self.target, current, self.target)


@dataclass(frozen=True, slots=True)
class ScoreAtLeast:
    label: str
    target: int
    accessor: Callable[[ActivityMetrics], int]

    def evaluate(self, metrics: ActivityMetrics) -> CheckResult:
        current = self.accessor(metrics)
        satisfied = metrics.total_sessions > 0 and current >= self.target
        return CheckResult(self.label, satisfied, current, self.target)


@dataclass(frozen=True, slots=True)
class BooleanFlag:
    label: str
    accessor: Callable[[ActivityMetrics], bool]

    def evaluate(self, metrics: ActivityMetrics) -> CheckResult:
        flag = bool(self.accessor(metrics))
        return CheckResult(self.label, flag, 1 if flag else 0, 1)


@dataclass(frozen=True, slots=True)
class DimensionsAboveThreshold:
    label: str
    threshold: int
    target: int

    def evaluate(self, metrics: ActivityMetrics) -> CheckResult:
        current = metrics.dimensions_above(self.threshold)
        return CheckResult(self.label, current >= self.target, current, self.target)


Requirement = CountAtLeast | ScoreAtLeast | BooleanFlag | DimensionsAboveThreshold


def _plural(n: int, word: str) -> str:
    return word if n == 1 else f"{word}s"


def build_checklist(profile: RequirementProfile) -> tuple[Requirement, ...]:
    p = profile
    checks: list[Requirement] = [
        CountAtLeast(
            f"Complete {p.min_scored_sessions} AI Judge sessions",
            p.min_scored_sessions,
            lambda m: m.total_sessions,
        ),
        ScoreAtLeast(
            f"Average score of {p.min_average_score}+",
            p.min_average_score,
            lambda m: m.average_score,
        ),
        CountAtLeast(
            f"{p.min_group_moots} group moot "
            f"{_plural(p.min_group_moots, 'session')}",
            p.min_group_moots,
            lambda m: m.group_moots,
        ),
        CountAtLeast(
            f"Practice across {p.min_areas_of_law}+ areas of law",
            p.min_areas_of_law,
            lambda m: len(m.areas_of_law),
        ),
    ]

    if p.min_portfolio_saves > 0:
        checks.append(
            CountAtLeast(
                f"Save {p.min_portfolio_saves} "
                f"{_plural(p.min_portfolio_saves, 'session')} to your portfolio",
                p.min_portfolio_saves,
                lambda m: m.portfolio_saves,
            )
        )
    if p.min_dimensions_above > 0:
        checks.append(
            DimensionsAboveThreshold(
                f"Score {p.min_dimension_score}+ in {p.min_dimensions_above} "
                f"of {len(DIMENSIONS)} dimensions",
                p.min_dimension_score,
                p.min_dimensions_above,
            )
        )
    if p.min_peer_feedback > 0:
        checks.append(
            CountAtLeast(
                f"Receive {p.min_peer_feedback}+ peer feedback",
                p.min_peer_feedback,
                lambda m: m.peer_feedback,
            )
        )
    if p.min_research_saves > 0:
        checks.append(
            CountAtLeast(
                f"Save {p.min_research_saves}+ legal authorities",
                p.min_research_saves,
                lambda m: m.research_saves,
            )
        )
    if p.requires_tournament_entry:
        checks.append(
            BooleanFlag("Participate in a tournament", lambda m: m.has_tournament)
        )
    if p.requires_contribution:
        checks.append(
            BooleanFlag("Contribute to the Law Book", lambda m: m.has_contribution)
        )
    if p.min_streak_days > 0:
        checks.append(
            CountAtLeast(
                f"Achieve a {p.min_streak_days}-day streak",
                p.min_streak_days,
                lambda m: m.streak_days,
            )
        )
    if p.requires_timed_assessment:
        checks.append(
            CountAtLeast(
                "Complete a timed advocacy assessment",
                1,
                lambda m: m.timed_assessments,
            )
        )

    return tuple(checks)


def evaluate(
    profile: RequirementProfile, metrics: ActivityMetrics
) -> tuple[CheckResult, ...]:
    return tuple(req.evaluate(metrics) for req in build_checklist(profile))
