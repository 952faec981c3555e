"""Skill snapshot builder — per-dimension averages plus strengths/improvements.

Pure functions only; used by the progress aggregator for display and by
issuance to freeze the snapshot printed on a credential.

A session that has no score for a dimension is left out of that
dimension's average entirely (numerator AND denominator) rather than being
counted as 0.  When no session carries any dimension data the snapshot is
absent, never zero-filled.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from cert_engine.models.activity import ScoredSession
from cert_engine.models.skills import DIMENSIONS, label_for

STRENGTH_COUNT = 3
IMPROVEMENT_COUNT = 2


def round_half_up(value: float) -> int:
    # Built-in round() is banker's rounding: round(64.5) == 64
    return int(math.floor(value + 0.5))


@dataclass(frozen=True, slots=True)
class SkillSnapshot:
    averages: dict[str, int] | None
    strengths: tuple[str, ...] = ()
    improvements: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.averages is None


def dimension_averages(sessions: Iterable[ScoredSession]) -> dict[str, int] | None:
    """Average each dimension over the sessions that scored it.

    Returns None when no session carries dimension data.  Dimensions that
    no session scored (but others did) average to 0.
    """
    totals = dict.fromkeys(DIMENSIONS, 0.0)
    counts = dict.fromkeys(DIMENSIONS, 0)
    seen_any = False

    for session in sessions:
        if not session.dimension_scores:
            continue
        seen_any = True
        for dim in DIMENSIONS:
            score = session.dimension_scores.get(dim)
            if score is None:
                continue
            totals[dim] += score
            counts[dim] += 1

    if not seen_any:
        return None
    return {
        dim: round_half_up(totals[dim] / counts[dim]) if counts[dim] else 0
        for dim in DIMENSIONS
    }


def rank_dimensions(averages: dict[str, int]) -> list[str]:
    """Dimension keys, highest average first; ties keep declaration order."""
    # sorted() is stable, so iterating DIMENSIONS in order gives the tie-break
    return sorted(DIMENSIONS, key=lambda d: averages.get(d, 0), reverse=True)


def build_skill_snapshot(sessions: Iterable[ScoredSession]) -> SkillSnapshot:
    averages = dimension_averages(sessions)
    if averages is None:
        return SkillSnapshot(averages=None)

    ranked = [label_for(d) for d in rank_dimensions(averages)]
    return SkillSnapshot(
        averages=averages,
        strengths=tuple(ranked[:STRENGTH_COUNT]),
        improvements=tuple(ranked[-IMPROVEMENT_COUNT:]),
    )
