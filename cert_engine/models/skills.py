"""The seven advocacy skill dimensions scored on every assessed session.

Declaration order matters: it is the tie-break order when dimensions are
ranked into strengths and improvements.
"""

from __future__ import annotations

from types import MappingProxyType

DIMENSIONS: tuple[str, ...] = (
    "argumentStructure",
    "useOfAuthorities",
    "oralDelivery",
    "judicialHandling",
    "courtManner",
    "persuasiveness",
    "timeManagement",
)

DIMENSION_LABELS = MappingProxyType(
    {
        "argumentStructure": "Argument Structure",
        "useOfAuthorities": "Use of Authorities",
        "oralDelivery": "Oral Delivery",
        "judicialHandling": "Judicial Handling",
        "courtManner": "Court Manner",
        "persuasiveness": "Persuasiveness",
        "timeManagement": "Time Management",
    }
)


def label_for(dimension: str) -> str:
    return DIMENSION_LABELS.get(dimension, dimension)
