from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller, extracted from a bearer token issued by the
    platform's identity provider.

    user_id is the token subject and is what activity profiles are keyed on.
    """

    user_id: str
