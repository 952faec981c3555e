"""Credential number formatting and verification code generation."""

from __future__ import annotations

import re
import secrets

# No I, O, 0 or 1: codes are read off paper and typed back in
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 12
CODE_GROUP = 4

CODE_PATTERN = re.compile(
    rf"^[{CODE_ALPHABET}]{{4}}-[{CODE_ALPHABET}]{{4}}-[{CODE_ALPHABET}]{{4}}$"
)

SEQUENCE_WIDTH = 5


def format_credential_number(prefix: str, year: int, sequence: int) -> str:
    """RATIO-2026-00001.  Sequences past 99999 simply grow wider."""
    if sequence < 1:
        raise ValueError(f"sequence must be >= 1 (got {sequence})")
    return f"{prefix}-{year:04d}-{sequence:0{SEQUENCE_WIDTH}d}"


def generate_verification_code() -> str:
    """12 random symbols from CODE_ALPHABET as XXXX-XXXX-XXXX.

    32 symbols ** 12 ≈ 1.2e18 codes; collisions are possible in principle
    and are handled by the store's unique index plus a re-roll.
    """
    symbols = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
    return "-".join(
        symbols[i : i + CODE_GROUP] for i in range(0, CODE_LENGTH, CODE_GROUP)
    )


def normalize_verification_code(raw: str) -> str:
    """Upper-case and trim user input; does not validate."""
    return raw.strip().upper()


def is_well_formed_code(code: str) -> bool:
    return bool(CODE_PATTERN.match(code))
