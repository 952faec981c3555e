from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_PREFIX_RE = re.compile(r"^[A-Z0-9]{2,12}$")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so casting and validation live in one place
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    credential_number_prefix: str = "RATIO"
    issuance_max_attempts: int = 5
    jwt_public_key: str | None = None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")
    prefix_raw = _getenv("CREDENTIAL_NUMBER_PREFIX", "RATIO").upper()
    attempts_raw = _getenv("ISSUANCE_MAX_ATTEMPTS", "5")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    if not _PREFIX_RE.match(prefix_raw):
        raise ValueError(
            "CREDENTIAL_NUMBER_PREFIX must be 2-12 letters or digits "
            f"(got {prefix_raw!r})"
        )

    try:
        max_attempts = int(attempts_raw)
    except ValueError:
        raise ValueError(
            f"ISSUANCE_MAX_ATTEMPTS must be an integer (got {attempts_raw!r})"
        ) from None
    if max_attempts < 1:
        raise ValueError(f"ISSUANCE_MAX_ATTEMPTS must be >= 1 (got {max_attempts})")

    # PEM keys are usually passed with literal "\n" in container env files
    jwt_public_key = _getenv("JWT_PUBLIC_KEY", "").replace("\\n", "\n") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON", False),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        credential_number_prefix=prefix_raw,
        issuance_max_attempts=max_attempts,
        jwt_public_key=jwt_public_key,
    )


# Module-level singleton so imports are cheap
SETTINGS = load_settings()
