"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import ValidationError

logger = logging.getLogger(__name__)

HOME_ENV = "SYSREASON_HOME"
MAX_REFLECTIONS_ENV = "SYSREASON_MAX_REFLECTIONS"
LOCAL_THRESHOLD_ENV = "SYSREASON_LOCAL_THRESHOLD"
GLOBAL_THRESHOLD_ENV = "SYSREASON_GLOBAL_THRESHOLD"
DEFAULT_BUDGET_ENV = "SYSREASON_DEFAULT_BUDGET"
LOG_LEVEL_ENV = "SYSREASON_LOG_LEVEL"

DEFAULT_HOME = Path.home() / ".systematic-reasoning"
DEFAULT_MAX_REFLECTIONS = 20
# OR-style local queries need a looser cutoff than literal global queries
DEFAULT_LOCAL_THRESHOLD = 0.6
DEFAULT_GLOBAL_THRESHOLD = 0.4
DEFAULT_TOKEN_BUDGET = 2000
MAX_TOKEN_BUDGET = 8000


@dataclass(frozen=True)
class Settings:
    home: Path = DEFAULT_HOME
    max_reflections: int = DEFAULT_MAX_REFLECTIONS
    local_threshold: float = DEFAULT_LOCAL_THRESHOLD
    global_threshold: float = DEFAULT_GLOBAL_THRESHOLD
    default_token_budget: int = DEFAULT_TOKEN_BUDGET
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from SYSREASON_* environment variables."""
        env = os.environ if environ is None else environ
        home = env.get(HOME_ENV)
        settings = cls(
            home=Path(home).expanduser() if home else DEFAULT_HOME,
            max_reflections=_int(env, MAX_REFLECTIONS_ENV, DEFAULT_MAX_REFLECTIONS),
            local_threshold=_threshold(env, LOCAL_THRESHOLD_ENV, DEFAULT_LOCAL_THRESHOLD),
            global_threshold=_threshold(env, GLOBAL_THRESHOLD_ENV, DEFAULT_GLOBAL_THRESHOLD),
            default_token_budget=_int(env, DEFAULT_BUDGET_ENV, DEFAULT_TOKEN_BUDGET),
            log_level=env.get(LOG_LEVEL_ENV, "WARNING").upper(),
        )
        if settings.max_reflections < 1:
            raise ValidationError(f"{MAX_REFLECTIONS_ENV} must be at least 1")
        if not 0 < settings.default_token_budget <= MAX_TOKEN_BUDGET:
            raise ValidationError(
                f"{DEFAULT_BUDGET_ENV} must be between 1 and {MAX_TOKEN_BUDGET}"
            )
        logger.debug("Loaded settings: %s", settings)
        return settings

    def with_home(self, home: str | Path | None) -> Settings:
        if not home:
            return self
        return replace(self, home=Path(home).expanduser())


def _int(env, key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{key} must be an integer, got {raw!r}")


def _threshold(env, key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"{key} must be a number, got {raw!r}")
    if not 0.0 <= value <= 1.0:
        raise ValidationError(f"{key} must be between 0 and 1, got {value}")
    return value
