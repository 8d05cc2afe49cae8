from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .errors import ConfigError
from .lib.env import ENV_PREFIX, PATHS


@dataclass(frozen=True)
class RetryPolicy:
    name: str
    max_attempts: int
    timeout_per_attempt: float
    backoff_schedule: Tuple[float, ...]

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigError(f"{self.name}: max_attempts must be >= 1, got {self.max_attempts}")
        if self.timeout_per_attempt <= 0:
            raise ConfigError(f"{self.name}: timeout must be > 0, got {self.timeout_per_attempt}")
        if not self.backoff_schedule:
            raise ConfigError(f"{self.name}: backoff schedule must not be empty")
        if any(d < 0 for d in self.backoff_schedule):
            raise ConfigError(f"{self.name}: backoff delays must be >= 0")

    def delay_after(self, attempt: int) -> float:
        """Delay to sleep after failed attempt number `attempt` (1-based)."""
        idx = min(attempt - 1, len(self.backoff_schedule) - 1)
        return self.backoff_schedule[idx]


DEFAULT_POLICIES = {
    "network": RetryPolicy("network", 4, 120.0, (5.0, 15.0, 30.0)),
    "package": RetryPolicy("package", 3, 1800.0, (10.0, 30.0, 60.0)),
    "installer": RetryPolicy("installer", 2, 3600.0, (30.0, 90.0)),
}


@dataclass(frozen=True)
class InstallConfig:
    network: RetryPolicy
    package: RetryPolicy
    installer: RetryPolicy
    log_path: str = PATHS.log_default


def parse_backoff(raw: str, *, var: str) -> Tuple[float, ...]:
    parts = [p.strip() for p in raw.split(",")]
    if not parts or any(not p for p in parts):
        raise ConfigError(f"{var}: expected comma-separated seconds, got {raw!r}")
    try:
        return tuple(float(p) for p in parts)
    except ValueError as e:
        raise ConfigError(f"{var}: expected comma-separated seconds, got {raw!r}") from e


def _env_int(environ: Mapping[str, str], var: str, default: int) -> int:
    raw = environ.get(var)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{var}: expected an integer, got {raw!r}") from e


def _env_float(environ: Mapping[str, str], var: str, default: float) -> float:
    raw = environ.get(var)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{var}: expected a number of seconds, got {raw!r}") from e


def _load_policy(environ: Mapping[str, str], name: str) -> RetryPolicy:
    base = DEFAULT_POLICIES[name]
    prefix = f"{ENV_PREFIX}{name.upper()}_"

    backoff_var = prefix + "BACKOFF"
    raw_backoff = environ.get(backoff_var)
    if raw_backoff is None or not raw_backoff.strip():
        schedule = base.backoff_schedule
    else:
        schedule = parse_backoff(raw_backoff, var=backoff_var)

    return RetryPolicy(
        name=name,
        max_attempts=_env_int(environ, prefix + "MAX_ATTEMPTS", base.max_attempts),
        timeout_per_attempt=_env_float(environ, prefix + "TIMEOUT", base.timeout_per_attempt),
        backoff_schedule=schedule,
    )


def load_install_config(environ: Optional[Mapping[str, str]] = None) -> InstallConfig:
    """Build the run configuration from environment variables.

    Every value is optional; see DEFAULT_POLICIES for the defaults.
    """

    env = os.environ if environ is None else environ
    return InstallConfig(
        network=_load_policy(env, "network"),
        package=_load_policy(env, "package"),
        installer=_load_policy(env, "installer"),
        log_path=env.get(f"{ENV_PREFIX}LOG_PATH") or PATHS.log_default,
    )
