"""
wildsim Configuration

Loads configuration from environment variables with sensible defaults.
Configuration is read once at startup and never re-read while a run is active.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_INGEST_PATH = "/iot/data"


class ConfigurationError(Exception):
    """Raised when settings or the agent roster are malformed.

    This is the only fatal condition in wildsim: it aborts startup before the
    scheduler fires its first tick.
    """


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _read_int(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class SimulatorConfig:
    """Run configuration loaded from environment variables.

    Every field has a default matching the reference deployment: a local
    ingestion API, one tick every 3 seconds, and an unbounded run.
    """

    # Ingestion endpoint
    api_url: str = DEFAULT_API_URL
    ingest_path: str = DEFAULT_INGEST_PATH

    # Scheduling
    tick_interval_seconds: float = 3.0
    max_iterations: Optional[int] = None
    startup_delay_seconds: float = 3.0
    # Simulated seconds per wall-clock second. Values above 1 fast-forward the
    # simulated clock (environment drift, time of day) relative to real time.
    time_scale: float = 1.0

    # Delivery
    request_timeout_seconds: float = 5.0
    max_delivery_attempts: int = 3
    retry_delay_seconds: float = 1.0

    # Agents and randomness
    roster_path: Optional[Path] = None
    seed: Optional[int] = None

    @property
    def ingest_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.ingest_path.lstrip('/')}"

    @property
    def simulated_tick_seconds(self) -> float:
        """Length of one tick on the simulated clock."""
        return self.tick_interval_seconds * self.time_scale

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SimulatorConfig":
        """Build a config from environment variables (``os.environ`` by default).

        Raises:
            ConfigurationError: If a variable cannot be parsed or the resulting
                configuration is invalid.
        """
        env = os.environ if environ is None else environ

        roster_raw = (env.get("ROSTER_PATH") or "").strip()
        config = cls(
            api_url=env.get("API_URL") or DEFAULT_API_URL,
            ingest_path=env.get("INGEST_PATH") or DEFAULT_INGEST_PATH,
            tick_interval_seconds=_read_float(env, "TICK_INTERVAL_SECONDS", 3.0),
            max_iterations=_read_int(env, "MAX_ITERATIONS", None),
            startup_delay_seconds=_read_float(env, "STARTUP_DELAY_SECONDS", 3.0),
            time_scale=_read_float(env, "TIME_SCALE", 1.0),
            request_timeout_seconds=_read_float(env, "REQUEST_TIMEOUT_SECONDS", 5.0),
            max_delivery_attempts=_read_int(env, "MAX_DELIVERY_ATTEMPTS", 3),
            retry_delay_seconds=_read_float(env, "RETRY_DELAY_SECONDS", 1.0),
            roster_path=Path(roster_raw) if roster_raw else None,
            seed=_read_int(env, "SIMULATION_SEED", None),
        )
        config.validate()
        return config

    def with_overrides(self, **overrides) -> "SimulatorConfig":
        """Return a validated copy with non-None overrides applied (CLI flags)."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        updated = replace(self, **changes)
        updated.validate()
        return updated

    def validate(self) -> None:
        """Validate configuration and raise errors if values are unusable."""
        parsed = urlparse(self.api_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"API_URL must be an absolute http(s) URL, got {self.api_url!r}"
            )

        # The HTTP request line is ASCII only; percent-encode anything else
        if not self.ingest_url.isascii():
            raise ConfigurationError(
                f"API_URL and INGEST_PATH must be ASCII (percent-encoded), got {self.ingest_url!r}"
            )

        if self.tick_interval_seconds <= 0:
            raise ConfigurationError("TICK_INTERVAL_SECONDS must be greater than 0")

        if self.max_iterations is not None and self.max_iterations < 1:
            raise ConfigurationError("MAX_ITERATIONS must be at least 1 when set")

        if self.startup_delay_seconds < 0:
            raise ConfigurationError("STARTUP_DELAY_SECONDS cannot be negative")

        if self.time_scale <= 0:
            raise ConfigurationError("TIME_SCALE must be greater than 0")

        if self.request_timeout_seconds <= 0:
            raise ConfigurationError("REQUEST_TIMEOUT_SECONDS must be greater than 0")

        if self.max_delivery_attempts < 1:
            raise ConfigurationError("MAX_DELIVERY_ATTEMPTS must be at least 1")

        if self.retry_delay_seconds < 0:
            raise ConfigurationError("RETRY_DELAY_SECONDS cannot be negative")

    def display(self) -> str:
        """Return a formatted string showing current configuration."""
        ceiling = self.max_iterations if self.max_iterations is not None else "unbounded"
        lines = [
            "wildsim Configuration:",
            f"  API Endpoint: {self.ingest_url}",
            f"  Interval: {self.tick_interval_seconds:g}s",
            f"  Max Iterations: {ceiling}",
            f"  Time Scale: {self.time_scale:g}x",
            f"  Roster: {self.roster_path or 'built-in'}",
            f"  Seed: {self.seed if self.seed is not None else 'random'}",
        ]
        return "\n".join(lines)
