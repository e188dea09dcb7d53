"""
Configuration for procinspect.

Values come from PROCINSPECT_* environment variables; anything unset or
invalid falls back to its default.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

MIN_POLL_RATE = 0.1


@dataclass(slots=True, frozen=True)
class Settings:
    """Runtime settings."""

    proc_root: Path = Path("/proc")
    log_level: str = "WARNING"
    command_timeout: float | None = None  # None waits indefinitely
    systemctl: str = "systemctl"
    docker: str = "docker"
    docker_network: str = "bridge"
    poll_rate: float = 2.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            proc_root=Path(env.get("PROCINSPECT_PROC_ROOT") or defaults.proc_root),
            log_level=(env.get("PROCINSPECT_LOG_LEVEL") or defaults.log_level).upper(),
            command_timeout=_positive_float(env.get("PROCINSPECT_COMMAND_TIMEOUT")),
            systemctl=env.get("PROCINSPECT_SYSTEMCTL") or defaults.systemctl,
            docker=env.get("PROCINSPECT_DOCKER") or defaults.docker,
            docker_network=env.get("PROCINSPECT_DOCKER_NETWORK") or defaults.docker_network,
            poll_rate=max(
                MIN_POLL_RATE,
                _positive_float(env.get("PROCINSPECT_POLL_RATE")) or defaults.poll_rate,
            ),
        )


def _positive_float(value: str | None) -> float | None:
    """Parse a positive float, returning None for missing or invalid input."""
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None
