"""Runtime settings for the tictactoe3d service, read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional
import os

from .ai import MAX_DIFFICULTY, MIN_DIFFICULTY

ENV_PREFIX = "TICTACTOE3D_"


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    default_difficulty: int = 25


def _env(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default
    return value.strip()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``TICTACTOE3D_*`` variables (``os.environ`` by default)."""
    if environ is None:
        environ = os.environ
    defaults = Settings()

    port = int(_env(environ, "PORT", str(defaults.port)))
    if not 0 < port < 65536:
        raise ValueError(f"Invalid port {port}")

    difficulty = int(
        _env(environ, "DEFAULT_DIFFICULTY", str(defaults.default_difficulty))
    )
    if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
        raise ValueError(
            f"Default difficulty must be within {MIN_DIFFICULTY}..{MAX_DIFFICULTY}"
        )

    return Settings(
        host=_env(environ, "HOST", defaults.host),
        port=port,
        log_level=_env(environ, "LOG_LEVEL", defaults.log_level).upper(),
        default_difficulty=difficulty,
    )
