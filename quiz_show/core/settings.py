"""Runtime settings assembled from constants and environment variables."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from quiz_show.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    LIGHTING_CONTROLLER_BASE_URL,
    LIGHTING_CONTROLLER_TIMEOUT_SECONDS,
)
from quiz_show.constants.show_constants import (
    BLINK_INTERVAL_MS,
    DEFAULT_MEDIA_DIR,
    DEFAULT_SHOW_FILE,
)

_ENV_PREFIX = "QUIZ_SHOW_"


@dataclass(slots=True)
class ShowSettings:
    """Settings for one run of the quiz show."""

    show_file: Path = Path(DEFAULT_SHOW_FILE)
    media_dir: Path = Path(DEFAULT_MEDIA_DIR)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    lighting_base_url: str = LIGHTING_CONTROLLER_BASE_URL
    lighting_timeout_seconds: float = LIGHTING_CONTROLLER_TIMEOUT_SECONDS
    blink_interval_ms: int = BLINK_INTERVAL_MS
    log_level: int = logging.INFO

    @classmethod
    def from_environment(cls, environ: dict[str, str] | None = None) -> ShowSettings:
        """Read ``QUIZ_SHOW_*`` variables, falling back to the defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def value(name: str) -> str | None:
            raw = env.get(_ENV_PREFIX + name)
            return raw.strip() if raw is not None and raw.strip() else None

        settings = cls(
            show_file=Path(value("SHOW_FILE") or defaults.show_file),
            media_dir=Path(value("MEDIA_DIR") or defaults.media_dir),
            host=value("HOST") or defaults.host,
            port=_as_int(value("PORT"), defaults.port, "PORT"),
            lighting_base_url=value("LIGHTING_URL") or defaults.lighting_base_url,
            lighting_timeout_seconds=_as_float(
                value("LIGHTING_TIMEOUT"), defaults.lighting_timeout_seconds, "LIGHTING_TIMEOUT"
            ),
            blink_interval_ms=_as_int(value("BLINK_INTERVAL_MS"), defaults.blink_interval_ms, "BLINK_INTERVAL_MS"),
            log_level=_as_log_level(value("LOG_LEVEL"), defaults.log_level),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")
        if self.blink_interval_ms <= 0:
            raise ValueError("Blink interval must be positive")
        if self.lighting_timeout_seconds <= 0:
            raise ValueError("Lighting controller timeout must be positive")


def _as_int(raw: str | None, default: int, name: str) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} must be an integer, got '{raw}'") from exc


def _as_float(raw: str | None, default: float, name: str) -> float:
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_PREFIX}{name} must be a number, got '{raw}'") from exc


def _as_log_level(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(f"{_ENV_PREFIX}LOG_LEVEL is not a logging level: '{raw}'")
    return level
