from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

_FORMAT = "%(asctime)s %(levelname)-7s %(threadName)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "USERDECK_LOG_LEVEL"
DEBUG_ENV = ("USERDECK_DEBUG_LOGGING", "USERDECK_DEBUG")
LOG_FILE_ENV = "USERDECK_LOG_FILE"

# Third-party loggers that flood DEBUG output (connection pool, image plugins).
_NOISY_LOGGERS = ("urllib3", "PIL")


def _parse_level(value: Optional[str]) -> Optional[int]:
    text = (value or "").strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    candidate = logging.getLevelName(text.upper())
    return candidate if isinstance(candidate, int) else None


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or None when nothing is set.

    ``USERDECK_LOG_LEVEL`` wins over the debug flags; an unparsable level
    falls back to INFO rather than being ignored.
    """
    env = os.environ if environ is None else environ
    raw = env.get(LEVEL_ENV)
    if raw and raw.strip():
        parsed = _parse_level(raw)
        return parsed if parsed is not None else logging.INFO
    if any(_truthy(env.get(flag)) for flag in DEBUG_ENV):
        return logging.DEBUG
    return None


def _quiet_third_party(level: int) -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def configure_root(default_level: int | str = logging.INFO) -> int:
    """
    Configure the root logger once for console runs.

    Environment overrides:
      - USERDECK_LOG_LEVEL: explicit level (name or number)
      - USERDECK_DEBUG_LOGGING / USERDECK_DEBUG: truthy -> DEBUG
      - USERDECK_LOG_FILE: also append records to this file
    """
    if isinstance(default_level, str):
        fallback = _parse_level(default_level) or logging.INFO
    else:
        fallback = int(default_level)
    forced = env_level()
    effective = forced if forced is not None else fallback

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=_FORMAT, datefmt=_DATEFMT)
        log_file = os.getenv(LOG_FILE_ENV)
        if log_file:
            handler = logging.FileHandler(log_file, encoding="utf-8")
            handler.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
            root.addHandler(handler)
    root.setLevel(effective)
    _quiet_third_party(effective)
    return effective


def apply_debug_preference(debug_enabled: bool) -> int:
    """Set the root level from the persisted ``debug_logging`` setting.

    Environment overrides still win. Returns the level now in effect.
    """
    forced = env_level()
    if forced is not None:
        level = forced
    else:
        level = logging.DEBUG if debug_enabled else logging.INFO
    logging.getLogger().setLevel(level)
    _quiet_third_party(level)
    return level


def level_name(level: int) -> str:
    return logging.getLevelName(level)


def env_requests_debug() -> bool:
    """True when the environment forces DEBUG (or lower)."""
    forced = env_level()
    return forced is not None and forced <= logging.DEBUG
