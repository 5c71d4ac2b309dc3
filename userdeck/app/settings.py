"""Typed client configuration with persisted and environment overrides.

Resolution order (lowest to highest): dataclass defaults, the persisted
``user_settings`` blob, ``USERDECK_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

from ..adapters.image_cache import DEFAULT_COUNT_LIMIT, DEFAULT_TOTAL_COST_LIMIT
from ..adapters.reachability import DEFAULT_PROBE_URL
from ..adapters.user_rest import DEFAULT_BASE_URL, DEFAULT_PAGE_SIZE
from ..domain.ports import SettingsStoragePort
from ..utils.logging import env_requests_debug

ENV_PREFIX = "USERDECK_"


def _default_storage_dir() -> str:
    return os.path.join(os.path.expanduser("~"), ".userdeck")


@dataclass
class ClientSettings:
    """Runtime settings for the services built by ``ServiceContainer``."""

    base_url: str = DEFAULT_BASE_URL
    page_size: int = DEFAULT_PAGE_SIZE
    request_timeout_s: float = 30.0
    resource_timeout_s: float = 60.0
    retries: int = 2
    retry_delay_s: float = 1.0
    image_count_limit: int = DEFAULT_COUNT_LIMIT
    image_cost_limit_bytes: int = DEFAULT_TOTAL_COST_LIMIT
    storage_dir: str = ""
    probe_url: str = DEFAULT_PROBE_URL
    probe_interval_s: float = 5.0
    persist_seed: bool = True
    debug_logging: bool = False

    def __post_init__(self) -> None:
        if not self.storage_dir:
            self.storage_dir = _default_storage_dir()
        if not self.debug_logging:
            self.debug_logging = env_requests_debug()

    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def apply_dict(self, payload: Mapping[str, Any]) -> "ClientSettings":
        """Return a copy with known keys from ``payload`` coerced and applied.

        Raises:
            ValueError: A value cannot be coerced or is out of range.
        """
        updates: Dict[str, Any] = {}
        for spec in fields(self):
            if spec.name not in payload or payload[spec.name] is None:
                continue
            updates[spec.name] = _coerce(spec.name, getattr(self, spec.name), payload[spec.name])
        updated = replace(self, **updates)
        updated.validate()
        return updated

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for spec in fields(self):
            raw = env.get(ENV_PREFIX + spec.name.upper())
            if raw is not None and raw.strip():
                overrides[spec.name] = raw.strip()
        return self.apply_dict(overrides) if overrides else self

    def validate(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        for name in ("page_size", "image_count_limit", "image_cost_limit_bytes"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("request_timeout_s", "resource_timeout_s", "probe_interval_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.retry_delay_s < 0:
            raise ValueError("retry_delay_s must be >= 0")

    @classmethod
    def load(
        cls,
        storage: Optional[SettingsStoragePort] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientSettings":
        settings = cls()
        if storage is not None:
            persisted = storage.load_user_settings()
            if persisted:
                settings = settings.apply_dict(persisted)
        return settings.apply_env(environ)


def _coerce(name: str, current: Any, value: Any) -> Any:
    try:
        if isinstance(current, bool):
            return _coerce_bool(value)
        if isinstance(current, int):
            if isinstance(value, bool):
                raise ValueError
            return int(value)
        if isinstance(current, float):
            if isinstance(value, bool):
                raise ValueError
            return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value for {name}: {value!r}") from None
    text = str(value).strip()
    if not text:
        raise ValueError(f"{name} must not be empty")
    return text


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(f"not a boolean: {value!r}")


__all__ = ["ClientSettings", "ENV_PREFIX"]
