from __future__ import annotations
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional, Protocol

from .entities import Page
from .events import Subscription

UniqueId = str


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class ReachabilityPort(Protocol):
    """Current connectivity state plus transition notifications."""

    @property
    def is_connected(self) -> bool: ...
    def subscribe(self, callback: Callable[[bool], None]) -> Subscription: ...


class UserFeedPort(Protocol):
    """Paginated, seeded listing of remote user records."""

    def fetch_page(
        self,
        page: int,
        page_size: int = 25,
        seed: Optional[str] = None,
        retries: int = 2,
        retry_delay_s: float = 1.0,
    ) -> "Future[Page]": ...  # resolves to Page or raises a FetchError


class ImageLoaderPort(Protocol):
    """Image fetch that resolves to ``None`` instead of failing."""

    def load(self, url: str) -> "Future[Any]": ...


class BlobStoragePort(Protocol):
    """Flat key-value persistence for whole text blobs."""

    def read_blob(self, key: str) -> Optional[str]: ...
    def write_blob(self, key: str, text: str) -> None: ...
    def delete_blob(self, key: str) -> None: ...


class SeedStoragePort(Protocol):
    """Pagination seed persisted across restarts."""

    def load_seed(self) -> Optional[str]: ...
    def save_seed(self, seed: str) -> None: ...
    def clear_seed(self) -> None: ...


class SettingsStoragePort(Protocol):
    def save_user_settings(self, payload: Dict[str, Any]) -> None: ...
    def load_user_settings(self) -> Optional[Dict[str, Any]]: ...
