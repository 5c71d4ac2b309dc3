"""Composition root: build services once and hand them to sessions.

Services are plain objects owned by the container instead of process-wide
singletons, so tests can build isolated graphs and app shutdown can close
them in one place.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..adapters.http_client import HttpConfig, RetryingSession
from ..adapters.image_cache import ImageCache
from ..adapters.reachability import NetworkReachabilityMonitor, http_probe
from ..adapters.storage_local import StorageLocal
from ..adapters.user_rest import RemoteUserClient
from ..domain.bookmark_store import BookmarkStore
from ..domain.entities import UserRecord
from ..domain.events import Dispatch
from ..viewmodels.bookmarks_session import BookmarksSession
from ..viewmodels.user_detail_session import UserDetailSession
from ..viewmodels.user_list_session import UserListSession
from .settings import ClientSettings


class ServiceContainer:
    """Own the shared services and create per-screen sessions."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        storage: Optional[StorageLocal] = None,
        reachability: Optional[NetworkReachabilityMonitor] = None,
        client: Optional[RemoteUserClient] = None,
        bookmarks: Optional[BookmarkStore] = None,
        images: Optional[ImageCache] = None,
        dispatch: Optional[Dispatch] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.settings = settings or ClientSettings()
        self.dispatch = dispatch
        cfg = self.settings
        http_cfg = HttpConfig(
            request_timeout_s=cfg.request_timeout_s,
            resource_timeout_s=cfg.resource_timeout_s,
            retries=cfg.retries,
            retry_delay_s=cfg.retry_delay_s,
        )

        self.storage = storage or StorageLocal(root_dir=cfg.storage_dir)
        self.reachability = reachability or NetworkReachabilityMonitor(
            http_probe(cfg.probe_url),
            interval_s=cfg.probe_interval_s,
        )
        self.client = client or RemoteUserClient(
            self.reachability,
            base_url=cfg.base_url,
            http=RetryingSession(http_cfg),
        )
        self.bookmarks = bookmarks or BookmarkStore(self.storage)
        self.images = images or ImageCache(
            RetryingSession(HttpConfig(
                request_timeout_s=cfg.request_timeout_s,
                resource_timeout_s=cfg.resource_timeout_s,
                retries=0,
            )),
            count_limit=cfg.image_count_limit,
            total_cost_limit=cfg.image_cost_limit_bytes,
        )

    @classmethod
    def from_environment(cls, storage_dir: Optional[str] = None) -> "ServiceContainer":
        """Resolve settings from persisted user settings plus env overrides."""
        bootstrap = ClientSettings()
        root = storage_dir or bootstrap.storage_dir
        storage = StorageLocal(root_dir=root)
        settings = ClientSettings.load(storage)
        if settings.storage_dir != root:
            storage = StorageLocal(root_dir=settings.storage_dir)
        return cls(settings, storage=storage)

    # ------------------------------------------------------------------
    # Session factories
    # ------------------------------------------------------------------
    def user_list_session(self, **callbacks) -> UserListSession:
        cfg = self.settings
        return UserListSession(
            self.client,
            self.bookmarks,
            page_size=cfg.page_size,
            retries=cfg.retries,
            retry_delay_s=cfg.retry_delay_s,
            seed_store=self.storage if cfg.persist_seed else None,
            dispatch=self.dispatch,
            **callbacks,
        )

    def bookmarks_session(self, **callbacks) -> BookmarksSession:
        return BookmarksSession(self.bookmarks, dispatch=self.dispatch, **callbacks)

    def user_detail_session(self, user: UserRecord, **callbacks) -> UserDetailSession:
        return UserDetailSession(
            user, self.bookmarks, self.images, dispatch=self.dispatch, **callbacks
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        self.reachability.start_monitoring()

    def shutdown(self) -> None:
        self._log.debug("Shutting down services")
        self.reachability.stop_monitoring(timeout_s=1.0)
        self.client.close()
        self.images.close()
        self.bookmarks.close()


__all__ = ["ServiceContainer"]
