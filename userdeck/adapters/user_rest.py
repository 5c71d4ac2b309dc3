"""REST adapter for the paginated user listing endpoint.

Dependencies:
    - ``RetryingSession`` for transport retries.
    - A reachability port consulted before every request.
    - ``concurrent.futures`` executor so callers never block on I/O.

Call context:
    - ``UserListSession`` calls ``fetch_page`` and consumes the returned
      ``Future`` from its completion dispatcher.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Dict, Optional

from userdeck.adapters.http_client import HttpConfig, RetryingSession
from userdeck.domain.entities import Page
from userdeck.domain.errors import (
    DecodingFailure,
    HttpError,
    NoConnectivity,
    NoData,
)
from userdeck.domain.ports import ReachabilityPort, UserFeedPort

DEFAULT_BASE_URL = "https://randomuser.me/api/"
DEFAULT_PAGE_SIZE = 25


class RemoteUserClient(UserFeedPort):
    """Fetch seeded pages of user records with retry on transport failures."""

    def __init__(
        self,
        reachability: ReachabilityPort,
        *,
        base_url: str = DEFAULT_BASE_URL,
        http: Optional[RetryingSession] = None,
        config: Optional[HttpConfig] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.reachability = reachability
        self.base_url = base_url
        self.http = http or RetryingSession(config)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="user-feed"
        )

    def fetch_page(
        self,
        page: int,
        page_size: int = DEFAULT_PAGE_SIZE,
        seed: Optional[str] = None,
        retries: int = 2,
        retry_delay_s: float = 1.0,
    ) -> "Future[Page]":
        """Schedule a page fetch and return its single completion.

        Raises:
            ValueError: ``page < 1`` or ``page_size <= 0``.

        The future resolves to a ``Page`` or fails with a ``FetchError``
        subclass. A retry chain still completes the future exactly once.
        """
        self._check_preconditions(page, page_size)
        return self._executor.submit(
            self.fetch_page_blocking, page, page_size, seed, retries, retry_delay_s
        )

    def fetch_page_blocking(
        self,
        page: int,
        page_size: int = DEFAULT_PAGE_SIZE,
        seed: Optional[str] = None,
        retries: int = 2,
        retry_delay_s: float = 1.0,
    ) -> Page:
        """Synchronous worker behind ``fetch_page``."""
        self._check_preconditions(page, page_size)
        if not self.reachability.is_connected:
            self._log.info("Skipping fetch of page %d: offline", page)
            raise NoConnectivity()

        params = self.build_params(page, page_size, seed)
        self._log.debug("Fetching users from %s params=%s", self.base_url, params)
        resp = self.http.get(
            self.base_url,
            params=params,
            retries=retries,
            retry_delay_s=retry_delay_s,
        )

        status = int(resp.status_code)
        if not 200 <= status <= 299:
            raise HttpError(status)
        if not resp.content:
            raise NoData()

        try:
            payload = resp.json()
        except ValueError as exc:
            self._log.warning("Decoding error for page %d: %s", page, exc)
            raise DecodingFailure(exc) from exc
        try:
            result = Page.from_payload(payload, page_number=page, requested_count=page_size)
        except (KeyError, TypeError, ValueError) as exc:
            self._log.warning("Schema mismatch for page %d: %r", page, exc)
            raise DecodingFailure(exc) from exc

        self._log.info("Fetched %d users (page %d, seed %s)", len(result), page, result.seed)
        return result

    @staticmethod
    def build_params(page: int, page_size: int, seed: Optional[str]) -> Dict[str, Any]:
        params: Dict[str, Any] = {"results": page_size, "page": page}
        if seed is not None:
            params["seed"] = seed
        return params

    @staticmethod
    def _check_preconditions(page: int, page_size: int) -> None:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page_size <= 0:
            raise ValueError(f"page_size must be > 0, got {page_size}")

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)


__all__ = ["DEFAULT_BASE_URL", "DEFAULT_PAGE_SIZE", "RemoteUserClient"]
