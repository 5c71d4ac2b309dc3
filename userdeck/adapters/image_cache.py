"""Bounded in-memory image cache with de-duplicated network loads.

Dependencies:
    - ``requests`` (through ``RetryingSession``) for image downloads.
    - ``Pillow`` to decode bytes into ``PIL.Image.Image`` objects.

Call context:
    - ``UserDetailSession.load_profile_image`` and row/avatar glue call
      ``ImageCache.load``. A ``None`` result is a normal outcome.
"""

from __future__ import annotations

import io
import logging
import threading
from collections import OrderedDict
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError

from userdeck.adapters.http_client import HttpConfig, RetryingSession
from userdeck.domain.errors import FetchError
from userdeck.domain.ports import ImageLoaderPort

DEFAULT_COUNT_LIMIT = 100
DEFAULT_TOTAL_COST_LIMIT = 100 * 1024 * 1024

Decoder = Callable[[bytes], Image.Image]


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes with Pillow and force the pixel data to load."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


def image_cost(image: Image.Image) -> int:
    """Approximate decoded size in bytes (width x height x bands)."""
    width, height = image.size
    return max(1, width * height * len(image.getbands()))


@dataclass
class _Entry:
    image: Image.Image
    cost: int


class ImageCache(ImageLoaderPort):
    """URL-keyed LRU cache bounded by entry count and total decoded cost.

    Concurrent ``load`` calls for one URL share the same in-flight future,
    so only the first one reaches the network.
    """

    def __init__(
        self,
        http: Optional[RetryingSession] = None,
        *,
        count_limit: int = DEFAULT_COUNT_LIMIT,
        total_cost_limit: int = DEFAULT_TOTAL_COST_LIMIT,
        executor: Optional[Executor] = None,
        decoder: Decoder = decode_image,
    ) -> None:
        if count_limit <= 0:
            raise ValueError("count_limit must be positive")
        if total_cost_limit <= 0:
            raise ValueError("total_cost_limit must be positive")
        self._log = logging.getLogger(__name__)
        self.http = http or RetryingSession(HttpConfig(retries=0))
        self.count_limit = int(count_limit)
        self.total_cost_limit = int(total_cost_limit)
        self._decode = decoder
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="image-cache"
        )
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, _Entry]" = OrderedDict()
        self._inflight: Dict[str, "Future[Optional[Image.Image]]"] = {}
        self._total_cost = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def load(self, url: str) -> "Future[Optional[Image.Image]]":
        """Return a future resolving to the image for ``url`` or ``None``."""
        with self._lock:
            entry = self._entries.get(url)
            if entry is not None:
                self._entries.move_to_end(url)
                return _resolved(entry.image)
            pending = self._inflight.get(url)
            if pending is not None:
                return pending
            if not _is_fetchable(url):
                self._log.debug("Ignoring invalid image URL %r", url)
                return _resolved(None)
            future: "Future[Optional[Image.Image]]" = Future()
            self._inflight[url] = future
        try:
            self._executor.submit(self._fetch, url, future)
        except RuntimeError as exc:
            self._log.debug("Image executor unavailable for %s: %s", url, exc)
            with self._lock:
                self._inflight.pop(url, None)
            future.set_result(None)
        return future

    def cached(self, url: str) -> Optional[Image.Image]:
        with self._lock:
            entry = self._entries.get(url)
            return entry.image if entry is not None else None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._total_cost = 0

    @property
    def total_cost(self) -> int:
        with self._lock:
            return self._total_cost

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fetch(self, url: str, future: "Future[Optional[Image.Image]]") -> None:
        image: Optional[Image.Image] = None
        try:
            image = self._download(url)
        except Exception as exc:
            # Every failure kind degrades to "no image".
            self._log.debug("Image load failed for %s: %s", url, exc)
            image = None
        with self._lock:
            if image is not None:
                self._insert(url, image)
            self._inflight.pop(url, None)
        future.set_result(image)

    def _download(self, url: str) -> Optional[Image.Image]:
        try:
            resp = self.http.get(url, accept="image/*", retries=0)
        except FetchError as exc:
            self._log.debug("Image transport failure for %s: %s", url, exc)
            return None
        if not 200 <= int(resp.status_code) <= 299:
            self._log.debug("Image HTTP %s for %s", resp.status_code, url)
            return None
        data = resp.content
        if not data:
            return None
        try:
            return self._decode(data)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            self._log.debug("Undecodable image at %s: %s", url, exc)
            return None

    def _insert(self, url: str, image: Image.Image) -> None:
        cost = image_cost(image)
        if cost > self.total_cost_limit:
            self._log.debug("Image %s (%d bytes) exceeds cache budget; not cached", url, cost)
            return
        previous = self._entries.pop(url, None)
        if previous is not None:
            self._total_cost -= previous.cost
        self._entries[url] = _Entry(image=image, cost=cost)
        self._total_cost += cost
        self._evict()

    def _evict(self) -> None:
        while self._entries and (
            len(self._entries) > self.count_limit or self._total_cost > self.total_cost_limit
        ):
            url, entry = self._entries.popitem(last=False)
            self._total_cost -= entry.cost
            self._log.debug("Evicted %s from image cache", url)


def _resolved(value: Optional[Image.Image]) -> "Future[Optional[Image.Image]]":
    future: "Future[Optional[Image.Image]]" = Future()
    future.set_result(value)
    return future


def _is_fetchable(url: str) -> bool:
    if not isinstance(url, str) or not url.strip():
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


__all__ = [
    "DEFAULT_COUNT_LIMIT",
    "DEFAULT_TOTAL_COST_LIMIT",
    "ImageCache",
    "decode_image",
    "image_cost",
]
