from __future__ import annotations

import json
import logging
import threading
from typing import Callable, List, Optional, Union

from userdeck.domain.entities import UserRecord
from userdeck.domain.events import (
    BookmarkAction,
    BookmarkEvent,
    Dispatch,
    EventEmitter,
    SerialDispatcher,
    Subscription,
)
from userdeck.domain.ports import BlobStoragePort, UniqueId

BOOKMARKS_KEY = "BookmarkedUsers"


class BookmarkStore:
    """
    Durable, de-duplicated set of bookmarked user records.

    Records are keyed by ``UserRecord.unique_id`` and kept in insertion order
    for display. Every mutation is written through to the blob storage before
    the call returns and then announced to subscribers. Events are queued
    while the mutation lock is held, so the dispatcher sees them in the same
    order as the mutations.
    """

    def __init__(
        self,
        storage: BlobStoragePort,
        *,
        dispatch: Optional[Dispatch] = None,
        key: str = BOOKMARKS_KEY,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self._storage = storage
        self._key = key
        self._lock = threading.RLock()
        self._entries: Optional[List[UserRecord]] = None
        self._owned_dispatcher: Optional[SerialDispatcher] = None
        if dispatch is None:
            self._owned_dispatcher = SerialDispatcher(name="bookmark-events")
            dispatch = self._owned_dispatcher
        self._events: EventEmitter[BookmarkEvent] = EventEmitter(dispatch)
        self.last_persist_error: Optional[BaseException] = None

    # ------------------------------------------------------------------ #
    # Subscriptions
    # ------------------------------------------------------------------ #
    def subscribe(self, callback: Callable[[BookmarkEvent], None]) -> Subscription:
        return self._events.subscribe(callback)

    def flush_events(self) -> None:
        """Wait until queued events are delivered (owned dispatcher only)."""
        if self._owned_dispatcher is not None:
            self._owned_dispatcher.drain()

    def close(self) -> None:
        if self._owned_dispatcher is not None:
            self._owned_dispatcher.close()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def list(self) -> List[UserRecord]:
        with self._lock:
            return list(self._loaded())

    def is_bookmarked(self, user: Union[UniqueId, UserRecord]) -> bool:
        unique_id = user.unique_id if isinstance(user, UserRecord) else str(user)
        with self._lock:
            return any(entry.unique_id == unique_id for entry in self._loaded())

    def count(self) -> int:
        with self._lock:
            return len(self._loaded())

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, user: object) -> bool:
        if not isinstance(user, (str, UserRecord)):
            return False
        return self.is_bookmarked(user)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def add(self, user: UserRecord) -> bool:
        """Append ``user`` unless already present. Returns True when added."""
        with self._lock:
            entries = self._loaded()
            if any(entry.unique_id == user.unique_id for entry in entries):
                return False
            entries.append(user)
            self._persist()
            self._log.info("Added bookmark for %s", user.full_name)
            self._events.emit(BookmarkEvent(BookmarkAction.ADDED, user))
            return True

    def remove(self, user: UserRecord) -> bool:
        """Drop every entry sharing ``user.unique_id``. Returns True when removed."""
        with self._lock:
            entries = self._loaded()
            kept = [entry for entry in entries if entry.unique_id != user.unique_id]
            if len(kept) == len(entries):
                return False
            self._entries = kept
            self._persist()
            self._log.info("Removed bookmark for %s", user.full_name)
            self._events.emit(BookmarkEvent(BookmarkAction.REMOVED, user))
            return True

    def toggle(self, user: UserRecord) -> bool:
        """Remove when present, add otherwise. Returns the new membership."""
        with self._lock:
            if self.is_bookmarked(user.unique_id):
                self.remove(user)
                return False
            self.add(user)
            return True

    def clear_all(self) -> None:
        with self._lock:
            self._entries = []
            try:
                self._storage.delete_blob(self._key)
            except OSError as exc:
                self.last_persist_error = exc
                self._log.warning("Failed to clear persisted bookmarks: %s", exc)
            else:
                self.last_persist_error = None
            self._log.info("Cleared all bookmarks")
            self._events.emit(BookmarkEvent(BookmarkAction.CLEARED))

    # ------------------------------------------------------------------ #
    # Persistence helpers
    # ------------------------------------------------------------------ #
    def _loaded(self) -> List[UserRecord]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def _load(self) -> List[UserRecord]:
        try:
            text = self._storage.read_blob(self._key)
        except (OSError, ValueError) as exc:
            # ValueError covers UnicodeDecodeError from a file that is not UTF-8.
            self._log.warning("Bookmark storage unreadable, starting empty: %s", exc)
            return []
        if not text:
            return []
        try:
            data = json.loads(text)
        except ValueError:
            self._log.warning("Bookmark storage is not valid JSON, starting empty.")
            return []
        if not isinstance(data, list):
            self._log.warning("Bookmark storage is not a JSON array, starting empty.")
            return []

        entries: List[UserRecord] = []
        seen = set()
        failed = 0
        for payload in data:
            try:
                user = UserRecord.from_payload(payload)
            except (KeyError, TypeError, ValueError):
                failed += 1
                continue
            if user.unique_id in seen:
                continue
            seen.add(user.unique_id)
            entries.append(user)
        if failed:
            self._log.warning("BookmarkStore load skipped %d invalid entries.", failed)
        return entries

    def _persist(self) -> None:
        # In-memory state stays authoritative when the write fails.
        payload = [entry.to_payload() for entry in self._loaded()]
        try:
            self._storage.write_blob(self._key, json.dumps(payload, ensure_ascii=False))
        except (OSError, TypeError, ValueError) as exc:
            self.last_persist_error = exc
            self._log.error("Failed to save bookmarks: %s", exc)
        else:
            self.last_persist_error = None


__all__ = ["BOOKMARKS_KEY", "BookmarkStore"]
