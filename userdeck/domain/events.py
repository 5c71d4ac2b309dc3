"""Typed publish/subscribe primitives used for change notification.

``EventEmitter`` replaces a process-wide notification bus: each service owns
its emitter, subscribers receive a ``Subscription`` handle and dispose it when
their session goes away.

Call context:
    ``BookmarkStore`` emits ``BookmarkEvent`` values; the list, bookmarks and
    detail sessions subscribe. ``NetworkReachabilityMonitor`` emits
    connectivity transitions.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, List, Optional, TypeVar

from .entities import UserRecord

T = TypeVar("T")
Dispatch = Callable[[Callable[[], None]], None]

_log = logging.getLogger(__name__)


def inline_dispatch(task: Callable[[], None]) -> None:
    """Run the delivery task on the caller's thread."""
    task()


class SerialDispatcher:
    """Deliver tasks on one background worker, in submission order."""

    def __init__(self, name: str = "events") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._closed = False

    def __call__(self, task: Callable[[], None]) -> None:
        if self._closed:
            _log.debug("Dispatcher closed; dropping task.")
            return
        self._executor.submit(task)

    def drain(self) -> None:
        """Block until every task submitted so far has run."""
        if self._closed:
            return
        self._executor.submit(lambda: None).result()

    def close(self) -> None:
        self._closed = True
        self._executor.shutdown(wait=True)


class Subscription:
    """Disposable handle returned by ``EventEmitter.subscribe``."""

    def __init__(self, dispose: Callable[[], None]) -> None:
        self._dispose = dispose
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def dispose(self) -> None:
        if not self._active:
            return
        self._active = False
        self._dispose()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class EventEmitter(Generic[T]):
    """Subject that fans events out to subscribers through a dispatcher.

    The subscriber list is snapshotted at ``emit`` time, so a callback
    disposed after an emit may still receive that one event.
    """

    def __init__(self, dispatch: Optional[Dispatch] = None) -> None:
        self._dispatch: Dispatch = dispatch or inline_dispatch
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        with self._lock:
            self._callbacks.append(callback)
        return Subscription(lambda: self._unsubscribe(callback))

    def _unsubscribe(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def emit(self, event: T) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        if not callbacks:
            return
        self._dispatch(lambda: self._deliver(callbacks, event))

    @staticmethod
    def _deliver(callbacks: List[Callable[[T], None]], event: T) -> None:
        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                _log.exception("Event subscriber %r failed for %r", callback, event)


class BookmarkAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CLEARED = "cleared"


@dataclass(frozen=True)
class BookmarkEvent:
    """Bookmark change; ``user`` is ``None`` for ``CLEARED``."""

    action: BookmarkAction
    user: Optional[UserRecord] = None

    def concerns(self, unique_id: str) -> bool:
        """True when the event affects the record with ``unique_id``."""
        if self.action is BookmarkAction.CLEARED:
            return True
        return self.user is not None and self.user.unique_id == unique_id


__all__ = [
    "BookmarkAction",
    "BookmarkEvent",
    "Dispatch",
    "EventEmitter",
    "SerialDispatcher",
    "Subscription",
    "inline_dispatch",
]
