"""Paged user list with infinite-scroll continuation and client-side search.

Call context:
    List screen glue forwards scroll positions, pull-to-refresh, search text
    and bookmark taps to ``UserListSession`` and renders whatever the
    ``on_list_updated``/``on_search_results`` callbacks hand back.

Dependencies:
    ``UserFeedPort`` for network pages, ``BookmarkStore`` for membership and
    toggles, and an optional ``SeedStoragePort`` to continue the same seeded
    ordering across restarts.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from userdeck.domain.bookmark_store import BookmarkStore
from userdeck.domain.entities import Page, UserRecord
from userdeck.domain.events import BookmarkEvent, Dispatch, inline_dispatch
from userdeck.domain.ports import SeedStoragePort, UseCaseError, UserFeedPort
from userdeck.usecases.error_mapping import map_fetch_error
from .user_row import UserRow

UsersCallback = Callable[[Tuple[UserRecord, ...]], None]


class ListState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class EmptyState:
    """Static descriptor for an empty list placeholder."""
    title: str
    subtitle: str
    image_name: Optional[str] = None


NO_SEARCH_RESULTS = EmptyState("No users found", "Try adjusting your search criteria")
NO_USERS = EmptyState("No users available", "Pull to refresh or check your connection")


class UserListSession:
    """
    View-model for the paged user list.

    The accumulated list only grows across pages (page 1 replaces it, which
    is how refresh works). While a search is active the visible projection
    is the filtered view; filtering never touches the accumulated list nor
    the network. Callers must drive one session from a single logical
    sequence; fetch completions are marshalled back through ``dispatch``.
    """

    PREFETCH_THRESHOLD = 5

    def __init__(
        self,
        client: UserFeedPort,
        bookmarks: BookmarkStore,
        *,
        page_size: int = 25,
        retries: int = 2,
        retry_delay_s: float = 1.0,
        seed_store: Optional[SeedStoragePort] = None,
        dispatch: Optional[Dispatch] = None,
        on_list_updated: Optional[UsersCallback] = None,
        on_search_results: Optional[UsersCallback] = None,
        on_error: Optional[Callable[[UseCaseError], None]] = None,
        on_loading_changed: Optional[Callable[[bool], None]] = None,
        on_rows_changed: Optional[Callable[[List[int]], None]] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._log = logging.getLogger(__name__)
        self._client = client
        self._bookmarks = bookmarks
        self._seed_store = seed_store
        self._dispatch: Dispatch = dispatch or inline_dispatch
        self.page_size = int(page_size)
        self.retries = int(retries)
        self.retry_delay_s = float(retry_delay_s)

        self.on_list_updated = on_list_updated
        self.on_search_results = on_search_results
        self.on_error = on_error
        self.on_loading_changed = on_loading_changed
        self.on_rows_changed = on_rows_changed

        self._users: List[UserRecord] = []
        self._filtered: List[UserRecord] = []
        self._search_text = ""
        self._is_searching = False
        self._is_loading = False
        self._has_more = True
        self._has_loaded = False
        self._current_page = 1
        self._seed: Optional[str] = self._restore_seed()
        self._generation = 0
        self._closed = False
        self.last_error: Optional[UseCaseError] = None

        self._subscription = bookmarks.subscribe(
            lambda event: self._dispatch(lambda: self._on_bookmark_event(event))
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def users(self) -> Tuple[UserRecord, ...]:
        """Accumulated records across loaded pages."""
        return tuple(self._users)

    @property
    def filtered_users(self) -> Tuple[UserRecord, ...]:
        return tuple(self._filtered)

    @property
    def visible_users(self) -> Tuple[UserRecord, ...]:
        return tuple(self._filtered if self._is_searching else self._users)

    @property
    def user_count(self) -> int:
        return len(self._filtered if self._is_searching else self._users)

    @property
    def is_empty(self) -> bool:
        return self.user_count == 0

    @property
    def is_searching(self) -> bool:
        return self._is_searching

    @property
    def search_text(self) -> str:
        return self._search_text

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def has_more_data(self) -> bool:
        return self._has_more

    @property
    def is_exhausted(self) -> bool:
        return not self._has_more

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def seed(self) -> Optional[str]:
        return self._seed

    @property
    def state(self) -> ListState:
        if self._is_loading:
            return ListState.LOADING
        if not self._has_more:
            return ListState.EXHAUSTED
        if self._has_loaded:
            return ListState.LOADED
        return ListState.IDLE

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------
    def load_next_page(self) -> Optional["Future[Page]"]:
        """Request the page under the cursor; no-op while loading or exhausted.

        A feed that refuses the request outright (closed executor) is reported
        through ``on_error`` and leaves the session ready to retry.
        """
        if self._closed or self._is_loading or not self._has_more:
            return None
        page = self._current_page
        generation = self._generation
        self._set_loading(True)
        self._log.debug("Loading page %d (seed=%s)", page, self._seed)
        try:
            future = self._client.fetch_page(
                page,
                self.page_size,
                self._seed,
                self.retries,
                self.retry_delay_s,
            )
        except Exception as exc:
            self._set_loading(False)
            self._report_error(page, exc)
            return None
        future.add_done_callback(
            lambda done: self._dispatch(lambda: self._complete(generation, page, done))
        )
        return future

    def load_more_if_needed(self, visible_index: int) -> Optional["Future[Page]"]:
        """Prefetch when ``visible_index`` is within the threshold of the end."""
        if self._is_searching or self._is_loading or not self._has_more:
            return None
        if visible_index >= len(self._users) - self.PREFETCH_THRESHOLD:
            return self.load_next_page()
        return None

    def refresh(self) -> Optional["Future[Page]"]:
        """Start over from page 1 with a fresh seed; pending completions are dropped."""
        self._generation += 1
        if self._is_loading:
            self._set_loading(False)
        self._current_page = 1
        self._has_more = True
        self._has_loaded = False
        self._users = []
        self._reset_seed()
        if self._is_searching or self._search_text:
            self.clear_search()
        return self.load_next_page()

    def _complete(self, generation: int, page: int, future: "Future[Page]") -> None:
        if self._closed or generation != self._generation:
            self._log.debug("Dropping stale completion for page %d", page)
            return
        self._set_loading(False)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._report_error(page, exc)
            return

        result = future.result()
        self.last_error = None
        if self._seed is None:
            self._adopt_seed(result.seed)
        if page == 1:
            self._users = list(result.users)
        else:
            self._users.extend(result.users)
        self._current_page = page + 1
        self._has_loaded = True
        if len(result.users) < self.page_size:
            self._has_more = False
            self._log.info("User list exhausted after page %d", page)

        if self._is_searching:
            self._apply_filter()
            self._notify_search_results()
        else:
            self._notify_list_updated()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def search(self, text: str) -> None:
        """Filter the accumulated list; empty text ends the search."""
        self._search_text = text or ""
        self._is_searching = bool(self._search_text)
        if self._is_searching:
            self._apply_filter()
            self._notify_search_results()
        else:
            self._filtered = []
            self._notify_list_updated()

    def clear_search(self) -> None:
        self._is_searching = False
        self._search_text = ""
        self._filtered = []
        self._notify_list_updated()

    def _apply_filter(self) -> None:
        query = self._search_text
        self._filtered = [user for user in self._users if user.matches(query)]

    # ------------------------------------------------------------------
    # Row access and bookmarks
    # ------------------------------------------------------------------
    def user_at(self, index: int) -> Optional[UserRecord]:
        source = self._filtered if self._is_searching else self._users
        if 0 <= index < len(source):
            return source[index]
        return None

    def row_at(self, index: int) -> Optional[UserRow]:
        user = self.user_at(index)
        if user is None:
            return None
        return UserRow.from_user(user, is_bookmarked=self._bookmarks.is_bookmarked(user.unique_id))

    def rows(self) -> List[UserRow]:
        return [
            UserRow.from_user(user, is_bookmarked=self._bookmarks.is_bookmarked(user.unique_id))
            for user in self.visible_users
        ]

    def index_of(self, unique_id: str) -> Optional[int]:
        for index, user in enumerate(self._users):
            if user.unique_id == unique_id:
                return index
        return None

    def toggle_bookmark(self, index: int) -> Optional[bool]:
        """Toggle the visible row at ``index``; returns the new membership."""
        user = self.user_at(index)
        if user is None:
            return None
        return self._bookmarks.toggle(user)

    def is_bookmarked(self, index: int) -> bool:
        user = self.user_at(index)
        if user is None:
            return False
        return self._bookmarks.is_bookmarked(user.unique_id)

    def empty_state(self) -> EmptyState:
        return NO_SEARCH_RESULTS if self._is_searching else NO_USERS

    def should_show_initial_loading(self) -> bool:
        return self._is_loading and not self._users

    def close(self) -> None:
        """Detach from the bookmark store; later completions are ignored."""
        self._closed = True
        self._subscription.dispose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _set_loading(self, value: bool) -> None:
        self._is_loading = value
        if self.on_loading_changed:
            self.on_loading_changed(value)

    def _report_error(self, page: int, exc: BaseException) -> None:
        error = map_fetch_error(exc)
        error.__cause__ = exc
        self.last_error = error
        self._log.warning("Loading page %d failed: %s", page, exc)
        if self.on_error:
            self.on_error(error)

    def _notify_list_updated(self) -> None:
        if self.on_list_updated:
            self.on_list_updated(self.visible_users)

    def _notify_search_results(self) -> None:
        if self.on_search_results:
            self.on_search_results(self.visible_users)

    def _on_bookmark_event(self, event: BookmarkEvent) -> None:
        if self._closed or not self.on_rows_changed:
            return
        indices = self._affected_rows(self.visible_users, event)
        if indices:
            self.on_rows_changed(indices)

    @staticmethod
    def _affected_rows(users: Sequence[UserRecord], event: BookmarkEvent) -> List[int]:
        return [index for index, user in enumerate(users) if event.concerns(user.unique_id)]

    def _restore_seed(self) -> Optional[str]:
        if self._seed_store is None:
            return None
        try:
            return self._seed_store.load_seed()
        except OSError as exc:
            self._log.warning("Could not read persisted seed: %s", exc)
            return None

    def _adopt_seed(self, seed: str) -> None:
        self._seed = seed
        if self._seed_store is None:
            return
        try:
            self._seed_store.save_seed(seed)
        except OSError as exc:
            self._log.warning("Could not persist seed: %s", exc)

    def _reset_seed(self) -> None:
        self._seed = None
        if self._seed_store is None:
            return
        try:
            self._seed_store.clear_seed()
        except OSError as exc:
            self._log.warning("Could not clear persisted seed: %s", exc)


__all__ = [
    "EmptyState",
    "ListState",
    "NO_SEARCH_RESULTS",
    "NO_USERS",
    "UserListSession",
]
