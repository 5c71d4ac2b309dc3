"""Bookmarks tab projection of ``BookmarkStore``."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from userdeck.domain.bookmark_store import BookmarkStore
from userdeck.domain.entities import UserRecord
from userdeck.domain.events import BookmarkEvent, Dispatch, inline_dispatch
from .user_list_session import EmptyState
from .user_row import UserRow


class BookmarksSession:
    """
    Read-through facade over the bookmark store for the bookmarks view.

    The local snapshot is refreshed from ``store.list()`` on construction and
    after every change event, so mutations issued here show up through the
    same path as mutations issued from other sessions.
    """

    EMPTY_STATE = EmptyState(
        title="No Bookmarks Yet",
        subtitle="Start bookmarking users to see them here",
        image_name="bookmark.slash",
    )

    def __init__(
        self,
        store: BookmarkStore,
        *,
        dispatch: Optional[Dispatch] = None,
        on_bookmarks_updated: Optional[Callable[[List[UserRecord]], None]] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self._store = store
        self._dispatch: Dispatch = dispatch or inline_dispatch
        self.on_bookmarks_updated = on_bookmarks_updated
        self.bookmarked_users: List[UserRecord] = []
        self._closed = False
        self._subscription = store.subscribe(
            lambda event: self._dispatch(lambda: self._on_bookmark_event(event))
        )
        self.reload()

    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        return len(self.bookmarked_users)

    @property
    def is_empty(self) -> bool:
        return not self.bookmarked_users

    @property
    def can_clear_all(self) -> bool:
        return not self.is_empty

    def reload(self) -> None:
        """Re-read the store and notify the view."""
        self.bookmarked_users = self._store.list()
        if self.on_bookmarks_updated:
            self.on_bookmarks_updated(list(self.bookmarked_users))

    def user_at(self, index: int) -> Optional[UserRecord]:
        if 0 <= index < len(self.bookmarked_users):
            return self.bookmarked_users[index]
        return None

    def row_at(self, index: int) -> Optional[UserRow]:
        user = self.user_at(index)
        if user is None:
            return None
        return UserRow.from_user(user, is_bookmarked=self._store.is_bookmarked(user.unique_id))

    def index_of(self, unique_id: str) -> Optional[int]:
        for index, user in enumerate(self.bookmarked_users):
            if user.unique_id == unique_id:
                return index
        return None

    # ------------------------------------------------------------------
    # Commands (the snapshot follows through the change event)
    # ------------------------------------------------------------------
    def remove(self, index: int) -> bool:
        user = self.user_at(index)
        if user is None:
            return False
        return self._store.remove(user)

    def toggle(self, index: int) -> Optional[bool]:
        user = self.user_at(index)
        if user is None:
            return None
        return self._store.toggle(user)

    def clear_all(self) -> None:
        self._store.clear_all()

    def remove_confirmation_message(self, index: int) -> str:
        user = self.user_at(index)
        if user is None:
            return "Remove bookmark?"
        return f"Remove {user.full_name} from bookmarks?"

    def close(self) -> None:
        self._closed = True
        self._subscription.dispose()

    # ------------------------------------------------------------------
    def _on_bookmark_event(self, event: BookmarkEvent) -> None:
        if self._closed:
            return
        self._log.debug("Bookmarks changed (%s); reloading", event.action.value)
        self.reload()


__all__ = ["BookmarksSession"]
