"""Per-record detail view-model composing bookmarks and the image cache."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, Callable, List, Optional, Tuple

from userdeck.domain.bookmark_store import BookmarkStore
from userdeck.domain.entities import UserRecord
from userdeck.domain.events import BookmarkEvent, Dispatch, inline_dispatch
from userdeck.domain.ports import ImageLoaderPort
from .user_format import age_location_label, capitalized, format_long_date

InfoRow = Tuple[str, str, str]


class UserDetailSession:
    """Detail screen state for a single ``UserRecord``.

    Bookmark change events are filtered down to this record's ``unique_id``;
    ``cleared`` events always pass because they affect every record.
    """

    def __init__(
        self,
        user: UserRecord,
        store: BookmarkStore,
        images: ImageLoaderPort,
        *,
        dispatch: Optional[Dispatch] = None,
        on_bookmark_changed: Optional[Callable[[bool], None]] = None,
        on_profile_image: Optional[Callable[[Any], None]] = None,
    ) -> None:
        self.user = user
        self._store = store
        self._images = images
        self._dispatch: Dispatch = dispatch or inline_dispatch
        self.on_bookmark_changed = on_bookmark_changed
        self.on_profile_image = on_profile_image
        self._closed = False
        self._subscription = store.subscribe(
            lambda event: self._dispatch(lambda: self._on_bookmark_event(event))
        )

    # ------------------------------------------------------------------
    # Bookmark state
    # ------------------------------------------------------------------
    @property
    def is_bookmarked(self) -> bool:
        return self._store.is_bookmarked(self.user.unique_id)

    @property
    def bookmark_button_title(self) -> str:
        return "Remove Bookmark" if self.is_bookmarked else "Add Bookmark"

    def toggle_bookmark(self) -> bool:
        return self._store.toggle(self.user)

    def _on_bookmark_event(self, event: BookmarkEvent) -> None:
        if self._closed or not event.concerns(self.user.unique_id):
            return
        if self.on_bookmark_changed:
            self.on_bookmark_changed(self.is_bookmarked)

    # ------------------------------------------------------------------
    # Profile image
    # ------------------------------------------------------------------
    def load_profile_image(self) -> "Future[Any]":
        """Load the large picture; ``on_profile_image`` fires only on success."""
        future = self._images.load(self.user.picture.large)
        future.add_done_callback(
            lambda done: self._dispatch(lambda: self._deliver_image(done))
        )
        return future

    def _deliver_image(self, future: "Future[Any]") -> None:
        if self._closed or future.cancelled():
            return
        image = future.result()
        if image is not None and self.on_profile_image:
            self.on_profile_image(image)

    # ------------------------------------------------------------------
    # Display text
    # ------------------------------------------------------------------
    @property
    def display_name(self) -> str:
        return self.user.full_name

    @property
    def initials(self) -> str:
        return self.user.initials

    @property
    def age_location_text(self) -> str:
        loc = self.user.location
        return age_location_label(self.user.age, loc.city, loc.country)

    def share_text(self) -> str:
        loc = self.user.location
        return f"Check out {self.user.full_name} from {loc.city}, {loc.country}!"

    def contact_information(self) -> List[InfoRow]:
        return [
            ("Email", self.user.email, "envelope"),
            ("Phone", self.user.phone, "phone"),
            ("Cell", self.user.cell, "phone.fill"),
        ]

    def location_information(self) -> List[InfoRow]:
        loc = self.user.location
        return [
            ("Address", self.user.full_address, "location"),
            ("City", loc.city, "building.2"),
            ("State", loc.state, "map"),
            ("Country", loc.country, "globe"),
            ("Postcode", loc.postcode.value, "number"),
        ]

    def personal_information(self) -> List[InfoRow]:
        return [
            ("Gender", capitalized(self.user.gender), "person"),
            ("Date of Birth", format_long_date(self.user.dob.date), "calendar"),
            ("Age", f"{self.user.age} years old", "clock"),
            ("Nationality", self.user.nat, "flag"),
        ]

    def account_information(self) -> List[InfoRow]:
        return [
            ("Username", self.user.login.username, "person.circle"),
            ("UUID", self.user.login.uuid, "key"),
        ]

    def close(self) -> None:
        self._closed = True
        self._subscription.dispose()


__all__ = ["UserDetailSession"]
