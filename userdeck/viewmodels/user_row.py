"""Row projection of a ``UserRecord`` for list and bookmarks views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from userdeck.domain.entities import UserRecord
from .user_format import location_label


@dataclass(frozen=True)
class UserRow:
    """Display row model consumed by list cell widgets."""
    user_id: str
    full_name: str
    email: str
    location: str
    avatar_url: Optional[str]
    initials: str
    is_bookmarked: bool

    @classmethod
    def from_user(cls, user: UserRecord, *, is_bookmarked: bool) -> "UserRow":
        return cls(
            user_id=user.unique_id,
            full_name=user.display_name,
            email=user.email,
            location=location_label(user.location.city, user.location.country),
            avatar_url=user.picture.thumbnail or None,
            initials=user.initials,
            is_bookmarked=is_bookmarked,
        )


__all__ = ["UserRow"]
