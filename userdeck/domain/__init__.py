"""Domain package exports for value objects, events and the bookmark store."""

from .bookmark_store import BookmarkStore
from .entities import Page, PageInfo, Postcode, UserRecord
from .errors import (
    DecodingFailure,
    FetchError,
    HttpError,
    InvalidURL,
    NetworkFailure,
    NoConnectivity,
    NoData,
)
from .events import BookmarkAction, BookmarkEvent, EventEmitter, Subscription

__all__ = [
    "BookmarkAction",
    "BookmarkEvent",
    "BookmarkStore",
    "DecodingFailure",
    "EventEmitter",
    "FetchError",
    "HttpError",
    "InvalidURL",
    "NetworkFailure",
    "NoConnectivity",
    "NoData",
    "Page",
    "PageInfo",
    "Postcode",
    "Subscription",
    "UserRecord",
]
