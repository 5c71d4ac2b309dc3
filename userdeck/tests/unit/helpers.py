from __future__ import annotations

import copy
import io
import json
from concurrent.futures import Executor, Future
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image

from userdeck.domain.entities import UserRecord

BASE_USER: Dict[str, Any] = {
    "gender": "female",
    "name": {"title": "Ms", "first": "Ada", "last": "Lovelace"},
    "location": {
        "street": {"number": 12, "name": "St James Square"},
        "city": "London",
        "state": "Greater London",
        "country": "United Kingdom",
        "postcode": "SW1Y 4JH",
        "coordinates": {"latitude": "51.5074", "longitude": "-0.1345"},
        "timezone": {"offset": "+0:00", "description": "Western Europe Time, London"},
    },
    "email": "ada.lovelace@example.com",
    "login": {
        "uuid": "7a0eed16-9430-4d68-901f-c0d4c1c3bf00",
        "username": "countess",
        "password": "analytical",
        "salt": "m4x",
        "md5": "b8a1b3f6e1a1c0d5d0c9b7f1a4c2e3d1",
        "sha1": "0b9b4cb6e2a7e0b2a8c7bb3f7d6f6a8c9e0d1f2a",
        "sha256": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
    },
    "dob": {"date": "1815-12-10T08:00:00.000Z", "age": 36},
    "registered": {"date": "2010-06-01T12:30:00.000Z", "age": 14},
    "phone": "020-7946-0000",
    "cell": "07700-900000",
    "id": {"name": "NINO", "value": "AB 12 34 56 C"},
    "picture": {
        "large": "https://randomuser.me/api/portraits/women/1.jpg",
        "medium": "https://randomuser.me/api/portraits/med/women/1.jpg",
        "thumbnail": "https://randomuser.me/api/portraits/thumb/women/1.jpg",
    },
    "nat": "GB",
}


def user_payload(index: int = 0, **overrides: Any) -> Dict[str, Any]:
    """Return a distinct wire payload; ``overrides`` replace top-level keys."""
    payload = copy.deepcopy(BASE_USER)
    if index:
        payload["email"] = f"user{index}@example.com"
        payload["login"]["username"] = f"user{index}"
        payload["name"]["first"] = f"First{index}"
        payload["name"]["last"] = f"Last{index}"
        payload["picture"]["large"] = f"https://randomuser.me/api/portraits/women/{index}.jpg"
    payload.update(overrides)
    return payload


def make_user(index: int = 0, **overrides: Any) -> UserRecord:
    return UserRecord.from_payload(user_payload(index, **overrides))


def page_payload(
    count: int,
    *,
    start: int = 1,
    seed: str = "abc123",
    page: int = 1,
) -> Dict[str, Any]:
    return {
        "results": [user_payload(start + offset) for offset in range(count)],
        "info": {"seed": seed, "results": count, "page": page, "version": "1.4"},
    }


def png_bytes(size: Tuple[int, int] = (4, 4), color: str = "red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class ResponseStub:
    def __init__(
        self,
        payload: Any = None,
        *,
        status_code: int = 200,
        content: Optional[bytes] = None,
    ) -> None:
        self.status_code = status_code
        if content is None:
            content = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self.content = content
        self.text = content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))


class SessionStub:
    """``requests.Session`` double; each item is a response or an exception."""

    def __init__(self, outcomes: Sequence[Any]) -> None:
        self._outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> Any:
        self.calls.append({"url": url, **kwargs})
        if not self._outcomes:
            raise AssertionError(f"Unexpected GET {url}")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class ImmediateExecutor(Executor):
    """Run submitted callables synchronously on the caller's thread."""

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:
            future.set_exception(exc)
        return future


class ManualExecutor(Executor):
    """Queue submitted callables until ``run_all`` is called."""

    def __init__(self) -> None:
        self.pending: List[Tuple[Future, Callable[..., Any], tuple, dict]] = []

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self) -> None:
        while self.pending:
            future, fn, args, kwargs = self.pending.pop(0)
            try:
                future.set_result(fn(*args, **kwargs))
            except BaseException as exc:
                future.set_exception(exc)


class ReachabilityStub:
    def __init__(self, connected: bool = True) -> None:
        self.is_connected = connected

    def subscribe(self, callback: Callable[[bool], None]) -> Any:  # pragma: no cover - unused
        raise NotImplementedError


class FeedStub:
    """``UserFeedPort`` double returning futures the test resolves by hand."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.futures: List[Future] = []
        self.closed = False

    def fetch_page(
        self,
        page: int,
        page_size: int = 25,
        seed: Optional[str] = None,
        retries: int = 2,
        retry_delay_s: float = 1.0,
    ) -> Future:
        self.calls.append(
            {"page": page, "page_size": page_size, "seed": seed, "retries": retries}
        )
        future: Future = Future()
        self.futures.append(future)
        return future

    def close(self) -> None:
        self.closed = True


class MemoryBlobStorage:
    def __init__(self, blobs: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(blobs or {})
        self.writes = 0
        self.fail_writes = False

    def read_blob(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write_blob(self, key: str, text: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes += 1
        self.blobs[key] = text

    def delete_blob(self, key: str) -> None:
        self.blobs.pop(key, None)


__all__ = [
    "BASE_USER",
    "FeedStub",
    "ImmediateExecutor",
    "ManualExecutor",
    "MemoryBlobStorage",
    "ReachabilityStub",
    "ResponseStub",
    "SessionStub",
    "make_user",
    "page_payload",
    "png_bytes",
    "user_payload",
]
