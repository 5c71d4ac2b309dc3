# userdeck/app/main.py
from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import List, Optional, Sequence, Tuple

from ..domain.entities import UserRecord
from ..domain.ports import UseCaseError
from ..utils import logging as logging_utils
from .container import ServiceContainer


class ConsoleApp:
    """Bootstrap: wire the list session to stdout for a quick smoke run."""

    def __init__(self, container: ServiceContainer, *, pages: int = 1, query: str = "") -> None:
        self._log = logging.getLogger(__name__)
        self.container = container
        self.pages = max(1, pages)
        self.query = query
        self._done = threading.Event()
        self._error: Optional[UseCaseError] = None
        self.session = container.user_list_session(
            on_list_updated=self._on_page,
            on_search_results=self._on_page,
            on_error=self._on_error,
        )

    def run(self, timeout_s: float = 120.0) -> int:
        for _ in range(self.pages):
            self._done.clear()
            if self.session.load_next_page() is None:
                break
            if not self._done.wait(timeout_s):
                self._log.error("Timed out waiting for page %d", self.session.current_page)
                return 1
            if self._error is not None:
                print(f"error: {self._error.message}", file=sys.stderr)
                return 1
        if self.query:
            self.session.search(self.query)
        self._print(self.session.visible_users)
        return 0

    def _on_page(self, _users: Tuple[UserRecord, ...]) -> None:
        self._done.set()

    def _on_error(self, error: UseCaseError) -> None:
        self._error = error
        self._done.set()

    def _print(self, users: Sequence[UserRecord]) -> None:
        for index, user in enumerate(users, start=1):
            row = f"{index:>4}  {user.display_name:<30} {user.email:<40} "
            row += f"{user.location.city}, {user.location.country}"
            if self.container.bookmarks.is_bookmarked(user.unique_id):
                row += "  *"
            print(row)
        if not users:
            empty = self.session.empty_state()
            print(f"{empty.title}. {empty.subtitle}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="userdeck", description="List remote users.")
    parser.add_argument("--pages", type=int, default=1, help="number of pages to load")
    parser.add_argument("--search", default="", help="filter loaded users")
    parser.add_argument("--storage-dir", default=None, help="settings/bookmark directory")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging_utils.configure_root()
    container = ServiceContainer.from_environment(args.storage_dir)
    level = logging_utils.apply_debug_preference(args.debug or container.settings.debug_logging)
    logging.getLogger(__name__).debug("Log level %s", logging_utils.level_name(level))
    try:
        return ConsoleApp(container, pages=args.pages, query=args.search).run()
    finally:
        container.shutdown()


if __name__ == "__main__":
    sys.exit(main())
