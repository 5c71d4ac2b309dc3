from concurrent.futures import ThreadPoolExecutor

import pytest

from userdeck.adapters.user_rest import RemoteUserClient
from userdeck.domain.bookmark_store import BookmarkStore
from userdeck.domain.entities import Page
from userdeck.domain.errors import NetworkFailure, NoConnectivity
from userdeck.domain.events import inline_dispatch
from userdeck.viewmodels.user_list_session import (
    NO_SEARCH_RESULTS,
    NO_USERS,
    ListState,
    UserListSession,
)
from userdeck.tests.unit.helpers import (
    FeedStub,
    MemoryBlobStorage,
    ReachabilityStub,
    page_payload,
)


class SeedStoreStub:
    def __init__(self, seed=None):
        self.seed = seed
        self.saved = []
        self.cleared = 0

    def load_seed(self):
        return self.seed

    def save_seed(self, seed):
        self.saved.append(seed)
        self.seed = seed

    def clear_seed(self):
        self.cleared += 1
        self.seed = None


def _page(count, *, start=1, seed="abc123", page=1, size=25):
    return Page.from_payload(
        page_payload(count, start=start, seed=seed, page=page),
        page_number=page,
        requested_count=size,
    )


class Harness:
    def __init__(self, **kwargs):
        self.feed = FeedStub()
        self.store = BookmarkStore(MemoryBlobStorage(), dispatch=inline_dispatch)
        self.updates = []
        self.results = []
        self.errors = []
        self.loading = []
        self.rows_changed = []
        self.session = UserListSession(
            self.feed,
            self.store,
            dispatch=inline_dispatch,
            on_list_updated=self.updates.append,
            on_search_results=self.results.append,
            on_error=self.errors.append,
            on_loading_changed=self.loading.append,
            on_rows_changed=self.rows_changed.append,
            **kwargs,
        )

    def resolve(self, page, index=-1):
        self.feed.futures[index].set_result(page)

    def fail(self, exc, index=-1):
        self.feed.futures[index].set_exception(exc)


def test_first_page_adopts_server_seed_for_later_pages():
    h = Harness()

    h.session.load_next_page()
    assert h.feed.calls[0]["page"] == 1
    assert h.feed.calls[0]["seed"] is None
    h.resolve(_page(25, seed="abc123"))

    h.session.load_next_page()

    assert h.feed.calls[1] == {"page": 2, "page_size": 25, "seed": "abc123", "retries": 2}
    assert h.session.seed == "abc123"
    assert len(h.updates[-1]) == 25


def test_pages_accumulate_in_order():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))
    h.session.load_next_page()
    h.resolve(_page(25, start=26, page=2))

    emails = [u.email for u in h.session.users]
    assert len(emails) == 50
    assert emails[0] == "user1@example.com"
    assert emails[-1] == "user50@example.com"
    assert h.session.current_page == 3
    assert h.session.state is ListState.LOADED


def test_loading_flag_blocks_duplicate_requests():
    h = Harness()
    assert h.session.load_next_page() is not None
    assert h.session.load_next_page() is None
    assert len(h.feed.calls) == 1
    assert h.session.state is ListState.LOADING
    assert h.session.should_show_initial_loading()

    h.resolve(_page(25))
    assert h.loading == [True, False]


def test_short_page_exhausts_the_list():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(10))

    assert h.session.is_exhausted
    assert h.session.state is ListState.EXHAUSTED
    assert h.session.load_next_page() is None
    assert h.session.load_more_if_needed(9) is None
    assert len(h.feed.calls) == 1


def test_failure_reports_error_and_keeps_cursor():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))
    h.session.load_next_page()

    cause = NoConnectivity()
    h.fail(cause)

    assert [e.code for e in h.errors] == ["NO_CONNECTIVITY"]
    assert h.errors[0].__cause__ is cause
    assert h.session.last_error is h.errors[0]
    assert h.session.current_page == 2
    assert len(h.session.users) == 25
    assert not h.session.is_loading

    h.session.load_next_page()
    assert h.feed.calls[-1]["page"] == 2


def test_network_failure_maps_code():
    h = Harness()
    h.session.load_next_page()
    h.fail(NetworkFailure(OSError("reset"), attempts=3))
    assert h.errors[0].code == "NETWORK_FAILURE"


def test_prefetch_triggers_near_the_end_only():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))

    assert h.session.load_more_if_needed(10) is None
    assert h.session.load_more_if_needed(UserListSession.PREFETCH_THRESHOLD + 14) is None
    assert h.session.load_more_if_needed(20) is not None
    assert h.feed.calls[-1]["page"] == 2


def test_no_prefetch_while_searching():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))
    h.session.search("user2")

    assert h.session.load_more_if_needed(24) is None
    assert len(h.feed.calls) == 1


def test_search_filters_without_network_and_clear_restores():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))

    h.session.search("First1")

    visible = h.session.visible_users
    # First1, First10..First19
    assert len(visible) == 11
    assert h.results[-1] == visible
    assert h.session.user_count == 11
    assert len(h.feed.calls) == 1

    h.session.search("")
    assert not h.session.is_searching
    assert h.session.user_count == 25
    assert len(h.updates[-1]) == 25


def test_search_with_no_matches_uses_search_empty_state():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(5))
    h.session.search("zzz")

    assert h.session.is_empty
    assert h.session.empty_state() == NO_SEARCH_RESULTS
    h.session.clear_search()
    assert h.session.empty_state() == NO_USERS


def test_page_arriving_during_search_refilters():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))
    h.session.search("First3")
    assert h.session.user_count == 1
    h.session.load_next_page()
    h.resolve(_page(25, start=26, page=2))

    assert h.session.user_count == 11
    assert h.results[-1] == h.session.visible_users


def test_refresh_resets_everything_and_fetches_page_one_once():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))
    h.session.load_next_page()
    h.resolve(_page(25, start=26, page=2))
    h.session.search("First")
    calls_before = len(h.feed.calls)

    h.session.refresh()

    assert h.session.users == ()
    assert not h.session.is_searching
    assert h.session.search_text == ""
    assert h.session.seed is None
    assert len(h.feed.calls) == calls_before + 1
    assert h.feed.calls[-1]["page"] == 1
    assert h.feed.calls[-1]["seed"] is None


def test_stale_completion_after_refresh_is_dropped():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25, seed="old"))
    h.session.load_next_page()
    stale = h.feed.futures[-1]

    h.session.refresh()
    stale.set_result(_page(25, start=26, page=2, seed="old"))

    assert h.session.users == ()
    assert h.session.is_loading
    h.resolve(_page(25, start=100, seed="new"))
    assert h.session.seed == "new"
    assert h.session.users[0].email == "user100@example.com"


def test_completion_after_close_is_ignored():
    h = Harness()
    h.session.load_next_page()
    h.session.close()
    h.resolve(_page(25))

    assert h.updates == []
    assert h.session.users == ()


def test_toggle_bookmark_uses_filtered_index():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))
    h.session.search("user7@")

    assert h.session.toggle_bookmark(0) is True
    assert h.store.is_bookmarked("user7@example.com_user7")
    assert h.session.is_bookmarked(0)
    assert h.session.row_at(0).is_bookmarked
    assert h.session.toggle_bookmark(5) is None


def test_bookmark_events_report_visible_row_indices():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(25))

    h.store.add(h.session.user_at(3))
    h.store.clear_all()

    assert h.rows_changed == [[3], list(range(25))]


def test_rows_project_bookmark_state():
    h = Harness()
    h.session.load_next_page()
    h.resolve(_page(3))
    h.store.add(h.session.user_at(1))

    rows = h.session.rows()

    assert [r.is_bookmarked for r in rows] == [False, True, False]
    assert rows[0].full_name == "First1 Last1"
    assert rows[0].location == "London, United Kingdom"
    assert h.session.index_of(rows[2].user_id) == 2


def test_seed_store_restores_persists_and_clears():
    seeds = SeedStoreStub(seed="persisted")
    h = Harness(seed_store=seeds)

    h.session.load_next_page()
    assert h.feed.calls[0]["seed"] == "persisted"
    h.resolve(_page(25, seed="persisted"))
    assert seeds.saved == []

    h.session.refresh()
    assert seeds.cleared == 1
    h.resolve(_page(25, seed="fresh"))
    assert seeds.saved == ["fresh"]


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        Harness(page_size=0)


class RefusingFeed(FeedStub):
    """Feed whose first ``refusals`` requests raise before returning a future."""

    def __init__(self, refusals=1):
        super().__init__()
        self.refusals = refusals

    def fetch_page(self, page, page_size=25, seed=None, retries=2, retry_delay_s=1.0):
        if self.refusals:
            self.refusals -= 1
            raise RuntimeError("cannot schedule new futures after shutdown")
        return super().fetch_page(page, page_size, seed, retries, retry_delay_s)


def test_refused_request_reports_error_and_allows_retry():
    feed = RefusingFeed()
    store = BookmarkStore(MemoryBlobStorage(), dispatch=inline_dispatch)
    errors, loading = [], []
    session = UserListSession(
        feed,
        store,
        dispatch=inline_dispatch,
        on_error=errors.append,
        on_loading_changed=loading.append,
    )

    assert session.load_next_page() is None

    assert not session.is_loading
    assert loading == [True, False]
    assert [e.code for e in errors] == ["UNEXPECTED"]
    assert isinstance(errors[0].__cause__, RuntimeError)
    assert session.current_page == 1

    assert session.load_next_page() is not None
    assert feed.calls[-1]["page"] == 1


def test_closed_client_does_not_wedge_the_session():
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()
    client = RemoteUserClient(ReachabilityStub(), executor=executor)
    errors = []
    session = UserListSession(
        client,
        BookmarkStore(MemoryBlobStorage(), dispatch=inline_dispatch),
        dispatch=inline_dispatch,
        on_error=errors.append,
    )

    assert session.load_next_page() is None
    assert not session.is_loading
    assert len(errors) == 1
