"""Tests for the detail cache and the background request scheduler."""

import threading
import time

import pytest

from brewdeck.core.brew import BrewError
from brewdeck.core.details import DetailCache, DetailScheduler

from conftest import make_record


class RecordingFetch:
    """Fetch double that remembers the order of requests."""

    def __init__(self, fail: set[str] | None = None):
        self.calls: list[str] = []
        self.fail = fail or set()

    def __call__(self, identifier: str):
        self.calls.append(identifier)
        if identifier in self.fail:
            raise BrewError(f"No available formula with the name \"{identifier}\"")
        return [make_record(identifier, description=f"{identifier} details")]


@pytest.fixture
def fetch():
    return RecordingFetch()


@pytest.fixture
def scheduler(clock, fetch):
    return DetailScheduler(DetailCache(), fetch, clock=clock)


class TestDetailCache:
    def test_put_get_discard(self):
        cache = DetailCache()
        cache.put_many([make_record("wget"), make_record("curl")])
        assert cache.get("wget").identifier == "wget"
        assert cache.contains("curl")
        assert len(cache) == 2
        cache.discard("wget")
        assert cache.get("wget") is None
        cache.discard("missing")


class TestRequestDetails:
    def test_repeat_within_window_is_suppressed(self, scheduler, fetch, clock):
        assert scheduler.request_details("wget") is True
        clock.advance(0.5)
        assert scheduler.request_details("wget") is False

        while scheduler.run_once():
            pass
        assert fetch.calls == ["wget"]

    def test_repeat_after_window_is_queued(self, scheduler, clock):
        assert scheduler.request_details("wget")
        clock.advance(1.0)
        assert scheduler.request_details("wget")

    def test_request_for_current_fetch_is_dropped(self, clock):
        started = threading.Event()
        release = threading.Event()

        def slow_fetch(identifier):
            started.set()
            release.wait(5)
            return [make_record(identifier)]

        scheduler = DetailScheduler(DetailCache(), slow_fetch, clock=clock)
        scheduler.request_details("wget")
        worker = threading.Thread(target=scheduler.run_once)
        worker.start()
        assert started.wait(5)

        clock.advance(5)
        assert scheduler.current == "wget"
        assert scheduler.status == "Loading details for wget"
        assert scheduler.request_details("wget") is False

        release.set()
        worker.join(5)
        assert scheduler.current is None
        assert scheduler.status is None


class TestRunOnce:
    def test_empty_queue(self, scheduler):
        assert scheduler.run_once() is False

    def test_one_request_per_iteration(self, scheduler, fetch):
        for name in ("a", "b", "c"):
            scheduler.request_details(name)
        assert scheduler.run_once()
        assert fetch.calls == ["a"]
        assert scheduler.run_once()
        assert fetch.calls == ["a", "b"]

    def test_priority_served_first(self, scheduler, fetch, clock):
        scheduler.request_details("background")
        clock.advance(0.1)
        scheduler.request_details("selected", priority=True)

        scheduler.run_once()
        assert fetch.calls == ["selected"]

    def test_fifo_within_priority(self, scheduler, fetch, clock):
        for name in ("first", "second", "third"):
            scheduler.request_details(name, priority=True)
            clock.advance(0.1)

        while scheduler.run_once():
            pass
        assert fetch.calls == ["first", "second", "third"]

    def test_newest_request_per_identifier_survives(self, scheduler, fetch, clock):
        scheduler.request_details("wget")
        clock.advance(0.1)
        scheduler.request_details("curl", priority=True)
        clock.advance(2)
        scheduler.request_details("wget", priority=True)

        scheduler.run_once()
        scheduler.run_once()
        assert fetch.calls == ["curl", "wget"]
        assert scheduler.run_once() is False

    def test_result_is_cached(self, scheduler):
        scheduler.request_details("wget")
        scheduler.run_once()
        assert scheduler.cache.get("wget").description == "wget details"
        assert not scheduler.is_pending("wget")

    def test_cached_identifier_not_fetched_again(self, scheduler, fetch, clock):
        scheduler.cache.put_many([make_record("wget")])
        scheduler.request_details("wget")
        assert scheduler.run_once() is True
        assert fetch.calls == []
        assert not scheduler.is_pending("wget")

    def test_fetch_error_is_swallowed(self, clock):
        fetch = RecordingFetch(fail={"ghost"})
        scheduler = DetailScheduler(DetailCache(), fetch, clock=clock)
        scheduler.request_details("ghost", priority=True)

        assert scheduler.run_once() is True
        assert scheduler.cache.get("ghost") is None
        assert scheduler.status is None
        assert scheduler.current is None
        # Not retried on its own, but can be asked for again right away
        assert scheduler.run_once() is False
        assert scheduler.request_details("ghost", priority=True)

    def test_forget(self, scheduler):
        scheduler.request_details("wget")
        scheduler.forget("wget")
        assert not scheduler.is_pending("wget")
        assert scheduler.request_details("wget")

    def test_unexpected_error_still_clears_state(self, clock):
        def fetch(identifier):
            raise ValueError("unexpected brew output")

        scheduler = DetailScheduler(DetailCache(), fetch, clock=clock)
        scheduler.request_details("wget", priority=True)
        with pytest.raises(ValueError):
            scheduler.run_once()
        assert scheduler.current is None
        assert scheduler.status is None
        assert not scheduler.is_pending("wget")


class TestLoadingAnimation:
    def test_cycles_through_three_frames(self, scheduler, clock):
        frames = []
        for _ in range(4):
            frames.append(scheduler.loading_frame())
            clock.advance(0.5)
        assert frames == [0, 1, 2, 0]

    def test_placeholder_description(self, scheduler, clock):
        assert scheduler.placeholder_description() == "Loading."
        clock.advance(1.0)
        assert scheduler.placeholder_description() == "Loading..."


class TestWorkerThread:
    def test_background_worker_fills_cache(self):
        scheduler = DetailScheduler(DetailCache(), RecordingFetch(), poll_interval=0.01)
        scheduler.start()
        try:
            scheduler.request_details("wget", priority=True)
            deadline = time.monotonic() + 5
            while not scheduler.cache.contains("wget") and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            scheduler.stop()
        assert scheduler.cache.contains("wget")

    def test_worker_survives_unexpected_error(self):
        def fetch(identifier):
            if identifier == "broken":
                raise ValueError("unexpected brew output")
            return [make_record(identifier)]

        scheduler = DetailScheduler(DetailCache(), fetch, poll_interval=0.01)
        scheduler.start()
        try:
            scheduler.request_details("broken", priority=True)
            deadline = time.monotonic() + 5
            while scheduler.is_pending("broken") and time.monotonic() < deadline:
                time.sleep(0.01)
            scheduler.request_details("wget", priority=True)
            while not scheduler.cache.contains("wget") and time.monotonic() < deadline:
                time.sleep(0.01)
            assert scheduler._thread.is_alive()
        finally:
            scheduler.stop()
        assert scheduler.cache.contains("wget")
        assert not scheduler.cache.contains("broken")
        assert scheduler.status is None
