"""Per-package detail cache and the background worker that fills it.

The worker fetches one package per wake-up so brew is never hammered, however
fast the user scrolls. Requests made while a fetch is running queue up and are
de-duplicated and ordered before the next pick: priority requests (the row the
user is looking at) go first, then oldest first.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Callable

from brewdeck.core.brew import BrewError
from brewdeck.models.package import PackageRecord

logger = logging.getLogger(__name__)


class DetailCache:
    """Thread-safe map of identifier to fully detailed record."""

    def __init__(self):
        self._records: dict[str, PackageRecord] = {}
        self._lock = threading.Lock()

    def get(self, identifier: str) -> PackageRecord | None:
        with self._lock:
            return self._records.get(identifier)

    def contains(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._records

    def put_many(self, records: list[PackageRecord]) -> None:
        with self._lock:
            for record in records:
                self._records[record.identifier] = record

    def discard(self, identifier: str) -> None:
        with self._lock:
            self._records.pop(identifier, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


@dataclass(frozen=True)
class DetailRequest:
    identifier: str
    priority: bool
    enqueued_at: float

    def sort_key(self) -> tuple[bool, float]:
        return (not self.priority, self.enqueued_at)


class DetailScheduler:
    """Single background worker fetching package details on demand."""

    ANIMATION_FRAMES = 3

    def __init__(
        self,
        cache: DetailCache,
        fetch: Callable[[str], list[PackageRecord]],
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 0.1,
        dedup_window: float = 1.0,
        animation_interval: float = 0.4,
    ):
        self.cache = cache
        self._fetch = fetch
        self._clock = clock
        self.poll_interval = poll_interval
        self.dedup_window = dedup_window
        self.animation_interval = animation_interval
        self._animation_epoch = clock()

        self._queue: queue.Queue[DetailRequest] = queue.Queue()
        self._working: dict[str, DetailRequest] = {}

        self._pending: dict[str, float] = {}
        self._pending_lock = threading.Lock()
        self._current: str | None = None
        self._status: str | None = None
        self._state_lock = threading.Lock()

        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # --- Called from the UI thread ---

    def request_details(self, identifier: str, priority: bool = False) -> bool:
        """Queue a detail fetch. Returns False if the request was suppressed."""
        with self._state_lock:
            if self._current == identifier:
                return False

        now = self._clock()
        with self._pending_lock:
            last = self._pending.get(identifier)
            if last is not None and now - last < self.dedup_window:
                return False
            self._pending[identifier] = now

        self._queue.put(DetailRequest(identifier, priority, now))
        return True

    def forget(self, identifier: str) -> None:
        """Drop bookkeeping for a package that no longer exists."""
        with self._pending_lock:
            self._pending.pop(identifier, None)
        with self._state_lock:
            if self._current == identifier:
                self._current = None

    @property
    def status(self) -> str | None:
        with self._state_lock:
            return self._status

    @property
    def current(self) -> str | None:
        with self._state_lock:
            return self._current

    def is_pending(self, identifier: str) -> bool:
        with self._pending_lock:
            return identifier in self._pending

    def loading_frame(self) -> int:
        """Animation frame (0..2), advancing every animation_interval seconds."""
        elapsed = self._clock() - self._animation_epoch
        return int(elapsed / self.animation_interval) % self.ANIMATION_FRAMES

    def placeholder_description(self) -> str:
        return "Loading" + "." * (self.loading_frame() + 1)

    # --- Worker side ---

    def _drain(self) -> None:
        while True:
            try:
                request = self._queue.get_nowait()
            except queue.Empty:
                return
            # Newest request per identifier wins
            self._working[request.identifier] = request

    def _next_request(self) -> DetailRequest | None:
        self._drain()
        if not self._working:
            return None
        request = min(self._working.values(), key=DetailRequest.sort_key)
        del self._working[request.identifier]
        return request

    def run_once(self) -> bool:
        """Process at most one request. Returns True if one was taken."""
        request = self._next_request()
        if request is None:
            return False

        identifier = request.identifier
        if self.cache.contains(identifier):
            with self._pending_lock:
                self._pending.pop(identifier, None)
            return True

        with self._state_lock:
            self._current = identifier
            self._status = f"Loading details for {identifier}"

        try:
            records = self._fetch(identifier)
        except BrewError as e:
            logger.warning("could not load details for %s: %s", identifier, e)
        else:
            # forget() during the fetch means the package is gone
            with self._state_lock:
                if self._current == identifier:
                    self.cache.put_many(records)
                    logger.debug("cached %d record(s) for %s", len(records), identifier)
                else:
                    logger.debug("dropping details for forgotten package %s", identifier)
        finally:
            with self._state_lock:
                if self._current == identifier:
                    self._current = None
                self._status = None
            with self._pending_lock:
                self._pending.pop(identifier, None)

        return True

    def _loop(self) -> None:
        logger.debug("detail worker started")
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("detail worker iteration failed")
            self._stop.wait(self.poll_interval)
        logger.debug("detail worker stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="brewdeck-details", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
