"""Authoritative list of installed packages."""

import logging
import threading
import time
from typing import Callable

from brewdeck.core.brew import BrewError
from brewdeck.core.details import DetailCache, DetailScheduler
from brewdeck.core.status import StatusLog
from brewdeck.models.package import PackageRecord

logger = logging.getLogger(__name__)


class PackageDirectory:
    """Caches the installed package list and refreshes it when stale.

    Packages removed by brewdeck are blacklisted for a while: brew can keep
    reporting them until its own state settles, and they must not flash back
    into the list in the meantime.
    """

    def __init__(
        self,
        bulk_query: Callable[[], list[PackageRecord]],
        details: DetailCache,
        scheduler: DetailScheduler | None = None,
        status: StatusLog | None = None,
        clock: Callable[[], float] = time.monotonic,
        stale_after: float = 30.0,
        blacklist_ttl: float = 120.0,
    ):
        self._bulk_query = bulk_query
        self.details = details
        self.scheduler = scheduler
        self.status = status
        self._clock = clock
        self.stale_after = stale_after
        self.blacklist_ttl = blacklist_ttl

        self._packages: list[PackageRecord] = []
        self._has_snapshot = False
        self._last_refresh: float | None = None
        self._force = False
        self._lock = threading.Lock()

        self._blacklist: dict[str, float] = {}
        self._blacklist_lock = threading.Lock()

        self.refresh_count = 0

    def _purge_blacklist(self, now: float) -> set[str]:
        with self._blacklist_lock:
            expired = [
                name
                for name, removed_at in self._blacklist.items()
                if now - removed_at > self.blacklist_ttl
            ]
            for name in expired:
                del self._blacklist[name]
            return set(self._blacklist)

    def _needs_refresh(self, now: float) -> bool:
        with self._lock:
            if self._force or self._last_refresh is None:
                return True
            return now - self._last_refresh > self.stale_after

    def _refresh(self, now: float) -> None:
        with self._lock:
            self._force = False
            self._last_refresh = now
            self.refresh_count += 1

        try:
            packages = self._bulk_query()
        except BrewError as e:
            logger.warning("package list refresh failed: %s", e)
            with self._lock:
                if not self._has_snapshot:
                    self._packages = [PackageRecord.load_error(str(e))]
            if self.status is not None:
                self.status.push(f"⚠️  Failed to refresh package list: {e}")
            return

        if not packages:
            packages = [PackageRecord.no_packages()]

        with self._lock:
            self._packages = list(packages)
            self._has_snapshot = True
        logger.debug("package list refreshed: %d package(s)", len(packages))

    def get_all(self) -> list[PackageRecord]:
        """Installed packages, minus recently removed ones."""
        now = self._clock()
        hidden = self._purge_blacklist(now)

        if self._needs_refresh(now):
            self._refresh(now)

        with self._lock:
            snapshot = list(self._packages)
        return [pkg for pkg in snapshot if pkg.identifier not in hidden]

    def force_refresh(self) -> None:
        """Make the next get_all() query brew."""
        with self._lock:
            self._force = True

    def tombstone(self, identifier: str) -> None:
        """Forget a removed package and hide it until brew stops reporting it."""
        # Forget before discarding so an in-flight fetch cannot re-cache it
        if self.scheduler is not None:
            self.scheduler.forget(identifier)
        self.details.discard(identifier)
        with self._blacklist_lock:
            self._blacklist[identifier] = self._clock()
        self.force_refresh()

    def is_blacklisted(self, identifier: str) -> bool:
        with self._blacklist_lock:
            return identifier in self._blacklist
