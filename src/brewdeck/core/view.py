"""Package list as the user sees it: rows, search filter and cursor."""

import logging
from typing import Callable

from brewdeck.core.brew import BrewError, OperationKind
from brewdeck.core.details import DetailScheduler
from brewdeck.core.directory import PackageDirectory
from brewdeck.core.operations import OperationOutcome
from brewdeck.core.status import StatusLog
from brewdeck.models.package import PackageRecord

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


class PackageView:
    """Owns the displayed lists and the selected row.

    Everything here runs on the UI thread.
    """

    def __init__(
        self,
        directory: PackageDirectory,
        scheduler: DetailScheduler,
        single_query: Callable[[str], list[PackageRecord]],
        status: StatusLog,
    ):
        self.directory = directory
        self.scheduler = scheduler
        self._single_query = single_query
        self.status = status

        self.items: list[PackageRecord] = []
        self.filtered_items: list[PackageRecord] = []
        self.search_query = ""
        self.is_searching = False
        self.selected: int | None = None

    # --- Loading ---

    def reload(self, preserve_selection: int | None = None) -> None:
        """Re-read the directory and re-apply the filter."""
        self.items = self.directory.get_all()
        self._apply_filter(preserve_selection)

    def _apply_filter(self, preserve_selection: int | None = None) -> None:
        if not self.search_query:
            self.filtered_items = list(self.items)
        else:
            query = self.search_query.lower()
            self.filtered_items = [
                pkg
                for pkg in self.items
                if query in pkg.identifier.lower()
                or query in pkg.name.lower()
                or query in pkg.description.lower()
            ]

        count = len(self.display_items())
        if count == 0:
            self.selected = None
        elif preserve_selection is not None:
            self.selected = min(preserve_selection, count - 1)
        else:
            self.selected = 0

    def display_items(self) -> list[PackageRecord]:
        return self.filtered_items if self.is_searching else self.items

    def selected_package(self) -> PackageRecord | None:
        items = self.display_items()
        if self.selected is None or self.selected >= len(items):
            return None
        return items[self.selected]

    # --- Details ---

    def selected_details(self) -> PackageRecord | None:
        """Detailed record for the selected row, requesting it if needed."""
        package = self.selected_package()
        if package is None:
            return None

        cached = self.scheduler.cache.get(package.identifier)
        if cached is not None:
            return cached

        self.scheduler.request_details(package.identifier, priority=True)
        return package.with_description(self.scheduler.placeholder_description())

    def prefetch(self, identifiers: list[str]) -> None:
        """Ask for details of rows that are on screen but not selected."""
        for identifier in identifiers:
            if not self.scheduler.cache.contains(identifier):
                self.scheduler.request_details(identifier)

    # --- Navigation ---

    def _move_to(self, index: int) -> None:
        if self.display_items():
            self.selected = index

    def next(self) -> None:
        count = len(self.display_items())
        if count == 0:
            return
        if self.selected is None or self.selected >= count - 1:
            self._move_to(0)
        else:
            self._move_to(self.selected + 1)

    def previous(self) -> None:
        count = len(self.display_items())
        if count == 0:
            return
        if self.selected is None:
            self._move_to(0)
        elif self.selected == 0:
            self._move_to(count - 1)
        else:
            self._move_to(self.selected - 1)

    def first(self) -> None:
        self._move_to(0)

    def last(self) -> None:
        self._move_to(len(self.display_items()) - 1)

    def page_down(self) -> None:
        count = len(self.display_items())
        if count:
            self._move_to(min((self.selected or 0) + PAGE_SIZE, count - 1))

    def page_up(self) -> None:
        self._move_to(max((self.selected or 0) - PAGE_SIZE, 0))

    # --- Search ---

    def start_search(self) -> None:
        self.is_searching = True
        self.search_query = ""
        self._apply_filter()

    def end_search(self) -> None:
        """Leave search mode, keeping the selected package selected."""
        package = self.selected_package()
        self.is_searching = False
        self.search_query = ""
        self.filtered_items = list(self.items)

        if not self.items:
            self.selected = None
            return
        self.selected = 0
        if package is not None:
            for index, pkg in enumerate(self.items):
                if pkg.identifier == package.identifier:
                    self.selected = index
                    break

    def add_search_char(self, char: str) -> None:
        if self.is_searching:
            self.search_query += char
            self._apply_filter()

    def remove_search_char(self) -> None:
        if self.is_searching and self.search_query:
            self.search_query = self.search_query[:-1]
            self._apply_filter()

    # --- Reconciliation after an operation ---

    def _replace(self, record: PackageRecord) -> None:
        for items in (self.items, self.filtered_items):
            for index, pkg in enumerate(items):
                if pkg.identifier == record.identifier:
                    items[index] = record

    def _remove(self, identifier: str) -> None:
        self.items = [pkg for pkg in self.items if pkg.identifier != identifier]
        self.filtered_items = [pkg for pkg in self.filtered_items if pkg.identifier != identifier]

    def refresh_single(self, identifier: str) -> None:
        """Re-fetch one package and splice it into the lists."""
        records = self._single_query(identifier)
        for record in records:
            if record.identifier == identifier:
                self._replace(record)
                self.status.push(f"📦 Refreshed metadata for {identifier}")
                return

        self._remove(identifier)
        self.status.push(f"📦 {identifier} no longer found")

    def reconcile(self, outcome: OperationOutcome) -> None:
        """Bring the lists in line with a finished operation."""
        if not outcome.succeeded:
            return

        identifier = outcome.identifier
        previous = self.selected

        if outcome.kind is OperationKind.UPDATE:
            try:
                self.refresh_single(identifier)
            except BrewError as e:
                logger.warning("could not refresh %s: %s", identifier, e)
                self.status.push(f"⚠️  Failed to refresh {identifier}: {e}")
            self.scheduler.cache.discard(identifier)
            self.directory.force_refresh()
            self.reload(preserve_selection=previous)
            return

        self.directory.tombstone(identifier)
        self._remove(identifier)
        new_selection = max(previous - 1, 0) if previous is not None else None
        self.directory.force_refresh()
        self.reload(preserve_selection=new_selection)
        self.status.push(f"✅ Successfully uninstalled {identifier}")
