"""Wiring of the brewdeck services."""

import time
from dataclasses import dataclass
from typing import Callable

from brewdeck.core.brew import BrewClient, OperationKind
from brewdeck.core.config import BrewdeckConfig
from brewdeck.core.details import DetailCache, DetailScheduler
from brewdeck.core.directory import PackageDirectory
from brewdeck.core.operations import OperationMachine
from brewdeck.core.status import StatusLog
from brewdeck.core.view import PackageView


@dataclass
class BrewdeckApp:
    """The services shared by the detail worker and the UI tick."""

    client: BrewClient
    status: StatusLog
    details: DetailCache
    scheduler: DetailScheduler
    directory: PackageDirectory
    operations: OperationMachine
    view: PackageView

    @classmethod
    def create(
        cls,
        config: BrewdeckConfig,
        client: BrewClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> "BrewdeckApp":
        client = client or BrewClient(config.brew_executable)
        status = StatusLog(config.status_capacity, config.status_ttl, clock=clock)
        details = DetailCache()
        scheduler = DetailScheduler(
            details,
            client.single_query,
            clock=clock,
            poll_interval=config.poll_interval,
            dedup_window=config.dedup_window,
        )
        directory = PackageDirectory(
            client.bulk_query,
            details,
            scheduler=scheduler,
            status=status,
            clock=clock,
            stale_after=config.stale_after,
            blacklist_ttl=config.blacklist_ttl,
        )
        view = PackageView(directory, scheduler, client.single_query, status)
        operations = OperationMachine(client.mutate, status, clock=clock, on_finished=view.reconcile)
        return cls(
            client=client,
            status=status,
            details=details,
            scheduler=scheduler,
            directory=directory,
            operations=operations,
            view=view,
        )

    def start_operation(self, kind: OperationKind) -> bool:
        """Start an operation on the selected package."""
        package = self.view.selected_package()
        if package is None:
            return False
        if kind is OperationKind.UPDATE and not package.has_update_available:
            self.status.push(f"{package.identifier} is already up to date")
            return False
        return self.operations.start(kind, package.identifier)

    def tick(self) -> None:
        self.operations.tick()
