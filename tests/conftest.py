"""Shared fixtures: a controllable clock and a scripted brew."""

from __future__ import annotations

from pathlib import Path

import pytest

from brewdeck.core.brew import BrewError, OperationKind
from brewdeck.core.config import BrewdeckConfig, set_config
from brewdeck.models.package import PackageKind, PackageRecord


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_record(identifier: str, installed: str | None = "1.0", current: str = "1.0", **kwargs) -> PackageRecord:
    defaults = dict(
        identifier=identifier,
        name=identifier,
        description=f"{identifier} description",
        homepage=f"https://example.com/{identifier}",
        current_version=current,
        installed_version=installed,
        kind=PackageKind.FORMULA,
    )
    defaults.update(kwargs)
    return PackageRecord(**defaults)


class FakeBrew:
    """Stands in for BrewClient, recording every call."""

    def __init__(self, packages: list[PackageRecord] | None = None):
        self.packages = list(packages or [])
        self.bulk_calls = 0
        self.single_calls: list[str] = []
        self.mutations: list[tuple[OperationKind, str]] = []
        self.bulk_error: str | None = None
        self.single_error: str | None = None
        self.mutate_error: str | None = None

    def bulk_query(self) -> list[PackageRecord]:
        self.bulk_calls += 1
        if self.bulk_error:
            raise BrewError(self.bulk_error)
        return list(self.packages)

    def single_query(self, identifier: str) -> list[PackageRecord]:
        self.single_calls.append(identifier)
        if self.single_error:
            raise BrewError(self.single_error)
        return [pkg for pkg in self.packages if pkg.identifier == identifier]

    def mutate(self, kind: OperationKind, identifier: str) -> None:
        self.mutations.append((kind, identifier))
        if self.mutate_error:
            raise BrewError(self.mutate_error)

    def update_index(self) -> None:
        pass


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def brew() -> FakeBrew:
    return FakeBrew([make_record(name) for name in ("alpha", "bravo", "charlie", "delta", "echo")])


@pytest.fixture
def config(tmp_path: Path) -> BrewdeckConfig:
    cfg = BrewdeckConfig(
        base_dir=tmp_path,
        config_path=tmp_path / "config.yaml",
        log_path=tmp_path / "brewdeck.log",
        tick_interval=0.0,
    )
    set_config(cfg)
    yield cfg
    set_config(None)
