"""Data models for `brew info --json=v2` output."""

from dataclasses import dataclass, field

from brewdeck.models.package import PackageKind, PackageRecord


NO_HOMEPAGE = "No homepage available"


class MalformedResponseError(Exception):
    """brew returned JSON that does not have the expected shape."""

    pass


def _mapping(data, what: str) -> dict:
    if not isinstance(data, dict):
        raise MalformedResponseError(f"{what} entry is not an object: {data!r}")
    return data


def _check(value, types: type | tuple, key: str, what: str):
    allowed = types if isinstance(types, tuple) else (types,)
    # bool is an int subclass; only accept it where asked for
    if not isinstance(value, allowed) or (isinstance(value, bool) and bool not in allowed):
        raise MalformedResponseError(f"{what} entry has invalid '{key}': {value!r}")
    return value


def _require(data: dict, key: str, what: str, types: type | tuple = str):
    if key not in data:
        raise MalformedResponseError(f"{what} entry is missing '{key}'")
    return _check(data[key], types, key, what)


def _optional(data: dict, key: str, what: str, types: type | tuple = str, default=None):
    value = data.get(key)
    if value is None:
        return default
    return _check(value, types, key, what)


def _list(data: dict, key: str, what: str) -> list:
    return _optional(data, key, what, list, default=[])


@dataclass
class BrewInstalled:
    """One installed version of a formula."""

    version: str
    time: int | None = None
    installed_as_dependency: bool = False
    installed_on_request: bool = False

    @classmethod
    def from_api_response(cls, data: dict) -> "BrewInstalled":
        data = _mapping(data, "installed")
        return cls(
            version=_require(data, "version", "installed"),
            time=_optional(data, "time", "installed", (int, float)),
            installed_as_dependency=_optional(data, "installed_as_dependency", "installed", bool, False),
            installed_on_request=_optional(data, "installed_on_request", "installed", bool, False),
        )

    @property
    def is_direct(self) -> bool:
        """Installed by the user rather than pulled in as a dependency."""
        return self.installed_on_request or not self.installed_as_dependency


@dataclass
class BrewFormula:
    """A formula entry."""

    name: str
    desc: str
    homepage: str | None
    stable: str | None
    head: str | None
    installed: list[BrewInstalled] = field(default_factory=list)
    tap: str | None = None
    outdated: bool = False
    caveats: str | None = None

    @classmethod
    def from_api_response(cls, data: dict) -> "BrewFormula":
        data = _mapping(data, "formula")
        versions = _mapping(data.get("versions") or {}, "formula versions")
        return cls(
            name=_require(data, "name", "formula"),
            desc=_optional(data, "desc", "formula", default=""),
            homepage=_optional(data, "homepage", "formula"),
            stable=_optional(versions, "stable", "formula versions"),
            head=_optional(versions, "head", "formula versions"),
            installed=[
                BrewInstalled.from_api_response(i) for i in _list(data, "installed", "formula")
            ],
            tap=_optional(data, "tap", "formula"),
            outdated=_optional(data, "outdated", "formula", bool, False),
            caveats=_optional(data, "caveats", "formula"),
        )

    @property
    def is_directly_installed(self) -> bool:
        return any(install.is_direct for install in self.installed)

    def latest_install(self) -> BrewInstalled | None:
        if not self.installed:
            return None
        return max(self.installed, key=lambda install: install.time or 0)

    def to_record(self) -> PackageRecord:
        latest = self.latest_install()
        return PackageRecord(
            identifier=self.name,
            name=self.name,
            description=self.desc,
            homepage=self.homepage or NO_HOMEPAGE,
            current_version=self.stable or self.head or "unknown",
            installed_version=latest.version if latest else None,
            kind=PackageKind.FORMULA,
            tap=self.tap,
            outdated=self.outdated,
            caveats=self.caveats,
            installed_at=int(latest.time) if latest and latest.time is not None else None,
        )


@dataclass
class BrewCask:
    """A cask entry."""

    token: str
    names: list[str]
    desc: str | None
    homepage: str | None
    version: str
    installed: str | None = None
    tap: str | None = None
    outdated: bool = False
    caveats: str | None = None

    @classmethod
    def from_api_response(cls, data: dict) -> "BrewCask":
        data = _mapping(data, "cask")
        names = _list(data, "name", "cask")
        if not all(isinstance(name, str) for name in names):
            raise MalformedResponseError(f"cask entry has invalid 'name': {names!r}")
        return cls(
            token=_require(data, "token", "cask"),
            names=list(names),
            desc=_optional(data, "desc", "cask"),
            homepage=_optional(data, "homepage", "cask"),
            version=_require(data, "version", "cask"),
            installed=_optional(data, "installed", "cask"),
            tap=_optional(data, "tap", "cask"),
            outdated=_optional(data, "outdated", "cask", bool, False),
            caveats=_optional(data, "caveats", "cask"),
        )

    def to_record(self) -> PackageRecord:
        if self.desc:
            description = self.desc
        elif self.names:
            description = ", ".join(self.names)
        else:
            description = "No description available"

        return PackageRecord(
            identifier=self.token,
            name=self.names[0] if self.names else self.token,
            description=description,
            homepage=self.homepage or NO_HOMEPAGE,
            current_version=self.version,
            installed_version=self.installed,
            kind=PackageKind.CASK,
            tap=f"{self.tap} (cask)" if self.tap else None,
            outdated=self.outdated,
            caveats=self.caveats,
            installed_at=None,  # casks carry no install timestamp
        )


@dataclass
class BrewInfoResponse:
    """Parsed `brew info --json=v2` document."""

    formulae: list[BrewFormula]
    casks: list[BrewCask]

    @classmethod
    def from_api_response(cls, data: dict) -> "BrewInfoResponse":
        if not isinstance(data, dict):
            raise MalformedResponseError("expected a JSON object at the top level")
        return cls(
            formulae=[BrewFormula.from_api_response(f) for f in _list(data, "formulae", "response")],
            casks=[BrewCask.from_api_response(c) for c in _list(data, "casks", "response")],
        )

    def records(self) -> list[PackageRecord]:
        """Every entry as a package record."""
        return [f.to_record() for f in self.formulae] + [c.to_record() for c in self.casks]

    def installed_records(self) -> list[PackageRecord]:
        """Directly installed formulae plus all casks."""
        records = [f.to_record() for f in self.formulae if f.is_directly_installed]
        records.extend(c.to_record() for c in self.casks)
        return records
