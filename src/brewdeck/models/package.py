"""Package data model."""

import time
from dataclasses import dataclass, replace
from enum import Enum

from brewdeck.core.versions import compare_versions


MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY  # approximate
YEAR = 365 * DAY  # approximate


class PackageKind(Enum):
    """Kind of Homebrew package."""

    FORMULA = "formula"
    CASK = "cask"
    UNKNOWN = "unknown"


def format_time_ago(seconds: int) -> str:
    """Format a duration in seconds as a human-readable "time ago" string."""
    if seconds < MINUTE:
        return "just now"

    for unit, label in (
        (YEAR, "year"),
        (MONTH, "month"),
        (WEEK, "week"),
        (DAY, "day"),
        (HOUR, "hour"),
        (MINUTE, "minute"),
    ):
        if seconds >= unit:
            count = seconds // unit
            plural = "" if count == 1 else "s"
            return f"{count} {label}{plural} ago"

    return "just now"


@dataclass(frozen=True)
class PackageRecord:
    """Represents an installed (or installable) Homebrew package.

    Records are immutable. A refresh replaces the whole record.
    """

    identifier: str  # formula name or cask token
    name: str  # display name
    description: str
    homepage: str
    current_version: str
    installed_version: str | None = None
    kind: PackageKind = PackageKind.UNKNOWN
    tap: str | None = None
    outdated: bool = False
    caveats: str | None = None
    installed_at: int | None = None  # unix timestamp

    @property
    def is_installed(self) -> bool:
        return self.installed_version is not None

    @property
    def has_update_available(self) -> bool:
        """True if the installed version orders strictly below the current one."""
        if self.installed_version is None:
            return False
        return compare_versions(self.installed_version, self.current_version) < 0

    @property
    def installation_status(self) -> str:
        if self.installed_version is None:
            return "Not installed"
        if self.has_update_available:
            return f"{self.installed_version} (update available)"
        return f"{self.installed_version} (up to date)"

    @property
    def display_label(self) -> str:
        """Name prefixed with a marker for its kind."""
        if self.kind is PackageKind.FORMULA:
            return f"⚙️ {self.identifier}"
        if self.kind is PackageKind.CASK:
            return f"🍺 {self.identifier}"
        return self.identifier

    def installed_ago(self, now: float | None = None) -> str | None:
        """How long ago the package was installed, if known."""
        if self.installed_at is None:
            return None
        if now is None:
            now = time.time()
        if now < self.installed_at:
            return None
        return format_time_ago(int(now - self.installed_at))

    def with_description(self, description: str) -> "PackageRecord":
        """Copy of this record with another description."""
        return replace(self, description=description)

    @classmethod
    def no_packages(cls) -> "PackageRecord":
        """Placeholder shown when Homebrew reports nothing installed."""
        return cls(
            identifier="no-packages",
            name="no-packages",
            description=(
                "No packages are currently installed via Homebrew. "
                "Use 'brew install <package>' to install packages."
            ),
            homepage="https://brew.sh",
            current_version="1.0.0",
        )

    @classmethod
    def load_error(cls, message: str) -> "PackageRecord":
        """Placeholder shown when the package list could not be loaded."""
        return cls(
            identifier="homebrew-error",
            name="homebrew-error",
            description=(
                f"Error loading packages from Homebrew: {message}. "
                "Make sure Homebrew is installed and accessible."
            ),
            homepage="https://brew.sh",
            current_version="1.0.0",
        )
