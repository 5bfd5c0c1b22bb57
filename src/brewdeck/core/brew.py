"""Client for the `brew` command line tool."""

import json
import logging
import subprocess
from enum import Enum
from typing import Callable

from brewdeck.models.brew_info import BrewInfoResponse, MalformedResponseError
from brewdeck.models.package import PackageRecord

logger = logging.getLogger(__name__)


class BrewError(Exception):
    """Error from a brew invocation."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr


class OperationKind(Enum):
    """Mutating operations. The value is the brew subcommand."""

    UPDATE = "upgrade"
    UNINSTALL = "uninstall"

    @property
    def verb(self) -> str:
        return "update" if self is OperationKind.UPDATE else "uninstall"


class BrewClient:
    """Runs brew and turns its output into package records."""

    def __init__(self, executable: str = "brew", runner: Callable | None = None):
        self.executable = executable
        self._runner = runner or subprocess.run

    def _run(self, args: list[str]) -> str:
        cmd = [self.executable, *args]
        logger.debug("running %s", " ".join(cmd))
        try:
            proc = self._runner(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError:
            raise BrewError(
                f"'{self.executable}' command not found. Is Homebrew installed and in your PATH?",
                command=cmd,
            ) from None
        except OSError as e:
            raise BrewError(f"Could not run {' '.join(cmd)}: {e}", command=cmd) from e

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            raise BrewError(
                f"{' '.join(cmd)} failed (code {proc.returncode}): {stderr}",
                command=cmd,
                stderr=stderr,
            )
        return proc.stdout

    def _info(self, args: list[str]) -> BrewInfoResponse:
        out = self._run(["info", "--json=v2", *args])
        try:
            return BrewInfoResponse.from_api_response(json.loads(out or "{}"))
        except json.JSONDecodeError as e:
            raise BrewError(f"brew info returned invalid JSON: {e}") from e
        except MalformedResponseError as e:
            raise BrewError(f"brew info returned an unexpected document: {e}") from e

    def bulk_query(self) -> list[PackageRecord]:
        """All directly installed formulae and casks."""
        return self._info(["--installed"]).installed_records()

    def single_query(self, identifier: str) -> list[PackageRecord]:
        """Detailed records for one formula or cask."""
        return self._info([identifier]).records()

    def mutate(self, kind: OperationKind, identifier: str) -> None:
        """Upgrade or uninstall a package. Raises BrewError on failure."""
        self._run([kind.value, identifier])

    def update_index(self) -> None:
        """Fetch the latest formula and cask definitions."""
        self._run(["update"])
