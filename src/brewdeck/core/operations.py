"""Staged update/uninstall operations.

An operation walks through a fixed series of stages on wall-clock time. The
real brew call is attached to exactly one transition of each family, so it can
only fire when the session leaves that stage, and a session never returns to a
stage it has left.
"""

import itertools
import logging
import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from brewdeck.core.brew import BrewError, OperationKind
from brewdeck.core.status import StatusLog

logger = logging.getLogger(__name__)


class Stage(Enum):
    STARTING = "starting"
    DOWNLOADING = "downloading"
    INSTALLING = "installing"
    COMPLETING = "completing"
    FINISHED = "finished"
    UNINSTALL_STARTING = "uninstall-starting"
    UNINSTALL_REMOVING = "uninstall-removing"
    UNINSTALL_CLEANING = "uninstall-cleaning"
    UNINSTALL_FINISHED = "uninstall-finished"
    TERMINATED = "terminated"


class Effect(Enum):
    NONE = "none"
    INVOKE_ACTION = "invoke-action"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class Transition:
    source: Stage
    target: Stage
    after_ms: int
    effect: Effect = Effect.NONE
    message: str = ""


TRANSITIONS: dict[Stage, Transition] = {
    t.source: t
    for t in (
        Transition(Stage.STARTING, Stage.DOWNLOADING, 800, message="Downloading {name} updates..."),
        Transition(Stage.DOWNLOADING, Stage.INSTALLING, 2500, message="Installing {name} updates..."),
        Transition(
            Stage.INSTALLING,
            Stage.COMPLETING,
            4000,
            Effect.INVOKE_ACTION,
            "Completing {name} installation...",
        ),
        Transition(Stage.COMPLETING, Stage.FINISHED, 5000, message="✅ {name} updated successfully!"),
        Transition(Stage.FINISHED, Stage.TERMINATED, 6000, Effect.TERMINATE),
        Transition(
            Stage.UNINSTALL_STARTING, Stage.UNINSTALL_REMOVING, 500, message="Removing {name} files..."
        ),
        Transition(
            Stage.UNINSTALL_REMOVING,
            Stage.UNINSTALL_CLEANING,
            2000,
            Effect.INVOKE_ACTION,
            "Cleaning up {name} dependencies...",
        ),
        Transition(
            Stage.UNINSTALL_CLEANING,
            Stage.UNINSTALL_FINISHED,
            3500,
            message="✅ {name} uninstalled successfully!",
        ),
        Transition(Stage.UNINSTALL_FINISHED, Stage.TERMINATED, 4500, Effect.TERMINATE),
    )
}

FIRST_STAGE = {
    OperationKind.UPDATE: Stage.STARTING,
    OperationKind.UNINSTALL: Stage.UNINSTALL_STARTING,
}


@dataclass(frozen=True)
class OperationSession:
    """One in-flight update or uninstall."""

    kind: OperationKind
    identifier: str
    started_at: float
    stage: Stage
    action_invoked: bool = False
    session_id: int = 0

    def elapsed_ms(self, now: float) -> float:
        return (now - self.started_at) * 1000


@dataclass(frozen=True)
class OperationOutcome:
    kind: OperationKind
    identifier: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def advance(session: OperationSession, now: float) -> Transition | None:
    """The transition due for this session at `now`, if any.

    At most one transition is returned per call, even if the session is
    several stages behind.
    """
    transition = TRANSITIONS.get(session.stage)
    if transition is None:
        return None
    if session.elapsed_ms(now) <= transition.after_ms:
        return None
    if transition.effect is Effect.INVOKE_ACTION and session.action_invoked:
        # Unreachable through OperationMachine; sessions only move forward.
        return replace(transition, effect=Effect.NONE)
    return transition


class OperationMachine:
    """Drives a single update/uninstall session from the UI tick."""

    def __init__(
        self,
        mutate: Callable[[OperationKind, str], None],
        status: StatusLog,
        clock: Callable[[], float] = time.monotonic,
        on_finished: Callable[[OperationOutcome], None] | None = None,
    ):
        self._mutate = mutate
        self.status = status
        self._clock = clock
        self.on_finished = on_finished
        self._session: OperationSession | None = None
        self._session_ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def session(self) -> OperationSession | None:
        with self._lock:
            return self._session

    @property
    def is_busy(self) -> bool:
        return self.session is not None

    def start(self, kind: OperationKind, identifier: str) -> bool:
        """Begin an operation. Returns False if another one is running."""
        with self._lock:
            if self._session is not None:
                busy = True
            else:
                busy = False
                self._session = OperationSession(
                    kind=kind,
                    identifier=identifier,
                    started_at=self._clock(),
                    stage=FIRST_STAGE[kind],
                    session_id=next(self._session_ids),
                )

        if busy:
            self.status.push("Another operation is in progress")
            return False

        logger.info("starting %s of %s", kind.verb, identifier)
        self.status.push(f"Starting {kind.verb} for {identifier}")
        return True

    def tick(self) -> Stage | None:
        """Advance the active session. Returns its stage afterwards."""
        session = self.session
        if session is None:
            return None

        transition = advance(session, self._clock())
        if transition is None:
            return session.stage

        if transition.effect is Effect.TERMINATE:
            self.terminate(session)
            return Stage.TERMINATED

        invoked = session.action_invoked
        if transition.effect is Effect.INVOKE_ACTION:
            # Blocks the calling (UI) thread for the duration of the brew call.
            try:
                self._mutate(session.kind, session.identifier)
            except BrewError as e:
                logger.error("%s of %s failed: %s", session.kind.verb, session.identifier, e)
                self.status.push(f"❌ Failed to {session.kind.verb} {session.identifier}: {e}")
                self.terminate(session, error=str(e))
                return Stage.TERMINATED
            invoked = True

        with self._lock:
            if self._session is None or self._session.session_id != session.session_id:
                return None
            self._session = replace(session, stage=transition.target, action_invoked=invoked)

        if transition.message:
            self.status.push(transition.message.format(name=session.identifier))
        return transition.target

    def terminate(self, session: OperationSession, error: str | None = None) -> bool:
        """End a session and hand its outcome to on_finished.

        Only the first call for the active session has any effect.
        """
        with self._lock:
            if self._session is None or self._session.session_id != session.session_id:
                return False
            self._session = None

        outcome = OperationOutcome(kind=session.kind, identifier=session.identifier, error=error)
        logger.info(
            "%s of %s finished (%s)",
            session.kind.verb,
            session.identifier,
            "ok" if outcome.succeeded else "failed",
        )
        if self.on_finished is not None:
            self.on_finished(outcome)
        return True

    def progress_text(self) -> str | None:
        """Animated description of the active stage."""
        session = self.session
        if session is None:
            return None

        name = session.identifier
        elapsed = session.elapsed_ms(self._clock())

        def dots(period: int) -> str:
            return "." * (int(elapsed // period) % 4)

        texts = {
            Stage.STARTING: f"🔄 Preparing to update {name}...",
            Stage.DOWNLOADING: f"⬇️  Downloading {name} updates{dots(300)}",
            Stage.INSTALLING: f"🔧 Installing {name} updates{dots(200)}",
            Stage.COMPLETING: f"✨ Finalizing {name} installation...",
            Stage.FINISHED: f"✅ {name} updated successfully!",
            Stage.UNINSTALL_STARTING: f"🗑️  Preparing to uninstall {name}...",
            Stage.UNINSTALL_REMOVING: f"🗂️  Removing {name} files{dots(200)}",
            Stage.UNINSTALL_CLEANING: f"🧹 Cleaning up {name} dependencies{dots(300)}",
            Stage.UNINSTALL_FINISHED: f"✅ {name} uninstalled successfully!",
        }
        return texts.get(session.stage)
