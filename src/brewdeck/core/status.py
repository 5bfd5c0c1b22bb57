"""Rolling status messages shown in the status bar."""

import logging
import threading
import time
from collections import deque
from typing import Callable

logger = logging.getLogger("brewdeck.status")


class StatusLog:
    """Keeps the last few status messages, each expiring after a while."""

    def __init__(
        self,
        capacity: int = 5,
        ttl: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._clock = clock
        self._messages: deque[tuple[str, float]] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def push(self, message: str) -> None:
        logger.info(message)
        with self._lock:
            self._messages.append((message, self._clock()))

    def _evict(self) -> None:
        now = self._clock()
        while self._messages and now - self._messages[0][1] > self.ttl:
            self._messages.popleft()

    def current(self) -> str | None:
        """Most recent message that has not expired."""
        with self._lock:
            self._evict()
            if not self._messages:
                return None
            return self._messages[-1][0]

    def messages(self) -> list[str]:
        """Unexpired messages, oldest first."""
        with self._lock:
            self._evict()
            return [message for message, _ in self._messages]
