"""
Quire Backend: Protected Session State
=======================================

What:  Tracks whether the user currently has a protected session open.
Why:   A new image note inherits its parent's protection only while a
       protected session is available; otherwise it is created unprotected.
How:   In-memory state with an inactivity timeout. Encryption of protected
       content is handled by a separate layer and is not modelled here.

State machine:
    CLOSED ──start()──▶ OPEN ──(timeout elapsed / end())──▶ CLOSED
                         │
                       touch() resets the inactivity timer
"""

import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ProtectedSessionService:
    def __init__(self, timeout_seconds: int = 600, clock: Callable[[], float] = time.monotonic):
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._last_activity: Optional[float] = None

    def start(self) -> None:
        self._last_activity = self._clock()
        logger.info("Protected session started")

    def end(self) -> None:
        if self._last_activity is not None:
            logger.info("Protected session ended")
        self._last_activity = None

    def touch(self) -> None:
        """Record activity so the session does not expire."""
        if self.is_protected_session_available():
            self._last_activity = self._clock()

    def is_protected_session_available(self) -> bool:
        if self._last_activity is None:
            return False
        if self._clock() - self._last_activity > self.timeout_seconds:
            logger.info("Protected session expired after %ds of inactivity", self.timeout_seconds)
            self._last_activity = None
            return False
        return True
