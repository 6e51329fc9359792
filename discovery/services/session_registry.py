# discovery/services/session_registry.py
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Hashable, Optional, Tuple

from discovery.services.filter_controller import DiscoveryFilterController

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000
DEFAULT_IDLE_SECONDS = 30 * 60


@dataclass
class DiscoverSession:
    """A controller plus the lock that serializes requests against it."""

    controller: DiscoveryFilterController
    last_used: float
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionRegistry:
    """
    Bounded map of live Discover sessions.

    Entries idle for longer than ``idle_seconds`` expire, and once more than
    ``max_sessions`` are live the least recently used ones are evicted.
    Evicted controllers are disposed. Safe to share between request threads.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS,
                 idle_seconds: float = DEFAULT_IDLE_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.max_sessions = max(1, max_sessions)
        self.idle_seconds = idle_seconds
        self.clock = clock
        self._sessions: "OrderedDict[Hashable, DiscoverSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._sessions

    def _evict_locked(self, now: float) -> None:
        expired = [key for key, session in self._sessions.items()
                   if now - session.last_used > self.idle_seconds]
        for key in expired:
            self._drop_locked(key, "idle")
        while len(self._sessions) > self.max_sessions:
            oldest = next(iter(self._sessions))
            self._drop_locked(oldest, "capacity")

    def _drop_locked(self, key: Hashable, reason: str) -> None:
        session = self._sessions.pop(key)
        session.controller.dispose()
        logger.info(f"Evicted discover session {key} ({reason}).")

    def get(self, key: Hashable) -> Optional[DiscoverSession]:
        with self._lock:
            now = self.clock()
            self._evict_locked(now)
            session = self._sessions.get(key)
            if session is not None:
                session.last_used = now
                self._sessions.move_to_end(key)
            return session

    def get_or_create(self, key: Hashable,
                      factory: Callable[[], DiscoveryFilterController]) -> Tuple[DiscoverSession, bool]:
        """Returns ``(session, created)``."""
        with self._lock:
            now = self.clock()
            self._evict_locked(now)
            session = self._sessions.get(key)
            if session is not None:
                session.last_used = now
                self._sessions.move_to_end(key)
                return session, False
            session = DiscoverSession(controller=factory(), last_used=now)
            self._sessions[key] = session
            self._evict_locked(now)
            return session, True

    def pop(self, key: Hashable) -> Optional[DiscoverSession]:
        with self._lock:
            return self._sessions.pop(key, None)
