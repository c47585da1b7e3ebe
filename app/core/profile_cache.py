import threading
import time
import uuid
from dataclasses import dataclass
from typing import Callable

from app.schemas.profile import ProfileRead

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass
class _Entry:
    profile: ProfileRead
    stored_at: float


class ProfileCache:
    """
    Time-bounded map of principal id -> last fetched profile.

    Latency optimization only; the database stays the source of truth and
    an entry is served for at most `ttl_seconds`.

    The clock is injectable (defaults to time.monotonic) so tests can move
    time forward without sleeping. A lock guards the map because sync
    FastAPI routes run on a thread pool.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[uuid.UUID, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, principal_id: uuid.UUID) -> ProfileRead | None:
        """Return the cached profile if younger than the TTL, else None."""
        with self._lock:
            entry = self._entries.get(principal_id)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self.ttl_seconds:
                del self._entries[principal_id]
                return None
            return entry.profile

    def set(self, principal_id: uuid.UUID, profile: ProfileRead) -> None:
        with self._lock:
            self._entries[principal_id] = _Entry(profile, self._clock())

    def invalidate(self, principal_id: uuid.UUID | None = None) -> None:
        """Drop one entry, or every entry when no id is given."""
        with self._lock:
            if principal_id is None:
                self._entries.clear()
            else:
                self._entries.pop(principal_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
