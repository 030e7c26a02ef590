"""
Process-wide revision token.

The token is seeded from the wall clock so that a restarted process does not
reissue values clients may still hold, but it is never persisted. It is a
staleness hint for clients, not an ordering guarantee between the store and
the hub.
"""

import threading
import time
from typing import Callable, Optional


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class RevisionClock:
    """
    Monotonic revision counter.

    `advance()` returns max(last + 1, now in ms), so tokens track wall time
    when mutations are sparse and stay strictly increasing when they are
    not (or when the clock steps backwards).
    """

    def __init__(self, seed: Optional[int] = None, clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._lock = threading.Lock()
        self._current = seed if seed is not None else clock()

    def advance(self) -> int:
        """Issue a token strictly greater than every earlier one."""
        with self._lock:
            self._current = max(self._current + 1, self._clock())
            return self._current

    def current(self) -> int:
        """The last issued token."""
        return self._current
