"""Timer registry: every delayed action in a session goes through here.

Timers are polled from the analysis loop rather than run on their own thread,
so callbacks always execute on the main loop alongside every other state
change.  ``cancel_all`` drops every outstanding timer at once and silences the
narrator, which is how a restart or exit voids the previous session's chain.
"""

import itertools
import logging
import time

logger = logging.getLogger(__name__)


class _Timer:
    __slots__ = ("handle", "deadline", "callback")

    def __init__(self, handle: int, deadline: float, callback):
        self.handle = handle
        self.deadline = deadline
        self.callback = callback


class TimerRegistry:
    """Tracks scheduled callbacks so they can all be cancelled together."""

    def __init__(self, clock=time.monotonic, narrator=None):
        self._clock = clock
        self._narrator = narrator
        self._timers: dict[int, _Timer] = {}
        self._ids = itertools.count(1)

    def attach_narrator(self, narrator):
        self._narrator = narrator

    @property
    def pending(self) -> int:
        return len(self._timers)

    def __contains__(self, handle) -> bool:
        return handle in self._timers

    def schedule(self, delay_ms: float, callback) -> int:
        """Run ``callback`` once ``delay_ms`` has passed; returns its handle."""
        handle = next(self._ids)
        deadline = self._clock() + max(0.0, delay_ms) / 1000.0
        self._timers[handle] = _Timer(handle, deadline, callback)
        logger.debug("timer %d scheduled in %.0f ms", handle, delay_ms)
        return handle

    def cancel(self, handle: int) -> bool:
        return self._timers.pop(handle, None) is not None

    def cancel_all(self):
        """Cancel every outstanding timer and stop any narration in progress."""
        if self._timers:
            logger.debug("cancelling %d pending timer(s)", len(self._timers))
        self._timers.clear()
        if self._narrator is not None:
            self._narrator.cancel()

    def poll(self) -> int:
        """Fire every due timer in deadline order; returns how many ran."""
        now = self._clock()
        due = sorted(
            (t for t in self._timers.values() if t.deadline <= now),
            key=lambda t: (t.deadline, t.handle),
        )
        fired = 0
        for timer in due:
            # An earlier callback in this batch may have cancelled it
            if self._timers.pop(timer.handle, None) is None:
                continue
            timer.callback()
            fired += 1
        return fired
