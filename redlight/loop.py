"""Analysis loop: one tick per displayed frame while the game screen is up."""

import logging

logger = logging.getLogger(__name__)


class AnalysisLoop:
    """Feeds frames to the state machine and pumps deferred callbacks.

    The host owns the pacing (``clock.tick`` in the pygame main loop) and
    calls :meth:`tick` once per frame.  Restarts never stop the loop; only
    leaving the game screen does.
    """

    def __init__(self, machine, timers, narrator=None):
        self.machine = machine
        self.timers = timers
        self.narrator = narrator
        self.running: bool = False
        self.ticks: int = 0

    def start(self):
        if not self.running:
            logger.debug("Analysis loop started")
        self.running = True

    def stop(self):
        if self.running:
            logger.debug("Analysis loop stopped after %d tick(s)", self.ticks)
        self.running = False

    def tick(self, frame) -> bool:
        """Process one frame.  Returns ``False`` when the loop is stopped."""
        if not self.running:
            return False
        self.ticks += 1
        # Judge first so a reference captured by a timer below uses this frame
        self.machine.analyse(frame)
        if self.narrator is not None:
            self.narrator.poll()
        self.timers.poll()
        return True
