"""Round state machine: owns the session and carries out rule effects."""

import logging
import random

import numpy as np

from .config import (
    PHASE_RED_DETECTING,
    DETECTION_WINDOW_MIN_MS,
    DETECTION_WINDOW_MAX_MS,
    GameConfig,
)
from .events import Outcome
from .motion import has_moved, zone_view
from .roster import PlayerRoster
from .rules import (
    SessionState,
    Start,
    Exit,
    TimerFired,
    NarrationEnded,
    NarrationFailed,
    MotionChecked,
    CancelTimers,
    ResetPlayers,
    ClearReferences,
    CaptureReferences,
    ScheduleTimer,
    ScheduleDetectionWindow,
    Speak,
    Eliminate,
    EndGame,
    END_ALL_ELIMINATED,
    TIMER_WINDOW,
    transition,
)
from .timers import TimerRegistry

logger = logging.getLogger(__name__)


class RoundStateMachine:
    """Phase controller for one game screen.

    The machine is the only writer of the session state, the roster and the
    reference frames.  Listeners are told about changes but get immutable
    values only.
    """

    def __init__(self, config: GameConfig, timers: TimerRegistry, narrator,
                 rng: random.Random | None = None):
        self.config = config
        self.timers = timers
        self.narrator = narrator
        self.timers.attach_narrator(narrator)
        self.rng = rng or random.Random()
        self.state = SessionState(total_rounds=config.total_rounds, speed=config.speed)
        self.roster = PlayerRoster()
        self._references: list[np.ndarray | None] = []
        self._listeners: list = []
        self._frame: np.ndarray | None = None
        self._outcome: Outcome | None = None
        self.last_outcome: Outcome | None = None
        self.setup_zones(config.num_players)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def phase(self) -> str:
        return self.state.phase

    @property
    def round(self) -> int:
        return self.state.round

    @property
    def epoch(self) -> int:
        return self.state.epoch

    def has_reference(self, index: int) -> bool:
        return self._references[index] is not None

    def add_listener(self, listener):
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------
    def setup_zones(self, num_players: int):
        """Rebuild roster and reference slots for ``num_players`` zones."""
        self.roster.rebuild(num_players)
        self._references = [None] * num_players

    def start(self, config: GameConfig | None = None, frame: np.ndarray | None = None):
        """Start (or restart) a session from round 1."""
        if config is not None:
            if config.num_players != len(self.roster):
                self.setup_zones(config.num_players)
            self.config = config
        if frame is not None:
            self._frame = frame
        self.last_outcome = None
        logger.info(
            "Starting game: %d player(s), %d round(s), sensitivity %d",
            self.config.num_players, self.config.total_rounds, self.config.sensitivity,
        )
        self.dispatch(Start(total_rounds=self.config.total_rounds, speed=self.config.speed))
        self._emit("on_round_changed", self.state.round)

    def exit(self):
        """Leave the game screen: void every pending callback and go idle."""
        self.dispatch(Exit())

    # ------------------------------------------------------------------
    # Per-tick analysis
    # ------------------------------------------------------------------
    def analyse(self, frame: np.ndarray):
        """Judge one frame.  Does nothing outside ``red-detecting``."""
        self._frame = frame
        if self.state.phase != PHASE_RED_DETECTING:
            return
        n = len(self.roster)
        moved = []
        for i in range(n):
            if self.roster.is_eliminated(i):
                continue
            reference = self._references[i]
            if reference is None:
                continue
            if has_moved(zone_view(frame, n, i), reference, self.config.sensitivity):
                moved.append(i)
        if not moved:
            return
        remaining = sum(
            1 for i in range(n) if not self.roster.is_eliminated(i) and i not in moved
        )
        self.dispatch(MotionChecked(moved=tuple(moved), remaining=remaining))

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------
    def dispatch(self, event):
        old = self.state
        self.state, effects = transition(old, event)
        if self.state is old and not effects:
            logger.debug("Ignored %r in phase %s (epoch %d)", event, old.phase, old.epoch)
            return

        for effect in effects:
            self._apply(effect)

        if self.state.round != old.round and not isinstance(event, Start):
            self._emit("on_round_changed", self.state.round)
        # A restart re-enters green even when it was already green
        if self.state.phase != old.phase or isinstance(event, Start):
            logger.info("Phase %s -> %s (round %d)", old.phase, self.state.phase, self.state.round)
            self._emit("on_phase_changed", self.state.phase)
        if self._outcome is not None:
            outcome, self._outcome = self._outcome, None
            self._emit("on_game_over", outcome)

    def _apply(self, effect):
        if isinstance(effect, CancelTimers):
            self.timers.cancel_all()
        elif isinstance(effect, ResetPlayers):
            self.roster.reset()
        elif isinstance(effect, ClearReferences):
            self._references = [None] * len(self.roster)
        elif isinstance(effect, CaptureReferences):
            self._capture_references()
        elif isinstance(effect, ScheduleTimer):
            self._schedule(effect.kind, effect.delay_ms)
        elif isinstance(effect, ScheduleDetectionWindow):
            window_ms = self.rng.uniform(DETECTION_WINDOW_MIN_MS, DETECTION_WINDOW_MAX_MS)
            logger.debug("Detection window %.0f ms", window_ms)
            self._schedule(TIMER_WINDOW, window_ms)
        elif isinstance(effect, Speak):
            self._speak()
        elif isinstance(effect, Eliminate):
            if self.roster.eliminate(effect.index):
                logger.info("Player %d eliminated in round %d", effect.index + 1, self.state.round)
                self._emit("on_player_eliminated", effect.index)
        elif isinstance(effect, EndGame):
            self._end_game(effect.reason)
        else:
            raise TypeError(f"unknown effect: {effect!r}")

    # ------------------------------------------------------------------
    # Effect helpers
    # ------------------------------------------------------------------
    def _schedule(self, kind: str, delay_ms: float):
        phase, epoch = self.state.phase, self.state.epoch
        self.timers.schedule(delay_ms, lambda: self.dispatch(TimerFired(kind, phase, epoch)))

    def _speak(self):
        epoch = self.state.epoch
        self.narrator.speak(
            self.config.phrase,
            self.config.speed,
            on_done=lambda: self.dispatch(NarrationEnded(epoch)),
            on_error=lambda: self._narration_failed(epoch),
        )

    def _narration_failed(self, epoch: int):
        logger.warning("Narration failed; falling back to a timed red light")
        self.dispatch(NarrationFailed(epoch))

    def _capture_references(self):
        if self._frame is None:
            logger.warning("No frame available to capture references from")
            return
        n = len(self.roster)
        for i in range(n):
            if not self.roster.is_eliminated(i):
                self._references[i] = zone_view(self._frame, n, i).copy()

    def _end_game(self, reason: str):
        if reason == END_ALL_ELIMINATED:
            outcome = Outcome.all_eliminated()
        else:
            outcome = Outcome.from_survivors(self.roster.survivors())
        logger.info("Game over: %s %s", outcome.kind, [w + 1 for w in outcome.winners])
        self.last_outcome = self._outcome = outcome

    def _emit(self, hook: str, value):
        for listener in self._listeners:
            getattr(listener, hook)(value)
