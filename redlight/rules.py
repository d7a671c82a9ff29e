"""Round/light rules as a pure function of (state, event).

``transition`` never touches timers, frames, the roster or the narrator; it
returns the next ``SessionState`` plus a list of effects for the
``RoundStateMachine`` to carry out.  Every asynchronous event carries the epoch
(and, for timers, the phase) it was scheduled under, so anything left over
from a previous session, or from a phase that has since moved on, falls through
to a no-op here.
"""

from dataclasses import dataclass, replace

from .config import (
    PHASE_IDLE,
    PHASE_GREEN,
    PHASE_RED_GRACE,
    PHASE_RED_DETECTING,
    PHASE_GAMEOVER,
    NARRATION_LEAD_IN_MS,
    NARRATION_FALLBACK_MS,
    GRACE_PERIOD_MS,
    DEFAULT_SPEED,
)

# ---------------------------------------------------------------------------
# Timer kinds and the phase each one is only valid in
# ---------------------------------------------------------------------------
TIMER_LEAD_IN = "lead-in"
TIMER_FALLBACK = "narration-fallback"
TIMER_GRACE = "grace"
TIMER_WINDOW = "detection-window"

TIMER_PHASES = {
    TIMER_LEAD_IN: PHASE_GREEN,
    TIMER_FALLBACK: PHASE_GREEN,
    TIMER_GRACE: PHASE_RED_GRACE,
    TIMER_WINDOW: PHASE_RED_DETECTING,
}

END_ALL_ELIMINATED = "all-eliminated"
END_ROUNDS_COMPLETE = "rounds-complete"


@dataclass(frozen=True)
class SessionState:
    phase: str = PHASE_IDLE
    round: int = 1
    total_rounds: int = 1
    speed: float = DEFAULT_SPEED
    epoch: int = 0


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Start:
    total_rounds: int
    speed: float


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class TimerFired:
    kind: str
    phase: str
    epoch: int


@dataclass(frozen=True)
class NarrationEnded:
    epoch: int


@dataclass(frozen=True)
class NarrationFailed:
    epoch: int


@dataclass(frozen=True)
class MotionChecked:
    moved: tuple[int, ...]
    remaining: int          # players still in after ``moved`` are removed


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CancelTimers:
    pass


@dataclass(frozen=True)
class ResetPlayers:
    pass


@dataclass(frozen=True)
class ClearReferences:
    pass


@dataclass(frozen=True)
class CaptureReferences:
    pass


@dataclass(frozen=True)
class ScheduleTimer:
    kind: str
    delay_ms: float


@dataclass(frozen=True)
class ScheduleDetectionWindow:
    pass


@dataclass(frozen=True)
class Speak:
    pass


@dataclass(frozen=True)
class Eliminate:
    index: int


@dataclass(frozen=True)
class EndGame:
    reason: str


# ---------------------------------------------------------------------------
# Transition function
# ---------------------------------------------------------------------------
def transition(state: SessionState, event) -> tuple[SessionState, list]:
    if isinstance(event, Start):
        new = SessionState(
            phase=PHASE_GREEN,
            round=1,
            total_rounds=event.total_rounds,
            speed=event.speed,
            epoch=state.epoch + 1,
        )
        return new, [
            CancelTimers(),
            ResetPlayers(),
            ClearReferences(),
            ScheduleTimer(TIMER_LEAD_IN, NARRATION_LEAD_IN_MS),
        ]

    if isinstance(event, Exit):
        return replace(state, phase=PHASE_IDLE, epoch=state.epoch + 1), [CancelTimers()]

    if isinstance(event, TimerFired):
        if (event.epoch != state.epoch
                or event.phase != state.phase
                or TIMER_PHASES.get(event.kind) != state.phase):
            return state, []
        return _on_timer(state, event.kind)

    if isinstance(event, NarrationEnded):
        if event.epoch != state.epoch or state.phase != PHASE_GREEN:
            return state, []
        return _red_light(state)

    if isinstance(event, NarrationFailed):
        if event.epoch != state.epoch or state.phase != PHASE_GREEN:
            return state, []
        return state, [ScheduleTimer(TIMER_FALLBACK, NARRATION_FALLBACK_MS / state.speed)]

    if isinstance(event, MotionChecked):
        if state.phase != PHASE_RED_DETECTING:
            return state, []
        effects = [Eliminate(i) for i in event.moved]
        if event.remaining == 0:
            effects += [CancelTimers(), EndGame(END_ALL_ELIMINATED)]
            return replace(state, phase=PHASE_GAMEOVER), effects
        return state, effects

    raise TypeError(f"unknown event: {event!r}")


def _on_timer(state: SessionState, kind: str):
    if kind == TIMER_LEAD_IN:
        return state, [Speak()]

    if kind == TIMER_FALLBACK:
        return _red_light(state)

    if kind == TIMER_GRACE:
        return replace(state, phase=PHASE_RED_DETECTING), [
            CaptureReferences(),
            ScheduleDetectionWindow(),
        ]

    # TIMER_WINDOW: the one place a round is judged complete
    if state.round >= state.total_rounds:
        return replace(state, phase=PHASE_GAMEOVER), [
            CancelTimers(),
            EndGame(END_ROUNDS_COMPLETE),
        ]
    return _green_light(replace(state, round=state.round + 1))


def _green_light(state: SessionState):
    return replace(state, phase=PHASE_GREEN), [
        ClearReferences(),
        ScheduleTimer(TIMER_LEAD_IN, NARRATION_LEAD_IN_MS),
    ]


def _red_light(state: SessionState):
    return replace(state, phase=PHASE_RED_GRACE), [
        ScheduleTimer(TIMER_GRACE, GRACE_PERIOD_MS),
    ]
