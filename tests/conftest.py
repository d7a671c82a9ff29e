import random

import numpy as np
import pytest

from redlight.config import GameConfig, NARRATION_LEAD_IN_MS, GRACE_PERIOD_MS
from redlight.events import GameListener
from redlight.loop import AnalysisLoop
from redlight.machine import RoundStateMachine
from redlight.narration import Narrator
from redlight.timers import TimerRegistry

FRAME_H, FRAME_W = 48, 60

# Keeps test steps clear of float rounding at exact deadlines
SLACK_MS = 1


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms / 1000.0


class FakeNarrator(Narrator):
    """Finishes only when the test says so, on the next poll."""

    def __init__(self):
        super().__init__()
        self.spoken = []
        self._ready = False

    def speak(self, text, rate, on_done, on_error):
        self._begin(on_done, on_error)
        self.spoken.append((text, rate))

    def cancel(self):
        self._ready = False
        super().cancel()

    def end(self):
        self._ready = True

    def fail(self):
        self._failed = True
        self._ready = True

    def poll(self):
        if self.speaking and self._ready:
            self._ready = False
            self._finish()


class RecordingListener(GameListener):
    def __init__(self):
        self.events = []

    def on_phase_changed(self, phase):
        self.events.append(("phase", phase))

    def on_player_eliminated(self, index):
        self.events.append(("eliminated", index))

    def on_round_changed(self, number):
        self.events.append(("round", number))

    def on_game_over(self, outcome):
        self.events.append(("gameover", outcome))

    def of(self, kind):
        return [value for k, value in self.events if k == kind]


def blank_frame(value=0):
    return np.full((FRAME_H, FRAME_W, 3), value, dtype=np.uint8)


def moved_frame(base, num_players, index, value=255):
    """Copy of ``base`` with one player's zone completely repainted."""
    frame = base.copy()
    w = FRAME_W // num_players
    frame[:, index * w:(index + 1) * w] = value
    return frame


class Game:
    """A machine wired to a fake clock and narrator, driven tick by tick."""

    def __init__(self, config, seed=0):
        self.clock = FakeClock()
        self.narrator = FakeNarrator()
        self.timers = TimerRegistry(clock=self.clock)
        self.machine = RoundStateMachine(config, self.timers, self.narrator,
                                         rng=random.Random(seed))
        self.listener = RecordingListener()
        self.machine.add_listener(self.listener)
        self.loop = AnalysisLoop(self.machine, self.timers, self.narrator)
        self.frame = blank_frame()

    def start(self):
        self.machine.start(frame=self.frame)
        self.loop.start()

    def tick(self, frame=None):
        if frame is not None:
            self.frame = frame
        return self.loop.tick(self.frame)

    def advance(self, ms, frame=None):
        self.clock.advance(ms)
        return self.tick(frame)

    def to_red_grace(self):
        self.advance(NARRATION_LEAD_IN_MS + SLACK_MS)
        assert self.narrator.speaking
        self.narrator.end()
        self.tick()

    def to_detecting(self):
        self.to_red_grace()
        self.advance(GRACE_PERIOD_MS + SLACK_MS)


@pytest.fixture
def make_game():
    def _make(num_players=2, total_rounds=1, sensitivity=50, speed=1.0, seed=0):
        config = GameConfig(
            num_players=num_players,
            total_rounds=total_rounds,
            sensitivity=sensitivity,
            speed=speed,
        )
        return Game(config, seed=seed)
    return _make
