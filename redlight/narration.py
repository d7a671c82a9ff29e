"""Narration: sings the green-light phrase and reports when it has finished.

Completion and failure are never delivered from inside ``speak``; they wait
for the next ``poll`` on the main loop so the state machine is not re-entered
mid-transition.  ``cancel`` stops playback and drops the pending callbacks.
"""

import logging
import time
from abc import ABC, abstractmethod

import numpy as np
import pygame

from .chant import build_chant, chant_duration
from .config import SAMPLE_RATE

logger = logging.getLogger(__name__)


class Narrator(ABC):
    """Base narrator: holds the callbacks of the utterance in flight."""

    def __init__(self):
        self._on_done = None
        self._on_error = None
        self._failed: bool = False

    @property
    def speaking(self) -> bool:
        return self._on_done is not None

    @abstractmethod
    def speak(self, text: str, rate: float, on_done, on_error):
        """Start singing ``text``; ``on_done`` or ``on_error`` fires from a later ``poll``."""

    def cancel(self):
        self._on_done = None
        self._on_error = None
        self._failed = False

    @abstractmethod
    def poll(self):
        """Deliver the pending completion or failure, if it is due."""

    def _begin(self, on_done, on_error):
        self.cancel()
        self._on_done = on_done
        self._on_error = on_error

    def _finish(self):
        callback = self._on_error if self._failed else self._on_done
        self.cancel()
        if callback is not None:
            callback()


class PygameNarrator(Narrator):
    """Plays the synthesized chant on a pygame mixer channel."""

    def __init__(self):
        super().__init__()
        self._ready: bool = False
        self._channel: pygame.mixer.Channel | None = None
        self._sound: pygame.mixer.Sound | None = None

    def open(self) -> bool:
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1, buffer=512)
            self._ready = True
        except pygame.error as e:
            logger.warning("Audio unavailable, narration disabled: %s", e)
            self._ready = False
        return self._ready

    def speak(self, text: str, rate: float, on_done, on_error):
        self._begin(on_done, on_error)
        if not self._ready:
            self._failed = True
            return
        try:
            samples = self._fit_to_mixer(build_chant(text, rate))
            self._sound = pygame.mixer.Sound(buffer=samples.tobytes())
            self._channel = self._sound.play()
        except pygame.error as e:
            logger.warning("Narration playback failed: %s", e)
            self._channel = None
        if self._channel is None:
            self._failed = True

    def cancel(self):
        if self._channel is not None:
            self._channel.stop()
        self._channel = None
        self._sound = None
        super().cancel()

    def poll(self):
        if not self.speaking:
            return
        if self._failed or not self._channel.get_busy():
            self._finish()

    def close(self):
        self.cancel()
        if self._ready:
            pygame.mixer.quit()
            self._ready = False

    @staticmethod
    def _fit_to_mixer(samples: np.ndarray) -> np.ndarray:
        """Resample / widen mono chant samples to the mixer's actual format."""
        freq, _size, channels = pygame.mixer.get_init()
        if freq != SAMPLE_RATE:
            n = int(len(samples) * freq / SAMPLE_RATE)
            x = np.linspace(0, len(samples) - 1, n)
            samples = np.interp(x, np.arange(len(samples)), samples).astype(np.int16)
        if channels > 1:
            samples = np.repeat(samples[:, None], channels, axis=1)
        return np.ascontiguousarray(samples)


class SilentNarrator(Narrator):
    """Keeps the chant's timing without sound (``--mute`` or no audio device)."""

    def __init__(self, clock=time.monotonic):
        super().__init__()
        self._clock = clock
        self._ends_at: float = 0.0

    def speak(self, text: str, rate: float, on_done, on_error):
        self._begin(on_done, on_error)
        self._ends_at = self._clock() + chant_duration(build_chant(text, rate))

    def poll(self):
        if self.speaking and self._clock() >= self._ends_at:
            self._finish()
