"""Sing-song chant synthesis for the green-light narration.

One enveloped note per word of the phrase, walking a fixed melody.  Note
lengths scale with the speed multiplier, so a faster game gives a shorter
green phase.

Export a phrase for listening:
    python -m redlight.chant "Red light, green light, one, two, three!"
"""

import os
import re
import sys
import wave

import numpy as np

from .config import (
    SAMPLE_RATE,
    CHANT_AMPLITUDE,
    CHANT_NOTE_SECONDS,
    CHANT_GAP_SECONDS,
    CHANT_TAIL_SECONDS,
    CHANT_MELODY,
    DEFAULT_PHRASE,
)

_WORD = re.compile(r"\w+")


def phrase_words(phrase: str) -> list[str]:
    return _WORD.findall(phrase)


def build_note(freq: float, duration_sec: float, amplitude: float = CHANT_AMPLITUDE) -> np.ndarray:
    n = max(1, int(SAMPLE_RATE * duration_sec))
    t = np.arange(n) / SAMPLE_RATE
    env = np.ones(n)
    fade = min(int(SAMPLE_RATE * 0.01), n // 2)
    if fade:
        env[:fade] = np.linspace(0, 1, fade)
        env[-fade:] = np.linspace(1, 0, fade)
    return np.sin(2 * np.pi * freq * t) * env * amplitude


def build_chant(phrase: str, speed: float = 1.0) -> np.ndarray:
    """16-bit mono samples for ``phrase`` at ``speed``."""
    words = phrase_words(phrase) or [phrase]
    note_sec = CHANT_NOTE_SECONDS / speed
    gap = np.zeros(int(SAMPLE_RATE * CHANT_GAP_SECONDS / speed))

    parts = []
    for i, _ in enumerate(words):
        freq = CHANT_MELODY[i % len(CHANT_MELODY)]
        # Hold the last word, like the "three!" at the end of the call
        dur = note_sec * 1.5 if i == len(words) - 1 else note_sec
        parts.append(build_note(freq, dur))
        parts.append(gap)
    parts.append(np.zeros(int(SAMPLE_RATE * CHANT_TAIL_SECONDS)))

    mixed = np.concatenate(parts)
    return np.clip(mixed, -32768, 32767).astype(np.int16)


def chant_duration(samples: np.ndarray) -> float:
    return len(samples) / SAMPLE_RATE


def write_wav(filename: str, samples: np.ndarray):
    with wave.open(filename, "w") as wav_file:
        wav_file.setnchannels(1)  # mono
        wav_file.setsampwidth(2)  # 16-bit
        wav_file.setframerate(SAMPLE_RATE)
        wav_file.writeframes(samples.astype("<i2").tobytes())


def main():
    phrase = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_PHRASE
    os.makedirs("assets", exist_ok=True)
    print(f"Writing assets/chant.wav for {phrase!r}...")
    write_wav("assets/chant.wav", build_chant(phrase))
    print("Done!")


if __name__ == "__main__":
    main()
