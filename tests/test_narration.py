import pytest

from redlight.chant import build_chant, chant_duration
from redlight.narration import Narrator, PygameNarrator, SilentNarrator

from conftest import FakeClock


def test_silent_narrator_finishes_after_chant_length():
    clock = FakeClock()
    narrator = SilentNarrator(clock)
    done = []
    narrator.speak("one two three", 1.0, on_done=lambda: done.append(True), on_error=None)

    length_ms = chant_duration(build_chant("one two three", 1.0)) * 1000
    narrator.poll()
    assert done == []

    clock.advance(length_ms - 50)
    narrator.poll()
    assert done == []

    clock.advance(100)
    narrator.poll()
    assert done == [True]
    assert not narrator.speaking


def test_completion_is_never_delivered_from_speak():
    clock = FakeClock()
    narrator = SilentNarrator(clock)
    done = []
    narrator.speak("go", 1.0, on_done=lambda: done.append(True), on_error=None)
    clock.advance(60_000)
    assert done == []


def test_cancel_drops_completion():
    clock = FakeClock()
    narrator = SilentNarrator(clock)
    done = []
    narrator.speak("go", 1.0, on_done=lambda: done.append(True), on_error=None)
    narrator.cancel()
    clock.advance(60_000)
    narrator.poll()
    assert done == []


def test_new_utterance_replaces_the_old_one():
    clock = FakeClock()
    narrator = SilentNarrator(clock)
    done = []
    narrator.speak("one", 1.0, on_done=lambda: done.append("one"), on_error=None)
    narrator.speak("two", 1.0, on_done=lambda: done.append("two"), on_error=None)
    clock.advance(60_000)
    narrator.poll()
    assert done == ["two"]


def test_pygame_narrator_without_audio_reports_failure_on_poll():
    narrator = PygameNarrator()
    done, failed = [], []
    narrator.speak("go", 1.0, on_done=lambda: done.append(True),
                   on_error=lambda: failed.append(True))
    assert failed == []

    narrator.poll()
    assert failed == [True]
    assert done == []
    assert not narrator.speaking


def test_base_narrator_cannot_be_used_directly():
    with pytest.raises(TypeError):
        Narrator()
