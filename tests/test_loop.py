from redlight.config import NARRATION_LEAD_IN_MS, PHASE_RED_GRACE

from conftest import SLACK_MS, blank_frame


def test_tick_does_nothing_until_started(make_game):
    game = make_game()
    assert game.loop.tick(blank_frame()) is False
    assert game.loop.ticks == 0


def test_stop_halts_processing(make_game):
    game = make_game()
    game.start()
    assert game.tick() is True
    game.loop.stop()

    game.clock.advance(NARRATION_LEAD_IN_MS + SLACK_MS)
    assert game.tick() is False
    assert game.narrator.spoken == []
    assert game.loop.ticks == 1


def test_narration_completion_is_delivered_by_the_loop(make_game):
    game = make_game()
    game.start()
    game.advance(NARRATION_LEAD_IN_MS + SLACK_MS)
    game.narrator.end()
    # Nothing changes until the next tick polls the narrator
    assert game.machine.phase != PHASE_RED_GRACE
    game.tick()
    assert game.machine.phase == PHASE_RED_GRACE


def test_restart_keeps_loop_running(make_game):
    game = make_game()
    game.start()
    game.tick()
    game.machine.start()
    assert game.loop.running
    assert game.tick() is True
