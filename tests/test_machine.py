from redlight.config import (
    PHASE_IDLE,
    PHASE_GREEN,
    PHASE_RED_GRACE,
    PHASE_RED_DETECTING,
    PHASE_GAMEOVER,
    OUTCOME_WINNERS,
    OUTCOME_ALL_ELIMINATED,
    NARRATION_FALLBACK_MS,
    NARRATION_LEAD_IN_MS,
    GRACE_PERIOD_MS,
    DETECTION_WINDOW_MAX_MS,
    DEFAULT_PHRASE,
    GameConfig,
)

from conftest import SLACK_MS, blank_frame, moved_frame

WINDOW_END_MS = DETECTION_WINDOW_MAX_MS + SLACK_MS


def test_start_enters_green_and_speaks_after_lead_in(make_game):
    game = make_game()
    game.start()

    assert game.machine.phase == PHASE_GREEN
    assert game.machine.round == 1
    assert game.narrator.spoken == []

    game.advance(NARRATION_LEAD_IN_MS - 50)
    assert game.narrator.spoken == []
    game.advance(100)
    assert game.narrator.spoken == [(DEFAULT_PHRASE, 1.0)]


def test_narration_end_triggers_grace_then_capture(make_game):
    game = make_game(num_players=2)
    game.start()
    game.to_red_grace()

    assert game.machine.phase == PHASE_RED_GRACE
    assert not game.machine.has_reference(0)

    game.advance(GRACE_PERIOD_MS + SLACK_MS)
    assert game.machine.phase == PHASE_RED_DETECTING
    assert game.machine.has_reference(0)
    assert game.machine.has_reference(1)


def test_narration_failure_falls_back_to_timer(make_game):
    game = make_game(speed=2.0)
    game.start()
    game.advance(NARRATION_LEAD_IN_MS + SLACK_MS)
    game.narrator.fail()
    game.tick()
    assert game.machine.phase == PHASE_GREEN

    game.advance(NARRATION_FALLBACK_MS / 2.0 - 50)
    assert game.machine.phase == PHASE_GREEN
    game.advance(100)
    assert game.machine.phase == PHASE_RED_GRACE


def test_two_still_players_both_win_single_round(make_game):
    game = make_game(num_players=2, total_rounds=1, sensitivity=50)
    game.start()
    game.to_detecting()

    for _ in range(5):
        game.advance(100)
    game.advance(WINDOW_END_MS)

    assert game.machine.phase == PHASE_GAMEOVER
    assert game.machine.round == 1
    outcomes = game.listener.of("gameover")
    assert len(outcomes) == 1
    assert outcomes[0].kind == OUTCOME_WINNERS
    assert outcomes[0].winners == (0, 1)


def test_only_the_mover_is_eliminated(make_game):
    game = make_game(num_players=3, total_rounds=2)
    game.start()
    game.to_detecting()

    game.advance(50, moved_frame(game.frame, 3, 1))

    assert game.machine.roster.is_eliminated(1)
    assert not game.machine.roster.is_eliminated(0)
    assert not game.machine.roster.is_eliminated(2)
    assert game.machine.phase == PHASE_RED_DETECTING
    assert game.listener.of("eliminated") == [1]


def test_all_movers_in_one_tick_are_eliminated_together(make_game):
    game = make_game(num_players=3, total_rounds=3)
    game.start()
    game.to_detecting()

    frame = moved_frame(moved_frame(game.frame, 3, 0), 3, 2)
    game.advance(50, frame)

    assert game.listener.of("eliminated") == [0, 2]
    assert game.machine.roster.survivors() == (1,)
    assert game.machine.phase == PHASE_RED_DETECTING


def test_everyone_moving_ends_game_immediately(make_game):
    game = make_game(num_players=2, total_rounds=3)
    game.start()
    game.to_detecting()

    game.advance(50, blank_frame(255))

    assert game.machine.phase == PHASE_GAMEOVER
    assert game.timers.pending == 0
    outcomes = game.listener.of("gameover")
    assert [o.kind for o in outcomes] == [OUTCOME_ALL_ELIMINATED]

    # Nothing from that round fires afterwards
    events_before = list(game.listener.events)
    game.advance(DETECTION_WINDOW_MAX_MS * 2)
    assert game.listener.events == events_before
    assert game.machine.round == 1


def test_game_over_is_reported_after_phase_change(make_game):
    game = make_game(num_players=1)
    game.start()
    game.to_detecting()
    game.advance(50, blank_frame(255))

    kinds = [k for k, _ in game.listener.events]
    assert kinds[-3:] == ["eliminated", "phase", "gameover"]


def test_eliminated_player_is_reported_once(make_game):
    game = make_game(num_players=3, total_rounds=2)
    game.start()
    game.to_detecting()

    moved = moved_frame(game.frame, 3, 0)
    game.advance(50, moved)
    game.advance(50, moved_frame(moved, 3, 0, value=10))

    assert game.listener.of("eliminated") == [0]


def test_rounds_advance_and_never_exceed_total(make_game):
    game = make_game(num_players=2, total_rounds=3)
    game.start()

    for expected_round in (1, 2, 3):
        assert game.machine.round == expected_round
        game.to_detecting()
        game.advance(WINDOW_END_MS)

    assert game.machine.phase == PHASE_GAMEOVER
    assert game.machine.round == 3
    assert game.listener.of("round") == [1, 2, 3]


def test_green_clears_reference_frames(make_game):
    game = make_game(num_players=2, total_rounds=2)
    game.start()
    game.to_detecting()
    assert game.machine.has_reference(0)

    game.advance(WINDOW_END_MS)
    assert game.machine.phase == PHASE_GREEN
    assert game.machine.round == 2
    assert not game.machine.has_reference(0)
    assert not game.machine.has_reference(1)


def test_no_reference_captured_for_eliminated_zone(make_game):
    game = make_game(num_players=2, total_rounds=2)
    game.start()
    game.to_detecting()
    game.advance(50, moved_frame(game.frame, 2, 0))
    game.advance(WINDOW_END_MS)

    game.to_detecting()
    assert not game.machine.has_reference(0)
    assert game.machine.has_reference(1)


def test_reference_is_a_snapshot(make_game):
    game = make_game(num_players=2, total_rounds=2)
    game.start()
    game.to_detecting()

    # Mutating the frame buffer in place must not move the baseline
    game.frame[:] = 255
    game.advance(50)
    assert game.machine.roster.all_eliminated()


def test_restart_during_red_grace_voids_pending_capture(make_game):
    game = make_game(num_players=2)
    game.start()
    game.to_red_grace()
    assert game.machine.phase == PHASE_RED_GRACE

    game.machine.start()
    assert game.machine.phase == PHASE_GREEN

    game.advance(GRACE_PERIOD_MS + SLACK_MS)
    assert game.machine.phase == PHASE_GREEN
    assert not game.machine.has_reference(0)
    assert not game.machine.has_reference(1)


def test_grace_callback_already_in_flight_is_a_no_op(make_game):
    game = make_game(num_players=2)
    game.start()
    game.to_red_grace()
    (grace_timer,) = game.timers._timers.values()

    game.machine.start()
    # The scheduler lost the race with cancellation and runs it anyway
    grace_timer.callback()

    assert game.machine.phase == PHASE_GREEN
    assert not game.machine.has_reference(0)
    assert not game.machine.has_reference(1)


def test_restart_after_game_over_resets_players_and_round(make_game):
    game = make_game(num_players=2, total_rounds=2)
    game.start()
    game.to_detecting()
    game.advance(50, blank_frame(255))
    assert game.machine.phase == PHASE_GAMEOVER

    game.frame = blank_frame()
    game.machine.start()

    assert game.machine.phase == PHASE_GREEN
    assert game.machine.round == 1
    assert game.machine.roster.survivors() == (0, 1)
    assert game.machine.last_outcome is None


def test_restart_mid_game_starts_from_round_one(make_game):
    game = make_game(num_players=2, total_rounds=3)
    game.start()
    game.to_detecting()
    game.advance(WINDOW_END_MS)
    assert game.machine.round == 2

    game.machine.start()
    assert game.machine.round == 1
    assert game.listener.of("round")[-1] == 1


def test_restart_silences_narration(make_game):
    game = make_game()
    game.start()
    game.advance(NARRATION_LEAD_IN_MS + SLACK_MS)
    assert game.narrator.speaking

    game.machine.start()
    assert not game.narrator.speaking


def test_stale_narration_end_is_ignored(make_game):
    game = make_game()
    game.start()
    game.advance(NARRATION_LEAD_IN_MS + SLACK_MS)
    on_done = game.narrator._on_done

    game.machine.start()
    on_done()
    assert game.machine.phase == PHASE_GREEN


def test_exit_goes_idle_and_cancels_everything(make_game):
    game = make_game()
    game.start()
    game.to_red_grace()

    game.machine.exit()
    assert game.machine.phase == PHASE_IDLE
    assert game.timers.pending == 0

    game.advance(GRACE_PERIOD_MS + SLACK_MS)
    assert game.machine.phase == PHASE_IDLE


def test_start_with_new_player_count_rebuilds_zones(make_game):
    game = make_game(num_players=2)
    game.start()
    game.machine.start(GameConfig(num_players=4, total_rounds=1))

    assert len(game.machine.roster) == 4
    game.to_detecting()
    assert all(game.machine.has_reference(i) for i in range(4))


def test_detection_is_skipped_outside_detecting_phase(make_game):
    game = make_game(num_players=2)
    game.start()
    game.advance(10, blank_frame(255))
    game.to_red_grace()
    game.tick(blank_frame(0))

    assert game.listener.of("eliminated") == []


def test_restart_during_green_reports_green_again(make_game):
    game = make_game()
    game.start()
    game.advance(NARRATION_LEAD_IN_MS + SLACK_MS)
    assert game.machine.phase == PHASE_GREEN
    seen = len(game.listener.events)

    game.machine.start()
    after = game.listener.events[seen:]
    assert [value for kind, value in after if kind == "phase"] == [PHASE_GREEN]
