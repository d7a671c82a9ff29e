"""Main application: camera loop, screen switching, frame composition."""

import argparse
import logging
import random

import cv2
import numpy as np
import pygame

from .config import (
    WIDTH,
    HEIGHT,
    FPS,
    STATE_SETUP,
    STATE_GAME,
    PHASE_GAMEOVER,
    CAMERA_CHOICES,
    DEFAULT_PLAYERS,
    DEFAULT_SENSITIVITY,
    DEFAULT_SPEED,
    DEFAULT_ROUNDS,
    DEFAULT_PHRASE,
    CAMERA_USER,
    ConfigError,
    GameConfig,
)
from .capture import FrameSource
from .loop import AnalysisLoop
from .machine import RoundStateMachine
from .narration import PygameNarrator, SilentNarrator
from .setup_form import SetupForm
from .timers import TimerRegistry
from .ui import UIManager

logger = logging.getLogger(__name__)


def _bgr_to_surface(bgr) -> pygame.Surface:
    rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
    return pygame.surfarray.make_surface(np.transpose(rgb, (1, 0, 2)))


class RedLightApp:
    """Top-level controller that wires camera, state machine, narration and UI."""

    def __init__(self, config: GameConfig, camera_index: int = 0, mute: bool = False,
                 seed: int | None = None, fullscreen: bool = True):
        self.fullscreen = fullscreen
        self.form = SetupForm(config)
        self.ui = UIManager()
        self.source = FrameSource(camera_index, mirrored=config.mirrored)

        self.narrator = SilentNarrator() if mute else PygameNarrator()
        self.timers = TimerRegistry(narrator=self.narrator)
        self.machine = RoundStateMachine(config, self.timers, self.narrator,
                                         rng=random.Random(seed))
        self.machine.add_listener(self.ui)
        self.loop = AnalysisLoop(self.machine, self.timers, self.narrator)

        self.state: str = STATE_SETUP
        self._setup_error: str = ""

    # ------------------------------------------------------------------
    # Screen transitions
    # ------------------------------------------------------------------
    def _start_game(self):
        try:
            config = self.form.build_config()
        except ConfigError as e:
            self._setup_error = str(e)
            return

        self.source.mirrored = config.mirrored
        if not self.source.open():
            self._setup_error = f"Camera error: {self.source.error}"
            return
        frame = self.source.read()
        if frame is None:
            self._setup_error = f"Camera error: {self.source.error}"
            self.source.release()
            return

        self._setup_error = ""
        self.ui.reset(config.num_players, config.total_rounds)
        self.machine.start(config, frame)
        self.loop.start()
        self.state = STATE_GAME

    def _restart(self):
        # The loop keeps running; only the session starts over
        self.ui.reset(self.machine.config.num_players, self.machine.config.total_rounds)
        self.machine.start()

    def _exit_to_setup(self, error: str = ""):
        self.machine.exit()
        self.loop.stop()
        self.source.release()
        self.ui.reset(self.machine.config.num_players, self.machine.config.total_rounds)
        self._setup_error = error
        self.state = STATE_SETUP

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self):
        if isinstance(self.narrator, PygameNarrator):
            self.narrator.open()
        pygame.init()
        flags = pygame.FULLSCREEN | pygame.SCALED if self.fullscreen else 0
        screen = pygame.display.set_mode((WIDTH, HEIGHT), flags)
        pygame.display.set_caption("Red Light, Green Light")

        clock = pygame.time.Clock()
        running = True
        try:
            while running:
                if self.state == STATE_GAME:
                    surf = self._handle_game()
                else:
                    surf = pygame.Surface((WIDTH, HEIGHT))
                    self.ui.draw_setup(surf, self.form, self._setup_error)

                screen.blit(surf, (0, 0))
                pygame.display.flip()

                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.KEYDOWN:
                        running = self._handle_key(event.key)

                clock.tick(FPS)
        finally:
            self.machine.exit()
            self.loop.stop()
            self.source.release()
            if isinstance(self.narrator, PygameNarrator):
                self.narrator.close()
            pygame.quit()

    def _handle_key(self, key) -> bool:
        """Returns ``False`` to quit."""
        if key in (pygame.K_ESCAPE, pygame.K_q):
            return False
        if self.state == STATE_SETUP:
            if key == pygame.K_UP:
                self.form.move(-1)
            elif key == pygame.K_DOWN:
                self.form.move(1)
            elif key == pygame.K_LEFT:
                self.form.change(-1)
            elif key == pygame.K_RIGHT:
                self.form.change(1)
            elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self._start_game()
        elif self.state == STATE_GAME:
            if key == pygame.K_r:
                self._restart()
            elif key in (pygame.K_b, pygame.K_BACKSPACE):
                self._exit_to_setup()
        return True

    def _handle_game(self) -> pygame.Surface:
        frame = self.source.read()
        if frame is None:
            self._exit_to_setup(f"Camera error: {self.source.error}")
            surf = pygame.Surface((WIDTH, HEIGHT))
            self.ui.draw_setup(surf, self.form, self._setup_error)
            return surf

        self.loop.tick(frame)

        surf = _bgr_to_surface(frame)
        self.ui.draw_zones(surf, frame.shape[1])
        self.ui.draw_hud(surf)
        if self.machine.phase == PHASE_GAMEOVER:
            self.ui.draw_game_over(surf)
        return surf


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redlight",
        description="Red light, green light party game on a webcam.",
    )
    parser.add_argument("--players", type=int, default=DEFAULT_PLAYERS,
                        help="number of players, one vertical zone each")
    parser.add_argument("--rounds", type=int, default=DEFAULT_ROUNDS)
    parser.add_argument("--sensitivity", type=int, default=DEFAULT_SENSITIVITY,
                        help="1-100, higher catches smaller movements")
    parser.add_argument("--speed", type=float, default=DEFAULT_SPEED,
                        help="narration speed multiplier")
    parser.add_argument("--phrase", default=DEFAULT_PHRASE)
    parser.add_argument("--camera", choices=CAMERA_CHOICES, default=CAMERA_USER,
                        help="'user' mirrors the picture")
    parser.add_argument("--camera-index", type=int, default=0)
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for detection window lengths")
    parser.add_argument("--mute", action="store_true",
                        help="keep the chant timing without sound")
    parser.add_argument("--windowed", action="store_true")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def config_from_args(parser: argparse.ArgumentParser, args) -> GameConfig:
    try:
        return GameConfig(
            num_players=args.players,
            sensitivity=args.sensitivity,
            speed=args.speed,
            phrase=args.phrase,
            total_rounds=args.rounds,
            camera_facing=args.camera,
        )
    except ConfigError as e:
        parser.error(str(e))


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = config_from_args(parser, args)
    app = RedLightApp(config, camera_index=args.camera_index, mute=args.mute,
                      seed=args.seed, fullscreen=not args.windowed)
    app.run()


if __name__ == "__main__":
    main()
