"""UI layer: setup screen, light HUD, player zones, game-over panel."""

import math
import os
import time

import pygame

from .config import (
    WIDTH,
    HEIGHT,
    PHASE_IDLE,
    PHASE_GREEN,
    PHASE_RED_GRACE,
    PHASE_RED_DETECTING,
    PHASE_GAMEOVER,
    OUTCOME_WINNERS,
    OUTCOME_ALL_ELIMINATED,
    COLOR_GREEN,
    COLOR_RED,
    COLOR_DIM,
    COLOR_WHITE,
    COLOR_BLACK,
    COLOR_GRAY,
    COLOR_GOLD,
    COLOR_ZONE,
)
from .events import GameListener, Outcome

pygame.font.init()
font_path = "assets/PressStart2P.ttf"
if os.path.exists(font_path):
    FONT_TITLE = pygame.font.Font(font_path, 32)
    FONT_LARGE = pygame.font.Font(font_path, 22)
    FONT_MEDIUM = pygame.font.Font(font_path, 14)
    FONT_SMALL = pygame.font.Font(font_path, 10)
else:
    try:
        FONT_TITLE = pygame.font.SysFont("courier", 44, bold=True)
        FONT_LARGE = pygame.font.SysFont("courier", 32, bold=True)
        FONT_MEDIUM = pygame.font.SysFont("courier", 22, bold=True)
        FONT_SMALL = pygame.font.SysFont("courier", 16)
    except pygame.error:
        FONT_TITLE = pygame.font.Font(None, 56)
        FONT_LARGE = pygame.font.Font(None, 40)
        FONT_MEDIUM = pygame.font.Font(None, 26)
        FONT_SMALL = pygame.font.Font(None, 18)


def to_rgb(bgr_color):
    """Convert OpenCV BGR to Pygame RGB."""
    if isinstance(bgr_color, (list, tuple)):
        return (bgr_color[2], bgr_color[1], bgr_color[0])
    return bgr_color


STATUS_TEXT = {
    PHASE_IDLE: ("", COLOR_WHITE),
    PHASE_GREEN: ("GO!", COLOR_GREEN),
    PHASE_RED_GRACE: ("FREEZE!", COLOR_RED),
    PHASE_RED_DETECTING: ("FREEZE!", COLOR_RED),
    PHASE_GAMEOVER: ("GAME OVER", COLOR_WHITE),
}


# ---------------------------------------------------------------------------
# UI manager
# ---------------------------------------------------------------------------
class UIManager(GameListener):
    """Draws every screen and mirrors game events into what it shows."""

    def __init__(self):
        self.phase: str = PHASE_IDLE
        self.round: int = 1
        self.total_rounds: int = 1
        self.num_players: int = 1
        self.eliminated: set[int] = set()
        self.outcome: Outcome | None = None
        self._eliminated_at: dict[int, float] = {}

    def reset(self, num_players: int, total_rounds: int):
        self.num_players = num_players
        self.total_rounds = total_rounds
        self.round = 1
        self.phase = PHASE_IDLE
        self.eliminated = set()
        self.outcome = None
        self._eliminated_at = {}

    # ------------------------------------------------------------------
    # Game events
    # ------------------------------------------------------------------
    def on_phase_changed(self, phase: str):
        self.phase = phase

    def on_player_eliminated(self, index: int):
        self.eliminated.add(index)
        self._eliminated_at[index] = time.time()

    def on_round_changed(self, number: int):
        self.round = number

    def on_game_over(self, outcome: Outcome):
        self.outcome = outcome

    # ------------------------------------------------------------------
    # Text helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _outlined_text(surface: pygame.Surface, text: str, pos: tuple, font: pygame.font.Font, color: tuple,
                       outline_color=COLOR_BLACK, outline_thickness: int = 2):
        col_rgb = to_rgb(color)[:3]
        out_rgb = to_rgb(outline_color)[:3]
        text_surf = font.render(text, True, col_rgb)
        out_surf = font.render(text, True, out_rgb)

        for dx, dy in [(-1, -1), (-1, 1), (1, -1), (1, 1), (0, -1), (0, 1), (-1, 0), (1, 0)]:
            surface.blit(out_surf, (pos[0] + dx * outline_thickness, pos[1] + dy * outline_thickness))
        surface.blit(text_surf, pos)

    @staticmethod
    def _outline_glow_text(surface: pygame.Surface, text: str, y: int, font: pygame.font.Font, glow_color: tuple, glow_size: int = 4):
        glow_rgb = to_rgb(glow_color)[:3]
        text_surf = font.render(text, True, glow_rgb)
        x = (WIDTH - text_surf.get_width()) // 2

        glow_surf = pygame.Surface((text_surf.get_width() + glow_size*4, text_surf.get_height() + glow_size*4), pygame.SRCALPHA)
        for offset in range(glow_size, 0, -1):
            alpha = int(100 / glow_size)
            temp = font.render(text, True, (*glow_rgb, alpha))
            for dx, dy in [(-offset, -offset), (-offset, offset), (offset, -offset), (offset, offset),
                           (0, -offset), (0, offset), (-offset, 0), (offset, 0)]:
                glow_surf.blit(temp, (glow_size*2 + dx, glow_size*2 + dy))

        surface.blit(glow_surf, (x - glow_size*2, y - glow_size*2))

    @staticmethod
    def _draw_centered_text(surface: pygame.Surface, text: str, y: int, font: pygame.font.Font, color: tuple,
                            outline_color=COLOR_BLACK, outline_thickness: int = 2):
        text_surf = font.render(text, True, to_rgb(color)[:3])
        x = (WIDTH - text_surf.get_width()) // 2
        UIManager._outlined_text(surface, text, (x, y), font, color, outline_color, outline_thickness)

    # ------------------------------------------------------------------
    # Setup screen
    # ------------------------------------------------------------------
    def draw_setup(self, surface: pygame.Surface, form, error: str = ""):
        surface.fill(to_rgb((20, 20, 20)))

        t = time.time()
        glow = COLOR_GREEN if int(t) % 2 == 0 else COLOR_RED
        self._outline_glow_text(surface, "RED LIGHT", 40, FONT_TITLE, glow, glow_size=4)
        self._draw_centered_text(surface, "RED LIGHT", 40, FONT_TITLE, COLOR_WHITE, glow, 1)
        self._draw_centered_text(surface, "GREEN LIGHT", 90, FONT_LARGE, COLOR_GREEN)

        y = 160
        for i, (label, value) in enumerate(form.rows()):
            selected = i == form.selected
            color = COLOR_GOLD if selected else COLOR_WHITE
            if selected:
                pulse = int(40 + 30 * math.sin(t * 6))
                bar = pygame.Surface((WIDTH - 80, 34), pygame.SRCALPHA)
                bar.fill((255, 200, 50, pulse))
                surface.blit(bar, (40, y - 6))
            self._outlined_text(surface, label, (60, y), FONT_MEDIUM, color)
            shown = f"< {value} >" if selected else value
            value_surf = FONT_MEDIUM.render(shown, True, to_rgb(color)[:3])
            self._outlined_text(surface, shown, (WIDTH - 60 - value_surf.get_width(), y), FONT_MEDIUM, color)
            y += 40

        if error:
            self._draw_centered_text(surface, error, HEIGHT - 80, FONT_SMALL, COLOR_RED)
        self._draw_centered_text(surface, "UP/DOWN select   LEFT/RIGHT change   ENTER start",
                                 HEIGHT - 40, FONT_SMALL, COLOR_GRAY)

    # ------------------------------------------------------------------
    # Game screen
    # ------------------------------------------------------------------
    def draw_zones(self, surface: pygame.Surface, frame_width: int = WIDTH):
        zone_w = frame_width // self.num_players
        now = time.time()
        for i in range(self.num_players):
            x0 = i * zone_w
            if i in self.eliminated:
                # Pulse for a moment right after the elimination, then hold
                since = now - self._eliminated_at.get(i, 0.0)
                alpha = int(90 + 60 * abs(math.sin(since * 8))) if since < 1.5 else 110
                tint = pygame.Surface((zone_w, HEIGHT), pygame.SRCALPHA)
                tint.fill((*to_rgb(COLOR_RED), alpha))
                surface.blit(tint, (x0, 0))
                self._outlined_text(surface, "OUT", (x0 + zone_w // 2 - 30, HEIGHT // 2 - 16),
                                    FONT_LARGE, COLOR_WHITE, COLOR_RED, 3)
            if i > 0:
                pygame.draw.line(surface, to_rgb(COLOR_ZONE), (x0, 0), (x0, HEIGHT), 2)
            self._outlined_text(surface, f"P{i + 1}", (x0 + 10, HEIGHT - 34), FONT_MEDIUM, COLOR_WHITE)

    def draw_hud(self, surface: pygame.Surface):
        green_on = self.phase == PHASE_GREEN
        red_on = self.phase in (PHASE_RED_GRACE, PHASE_RED_DETECTING)

        # Light pair
        panel = pygame.Surface((100, 50), pygame.SRCALPHA)
        panel.fill((0, 0, 0, 170))
        surface.blit(panel, (10, 8))
        pygame.draw.circle(surface, to_rgb(COLOR_GREEN if green_on else COLOR_DIM), (35, 33), 18)
        pygame.draw.circle(surface, to_rgb(COLOR_RED if red_on else COLOR_DIM), (85, 33), 18)
        if self.phase == PHASE_RED_DETECTING:
            # Watching: ring around the red light
            pulse = 2 + int(2 * abs(math.sin(time.time() * 6)))
            pygame.draw.circle(surface, to_rgb(COLOR_WHITE), (85, 33), 21, pulse)

        text, color = STATUS_TEXT.get(self.phase, ("", COLOR_WHITE))
        if text and self.phase != PHASE_GAMEOVER:
            self._draw_centered_text(surface, text, 14, FONT_LARGE, color, COLOR_BLACK, 3)

        round_label = f"ROUND {self.round}/{self.total_rounds}"
        label_w = FONT_MEDIUM.size(round_label)[0]
        self._outlined_text(surface, round_label, (WIDTH - label_w - 14, 18), FONT_MEDIUM, COLOR_WHITE)

    def draw_game_over(self, surface: pygame.Surface):
        if self.outcome is None:
            return
        over = pygame.Surface((WIDTH - 160, 200), pygame.SRCALPHA)
        over.fill((0, 0, 0, 200))
        surface.blit(over, (80, HEIGHT // 2 - 100))
        pygame.draw.rect(surface, to_rgb(COLOR_WHITE)[:3], (80, HEIGHT // 2 - 100, WIDTH - 160, 200), 3)

        title, subtitle = self.game_over_text(self.outcome)
        color = COLOR_GOLD if self.outcome.kind == OUTCOME_WINNERS else COLOR_RED
        self._draw_centered_text(surface, title, HEIGHT // 2 - 80, FONT_LARGE, color)
        self._draw_centered_text(surface, subtitle, HEIGHT // 2 - 20, FONT_SMALL, COLOR_WHITE)
        self._draw_centered_text(surface, "R = restart   B = back to setup", HEIGHT // 2 + 50,
                                 FONT_SMALL, COLOR_GRAY)

    @staticmethod
    def game_over_text(outcome: Outcome) -> tuple[str, str]:
        if outcome.kind == OUTCOME_WINNERS:
            names = ", ".join(str(i + 1) for i in outcome.winners)
            return "CONGRATULATIONS!", f"Winner(s): Player(s) {names}"
        if outcome.kind == OUTCOME_ALL_ELIMINATED:
            return "ALL ELIMINATED!", "Too bad! Nobody survived."
        return "ALL ELIMINATED!", "Nobody made it to the end."
