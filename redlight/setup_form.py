"""Setup screen model: the fields a host edits before starting a session."""

from .config import (
    MIN_PLAYERS,
    MAX_PLAYERS,
    MIN_ROUNDS,
    MAX_ROUNDS,
    SENSITIVITY_STEP,
    SPEED_CHOICES,
    PHRASES,
    CAMERA_CHOICES,
    GameConfig,
)

FIELDS = ["players", "rounds", "sensitivity", "speed", "phrase", "camera"]

FIELD_LABELS = {
    "players": "PLAYERS",
    "rounds": "ROUNDS",
    "sensitivity": "SENSITIVITY",
    "speed": "SPEED",
    "phrase": "PHRASE",
    "camera": "CAMERA",
}


def _choices_with(choices: list, value) -> list:
    return list(choices) if value in choices else [value] + list(choices)


class SetupForm:
    """Cursor plus current value for each field; builds a ``GameConfig``."""

    def __init__(self, initial: GameConfig | None = None):
        initial = initial or GameConfig()
        self.selected: int = 0
        self.num_players = initial.num_players
        self.total_rounds = initial.total_rounds
        self.sensitivity = initial.sensitivity
        self._speeds = _choices_with(SPEED_CHOICES, initial.speed)
        self._phrases = _choices_with(PHRASES, initial.phrase)
        self._cameras = list(CAMERA_CHOICES)
        self._speed_idx = self._speeds.index(initial.speed)
        self._phrase_idx = self._phrases.index(initial.phrase)
        self._camera_idx = self._cameras.index(initial.camera_facing)

    @property
    def field(self) -> str:
        return FIELDS[self.selected]

    def move(self, delta: int):
        self.selected = (self.selected + delta) % len(FIELDS)

    def change(self, delta: int):
        """Step the selected field; numbers clamp, choice lists wrap."""
        field = self.field
        if field == "players":
            self.num_players = max(MIN_PLAYERS, min(MAX_PLAYERS, self.num_players + delta))
        elif field == "rounds":
            self.total_rounds = max(MIN_ROUNDS, min(MAX_ROUNDS, self.total_rounds + delta))
        elif field == "sensitivity":
            value = self.sensitivity + delta * SENSITIVITY_STEP
            self.sensitivity = max(1, min(100, value))
        elif field == "speed":
            self._speed_idx = (self._speed_idx + delta) % len(self._speeds)
        elif field == "phrase":
            self._phrase_idx = (self._phrase_idx + delta) % len(self._phrases)
        elif field == "camera":
            self._camera_idx = (self._camera_idx + delta) % len(self._cameras)

    def rows(self) -> list[tuple[str, str]]:
        """``(label, display value)`` per field, in screen order."""
        values = {
            "players": str(self.num_players),
            "rounds": str(self.total_rounds),
            "sensitivity": str(self.sensitivity),
            "speed": f"{self._speeds[self._speed_idx]:g}x",
            "phrase": self._phrases[self._phrase_idx],
            "camera": self._cameras[self._camera_idx].upper(),
        }
        return [(FIELD_LABELS[f], values[f]) for f in FIELDS]

    def build_config(self) -> GameConfig:
        return GameConfig(
            num_players=self.num_players,
            sensitivity=self.sensitivity,
            speed=self._speeds[self._speed_idx],
            phrase=self._phrases[self._phrase_idx],
            total_rounds=self.total_rounds,
            camera_facing=self._cameras[self._camera_idx],
        )
