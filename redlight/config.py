"""Central configuration for Red Light, Green Light."""

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Screen
# ---------------------------------------------------------------------------
WIDTH, HEIGHT = 640, 480
FPS = 30

# ---------------------------------------------------------------------------
# Timing (milliseconds)
# ---------------------------------------------------------------------------
NARRATION_LEAD_IN_MS = 800      # pause on green before the chant starts
NARRATION_FALLBACK_MS = 3000    # divided by speed when the narrator fails
GRACE_PERIOD_MS = 600           # reaction time after "freeze" before capture
DETECTION_WINDOW_MIN_MS = 2000
DETECTION_WINDOW_MAX_MS = 4000

# ---------------------------------------------------------------------------
# Motion detection
# ---------------------------------------------------------------------------
SAMPLE_STRIDE = 4               # every 4th pixel in both axes
COLOR_TOLERANCE = 40            # per-channel delta (0-255) that counts as change
THRESHOLD_SPAN = 0.15
THRESHOLD_FLOOR = 0.01          # threshold at sensitivity 100

# ---------------------------------------------------------------------------
# Game phases
# ---------------------------------------------------------------------------
PHASE_IDLE = "idle"
PHASE_GREEN = "green"
PHASE_RED_GRACE = "red-grace"
PHASE_RED_DETECTING = "red-detecting"
PHASE_GAMEOVER = "gameover"

PHASES = (PHASE_IDLE, PHASE_GREEN, PHASE_RED_GRACE, PHASE_RED_DETECTING, PHASE_GAMEOVER)

# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------
OUTCOME_ALL_ELIMINATED = "all-eliminated"
OUTCOME_WINNERS = "winners"
OUTCOME_NO_SURVIVORS = "no-survivors"

# ---------------------------------------------------------------------------
# App states
# ---------------------------------------------------------------------------
STATE_SETUP = "SETUP"
STATE_GAME = "GAME"

# ---------------------------------------------------------------------------
# Colors (BGR)
# ---------------------------------------------------------------------------
COLOR_GREEN = (0, 220, 60)
COLOR_RED = (40, 40, 230)
COLOR_DIM = (60, 60, 60)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)
COLOR_GRAY = (100, 100, 100)
COLOR_GOLD = (50, 200, 255)
COLOR_ZONE = (200, 200, 200)

# ---------------------------------------------------------------------------
# Setup screen limits and defaults
# ---------------------------------------------------------------------------
MIN_PLAYERS, MAX_PLAYERS = 1, 6
MIN_ROUNDS, MAX_ROUNDS = 1, 20
SPEED_CHOICES = [0.5, 0.75, 1.0, 1.25, 1.5, 2.0]
SENSITIVITY_STEP = 5

CAMERA_USER = "user"
CAMERA_ENVIRONMENT = "environment"
CAMERA_CHOICES = [CAMERA_USER, CAMERA_ENVIRONMENT]

PHRASES = [
    "Batatinha frita um, dois, três!",
    "Red light, green light, one, two, three!",
    "무궁화 꽃이 피었습니다",
]

DEFAULT_PLAYERS = 2
DEFAULT_SENSITIVITY = 50
DEFAULT_SPEED = 1.0
DEFAULT_ROUNDS = 5
DEFAULT_PHRASE = PHRASES[0]

# ---------------------------------------------------------------------------
# Chant synthesis
# ---------------------------------------------------------------------------
SAMPLE_RATE = 44100
CHANT_AMPLITUDE = 12000.0       # max 32767
CHANT_NOTE_SECONDS = 0.32       # one note per word at speed 1.0
CHANT_GAP_SECONDS = 0.04
CHANT_TAIL_SECONDS = 0.15
CHANT_MELODY = [523.25, 587.33, 659.25, 587.33, 523.25, 440.00, 392.00, 440.00]  # C5 D5 E5 D5 C5 A4 G4 A4


class ConfigError(ValueError):
    """Raised when a session configuration is out of range."""


@dataclass(frozen=True)
class GameConfig:
    """Settings snapshot taken once per session."""

    num_players: int = DEFAULT_PLAYERS
    sensitivity: int = DEFAULT_SENSITIVITY
    speed: float = DEFAULT_SPEED
    phrase: str = DEFAULT_PHRASE
    total_rounds: int = DEFAULT_ROUNDS
    camera_facing: str = CAMERA_USER

    def __post_init__(self):
        if self.num_players < MIN_PLAYERS:
            raise ConfigError(f"num_players must be at least {MIN_PLAYERS}, got {self.num_players}")
        if not 1 <= self.sensitivity <= 100:
            raise ConfigError(f"sensitivity must be between 1 and 100, got {self.sensitivity}")
        if not self.speed > 0:
            raise ConfigError(f"speed must be positive, got {self.speed}")
        if not self.phrase or not self.phrase.strip():
            raise ConfigError("phrase must not be empty")
        if self.total_rounds < MIN_ROUNDS:
            raise ConfigError(f"total_rounds must be at least {MIN_ROUNDS}, got {self.total_rounds}")
        if self.camera_facing not in CAMERA_CHOICES:
            raise ConfigError(f"camera_facing must be one of {CAMERA_CHOICES}, got {self.camera_facing!r}")

    @property
    def mirrored(self) -> bool:
        """The user-facing camera is shown (and judged) as a mirror image."""
        return self.camera_facing == CAMERA_USER
