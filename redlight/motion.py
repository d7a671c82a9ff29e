"""Per-zone motion detection by strided raw-color differencing.

No tracking, no optical flow: a zone "moved" when enough sampled pixels
changed colour since the reference snapshot taken at the start of the
detection window.
"""

import numpy as np

from .config import (
    SAMPLE_STRIDE,
    COLOR_TOLERANCE,
    THRESHOLD_SPAN,
    THRESHOLD_FLOOR,
)


# ---------------------------------------------------------------------------
# Zone geometry
# ---------------------------------------------------------------------------
def zone_width(frame_width: int, num_players: int) -> int:
    return frame_width // num_players


def zone_bounds(frame_width: int, num_players: int, index: int) -> tuple[int, int]:
    """Column range ``[x0, x1)`` of zone ``index``; leftover columns are unused."""
    if num_players < 1:
        raise ValueError(f"num_players must be >= 1, got {num_players}")
    if not 0 <= index < num_players:
        raise ValueError(f"zone index {index} out of range for {num_players} players")
    w = zone_width(frame_width, num_players)
    return index * w, (index + 1) * w


def zone_view(frame: np.ndarray, num_players: int, index: int) -> np.ndarray:
    """Full-height slice of ``frame`` for one player (a view, not a copy)."""
    x0, x1 = zone_bounds(frame.shape[1], num_players, index)
    return frame[:, x0:x1]


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------
def motion_threshold(sensitivity: float) -> float:
    """Changed-sample fraction above which a zone counts as moving.

    Sensitivity 100 gives the floor (0.01), sensitivity 0 would give 0.16.
    """
    return ((100 - sensitivity) / 100) * THRESHOLD_SPAN + THRESHOLD_FLOOR


def change_ratio(current: np.ndarray, reference: np.ndarray,
                 stride: int = SAMPLE_STRIDE,
                 tolerance: int = COLOR_TOLERANCE) -> float:
    """Fraction of sampled pixels where any colour channel moved past ``tolerance``."""
    if current.shape != reference.shape:
        raise ValueError(
            f"zone buffers differ in shape: {current.shape} vs {reference.shape}"
        )
    cur = current[::stride, ::stride, :3].astype(np.int16)
    ref = reference[::stride, ::stride, :3].astype(np.int16)
    total = cur.shape[0] * cur.shape[1]
    if total == 0:
        return 0.0
    changed = np.any(np.abs(cur - ref) > tolerance, axis=2)
    return float(np.count_nonzero(changed)) / total


def has_moved(current: np.ndarray, reference: np.ndarray, sensitivity: float) -> bool:
    return change_ratio(current, reference) > motion_threshold(sensitivity)
