"""Red Light, Green Light: a webcam party game with per-zone motion detection."""
