"""Camera frame source.  Orientation is resolved here, before the game sees it."""

import logging

import cv2
import numpy as np

from .config import WIDTH, HEIGHT

logger = logging.getLogger(__name__)


class FrameSource:
    """Wraps ``cv2.VideoCapture``; frames come out BGR and, if asked, mirrored."""

    def __init__(self, index: int = 0, mirrored: bool = True):
        self.index = index
        self.mirrored = mirrored
        self.cap: cv2.VideoCapture | None = None
        self.error: str = ""

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def open(self) -> bool:
        self.release()
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            cap.release()
            self.error = f"Camera {self.index} could not be opened"
            logger.warning(self.error)
            return False
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, WIDTH)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, HEIGHT)
        self.cap = cap
        self.error = ""
        logger.info("Camera %d opened", self.index)
        return True

    def read(self) -> np.ndarray | None:
        if self.cap is None:
            return None
        ret, frame = self.cap.read()
        if not ret:
            self.error = "Camera stream ended"
            logger.warning(self.error)
            return None
        if frame.shape[1] != WIDTH or frame.shape[0] != HEIGHT:
            frame = cv2.resize(frame, (WIDTH, HEIGHT))
        if self.mirrored:
            frame = cv2.flip(frame, 1)
        return frame

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
