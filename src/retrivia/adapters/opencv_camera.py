"""OpenCV-backed camera adapter."""

import logging
from dataclasses import dataclass, field

import cv2
from PIL import Image

from retrivia.domain.frames import CameraFacing
from retrivia.errors import CameraUnavailableError, CaptureError
from retrivia.services.capture import Camera

logger = logging.getLogger(__name__)


@dataclass
class OpenCvCamera(Camera):
    """Camera implementation using ``cv2.VideoCapture``."""

    front_index: int = 0
    back_index: int = 1
    width: int = 1280
    height: int = 720
    _capture: cv2.VideoCapture | None = field(default=None, init=False, repr=False)

    def open(self, facing: CameraFacing) -> None:
        """Open the device mapped to the requested facing."""
        self.close()
        index = self.front_index if facing == CameraFacing.user else self.back_index
        capture = cv2.VideoCapture(index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(f"Could not open camera {index}")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        logger.info("Camera %d opened (%s)", index, facing)
        self._capture = capture

    def read(self) -> Image.Image:
        """Grab the current frame."""
        if self._capture is None:
            raise CaptureError("Camera is not open")
        ok, frame = self._capture.read()
        if not ok:
            raise CaptureError("Failed to capture photo")
        return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

    def close(self) -> None:
        """Release the device if open."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
