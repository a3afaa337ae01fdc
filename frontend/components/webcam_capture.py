"""
Webcam capture component for the VID Registration Demo.

Handles still-frame encoding and camera error reporting for the capture
client. Frames arrive from the browser webcam as numpy arrays; they are
sent to the registration API as JPEG data URLs, the same shape a browser
screenshot has ("data:image/jpeg;base64,...").
"""

import cv2
import numpy as np
import base64
from typing import Optional
from dataclasses import dataclass


@dataclass
class CaptureConfig:
    """Configuration for webcam capture."""
    width: int = 720
    height: int = 480
    facing_mode: str = "user"
    jpeg_quality: int = 92

    @classmethod
    def from_dict(cls, config: Optional[dict]) -> "CaptureConfig":
        """Build a CaptureConfig from the frontend.capture config section."""
        config = config or {}
        return cls(
            width=int(config.get("width", cls.width)),
            height=int(config.get("height", cls.height)),
            facing_mode=config.get("facing_mode", cls.facing_mode),
            jpeg_quality=int(config.get("jpeg_quality", cls.jpeg_quality)),
        )

    def video_constraints(self) -> dict:
        """Return getUserMedia video constraints for this configuration."""
        return {
            "width": self.width,
            "height": self.height,
            "facingMode": self.facing_mode,
        }


# Browser getUserMedia error names, grouped by cause
_DENIED_ERRORS = ("NotAllowedError", "PermissionDeniedError")
_NOT_FOUND_ERRORS = ("NotFoundError", "DevicesNotFoundError")
_IN_USE_ERRORS = ("NotReadableError", "TrackStartError")
_OVERCONSTRAINED_ERRORS = ("OverconstrainedError", "ConstraintNotSatisfiedError")


def camera_error_message(error_name: Optional[str], message: Optional[str] = None) -> str:
    """
    Map a camera access error to a user-facing message.

    Args:
        error_name: DOMException name reported by getUserMedia
                    (e.g. "NotAllowedError").
        message: Raw error message, used for unknown errors.

    Returns:
        Cause-specific message for the user.
    """
    if error_name in _DENIED_ERRORS:
        return "Camera access was denied. Please allow camera access to continue."
    if error_name in _NOT_FOUND_ERRORS:
        return "No camera device was found. Please connect a camera and try again."
    if error_name in _IN_USE_ERRORS:
        return (
            "Your camera is in use by another application. "
            "Please close other apps using the camera."
        )
    if error_name in _OVERCONSTRAINED_ERRORS:
        return "Camera constraints not satisfied. Please try a different camera."

    return f"Camera error: {message or 'Please check your camera and try again.'}"


def frame_to_base64(frame: np.ndarray, quality: int = 92) -> str:
    """
    Encode a frame as a base64 JPEG.

    Args:
        frame: BGR numpy array (H, W, 3) or grayscale (H, W).
        quality: JPEG quality (0-100).

    Returns:
        Base64-encoded JPEG string.

    Raises:
        ValueError: If the frame could not be encoded.
    """
    encode_param = [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)]
    success, buffer = cv2.imencode('.jpg', frame, encode_param)

    if not success:
        raise ValueError("Failed to encode frame")

    return base64.b64encode(buffer).decode('utf-8')


def frame_to_data_url(frame: np.ndarray, quality: int = 92, rgb: bool = True) -> str:
    """
    Encode a webcam frame as a JPEG data URL.

    Args:
        frame: Image array. Gradio delivers RGB frames, OpenCV reads BGR.
        quality: JPEG quality (0-100).
        rgb: True if the frame is RGB and must be converted for OpenCV.

    Returns:
        "data:image/jpeg;base64,..." string.

    Raises:
        ValueError: If the frame is empty or could not be encoded.
    """
    if frame is None or frame.size == 0:
        raise ValueError("Empty frame")

    if rgb and frame.ndim == 3 and frame.shape[2] == 3:
        frame = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)

    return "data:image/jpeg;base64," + frame_to_base64(frame, quality)


def read_image_file(path: str) -> np.ndarray:
    """
    Read an image file from disk as a BGR frame.

    Raises:
        FileNotFoundError: If the file cannot be read as an image.
    """
    frame = cv2.imread(path, cv2.IMREAD_COLOR)
    if frame is None:
        raise FileNotFoundError(f"Could not read image: {path}")
    return frame
