"""
Tests for the webcam capture component.

Run with: pytest tests/test_webcam_capture.py -v
"""

import os
import base64
import sys
import cv2
import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from frontend.components.webcam_capture import (
    CaptureConfig,
    camera_error_message,
    frame_to_data_url,
    read_image_file,
)


def create_test_frame(height=480, width=720) -> np.ndarray:
    """Create a synthetic RGB frame with some structure."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, : width // 2] = (200, 30, 30)
    cv2.circle(frame, (width // 2, height // 2), 80, (240, 220, 200), -1)
    return frame


class TestCameraErrorMessage:
    """Tests for camera error messages."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("NotAllowedError", "Camera access was denied"),
            ("PermissionDeniedError", "Camera access was denied"),
            ("NotFoundError", "No camera device was found"),
            ("DevicesNotFoundError", "No camera device was found"),
            ("NotReadableError", "Your camera is in use"),
            ("TrackStartError", "Your camera is in use"),
            ("OverconstrainedError", "Camera constraints not satisfied"),
            ("ConstraintNotSatisfiedError", "Camera constraints not satisfied"),
        ],
    )
    def test_known_errors(self, name, expected):
        assert camera_error_message(name).startswith(expected)

    def test_unknown_error_uses_message(self):
        assert camera_error_message("AbortError", "Timeout starting video source") == (
            "Camera error: Timeout starting video source"
        )

    def test_unknown_error_without_message(self):
        assert camera_error_message(None) == "Camera error: Please check your camera and try again."


class TestFrameEncoding:
    """Tests for JPEG data URL encoding."""

    def test_data_url_prefix(self):
        data_url = frame_to_data_url(create_test_frame())
        assert data_url.startswith("data:image/jpeg;base64,")
        # A real frame is well above the backend's minimum image size
        assert len(data_url) > 1000

    def test_decoded_frame_shape_and_colour(self):
        frame = create_test_frame()
        data_url = frame_to_data_url(frame)
        jpeg = base64.b64decode(data_url.split(",", 1)[1])
        decoded = cv2.imdecode(np.frombuffer(jpeg, np.uint8), cv2.IMREAD_COLOR)

        assert decoded.shape == frame.shape
        # RGB red on the left is BGR red after decoding
        b, g, r = decoded[10, 10]
        assert r > 150 and b < 80

    def test_empty_frame(self):
        with pytest.raises(ValueError):
            frame_to_data_url(None)
        with pytest.raises(ValueError):
            frame_to_data_url(np.zeros((0, 0, 3), dtype=np.uint8))


class TestReadImageFile:
    """Tests for reading images from disk."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_image_file(str(tmp_path / "missing.jpg"))

    def test_reads_bgr(self, tmp_path):
        path = tmp_path / "face.png"
        cv2.imwrite(str(path), np.full((32, 48, 3), 128, dtype=np.uint8))

        frame = read_image_file(str(path))
        assert frame.shape == (32, 48, 3)


class TestCaptureConfig:
    """Tests for CaptureConfig."""

    def test_defaults(self):
        config = CaptureConfig.from_dict(None)
        assert config == CaptureConfig(width=720, height=480, facing_mode="user", jpeg_quality=92)

    def test_from_dict(self):
        config = CaptureConfig.from_dict({"width": 1280, "height": "720", "facing_mode": "environment"})
        assert config.width == 1280
        assert config.height == 720
        assert config.video_constraints() == {
            "width": 1280,
            "height": 720,
            "facingMode": "environment",
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
