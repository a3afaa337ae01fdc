"""
Tests for the Gradio capture client handlers.

The handlers are driven directly with a wizard and a mock-mode API
client; no browser is involved.

Run with: pytest tests/test_app_gradio.py -v
"""

import os
import sys
import numpy as np
import pytest
from unittest.mock import patch

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.registration_service import RegistrationService
from core.registration_store import RegistrationStore
from core.verification import StubFaceVerifier
from frontend import app_gradio
from frontend.api_client import RegistrationAPIClient, ConnectionMode
from frontend.components.registration_wizard import (
    RegistrationWizard,
    Step,
    ReadyToCapture,
    CameraUnavailable,
    Error,
    Done,
)


# Noise keeps the JPEG well above the minimum image size
FRAME = np.random.default_rng(0).integers(0, 256, (240, 320, 3), dtype=np.uint8)

# Indexes into the (wizard, *render) tuple returned by the handlers
CAMERA_ERROR = 4
CAPTURE_BTN = 6
ERROR_MESSAGE = 7
SUCCESS_MESSAGE = 8


@pytest.fixture
def verifier():
    return StubFaceVerifier(passed=True)


@pytest.fixture
def api_client(clock, verifier):
    service = RegistrationService(
        store=RegistrationStore(ttl_sec=3600, clock=clock),
        verifier=verifier,
        min_image_length=1000,
        processing_delay_sec=0,
    )
    client = RegistrationAPIClient(mode=ConnectionMode.MOCK, mock_service=service)
    with patch.object(app_gradio, "get_api_client", return_value=client):
        yield client


def capture(frame, wizard):
    wizard, *_ = app_gradio.begin_capture(wizard)
    return app_gradio.submit_capture(frame, wizard)


class TestPermissionHandlers:
    """Tests for the camera permission handlers."""

    def test_granted(self):
        outputs = app_gradio.on_permission_result("granted", "", RegistrationWizard())

        wizard = outputs[0]
        assert wizard.state == ReadyToCapture(Step.ID)
        assert outputs[CAPTURE_BTN]["visible"] is True
        assert outputs[CAPTURE_BTN]["interactive"] is True

    def test_denied_shows_retry(self):
        outputs = app_gradio.on_permission_result("NotAllowedError", "denied", RegistrationWizard())

        assert isinstance(outputs[0].state, CameraUnavailable)
        assert outputs[CAMERA_ERROR]["visible"] is True
        assert "Camera access was denied" in outputs[CAMERA_ERROR]["value"]
        assert outputs[CAPTURE_BTN]["visible"] is False

    def test_retry(self):
        wizard = RegistrationWizard()
        wizard.permission_denied("NotFoundError")

        outputs = app_gradio.on_retry_camera("granted", "", wizard)
        assert outputs[0].state == ReadyToCapture(Step.ID)


class TestCaptureHandlers:
    """Tests for the capture and submit handlers."""

    def test_full_registration(self, api_client):
        wizard = RegistrationWizard()
        wizard.permission_granted()

        wizard, *_ = capture(FRAME, wizard)
        assert wizard.step == Step.FACE
        assert wizard.vid_number is not None

        outputs = capture(FRAME, wizard)
        wizard = outputs[0]
        assert isinstance(wizard.state, Done)
        assert outputs[SUCCESS_MESSAGE]["visible"] is True
        assert wizard.vid_number in outputs[SUCCESS_MESSAGE]["value"]

    def test_begin_capture_locks_button(self):
        wizard = RegistrationWizard()
        wizard.permission_granted()

        outputs = app_gradio.begin_capture(wizard)
        assert outputs[CAPTURE_BTN]["interactive"] is False
        assert outputs[CAPTURE_BTN]["value"] == "Processing..."

    def test_missing_frame(self, api_client):
        wizard = RegistrationWizard()
        wizard.permission_granted()

        outputs = capture(None, wizard)
        assert outputs[0].state.message == "Failed to capture image. Please try again."
        assert outputs[ERROR_MESSAGE]["visible"] is True

    def test_verification_failure_stays_on_face_step(self, api_client, verifier):
        wizard = RegistrationWizard()
        wizard.permission_granted()
        wizard, *_ = capture(FRAME, wizard)

        verifier.passed = False
        outputs = capture(FRAME, wizard)

        wizard = outputs[0]
        assert isinstance(wizard.state, Error)
        assert wizard.step == Step.FACE
        assert "Face verification failed" in outputs[ERROR_MESSAGE]["value"]

        verifier.passed = True
        wizard, *_ = capture(FRAME, wizard)
        assert wizard.is_done

    def test_start_over(self, api_client):
        wizard = RegistrationWizard()
        wizard.permission_granted()
        wizard, *_ = capture(FRAME, wizard)

        outputs = app_gradio.on_start_over("granted", "", wizard)
        assert outputs[0].state == ReadyToCapture(Step.ID)
        assert outputs[0].vid_number is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
