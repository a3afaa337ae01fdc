"""
Frontend UI components for the VID Registration Demo.
"""

from .webcam_capture import CaptureConfig, camera_error_message, frame_to_data_url
from .registration_wizard import RegistrationWizard, InvalidTransition, Step
from .registration_panel import RegistrationPanel, PanelConfig

__all__ = [
    "CaptureConfig", "camera_error_message", "frame_to_data_url",
    "RegistrationWizard", "InvalidTransition", "Step",
    "RegistrationPanel", "PanelConfig",
]
