"""
Registration panel component for the VID Registration Demo.

Formats the wizard state as Markdown for display: the step heading,
inline error blocks with their timestamp, and the success summary.
"""

from typing import Optional
from dataclasses import dataclass

from frontend.components.registration_wizard import (
    Step,
    WizardState,
    CameraUnavailable,
    Submitting,
    Error,
    Done,
)


@dataclass
class PanelConfig:
    """Configuration for the registration panel."""
    user_login: str = "demo-user"


class RegistrationPanel:
    """
    Renders the registration flow.

    Responsibilities:
    - Step headings ("Take ID Photo", "Take Face Photo", ...)
    - Error messages with the time they occurred
    - Capture button label
    - Success summary with VID number, completion time and user
    """

    HEADINGS = {
        Step.ID: "Take ID Photo",
        Step.FACE: "Take Face Photo",
        Step.SUCCESS: "Registration Complete",
    }

    def __init__(self, config: Optional[PanelConfig] = None):
        self.config = config or PanelConfig()

    def format_heading(self, state: WizardState) -> str:
        """Heading for the current step."""
        return f"## {self.HEADINGS[state.step]}"

    def format_user_info(self, utc_time: str) -> str:
        """Header line with the user and the current UTC time."""
        return f"User: **{self.config.user_login}** | UTC Time: {utc_time}"

    def format_error(self, state: WizardState) -> str:
        """Inline error block, or an empty string when there is no error."""
        if not isinstance(state, (Error, CameraUnavailable)):
            return ""
        return f"❌ {state.message}\n\n*Error occurred at: {state.timestamp}*"

    def capture_button_label(self, state: WizardState) -> str:
        """Label of the capture button."""
        if isinstance(state, Submitting):
            return "Processing..."
        return "Capture Photo"

    def format_success(self, state: WizardState) -> str:
        """Success summary, or an empty string before completion."""
        if not isinstance(state, Done):
            return ""
        return (
            "### ✅ Registration Successful!\n\n"
            "Your registration has been completed successfully.\n\n"
            f"**Registration ID:** `{state.vid_number}`  \n"
            f"**Completed at:** {state.completed_at}  \n"
            f"**Registered by:** {self.config.user_login}"
        )
