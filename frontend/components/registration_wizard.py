"""
Registration wizard component for the VID Registration Demo.

Models the capture client as an explicit state machine. The wizard walks
through three steps (id -> face -> success) and is always in exactly one
of these states:

    AwaitingPermission(step)                   camera access not granted yet
    CameraUnavailable(step, message, timestamp) camera access failed
    ReadyToCapture(step)                       live feed, capture enabled
    Submitting(step)                           request in flight, capture disabled
    Error(step, message, timestamp)            last attempt failed, retry allowed
    Done(vid_number, completed_at)             registration complete

States change only through the event methods of RegistrationWizard.
Errors never change the step, so the user retries the same step.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Union
from dataclasses import dataclass

from frontend.components.webcam_capture import camera_error_message


class Step(str, Enum):
    """Wizard step."""
    ID = "id"
    FACE = "face"
    SUCCESS = "success"


def current_utc_time() -> str:
    """Return the current UTC time as "YYYY-MM-DD HH:MM:SS"."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class AwaitingPermission:
    step: Step = Step.ID


@dataclass(frozen=True)
class CameraUnavailable:
    step: Step
    message: str
    timestamp: str


@dataclass(frozen=True)
class ReadyToCapture:
    step: Step


@dataclass(frozen=True)
class Submitting:
    step: Step


@dataclass(frozen=True)
class Error:
    step: Step
    message: str
    timestamp: str


@dataclass(frozen=True)
class Done:
    vid_number: str
    completed_at: str
    step: Step = Step.SUCCESS


WizardState = Union[AwaitingPermission, CameraUnavailable, ReadyToCapture, Submitting, Error, Done]


class InvalidTransition(ValueError):
    """Raised when an event is not allowed in the current state."""

    def __init__(self, event: str, state: WizardState):
        self.event = event
        self.state = state
        super().__init__(f"Event '{event}' not allowed in state {type(state).__name__}")


class RegistrationWizard:
    """
    Drives the capture client through the registration steps.

    Responsibilities:
    - Track camera permission and the current step
    - Refuse a second capture while a request is in flight
    - Remember the VID number issued at the ID step
    - Attach a timestamp to every error shown to the user
    """

    def __init__(self, clock: Callable[[], str] = current_utc_time):
        self._clock = clock
        self.state: WizardState = AwaitingPermission(Step.ID)
        self.vid_number: Optional[str] = None

    @property
    def step(self) -> Step:
        """Current step."""
        return self.state.step

    @property
    def can_capture(self) -> bool:
        """True if the capture button should be enabled."""
        return isinstance(self.state, (ReadyToCapture, Error))

    @property
    def has_permission(self) -> Optional[bool]:
        """Camera permission: None while unknown, False when unavailable."""
        if isinstance(self.state, AwaitingPermission):
            return None
        if isinstance(self.state, CameraUnavailable):
            return False
        return True

    @property
    def is_done(self) -> bool:
        return isinstance(self.state, Done)

    # ==================== Camera permission ====================

    def permission_granted(self) -> WizardState:
        """The camera feed started."""
        if isinstance(self.state, (AwaitingPermission, CameraUnavailable)):
            self.state = ReadyToCapture(self.step)
        elif isinstance(self.state, Done):
            raise InvalidTransition("permission_granted", self.state)
        return self.state

    def permission_denied(self, error_name: Optional[str], message: Optional[str] = None) -> WizardState:
        """Camera access failed; show a cause-specific message."""
        if isinstance(self.state, Done):
            raise InvalidTransition("permission_denied", self.state)
        self.state = CameraUnavailable(
            step=self.step,
            message=camera_error_message(error_name, message),
            timestamp=self._clock(),
        )
        return self.state

    def retry_permission(self) -> WizardState:
        """Forget the camera error and ask for access again."""
        if not isinstance(self.state, CameraUnavailable):
            raise InvalidTransition("retry_permission", self.state)
        self.state = AwaitingPermission(self.step)
        return self.state

    # ==================== Capture ====================

    def start_capture(self) -> WizardState:
        """A capture was requested; disables further captures until it resolves."""
        if not self.can_capture:
            raise InvalidTransition("start_capture", self.state)
        self.state = Submitting(self.step)
        return self.state

    def capture_failed(self, message: str = "Failed to capture image. Please try again.") -> WizardState:
        """No frame could be taken from the feed."""
        return self._fail("capture_failed", message)

    def request_failed(self, message: Optional[str]) -> WizardState:
        """The registration API rejected the request or could not be reached."""
        return self._fail("request_failed", message or "An error occurred. Please try again.")

    def _fail(self, event: str, message: str) -> WizardState:
        if not isinstance(self.state, Submitting):
            raise InvalidTransition(event, self.state)
        self.state = Error(step=self.step, message=message, timestamp=self._clock())
        return self.state

    def id_registered(self, vid_number: str) -> WizardState:
        """Step 1 succeeded: remember the VID number and move to the face step."""
        if not (isinstance(self.state, Submitting) and self.step == Step.ID):
            raise InvalidTransition("id_registered", self.state)
        self.vid_number = vid_number
        self.state = ReadyToCapture(Step.FACE)
        return self.state

    def face_registered(self) -> WizardState:
        """Step 2 succeeded: registration is complete."""
        if not (isinstance(self.state, Submitting) and self.step == Step.FACE):
            raise InvalidTransition("face_registered", self.state)
        self.state = Done(vid_number=self.vid_number, completed_at=self._clock())
        return self.state

    def reset(self) -> WizardState:
        """Start a new registration from the ID step."""
        self.vid_number = None
        self.state = AwaitingPermission(Step.ID)
        return self.state
