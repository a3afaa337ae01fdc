"""
Registration Error Taxonomy

Every failure the registration service reports is a RegistrationError
carrying the HTTP status code the API layer should answer with and a
human-readable message that is shown to the user as-is.
"""


class RegistrationError(Exception):
    """Base class for registration failures."""

    status_code: int = 500
    default_message: str = "Registration failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RegistrationError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Missing required information"


class NotFoundError(RegistrationError):
    """Unknown registration identifier."""

    status_code = 404
    default_message = "Registration not found"


class ExpiredError(RegistrationError):
    """Registration is older than the time-to-live."""

    status_code = 400
    default_message = "Registration session expired. Please start again."


class VerificationError(RegistrationError):
    """The face verifier rejected the submitted photo."""

    status_code = 400
    default_message = (
        "Face verification failed. Please ensure proper lighting and try again."
    )


class ServerError(RegistrationError):
    """Unexpected failure inside the service."""

    status_code = 500
    default_message = "Server error. Please try again."
