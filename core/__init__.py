"""
Core Module for the VID Registration Demo

This package contains the framework-independent parts of the system:
configuration, the in-memory registration store, the registration flow
and the pluggable face verification capability.

Main components:
    - config: Configuration loading and management
    - errors: Registration error taxonomy
    - registration_store: In-memory registrations with time-to-live
    - registration_service: Two-step registration flow and expiry sweep
    - verification: Face verification interface and simulated verifier

Usage:
    from core.config import get_config
    from core.registration_service import get_registration_service
"""

from core.config import (
    get_config,
    get_section,
    get_registration_config,
    get_verification_config,
    get_api_config,
    get_frontend_config,
    get_server_config,
)

from core.errors import (
    RegistrationError,
    ValidationError,
    NotFoundError,
    ExpiredError,
    VerificationError,
    ServerError,
)

from core.registration_store import (
    RegistrationRecord,
    RegistrationStore,
    generate_vid_number,
)

from core.registration_service import (
    RegistrationService,
    RegistrationStatus,
    get_registration_service,
)

__all__ = [
    # Configuration
    "get_config",
    "get_section",
    "get_registration_config",
    "get_verification_config",
    "get_api_config",
    "get_frontend_config",
    "get_server_config",
    # Errors
    "RegistrationError",
    "ValidationError",
    "NotFoundError",
    "ExpiredError",
    "VerificationError",
    "ServerError",
    # Store
    "RegistrationRecord",
    "RegistrationStore",
    "generate_vid_number",
    # Service
    "RegistrationService",
    "RegistrationStatus",
    "get_registration_service",
]
