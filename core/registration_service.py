"""
Registration Service Module

This module implements the two-step registration flow on top of the
in-memory RegistrationStore and a pluggable FaceVerifier:

1. create_registration: accept an ID photo and issue a VID number
2. submit_face: accept a face photo for a VID number and verify it

plus a read-only status lookup and the periodic sweep of expired
registrations.

All public operations are coroutines. They run on the API's event loop,
so the store is only touched between awaits and needs no locking.

Usage:
    from core.registration_service import get_registration_service

    service = get_registration_service()
    vid_number = await service.create_registration(id_image)
    message = await service.submit_face(vid_number, face_image)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from core.errors import (
    ValidationError,
    NotFoundError,
    ExpiredError,
    VerificationError,
)
from core.registration_store import RegistrationStore
from core.verification import FaceVerifier, get_face_verifier

# Setup logging
logger = logging.getLogger(__name__)


SUCCESS_MESSAGE = "Registration completed successfully"


@dataclass
class RegistrationStatus:
    """Public view of a registration (no images)."""

    vid_number: str
    created_at: str
    verified: bool


class RegistrationService:
    """
    Two-step registration flow with simulated verification.

    Attributes:
        store: Registration storage.
        verifier: Face verification capability used at step 2.
        min_image_length: Minimum payload length accepted as a photo.
        processing_delay_sec: Artificial delay applied when issuing a VID number.
    """

    def __init__(
        self,
        store: RegistrationStore,
        verifier: FaceVerifier,
        min_image_length: int = 1000,
        processing_delay_sec: float = 1.5,
    ):
        self.store = store
        self.verifier = verifier
        self.min_image_length = min_image_length
        self.processing_delay_sec = processing_delay_sec

    async def create_registration(self, image: Optional[str]) -> str:
        """
        Register an ID photo and issue a VID number.

        Args:
            image: Base64 / data-URL payload of the ID photo.

        Returns:
            The new VID number.

        Raises:
            ValidationError: If the image is missing or too small to be a photo.
        """
        if not image:
            raise ValidationError("No image data provided")

        if len(image) < self.min_image_length:
            raise ValidationError("Invalid image data. Please take a clear photo.")

        if self.processing_delay_sec > 0:
            await asyncio.sleep(self.processing_delay_sec)

        record = self.store.create(id_image=image)
        logger.info(f"ID registered: {record.vid_number} ({len(image)} chars)")
        return record.vid_number

    async def submit_face(self, vid_number: Optional[str], image: Optional[str]) -> str:
        """
        Submit the face photo for a registration and verify it.

        Args:
            vid_number: VID number returned by create_registration.
            image: Base64 / data-URL payload of the face photo.

        Returns:
            Success message.

        Raises:
            ValidationError: If an input is missing or the registration is
                             already complete.
            NotFoundError: If the VID number is unknown.
            ExpiredError: If the registration is older than the TTL
                          (the registration is deleted).
            VerificationError: If the verifier rejected the photo
                               (the registration is left untouched).
        """
        if not image or not vid_number:
            raise ValidationError("Missing required information")

        record = self.store.get(vid_number)
        if record is None:
            raise NotFoundError(
                "Invalid VID number. Please start the registration process again."
            )

        if self.store.is_expired(record):
            self.store.delete(vid_number)
            logger.info(f"Registration {vid_number} expired on access")
            raise ExpiredError("Registration session expired. Please start again.")

        if record.verified:
            raise ValidationError("Registration already completed")

        outcome = await self.verifier.verify(image, record.id_image)

        # The record may have been swept or completed while we were waiting.
        record = self.store.get(vid_number)
        if record is None:
            raise NotFoundError(
                "Invalid VID number. Please start the registration process again."
            )
        if record.verified:
            raise ValidationError("Registration already completed")

        if not outcome.passed:
            logger.info(f"Face verification failed for {vid_number}: {outcome.reason}")
            raise VerificationError(
                "Face verification failed. Please ensure proper lighting and try again."
            )

        record.face_image = image
        record.verified = True
        logger.info(f"Registration {vid_number} verified")
        return SUCCESS_MESSAGE

    async def get_status(self, vid_number: str) -> RegistrationStatus:
        """
        Look up a registration.

        Expired registrations that have not been swept yet are reported as
        not found.

        Raises:
            NotFoundError: If the registration does not exist or has expired.
        """
        record = self.store.get(vid_number)
        if record is None or self.store.is_expired(record):
            raise NotFoundError("Registration not found")

        return RegistrationStatus(**record.to_summary())

    def sweep(self) -> int:
        """
        Remove every expired registration.

        Returns:
            Number of registrations removed.
        """
        removed = self.store.sweep()
        if removed:
            logger.info(f"Swept {len(removed)} expired registration(s)")
        return len(removed)

    async def run_sweeper(self, interval_sec: float) -> None:
        """
        Sweep expired registrations every interval_sec seconds, forever.

        Meant to run as a background task; stops when the task is cancelled.
        """
        logger.info(f"Registration sweeper started (every {interval_sec}s)")
        try:
            while True:
                await asyncio.sleep(interval_sec)
                try:
                    self.sweep()
                except Exception as e:
                    logger.error(f"Registration sweep failed: {e}")
        finally:
            logger.info("Registration sweeper stopped")


# Singleton instance for the service
_service_instance: Optional[RegistrationService] = None


def build_registration_service() -> RegistrationService:
    """Create a RegistrationService from config.yaml."""
    from core.config import get_registration_config

    config = get_registration_config()
    store = RegistrationStore(
        ttl_sec=float(config.get("ttl_sec", 3600)),
        vid_prefix=config.get("vid_prefix", "VID"),
        max_vid_attempts=int(config.get("max_vid_attempts", 20)),
    )
    return RegistrationService(
        store=store,
        verifier=get_face_verifier(),
        min_image_length=int(config.get("min_image_length", 1000)),
        processing_delay_sec=float(config.get("processing_delay_sec", 1.5)),
    )


def get_registration_service() -> RegistrationService:
    """
    Get or create the singleton RegistrationService instance.

    The API process keeps exactly one store, so every request sees the same
    registrations.
    """
    global _service_instance

    if _service_instance is None:
        _service_instance = build_registration_service()

    return _service_instance


def reset_registration_service() -> None:
    """Drop the singleton (the next call to get_registration_service rebuilds it)."""
    global _service_instance
    _service_instance = None
