"""
Face Verification Interfaces

This module defines the abstract interface for face verification and the
implementations shipped with the demo.

There is no biometric matching in this project. SimulatedFaceVerifier
stands in for a slow, fallible external verification step: it waits for a
fixed delay and then rejects a fixed share of submissions at random.
StubFaceVerifier always returns the same decision, without delay, and is
meant for tests and scripted demos.

Usage:
    from core.verification.interfaces import SimulatedFaceVerifier

    verifier = SimulatedFaceVerifier(failure_rate=0.2, delay_sec=1.5)
    outcome = await verifier.verify(face_image, id_image)
    if not outcome.passed:
        print(outcome.reason)
"""

import asyncio
import random
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

# Setup logging
logger = logging.getLogger(__name__)


@dataclass
class VerificationOutcome:
    """
    Result of a verification attempt.

    Attributes:
        passed: True if the face photo was accepted.
        reason: Short machine-readable reason ("accepted", "random_rejection", ...).
        details: Implementation-specific details, useful for logging.
    """

    passed: bool
    reason: str = "accepted"
    details: Dict[str, Any] = field(default_factory=dict)


class FaceVerifier(ABC):
    """
    Abstract base class for face verification.

    Decides whether the face photo submitted at step 2 belongs to the
    person on the ID photo submitted at step 1.
    """

    @abstractmethod
    async def verify(self, face_image: str, id_image: str) -> VerificationOutcome:
        """
        Verify a face photo against an ID photo.

        Args:
            face_image: Base64 / data-URL payload captured at step 2.
            id_image: Base64 / data-URL payload captured at step 1.

        Returns:
            VerificationOutcome with the decision.
        """
        pass


class SimulatedFaceVerifier(FaceVerifier):
    """
    Verifier that sleeps, then fails with a fixed probability.

    The images are never inspected. The delay is not interruptible by the
    caller.
    """

    def __init__(
        self,
        failure_rate: float = 0.2,
        delay_sec: float = 1.5,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the simulated verifier.

        Args:
            failure_rate: Probability in [0, 1] of rejecting a submission.
            delay_sec: Artificial processing delay in seconds.
            rng: Optional random generator (for reproducible tests).
        """
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be in [0, 1], got {failure_rate}")

        self.failure_rate = failure_rate
        self.delay_sec = delay_sec
        self._rng = rng or random.Random()

    async def verify(self, face_image: str, id_image: str) -> VerificationOutcome:
        """Wait for the artificial delay, then flip the coin."""
        if self.delay_sec > 0:
            await asyncio.sleep(self.delay_sec)

        draw = self._rng.random()
        passed = draw >= self.failure_rate

        return VerificationOutcome(
            passed=passed,
            reason="accepted" if passed else "random_rejection",
            details={
                "method": "simulated",
                "draw": draw,
                "failure_rate": self.failure_rate,
            },
        )


class StubFaceVerifier(FaceVerifier):
    """Verifier that always returns the same decision immediately."""

    def __init__(self, passed: bool = True):
        self.passed = passed
        self.calls = 0

    async def verify(self, face_image: str, id_image: str) -> VerificationOutcome:
        """Return the fixed decision."""
        self.calls += 1
        return VerificationOutcome(
            passed=self.passed,
            reason="accepted" if self.passed else "stub_rejection",
            details={"method": "stub"},
        )


def get_face_verifier(config: Dict[str, Any] = None) -> FaceVerifier:
    """
    Factory function to get a FaceVerifier from configuration.

    Args:
        config: Optional "verification" config dict. If None, loads from config.yaml.

    Returns:
        Configured FaceVerifier instance.

    Raises:
        ValueError: If the configured backend is unknown.
    """
    if config is None:
        from core.config import get_verification_config
        config = get_verification_config()

    backend = config.get("backend", "simulated")

    if backend == "simulated":
        return SimulatedFaceVerifier(
            failure_rate=float(config.get("failure_rate", 0.2)),
            delay_sec=float(config.get("delay_sec", 1.5)),
        )
    if backend == "accept_all":
        logger.warning("Face verification disabled: every submission is accepted")
        return StubFaceVerifier(passed=True)

    raise ValueError(f"Unknown verification backend: {backend!r}")
