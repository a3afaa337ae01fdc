"""
Face Verification Module

This package defines how a submitted face photo is checked against the
ID photo of the same registration. Verification is a pluggable capability:
the registration service only depends on the FaceVerifier interface, so a
real implementation can replace the simulated one without touching the
control flow.

Components:
    - interfaces: FaceVerifier ABC, VerificationOutcome and the built-in verifiers

Usage:
    from core.verification import get_face_verifier
    verifier = get_face_verifier()
    outcome = await verifier.verify(face_image, id_image)
"""

from core.verification.interfaces import (
    VerificationOutcome,
    FaceVerifier,
    SimulatedFaceVerifier,
    StubFaceVerifier,
    get_face_verifier,
)

__all__ = [
    "VerificationOutcome",
    "FaceVerifier",
    "SimulatedFaceVerifier",
    "StubFaceVerifier",
    "get_face_verifier",
]
