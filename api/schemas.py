"""
Pydantic Schemas for API Request/Response Models

This module defines the data models used for communication between the
capture client and the registration API.

Field names follow the JSON wire format used by the browser client
(camelCase, e.g. "vidNumber"). Required inputs are declared optional so
that a missing image is reported by the registration service as a 400
with a readable message instead of a schema error.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# Registration Schemas
# ============================================================

class ClientMetadata(BaseModel):
    """Fields the client attaches to every request. Not used by the server."""
    model_config = ConfigDict(extra="ignore")

    timestamp: Optional[str] = Field(None, description="Client UTC time of the request")
    userLogin: Optional[str] = Field(None, description="Login name shown in the client")


class IdRegistrationRequest(ClientMetadata):
    """Step 1: ID photo."""
    image: Optional[str] = Field(None, description="Base64 / data-URL encoded JPEG of the ID")


class IdRegistrationResponse(BaseModel):
    """VID number issued for a new registration."""
    vidNumber: str = Field(..., description="Registration identifier, e.g. 'VID482913'")


class PhotoRegistrationRequest(ClientMetadata):
    """Step 2: face photo for an existing registration."""
    image: Optional[str] = Field(None, description="Base64 / data-URL encoded JPEG of the face")
    vidNumber: Optional[str] = Field(None, description="VID number returned by step 1")


class PhotoRegistrationResponse(BaseModel):
    """Result of a successful face verification."""
    success: bool = Field(True, description="Always true on a 200 response")
    message: str = Field(..., description="Human-readable status message")


class RegistrationStatusResponse(BaseModel):
    """Status of a registration."""
    vidNumber: str = Field(..., description="Registration identifier")
    timestamp: str = Field(..., description="ISO-8601 UTC creation time")
    faceVerified: bool = Field(..., description="True once step 2 succeeded")


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str = Field(..., description="Human-readable error message")


# ============================================================
# Health Check Schemas
# ============================================================

class HealthResponse(BaseModel):
    """System health check response."""
    status: str = Field(..., description="Overall status: 'healthy'")
    active_registrations: int = Field(..., description="Registrations currently stored")
    verified_registrations: int = Field(..., description="Stored registrations that completed step 2")
    sweeper_running: bool = Field(..., description="Whether the expiry sweeper task is alive")
