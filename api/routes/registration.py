"""
Registration API Routes

This module provides the REST endpoints of the two-step registration flow:
- POST /api/id-reg: register an ID photo, returns a VID number
- POST /api/photo-reg: register the face photo for a VID number
- GET /api/registration/{vid_number}: registration status

Domain errors raised by the registration service propagate out of the
handlers and are turned into {"error": ...} responses by the exception
handlers installed in api.app.
"""

import logging
from fastapi import APIRouter, Depends

from api.schemas import (
    IdRegistrationRequest,
    IdRegistrationResponse,
    PhotoRegistrationRequest,
    PhotoRegistrationResponse,
    RegistrationStatusResponse,
    ErrorResponse,
)
from core.registration_service import RegistrationService, get_registration_service

# Setup logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api", tags=["registration"])


@router.post(
    "/id-reg",
    response_model=IdRegistrationResponse,
    responses={400: {"model": ErrorResponse}},
)
async def register_id(
    request: IdRegistrationRequest,
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Register an ID photo.

    The image is only checked for presence and a minimum payload size.
    After an artificial processing delay a fresh VID number is issued.

    Raises:
        400: If the image is missing or too small.
    """
    vid_number = await service.create_registration(request.image)
    return IdRegistrationResponse(vidNumber=vid_number)


@router.post(
    "/photo-reg",
    response_model=PhotoRegistrationResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def register_photo(
    request: PhotoRegistrationRequest,
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Register the face photo for an existing registration.

    Raises:
        400: Missing fields, expired registration, registration already
             completed, or face verification failed.
        404: If the VID number is unknown.
    """
    message = await service.submit_face(request.vidNumber, request.image)
    return PhotoRegistrationResponse(success=True, message=message)


@router.get(
    "/registration/{vid_number}",
    response_model=RegistrationStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_registration(
    vid_number: str,
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Get the status of a registration.

    Raises:
        404: If the registration does not exist or has expired.
    """
    status = await service.get_status(vid_number)
    return RegistrationStatusResponse(
        vidNumber=status.vid_number,
        timestamp=status.created_at,
        faceVerified=status.verified,
    )
