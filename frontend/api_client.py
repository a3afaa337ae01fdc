"""
API client for the VID Registration Demo.

Handles REST communication with the registration API.
Includes a mock mode that runs the registration service in-process, for
development without a backend.
"""

import asyncio
import httpx
from enum import Enum
from typing import Optional, Dict, Any

from core.registration_service import RegistrationService
from core.registration_store import RegistrationStore
from core.errors import RegistrationError
from core.config import get_frontend_config, get_registration_config, get_verification_config
from core.verification import get_face_verifier
from frontend.components.registration_wizard import current_utc_time


class ConnectionMode(Enum):
    """API connection mode."""
    MOCK = "mock"          # In-process registration service (no backend needed)
    LIVE = "live"          # Real backend connection


class APIError(Exception):
    """A registration request failed. The message is meant for the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


ENDPOINTS = {
    "id_reg": "/id-reg",
    "photo_reg": "/photo-reg",
    "registration": "/registration/{vid_number}",
}


MOCK_DELAY_SEC = 0.3


def build_mock_service(delay_sec: float = MOCK_DELAY_SEC) -> RegistrationService:
    """
    Create an in-process registration service for mock mode.

    Built from the same registration and verification config sections as
    the backend. Only the delays are shortened so the UI stays responsive.
    """
    registration_config = get_registration_config()
    verification_config = {**get_verification_config(), "delay_sec": delay_sec}

    store = RegistrationStore(
        ttl_sec=float(registration_config.get("ttl_sec", 3600)),
        vid_prefix=registration_config.get("vid_prefix", "VID"),
        max_vid_attempts=int(registration_config.get("max_vid_attempts", 20)),
    )
    return RegistrationService(
        store=store,
        verifier=get_face_verifier(verification_config),
        min_image_length=int(registration_config.get("min_image_length", 1000)),
        processing_delay_sec=delay_sec,
    )


class RegistrationAPIClient:
    """
    Client for the registration API.

    Supports both live (real backend) and mock (in-process) modes.
    Every POST carries the client's UTC time and login name alongside
    the payload.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001/api",
        mode: ConnectionMode = ConnectionMode.LIVE,
        timeout_sec: float = 30.0,
        user_login: str = "demo-user",
        http_client: Optional[httpx.Client] = None,
        mock_service: Optional[RegistrationService] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.mode = mode
        self.timeout_sec = timeout_sec
        self.user_login = user_login

        self._http = http_client or httpx.Client(base_url=self.base_url, timeout=timeout_sec)
        self._mock = mock_service or build_mock_service()

    def set_mode(self, mode: ConnectionMode) -> None:
        """Switch between mock and live mode."""
        self.mode = mode
        if mode == ConnectionMode.MOCK:
            print("[APIClient] Switched to MOCK mode")
        else:
            print("[APIClient] Switched to LIVE mode")

    def check_backend_available(self) -> bool:
        """Check if the backend server is reachable."""
        health_url = self.base_url.rsplit("/api", 1)[0] + "/health"
        try:
            response = self._http.get(health_url, timeout=2.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    # ==================== Transport ====================

    def _payload(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            **data,
            "timestamp": current_utc_time(),
            "userLogin": self.user_login,
        }

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            result = response.json()
        except ValueError:
            result = {}

        if not response.is_success:
            error = result.get("error") if isinstance(result, dict) else None
            raise APIError(error or "An error occurred", status_code=response.status_code)

        return result

    def _post(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._http.post(endpoint, json=self._payload(data))
        except httpx.HTTPError as e:
            print(f"[APIClient] POST {endpoint} error: {e}")
            raise APIError(f"Network error occurred: {e}")
        return self._handle_response(response)

    def _get(self, endpoint: str) -> Dict[str, Any]:
        try:
            response = self._http.get(endpoint)
        except httpx.HTTPError as e:
            print(f"[APIClient] GET {endpoint} error: {e}")
            raise APIError(f"Network error occurred: {e}")
        return self._handle_response(response)

    def _run_mock(self, coro):
        try:
            return asyncio.run(coro)
        except RegistrationError as e:
            raise APIError(e.message, status_code=e.status_code)

    # ==================== Registration ====================

    def register_id(self, image: str) -> str:
        """
        Register an ID photo.

        Args:
            image: JPEG data URL of the ID photo.

        Returns:
            VID number issued by the backend.

        Raises:
            APIError: If the backend rejected the photo or is unreachable.
        """
        if self.mode == ConnectionMode.MOCK:
            return self._run_mock(self._mock.create_registration(image))

        result = self._post(ENDPOINTS["id_reg"], {"image": image})
        vid_number = result.get("vidNumber")
        if not vid_number:
            raise APIError("An error occurred")
        return vid_number

    def register_face(self, image: str, vid_number: str) -> str:
        """
        Register the face photo for a VID number.

        Returns:
            Success message from the backend.

        Raises:
            APIError: On verification failure, expiry, unknown VID number,
                      or network error.
        """
        if self.mode == ConnectionMode.MOCK:
            return self._run_mock(self._mock.submit_face(vid_number, image))

        result = self._post(ENDPOINTS["photo_reg"], {"image": image, "vidNumber": vid_number})
        if not result.get("success"):
            raise APIError(result.get("error") or "An error occurred")
        return result.get("message", "")

    def get_registration(self, vid_number: str) -> Dict[str, Any]:
        """
        Get the status of a registration.

        Returns:
            Dict with vidNumber, timestamp and faceVerified.
        """
        if self.mode == ConnectionMode.MOCK:
            status = self._run_mock(self._mock.get_status(vid_number))
            return {
                "vidNumber": status.vid_number,
                "timestamp": status.created_at,
                "faceVerified": status.verified,
            }

        return self._get(ENDPOINTS["registration"].format(vid_number=vid_number))


# Global client instance
_api_client: Optional[RegistrationAPIClient] = None


def get_api_client() -> RegistrationAPIClient:
    """
    Get or create the global API client instance.

    The mode comes from frontend.mode in config.yaml: "live", "mock", or
    "auto" (live if the backend answers its health check, mock otherwise).
    """
    global _api_client
    if _api_client is None:
        config = get_frontend_config()
        _api_client = RegistrationAPIClient(
            base_url=config.get("api_base_url", "http://localhost:3001/api"),
            timeout_sec=float(config.get("timeout_sec", 30.0)),
            user_login=config.get("user_login", "demo-user"),
        )

        mode = config.get("mode", "auto")
        if mode == "auto":
            mode = "live" if _api_client.check_backend_available() else "mock"
        _api_client.set_mode(ConnectionMode(mode))

    return _api_client
