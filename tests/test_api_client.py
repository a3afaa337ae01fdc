"""
Tests for the frontend API client.

This test suite verifies:
- Request payloads (client metadata on every POST)
- Mapping of error responses and network failures to APIError
- Live mode against the real application
- Mock mode against an in-process registration service

Run with: pytest tests/test_api_client.py -v
"""

import os
import re
import sys
import json
import httpx
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from api.app import app
from core.registration_service import RegistrationService, get_registration_service
from core.registration_store import RegistrationStore
from core.verification import SimulatedFaceVerifier, StubFaceVerifier
from frontend import api_client as api_client_module
from frontend.api_client import RegistrationAPIClient, ConnectionMode, APIError, build_mock_service


BASE_URL = "http://testserver/api"


def make_service(clock, passed=True) -> RegistrationService:
    return RegistrationService(
        store=RegistrationStore(ttl_sec=3600, clock=clock),
        verifier=StubFaceVerifier(passed=passed),
        processing_delay_sec=0,
    )


def transport_client(handler) -> httpx.Client:
    return httpx.Client(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestRequestPayload:
    """Tests for what the client sends."""

    def test_post_includes_client_metadata(self, image):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"vidNumber": "VID123456"})

        client = RegistrationAPIClient(
            base_url=BASE_URL, user_login="alice", http_client=transport_client(handler)
        )

        assert client.register_id(image) == "VID123456"
        assert seen["url"] == "http://testserver/api/id-reg"
        assert seen["body"]["image"] == image
        assert seen["body"]["userLogin"] == "alice"
        assert re.match(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$", seen["body"]["timestamp"])

    def test_face_payload(self, image):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "message": "ok"})

        client = RegistrationAPIClient(base_url=BASE_URL, http_client=transport_client(handler))

        assert client.register_face(image, "VID123456") == "ok"
        assert seen["body"]["vidNumber"] == "VID123456"


class TestErrorMapping:
    """Tests for turning failures into APIError."""

    def test_error_message_from_body(self, image):
        def handler(request):
            return httpx.Response(404, json={"error": "Invalid VID number. Please start the registration process again."})

        client = RegistrationAPIClient(base_url=BASE_URL, http_client=transport_client(handler))

        with pytest.raises(APIError) as exc_info:
            client.register_face(image, "VID000000")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message.startswith("Invalid VID number")

    def test_error_without_body(self, image):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        client = RegistrationAPIClient(base_url=BASE_URL, http_client=transport_client(handler))

        with pytest.raises(APIError) as exc_info:
            client.register_id(image)
        assert exc_info.value.message == "An error occurred"
        assert exc_info.value.status_code == 502

    def test_network_error(self, image):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = RegistrationAPIClient(base_url=BASE_URL, http_client=transport_client(handler))

        with pytest.raises(APIError, match="Network error occurred"):
            client.register_id(image)

    def test_missing_vid_in_response(self, image):
        def handler(request):
            return httpx.Response(200, json={})

        client = RegistrationAPIClient(base_url=BASE_URL, http_client=transport_client(handler))

        with pytest.raises(APIError):
            client.register_id(image)

    def test_backend_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = RegistrationAPIClient(base_url=BASE_URL, http_client=transport_client(handler))
        assert client.check_backend_available() is False


class TestLiveMode:
    """Tests for live mode against the FastAPI application."""

    @pytest.fixture
    def live_client(self, clock):
        service = make_service(clock)
        app.dependency_overrides[get_registration_service] = lambda: service
        client = RegistrationAPIClient(
            base_url=BASE_URL,
            mode=ConnectionMode.LIVE,
            http_client=TestClient(app, base_url=BASE_URL),
        )
        yield client
        app.dependency_overrides.clear()

    def test_full_flow(self, live_client, image):
        vid_number = live_client.register_id(image)
        assert re.match(r"^VID\d{6}$", vid_number)

        message = live_client.register_face(image, vid_number)
        assert message == "Registration completed successfully"

        status = live_client.get_registration(vid_number)
        assert status["vidNumber"] == vid_number
        assert status["faceVerified"] is True

    def test_small_image_rejected(self, live_client):
        with pytest.raises(APIError) as exc_info:
            live_client.register_id("x" * 10)
        assert exc_info.value.status_code == 400

    def test_health_check(self, live_client):
        assert live_client.check_backend_available() is True


class TestMockMode:
    """Tests for mock mode with an in-process service."""

    def test_full_flow(self, clock, image):
        client = RegistrationAPIClient(mode=ConnectionMode.MOCK, mock_service=make_service(clock))

        vid_number = client.register_id(image)
        assert client.register_face(image, vid_number) == "Registration completed successfully"

        status = client.get_registration(vid_number)
        assert status == {
            "vidNumber": vid_number,
            "timestamp": "2026-01-01T12:00:00.000Z",
            "faceVerified": True,
        }

    def test_errors_become_api_errors(self, clock, image):
        client = RegistrationAPIClient(
            mode=ConnectionMode.MOCK, mock_service=make_service(clock, passed=False)
        )
        vid_number = client.register_id(image)

        with pytest.raises(APIError) as exc_info:
            client.register_face(image, vid_number)
        assert exc_info.value.status_code == 400
        assert "Face verification failed" in exc_info.value.message

    def test_unknown_registration(self, clock):
        client = RegistrationAPIClient(mode=ConnectionMode.MOCK, mock_service=make_service(clock))

        with pytest.raises(APIError) as exc_info:
            client.get_registration("VID999999")
        assert exc_info.value.status_code == 404

    def test_set_mode(self, clock):
        client = RegistrationAPIClient(mock_service=make_service(clock))
        client.set_mode(ConnectionMode.MOCK)
        assert client.mode == ConnectionMode.MOCK


class TestBuildMockService:
    """Tests for the in-process service used in mock mode."""

    def test_follows_config(self, monkeypatch):
        monkeypatch.setattr(
            api_client_module,
            "get_registration_config",
            lambda: {"ttl_sec": 60, "vid_prefix": "REG", "min_image_length": 50},
        )
        monkeypatch.setattr(
            api_client_module,
            "get_verification_config",
            lambda: {"backend": "simulated", "failure_rate": 0.5, "delay_sec": 1.5},
        )

        service = build_mock_service(delay_sec=0.1)

        assert service.store.ttl.total_seconds() == 60
        assert service.store.vid_prefix == "REG"
        assert service.min_image_length == 50
        assert isinstance(service.verifier, SimulatedFaceVerifier)
        assert service.verifier.failure_rate == 0.5
        assert service.verifier.delay_sec == 0.1
        assert service.processing_delay_sec == 0.1

    def test_accept_all_backend(self, monkeypatch):
        monkeypatch.setattr(
            api_client_module,
            "get_verification_config",
            lambda: {"backend": "accept_all"},
        )

        service = build_mock_service()
        assert isinstance(service.verifier, StubFaceVerifier)

    def test_defaults_from_config_yaml(self):
        service = build_mock_service()

        assert service.store.ttl.total_seconds() == 3600
        assert service.verifier.failure_rate == 0.2
        assert service.verifier.delay_sec == 0.3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
