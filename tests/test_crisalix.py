import asyncio
import json

import httpx
import pytest

from app.main import app
from app.services.crisalix_service import (
    CrisalixAuthError,
    CrisalixService,
    CrisalixUpstreamError,
    get_crisalix_service,
    read_access_token,
)
from app.shared.errors import NetworkError


def test_read_access_token():
    assert read_access_token(json.dumps({"access_token": "tok-123"})) == "tok-123"


@pytest.mark.parametrize(
    "cookie, message",
    [
        (None, "Missing Crisalix authentication. Please connect 3D again."),
        ("not json", "Missing Crisalix access token. Please reconnect 3D."),
        (json.dumps({"refresh_token": "r"}), "Missing Crisalix access token. Please reconnect 3D."),
        (json.dumps({"access_token": None}), "Missing Crisalix access token. Please reconnect 3D."),
    ],
)
def test_read_access_token_errors(cookie, message):
    with pytest.raises(CrisalixAuthError) as exc_info:
        read_access_token(cookie)

    assert exc_info.value.message == message
    assert exc_info.value.status_code == 401


def _service(handler):
    return CrisalixService(base_url="https://crisalix.test", transport=httpx.MockTransport(handler))


def test_create_patient_forwards_form_with_bearer_token():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.read()
        seen["content_type"] = request.headers["Content-Type"]
        return httpx.Response(201, json={"patient": {"id": 77}})

    parts = [
        ("patient[first_name]", (None, "Ana")),
        ("patient[photo]", ("front.jpg", b"\xff\xd8jpeg", "image/jpeg")),
    ]
    result = asyncio.run(_service(handler).create_patient("tok-123", parts))

    assert result == {"patient": {"id": 77}}
    assert seen["url"] == "https://crisalix.test/patients"
    assert seen["auth"] == "Bearer tok-123"
    assert seen["content_type"].startswith("multipart/form-data")
    assert b"Ana" in seen["body"]
    assert b'filename="front.jpg"' in seen["body"]


def test_upstream_error_carries_status_and_details():
    def handler(request):
        return httpx.Response(422, json={"errors": ["email taken"]})

    with pytest.raises(CrisalixUpstreamError) as exc_info:
        asyncio.run(_service(handler).create_patient("tok", []))

    assert exc_info.value.status_code == 502
    assert exc_info.value.to_dict() == {
        "error": "Crisalix patient creation failed",
        "status": 422,
        "details": {"errors": ["email taken"]},
    }


def test_upstream_text_error_body():
    def handler(request):
        return httpx.Response(500, text="Internal error")

    with pytest.raises(CrisalixUpstreamError) as exc_info:
        asyncio.run(_service(handler).create_patient("tok", []))

    assert exc_info.value.details == "Internal error"


def test_transport_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        asyncio.run(_service(handler).create_patient("tok", []))


class FakeCrisalix:
    def __init__(self):
        self.calls = []

    async def create_patient(self, access_token, parts):
        self.calls.append((access_token, parts))
        return {"patient": {"id": 1}}


@pytest.fixture
def fake_crisalix(client):
    fake = FakeCrisalix()
    app.dependency_overrides[get_crisalix_service] = lambda: fake
    return fake


def test_route_requires_cookie(client, fake_crisalix):
    response = client.post("/api/crisalix/patients", data={"patient[first_name]": "Ana"})

    assert response.status_code == 401
    assert response.json() == {"error": "Missing Crisalix authentication. Please connect 3D again."}
    assert fake_crisalix.calls == []


def test_route_forwards_fields_and_files(client, fake_crisalix):
    client.cookies.set("crisalix_tokens", json.dumps({"access_token": "tok-9"}))

    response = client.post(
        "/api/crisalix/patients",
        data={"patient[first_name]": "Ana"},
        files={"patient[photo]": ("front.jpg", b"jpeg-bytes", "image/jpeg")},
    )

    assert response.status_code == 200
    assert response.json() == {"patient": {"id": 1}}
    token, parts = fake_crisalix.calls[0]
    assert token == "tok-9"
    assert ("patient[first_name]", (None, "Ana")) in parts
    assert ("patient[photo]", ("front.jpg", b"jpeg-bytes", "image/jpeg")) in parts
