import time

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.auth import _check_claims
from app.config import FIREBASE_PROJECT_ID
from app.main import app


def _claims(**overrides):
    now = int(time.time())
    claims = {
        "aud": FIREBASE_PROJECT_ID,
        "iss": f"https://securetoken.google.com/{FIREBASE_PROJECT_ID}",
        "exp": now + 3600,
        "iat": now - 10,
        "auth_time": now - 10,
        "sub": "uid-1",
    }
    claims.update(overrides)
    return claims


def test_valid_claims_pass():
    _check_claims(_claims())


@pytest.mark.parametrize(
    "overrides",
    [
        {"aud": "other-project"},
        {"iss": "https://securetoken.google.com/other-project"},
        {"exp": int(time.time()) - 1},
        {"iat": int(time.time()) + 3600},
    ],
)
def test_invalid_claims_are_rejected(overrides):
    with pytest.raises(HTTPException) as exc_info:
        _check_claims(_claims(**overrides))

    assert exc_info.value.status_code == 401


def test_missing_auth_time():
    claims = _claims()
    del claims["auth_time"]

    with pytest.raises(HTTPException):
        _check_claims(claims)


def test_routes_require_bearer_token(db):
    response = TestClient(app).get("/workflows")

    assert response.status_code in (401, 403)
