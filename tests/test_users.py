from types import SimpleNamespace

import pytest
from firebase_admin.exceptions import FirebaseError

from app.routes import users


def _record(uid, email=None, display_name=None, claims=None):
    return SimpleNamespace(uid=uid, email=email, display_name=display_name, custom_claims=claims)


@pytest.fixture
def directory(monkeypatch):
    calls = {}

    def fake_list_users(max_results, app=None):
        calls["max_results"] = max_results
        return SimpleNamespace(
            users=[
                _record("u1", "dr.keller@clinic.test", display_name="Dr. Keller"),
                _record("u2", "anna@clinic.test", claims={"first_name": "Anna", "last_name": "Roth"}),
                _record("u3", "front.desk@clinic.test"),
                _record("u4"),
            ]
        )

    monkeypatch.setattr(users, "get_firebase_app", lambda: None)
    monkeypatch.setattr(users.firebase_auth, "list_users", fake_list_users)
    return calls


def test_list_users_flattens_names(client, directory):
    response = client.get("/api/users/list")

    assert response.status_code == 200
    assert response.json() == [
        {"id": "u1", "full_name": "Dr. Keller", "email": "dr.keller@clinic.test"},
        {"id": "u2", "full_name": "Anna Roth", "email": "anna@clinic.test"},
        {"id": "u3", "full_name": "front.desk@clinic.test", "email": "front.desk@clinic.test"},
        {"id": "u4", "full_name": None, "email": None},
    ]
    assert directory["max_results"] == 100


def test_provider_failure(client, monkeypatch):
    def failing(max_results, app=None):
        raise FirebaseError("UNAVAILABLE", "Identity service down")

    monkeypatch.setattr(users, "get_firebase_app", lambda: None)
    monkeypatch.setattr(users.firebase_auth, "list_users", failing)

    response = client.get("/api/users/list")

    assert response.status_code == 500
    assert response.json() == {"error": "Identity service down"}


def test_unexpected_failure(client, monkeypatch):
    def failing(max_results, app=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(users, "get_firebase_app", lambda: None)
    monkeypatch.setattr(users.firebase_auth, "list_users", failing)

    response = client.get("/api/users/list")

    assert response.status_code == 500
    assert response.json() == {"error": "Unexpected error listing users"}
