# tests/test_auth.py
import warnings

import pytest
from google.auth.exceptions import TransportError

from testdrive import crud
from testdrive.errors import Unauthorized
from testdrive.models import Role
from testdrive.security import FirebaseVerifier, TokenService, hash_password, verify_password


def test_password_hash_round_trip():
    h = hash_password("secret123")
    assert h != "secret123"
    assert verify_password("secret123", h)
    assert not verify_password("secret124", h)
    assert not verify_password("secret123", None)


def test_token_carries_id_and_role():
    tokens = TokenService("s3cret-" + "x" * 32)
    claims = tokens.decode(tokens.issue("user-1", Role.JOURNALIST))
    assert claims["id"] == "user-1"
    assert claims["role"] == "Journalist"


def test_token_signed_with_other_secret_is_invalid():
    token = TokenService("one-" + "x" * 32).issue("user-1", Role.CAR_OWNER)
    with pytest.raises(Unauthorized) as exc:
        TokenService("two-" + "x" * 32).decode(token)
    assert exc.value.message == "Not authorized, token invalid"


def test_missing_token(client):
    resp = client.get("/api/users/profile")
    assert resp.status_code == 401
    assert resp.json() == {"message": "Not authorized, no token provided"}


def test_garbage_token(client):
    resp = client.get("/api/users/profile", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, token invalid"


def test_expired_token(client, journalist, settings):
    expired = TokenService(settings.jwt_secret, expires_days=-1).issue(journalist["id"], Role.JOURNALIST)
    resp = client.get("/api/users/profile", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, token expired"


def test_token_for_deleted_account(app, client, db):
    user = crud.create_user(db, {
        "name": "Gone", "email": "gone@example.com",
        "password_hash": hash_password("secret123"), "role": Role.JOURNALIST,
    })
    token = app.state.tokens.issue(user.id, user.role)
    db.delete(user)
    db.commit()
    resp = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, user not found"


def test_role_check_lists_required_roles(client, journalist):
    resp = client.get("/api/cars/my-listings", headers=journalist["headers"])
    assert resp.status_code == 403
    assert resp.json()["message"] == (
        "User role 'Journalist' is not authorized to access this route. Required roles: Car Owner"
    )


def test_unknown_route_uses_message_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Not Found - /api/nothing-here"}


def test_health_and_root(client):
    assert client.get("/api/health").json() == {"status": "ok"}
    assert client.get("/").text == "API is running..."


@pytest.fixture()
def google_verify(monkeypatch):
    """Replaces Google's token check; ``outcomes`` is consumed one call at a time."""
    from google.oauth2 import id_token

    calls = []
    outcomes = []

    def verify_firebase_token(token, request, audience=None):
        calls.append((token, audience))
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(id_token, "verify_firebase_token", verify_firebase_token)
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    return calls, outcomes


def test_firebase_requires_project_id(google_verify):
    calls, _ = google_verify
    with pytest.raises(Unauthorized) as exc:
        FirebaseVerifier(None).verify("any-token")
    assert exc.value.message == "Firebase authentication failed"
    assert calls == []


def test_firebase_claims_get_uid(google_verify):
    calls, outcomes = google_verify
    outcomes.append({"user_id": "fb-uid-1", "email": "fiona@example.com"})
    outcomes.append({"sub": "fb-uid-2", "email": "finn@example.com"})
    verifier = FirebaseVerifier("demo-project")

    assert verifier.verify("tok-1")["uid"] == "fb-uid-1"
    assert verifier.verify("tok-2")["uid"] == "fb-uid-2"
    assert calls == [("tok-1", "demo-project"), ("tok-2", "demo-project")]


def test_firebase_expired_token(google_verify):
    _, outcomes = google_verify
    outcomes.append(ValueError("Token expired, 1700000000 < 1700003600"))
    with pytest.raises(Unauthorized) as exc:
        FirebaseVerifier("demo-project").verify("old-token")
    assert exc.value.message == "Firebase token expired"


def test_firebase_rejected_token(google_verify):
    _, outcomes = google_verify
    outcomes.append(ValueError("Token has wrong audience other-project"))
    with pytest.raises(Unauthorized) as exc:
        FirebaseVerifier("demo-project").verify("foreign-token")
    assert exc.value.message == "Invalid Firebase token"


def test_firebase_transport_error_retried_then_rejected(google_verify):
    calls, outcomes = google_verify
    outcomes.extend([TransportError("connection reset")] * 3)
    with pytest.raises(Unauthorized) as exc:
        FirebaseVerifier("demo-project").verify("tok")
    assert exc.value.message == "Firebase authentication failed"
    assert len(calls) == 3


def test_firebase_transport_error_recovers(google_verify):
    calls, outcomes = google_verify
    outcomes.extend([TransportError("timeout"), {"uid": "fb-uid-3"}])
    assert FirebaseVerifier("demo-project").verify("tok")["uid"] == "fb-uid-3"
    assert len(calls) == 2


def test_configured_secrets_are_long_enough_for_hs256(settings):
    from testdrive.config import DEV_JWT_SECRET

    for secret in (settings.jwt_secret, DEV_JWT_SECRET):
        assert len(secret.encode()) >= 32
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            tokens = TokenService(secret)
            tokens.decode(tokens.issue("user-1", Role.JOURNALIST))
        assert not [w for w in caught if "key" in str(w.message).lower()]
