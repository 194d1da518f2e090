# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from testdrive import crud
from testdrive.config import Settings
from testdrive.db import init_db
from testdrive.errors import Unauthorized
from testdrive.main import create_app
from testdrive.models import Role
from testdrive.security import hash_password


class FakeFirebase:
    """Stands in for the Google-backed verifier; tokens map to canned claims."""

    def __init__(self):
        self.tokens = {}

    def add(self, token, uid, email, name=None):
        self.tokens[token] = {"uid": uid, "email": email, "name": name}

    def verify(self, token):
        if token == "expired-token":
            raise Unauthorized("Firebase token expired")
        if token not in self.tokens:
            raise Unauthorized("Invalid Firebase token")
        return dict(self.tokens[token])


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret-0123456789abcdef0123456789",
        upload_dir=str(tmp_path / "uploads"),
        app_env="test",
        log_level="WARNING",
    )


@pytest.fixture()
def app(settings):
    app = create_app(settings)
    init_db(app.state.engine)
    app.state.firebase = FakeFirebase()
    yield app
    app.state.engine.dispose()


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


def register(client, name, email, role, password="secret123"):
    resp = client.post("/api/users/register", json={
        "name": name, "email": email, "password": password, "role": role,
    })
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {"id": body["id"], "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"}}


@pytest.fixture()
def owner(client):
    return register(client, "Olivia Owner", "olivia@example.com", "Car Owner")


@pytest.fixture()
def other_owner(client):
    return register(client, "Oscar Owner", "oscar@example.com", "Car Owner")


@pytest.fixture()
def journalist(client):
    return register(client, "Jane Journalist", "jane@example.com", "Journalist")


@pytest.fixture()
def other_journalist(client):
    return register(client, "Jack Journalist", "jack@example.com", "Journalist")


@pytest.fixture()
def admin(app, db):
    user = crud.create_user(db, {
        "name": "Admin", "email": "admin@example.com",
        "password_hash": hash_password("adminpass"), "role": Role.ADMIN,
    })
    token = app.state.tokens.issue(user.id, user.role)
    return {"id": user.id, "token": token, "headers": {"Authorization": f"Bearer {token}"}}


def car_payload(**overrides):
    data = {
        "make": "Toyota",
        "model": "Supra",
        "year": 2021,
        "color": "Red",
        "price": 150,
        "mileage": 12000,
        "transmission": "Manual",
        "fuelType": "Petrol",
        "description": "Well kept sports coupe",
        "location": "Mumbai",
    }
    data.update(overrides)
    return data


@pytest.fixture()
def make_car(client):
    def _make(owner, **overrides):
        resp = client.post("/api/cars", json=car_payload(**overrides), headers=owner["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make


@pytest.fixture()
def car(owner, make_car):
    return make_car(owner)
