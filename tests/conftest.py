import pytest
from fastapi.testclient import TestClient

from todo_api.main import create_app
from todo_api.settings import Settings

TEST_SECRET = "test-secret"


def make_settings(**overrides) -> Settings:
    values = {"persistence_backend": "memory", "jwt_secret": TEST_SECRET}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app():
    return create_app(make_settings())


@pytest.fixture
def client(app):
    return TestClient(app)


def register(client, name="Ann", email="ann@x.com", password="secret1"):
    res = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert res.status_code == 201, res.text
    return res.json()["token"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token(client):
    return register(client)


@pytest.fixture
def other_token(client):
    return register(client, name="Bob", email="bob@x.com", password="secret2")
