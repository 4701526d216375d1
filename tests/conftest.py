import os
import tempfile

# Configure the server before any launcher module reads its settings
os.environ["LAUNCHER_DATA_DIR"] = tempfile.mkdtemp(prefix="mlx-launcher-tests-")
os.environ["LAUNCHER_SEED_CATALOG"] = "false"
os.environ["LAUNCHER_ADMIN_USERNAMES"] = "admin"
os.environ["LAUNCHER_PUBLIC_URL"] = "http://testserver"
os.environ["JWT_SECRET_KEY"] = "test-secret"

from types import SimpleNamespace

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from launcher_server.core import config
from launcher_server.core.repository import SqlRepository
from launcher_server.database import get_db, init_db
from launcher_server.main import create_app
from launcher_app.services import api as client_api


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{(tmp_path / 'launcher.db').as_posix()}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def repo(session_factory):
    db = session_factory()
    yield SqlRepository(db)
    db.close()


@pytest.fixture
def storage(tmp_path, monkeypatch):
    path = tmp_path / "games-storage"
    path.mkdir()
    monkeypatch.setattr(config, "GAMES_STORAGE", path)
    monkeypatch.setattr(config, "PUBLIC_URL", "http://testserver")
    return path


@pytest.fixture
def app(session_factory, storage):
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def register(client, username, password="secret-pass", email=None):
    return client.post("/api/auth/register", json={
        "username": username,
        "email": email or f"{username}@example.com",
        "password": password,
    })


def login(client, username, password="secret-pass"):
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    register(client, "admin")
    return auth_headers(login(client, "admin")["token"])


@pytest.fixture
def user_headers(client):
    register(client, "player")
    return auth_headers(login(client, "player")["token"])


@pytest.fixture
def add_game(client, admin_headers):
    def _add(**fields):
        payload = {
            "name": "X",
            "emoji": "🎮",
            "description": "test game",
            "downloadUrl": "http://h/x.zip",
            "executable": "x.exe",
        }
        payload.update(fields)
        response = client.post("/api/admin/add-game", json=payload, headers=admin_headers)
        assert response.status_code == 200, response.text
        return response.json()["game"]
    return _add


@pytest.fixture
def backend(client, monkeypatch):
    """
    Routes the desktop client's requests calls into the in-process test app.
    """
    fake_requests = SimpleNamespace(
        get=client.get,
        post=client.post,
        RequestException=requests.RequestException,
    )
    monkeypatch.setattr(client_api, "requests", fake_requests)
    return client
