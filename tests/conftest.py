import pytest
from fastapi.testclient import TestClient

from prompt_library.config import Settings
from prompt_library.database import Database
from prompt_library.main import create_app
from prompt_library.models import User
from prompt_library.services import ActivityService


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        environment="test",
    )


@pytest.fixture
def database(settings):
    """Create a fresh database for each test."""
    db = Database(settings.database_url)
    db.init_db()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def activity(database):
    return ActivityService(database)


@pytest.fixture
def author(db_session):
    user = User(email="author@example.com", name="Author")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def other_user(db_session):
    user = User(email="other@example.com", name="Other")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the client runs the startup hook, which creates the tables
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Sign up a user through the API and return (token, user)."""
    def _signup(email="alice@example.com", password="secret123", name="Alice"):
        response = client.post(
            "/auth/signup",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["token"], body["user"]

    return _signup


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(signup):
    token, _ = signup()
    return bearer(token)


@pytest.fixture
def other_headers(signup):
    token, _ = signup(email="bob@example.com", name="Bob")
    return bearer(token)


@pytest.fixture
def create_prompt(client, auth_headers):
    """Create a prompt through the API and return its JSON."""
    def _create(headers=None, **fields):
        body = {"title": "Test prompt", "prompt": "Do something useful"}
        body.update(fields)
        response = client.post("/api/prompts", json=body, headers=headers or auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
