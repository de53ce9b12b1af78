"""
Pytest configuration and fixtures

Every test gets its own SQLite database and local storage file under
tmp_path, so nothing leaks between tests.
"""
import pytest
from fastapi.testclient import TestClient

from main import app
from perception_survey.api.deps import get_store
from perception_survey.core.config import create_db_engine, create_session_factory
from perception_survey.models import Base
from perception_survey.schemas.activity import Activity
from perception_survey.storage import (
    DatabaseSurveyStore,
    FallbackSurveyStore,
    LocalKeyValueStore,
    LocalSurveyStore,
)


@pytest.fixture
def local_store(tmp_path):
    """Local key-value fallback store in a temporary file."""
    return LocalSurveyStore(LocalKeyValueStore(str(tmp_path / "local_storage.json")))


@pytest.fixture
def db_engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'survey.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_store(db_engine):
    return DatabaseSurveyStore(create_session_factory(db_engine))


@pytest.fixture
def unreachable_db_store(tmp_path):
    """A database store whose every call fails to connect."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'missing-dir' / 'survey.db'}")
    yield DatabaseSurveyStore(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def store(db_store, local_store):
    """The store production uses when the database is reachable."""
    return FallbackSurveyStore(db_store, local_store)


@pytest.fixture
def offline_store(unreachable_db_store, local_store):
    """The fallback store with the remote side down for every call."""
    return FallbackSurveyStore(unreachable_db_store, local_store)


@pytest.fixture
def small_catalog():
    """A(pillar 1), B(pillar 1), C(pillar 2)."""
    return [
        Activity(id=1, pillar=1, pillar_name="Content & Communication", name="A", description="Activity A"),
        Activity(id=2, pillar=1, pillar_name="Content & Communication", name="B", description="Activity B"),
        Activity(id=3, pillar=2, pillar_name="Marketing & Promotion", name="C", description="Activity C"),
    ]


def _client_for(survey_store):
    app.dependency_overrides[get_store] = lambda: survey_store
    return TestClient(app)


@pytest.fixture
def client(store):
    yield _client_for(store)
    app.dependency_overrides.clear()


@pytest.fixture
def offline_client(offline_store):
    yield _client_for(offline_store)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post("/admin/login", json={"password": "admin123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
