import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from restify.api.main import create_app
from restify.config import refresh_settings_cache
from restify.db import database as db_module
from restify.db.database import build_engine, init_db
from restify.registry import RepositoryRegistry
from restify.repositories import ActionLogRepository
from tests.fixtures import blog  # noqa: F401 - registers blog tables on the shared Base
from tests.fixtures.blog import CommentRepository, PostRepository, UserRepository

_RESTIFY_ENV = (
    "RESTIFY_BASE",
    "RESTIFY_LOGS_REPOSITORY",
    "RESTIFY_REPOSITORIES_PATH",
    "RESTIFY_PER_PAGE",
    "DATABASE_URL",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Clear env + cached settings for each test to avoid cross-contamination."""
    for name in _RESTIFY_ENV:
        monkeypatch.delenv(name, raising=False)
    refresh_settings_cache()
    yield
    refresh_settings_cache()


@pytest.fixture(autouse=True)
def _clear_mocks():
    yield
    for repository in (PostRepository, UserRepository, CommentRepository, ActionLogRepository):
        repository.clear_mock()


@pytest.fixture
def engine():
    eng = build_engine("sqlite+pysqlite:///:memory:")
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def SessionLocal(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(SessionLocal):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def registry():
    return RepositoryRegistry([PostRepository, UserRepository, CommentRepository, ActionLogRepository])


@pytest.fixture
def make_app(SessionLocal):
    """Build an app around any registry, sharing the test database."""

    def _override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    def _make(registry):
        application = create_app(registry)
        application.dependency_overrides[db_module.get_db] = _override_get_db
        return application

    return _make


@pytest.fixture
def app(registry, make_app):
    return make_app(registry)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"x-auth-request-email": "root@admin.test", "x-auth-request-user": "Root"}
