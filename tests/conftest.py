"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("CACHE_BACKEND", "memory")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from recipe_share.api.dependencies import get_cache  # noqa: E402
from recipe_share.database import Base, get_db  # noqa: E402
from recipe_share.main import app  # noqa: E402
from recipe_share.models.user import User  # noqa: E402
from recipe_share.services.auth import create_access_token  # noqa: E402
from recipe_share.services.cache import InMemoryCacheBackend, RecipeCache  # noqa: E402


class AuthHeaders(dict):
    """Dict subclass that also stores user_id."""

    def __init__(self, *args, user_id: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/recipe_share", "/recipe_share_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def cache():
    """In-memory recipe cache, fresh for each test."""
    return RecipeCache(InMemoryCacheBackend(default_ttl=3600), page_ttl=120)


@pytest.fixture(scope="function")
def client(db, cache):
    """Create a test client with database and cache overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_auth_headers(db, email: str, name: str) -> AuthHeaders:
    """Create a user and return bearer headers for them."""
    user = User(email=email, name=name)
    db.add(user)
    db.commit()
    db.refresh(user)
    token = create_access_token(user.id, user.email)
    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user.id)


@pytest.fixture
def auth_headers(db):
    """Auth headers for the recipe owner in most tests."""
    return make_auth_headers(db, "test@example.com", "Test User")


@pytest.fixture
def other_auth_headers(db):
    """Auth headers for a second, unrelated user."""
    return make_auth_headers(db, "other@example.com", "Other User")


@pytest.fixture
def create_recipe(client, db):
    """Create a recipe through the API and return its id."""
    from recipe_share.models.recipe import Recipe

    def _create(headers, name: str = "Paella", **fields) -> int:
        payload = {"name": name, **fields}
        response = client.post("/api/v1/recipes", headers=headers, json=payload)
        assert response.status_code == 201, response.text
        return db.query(Recipe.id).filter(Recipe.name == name).scalar()

    return _create
