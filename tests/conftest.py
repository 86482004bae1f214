"""
Pytest configuration and fixtures for backend tests.
"""
import itertools
import os
import sys
from typing import Callable, Generator

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["FORCE_LOCAL_STORAGE"] = "true"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["GITHUB_CLIENT_ID"] = "test-client-id"
os.environ["GITHUB_CLIENT_SECRET"] = "test-client-secret"
os.environ["ADMIN_GITHUB_IDS"] = ""
os.environ["ADMIN_USERNAMES"] = ""
os.environ["AUTO_APPROVE_USERS"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from svgshare.core.config import settings
from svgshare.core.database import Base, get_db, get_session_factory
from svgshare.core.security import create_session_token
from svgshare.models import User
from main import app

# One shared in-memory connection so request sessions, background tasks and
# the test session all see the same database
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def build_svg(size: int = 600, width: int = 10, height: int = 20) -> bytes:
    """A valid SVG of exactly `size` bytes."""
    head = f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}"><!--'
    tail = "--></svg>"
    padding = size - len(head) - len(tail)
    assert padding >= 0, "size too small for the SVG skeleton"
    return (head + "x" * padding + tail).encode("ascii")


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def storage_root(tmp_path, monkeypatch):
    """Local blob storage under a per-test temporary directory."""
    root = tmp_path / "storage"
    monkeypatch.setattr(settings, "LOCAL_STORAGE_ROOT", str(root))
    return root


@pytest.fixture(scope="function")
def client(db_session: Session) -> TestClient:
    """Create a test client with overridden database dependencies."""
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory for users in any role/status."""
    counter = itertools.count(1)

    def _make_user(
        username: str | None = None,
        *,
        role: str = "user",
        status: str = "active",
        storage_limit: int | None = None,
    ) -> User:
        n = next(counter)
        user = User(
            github_id=str(1000 + n),
            username=username or f"user{n}",
            avatar_url=f"https://avatars.example.com/{n}.png",
            role=role,
            status=status,
            storage_limit=storage_limit if storage_limit is not None else settings.DEFAULT_STORAGE_LIMIT,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def login(client: TestClient) -> Callable[[User], None]:
    """Attach a session cookie for the given user to the test client."""
    def _login(user: User) -> None:
        client.cookies.set(settings.SESSION_COOKIE_NAME, create_session_token(user.id))

    return _login


@pytest.fixture
def upload_svg(client: TestClient):
    """POST a file to /api/files as the logged in user."""
    def _upload(content: bytes | None = None, filename: str = "a.svg", content_type: str = "image/svg+xml"):
        if content is None:
            content = build_svg()
        return client.post("/api/files", files={"file": (filename, content, content_type)})

    return _upload


@pytest.fixture
def active_user(make_user, login) -> User:
    user = make_user("alice")
    login(user)
    return user


@pytest.fixture
def make_svg() -> Callable[..., bytes]:
    return build_svg
