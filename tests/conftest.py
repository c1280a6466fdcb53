"""
Shared fixtures for the personal blog API tests.

Configuration is read from the environment when the application modules are
imported, so it is set here before anything from personal_blog is loaded.
"""
import os
import tempfile

import pytest

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("PATH_DATABASE", tempfile.mkdtemp(prefix="personal_blog_test_"))
os.environ.setdefault("NAME_DB", "test.db")
os.environ.setdefault("PATH_LOG_FILE", os.path.join(os.environ["PATH_DATABASE"], "test.log"))

from fastapi.testclient import TestClient  # noqa: E402

from personal_blog.database import engine  # noqa: E402
from personal_blog.main import app  # noqa: E402
from personal_blog.models import Base  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate all tables around every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """HTTP client bound to the application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_and_login(client):
    """Factory registering a user and returning an Authorization header for them."""
    def _register_and_login(username, email, password="pw123"):
        response = client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _register_and_login


@pytest.fixture
def alice(register_and_login):
    """Authorization header for a registered user named alice."""
    return register_and_login("alice", "a@x.com")


@pytest.fixture
def bob(register_and_login):
    """Authorization header for a registered user named bob."""
    return register_and_login("bob", "b@x.com")


@pytest.fixture
def make_blog(client, alice):
    """Factory creating a blog, by alice unless other headers are given."""
    def _make_blog(title="Hello", content="World content", category=None, headers=None):
        body = {"title": title, "content": content}
        if category is not None:
            body["category"] = category
        response = client.post("/api/blogs/create", json=body, headers=headers or alice)
        assert response.status_code == 201
        return response.json()
    return _make_blog
