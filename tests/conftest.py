"""Shared pytest fixtures for storefront tests."""

import pytest
import requests
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.context import AppContext
from storefront.main import create_app
from storefront.services.image_service import CloudinaryImageStore


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=""):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Stands in for requests.Session; answers by URL path suffix."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def _answer(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        for suffix, answer in self.routes.items():
            if url.endswith(suffix):
                if callable(answer):
                    answer = answer(kwargs)
                if isinstance(answer, Exception):
                    raise answer
                return answer
        raise requests.ConnectionError(f"No route for {url}")

    def get(self, url, **kwargs):
        return self._answer("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._answer("POST", url, kwargs)

    def close(self):
        pass


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET="test-secret",
        BCRYPT_ROUNDS=4,
        CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="secret",
        LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
def image_session():
    return FakeSession({
        "/image/upload": FakeResponse(200, {"secure_url": "https://res.cloudinary.com/demo/product_1.png"}),
    })


@pytest.fixture
def image_store(settings, image_session):
    return CloudinaryImageStore(settings, session=image_session, clock=lambda: 1700000000.5)


@pytest.fixture
def client(settings, image_store):
    app = create_app(settings, image_store=image_store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(settings):
    """A session on a fresh in-memory database, for service-level tests."""
    context = AppContext.create(settings, image_store=CloudinaryImageStore(settings, session=FakeSession()))
    context.init_db()
    session = context.session_factory()
    try:
        yield session
    finally:
        session.close()
        context.close()


@pytest.fixture
def make_product(client):
    def _make(name="Striped Blouse", category="women", new_price=50.0, old_price=80.5):
        response = client.post("/addproduct", json={
            "name": name,
            "image": f"https://img.example.com/{name.replace(' ', '_')}.png",
            "category": category,
            "new_price": new_price,
            "old_price": old_price,
        })
        assert response.status_code == 200
        return response.json()
    return _make


@pytest.fixture
def token(client):
    response = client.post("/signup", json={
        "username": "shopper",
        "email": "shopper@example.com",
        "password": "hunter22",
    })
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth_headers(token):
    return {"auth-token": token}
