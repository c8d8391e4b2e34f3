"""
Shared fixtures: in-memory database, test client and signed-up users.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app import models  # noqa: F401  registers tables on Base.metadata

DEFAULT_PASSWORD = "testpassword123"


@pytest.fixture
def db_session():
    """Fresh in-memory schema per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """Test client whose requests use the test session."""
    def override_get_db():
        yield db_session
    
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Factory: sign up and log in a user, returning its id and auth headers."""
    def _make_user(email: str, name: str = None, password: str = DEFAULT_PASSWORD):
        response = client.post(
            "/api/auth/signup",
            json={"email": email, "name": name or email.split("@")[0], "password": password}
        )
        assert response.status_code == 201, response.text
        user_id = response.json()["id"]
        
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        token = response.json()["access_token"]
        
        return {"id": user_id, "headers": {"Authorization": f"Bearer {token}"}}
    
    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", "Alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", "Bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol@example.com", "Carol")


@pytest.fixture
def bill(client, alice):
    """A bill created by alice (who joins it as a participant)."""
    response = client.post(
        "/api/bills",
        json={"title": "Team lunch", "currency_code": "vnd"},
        headers=alice["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def add_participant(client):
    """Helper: add a user to a bill via the API."""
    def _add_participant(headers, bill_id, user_id, share_ratio="1"):
        response = client.post(
            "/api/bill-users",
            json={"bill_id": bill_id, "user_id": user_id, "share_ratio": share_ratio},
            headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()
    
    return _add_participant


@pytest.fixture
def add_item(client):
    """Helper: add an item to a bill via the API."""
    def _add_item(headers, bill_id, name, unit_price, quantity="1", **extra):
        payload = {"bill_id": bill_id, "name": name, "unit_price": unit_price, "quantity": quantity}
        payload.update(extra)
        response = client.post("/api/bill-items", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()
    
    return _add_item
