"""
Shared fixtures: in-memory database, API client, users and auth headers.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from giftbuddy.core.security import create_access_token
from giftbuddy.db.base import Base
from giftbuddy.db.session import build_engine, get_db
from giftbuddy.main import app
from giftbuddy.models import User, UserRole

engine = build_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db, user_id, name, role=UserRole.USER):
    user = User(id=user_id, name=name, role=role, upi_id=f"{user_id}@upi")
    db.add(user)
    db.commit()
    return user


def auth(user_id):
    """Bearer header for a user id."""
    token = create_access_token(data={"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def users(db):
    """One admin, four members and the birthday person."""
    return {
        "admin": make_user(db, "admin", "Asha", UserRole.ADMIN),
        "alice": make_user(db, "alice", "Alice"),
        "bob": make_user(db, "bob", "Bob"),
        "carol": make_user(db, "carol", "Carol"),
        "dave": make_user(db, "dave", "Dave"),
        "erin": make_user(db, "erin", "Erin"),
    }


@pytest.fixture
def create_event(client, users):
    """Create an event as the admin; returns the event id."""
    def _create(**overrides):
        payload = {
            "title": "Erin's birthday",
            "date": "2026-11-20",
            "birthday_person_id": "erin",
            "gifts": [
                {"name": "Watch", "link": "https://example.com/watch", "estimated_cost": 600},
                {"name": "Cake", "estimated_cost": 400},
            ],
            "upi_id": "asha@upi",
            "participant_ids": ["alice", "bob", "carol", "dave"],
        }
        payload.update(overrides)
        response = client.post("/api/events", json=payload, headers=auth("admin"))
        assert response.status_code == 201, response.text
        return response.json()["event_id"]

    return _create
