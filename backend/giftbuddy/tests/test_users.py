"""
Tests for authentication and user endpoints.
"""
import pytest
from datetime import timedelta
from conftest import auth
from giftbuddy.core.exceptions import NotFoundError
from giftbuddy.core.security import create_access_token
from giftbuddy.models import Contribution, Event, User, UserRole
from giftbuddy.services.capability import resolve_caller


def test_upsert_profile_creates_user(client, db):
    """Test the signup hook creates a plain user row."""
    response = client.put(
        "/api/users/me",
        json={"name": "Newbie", "upi_id": "newbie@upi", "role": "admin"},
        headers=auth("newbie")
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "newbie"
    assert data["name"] == "Newbie"
    assert data["role"] == "user"

    user = db.query(User).filter(User.id == "newbie").first()
    assert user.role == UserRole.USER


def test_upsert_profile_keeps_role(client, users):
    """Test refreshing an admin profile does not demote it."""
    response = client.put("/api/users/me", json={"phone": "12345"}, headers=auth("admin"))
    assert response.status_code == 200
    assert response.json()["role"] == "admin"
    assert response.json()["name"] == "Asha"
    assert response.json()["phone"] == "12345"


def test_get_me(client, users):
    response = client.get("/api/users/me", headers=auth("alice"))
    assert response.status_code == 200
    assert response.json()["name"] == "Alice"
    assert response.json()["upi_id"] == "alice@upi"


def test_missing_token(client, users):
    """Test requests without a bearer token are rejected."""
    response = client.get("/api/users/me")
    assert response.status_code == 401


def test_invalid_token(client, users):
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_expired_token(client, users):
    token = create_access_token(data={"sub": "alice"}, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_unknown_user(client, users):
    """Test a valid token for a user without a profile row."""
    response = client.get("/api/users/me", headers=auth("ghost"))
    assert response.status_code == 401
    assert response.json()["detail"] == "User profile not found"


def test_token_role_claim_ignored(client, users):
    """Test a role claim in the token does not grant admin rights."""
    token = create_access_token(data={"sub": "alice", "role": "admin"})
    response = client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_admin_creates_user(client, users):
    response = client.post(
        "/api/users",
        json={"name": "Frank", "birthday": "1990-05-01", "upi_id": "frank@upi"},
        headers=auth("admin")
    )
    assert response.status_code == 201
    data = response.json()
    assert data["id"].startswith("user_")
    assert data["role"] == "user"
    assert data["birthday"] == "1990-05-01"


def test_member_cannot_create_user(client, users):
    response = client.post("/api/users", json={"name": "Frank"}, headers=auth("alice"))
    assert response.status_code == 403


def test_list_users(client, users):
    response = client.get("/api/users", headers=auth("admin"))
    assert response.status_code == 200
    assert len(response.json()) == 6

    response = client.get("/api/users", headers=auth("alice"))
    assert response.status_code == 403


def test_admin_updates_role(client, users):
    response = client.patch("/api/users/bob", json={"role": "admin"}, headers=auth("admin"))
    assert response.status_code == 200
    assert response.json()["role"] == "admin"

    response = client.get("/api/users", headers=auth("bob"))
    assert response.status_code == 200


def test_get_unknown_user(client, users):
    response = client.get("/api/users/nobody", headers=auth("admin"))
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_delete_user_removes_contributions(client, create_event, db):
    """Test deleting a user keeps the event but drops their shares."""
    event_id = create_event(participant_ids=["alice", "bob"])

    response = client.delete("/api/users/erin", headers=auth("admin"))
    assert response.status_code == 200
    response = client.delete("/api/users/alice", headers=auth("admin"))
    assert response.status_code == 200

    assert db.query(User).filter(User.id == "alice").count() == 0
    assert db.query(Contribution).filter(Contribution.user_id == "alice").count() == 0
    assert db.query(Contribution).filter(Contribution.event_id == event_id).count() == 1

    event = db.query(Event).filter(Event.id == event_id).first()
    db.refresh(event)
    assert event.birthday_person_id is None
    assert event.created_by == "admin"


def test_resolve_caller(users, db):
    """Test the caller's role comes from the users table."""
    assert resolve_caller("admin", db).is_admin()
    assert not resolve_caller("alice", db).is_admin()
    with pytest.raises(NotFoundError):
        resolve_caller("ghost", db)
