"""
Tests for payment marking and contribution endpoints.
"""
from conftest import auth, make_user
from giftbuddy.models import Contribution, UserRole


def contribution_of(client, event_id, user_id):
    response = client.get(f"/api/events/{event_id}", headers=auth("admin"))
    for contribution in response.json()["contributions"]:
        if contribution["user_id"] == user_id:
            return contribution
    return None


def test_mark_paid(client, create_event):
    event_id = create_event()
    response = client.post(f"/api/events/{event_id}/pay", headers=auth("alice"))
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["user_id"] == "alice"
    assert data[0]["paid"] is True
    assert data[0]["payment_time"] is not None


def test_mark_paid_twice_keeps_payment_time(client, create_event):
    """A second mark-paid changes nothing."""
    event_id = create_event()
    first = client.post(f"/api/events/{event_id}/pay", headers=auth("alice")).json()
    second = client.post(f"/api/events/{event_id}/pay", headers=auth("alice")).json()
    assert second[0]["paid"] is True
    assert second[0]["payment_time"] == first[0]["payment_time"]


def test_mark_paid_on_completed_event_rejected(client, create_event, db):
    """Contributions of a completed event are frozen."""
    event_id = create_event()
    client.post(f"/api/events/{event_id}/complete", headers=auth("admin"))

    response = client.post(f"/api/events/{event_id}/pay", headers=auth("alice"))
    assert response.status_code == 400
    assert response.json()["code"] == "invalid"

    contribution = db.query(Contribution).filter(
        Contribution.event_id == event_id, Contribution.user_id == "alice"
    ).first()
    db.refresh(contribution)
    assert contribution.paid is False


def test_admin_patch_on_cancelled_event_rejected(client, create_event):
    event_id = create_event()
    contribution = contribution_of(client, event_id, "bob")
    client.post(f"/api/events/{event_id}/cancel", headers=auth("admin"))

    response = client.patch(
        f"/api/contributions/{contribution['id']}", json={"paid": True}, headers=auth("admin")
    )
    assert response.status_code == 400


def test_admin_marks_paid_for_other_user(client, create_event):
    event_id = create_event()
    response = client.post(
        f"/api/events/{event_id}/pay", json={"user_id": "bob"}, headers=auth("admin")
    )
    assert response.status_code == 200
    assert response.json()[0]["user_id"] == "bob"
    assert contribution_of(client, event_id, "bob")["paid"] is True


def test_member_cannot_mark_paid_for_other_user(client, create_event):
    event_id = create_event()
    response = client.post(
        f"/api/events/{event_id}/pay", json={"user_id": "bob"}, headers=auth("alice")
    )
    assert response.status_code == 403
    assert contribution_of(client, event_id, "bob")["paid"] is False


def test_mark_paid_without_contribution(client, create_event):
    """The birthday person owes nothing."""
    event_id = create_event()
    response = client.post(f"/api/events/{event_id}/pay", headers=auth("erin"))
    assert response.status_code == 404
    assert response.json()["error"] == "No contributions found for this event"


def test_mark_paid_unknown_event(client, users):
    response = client.post("/api/events/999/pay", headers=auth("alice"))
    assert response.status_code == 404


def test_creator_corrects_amount(client, create_event):
    """Only the corrected share changes."""
    event_id = create_event()
    contribution = contribution_of(client, event_id, "alice")

    response = client.put(
        f"/api/contributions/{contribution['id']}/amount",
        json={"split_amount": 20000},
        headers=auth("admin")
    )
    assert response.status_code == 200
    assert response.json()["split_amount"] == 20000
    assert contribution_of(client, event_id, "bob")["split_amount"] == 25000


def test_other_admin_cannot_correct_amount(client, create_event, db):
    make_user(db, "zoe", "Zoe", UserRole.ADMIN)
    event_id = create_event()
    contribution = contribution_of(client, event_id, "alice")

    response = client.put(
        f"/api/contributions/{contribution['id']}/amount",
        json={"split_amount": 20000},
        headers=auth("zoe")
    )
    assert response.status_code == 403


def test_correct_amount_missing_contribution(client, users):
    response = client.put(
        "/api/contributions/999/amount", json={"split_amount": 100}, headers=auth("admin")
    )
    assert response.status_code == 404


def test_correct_amount_rejects_negative(client, create_event):
    event_id = create_event()
    contribution = contribution_of(client, event_id, "alice")
    response = client.put(
        f"/api/contributions/{contribution['id']}/amount",
        json={"split_amount": -1},
        headers=auth("admin")
    )
    assert response.status_code == 422


def test_admin_toggles_paid(client, create_event):
    """Paid stamps a payment time; unpaid clears it."""
    event_id = create_event()
    contribution = contribution_of(client, event_id, "carol")
    url = f"/api/contributions/{contribution['id']}"

    response = client.patch(url, json={"paid": True}, headers=auth("admin"))
    assert response.status_code == 200
    assert response.json()["paid"] is True
    assert response.json()["payment_time"] is not None

    response = client.patch(url, json={"paid": False}, headers=auth("admin"))
    assert response.json()["paid"] is False
    assert response.json()["payment_time"] is None


def test_admin_patch_rejects_null(client, create_event):
    event_id = create_event()
    contribution = contribution_of(client, event_id, "carol")
    response = client.patch(
        f"/api/contributions/{contribution['id']}", json={"paid": None}, headers=auth("admin")
    )
    assert response.status_code == 400


def test_member_cannot_patch(client, create_event):
    event_id = create_event()
    contribution = contribution_of(client, event_id, "alice")
    response = client.patch(
        f"/api/contributions/{contribution['id']}", json={"paid": True}, headers=auth("alice")
    )
    assert response.status_code == 403


def test_delete_contribution(client, create_event, db):
    event_id = create_event()
    contribution = contribution_of(client, event_id, "dave")

    response = client.delete(f"/api/contributions/{contribution['id']}", headers=auth("admin"))
    assert response.status_code == 200
    assert db.query(Contribution).filter(Contribution.id == contribution["id"]).count() == 0
    assert contribution_of(client, event_id, "dave") is None


def test_admin_contribution_list(client, create_event):
    event_id = create_event()
    response = client.get("/api/contributions", headers=auth("admin"))
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 4
    row = next(r for r in rows if r["user_id"] == "alice")
    assert row["user_name"] == "Alice"
    assert row["event_id"] == event_id
    assert row["event_title"] == "Erin's birthday"
    assert row["event_date"] == "2026-11-20"
    assert row["gift_names"] == "Watch, Cake"


def test_member_cannot_list_all_contributions(client, create_event):
    create_event()
    response = client.get("/api/contributions", headers=auth("alice"))
    assert response.status_code == 403


def test_my_contributions(client, create_event):
    first = create_event()
    create_event(participant_ids=["bob"])

    response = client.get("/api/contributions/mine", headers=auth("alice"))
    assert response.status_code == 200
    assert [c["event_id"] for c in response.json()] == [first]

    response = client.get("/api/contributions/mine?user_id=bob", headers=auth("alice"))
    assert response.status_code == 403

    response = client.get("/api/contributions/mine?user_id=bob", headers=auth("admin"))
    assert len(response.json()) == 2


def test_payment_status(client, create_event):
    event_id = create_event()

    response = client.get(f"/api/events/{event_id}/payment-status", headers=auth("alice"))
    assert response.status_code == 200
    data = response.json()
    assert data["total_amount"] == 25000
    assert data["pending_amount"] == 25000
    assert data["paid_status"] is False
    assert data["payment_time"] is None

    client.post(f"/api/events/{event_id}/pay", headers=auth("alice"))
    data = client.get(f"/api/events/{event_id}/payment-status", headers=auth("alice")).json()
    assert data["paid_amount"] == 25000
    assert data["pending_amount"] == 0
    assert data["paid_status"] is True
    assert data["payment_time"] is not None


def test_payment_status_of_other_user(client, create_event):
    event_id = create_event()
    response = client.get(
        f"/api/events/{event_id}/payment-status?user_id=bob", headers=auth("alice")
    )
    assert response.status_code == 403

    response = client.get(
        f"/api/events/{event_id}/payment-status?user_id=bob", headers=auth("admin")
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == "bob"


def test_amount_edits_reject_huge_values(client, create_event):
    """Shares larger than the money columns hold are rejected."""
    event_id = create_event()
    contribution = contribution_of(client, event_id, "alice")

    response = client.put(
        f"/api/contributions/{contribution['id']}/amount",
        json={"split_amount": 10 ** 12},
        headers=auth("admin")
    )
    assert response.status_code == 422

    response = client.patch(
        f"/api/contributions/{contribution['id']}",
        json={"split_amount": 10 ** 12},
        headers=auth("admin")
    )
    assert response.status_code == 422
    assert contribution_of(client, event_id, "alice")["split_amount"] == 25000
