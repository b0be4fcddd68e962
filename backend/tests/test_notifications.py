"""
In-app notifications: listing, read acknowledgement and producers.
"""

from datetime import timedelta

from sqlalchemy import text

from fittrack.extensions import db
from fittrack.models import Customer, Notification
from fittrack.services import audit_service
from fittrack.time_utils import utcnow


def add_notification(user, title="Hello", read=False):
    notification = Notification(
        user_id=user.id,
        type="info",
        title=title,
        read_at=utcnow() if read else None,
    )
    db.session.add(notification)
    db.session.commit()
    return notification


class TestListNotifications:

    def test_only_callers_notifications(self, client, tailor, other_tailor, tailor_headers):
        add_notification(tailor, "mine")
        add_notification(tailor, "mine too", read=True)
        add_notification(other_tailor, "not mine")

        resp = client.get("/api/notifications", headers=tailor_headers)
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["unreadCount"] == 1
        assert sorted(n["title"] for n in body["notifications"]) == ["mine", "mine too"]

    def test_unread_listed_first(self, client, tailor, tailor_headers):
        add_notification(tailor, "old unread")
        add_notification(tailor, "read", read=True)

        body = client.get("/api/notifications", headers=tailor_headers).get_json()
        assert body["notifications"][0]["title"] == "old unread"

    def test_missing_table_degrades(self, client, tailor_headers):
        db.session.execute(text("DROP TABLE notifications"))
        db.session.commit()

        resp = client.get("/api/notifications", headers=tailor_headers)
        assert resp.status_code == 200
        assert resp.get_json() == {"notifications": [], "unreadCount": 0}

    def test_mark_read_on_missing_table_is_not_found(self, client, tailor_headers):
        db.session.execute(text("DROP TABLE notifications"))
        db.session.commit()

        resp = client.put("/api/notifications/1/read", headers=tailor_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Notification not found"


class TestMarkRead:

    def test_mark_read_is_idempotent(self, client, tailor, tailor_headers):
        notification = add_notification(tailor)

        first = client.put(f"/api/notifications/{notification.id}/read", headers=tailor_headers)
        assert first.status_code == 200
        read_at = first.get_json()["notification"]["read_at"]
        assert read_at is not None

        second = client.post(f"/api/notifications/{notification.id}/read", headers=tailor_headers)
        assert second.status_code == 200
        assert second.get_json()["message"] == "Marked as read"
        assert second.get_json()["notification"]["read_at"] == read_at

    def test_read_time_is_not_overwritten(self, client, tailor, tailor_headers):
        notification = add_notification(tailor)
        earlier = utcnow() - timedelta(days=2)
        notification.read_at = earlier
        db.session.commit()

        client.patch(f"/api/notifications/{notification.id}/read", headers=tailor_headers)
        assert db.session.get(Notification, notification.id).read_at == earlier

    def test_other_users_notification_is_not_found(self, client, tailor, manager_headers):
        notification = add_notification(tailor)
        resp = client.put(f"/api/notifications/{notification.id}/read", headers=manager_headers)
        assert resp.status_code == 404
        assert db.session.get(Notification, notification.id).read_at is None

    def test_read_all(self, client, tailor, other_tailor, tailor_headers):
        add_notification(tailor)
        add_notification(tailor)
        theirs = add_notification(other_tailor)

        resp = client.post("/api/notifications/read-all", headers=tailor_headers)
        assert resp.status_code == 200
        assert resp.get_json()["updated"] == 2

        body = client.get("/api/notifications", headers=tailor_headers).get_json()
        assert body["unreadCount"] == 0
        assert db.session.get(Notification, theirs.id).read_at is None


class TestProducers:

    def test_task_assignment_notifies_assignee(self, client, tailor, manager_headers, tailor_headers):
        resp = client.post(
            "/api/tasks",
            json={"assignee_id": tailor.id, "task_type": "remeasure", "resource_type": "customer"},
            headers=manager_headers,
        )
        assert resp.status_code == 201

        body = client.get("/api/notifications", headers=tailor_headers).get_json()
        assert body["unreadCount"] == 1
        assert body["notifications"][0]["type"] == "task_assigned"
        assert body["notifications"][0]["resource_id"] == resp.get_json()["id"]

    def test_fitting_scheduled_by_manager_notifies_tailor(
        self, client, tailor, manager_headers, tailor_headers, make_customer
    ):
        customer = make_customer()
        resp = client.post(
            "/api/fittings",
            json={
                "customer_id": customer.id,
                "tailor_id": tailor.id,
                "scheduled_at": (utcnow() + timedelta(days=2)).isoformat(),
            },
            headers=manager_headers,
        )
        assert resp.status_code == 201

        body = client.get("/api/notifications", headers=tailor_headers).get_json()
        assert [n["type"] for n in body["notifications"]] == ["fitting_scheduled"]

    def test_own_fitting_does_not_notify(self, client, tailor, tailor_headers, make_customer):
        customer = make_customer()
        client.post(
            "/api/fittings",
            json={"customer_id": customer.id, "scheduled_at": (utcnow() + timedelta(days=2)).isoformat()},
            headers=tailor_headers,
        )
        assert client.get("/api/notifications", headers=tailor_headers).get_json()["unreadCount"] == 0

    def test_failed_notification_does_not_fail_request(self, client, tailor, manager_headers, make_customer):
        db.session.execute(text("DROP TABLE notifications"))
        db.session.commit()
        customer = make_customer()

        resp = client.post(
            "/api/fittings",
            json={
                "customer_id": customer.id,
                "tailor_id": tailor.id,
                "scheduled_at": (utcnow() + timedelta(days=2)).isoformat(),
            },
            headers=manager_headers,
        )
        assert resp.status_code == 201


class TestDispatch:

    def test_failed_effect_rolls_back_only_its_own_writes(self, app, tailor):
        customer = Customer(name="Pending Walk-in")
        db.session.add(customer)
        db.session.flush()

        def failing_effect():
            db.session.add(Notification(user_id=tailor.id, type="info", title="Half-written"))
            db.session.flush()
            raise RuntimeError("downstream unavailable")

        assert audit_service.dispatch(failing_effect, "notify info") is False
        db.session.commit()

        assert db.session.query(Customer).filter_by(name="Pending Walk-in").count() == 1
        assert db.session.query(Notification).count() == 0

    def test_successful_effect_is_committed(self, app, tailor):
        assert audit_service.dispatch(
            lambda: db.session.add(Notification(user_id=tailor.id, type="info", title="Saved")),
            "notify info",
        ) is True
        db.session.rollback()
        assert db.session.query(Notification).filter_by(title="Saved").count() == 1
