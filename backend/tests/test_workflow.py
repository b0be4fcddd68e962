"""
Tasks, reminders, measurement profiles, garment feedback and templates.
"""

from datetime import datetime, timedelta

from sqlalchemy import text

from fittrack.extensions import db
from fittrack.models import Reminder
from fittrack.time_utils import utcnow


# =============================================================================
# TASKS
# =============================================================================


def assign(client, headers, assignee, **extra):
    payload = {"assignee_id": assignee.id, "task_type": "follow_up", "resource_type": "customer"}
    payload.update(extra)
    return client.post("/api/tasks", json=payload, headers=headers)


class TestTasks:

    def test_manager_assigns(self, client, tailor, manager_headers):
        resp = assign(client, manager_headers, tailor, due_at="2026-12-01T09:00:00Z")
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == "pending"
        assert body["assignee_name"] == tailor.name
        assert body["due_at"] == "2026-12-01T09:00:00Z"

    def test_assignee_must_be_staff(self, client, customer_user, manager_headers):
        assert assign(client, manager_headers, customer_user).status_code == 400

    def test_resource_type_checked(self, client, tailor, manager_headers):
        assert assign(client, manager_headers, tailor, resource_type="invoice").status_code == 400

    def test_task_type_must_be_text(self, client, tailor, manager_headers):
        assert assign(client, manager_headers, tailor, task_type=3).status_code == 400

    def test_tailor_cannot_assign(self, client, tailor, tailor_headers):
        assert assign(client, tailor_headers, tailor).status_code == 403

    def test_tailor_sees_and_completes_own_tasks(
        self, client, tailor, other_tailor, manager_headers, tailor_headers
    ):
        mine = assign(client, manager_headers, tailor).get_json()
        theirs = assign(client, manager_headers, other_tailor).get_json()

        body = client.get("/api/tasks", headers=tailor_headers).get_json()
        assert [t["id"] for t in body["tasks"]] == [mine["id"]]

        resp = client.patch(f"/api/tasks/{mine['id']}", json={"status": "completed"}, headers=tailor_headers)
        assert resp.status_code == 200
        assert resp.get_json()["completed_at"] is not None

        resp = client.patch(f"/api/tasks/{theirs['id']}", json={"status": "completed"}, headers=tailor_headers)
        assert resp.status_code == 403

    def test_reopening_clears_completed_at(self, client, tailor, manager_headers):
        task = assign(client, manager_headers, tailor).get_json()
        client.patch(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=manager_headers)
        resp = client.patch(f"/api/tasks/{task['id']}", json={"status": "in_progress"}, headers=manager_headers)
        assert resp.get_json()["completed_at"] is None

    def test_update_requires_valid_status(self, client, tailor, manager_headers):
        task = assign(client, manager_headers, tailor).get_json()
        assert client.patch(f"/api/tasks/{task['id']}", json={}, headers=manager_headers).status_code == 400
        resp = client.patch(f"/api/tasks/{task['id']}", json={"status": "done"}, headers=manager_headers)
        assert resp.status_code == 400

    def test_delete(self, client, tailor, manager_headers):
        task = assign(client, manager_headers, tailor).get_json()
        assert client.delete(f"/api/tasks/{task['id']}", headers=manager_headers).status_code == 200
        assert client.get(f"/api/tasks/{task['id']}", headers=manager_headers).status_code == 404

    def test_missing_table(self, client, tailor, manager_headers):
        db.session.execute(text("DROP TABLE task_assignments"))
        db.session.commit()

        assert client.get("/api/tasks", headers=manager_headers).get_json() == {"tasks": []}
        assert assign(client, manager_headers, tailor).status_code == 501
        assert client.get("/api/tasks/1", headers=manager_headers).status_code == 404
        resp = client.patch("/api/tasks/1", json={"status": "completed"}, headers=manager_headers)
        assert resp.status_code == 501


# =============================================================================
# REMINDERS
# =============================================================================


class TestReminders:

    def test_create_and_list(self, client, manager_headers, make_customer):
        customer = make_customer()
        resp = client.post(
            "/api/reminders",
            json={"customer_id": customer.id, "due_at": "2026-11-01", "channel": "sms"},
            headers=manager_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["status"] == "pending"

        body = client.get(f"/api/reminders?customer_id={customer.id}", headers=manager_headers).get_json()
        assert len(body["reminders"]) == 1
        assert body["reminders"][0]["channel"] == "sms"

    def test_due_at_required(self, client, manager_headers, make_customer):
        customer = make_customer()
        resp = client.post("/api/reminders", json={"customer_id": customer.id}, headers=manager_headers)
        assert resp.status_code == 400

    def test_unknown_channel(self, client, manager_headers, make_customer):
        customer = make_customer()
        resp = client.post(
            "/api/reminders",
            json={"customer_id": customer.id, "due_at": "2026-11-01", "channel": "pigeon"},
            headers=manager_headers,
        )
        assert resp.status_code == 400

    def test_mark_sent(self, client, manager_headers, make_customer):
        customer = make_customer()
        reminder = client.post(
            "/api/reminders",
            json={"customer_id": customer.id, "due_at": "2026-11-01"},
            headers=manager_headers,
        ).get_json()

        resp = client.put(f"/api/reminders/{reminder['id']}", json={"status": "sent"}, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["sent_at"] is not None

    def test_snooze_defaults_to_a_week(self, client, manager_headers, make_customer):
        customer = make_customer()
        reminder = client.post(
            "/api/reminders",
            json={"customer_id": customer.id, "due_at": "2026-11-01"},
            headers=manager_headers,
        ).get_json()

        client.patch(f"/api/reminders/{reminder['id']}", json={"status": "snoozed"}, headers=manager_headers)
        due_at = db.session.get(Reminder, reminder["id"]).due_at
        assert abs(due_at - (utcnow() + timedelta(days=7))) < timedelta(minutes=1)

    def test_snooze_until(self, client, manager_headers, make_customer):
        customer = make_customer()
        reminder = client.post(
            "/api/reminders",
            json={"customer_id": customer.id, "due_at": "2026-11-01"},
            headers=manager_headers,
        ).get_json()

        client.patch(
            f"/api/reminders/{reminder['id']}",
            json={"status": "snoozed", "snooze_until": "2026-12-24T10:00:00Z"},
            headers=manager_headers,
        )
        assert db.session.get(Reminder, reminder["id"]).due_at == datetime(2026, 12, 24, 10, 0)

    def test_tailor_sees_only_reminders_they_created(self, client, tailor, tailor_headers, make_customer):
        customer = make_customer()
        db.session.add(Reminder(customer_id=customer.id, due_at=utcnow(), created_by=tailor.id))
        db.session.add(Reminder(customer_id=customer.id, due_at=utcnow(), created_by=None))
        db.session.commit()

        body = client.get("/api/reminders", headers=tailor_headers).get_json()
        assert len(body["reminders"]) == 1
        assert body["reminders"][0]["created_by"] == tailor.id

    def test_tailor_cannot_create(self, client, tailor_headers, make_customer):
        customer = make_customer()
        resp = client.post(
            "/api/reminders",
            json={"customer_id": customer.id, "due_at": "2026-11-01"},
            headers=tailor_headers,
        )
        assert resp.status_code == 403


# =============================================================================
# PROFILES AND FEEDBACK
# =============================================================================


class TestProfilesAndFeedback:

    def test_create_profile(self, client, tailor_headers, make_customer):
        customer = make_customer()
        resp = client.post(
            "/api/measurement-profiles",
            json={"customer_id": customer.id, "name": "Wedding 2026", "profile_type": "wedding"},
            headers=tailor_headers,
        )
        assert resp.status_code == 201

        body = client.get(f"/api/measurement-profiles?customer_id={customer.id}", headers=tailor_headers).get_json()
        assert [p["name"] for p in body["profiles"]] == ["Wedding 2026"]

    def test_profile_type_checked(self, client, tailor_headers, make_customer):
        customer = make_customer()
        resp = client.post(
            "/api/measurement-profiles",
            json={"customer_id": customer.id, "name": "X", "profile_type": "party"},
            headers=tailor_headers,
        )
        assert resp.status_code == 400

    def test_feedback(self, client, tailor_headers, make_measurement):
        measurement = make_measurement()
        resp = client.post(
            "/api/garment-feedback",
            json={"measurement_id": measurement.id, "fit_feedback": "slightly_tight", "garment_type": "shirt"},
            headers=tailor_headers,
        )
        assert resp.status_code == 201

        body = client.get(f"/api/garment-feedback?measurement_id={measurement.id}", headers=tailor_headers).get_json()
        assert body["feedback"][0]["fit_feedback"] == "slightly_tight"

    def test_feedback_value_checked(self, client, tailor_headers, make_measurement):
        measurement = make_measurement()
        resp = client.post(
            "/api/garment-feedback",
            json={"measurement_id": measurement.id, "fit_feedback": "meh"},
            headers=tailor_headers,
        )
        assert resp.status_code == 400

    def test_feedback_removed_with_measurement(self, client, admin_headers, tailor_headers, make_measurement):
        measurement_id = make_measurement().id
        client.post(
            "/api/garment-feedback",
            json={"measurement_id": measurement_id, "fit_feedback": "perfect"},
            headers=tailor_headers,
        )
        assert client.delete(f"/api/measurements/{measurement_id}", headers=admin_headers).status_code == 200
        body = client.get(f"/api/garment-feedback?measurement_id={measurement_id}", headers=tailor_headers).get_json()
        assert body["feedback"] == []


# =============================================================================
# TEMPLATES
# =============================================================================


class TestTemplates:

    def test_manager_creates_template(self, client, manager_headers, customer_headers):
        resp = client.post(
            "/api/templates",
            json={
                "name": "Classic shirt",
                "template_type": "shirt",
                "region": "EU",
                "defaults": {"chest": "100", "neck": 40},
                "field_ranges": {"chest": {"min": 80, "max": 130}},
            },
            headers=manager_headers,
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["defaults"] == {"chest": 100, "neck": 40}
        assert body["field_ranges"] == {"chest": {"min": 80, "max": 130}}

        listed = client.get("/api/templates?type=shirt&region=EU", headers=customer_headers).get_json()
        assert [t["id"] for t in listed["templates"]] == [body["id"]]
        assert client.get(f"/api/templates/{body['id']}", headers=customer_headers).status_code == 200

    def test_flat_defaults_and_untitled_name(self, client, manager_headers):
        resp = client.post("/api/templates", json={"chest": 100}, headers=manager_headers)
        assert resp.status_code == 201
        assert resp.get_json()["name"] == "Untitled Template"
        assert resp.get_json()["defaults"] == {"chest": 100}

    def test_name_must_be_text(self, client, manager_headers):
        assert client.post("/api/templates", json={"name": 12}, headers=manager_headers).status_code == 400

    def test_unknown_field_rejected(self, client, manager_headers):
        resp = client.post("/api/templates", json={"defaults": {"hat_size": 7}}, headers=manager_headers)
        assert resp.status_code == 400

    def test_inverted_range_rejected(self, client, manager_headers):
        resp = client.post(
            "/api/templates",
            json={"field_ranges": {"chest": {"min": 130, "max": 80}}},
            headers=manager_headers,
        )
        assert resp.status_code == 400

    def test_tailor_cannot_create(self, client, tailor_headers):
        assert client.post("/api/templates", json={"name": "X"}, headers=tailor_headers).status_code == 403
