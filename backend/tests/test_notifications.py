"""Tests for the notification sink and the recipient's notification list."""
from eventhub.models.notification import Notification, NotificationType
from eventhub.services.notification_service import Notifier
from tests.conftest import create_test_user, create_test_event, auth_headers, make_user


class TestNotifier:
    """Notifier writes through its own session and never raises."""

    def test_notify_persists(self, db, app):
        host = make_user(db, "Host")
        notifier = Notifier(app.state.session_factory)
        notifier.notify(host.user_id, NotificationType.like, "Someone liked your event")

        stored = db.query(Notification).filter(Notification.recipient_id == host.user_id).all()
        assert len(stored) == 1
        assert stored[0].type == NotificationType.like
        assert stored[0].read_at is None

    def test_failure_is_swallowed(self, caplog):
        def broken_factory():
            raise RuntimeError("boom")

        notifier = Notifier(broken_factory)
        notifier.notify("someone", NotificationType.like, "ignored")
        assert "Failed to deliver like notification" in caplog.text


class TestNotificationEndpoints:
    """GET /api/notifications and POST /api/notifications/{id}/read."""

    def test_mark_read(self, client):
        host = create_test_user(client, name="Host")
        guest = create_test_user(client, name="Guest")
        event = create_test_event(client, host)
        client.post(f"/api/events/{event['event_id']}/toggle",
                    headers=auth_headers(client, guest), json={"field": "likes"})

        notes = client.get("/api/notifications/", headers=auth_headers(client, host)).json()
        assert len(notes) == 1
        note_id = notes[0]["notification_id"]

        resp = client.post(f"/api/notifications/{note_id}/read", headers=auth_headers(client, host))
        assert resp.status_code == 200
        assert resp.json()["read_at"] is not None

        unread = client.get("/api/notifications/?unread_only=true", headers=auth_headers(client, host)).json()
        assert unread == []

    def test_cannot_read_someone_elses(self, client):
        host = create_test_user(client, name="Host")
        guest = create_test_user(client, name="Guest")
        event = create_test_event(client, host)
        client.post(f"/api/events/{event['event_id']}/toggle",
                    headers=auth_headers(client, guest), json={"field": "likes"})
        note_id = client.get("/api/notifications/", headers=auth_headers(client, host)).json()[0]["notification_id"]

        resp = client.post(f"/api/notifications/{note_id}/read", headers=auth_headers(client, guest))
        assert resp.status_code == 404
        assert resp.json()["error"] == "notification_not_found"

    def test_requires_token(self, client):
        assert client.get("/api/notifications/").status_code == 401
