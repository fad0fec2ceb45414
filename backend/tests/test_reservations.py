"""Tests for the reservation workflow and its projection into the guest list.

Covers:
- Request, update, respond and cancel through the API
- Terminal states and the host/requester authorization rules
- A confirmed party of N appears as one aggregated guest entry
- Notifications to the counterpart of every transition
"""
from tests.conftest import create_test_user, create_test_event, auth_headers


def _setup(client):
    host = create_test_user(client, name="Host")
    guest = create_test_user(client, name="A")
    event = create_test_event(client, host)
    return host, guest, event


def _reserve(client, event, user, people=3):
    return client.post(f"/api/reservations/{event['event_id']}",
                       headers=auth_headers(client, user), json={"number_of_people": people})


def _respond(client, reservation, host, status):
    return client.put(f"/api/reservations/{reservation['reservation_id']}/respond",
                      headers=auth_headers(client, host), json={"status": status})


def _guests(client, event, user):
    resp = client.get(f"/api/events/{event['event_id']}", headers=auth_headers(client, user))
    return resp.json()["guests"]


class TestMakeReservation:
    """POST /api/reservations/{event_id}."""

    def test_reservation_starts_pending(self, client):
        host, guest, event = _setup(client)
        resp = _reserve(client, event, guest, 3)
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "pending"
        assert data["number_of_people"] == 3
        assert data["user_id"] == guest["user_id"]
        # Pending reservations don't touch the guest list
        assert _guests(client, event, host) == []

    def test_host_cannot_reserve(self, client):
        host, _, event = _setup(client)
        resp = _reserve(client, event, host)
        assert resp.status_code == 403
        assert resp.json()["error"] == "host_cannot_reserve"

    def test_party_size_must_be_positive(self, client):
        _, guest, event = _setup(client)
        resp = _reserve(client, event, guest, 0)
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_party_size"

    def test_second_active_reservation_rejected(self, client):
        _, guest, event = _setup(client)
        _reserve(client, event, guest)
        resp = _reserve(client, event, guest, 1)
        assert resp.status_code == 409
        assert resp.json()["error"] == "already_reserved"

    def test_can_reserve_again_after_cancel(self, client):
        _, guest, event = _setup(client)
        first = _reserve(client, event, guest).json()
        client.delete(f"/api/reservations/user/cancel/{first['reservation_id']}",
                      headers=auth_headers(client, guest))

        resp = _reserve(client, event, guest, 2)
        assert resp.status_code == 201
        assert resp.json()["reservation_id"] != first["reservation_id"]

    def test_request_notifies_host(self, client):
        host, guest, event = _setup(client)
        _reserve(client, event, guest, 3)
        notes = client.get("/api/notifications/", headers=auth_headers(client, host)).json()
        assert [n["type"] for n in notes] == ["reservation_request"]
        assert "3 people" in notes[0]["message"]


class TestRespond:
    """Host confirms or rejects."""

    def test_confirm_projects_aggregated_guest(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest, 3).json()

        resp = _respond(client, reservation, host, "confirmed")
        assert resp.status_code == 200
        assert resp.json()["status"] == "confirmed"

        guests = _guests(client, event, host)
        assert len(guests) == 1
        assert guests[0]["user_id"] == guest["user_id"]
        assert guests[0]["rsvp"] == "yes"
        assert guests[0]["label"] == "A +2"
        assert guests[0]["party_size"] == 3
        assert guests[0]["source"] == "reservation"

    def test_party_of_one_has_plain_label(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest, 1).json()
        _respond(client, reservation, host, "confirmed")
        assert _guests(client, event, host)[0]["label"] == "A"

    def test_confirm_replaces_direct_rsvp(self, client):
        host, guest, event = _setup(client)
        client.post(f"/api/events/{event['event_id']}/rsvp",
                    headers=auth_headers(client, guest), json={"status": "maybe"})
        reservation = _reserve(client, event, guest, 2).json()
        _respond(client, reservation, host, "confirmed")

        guests = _guests(client, event, host)
        assert [(g["rsvp"], g["source"]) for g in guests] == [("yes", "reservation")]

    def test_reject_leaves_guest_list_alone(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()
        resp = _respond(client, reservation, host, "rejected")
        assert resp.json()["status"] == "rejected"
        assert _guests(client, event, host) == []

        notes = client.get("/api/notifications/", headers=auth_headers(client, guest)).json()
        assert [n["type"] for n in notes] == ["reservation_response"]

    def test_invalid_response_status(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()
        for bad in ("canceled", "pending", "maybe"):
            resp = _respond(client, reservation, host, bad)
            assert resp.status_code == 400
            assert resp.json()["error"] == "invalid_response_status"

    def test_only_host_responds(self, client):
        _, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()
        resp = _respond(client, reservation, guest, "confirmed")
        assert resp.status_code == 403
        assert resp.json()["error"] == "not_event_owner"

    def test_terminal_states(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()
        _respond(client, reservation, host, "rejected")

        resp = _respond(client, reservation, host, "confirmed")
        assert resp.status_code == 409
        assert resp.json()["error"] == "invalid_transition"

        resp = client.delete(f"/api/reservations/{reservation['reservation_id']}",
                             headers=auth_headers(client, guest))
        assert resp.status_code == 409

        resp = client.put(f"/api/reservations/{reservation['reservation_id']}",
                          headers=auth_headers(client, guest), json={"number_of_people": 2})
        assert resp.status_code == 409

    def test_confirmed_cannot_be_confirmed_again(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()
        _respond(client, reservation, host, "confirmed")
        resp = _respond(client, reservation, host, "rejected")
        assert resp.status_code == 409
        assert len(_guests(client, event, host)) == 1


class TestUpdate:
    """PUT /api/reservations/{id}."""

    def test_update_party_size(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest, 2).json()
        resp = client.put(f"/api/reservations/{reservation['reservation_id']}",
                          headers=auth_headers(client, guest), json={"number_of_people": 5})
        assert resp.status_code == 200
        assert resp.json()["number_of_people"] == 5
        assert resp.json()["status"] == "pending"

        kinds = {n["type"] for n in client.get("/api/notifications/", headers=auth_headers(client, host)).json()}
        assert kinds == {"reservation_request", "reservation_update"}

    def test_update_confirmed_goes_back_to_pending(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest, 3).json()
        _respond(client, reservation, host, "confirmed")

        resp = client.put(f"/api/reservations/{reservation['reservation_id']}",
                          headers=auth_headers(client, guest), json={"number_of_people": 4})
        assert resp.json()["status"] == "pending"
        assert _guests(client, event, host) == []

        _respond(client, reservation, host, "confirmed")
        guests = _guests(client, event, host)
        assert [(g["label"], g["party_size"]) for g in guests] == [("A +3", 4)]

    def test_only_requester_updates(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()
        resp = client.put(f"/api/reservations/{reservation['reservation_id']}",
                          headers=auth_headers(client, host), json={"number_of_people": 1})
        assert resp.status_code == 403
        assert resp.json()["error"] == "not_reservation_owner"

    def test_update_unknown_reservation(self, client):
        _, guest, _ = _setup(client)
        resp = client.put("/api/reservations/nope",
                          headers=auth_headers(client, guest), json={"number_of_people": 1})
        assert resp.status_code == 404
        assert resp.json()["error"] == "reservation_not_found"


class TestCancel:
    """Cancellation by either party."""

    def test_cancel_confirmed_removes_guest(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest, 3).json()
        _respond(client, reservation, host, "confirmed")
        assert len(_guests(client, event, host)) == 1

        resp = client.delete(f"/api/reservations/user/cancel/{reservation['reservation_id']}",
                             headers=auth_headers(client, guest))
        assert resp.status_code == 200
        assert resp.json()["status"] == "canceled"
        assert _guests(client, event, host) == []

        kinds = [n["type"] for n in client.get("/api/notifications/", headers=auth_headers(client, host)).json()]
        assert "reservation_cancellation" in kinds

    def test_host_cancel_notifies_requester(self, client):
        host, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()

        resp = client.delete(f"/api/reservations/{reservation['reservation_id']}",
                             headers=auth_headers(client, host))
        assert resp.status_code == 200
        assert resp.json()["status"] == "canceled"

        notes = client.get("/api/notifications/", headers=auth_headers(client, guest)).json()
        assert [n["type"] for n in notes] == ["reservation_cancellation"]
        assert "event creator" in notes[0]["message"]

    def test_stranger_cannot_cancel(self, client):
        _, guest, event = _setup(client)
        stranger = create_test_user(client, name="Stranger")
        reservation = _reserve(client, event, guest).json()

        resp = client.delete(f"/api/reservations/{reservation['reservation_id']}",
                             headers=auth_headers(client, stranger))
        assert resp.status_code == 403

        # The requester-only route hides other users' reservations
        resp = client.delete(f"/api/reservations/user/cancel/{reservation['reservation_id']}",
                             headers=auth_headers(client, stranger))
        assert resp.status_code == 404

    def test_cancel_twice(self, client):
        _, guest, event = _setup(client)
        reservation = _reserve(client, event, guest).json()
        url = f"/api/reservations/user/cancel/{reservation['reservation_id']}"
        client.delete(url, headers=auth_headers(client, guest))
        resp = client.delete(url, headers=auth_headers(client, guest))
        assert resp.status_code == 409
        assert resp.json()["error"] == "invalid_transition"


class TestListing:
    """Reservation listings."""

    def test_list_mine_and_event(self, client):
        host, guest, event = _setup(client)
        other_event = create_test_event(client, host, title="Other")
        _reserve(client, event, guest, 2)
        _reserve(client, other_event, guest, 1)

        mine = client.get("/api/reservations/mine", headers=auth_headers(client, guest)).json()
        assert len(mine) == 2

        resp = client.get(f"/api/reservations/event/{event['event_id']}", headers=auth_headers(client, host))
        assert resp.status_code == 200
        assert [r["number_of_people"] for r in resp.json()] == [2]

        resp = client.get(f"/api/reservations/event/{event['event_id']}", headers=auth_headers(client, guest))
        assert resp.status_code == 403
