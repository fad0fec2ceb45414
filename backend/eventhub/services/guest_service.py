"""Attendance store: the event's guest list.

Direct RSVPs and host-managed guest lists live here.  Entries that project a
confirmed reservation belong to the reservation workflow: a user with an
active reservation can't RSVP directly or be re-declared in a guest list.
"""
import logging
import uuid
from typing import Optional, Any

from sqlalchemy.orm import Session

from eventhub.errors import ConflictError, ValidationError
from eventhub.models.event import Event
from eventhub.models.guest import EventGuest, GuestRSVP, GuestSource
from eventhub.models.notification import NotificationType
from eventhub.models.reservation import Reservation, ACTIVE_STATUSES
from eventhub.models.user import User
from eventhub.services import reconciler
from eventhub.services.access import check_host_or_admin, check_owner, get_active_event, is_host
from eventhub.services.notification_service import Notifier

logger = logging.getLogger(__name__)

DIRECT_RSVP_VALUES = (GuestRSVP.yes, GuestRSVP.no, GuestRSVP.maybe)


def _active_reservation(db: Session, event_id: str, user_id: str) -> Optional[Reservation]:
    if event_id is None:
        return None
    return (
        db.query(Reservation)
        .filter(
            Reservation.event_id == str(event_id),
            Reservation.user_id == str(user_id),
            Reservation.status.in_(ACTIVE_STATUSES),
        )
        .first()
    )


def _is_well_formed(user_id: Any) -> bool:
    # Stored ids are canonical lowercase hyphenated uuids; other spellings never match
    try:
        return str(uuid.UUID(str(user_id))) == str(user_id)
    except ValueError:
        return False


def validate_guest_list(db: Session, event: Event, entries: list[dict[str, Any]]) -> None:
    """Check a full guest list before any write; raises on the first broken rule."""
    seen: set[str] = set()
    for entry in entries:
        user_id = str(entry["user_id"])
        if not _is_well_formed(user_id):
            raise ValidationError("guest_malformed_id", f"'{user_id}' is not a valid user id")
        if user_id in seen:
            raise ValidationError("guest_duplicate", f"User {user_id} appears more than once")
        if is_host(event, user_id):
            raise ValidationError("guest_self_reference", "The event creator cannot be a guest")
        seen.add(user_id)

    if not seen:
        return

    known = {u.user_id for u in db.query(User.user_id).filter(User.user_id.in_(seen))}
    unknown = seen - known
    if unknown:
        raise ValidationError("guest_unknown_user", f"Unknown user(s): {', '.join(sorted(unknown))}")

    for user_id in seen:
        if _active_reservation(db, event.event_id, user_id):
            raise ConflictError(
                "reservation_active",
                f"User {user_id} has an active reservation; manage it through the reservation",
            )


def replace_guests(db: Session, event: Event, entries: list[dict[str, Any]]) -> list[str]:
    """Swap the direct guest entries for ``entries``; returns newly invited user ids.

    Callers validate first.  An entry without an rsvp keeps the guest's current
    answer, or starts as pending for a new guest.
    """
    previous = {g.user_id: g.rsvp for g in event.guests if g.source == GuestSource.direct}
    wanted = {str(e["user_id"]) for e in entries}

    for user_id in previous:
        if user_id not in wanted:
            reconciler.retract_guest_entry(db, event, user_id)

    names = {
        u.user_id: u.display_name
        for u in db.query(User).filter(User.user_id.in_(wanted))
    } if wanted else {}

    invited = []
    for entry in entries:
        user_id = str(entry["user_id"])
        rsvp = entry.get("rsvp") or previous.get(user_id) or GuestRSVP.pending
        reconciler.upsert_guest_entry(db, event, user_id, rsvp=GuestRSVP(rsvp), label=names.get(user_id))
        if user_id not in previous:
            invited.append(user_id)
    return invited


def notify_invited(notifier: Notifier, event: Event, user_ids: list[str]) -> None:
    for user_id in user_ids:
        notifier.notify(
            user_id,
            NotificationType.guest_invitation,
            f"You've been invited to the event \"{event.title}\"",
            event_id=event.event_id,
            sender_id=event.created_by,
        )


def add_or_update_guest(
    db: Session,
    notifier: Notifier,
    event_id: str,
    user: User,
    rsvp: str = GuestRSVP.maybe.value,
) -> Event:
    """Record the user's own RSVP, replacing any earlier answer."""
    try:
        value = GuestRSVP(rsvp)
    except ValueError:
        raise ValidationError("invalid_rsvp_status", f"Invalid RSVP status: {rsvp}")
    if value not in DIRECT_RSVP_VALUES:
        raise ValidationError("invalid_rsvp_status", f"Invalid RSVP status: {rsvp}")

    event = get_active_event(db, event_id)
    if is_host(event, user.user_id):
        raise ValidationError("host_cannot_rsvp", "The event creator cannot RSVP to their own event")
    if _active_reservation(db, event.event_id, user.user_id):
        raise ConflictError(
            "reservation_active",
            "You have an active reservation for this event; update or cancel it instead",
        )

    reconciler.upsert_guest_entry(db, event, user.user_id, rsvp=value, label=user.display_name)
    db.commit()
    db.refresh(event)
    logger.info("User %s RSVP'd '%s' to event %s", user.user_id, value.value, event.event_id)

    notifier.notify(
        event.created_by,
        NotificationType.guest_response,
        f"{user.display_name} answered '{value.value}' to \"{event.title}\"",
        event_id=event.event_id,
        sender_id=user.user_id,
    )
    return event


def remove_guest(db: Session, event_id: str, actor: User, user_id: str) -> Event:
    """Host removes a guest; absent guests are a no-op."""
    event = get_active_event(db, event_id)
    check_owner(event, actor.user_id)

    entry: Optional[EventGuest] = event.guest_for(user_id)
    if entry is None:
        return event
    if entry.source == GuestSource.reservation:
        raise ConflictError(
            "reservation_active",
            "This guest holds a confirmed reservation; cancel the reservation instead",
        )

    reconciler.retract_guest_entry(db, event, user_id)
    db.commit()
    db.refresh(event)
    logger.info("Removed guest %s from event %s", user_id, event_id)
    return event


def list_attendance(db: Session, event_id: str, actor: User) -> dict[str, Any]:
    """Guest list plus reservation ledger for the host or an admin."""
    event = get_active_event(db, event_id)
    check_host_or_admin(event, actor)

    reservations = (
        db.query(Reservation)
        .filter(Reservation.event_id == event.event_id)
        .order_by(Reservation.created_at)
        .all()
    )
    return {"event_id": event.event_id, "guests": event.guests, "reservations": reservations}


def attendance_for_user(db: Session, event_id: str, user: User) -> dict[str, Any]:
    """Read-only RSVP view for one user, derived from the toggle sets."""
    event = get_active_event(db, event_id)
    if user.user_id in event.going:
        status = "going"
    elif user.user_id in event.interested:
        status = "interested"
    else:
        status = "notgoing"

    reservation = _active_reservation(db, event.event_id, user.user_id) or (
        db.query(Reservation)
        .filter(Reservation.event_id == event.event_id, Reservation.user_id == user.user_id)
        .order_by(Reservation.updated_at.desc())
        .first()
    )
    return {
        "event_id": event.event_id,
        "user_id": user.user_id,
        "status": status,
        "guest": event.guest_for(user.user_id),
        "reservation": reservation,
    }
