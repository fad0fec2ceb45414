"""Reservation ledger: the host-approval workflow for party bookings.

State machine:
    pending   -> confirmed | rejected | canceled  (host responds, either party cancels)
    confirmed -> canceled                         (either party)
    confirmed -> pending                          (requester changes the party size)
    rejected, canceled                            terminal

A confirmed reservation is projected into ``Event.guests`` as a single
aggregated entry; leaving ``confirmed`` retracts it.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from eventhub.models.event import Event
from eventhub.models.notification import NotificationType
from eventhub.models.reservation import (
    ALLOWED_TRANSITIONS,
    ACTIVE_STATUSES,
    Reservation,
    ReservationStatus,
)
from eventhub.models.user import User
from eventhub.services import reconciler
from eventhub.services.access import check_host_or_admin, check_owner, get_active_event, is_host
from eventhub.services.notification_service import Notifier

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (ReservationStatus.confirmed, ReservationStatus.rejected)


def _check_party_size(number_of_people: Optional[int]) -> None:
    if number_of_people is None or number_of_people <= 0:
        raise ValidationError("invalid_party_size", "Number of people must be greater than zero")


def _get_reservation(db: Session, reservation_id: str) -> Reservation:
    reservation = db.query(Reservation).filter(Reservation.reservation_id == str(reservation_id)).first()
    if not reservation:
        raise NotFoundError("reservation_not_found", "Reservation not found")
    return reservation


def _transition(reservation: Reservation, target: ReservationStatus) -> ReservationStatus:
    """Move to ``target`` if the state machine allows it; returns the previous status."""
    previous = reservation.status
    if target not in ALLOWED_TRANSITIONS[previous]:
        raise ConflictError(
            "invalid_transition",
            f"Reservation is {previous.value} and cannot become {target.value}",
        )
    reservation.status = target
    return previous


def make_reservation(
    db: Session,
    notifier: Notifier,
    event_id: str,
    user: User,
    number_of_people: int,
) -> Reservation:
    """Open a pending reservation and notify the host."""
    _check_party_size(number_of_people)
    event = get_active_event(db, event_id)

    if is_host(event, user.user_id):
        raise AuthorizationError("host_cannot_reserve", "You cannot make a reservation for your own event")

    existing = (
        db.query(Reservation)
        .filter(
            Reservation.event_id == event.event_id,
            Reservation.user_id == user.user_id,
            Reservation.status.in_(ACTIVE_STATUSES),
        )
        .first()
    )
    if existing:
        raise ConflictError(
            "already_reserved",
            "You already have a reservation for this event. Please update it instead.",
        )

    reservation = Reservation(
        event_id=event.event_id,
        user_id=user.user_id,
        number_of_people=number_of_people,
        status=ReservationStatus.pending,
    )
    db.add(reservation)
    try:
        db.commit()
    except IntegrityError:
        # The partial unique index caught a concurrent request for the same pair
        db.rollback()
        raise ConflictError("already_reserved", "You already have a reservation for this event.")
    db.refresh(reservation)
    logger.info(
        "Reservation %s opened by %s for %d on event %s",
        reservation.reservation_id, user.user_id, number_of_people, event.event_id,
    )

    notifier.notify(
        event.created_by,
        NotificationType.reservation_request,
        f"{user.display_name} has made a reservation for {number_of_people} people.",
        event_id=event.event_id,
        sender_id=user.user_id,
    )
    return reservation


def update_reservation(
    db: Session,
    notifier: Notifier,
    reservation_id: str,
    user: User,
    number_of_people: int,
) -> Reservation:
    """Change the party size; the reservation goes back to pending for host approval."""
    _check_party_size(number_of_people)
    reservation = _get_reservation(db, reservation_id)
    if str(reservation.user_id) != str(user.user_id):
        raise AuthorizationError("not_reservation_owner", "You are not authorized to update this reservation.")
    event = get_active_event(db, reservation.event_id)

    previous = _transition(reservation, ReservationStatus.pending)
    reservation.number_of_people = number_of_people
    if previous == ReservationStatus.confirmed:
        reconciler.retract_guest_entry(db, event, reservation.user_id)

    db.commit()
    db.refresh(reservation)
    logger.info("Reservation %s updated to %d people (was %s)", reservation_id, number_of_people, previous.value)

    notifier.notify(
        event.created_by,
        NotificationType.reservation_update,
        f"{user.display_name} has updated their reservation to {number_of_people} people.",
        event_id=event.event_id,
        sender_id=user.user_id,
    )
    return reservation


def _cancel(db: Session, notifier: Notifier, reservation: Reservation, event: Event, actor: User) -> Reservation:
    previous = _transition(reservation, ReservationStatus.canceled)
    if previous == ReservationStatus.confirmed:
        reconciler.retract_guest_entry(db, event, reservation.user_id)

    db.commit()
    db.refresh(reservation)
    logger.info("Reservation %s canceled by %s (was %s)", reservation.reservation_id, actor.user_id, previous.value)

    # Tell whoever did not cancel
    if str(actor.user_id) == str(reservation.user_id):
        recipient = event.created_by
        message = f"{actor.display_name} has canceled their reservation for \"{event.title}\"."
    else:
        recipient = reservation.user_id
        message = f"Your reservation for \"{event.title}\" has been canceled by the event creator."
    notifier.notify(
        recipient,
        NotificationType.reservation_cancellation,
        message,
        event_id=event.event_id,
        sender_id=actor.user_id,
    )
    return reservation


def cancel_reservation(db: Session, notifier: Notifier, reservation_id: str, actor: User) -> Reservation:
    """Cancel as either the requester or the host."""
    reservation = _get_reservation(db, reservation_id)
    event = get_active_event(db, reservation.event_id)
    if str(actor.user_id) != str(reservation.user_id) and not is_host(event, actor.user_id):
        raise AuthorizationError("not_reservation_owner", "You are not authorized to cancel this reservation.")
    return _cancel(db, notifier, reservation, event, actor)


def cancel_user_reservation(db: Session, notifier: Notifier, reservation_id: str, user: User) -> Reservation:
    """Cancel as the requester; other users' reservations look missing."""
    reservation = (
        db.query(Reservation)
        .filter(Reservation.reservation_id == str(reservation_id), Reservation.user_id == user.user_id)
        .first()
    )
    if not reservation:
        raise NotFoundError("reservation_not_found", "Reservation not found or not authorized.")
    event = get_active_event(db, reservation.event_id)
    return _cancel(db, notifier, reservation, event, user)


def respond_to_reservation(
    db: Session,
    notifier: Notifier,
    reservation_id: str,
    host: User,
    status: str,
) -> Reservation:
    """Host confirms or rejects a pending reservation."""
    try:
        target = ReservationStatus(status)
    except ValueError:
        target = None
    if target not in RESPONSE_STATUSES:
        raise ValidationError("invalid_response_status", "Invalid status. Must be 'confirmed' or 'rejected'.")

    reservation = _get_reservation(db, reservation_id)
    event = get_active_event(db, reservation.event_id)
    check_owner(event, host.user_id)

    _transition(reservation, target)
    if target == ReservationStatus.confirmed:
        reconciler.project_reservation(db, event, reservation)

    db.commit()
    db.refresh(reservation)
    logger.info("Reservation %s %s by host %s", reservation_id, target.value, host.user_id)

    notifier.notify(
        reservation.user_id,
        NotificationType.reservation_response,
        f"Your reservation for \"{event.title}\" has been {target.value} by the event creator.",
        event_id=event.event_id,
        sender_id=host.user_id,
    )
    return reservation


def list_event_reservations(db: Session, event_id: str, actor: User) -> list[Reservation]:
    event = get_active_event(db, event_id)
    check_host_or_admin(event, actor)
    return (
        db.query(Reservation)
        .filter(Reservation.event_id == event.event_id)
        .order_by(Reservation.created_at)
        .all()
    )


def list_user_reservations(db: Session, user_id: str) -> list[Reservation]:
    return (
        db.query(Reservation)
        .filter(Reservation.user_id == str(user_id))
        .order_by(Reservation.created_at.desc())
        .all()
    )
