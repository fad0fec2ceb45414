"""Attendance reconciliation between the guest list and the reservation ledger.

Every path that writes ``Event.guests`` goes through ``upsert_guest_entry`` or
``retract_guest_entry``, which search-and-replace by user id.  Together with
the unique (event, user) constraint this keeps at most one guest entry per
user: either a direct RSVP or the projection of a confirmed reservation.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from eventhub.models.event import Event
from eventhub.models.guest import EventGuest, GuestRSVP, GuestSource
from eventhub.models.reservation import Reservation, ReservationStatus

logger = logging.getLogger(__name__)


def aggregated_label(display_name: str, party_size: int) -> str:
    """'Ana +2' for a party of three, plain 'Ana' for one."""
    if party_size > 1:
        return f"{display_name} +{party_size - 1}"
    return display_name


def retract_guest_entry(db: Session, event: Event, user_id: str) -> bool:
    """Remove the user's guest entry if present; returns whether one was removed."""
    entry = event.guest_for(user_id)
    if entry is None:
        return False
    event.guests.remove(entry)
    # Flush the delete now so a following insert never collides on (event, user)
    db.flush()
    return True


def upsert_guest_entry(
    db: Session,
    event: Event,
    user_id: str,
    rsvp: GuestRSVP,
    label: Optional[str] = None,
    party_size: int = 1,
    source: GuestSource = GuestSource.direct,
) -> EventGuest:
    """Remove-then-insert the user's entry; the new entry goes to the end of the list."""
    retract_guest_entry(db, event, user_id)
    entry = EventGuest(
        user_id=str(user_id),
        rsvp=rsvp,
        label=label,
        party_size=party_size,
        source=source,
    )
    event.guests.append(entry)
    db.flush()
    return entry


def project_reservation(db: Session, event: Event, reservation: Reservation) -> EventGuest:
    """Write the aggregated guest entry for a confirmed reservation."""
    return upsert_guest_entry(
        db,
        event,
        reservation.user_id,
        rsvp=GuestRSVP.yes,
        label=aggregated_label(reservation.user.display_name, reservation.number_of_people),
        party_size=reservation.number_of_people,
        source=GuestSource.reservation,
    )


def reconcile_event(db: Session, event: Event) -> dict[str, int]:
    """Repair pass: rebuild reservation projections from the reservation ledger.

    Confirmed reservations missing (or stale in) the guest list are projected
    again; reservation-sourced entries with no confirmed reservation behind
    them are dropped.  Direct entries are left alone.
    """
    confirmed = {
        r.user_id: r
        for r in db.query(Reservation).filter(
            Reservation.event_id == event.event_id,
            Reservation.status == ReservationStatus.confirmed,
        )
    }

    removed = 0
    for entry in list(event.guests):
        if entry.source == GuestSource.reservation and entry.user_id not in confirmed:
            retract_guest_entry(db, event, entry.user_id)
            removed += 1

    projected = 0
    for user_id, reservation in confirmed.items():
        entry = event.guest_for(user_id)
        expected = aggregated_label(reservation.user.display_name, reservation.number_of_people)
        if (
            entry is None
            or entry.source != GuestSource.reservation
            or entry.label != expected
            or entry.party_size != reservation.number_of_people
        ):
            project_reservation(db, event, reservation)
            projected += 1

    db.commit()
    db.refresh(event)
    logger.info("Reconciled event %s: %d projected, %d removed", event.event_id, projected, removed)
    return {"projected": projected, "removed": removed}
