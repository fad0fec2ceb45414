"""Reservation API routes: request, update, respond, cancel, list."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventhub.database import get_db
from eventhub.models.user import User
from eventhub.schemas.attendance import (
    ReservationCreate,
    ReservationOut,
    ReservationRespond,
    ReservationUpdate,
)
from eventhub.security import get_current_user
from eventhub.services import reservation_service
from eventhub.services.notification_service import Notifier, get_notifier

router = APIRouter()


@router.get("/mine", response_model=list[ReservationOut])
def list_my_reservations(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Reservations made by the caller, newest first."""
    return reservation_service.list_user_reservations(db, current_user.user_id)


@router.get("/event/{event_id}", response_model=list[ReservationOut])
def list_event_reservations(
    event_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All reservations for an event (creator or admin)."""
    return reservation_service.list_event_reservations(db, event_id, current_user)


@router.post("/{event_id}", response_model=ReservationOut, status_code=status.HTTP_201_CREATED)
def make_reservation(
    event_id: str,
    payload: ReservationCreate,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Request a reservation for a party; starts pending until the host responds."""
    return reservation_service.make_reservation(db, notifier, event_id, current_user, payload.number_of_people)


@router.put("/{reservation_id}", response_model=ReservationOut)
def update_reservation(
    reservation_id: str,
    payload: ReservationUpdate,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Change the party size (requester only); goes back to pending."""
    return reservation_service.update_reservation(
        db, notifier, reservation_id, current_user, payload.number_of_people
    )


@router.put("/{reservation_id}/respond", response_model=ReservationOut)
def respond_to_reservation(
    reservation_id: str,
    payload: ReservationRespond,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Confirm or reject a pending reservation (event creator only)."""
    return reservation_service.respond_to_reservation(db, notifier, reservation_id, current_user, payload.status)


@router.delete("/user/cancel/{reservation_id}", response_model=ReservationOut)
def cancel_user_reservation(
    reservation_id: str,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Cancel one of the caller's own reservations."""
    return reservation_service.cancel_user_reservation(db, notifier, reservation_id, current_user)


@router.delete("/{reservation_id}", response_model=ReservationOut)
def cancel_reservation(
    reservation_id: str,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Cancel a reservation as its requester or as the event creator."""
    return reservation_service.cancel_reservation(db, notifier, reservation_id, current_user)
