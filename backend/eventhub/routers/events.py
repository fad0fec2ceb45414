"""Event API routes: lifecycle, guest list, RSVP and toggles.

Handlers resolve the caller from the bearer token and delegate to the
service layer, which raises typed errors for anything it rejects.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from eventhub.database import get_db
from eventhub.errors import AuthorizationError
from eventhub.models.user import User
from eventhub.schemas.attendance import (
    AttendanceOut,
    GuestListOut,
    MyAttendanceOut,
    ReconcileOut,
    RSVPRequest,
    ToggleRequest,
)
from eventhub.schemas.event import EventCreate, EventOut, EventUpdate
from eventhub.security import get_current_user
from eventhub.services import event_service, guest_service, reconciler, toggle_service
from eventhub.services.notification_service import Notifier, get_notifier

router = APIRouter()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Create an event hosted by the caller, optionally with an initial guest list."""
    return event_service.create_event(
        db=db,
        notifier=notifier,
        creator=current_user,
        fields=payload.model_dump(exclude={"guests"}),
        guests=[g.model_dump() for g in payload.guests],
    )


@router.get("/", response_model=list[EventOut])
def list_events(
    include_archived: bool = Query(False),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    """List events that are not deleted (and not archived unless asked)."""
    return event_service.list_events(db, include_archived=include_archived)


@router.get("/mine", response_model=list[EventOut])
def list_my_events(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Events hosted by the caller, archived ones included."""
    return event_service.list_events(db, created_by=current_user.user_id, include_archived=True)


@router.get("/me/{field}", response_model=list[EventOut])
def list_events_by_toggle(
    field: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Events the caller liked, is going to, or is interested in."""
    return toggle_service.events_for_user(db, current_user.user_id, field)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    """Fetch a single event with guests and toggle sets."""
    return event_service.get_active_event(db, event_id)


@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Update an event (creator only); a guests array replaces the direct guest list."""
    guests = None
    if payload.guests is not None:
        guests = [g.model_dump() for g in payload.guests]
    return event_service.update_event(
        db=db,
        notifier=notifier,
        event_id=event_id,
        actor=current_user,
        updates=payload.model_dump(exclude_unset=True, exclude={"guests"}),
        guests=guests,
    )


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Soft-delete an event (creator or admin)."""
    event_service.delete_event(db, event_id, current_user)


@router.post("/{event_id}/archive", response_model=EventOut)
def toggle_archive(event_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Archive or unarchive an event (creator only)."""
    return event_service.toggle_archive(db, event_id, current_user)


@router.post("/{event_id}/rsvp", response_model=GuestListOut)
def rsvp(
    event_id: str,
    payload: RSVPRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Set or change the caller's RSVP; returns the updated guest list."""
    return guest_service.add_or_update_guest(db, notifier, event_id, current_user, payload.status)


@router.get("/{event_id}/rsvp", response_model=AttendanceOut)
def list_attendance(event_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Guest list and reservations (creator or admin)."""
    return guest_service.list_attendance(db, event_id, current_user)


@router.get("/{event_id}/attendance/me", response_model=MyAttendanceOut)
def my_attendance(event_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """The caller's going/interested/notgoing status plus any guest entry and reservation."""
    return guest_service.attendance_for_user(db, event_id, current_user)


@router.delete("/{event_id}/guests/{user_id}", response_model=GuestListOut)
def remove_guest(
    event_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Remove a guest (creator only); removing someone not on the list is a no-op."""
    return guest_service.remove_guest(db, event_id, current_user, user_id)


@router.post("/{event_id}/toggle", response_model=EventOut)
def toggle_field(
    event_id: str,
    payload: ToggleRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(get_current_user),
):
    """Flip the caller's membership in likes, going or interested."""
    return toggle_service.toggle_field(db, notifier, event_id, current_user, payload.field)


@router.post("/{event_id}/reconcile", response_model=ReconcileOut)
def reconcile(event_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Rebuild reservation projections in the guest list (admin only)."""
    if not current_user.is_admin:
        raise AuthorizationError("admin_required", "Only admins may reconcile events")
    event = event_service.get_active_event(db, event_id)
    return reconciler.reconcile_event(db, event)
