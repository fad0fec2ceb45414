"""Event lifecycle service: create, read, update, soft delete and archive.

Responsibilities:
- Soft-deleted events are invisible to every read and mutation here
- Authorization hook: only the creator may update, archive or delete (admins may delete)
- Guest lists supplied on create/update go through guest_service validation
  before anything is written
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Any

from sqlalchemy.orm import Session

from eventhub.errors import ValidationError
from eventhub.models.event import Event
from eventhub.models.user import User
from eventhub.services import guest_service
from eventhub.services.access import check_owner, get_active_event
from eventhub.services.notification_service import Notifier

logger = logging.getLogger(__name__)

# Fields a PATCH may touch; guests are handled separately
_UPDATABLE_FIELDS = (
    "title", "description", "location", "start_time", "end_time",
    "event_type", "visibility", "price",
)


def _naive_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; request payloads are usually aware
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _check_schedule(start_time: Optional[datetime], end_time: Optional[datetime]) -> None:
    if start_time is None or end_time is None:
        return
    if _naive_utc(end_time) < _naive_utc(start_time):
        raise ValidationError("invalid_schedule", "end_time must not be before start_time")


def create_event(
    db: Session,
    notifier: Notifier,
    creator: User,
    fields: dict[str, Any],
    guests: Optional[list[dict[str, Any]]] = None,
) -> Event:
    """Create an event, optionally with an initial guest list."""
    _check_schedule(fields.get("start_time"), fields.get("end_time"))
    event = Event(created_by=creator.user_id, **fields)

    # Validate before the event row exists so a bad list writes nothing
    if guests:
        guest_service.validate_guest_list(db, event, guests)

    db.add(event)
    db.flush()

    invited: list[str] = []
    if guests:
        invited = guest_service.replace_guests(db, event, guests)

    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by %s", event.title, event.event_id, creator.user_id)

    guest_service.notify_invited(notifier, event, invited)
    return event


def list_events(
    db: Session,
    created_by: Optional[str] = None,
    include_archived: bool = False,
) -> list[Event]:
    query = db.query(Event).filter(Event.deleted.is_(False))
    if created_by:
        query = query.filter(Event.created_by == str(created_by))
    if not include_archived:
        query = query.filter(Event.is_archived.is_(False))
    return query.order_by(Event.start_time).all()


def update_event(
    db: Session,
    notifier: Notifier,
    event_id: str,
    actor: User,
    updates: dict[str, Any],
    guests: Optional[list[dict[str, Any]]] = None,
) -> Event:
    """Partial update; a supplied guest list replaces the direct guest entries."""
    event = get_active_event(db, event_id)
    check_owner(event, actor.user_id)
    _check_schedule(
        updates.get("start_time", event.start_time),
        updates.get("end_time", event.end_time),
    )

    if guests is not None:
        guest_service.validate_guest_list(db, event, guests)

    for field, value in updates.items():
        if field in _UPDATABLE_FIELDS:
            setattr(event, field, value)

    invited: list[str] = []
    if guests is not None:
        invited = guest_service.replace_guests(db, event, guests)

    db.commit()
    db.refresh(event)
    logger.info("Updated event %s", event_id)

    guest_service.notify_invited(notifier, event, invited)
    return event


def delete_event(db: Session, event_id: str, actor: User) -> Event:
    """Soft delete; reservations keep their weak reference to the event."""
    event = get_active_event(db, event_id)
    if not actor.is_admin:
        check_owner(event, actor.user_id)

    event.deleted = True
    db.commit()
    db.refresh(event)
    logger.info("Soft-deleted event %s by %s", event_id, actor.user_id)
    return event


def toggle_archive(db: Session, event_id: str, actor: User) -> Event:
    event = get_active_event(db, event_id)
    check_owner(event, actor.user_id)

    event.is_archived = not event.is_archived
    db.commit()
    db.refresh(event)
    logger.info("Event %s %s", event_id, "archived" if event.is_archived else "unarchived")
    return event
