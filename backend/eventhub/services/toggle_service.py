"""Toggle-set service: flip a user's membership in likes, going or interested."""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.errors import ConflictError, ValidationError
from eventhub.models.event import Event
from eventhub.models.notification import NotificationType
from eventhub.models.toggle import EventToggle, ToggleField
from eventhub.models.user import User
from eventhub.services.access import get_active_event, is_host
from eventhub.services.notification_service import Notifier

logger = logging.getLogger(__name__)


def parse_field(field: str) -> ToggleField:
    try:
        return ToggleField(field)
    except ValueError:
        allowed = ", ".join(f.value for f in ToggleField)
        raise ValidationError("invalid_toggle_field", f"field must be one of: {allowed}")


def _membership(event: Event, user_id: str, field: ToggleField):
    for toggle in event.toggles:
        if toggle.field == field and str(toggle.user_id) == str(user_id):
            return toggle
    return None


def toggle_field(db: Session, notifier: Notifier, event_id: str, user: User, field: str) -> Event:
    """XOR the user's membership in one set and return the updated event.

    Only the named set changes.  A new like from anyone but the host
    notifies the host.
    """
    target = parse_field(field)
    event = get_active_event(db, event_id)

    existing = _membership(event, user.user_id, target)
    if existing is not None:
        event.toggles.remove(existing)
        added = False
    else:
        event.toggles.append(EventToggle(user_id=user.user_id, field=target))
        added = True

    try:
        db.commit()
    except IntegrityError:
        # Two requests for the same (event, user, field) raced; no locking here
        db.rollback()
        logger.warning("Concurrent toggle of %s on event %s by %s", target.value, event_id, user.user_id)
        raise ConflictError("concurrent_update", "The event changed while toggling; retry")
    db.refresh(event)
    logger.info(
        "User %s %s %s on event %s",
        user.user_id, "joined" if added else "left", target.value, event.event_id,
    )

    if added and target == ToggleField.likes and not is_host(event, user.user_id):
        notifier.notify(
            event.created_by,
            NotificationType.like,
            f"{user.display_name} liked your event \"{event.title}\"",
            event_id=event.event_id,
            sender_id=user.user_id,
        )
    return event


def events_for_user(db: Session, user_id: str, field: str) -> list[Event]:
    """Non-deleted events where the user belongs to the given set."""
    target = parse_field(field)
    return (
        db.query(Event)
        .join(EventToggle)
        .filter(
            EventToggle.user_id == str(user_id),
            EventToggle.field == target,
            Event.deleted.is_(False),
        )
        .order_by(Event.start_time)
        .all()
    )
