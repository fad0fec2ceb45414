"""Shared lookups and authorization hooks for the attendance services."""
from sqlalchemy.orm import Session

from eventhub.errors import AuthorizationError, NotFoundError
from eventhub.models.event import Event
from eventhub.models.user import User


def get_active_event(db: Session, event_id: str) -> Event:
    """Load a non-deleted event or raise event_not_found."""
    event = db.query(Event).filter(Event.event_id == str(event_id)).first()
    if not event or event.deleted:
        raise NotFoundError("event_not_found", "Event not found")
    return event


def is_host(event: Event, user_id: str) -> bool:
    # Ids cross JSON and token boundaries; compare their string forms
    return str(event.created_by) == str(user_id)


def check_owner(event: Event, actor_id: str) -> None:
    """Only the creator may manage the event."""
    if not is_host(event, actor_id):
        raise AuthorizationError("not_event_owner", "Only the event creator may do this")


def check_host_or_admin(event: Event, actor: User) -> None:
    if not (is_host(event, actor.user_id) or actor.is_admin):
        raise AuthorizationError("not_event_owner", "Only the event creator or an admin may do this")
