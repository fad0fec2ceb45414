"""Notification sink and the recipient-side notification queries.

The ``Notifier`` is constructed once per app with its own session factory and
handed to services through the ``get_notifier`` dependency.  Delivery is
fire-and-forget: a failed write is logged and never reaches the caller, so an
attendance operation can't fail because a notification couldn't be stored.
Callers notify only after their own commit.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session, sessionmaker

from eventhub.errors import NotFoundError
from eventhub.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class Notifier:
    """Persists notifications in a session separate from the request's."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def notify(
        self,
        recipient_id: str,
        kind: NotificationType,
        message: str,
        event_id: Optional[str] = None,
        sender_id: Optional[str] = None,
    ) -> None:
        try:
            with self._session_factory() as session:
                session.add(Notification(
                    recipient_id=str(recipient_id),
                    sender_id=str(sender_id) if sender_id else None,
                    event_id=str(event_id) if event_id else None,
                    type=kind,
                    message=message,
                ))
                session.commit()
        except Exception:
            logger.exception("Failed to deliver %s notification to %s", kind.value, recipient_id)
            return
        logger.info("Notified %s (%s)", recipient_id, kind.value)


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def list_notifications(db: Session, user_id: str, unread_only: bool = False) -> list[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.read_at.is_(None))
    return query.order_by(Notification.created_at.desc()).all()


def mark_read(db: Session, notification_id: str, user_id: str) -> Notification:
    """Mark one of the user's notifications as read; other users' ids look missing."""
    notification = (
        db.query(Notification)
        .filter(Notification.notification_id == notification_id, Notification.recipient_id == user_id)
        .first()
    )
    if not notification:
        raise NotFoundError("notification_not_found", "Notification not found")
    if notification.read_at is None:
        notification.read_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(notification)
    return notification
