"""Notification API routes."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eventhub.database import get_db
from eventhub.models.user import User
from eventhub.schemas.notification import NotificationOut
from eventhub.security import get_current_user
from eventhub.services import notification_service

router = APIRouter()


@router.get("/", response_model=list[NotificationOut])
def list_notifications(
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's notifications, newest first."""
    return notification_service.list_notifications(db, current_user.user_id, unread_only=unread_only)


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return notification_service.mark_read(db, notification_id, current_user.user_id)
