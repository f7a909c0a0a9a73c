"""In-app notifications with real-time fan-out."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.notification import Notification
from models.statuses import NOTIFICATION_TYPES
from models.user import DEFAULT_NOTIFICATION_PREFERENCES, User
from services import realtime

logger = logging.getLogger(__name__)


def create_notification(
    user_id: str,
    title: str,
    message: str,
    type: str = "info",
    application_id: str | None = None,
) -> Notification:
    """Persist a notification and push it to the user if connected."""

    if type not in NOTIFICATION_TYPES:
        raise BadRequest(f"type must be one of: {', '.join(NOTIFICATION_TYPES)}.")

    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        application_id=application_id,
    )
    db.session.add(notification)
    db.session.commit()

    realtime.push(
        user_id,
        realtime.NEW_NOTIFICATION,
        {"notification": notification.to_dict()},
    )
    return notification


def notify_quietly(user_id: str, title: str, message: str, **kwargs) -> Notification | None:
    """Create a notification as a side effect of another committed change."""

    try:
        return create_notification(user_id, title, message, **kwargs)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to store notification for %s", user_id)
        return None


def list_notifications(
    user_id: str, *, page: int = 1, limit: int = 20, unread_only: bool = False
) -> dict:
    query = Notification.query.filter_by(user_id=user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    total = query.count()
    rows = (
        query.order_by(Notification.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "notifications": [row.to_dict() for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


def unread_count(user_id: str) -> int:
    return Notification.query.filter_by(user_id=user_id, is_read=False).count()


def _get_owned(user_id: str, notification_id: str) -> Notification:
    notification = Notification.query.filter_by(id=notification_id, user_id=user_id).first()
    if notification is None:
        raise NotFound("Notification not found.")
    return notification


def mark_read(user_id: str, notification_id: str) -> Notification:
    notification = _get_owned(user_id, notification_id)
    notification.is_read = True
    db.session.commit()

    realtime.push(
        user_id,
        realtime.NOTIFICATION_UPDATED,
        {"notification": notification.to_dict()},
    )
    return notification


def mark_all_read(user_id: str) -> int:
    updated = Notification.query.filter_by(user_id=user_id, is_read=False).update(
        {Notification.is_read: True}, synchronize_session=False
    )
    db.session.commit()

    recent = (
        Notification.query.filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc())
        .limit(10)
        .all()
    )
    for notification in recent:
        realtime.push(
            user_id,
            realtime.NOTIFICATION_UPDATED,
            {"notification": notification.to_dict()},
        )
    return updated


def delete_notification(user_id: str, notification_id: str) -> None:
    notification = _get_owned(user_id, notification_id)
    db.session.delete(notification)
    db.session.commit()

    realtime.push(user_id, realtime.NOTIFICATION_DELETED, {"id": notification_id})


def update_preferences(user: User, changes: dict) -> dict:
    """Merge known preference flags into the user's stored preferences."""

    current = user.get_notification_preferences()
    for channel, flags in changes.items():
        if channel not in DEFAULT_NOTIFICATION_PREFERENCES:
            raise BadRequest(f"Unknown preference channel: {channel}.")
        if not isinstance(flags, dict):
            raise BadRequest(f"{channel} preferences must be an object.")
        for key, value in flags.items():
            if key not in DEFAULT_NOTIFICATION_PREFERENCES[channel]:
                raise BadRequest(f"Unknown preference: {channel}.{key}.")
            if not isinstance(value, bool):
                raise BadRequest(f"{channel}.{key} must be a boolean.")
            current[channel][key] = value

    user.notification_preferences = current
    db.session.commit()
    return current
