"""Notification model definition."""

import uuid
from datetime import datetime

from . import db
from .statuses import NOTIFICATION_TYPES


class Notification(db.Model):
    """In-app notification addressed to one user."""

    __tablename__ = "notifications"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(
        db.Enum(*NOTIFICATION_TYPES, name="notification_type"),
        nullable=False,
        default="info",
    )
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    application_id = db.Column(db.String(36), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        """Serialize the notification into a dictionary."""

        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "is_read": self.is_read,
            "application_id": self.application_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
