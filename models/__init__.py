"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .application import Application  # noqa: E402,F401
from .document import Document  # noqa: E402,F401
from .appointment import Appointment  # noqa: E402,F401
from .conversation import Conversation, Message  # noqa: E402,F401
from .notification import Notification  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "Application",
    "Document",
    "Appointment",
    "Conversation",
    "Message",
    "Notification",
]
