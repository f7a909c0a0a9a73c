"""Conversation and message models."""

import uuid
from datetime import datetime

from sqlalchemy import text

from . import db


class Conversation(db.Model):
    """A thread between two users, optionally scoped to one application.

    ``participant_a``/``participant_b`` always hold the pair in sorted order.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        db.UniqueConstraint(
            "participant_a",
            "participant_b",
            "application_id",
            name="uq_conversations_pair_application",
        ),
        # NULLs are distinct in the constraint above, so general threads need their own index.
        db.Index(
            "uq_conversations_pair_general",
            "participant_a",
            "participant_b",
            unique=True,
            sqlite_where=text("application_id IS NULL"),
            postgresql_where=text("application_id IS NULL"),
        ),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    participant_a = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    participant_b = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    application_id = db.Column(db.String(36), nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    messages = db.relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )

    def other_participant(self, user_id: str) -> str:
        return self.participant_b if self.participant_a == user_id else self.participant_a

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant_a, self.participant_b)


class Message(db.Model):
    """A single message inside a conversation."""

    __tablename__ = "messages"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = db.Column(
        db.String(36),
        db.ForeignKey("conversations.id"),
        nullable=False,
        index=True,
    )
    sender_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    recipient_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=False, index=True
    )
    content = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    application_id = db.Column(db.String(36), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    conversation = db.relationship("Conversation", back_populates="messages")
