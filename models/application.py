"""Application model."""

import uuid
from datetime import datetime

from . import db
from .statuses import ApplicationStatus, VisaType


class Application(db.Model):
    """Represents a visa application owned by a single applicant."""

    __tablename__ = "applications"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    visa_type = db.Column(db.Enum(*VisaType.ALL, name="visa_type"), nullable=False)
    status = db.Column(
        db.Enum(*ApplicationStatus.ALL, name="application_status"),
        nullable=False,
        default=ApplicationStatus.PENDING_DOCUMENTS,
    )
    rejection_reason = db.Column(db.Text, nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    applicant = db.relationship(
        "User", backref=db.backref("applications", lazy="dynamic")
    )
    documents = db.relationship(
        "Document",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="Document.position",
    )
    appointment = db.relationship(
        "Appointment",
        back_populates="application",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def is_locked(self) -> bool:
        return self.status in ApplicationStatus.LOCKED

    def document_of_type(self, document_type: str):
        for document in self.documents:
            if document.document_type == document_type:
                return document
        return None

    def __repr__(self) -> str:
        return f"<Application id={self.id} user_id={self.user_id} status={self.status}>"
