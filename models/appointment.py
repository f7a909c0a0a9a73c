"""Appointment model definition."""

import uuid
from datetime import datetime

from . import db
from .statuses import AppointmentStatus


class Appointment(db.Model):
    """Consular appointment; at most one per application."""

    __tablename__ = "appointments"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    application_id = db.Column(
        db.String(36),
        db.ForeignKey("applications.id"),
        nullable=False,
        unique=True,
    )
    appointment_date = db.Column(db.Date, nullable=False, index=True)
    appointment_time = db.Column(db.String(5), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    status = db.Column(
        db.Enum(*AppointmentStatus.ALL, name="appointment_status"),
        nullable=False,
        default=AppointmentStatus.BOOKED,
    )
    confirmation_letter_path = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    application = db.relationship("Application", back_populates="appointment")
