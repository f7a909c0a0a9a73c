"""User model definition."""

import uuid
from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db
from .statuses import UserRole


DEFAULT_NOTIFICATION_PREFERENCES = {
    "email": {
        "applicationUpdates": True,
        "documentRequests": True,
        "appointmentReminders": True,
        "systemAnnouncements": False,
    },
    "push": {
        "applicationUpdates": True,
        "documentRequests": True,
        "appointmentReminders": True,
        "systemAnnouncements": False,
    },
}


class User(db.Model):
    """Represents an applicant or staff account."""

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(*UserRole.ALL, name="user_role"),
        nullable=False,
        default=UserRole.APPLICANT,
        server_default=db.text("'applicant'"),
    )
    email_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    verification_token = db.Column(db.String(64), nullable=True, index=True)

    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    other_names = db.Column(db.String(100), nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    national_id = db.Column(db.String(50), nullable=True)
    sex = db.Column(db.String(10), nullable=True)
    nationality = db.Column(db.String(100), nullable=True)
    passport_number = db.Column(db.String(15), nullable=True)
    address = db.Column(db.Text, nullable=True)
    department = db.Column(db.String(50), nullable=True)
    arrondissement = db.Column(db.String(50), nullable=True)

    notification_preferences = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    def mark_email_verified(self) -> None:
        """Mark the e-mail address as verified and retire the token."""

        self.email_verified = True
        self.verification_token = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def get_notification_preferences(self) -> dict:
        stored = self.notification_preferences or {}
        merged = {}
        for channel, defaults in DEFAULT_NOTIFICATION_PREFERENCES.items():
            merged[channel] = {**defaults, **(stored.get(channel) or {})}
        return merged

    def to_dict(self) -> dict:
        """Serialize the public profile of the user."""

        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role,
            "emailVerified": self.email_verified,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "otherNames": self.other_names,
            "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "phone": self.phone,
            "nationalId": self.national_id,
            "sex": self.sex,
            "nationality": self.nationality,
            "passportNumber": self.passport_number,
            "address": self.address,
            "department": self.department,
            "arrondissement": self.arrondissement,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
