"""Status vocabularies shared by the models and the lifecycle services."""


class VisaType:
    VITEM_III = "VITEM_III"
    VITEM_XI = "VITEM_XI"

    ALL = (VITEM_III, VITEM_XI)


class ApplicationStatus:
    NOT_STARTED = "NOT_STARTED"
    PENDING_DOCUMENTS = "PENDING_DOCUMENTS"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    APPOINTMENT_SCHEDULED = "APPOINTMENT_SCHEDULED"
    REJECTED = "REJECTED"

    ALL = (
        NOT_STARTED,
        PENDING_DOCUMENTS,
        IN_REVIEW,
        APPROVED,
        APPOINTMENT_SCHEDULED,
        REJECTED,
    )
    # Applications in these states can no longer be edited, deleted or re-uploaded.
    LOCKED = (APPROVED, APPOINTMENT_SCHEDULED)
    # Statuses an administrator may set directly.
    DECISIONS = (APPROVED, REJECTED)


class DocumentStatus:
    MISSING = "MISSING"
    UPLOADED = "UPLOADED"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"

    ALL = (MISSING, UPLOADED, VERIFIED, REJECTED)
    SUBMITTED = (UPLOADED, VERIFIED)
    REVIEW_OUTCOMES = (VERIFIED, REJECTED)


class AppointmentStatus:
    BOOKED = "BOOKED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    ALL = (BOOKED, CONFIRMED, COMPLETED, CANCELLED)


class UserRole:
    APPLICANT = "applicant"
    ADMIN = "admin"

    ALL = (APPLICANT, ADMIN)


NOTIFICATION_TYPES = ("info", "warning", "success", "error", "system")
