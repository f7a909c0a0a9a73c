"""Application lifecycle state machine.

Applications are created straight into ``PENDING_DOCUMENTS`` with the
checklist for their visa type. Uploads move the application between
``PENDING_DOCUMENTS`` and ``IN_REVIEW``; administrators decide
``APPROVED``/``REJECTED``; scheduling an appointment ends the flow in
``APPOINTMENT_SCHEDULED``. Once approved, an application can no longer be
edited, deleted or re-uploaded to.

Every transition runs inside :func:`utils.transactions.atomic`, so a
failure at any step leaves no partial state behind.
"""

from __future__ import annotations

import calendar
import logging
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Iterator

from flask import current_app
from sqlalchemy import func
from werkzeug.datastructures import FileStorage

from models import db
from models.application import Application
from models.appointment import Appointment
from models.document import Document
from models.statuses import (
    ApplicationStatus,
    AppointmentStatus,
    DocumentStatus,
    VisaType,
)
from models.user import User
from services.applications import get_owned_application, latest_application
from services.errors import (
    ApplicationNotFound,
    DocumentNotFound,
    Immutable,
    InvalidVisaType,
    NotEligible,
    QuotaExceeded,
)
from services.letters import LetterData, generate_confirmation_letter
from services.outcome import Outcome
from storage.local_storage import LocalStorage
from utils.transactions import atomic

logger = logging.getLogger(__name__)

COMMON_DOCUMENTS = (
    "Passport",
    "Birth Certificate",
    "Police Record",
    "Identity Document",
)
VISA_SPECIFIC_DOCUMENTS = {
    VisaType.VITEM_XI: "Proof of Family Ties (VITEM XI)",
    VisaType.VITEM_III: "Humanitarian Reason Proof (VITEM III)",
}
IDENTITY_DOCUMENT = "Identity Document"
DOCUMENT_FOLDER = "documents"


def validate_visa_type(visa_type: object) -> str:
    if visa_type not in VisaType.ALL:
        raise InvalidVisaType(
            f"visaType must be one of: {', '.join(VisaType.ALL)}."
        )
    return visa_type  # type: ignore[return-value]


def required_documents(visa_type: str) -> list[str]:
    """Return the ordered checklist of document types for a visa type."""

    validate_visa_type(visa_type)
    return [*COMMON_DOCUMENTS, VISA_SPECIFIC_DOCUMENTS[visa_type]]


def _build_checklist(visa_type: str) -> list[Document]:
    return [
        Document(document_type=document_type, position=index, status=DocumentStatus.MISSING)
        for index, document_type in enumerate(required_documents(visa_type))
    ]


def derive_status(document_statuses: Iterable[str]) -> str:
    """Application status implied by its documents alone."""

    statuses = list(document_statuses)
    if statuses and all(status in DocumentStatus.SUBMITTED for status in statuses):
        return ApplicationStatus.IN_REVIEW
    return ApplicationStatus.PENDING_DOCUMENTS


@contextmanager
def _discard_on_failure(storage: LocalStorage, written: list[str]) -> Iterator[None]:
    """Remove files written during a transaction that did not commit."""

    try:
        yield
    except Exception:
        for path in written:
            storage.delete(path)
        raise


def _lock_application(application_id: str) -> Application:
    application = (
        Application.query.filter_by(id=application_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if application is None:
        raise ApplicationNotFound()
    return application


def create_application(user: User, visa_type: object) -> Application:
    """Create an application and its MISSING document checklist."""

    visa_type = validate_visa_type(visa_type)

    limit = current_app.config.get("MAX_APPLICATIONS_PER_USER", 5)
    existing = Application.query.filter_by(user_id=user.id).count()
    if existing >= limit:
        raise QuotaExceeded(
            f"Maximum number of applications reached ({limit}). "
            "Please complete or cancel existing applications first."
        )

    with atomic() as session:
        application = Application(
            user_id=user.id,
            visa_type=visa_type,
            status=ApplicationStatus.PENDING_DOCUMENTS,
        )
        application.documents = _build_checklist(visa_type)
        session.add(application)

    logger.info("Created application %s (%s) for %s", application.id, visa_type, user.id)
    return application


def _owned_document(user: User, document_id: str) -> Document:
    document = (
        Document.query.join(Application, Document.application_id == Application.id)
        .filter(Document.id == document_id, Application.user_id == user.id)
        .first()
    )
    if document is None:
        raise DocumentNotFound()
    return document


def recompute_status(application: Application) -> str:
    """Re-derive the status from the documents and store it if it changed."""

    new_status = derive_status(document.status for document in application.documents)
    if application.status != new_status:
        logger.info(
            "Application %s: %s -> %s", application.id, application.status, new_status
        )
        application.status = new_status
    return new_status


def upload_document(user: User, document_id: str, file: FileStorage) -> Document:
    """Attach a file to one checklist entry and re-derive the application status."""

    document = _owned_document(user, document_id)
    storage = LocalStorage(current_app.config.get("UPLOAD_DIR"))
    written: list[str] = []

    with _discard_on_failure(storage, written), atomic() as session:
        application = _lock_application(document.application_id)
        if application.is_locked:
            raise Immutable(
                "Documents cannot be changed once the application is approved."
            )

        original_name = file.filename or "document"
        stored_path = storage.save(
            file,
            f"{uuid.uuid4().hex}{Path(original_name).suffix.lower()}",
            folder=DOCUMENT_FOLDER,
        )
        written.append(stored_path)

        document.status = DocumentStatus.UPLOADED
        document.file_name = original_name
        document.file_path = stored_path
        document.file_type = file.mimetype or "application/octet-stream"
        document.rejection_reason = None
        document.uploaded_at = datetime.utcnow()
        session.flush()

        recompute_status(application)

    return document


def edit_application(user: User, application_id: str, visa_type: object) -> tuple[Application, bool]:
    """Change the visa type, replacing the checklist and resetting progress.

    Returns the application and whether anything changed.
    """

    visa_type = validate_visa_type(visa_type)
    get_owned_application(user.id, application_id)

    with atomic() as session:
        application = _lock_application(application_id)
        if application.is_locked:
            raise Immutable(
                "Cannot edit approved applications or applications with scheduled appointments."
            )
        if application.visa_type == visa_type:
            return application, False

        application.visa_type = visa_type
        application.documents.clear()
        session.flush()
        application.documents.extend(_build_checklist(visa_type))
        application.status = ApplicationStatus.PENDING_DOCUMENTS
        application.rejection_reason = None
        application.decided_at = None

    logger.info("Application %s switched to %s", application_id, visa_type)
    return application, True


def delete_application(user: User, application_id: str) -> None:
    """Delete an application with its appointment and documents."""

    get_owned_application(user.id, application_id)

    with atomic() as session:
        application = _lock_application(application_id)
        if application.is_locked:
            raise Immutable(
                "Cannot delete approved applications or applications with scheduled appointments."
            )
        session.delete(application)

    logger.info("Deleted application %s", application_id)


def schedule_appointment(
    user: User,
    appointment_date: date,
    appointment_time: str,
    personal_info: dict | None = None,
    application_id: str | None = None,
) -> tuple[Appointment, Outcome]:
    """Book (or rebook) the appointment of an approved application.

    Requires the application to be APPROVED and its Identity Document to be
    VERIFIED. Letter generation is best effort: without a letter the
    appointment stays BOOKED.
    """

    if application_id:
        target = get_owned_application(user.id, application_id)
    else:
        target = latest_application(user.id)
        if target is None:
            raise ApplicationNotFound("Application not found for user.")

    storage = LocalStorage(current_app.config.get("UPLOAD_DIR"))
    written: list[str] = []

    with _discard_on_failure(storage, written), atomic():
        application = _lock_application(target.id)
        if application.status != ApplicationStatus.APPROVED:
            raise NotEligible("Application must be approved before scheduling.")

        identity = application.document_of_type(IDENTITY_DOCUMENT)
        if identity is None or identity.status != DocumentStatus.VERIFIED:
            raise NotEligible(
                "Identity Document must be verified before scheduling appointment."
            )

        if personal_info:
            user.date_of_birth = personal_info["dateOfBirth"]
            user.passport_number = personal_info["passportNumber"]
            user.nationality = personal_info["nationality"]

        appointment = application.appointment
        if appointment is None:
            appointment = Appointment(
                id=str(uuid.uuid4()),
                location=current_app.config["APPOINTMENT_LOCATION"],
            )
            application.appointment = appointment
        appointment.appointment_date = appointment_date
        appointment.appointment_time = appointment_time
        appointment.status = AppointmentStatus.BOOKED

        outcome = generate_confirmation_letter(
            LetterData(
                full_name=user.full_name,
                email=user.email,
                date_of_birth=user.date_of_birth,
                passport_number=user.passport_number,
                nationality=user.nationality,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                location=appointment.location,
                appointment_id=appointment.id,
                application_id=application.id,
                visa_type=application.visa_type,
            )
        )
        if outcome.delivered:
            written.append(outcome.detail)
            appointment.confirmation_letter_path = outcome.detail
            appointment.status = AppointmentStatus.CONFIRMED
        else:
            logger.warning(
                "Appointment %s confirmed without letter: %s", appointment.id, outcome.reason
            )

        application.status = ApplicationStatus.APPOINTMENT_SCHEDULED

    return appointment, outcome


def appointment_availability(year: int, month: int) -> dict[int, dict]:
    """Per-day booking load for one month, keyed by day of month."""

    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])

    rows = (
        db.session.query(Appointment.appointment_date, func.count(Appointment.id))
        .filter(
            Appointment.appointment_date >= first,
            Appointment.appointment_date <= last,
            Appointment.status != AppointmentStatus.CANCELLED,
        )
        .group_by(Appointment.appointment_date)
        .all()
    )

    full_at = current_app.config.get("APPOINTMENT_DAILY_LIMIT", 25)
    limited_at = current_app.config.get("APPOINTMENT_LIMITED_THRESHOLD", 15)

    availability: dict[int, dict] = {}
    for day, count in rows:
        if count >= full_at:
            status = "full"
        elif count >= limited_at:
            status = "limited"
        else:
            status = "available"
        availability[day.day] = {"status": status, "count": count}
    return availability
