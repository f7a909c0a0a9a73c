"""Staff-side review of applications and documents."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta

from sqlalchemy import or_
from werkzeug.exceptions import BadRequest

from models import db
from models.application import Application
from models.appointment import Appointment
from models.document import Document
from models.statuses import ApplicationStatus, DocumentStatus, VisaType
from models.user import User
from services import mailer, realtime
from services.errors import (
    ApplicationNotFound,
    DocumentNotFound,
    Immutable,
    PreconditionFailed,
)
from services.notifications import notify_quietly
from services.outcome import Outcome
from services.views import ApplicationView
from utils.transactions import atomic

logger = logging.getLogger(__name__)

PERIODS = {"week": 7, "month": 30, "quarter": 90}
DOCUMENT_REASON_MIN_LENGTH = 5
DECISION_REASON_MIN_LENGTH = 10


def _get_application(application_id: str) -> Application:
    application = db.session.get(Application, application_id)
    if application is None:
        raise ApplicationNotFound()
    return application


def _broadcast(application: Application) -> None:
    realtime.push(
        application.user_id,
        realtime.APPLICATION_UPDATED,
        {"application": ApplicationView.from_model(application).to_dict()},
    )


def review_document(
    admin: User,
    application_id: str,
    document_id: str,
    status: str,
    rejection_reason: str | None = None,
) -> Document:
    """Mark a document VERIFIED or REJECTED.

    The application status is left alone; the reviewer decides it
    separately through :func:`decide_application`.
    """

    if status not in DocumentStatus.REVIEW_OUTCOMES:
        raise BadRequest(
            f"status must be one of: {', '.join(DocumentStatus.REVIEW_OUTCOMES)}."
        )
    reason = (rejection_reason or "").strip()
    if status == DocumentStatus.REJECTED and len(reason) < DOCUMENT_REASON_MIN_LENGTH:
        raise BadRequest(
            f"rejectionReason must be at least {DOCUMENT_REASON_MIN_LENGTH} characters "
            "when rejecting a document."
        )

    application = _get_application(application_id)
    document = Document.query.filter_by(id=document_id, application_id=application.id).first()
    if document is None:
        raise DocumentNotFound()

    with atomic():
        document.status = status
        document.rejection_reason = reason if status == DocumentStatus.REJECTED else None
        document.reviewer_id = admin.id
        document.reviewed_at = datetime.utcnow()

    logger.info("Document %s of %s marked %s by %s", document.id, application.id, status, admin.id)

    _broadcast(application)
    if status == DocumentStatus.VERIFIED:
        notify_quietly(
            application.user_id,
            "Document verified",
            f"Your {document.document_type} has been verified.",
            type="success",
            application_id=application.id,
        )
    else:
        notify_quietly(
            application.user_id,
            "Document rejected",
            f"Your {document.document_type} was rejected: {reason}",
            type="warning",
            application_id=application.id,
        )
    return document


def decide_application(
    admin: User,
    application_id: str,
    status: str,
    rejection_reason: str | None = None,
) -> tuple[Application, Outcome]:
    """Approve or reject an application and tell the applicant."""

    if status not in ApplicationStatus.DECISIONS:
        raise BadRequest(
            f"status must be one of: {', '.join(ApplicationStatus.DECISIONS)}."
        )
    reason = (rejection_reason or "").strip() or None
    if status == ApplicationStatus.REJECTED and reason and len(reason) < DECISION_REASON_MIN_LENGTH:
        raise BadRequest(
            f"rejectionReason must be at least {DECISION_REASON_MIN_LENGTH} characters."
        )

    _get_application(application_id)

    with atomic():
        application = (
            Application.query.filter_by(id=application_id)
            .populate_existing()
            .with_for_update()
            .one()
        )
        if application.status == ApplicationStatus.APPOINTMENT_SCHEDULED:
            raise Immutable("An appointment has already been scheduled for this application.")
        if status == ApplicationStatus.APPROVED:
            unverified = [
                document.document_type
                for document in application.documents
                if document.status != DocumentStatus.VERIFIED
            ]
            if unverified:
                raise PreconditionFailed(
                    "All documents must be verified before approval. "
                    f"Unverified: {', '.join(unverified)}."
                )

        application.status = status
        application.decided_at = datetime.utcnow()
        application.rejection_reason = reason if status == ApplicationStatus.REJECTED else None

    logger.info("Application %s set to %s by %s", application.id, status, admin.id)

    applicant = application.applicant
    if status == ApplicationStatus.APPROVED:
        outcome = mailer.send_application_approved_email(
            applicant.email, applicant.full_name, application.id, application.visa_type
        )
        notify_quietly(
            applicant.id,
            "Application approved",
            "Your visa application has been approved. You can now schedule your appointment.",
            type="success",
            application_id=application.id,
        )
    else:
        outcome = mailer.send_application_rejected_email(
            applicant.email,
            applicant.full_name,
            application.id,
            application.visa_type,
            reason,
        )
        notify_quietly(
            applicant.id,
            "Application rejected",
            reason or "Your visa application has been rejected.",
            type="error",
            application_id=application.id,
        )
    if not outcome.delivered:
        logger.info("Decision e-mail for %s not sent: %s", application.id, outcome.reason)

    _broadcast(application)
    return application, outcome


def list_applications(
    search: str | None = None,
    status: str | None = None,
    visa_type: str | None = None,
) -> list[dict]:
    """Every application with its applicant, newest first."""

    query = Application.query.join(User, Application.user_id == User.id)
    if status in ApplicationStatus.ALL:
        query = query.filter(Application.status == status)
    if visa_type in VisaType.ALL:
        query = query.filter(Application.visa_type == visa_type)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                User.full_name.ilike(pattern),
                User.email.ilike(pattern),
                Application.id.ilike(pattern),
            )
        )

    results = []
    for application in query.order_by(Application.created_at.desc()).all():
        row = ApplicationView.from_model(application).to_dict()
        row["user"] = {
            "fullName": application.applicant.full_name,
            "email": application.applicant.email,
        }
        results.append(row)
    return results


def _processing_time(applications: list[Application]) -> dict:
    durations = [
        (application.decided_at - application.created_at).total_seconds() / 86400
        for application in applications
        if application.decided_at and application.created_at
    ]
    if not durations:
        return {"average": None, "fastest": None, "slowest": None}
    return {
        "average": round(sum(durations) / len(durations), 1),
        "fastest": round(min(durations), 1),
        "slowest": round(max(durations), 1),
    }


def analytics(period: str = "month", now: datetime | None = None) -> dict:
    """Summary statistics for applications created within ``period``."""

    if period not in PERIODS:
        period = "month"
    now = now or datetime.utcnow()
    start = now - timedelta(days=PERIODS[period])

    applications = Application.query.filter(Application.created_at >= start).all()

    by_status = Counter(application.status for application in applications)
    by_visa = Counter(application.visa_type for application in applications)
    monthly = Counter(application.created_at.strftime("%Y-%m") for application in applications)
    approvals = Counter(
        application.decided_at.strftime("%Y-%m")
        for application in applications
        if application.decided_at and application.status in ApplicationStatus.LOCKED
    )

    appointment_total = Appointment.query.filter(
        Appointment.appointment_date >= start.date()
    ).count()

    return {
        "period": period,
        "applications": {
            "total": len(applications),
            "approved": by_status[ApplicationStatus.APPROVED],
            "inReview": by_status[ApplicationStatus.IN_REVIEW],
            "pendingDocuments": by_status[ApplicationStatus.PENDING_DOCUMENTS],
            "rejected": by_status[ApplicationStatus.REJECTED],
            "statusBreakdown": [
                {"status": status, "count": count} for status, count in sorted(by_status.items())
            ],
            "visaTypeBreakdown": [
                {"visaType": visa, "count": count} for visa, count in sorted(by_visa.items())
            ],
            "monthlyData": [
                {"month": month, "count": count} for month, count in sorted(monthly.items())
            ],
        },
        "appointments": {"total": appointment_total},
        "visaTypes": {visa: by_visa[visa] for visa in VisaType.ALL},
        "monthlyStats": [
            {"month": month, "applications": count, "approvals": approvals[month]}
            for month, count in sorted(monthly.items())
        ],
        "processingTime": _processing_time(applications),
    }


def list_appointments(on: date | None = None) -> list[dict]:
    query = (
        db.session.query(Appointment, Application, User)
        .join(Application, Appointment.application_id == Application.id)
        .join(User, Application.user_id == User.id)
    )
    if on is not None:
        query = query.filter(Appointment.appointment_date == on)

    rows = query.order_by(Appointment.appointment_date, Appointment.appointment_time).all()
    return [
        {
            "id": appointment.id,
            "applicationId": application.id,
            "date": appointment.appointment_date.isoformat(),
            "time": appointment.appointment_time,
            "location": appointment.location,
            "status": appointment.status,
            "confirmationLetterPath": appointment.confirmation_letter_path,
            "visaType": application.visa_type,
            "fullName": user.full_name,
            "email": user.email,
        }
        for appointment, application, user in rows
    ]
