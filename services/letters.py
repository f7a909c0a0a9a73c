"""Appointment confirmation letters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from flask import current_app, render_template

from services.mailer import VISA_TYPE_LABELS
from services.outcome import Outcome
from storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)

LETTER_FOLDER = "appointment_letters"


@dataclass
class LetterData:
    full_name: str
    email: str
    date_of_birth: date | None
    passport_number: str | None
    nationality: str | None
    appointment_date: date
    appointment_time: str
    location: str
    appointment_id: str
    application_id: str
    visa_type: str


def render_letter(data: LetterData) -> str:
    return render_template(
        "appointment_letter.html",
        full_name=data.full_name,
        email=data.email,
        date_of_birth=data.date_of_birth.strftime("%B %d, %Y") if data.date_of_birth else None,
        passport_number=data.passport_number,
        nationality=data.nationality,
        visa_label=VISA_TYPE_LABELS.get(data.visa_type, data.visa_type),
        application_id=data.application_id,
        appointment_id=data.appointment_id,
        appointment_date=data.appointment_date.strftime("%A, %B %d, %Y"),
        appointment_time=data.appointment_time,
        location=data.location,
        issued_on=datetime.utcnow().strftime("%B %d, %Y"),
    )


def generate_confirmation_letter(data: LetterData) -> Outcome:
    """Write the letter to storage; ``Outcome.detail`` holds the stored path."""

    try:
        content = render_letter(data)
        storage = LocalStorage(current_app.config.get("UPLOAD_DIR"))
        filename = (
            f"appointment_letter_{data.appointment_id}_"
            f"{int(datetime.utcnow().timestamp())}.html"
        )
        path = storage.write_text(content, filename, folder=LETTER_FOLDER)
    except Exception as exc:  # noqa: BLE001 - the appointment stands without a letter
        logger.exception("Error generating appointment letter for %s", data.appointment_id)
        return Outcome.skipped(str(exc))

    logger.info("Generated appointment letter %s", path)
    return Outcome.ok(path)
