"""Applicant-facing application, document and appointment endpoints."""

from __future__ import annotations

import os
from http import HTTPStatus
from typing import Iterable

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from werkzeug.datastructures import FileStorage
from werkzeug.exceptions import BadRequest

from services import lifecycle
from services.applications import (
    fetch_application_view,
    get_owned_application,
    list_application_views,
)
from services.errors import ApplicationNotFound
from services.views import ApplicationView, DocumentView
from utils.auth import require_user
from utils.request_validation import (
    parse_iso_date,
    parse_json_request,
    parse_time,
    require_string,
)

applications_bp = Blueprint("applications", __name__)

MAX_UPLOAD_SIZE_DEFAULT = 10 * 1024 * 1024  # 10 MB
ALLOWED_EXTENSIONS_DEFAULT = {"jpeg", "jpg", "png", "webp", "pdf"}


def _allowed_extensions() -> set[str]:
    configured = current_app.config.get("ALLOWED_UPLOAD_TYPES")
    if not configured:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if isinstance(configured, str):
        values: Iterable[str] = configured.split(",")
    else:
        values = configured

    normalized = {raw.strip().lower().lstrip(".") for raw in values if isinstance(raw, str)}
    normalized.discard("")
    if not normalized:
        return set(ALLOWED_EXTENSIONS_DEFAULT)
    if "jpeg" in normalized or "jpg" in normalized:
        normalized.update({"jpg", "jpeg"})
    return normalized


def _validate_document(file: FileStorage) -> None:
    if file.filename is None or file.filename.strip() == "":
        raise BadRequest("No file uploaded.")

    extension = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    allowed = _allowed_extensions()
    if extension not in allowed:
        raise BadRequest(
            f"Invalid file type. Allowed types: {', '.join(sorted(allowed))}."
        )

    max_size = int(current_app.config.get("MAX_UPLOAD_SIZE", MAX_UPLOAD_SIZE_DEFAULT))
    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    if size > max_size:
        raise BadRequest(
            f"File exceeds the maximum upload size of {max_size // (1024 * 1024)}MB."
        )


def _personal_info(payload: dict) -> dict | None:
    info = payload.get("personalInfo")
    if info is None:
        return None
    if not isinstance(info, dict):
        raise BadRequest("personalInfo must be an object.")
    return {
        "dateOfBirth": parse_iso_date(info.get("dateOfBirth"), "personalInfo.dateOfBirth"),
        "passportNumber": require_string(
            info, "passportNumber", min_length=6, max_length=15
        ),
        "nationality": require_string(info, "nationality", min_length=2, max_length=100),
    }


@applications_bp.route("", methods=["GET"])
@jwt_required()
def get_latest_application():
    """Return the caller's most recent application."""

    user = require_user()
    view = fetch_application_view(user.id)
    if view is None:
        raise ApplicationNotFound()
    return jsonify(view.to_dict())


@applications_bp.route("", methods=["POST"])
@jwt_required()
def create_application():
    """Start a new application for the requested visa type."""

    user = require_user()
    payload = parse_json_request(request, required_keys=("visaType",))
    application = lifecycle.create_application(user, payload.get("visaType"))
    return jsonify(ApplicationView.from_model(application).to_dict()), HTTPStatus.CREATED


@applications_bp.route("/all", methods=["GET"])
@jwt_required()
def list_applications():
    user = require_user()
    return jsonify([view.to_dict() for view in list_application_views(user.id)])


@applications_bp.route("/<string:application_id>", methods=["GET"])
@jwt_required()
def get_application(application_id: str):
    user = require_user()
    application = get_owned_application(user.id, application_id)
    return jsonify(ApplicationView.from_model(application).to_dict())


@applications_bp.route("/<string:application_id>", methods=["PUT"])
@jwt_required()
def edit_application(application_id: str):
    """Switch the visa type, resetting the document checklist."""

    user = require_user()
    payload = parse_json_request(request, required_keys=("visaType",))
    application, changed = lifecycle.edit_application(
        user, application_id, payload.get("visaType")
    )
    if not changed:
        return jsonify({"message": "No changes needed"})
    return jsonify(
        {
            "message": "Application updated successfully",
            "application": ApplicationView.from_model(application).to_dict(),
        }
    )


@applications_bp.route("/<string:application_id>", methods=["DELETE"])
@jwt_required()
def delete_application(application_id: str):
    user = require_user()
    lifecycle.delete_application(user, application_id)
    return jsonify({"message": "Application deleted successfully"})


@applications_bp.route("/documents/<string:document_id>", methods=["POST"])
@jwt_required()
def upload_document(document_id: str):
    """Attach a file to a checklist entry of one of the caller's applications."""

    user = require_user()

    file = request.files.get("document")
    if not isinstance(file, FileStorage):
        raise BadRequest("No file uploaded.")
    _validate_document(file)

    document = lifecycle.upload_document(user, document_id, file)
    return jsonify(
        {
            "message": "File uploaded successfully.",
            "document": DocumentView.from_model(document).to_dict(),
            "applicationStatus": document.application.status,
        }
    )


@applications_bp.route("/appointment", methods=["POST"])
@jwt_required()
def schedule_appointment():
    """Book the appointment for an approved application."""

    user = require_user()
    payload = parse_json_request(request, required_keys=("date", "time"))

    appointment_date = parse_iso_date(payload.get("date"), "date")
    appointment_time = parse_time(payload.get("time"))
    personal_info = _personal_info(payload)
    application_id = payload.get("applicationId") or None

    appointment, letter = lifecycle.schedule_appointment(
        user,
        appointment_date,
        appointment_time,
        personal_info=personal_info,
        application_id=application_id,
    )
    return (
        jsonify(
            {
                "message": "Appointment scheduled successfully.",
                "appointmentId": appointment.id,
                "confirmationGenerated": letter.delivered,
            }
        ),
        HTTPStatus.CREATED,
    )


@applications_bp.route("/appointments/availability", methods=["GET"])
@jwt_required()
def appointment_availability():
    require_user()
    try:
        month = int(request.args.get("month", ""))
        year = int(request.args.get("year", ""))
    except ValueError as exc:
        raise BadRequest("Invalid month or year.") from exc
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise BadRequest("Invalid month or year.")

    availability = lifecycle.appointment_availability(year, month)
    return jsonify({str(day): entry for day, entry in availability.items()})
