"""Authenticated download of stored documents and appointment letters."""

from __future__ import annotations

import mimetypes

from flask import Blueprint, current_app, send_file
from flask_jwt_extended import jwt_required
from werkzeug.exceptions import NotFound

from models.application import Application
from models.appointment import Appointment
from models.document import Document
from models.user import User
from storage.local_storage import LocalStorage
from utils.auth import require_user

files_bp = Blueprint("files", __name__)


def _owns_file(user: User, path: str) -> bool:
    document = (
        Document.query.join(Application, Document.application_id == Application.id)
        .filter(Document.file_path == path, Application.user_id == user.id)
        .first()
    )
    if document is not None:
        return True
    letter = (
        Appointment.query.join(Application, Appointment.application_id == Application.id)
        .filter(Appointment.confirmation_letter_path == path, Application.user_id == user.id)
        .first()
    )
    return letter is not None


@files_bp.route("/<path:path>", methods=["GET"])
@jwt_required()
def download(path: str):
    """Serve a stored file to an administrator or to the applicant it belongs to."""

    user = require_user()
    if not user.is_admin and not _owns_file(user, path):
        raise NotFound("File not found.")

    storage = LocalStorage(current_app.config.get("UPLOAD_DIR"))
    try:
        absolute_path = storage.resolve(path)
    except ValueError as exc:
        raise NotFound("File not found.") from exc
    if not absolute_path.is_file():
        raise NotFound("File not found.")

    mimetype = mimetypes.guess_type(absolute_path.name)[0] or "application/octet-stream"
    return send_file(absolute_path, mimetype=mimetype)
