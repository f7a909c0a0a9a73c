"""Authentication blueprint: registration, login and e-mail verification."""

from __future__ import annotations

import logging
import secrets
from http import HTTPStatus

from flask import Blueprint, g, jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy import func
from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    InternalServerError,
    NotFound,
    Unauthorized,
)

from models import db
from models.statuses import UserRole
from models.user import User
from services import mailer
from utils.auth import issue_token, require_user
from utils.request_validation import (
    EMAIL_PATTERN,
    parse_iso_date,
    parse_json_request,
    require_string,
)

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

SEX_VALUES = {"male", "female", "other"}
# additionalData key -> (model attribute, max length)
PROFILE_FIELDS = {
    "firstName": ("first_name", 100),
    "lastName": ("last_name", 100),
    "otherNames": ("other_names", 100),
    "phone": ("phone", 20),
    "nationalId": ("national_id", 50),
    "nationality": ("nationality", 100),
    "address": ("address", 500),
    "department": ("department", 50),
    "arrondissement": ("arrondissement", 50),
}


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower() if isinstance(raw_email, str) else ""


def _find_by_email(email: str) -> User | None:
    return User.query.filter(func.lower(User.email) == email).first()


def _apply_profile(user: User, extra: object) -> None:
    if extra is None:
        return
    if not isinstance(extra, dict):
        raise BadRequest("additionalData must be an object.")

    for key, (attribute, max_length) in PROFILE_FIELDS.items():
        value = require_string(extra, key, max_length=max_length, required=False)
        if value is not None:
            setattr(user, attribute, value.upper())

    if extra.get("dateOfBirth"):
        user.date_of_birth = parse_iso_date(extra.get("dateOfBirth"), "dateOfBirth")

    sex = require_string(extra, "sex", required=False)
    if sex is not None:
        if sex.lower() not in SEX_VALUES:
            raise BadRequest("sex must be one of: male, female, other.")
        user.sex = sex.upper()


@auth_bp.route("/register", methods=["POST"])
def register():
    """Create an applicant account and send the verification e-mail."""

    payload = parse_json_request(request, required_keys=("fullName", "email", "password"))
    full_name = require_string(payload, "fullName", min_length=3, max_length=100)
    email = _normalize_email(payload.get("email"))
    password = payload.get("password")

    if not EMAIL_PATTERN.match(email):
        raise BadRequest("email must be a valid email address.")
    if not isinstance(password, str) or len(password) < 6:
        raise BadRequest("password must be at least 6 characters long.")

    if _find_by_email(email) is not None:
        raise Conflict("User with this email already exists.")

    user = User(
        full_name=full_name.upper(),
        email=email,
        role=UserRole.APPLICANT,
        email_verified=False,
        verification_token=secrets.token_hex(32),
    )
    user.set_password(password)
    _apply_profile(user, payload.get("additionalData"))

    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.id)

    outcome = mailer.send_verification_email(user.email, user.verification_token, user.full_name)
    message = (
        "Registration successful. Please check your email to verify your account."
        if outcome.delivered
        else "Registration successful, but the verification email could not be sent."
    )
    return jsonify({"message": message, "emailSent": outcome.delivered}), HTTPStatus.CREATED


@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate a user and return a JWT access token."""

    payload = parse_json_request(request, required_keys=("email", "password"))
    email = _normalize_email(payload.get("email"))
    password = payload.get("password") or ""

    user = _find_by_email(email)
    if user is None or not user.check_password(password):
        raise Unauthorized("Invalid credentials.")

    if not user.email_verified:
        response = jsonify(
            {
                "message": "Please verify your email before logging in.",
                "error": "Forbidden",
                "emailVerified": False,
                "request_id": g.get("request_id"),
            }
        )
        response.status_code = HTTPStatus.FORBIDDEN
        return response

    return jsonify({"token": issue_token(user), "user": user.to_dict()})


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = require_user()
    return jsonify(user.to_dict())


@auth_bp.route("/verify-email/<string:token>", methods=["GET"])
def verify_email(token: str):
    """Confirm an e-mail address from the link sent at registration."""

    user = User.query.filter_by(verification_token=token).first()
    if user is None:
        raise BadRequest("Invalid or expired verification token.")
    if user.email_verified:
        return jsonify({"message": "Email already verified.", "alreadyVerified": True})

    user.mark_email_verified()
    db.session.commit()
    logger.info("Verified e-mail for %s", user.id)

    mailer.send_welcome_email(user.email, user.full_name)
    return jsonify({"message": "Email verified successfully.", "alreadyVerified": False})


@auth_bp.route("/resend-verification", methods=["POST"])
def resend_verification():
    payload = parse_json_request(request, required_keys=("email",))
    user = _find_by_email(_normalize_email(payload.get("email")))
    if user is None:
        raise NotFound("User not found.")
    if user.email_verified:
        raise BadRequest("Email is already verified.")

    user.verification_token = secrets.token_hex(32)
    db.session.commit()

    outcome = mailer.send_verification_email(user.email, user.verification_token, user.full_name)
    if not outcome.delivered:
        raise InternalServerError("Failed to send verification email.")
    return jsonify({"message": "Verification email sent."})
