"""JWT wiring and current-user helpers."""

from __future__ import annotations

from flask import g, jsonify
from flask_jwt_extended import JWTManager, create_access_token, get_current_user
from werkzeug.exceptions import Forbidden, Unauthorized

from models import db
from models.user import User


def issue_token(user: User) -> str:
    """Return a signed access token carrying the user's id and role."""

    return create_access_token(identity=user.id, additional_claims={"role": user.role})


def require_user() -> User:
    user = get_current_user()
    if user is None:
        raise Unauthorized("Not authorized, user not found.")
    return user


def require_admin() -> User:
    user = require_user()
    if not user.is_admin:
        raise Forbidden("Forbidden: requires admin role.")
    return user


def _error_response(message: str, status: int):
    response = jsonify(
        {"message": message, "error": "Unauthorized", "request_id": g.get("request_id")}
    )
    response.status_code = status
    return response


def init_jwt(jwt: JWTManager) -> None:
    """Register user loading and JSON error callbacks on the JWT manager."""

    @jwt.user_lookup_loader
    def _load_user(_jwt_header, jwt_data):
        return db.session.get(User, jwt_data["sub"])

    @jwt.user_lookup_error_loader
    def _user_not_found(_jwt_header, _jwt_data):
        return _error_response("Not authorized, user not found.", 401)

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _error_response("Not authorized, no token.", 401)

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _error_response("Not authorized, token failed.", 401)

    @jwt.expired_token_loader
    def _expired_token(_jwt_header, _jwt_data):
        return _error_response("Not authorized, token expired.", 401)
