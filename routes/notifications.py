"""In-app notification endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from services import notifications
from utils.auth import require_user
from utils.request_validation import parse_bool, parse_json_request, parse_positive_int

notifications_bp = Blueprint("notifications", __name__)


@notifications_bp.route("", methods=["GET"])
@jwt_required()
def list_notifications():
    user = require_user()
    page = parse_positive_int(request.args.get("page"), "page", 1)
    limit = min(parse_positive_int(request.args.get("limit"), "limit", 20), 100)
    unread_only = bool(parse_bool(request.args.get("unreadOnly")))
    return jsonify(
        notifications.list_notifications(
            user.id, page=page, limit=limit, unread_only=unread_only
        )
    )


@notifications_bp.route("/unread-count", methods=["GET"])
@jwt_required()
def unread_count():
    user = require_user()
    return jsonify({"count": notifications.unread_count(user.id)})


@notifications_bp.route("/read-all", methods=["PUT"])
@jwt_required()
def mark_all_read():
    user = require_user()
    updated = notifications.mark_all_read(user.id)
    return jsonify({"message": "All notifications marked as read.", "updated": updated})


@notifications_bp.route("/<string:notification_id>/read", methods=["PUT"])
@jwt_required()
def mark_read(notification_id: str):
    user = require_user()
    notification = notifications.mark_read(user.id, notification_id)
    return jsonify(notification.to_dict())


@notifications_bp.route("/<string:notification_id>", methods=["DELETE"])
@jwt_required()
def delete_notification(notification_id: str):
    user = require_user()
    notifications.delete_notification(user.id, notification_id)
    return jsonify({"message": "Notification deleted."})


@notifications_bp.route("/preferences", methods=["GET"])
@jwt_required()
def get_preferences():
    user = require_user()
    return jsonify(user.get_notification_preferences())


@notifications_bp.route("/preferences", methods=["PUT"])
@jwt_required()
def update_preferences():
    """Update e-mail/push preference flags for the caller."""

    user = require_user()
    payload = parse_json_request(request)
    return jsonify(notifications.update_preferences(user, payload))


@notifications_bp.route("/vapid-key", methods=["GET"])
def vapid_key():
    return jsonify({"publicKey": current_app.config.get("VAPID_PUBLIC_KEY") or None})
