"""Messaging endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from services import messaging
from services.views import MessageView
from utils.auth import require_user
from utils.request_validation import parse_json_request, parse_positive_int

messages_bp = Blueprint("messages", __name__)


@messages_bp.route("/conversations", methods=["GET"])
@jwt_required()
def list_conversations():
    user = require_user()
    return jsonify([summary.to_dict() for summary in messaging.get_conversations(user)])


@messages_bp.route("/conversations/<string:conversation_id>", methods=["GET"])
@jwt_required()
def get_conversation_messages(conversation_id: str):
    user = require_user()
    page = parse_positive_int(request.args.get("page"), "page", 1)
    limit = min(parse_positive_int(request.args.get("limit"), "limit", 50), 100)
    return jsonify(messaging.get_messages(user.id, conversation_id, page=page, limit=limit))


@messages_bp.route("", methods=["POST"])
@jwt_required()
def send_message():
    """Send a message, opening the conversation on first contact."""

    user = require_user()
    payload = parse_json_request(request)
    message = messaging.send_message(
        user.id,
        payload.get("recipientId"),
        payload.get("content"),
        payload.get("applicationId") or None,
    )
    return jsonify(MessageView.from_model(message).to_dict()), HTTPStatus.CREATED


@messages_bp.route("/<string:message_id>/read", methods=["PUT"])
@jwt_required()
def mark_message_read(message_id: str):
    user = require_user()
    return jsonify({"success": messaging.mark_message_read(user.id, message_id)})


@messages_bp.route("/conversations/<string:conversation_id>/read", methods=["PUT"])
@jwt_required()
def mark_conversation_read(conversation_id: str):
    user = require_user()
    updated = messaging.mark_conversation_read(user.id, conversation_id)
    return jsonify({"success": True, "updated": updated})


@messages_bp.route("/<string:message_id>", methods=["DELETE"])
@jwt_required()
def delete_message(message_id: str):
    user = require_user()
    messaging.delete_message(user.id, message_id)
    return jsonify({"success": True})


@messages_bp.route("/search", methods=["GET"])
@jwt_required()
def search_messages():
    user = require_user()
    return jsonify(
        messaging.search_messages(
            user.id,
            request.args.get("q", ""),
            request.args.get("applicationId") or None,
        )
    )
