"""Administrator review endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from services import review
from services.views import ApplicationView, DocumentView
from utils.auth import require_admin
from utils.request_validation import parse_iso_date, parse_json_request

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/applications", methods=["GET"])
@jwt_required()
def list_applications():
    """List every application, optionally filtered."""

    require_admin()
    return jsonify(
        review.list_applications(
            search=request.args.get("search"),
            status=request.args.get("status"),
            visa_type=request.args.get("visaType"),
        )
    )


@admin_bp.route(
    "/applications/<string:application_id>/documents/<string:document_id>",
    methods=["PUT"],
)
@jwt_required()
def review_document(application_id: str, document_id: str):
    """Verify or reject a single document."""

    admin = require_admin()
    payload = parse_json_request(request, required_keys=("status",))
    document = review.review_document(
        admin,
        application_id,
        document_id,
        payload.get("status"),
        payload.get("rejectionReason"),
    )
    return jsonify(
        {
            "message": "Document status updated successfully.",
            "document": DocumentView.from_model(document).to_dict(),
        }
    )


@admin_bp.route("/applications/<string:application_id>/status", methods=["PUT"])
@jwt_required()
def decide_application(application_id: str):
    """Approve or reject an application."""

    admin = require_admin()
    payload = parse_json_request(request, required_keys=("status",))
    application, email = review.decide_application(
        admin,
        application_id,
        payload.get("status"),
        payload.get("rejectionReason"),
    )
    return jsonify(
        {
            "message": "Application status updated successfully.",
            "application": ApplicationView.from_model(application).to_dict(),
            "emailSent": email.delivered,
        }
    )


@admin_bp.route("/analytics", methods=["GET"])
@jwt_required()
def analytics():
    require_admin()
    return jsonify(review.analytics(request.args.get("period", "month")))


@admin_bp.route("/appointments", methods=["GET"])
@jwt_required()
def list_appointments():
    require_admin()
    raw_date = request.args.get("date")
    on = parse_iso_date(raw_date, "date") if raw_date else None
    return jsonify(review.list_appointments(on))
