"""Application factory."""

import json
import logging
import os
import uuid

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from routes.admin import admin_bp
from routes.applications import applications_bp
from routes.auth import auth_bp
from routes.files import files_bp
from routes.messages import messages_bp
from routes.notifications import notifications_bp
from routes.realtime import realtime_bp, sock
from services.realtime import EXTENSION_KEY, ConnectionRegistry
from utils.auth import init_jwt

API_PREFIX = "/api"

migrate = Migrate()
jwt = JWTManager()
init_jwt(jwt)

# Endpoint -> config key holding its rate limit.
ROUTE_LIMITS = {
    "applications.create_application": "APPLICATION_RATE_LIMIT",
    "applications.upload_document": "UPLOAD_RATE_LIMIT",
    "messages.send_message": "MESSAGE_RATE_LIMIT",
}


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Core subsystems
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    sock.init_app(app)
    app.extensions[EXTENSION_KEY] = ConnectionRegistry()

    # CORS
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )

    # Ensure uploads directory exists
    upload_dir = app.config.get("UPLOAD_DIR")
    if upload_dir:
        os.makedirs(upload_dir, exist_ok=True)

    # Blueprints
    app.register_blueprint(auth_bp, url_prefix=f"{API_PREFIX}/auth")
    app.register_blueprint(applications_bp, url_prefix=f"{API_PREFIX}/applications")
    app.register_blueprint(admin_bp, url_prefix=f"{API_PREFIX}/admin")
    app.register_blueprint(messages_bp, url_prefix=f"{API_PREFIX}/messages")
    app.register_blueprint(notifications_bp, url_prefix=f"{API_PREFIX}/notifications")
    app.register_blueprint(files_bp, url_prefix=f"{API_PREFIX}/uploads")
    app.register_blueprint(realtime_bp)

    _init_rate_limits(app)

    # Health
    @app.route("/health", methods=["GET"])
    @app.route(f"{API_PREFIX}/health", methods=["GET"])
    def health_check():
        return jsonify({"status": "ok"})

    # Errors
    _register_error_handlers(app)

    return app


def _init_rate_limits(app: Flask) -> Limiter:
    storage_uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
    headers_enabled = app.config.get("RATELIMIT_HEADERS_ENABLED", True)
    key_prefix = app.config.get("RATELIMIT_KEY_PREFIX") or str(uuid.uuid4())

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[lambda: app.config.get("RATE_LIMIT", "200 per 15 minutes")],
        storage_uri=storage_uri,
        headers_enabled=headers_enabled,
        key_prefix=key_prefix,
    )
    limiter.init_app(app)
    app.config["RATELIMIT_KEY_PREFIX"] = key_prefix

    limiter.limit(lambda: app.config["AUTH_RATE_LIMIT"])(auth_bp)
    for endpoint, config_key in ROUTE_LIMITS.items():
        app.view_functions[endpoint] = limiter.limit(
            lambda config_key=config_key: app.config[config_key]
        )(app.view_functions[endpoint])
    limiter.exempt(app.view_functions["realtime.websocket"])

    app.extensions["rate_limiter"] = limiter
    return limiter


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error handlers with request IDs."""

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    @app.after_request
    def _add_request_id_header(response):
        request_id = g.get("request_id")
        if request_id:
            response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(HTTPException)
    def _handle_http_exception(error: HTTPException):
        request_id = g.get("request_id") or str(uuid.uuid4())
        response = error.get_response()
        payload = {
            "message": error.description,
            "error": getattr(error, "name", "Error"),
            "request_id": request_id,
        }
        response.data = json.dumps(payload)
        response.content_type = "application/json"
        response.headers.setdefault("X-Request-ID", request_id)
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        request_id = g.get("request_id") or str(uuid.uuid4())
        db.session.rollback()
        app.logger.exception("Unhandled application error", exc_info=error)
        payload = {
            "message": "An unexpected error occurred.",
            "error": "Internal Server Error",
            "request_id": request_id,
        }
        response = jsonify(payload)
        response.status_code = 500
        response.headers.setdefault("X-Request-ID", request_id)
        return response


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
