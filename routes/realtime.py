"""WebSocket endpoint feeding the connection registry."""

from __future__ import annotations

import json
import logging

from flask import Blueprint, request
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_sock import Sock
from jwt.exceptions import InvalidTokenError
from simple_websocket import ConnectionClosed

from models import db
from models.user import User
from services.realtime import CONNECTION_ESTABLISHED, envelope, get_registry

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008

realtime_bp = Blueprint("realtime", __name__)
sock = Sock()


def authenticate_socket(token: str | None) -> User | None:
    """Resolve the user behind a ``?token=`` query parameter."""

    if not token:
        return None
    try:
        claims = decode_token(token)
    except (InvalidTokenError, JWTExtendedException):
        logger.info("Rejected WebSocket connection with an invalid token")
        return None
    return db.session.get(User, claims.get("sub"))


@sock.route("/ws", bp=realtime_bp)
def websocket(ws):
    user = authenticate_socket(request.args.get("token"))
    if user is None:
        ws.close(reason=POLICY_VIOLATION, message="Invalid token")
        return

    user_id = user.id
    db.session.remove()

    registry = get_registry()
    registry.register(user_id, ws)
    try:
        ws.send(json.dumps(envelope(CONNECTION_ESTABLISHED, {"userId": user_id})))
        while True:
            # Inbound frames carry nothing the server acts on.
            ws.receive()
    except ConnectionClosed:
        pass
    finally:
        registry.unregister(user_id, ws)
