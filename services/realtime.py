"""Process-local registry of live WebSocket connections.

One registry is created per application and kept in
``app.extensions["connection_registry"]``. A deployment running several
processes needs an external fan-out (pub/sub) behind the same interface.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Protocol

from flask import current_app

logger = logging.getLogger(__name__)

EXTENSION_KEY = "connection_registry"

NEW_MESSAGE = "NEW_MESSAGE"
NEW_NOTIFICATION = "NEW_NOTIFICATION"
NOTIFICATION_UPDATED = "NOTIFICATION_UPDATED"
NOTIFICATION_DELETED = "NOTIFICATION_DELETED"
APPLICATION_UPDATED = "APPLICATION_UPDATED"
CONNECTION_ESTABLISHED = "CONNECTION_ESTABLISHED"


class ConnectionHandle(Protocol):
    def send(self, data: str) -> None: ...

    def close(self, *args: Any, **kwargs: Any) -> None: ...


def envelope(event_type: str, payload: dict | None = None) -> dict:
    event: dict[str, Any] = {"type": event_type}
    if payload is not None:
        event["payload"] = payload
    return event


class ConnectionRegistry:
    """Maps a user id to at most one live connection; the newest wins."""

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionHandle] = {}
        self._lock = threading.Lock()

    def register(self, user_id: str, handle: ConnectionHandle) -> None:
        with self._lock:
            previous = self._connections.get(user_id)
            self._connections[user_id] = handle

        if previous is not None and previous is not handle:
            try:
                previous.close()
            except Exception:  # noqa: BLE001 - the old socket may already be gone
                logger.debug("Closing replaced connection for %s failed", user_id, exc_info=True)
        logger.info("Client connected: %s", user_id)

    def unregister(self, user_id: str, handle: ConnectionHandle | None = None) -> bool:
        """Drop the entry for ``user_id``.

        When ``handle`` is given the entry is removed only if it is still that
        handle, so a replaced socket closing late cannot evict its successor.
        """

        with self._lock:
            current = self._connections.get(user_id)
            if current is None or (handle is not None and current is not handle):
                return False
            del self._connections[user_id]
        logger.info("Client disconnected: %s", user_id)
        return True

    def is_connected(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._connections

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def send(self, user_id: str, event: dict) -> bool:
        """Deliver ``event`` to the user's live connection, if any.

        Returns False when the user is not connected or delivery fails; the
        event is dropped in both cases.
        """

        with self._lock:
            handle = self._connections.get(user_id)

        if handle is None:
            logger.info("Client %s not connected; dropped %s", user_id, event.get("type"))
            return False

        try:
            handle.send(json.dumps(event, default=str))
        except Exception:  # noqa: BLE001 - push is best effort
            logger.warning(
                "Failed to push %s to %s", event.get("type"), user_id, exc_info=True
            )
            return False

        logger.debug("Pushed %s to %s", event.get("type"), user_id)
        return True


def get_registry() -> ConnectionRegistry:
    return current_app.extensions[EXTENSION_KEY]


def push(user_id: str, event_type: str, payload: dict | None = None) -> bool:
    """Send an event envelope to ``user_id`` through the app's registry."""

    return get_registry().send(user_id, envelope(event_type, payload))
