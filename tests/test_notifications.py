"""Tests for in-app notifications."""

from __future__ import annotations

import json

import pytest
from werkzeug.exceptions import BadRequest

from models import db
from models.notification import Notification
from services import notifications
from services.realtime import get_registry


def _seed(app, user_id, count=3):
    with app.app_context():
        return [
            notifications.create_notification(user_id, f"Title {index}", f"Body {index}").id
            for index in range(count)
        ]


def test_create_notification_pushes_event(app, applicant_id, make_socket):
    socket = make_socket()
    with app.app_context():
        get_registry().register(applicant_id, socket)

        notification = notifications.create_notification(
            applicant_id, "Welcome", "Your account is ready.", type="success"
        )

        assert notification.is_read is False

    event = json.loads(socket.sent[0])
    assert event["type"] == "NEW_NOTIFICATION"
    assert event["payload"]["notification"]["title"] == "Welcome"
    assert event["payload"]["notification"]["type"] == "success"


def test_create_notification_rejects_unknown_type(app, applicant_id):
    with app.app_context():
        with pytest.raises(BadRequest):
            notifications.create_notification(applicant_id, "T", "M", type="urgent")
        assert Notification.query.count() == 0


def test_list_and_paginate(client, app, applicant_id, auth_headers):
    _seed(app, applicant_id, count=3)
    headers = auth_headers(applicant_id)

    response = client.get("/api/notifications?limit=2", headers=headers)

    assert response.status_code == 200
    body = response.get_json()
    assert len(body["notifications"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    second = client.get("/api/notifications?limit=2&page=2", headers=headers).get_json()
    assert len(second["notifications"]) == 1

    assert client.get("/api/notifications?page=0", headers=headers).status_code == 400


def test_mark_read_and_unread_count(client, app, applicant_id, auth_headers, make_socket):
    ids = _seed(app, applicant_id, count=2)
    headers = auth_headers(applicant_id)
    socket = make_socket()
    app.extensions["connection_registry"].register(applicant_id, socket)

    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {"count": 2}

    response = client.put(f"/api/notifications/{ids[0]}/read", headers=headers)

    assert response.status_code == 200
    assert response.get_json()["is_read"] is True
    assert json.loads(socket.sent[-1])["type"] == "NOTIFICATION_UPDATED"
    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {"count": 1}

    unread = client.get("/api/notifications?unreadOnly=true", headers=headers).get_json()
    assert [row["id"] for row in unread["notifications"]] == [ids[1]]


def test_mark_all_read(client, app, applicant_id, auth_headers):
    _seed(app, applicant_id, count=3)
    headers = auth_headers(applicant_id)

    response = client.put("/api/notifications/read-all", headers=headers)

    assert response.get_json()["updated"] == 3
    assert client.get("/api/notifications/unread-count", headers=headers).get_json() == {"count": 0}


def test_notifications_are_owner_scoped(client, app, applicant_id, create_user, auth_headers):
    ids = _seed(app, applicant_id, count=1)
    stranger = auth_headers(create_user("stranger@example.com"))

    assert client.put(f"/api/notifications/{ids[0]}/read", headers=stranger).status_code == 404
    assert client.delete(f"/api/notifications/{ids[0]}", headers=stranger).status_code == 404


def test_delete_notification(client, app, applicant_id, auth_headers, make_socket):
    ids = _seed(app, applicant_id, count=1)
    socket = make_socket()
    app.extensions["connection_registry"].register(applicant_id, socket)

    response = client.delete(f"/api/notifications/{ids[0]}", headers=auth_headers(applicant_id))

    assert response.status_code == 200
    assert json.loads(socket.sent[-1]) == {
        "type": "NOTIFICATION_DELETED",
        "payload": {"id": ids[0]},
    }
    with app.app_context():
        assert db.session.get(Notification, ids[0]) is None


def test_preferences_roundtrip(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)

    defaults = client.get("/api/notifications/preferences", headers=headers).get_json()
    assert defaults["email"]["systemAnnouncements"] is False

    updated = client.put(
        "/api/notifications/preferences",
        json={"email": {"systemAnnouncements": True}},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.get_json()["email"]["systemAnnouncements"] is True

    stored = client.get("/api/notifications/preferences", headers=headers).get_json()
    assert stored["email"]["systemAnnouncements"] is True
    assert stored["push"]["applicationUpdates"] is True


@pytest.mark.parametrize(
    "payload",
    [
        {"sms": {"applicationUpdates": True}},
        {"email": {"unknownFlag": True}},
        {"email": {"applicationUpdates": "yes"}},
        {"email": True},
    ],
)
def test_preferences_validation(client, applicant_id, auth_headers, payload):
    response = client.put(
        "/api/notifications/preferences", json=payload, headers=auth_headers(applicant_id)
    )

    assert response.status_code == 400


def test_vapid_key_endpoint(client, app, monkeypatch):
    monkeypatch.setitem(app.config, "VAPID_PUBLIC_KEY", "BPublicKey")

    assert client.get("/api/notifications/vapid-key").get_json() == {"publicKey": "BPublicKey"}
