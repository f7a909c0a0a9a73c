"""Tests for conversations and messages."""

from __future__ import annotations

import json

import pytest
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.conversation import Conversation, Message
from models.user import User
from services import messaging
from services.realtime import get_registry


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("a", "b", ("a", "b")),
        ("b", "a", ("a", "b")),
        ("same", "same", ("same", "same")),
    ],
)
def test_canonical_pair(a, b, expected):
    assert messaging.canonical_pair(a, b) == expected


def test_both_directions_share_one_conversation(app, applicant_id, admin_id):
    with app.app_context():
        first = messaging.send_message(applicant_id, admin_id, "Hello, I have a question.")
        reply = messaging.send_message(admin_id, applicant_id, "Sure, go ahead.")

        assert first.conversation_id == reply.conversation_id
        conversation = db.session.get(Conversation, first.conversation_id)
        assert (conversation.participant_a, conversation.participant_b) == messaging.canonical_pair(
            applicant_id, admin_id
        )
        assert Conversation.query.count() == 1


def test_application_scoped_threads_are_separate(app, applicant_id, admin_id):
    with app.app_context():
        general = messaging.send_message(applicant_id, admin_id, "General question")
        scoped = messaging.send_message(applicant_id, admin_id, "About my file", "app-1")
        scoped_again = messaging.send_message(admin_id, applicant_id, "Noted", "app-1")

        assert general.conversation_id != scoped.conversation_id
        assert scoped.conversation_id == scoped_again.conversation_id
        assert Conversation.query.count() == 2


def test_send_message_pushes_to_connected_recipient(app, applicant_id, admin_id, make_socket):
    with app.app_context():
        socket = make_socket()
        get_registry().register(admin_id, socket)

        message = messaging.send_message(applicant_id, admin_id, "Ping")

        assert len(socket.sent) == 1
        event = json.loads(socket.sent[0])
        assert event["type"] == "NEW_MESSAGE"
        assert event["payload"]["message"]["id"] == message.id
        assert event["payload"]["message"]["senderId"] == applicant_id


def test_send_message_validation(app, applicant_id):
    with app.app_context():
        with pytest.raises(BadRequest):
            messaging.send_message(applicant_id, "someone", "   ")
        with pytest.raises(BadRequest):
            messaging.send_message(applicant_id, applicant_id, "Talking to myself")
        with pytest.raises(NotFound):
            messaging.send_message(applicant_id, "missing-user", "Hello")
        assert Message.query.count() == 0


def test_admin_sees_placeholders_for_uncontacted_applicants(app, admin_id, applicant_id, create_user):
    quiet_id = create_user("quiet@example.com", full_name="AARON QUIET")
    with app.app_context():
        messaging.send_message(applicant_id, admin_id, "Hi")
        admin = db.session.get(User, admin_id)

        summaries = messaging.get_conversations(admin)

    assert [summary.participantId for summary in summaries] == [applicant_id, quiet_id]
    assert summaries[0].lastMessage.content == "Hi"
    assert summaries[0].unreadCount == 1
    assert summaries[1].id == f"new-{quiet_id}"
    assert summaries[1].lastMessage is None
    assert summaries[1].participantRole == "APPLICANT"


def test_applicant_sees_only_existing_threads(app, admin_id, applicant_id):
    with app.app_context():
        applicant = db.session.get(User, applicant_id)
        assert messaging.get_conversations(applicant) == []

        messaging.send_message(admin_id, applicant_id, "Welcome")
        summaries = messaging.get_conversations(applicant)

    assert len(summaries) == 1
    assert summaries[0].participantName == "STAFF ADMIN"
    assert summaries[0].participantRole == "ADMIN"
    assert summaries[0].lastMessage.senderName == "STAFF ADMIN"


def test_conversation_routes(client, applicant_id, admin_id, create_user, auth_headers):
    applicant = auth_headers(applicant_id)
    admin = auth_headers(admin_id)

    sent = client.post(
        "/api/messages", json={"recipientId": admin_id, "content": "Need help"}, headers=applicant
    )
    assert sent.status_code == 201
    message = sent.get_json()
    assert message["isRead"] is False

    client.post("/api/messages", json={"recipientId": applicant_id, "content": "Happy to help"}, headers=admin)

    conversation_id = message["conversationId"]
    page = client.get(f"/api/messages/conversations/{conversation_id}?limit=1", headers=admin).get_json()
    assert [row["content"] for row in page["messages"]] == ["Need help"]
    assert page["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}

    outsider = auth_headers(create_user("outsider@example.com"))
    assert client.get(f"/api/messages/conversations/{conversation_id}", headers=outsider).status_code == 404

    assert client.put(f"/api/messages/{message['id']}/read", headers=applicant).get_json() == {"success": False}
    assert client.put(f"/api/messages/{message['id']}/read", headers=admin).get_json() == {"success": True}

    read_all = client.put(f"/api/messages/conversations/{conversation_id}/read", headers=applicant)
    assert read_all.get_json()["updated"] == 1


def test_send_message_route_validation(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)

    assert client.post("/api/messages", json={"content": "hi"}, headers=headers).status_code == 400
    missing = client.post(
        "/api/messages", json={"recipientId": "nobody", "content": "hi"}, headers=headers
    )
    assert missing.status_code == 404


def test_only_sender_can_delete(client, applicant_id, admin_id, auth_headers, app):
    sent = client.post(
        "/api/messages",
        json={"recipientId": admin_id, "content": "Oops"},
        headers=auth_headers(applicant_id),
    ).get_json()

    assert client.delete(f"/api/messages/{sent['id']}", headers=auth_headers(admin_id)).status_code == 404
    assert client.delete(f"/api/messages/{sent['id']}", headers=auth_headers(applicant_id)).status_code == 200
    with app.app_context():
        assert db.session.get(Message, sent["id"]) is None


def test_search_messages(client, applicant_id, admin_id, create_user, auth_headers, app):
    other_id = create_user("other@example.com")
    with app.app_context():
        messaging.send_message(applicant_id, admin_id, "My passport was renewed")
        messaging.send_message(applicant_id, admin_id, "Passport photo attached", "app-9")
        messaging.send_message(other_id, admin_id, "Passport question from someone else")

    headers = auth_headers(applicant_id)
    results = client.get("/api/messages/search?q=passport", headers=headers).get_json()
    assert len(results) == 2

    scoped = client.get("/api/messages/search?q=passport&applicationId=app-9", headers=headers).get_json()
    assert [row["content"] for row in scoped] == ["Passport photo attached"]

    assert client.get("/api/messages/search?q=", headers=headers).get_json() == []


def test_general_thread_is_unique_per_pair(app, applicant_id, admin_id):
    first, second = messaging.canonical_pair(applicant_id, admin_id)
    with app.app_context():
        db.session.add(Conversation(participant_a=first, participant_b=second))
        db.session.commit()

        db.session.add(Conversation(participant_a=first, participant_b=second))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

        db.session.add(
            Conversation(participant_a=first, participant_b=second, application_id="app-1")
        )
        db.session.commit()
        assert Conversation.query.count() == 2


def test_send_message_joins_thread_opened_concurrently(app, applicant_id, admin_id, monkeypatch):
    with app.app_context():
        existing = messaging.send_message(applicant_id, admin_id, "First message")
        real_find = messaging._find_conversation
        calls = []

        def stale_find(a, b, application_id):
            calls.append(application_id)
            if len(calls) == 1:
                return None
            return real_find(a, b, application_id)

        monkeypatch.setattr(messaging, "_find_conversation", stale_find)

        reply = messaging.send_message(admin_id, applicant_id, "Second message")

        assert len(calls) == 2
        assert reply.conversation_id == existing.conversation_id
        assert Conversation.query.count() == 1
        assert Message.query.count() == 2
