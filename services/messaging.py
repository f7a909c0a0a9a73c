"""Conversations and messages between applicants and staff."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.conversation import Conversation, Message
from models.statuses import UserRole
from models.user import User
from services import realtime
from services.views import ConversationSummary, LastMessageView, MessageView
from utils.transactions import atomic

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
PLACEHOLDER_PREFIX = "new-"


def canonical_pair(a: str, b: str) -> tuple[str, str]:
    """Order a participant pair so each pair has exactly one stored form."""

    return (a, b) if a <= b else (b, a)


def _find_conversation(a: str, b: str, application_id: str | None) -> Conversation | None:
    first, second = canonical_pair(a, b)
    query = Conversation.query.filter_by(participant_a=first, participant_b=second)
    if application_id is None:
        query = query.filter(Conversation.application_id.is_(None))
    else:
        query = query.filter(Conversation.application_id == application_id)
    return query.first()


def _append_message(
    sender_id: str, recipient_id: str, content: str, application_id: str | None
) -> Message:
    with atomic() as session:
        conversation = _find_conversation(sender_id, recipient_id, application_id)
        now = datetime.utcnow()
        if conversation is None:
            first, second = canonical_pair(sender_id, recipient_id)
            conversation = Conversation(
                participant_a=first,
                participant_b=second,
                application_id=application_id,
                created_at=now,
            )
            session.add(conversation)
        conversation.updated_at = now

        message = Message(
            conversation=conversation,
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            application_id=application_id,
            created_at=now,
        )
        session.add(message)
    return message


def send_message(
    sender_id: str,
    recipient_id: str,
    content: str,
    application_id: str | None = None,
) -> Message:
    """Append a message to the pair's thread, opening the thread if needed."""

    content = (content or "").strip()
    if not content or not recipient_id:
        raise BadRequest("Missing content or recipientId.")
    if recipient_id == sender_id:
        raise BadRequest("Cannot send a message to yourself.")
    if db.session.get(User, recipient_id) is None:
        raise NotFound("Recipient not found.")

    try:
        message = _append_message(sender_id, recipient_id, content, application_id)
    except IntegrityError:
        # A concurrent first message opened the same thread; it exists now.
        logger.info("Conversation for %s/%s opened concurrently; retrying", sender_id, recipient_id)
        message = _append_message(sender_id, recipient_id, content, application_id)

    realtime.push(
        recipient_id,
        realtime.NEW_MESSAGE,
        {"message": MessageView.from_model(message).to_dict()},
    )
    return message


def _summarize(conversation: Conversation, user_id: str) -> ConversationSummary:
    participant_id = conversation.other_participant(user_id)
    participant = db.session.get(User, participant_id)
    participant_name = participant.full_name if participant else "User"
    participant_role = (participant.role if participant else UserRole.APPLICANT).upper()

    last = conversation.messages.order_by(Message.created_at.desc()).first()
    last_view = None
    if last is not None:
        from_participant = last.sender_id == participant_id
        sender = participant if from_participant else db.session.get(User, last.sender_id)
        last_view = LastMessageView(
            id=last.id,
            content=last.content,
            senderId=last.sender_id,
            senderName=participant_name if from_participant else "You",
            senderRole=(sender.role if sender else UserRole.APPLICANT).upper(),
            timestamp=last.created_at.isoformat() if last.created_at else None,
            isRead=bool(last.is_read),
            applicationId=conversation.application_id,
        )

    unread = conversation.messages.filter_by(recipient_id=user_id, is_read=False).count()
    return ConversationSummary(
        id=conversation.id,
        participantId=participant_id,
        participantName=participant_name,
        participantRole=participant_role,
        lastMessage=last_view,
        unreadCount=unread,
        applicationId=conversation.application_id,
    )


def get_conversations(user: User) -> list[ConversationSummary]:
    """Conversation list for ``user``.

    Staff additionally see a ``new-<userId>`` placeholder for every
    applicant they have no thread with yet.
    """

    conversations = (
        Conversation.query.filter(
            or_(Conversation.participant_a == user.id, Conversation.participant_b == user.id)
        )
        .order_by(Conversation.updated_at.desc())
        .all()
    )
    summaries = [_summarize(conversation, user.id) for conversation in conversations]

    if user.is_admin:
        contacted = {summary.participantId for summary in summaries}
        applicants = User.query.filter(
            User.id != user.id, User.role != UserRole.ADMIN
        ).all()
        summaries.extend(
            ConversationSummary(
                id=f"{PLACEHOLDER_PREFIX}{applicant.id}",
                participantId=applicant.id,
                participantName=applicant.full_name,
                participantRole=UserRole.APPLICANT.upper(),
                lastMessage=None,
                unreadCount=0,
            )
            for applicant in applicants
            if applicant.id not in contacted
        )

    summaries.sort(key=lambda summary: (summary.lastMessage is None, summary.participantName.lower()))
    return summaries


def _participant_conversation(user_id: str, conversation_id: str) -> Conversation:
    conversation = db.session.get(Conversation, conversation_id)
    if conversation is None or not conversation.has_participant(user_id):
        raise NotFound("Conversation not found.")
    return conversation


def get_messages(user_id: str, conversation_id: str, *, page: int = 1, limit: int = 50) -> dict:
    conversation = _participant_conversation(user_id, conversation_id)
    query = conversation.messages.order_by(Message.created_at.asc())
    total = query.count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "messages": [MessageView.from_model(row).to_dict() for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


def mark_message_read(user_id: str, message_id: str) -> bool:
    updated = Message.query.filter_by(id=message_id, recipient_id=user_id).update(
        {Message.is_read: True}, synchronize_session=False
    )
    db.session.commit()
    return updated > 0


def mark_conversation_read(user_id: str, conversation_id: str) -> int:
    updated = Message.query.filter_by(
        conversation_id=conversation_id, recipient_id=user_id, is_read=False
    ).update({Message.is_read: True}, synchronize_session=False)
    db.session.commit()
    return updated


def delete_message(user_id: str, message_id: str) -> None:
    message = Message.query.filter_by(id=message_id, sender_id=user_id).first()
    if message is None:
        raise NotFound("Message not found.")
    db.session.delete(message)
    db.session.commit()


def search_messages(user_id: str, text: str, application_id: str | None = None) -> list[dict]:
    text = (text or "").strip()
    if not text:
        return []

    query = (
        Message.query.join(Conversation, Message.conversation_id == Conversation.id)
        .filter(
            or_(Conversation.participant_a == user_id, Conversation.participant_b == user_id),
            Message.content.ilike(f"%{text}%"),
        )
    )
    if application_id:
        query = query.filter(Message.application_id == application_id)

    rows = query.order_by(Message.created_at.desc()).limit(SEARCH_LIMIT).all()
    return [MessageView.from_model(row).to_dict() for row in rows]
