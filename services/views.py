"""Response shapes returned by the REST endpoints."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime

from models.application import Application
from models.appointment import Appointment
from models.conversation import Message
from models.document import Document


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class DocumentView:
    id: str
    type: str
    status: str
    fileName: str | None = None
    filePath: str | None = None
    rejectionReason: str | None = None

    @classmethod
    def from_model(cls, document: Document) -> "DocumentView":
        return cls(
            id=document.id,
            type=document.document_type,
            status=document.status,
            fileName=document.file_name,
            filePath=document.file_path,
            rejectionReason=document.rejection_reason,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AppointmentView:
    id: str
    date: str | None
    time: str
    location: str
    status: str
    confirmationLetterPath: str | None = None

    @classmethod
    def from_model(cls, appointment: Appointment) -> "AppointmentView":
        return cls(
            id=appointment.id,
            date=_iso(appointment.appointment_date),
            time=appointment.appointment_time,
            location=appointment.location,
            status=appointment.status,
            confirmationLetterPath=appointment.confirmation_letter_path,
        )


@dataclass
class ApplicationView:
    id: str
    userId: str
    visaType: str
    status: str
    createdAt: str | None
    updatedAt: str | None
    documents: list[DocumentView] = field(default_factory=list)
    appointment: AppointmentView | None = None
    rejectionReason: str | None = None

    @classmethod
    def from_model(cls, application: Application) -> "ApplicationView":
        return cls(
            id=application.id,
            userId=application.user_id,
            visaType=application.visa_type,
            status=application.status,
            createdAt=_iso(application.created_at),
            updatedAt=_iso(application.updated_at),
            documents=[DocumentView.from_model(doc) for doc in application.documents],
            appointment=(
                AppointmentView.from_model(application.appointment)
                if application.appointment
                else None
            ),
            rejectionReason=application.rejection_reason,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MessageView:
    id: str
    content: str
    senderId: str
    recipientId: str
    timestamp: str | None
    isRead: bool
    conversationId: str
    applicationId: str | None = None

    @classmethod
    def from_model(cls, message: Message) -> "MessageView":
        return cls(
            id=message.id,
            content=message.content,
            senderId=message.sender_id,
            recipientId=message.recipient_id,
            timestamp=_iso(message.created_at),
            isRead=bool(message.is_read),
            conversationId=message.conversation_id,
            applicationId=message.application_id,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LastMessageView:
    id: str
    content: str
    senderId: str
    senderName: str
    senderRole: str
    timestamp: str | None
    isRead: bool
    applicationId: str | None = None


@dataclass
class ConversationSummary:
    id: str
    participantId: str
    participantName: str
    participantRole: str
    lastMessage: LastMessageView | None
    unreadCount: int
    applicationId: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)
