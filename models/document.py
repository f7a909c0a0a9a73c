"""Document model definition."""

import uuid
from datetime import datetime

from . import db
from .statuses import DocumentStatus


class Document(db.Model):
    """One entry of an application's required-document checklist."""

    __tablename__ = "documents"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    application_id = db.Column(
        db.String(36),
        db.ForeignKey("applications.id"),
        nullable=False,
        index=True,
    )
    document_type = db.Column(db.String(100), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(
        db.Enum(*DocumentStatus.ALL, name="document_status"),
        nullable=False,
        default=DocumentStatus.MISSING,
        server_default=db.text("'MISSING'"),
    )
    file_name = db.Column(db.String(255), nullable=True)
    file_path = db.Column(db.String(512), nullable=True)
    file_type = db.Column(db.String(128), nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    reviewer_id = db.Column(db.String(36), nullable=True)
    uploaded_at = db.Column(db.DateTime, nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        server_default=db.func.now(),
    )

    application = db.relationship("Application", back_populates="documents")

    def __repr__(self) -> str:
        return (
            f"<Document id={self.id} type={self.document_type!r} status={self.status}>"
        )
