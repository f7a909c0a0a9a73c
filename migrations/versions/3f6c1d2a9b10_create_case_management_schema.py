"""Create users, applications, documents, appointments, messaging and notifications."""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f6c1d2a9b10"
down_revision = None
branch_labels = None
depends_on = None


USER_ROLE_VALUES = ("applicant", "admin")
VISA_TYPE_VALUES = ("VITEM_III", "VITEM_XI")
APPLICATION_STATUS_VALUES = (
    "NOT_STARTED",
    "PENDING_DOCUMENTS",
    "IN_REVIEW",
    "APPROVED",
    "APPOINTMENT_SCHEDULED",
    "REJECTED",
)
DOCUMENT_STATUS_VALUES = ("MISSING", "UPLOADED", "VERIFIED", "REJECTED")
APPOINTMENT_STATUS_VALUES = ("BOOKED", "CONFIRMED", "COMPLETED", "CANCELLED")
NOTIFICATION_TYPE_VALUES = ("info", "warning", "success", "error", "system")

ENUM_NAMES = (
    "notification_type",
    "appointment_status",
    "document_status",
    "application_status",
    "visa_type",
    "user_role",
)


def upgrade() -> None:
    """Create the case-management schema."""

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("full_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column(
            "role",
            sa.Enum(*USER_ROLE_VALUES, name="user_role"),
            nullable=False,
            server_default=sa.text("'applicant'"),
        ),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_token", sa.String(length=64), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("other_names", sa.String(length=100), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("national_id", sa.String(length=50), nullable=True),
        sa.Column("sex", sa.String(length=10), nullable=True),
        sa.Column("nationality", sa.String(length=100), nullable=True),
        sa.Column("passport_number", sa.String(length=15), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("department", sa.String(length=50), nullable=True),
        sa.Column("arrondissement", sa.String(length=50), nullable=True),
        sa.Column("notification_preferences", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_users_verification_token", "users", ["verification_token"], unique=False
    )

    op.create_table(
        "applications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("visa_type", sa.Enum(*VISA_TYPE_VALUES, name="visa_type"), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*APPLICATION_STATUS_VALUES, name="application_status"),
            nullable=False,
        ),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("decided_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_applications_user_id", "applications", ["user_id"], unique=False)

    op.create_table(
        "documents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "application_id",
            sa.String(length=36),
            sa.ForeignKey("applications.id"),
            nullable=False,
        ),
        sa.Column("document_type", sa.String(length=100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "status",
            sa.Enum(*DOCUMENT_STATUS_VALUES, name="document_status"),
            nullable=False,
            server_default=sa.text("'MISSING'"),
        ),
        sa.Column("file_name", sa.String(length=255), nullable=True),
        sa.Column("file_path", sa.String(length=512), nullable=True),
        sa.Column("file_type", sa.String(length=128), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("reviewer_id", sa.String(length=36), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_documents_application_id", "documents", ["application_id"], unique=False
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "application_id",
            sa.String(length=36),
            sa.ForeignKey("applications.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("appointment_time", sa.String(length=5), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*APPOINTMENT_STATUS_VALUES, name="appointment_status"),
            nullable=False,
        ),
        sa.Column("confirmation_letter_path", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_appointments_appointment_date", "appointments", ["appointment_date"], unique=False
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "participant_a", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "participant_b", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("application_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "participant_a",
            "participant_b",
            "application_id",
            name="uq_conversations_pair_application",
        ),
    )
    op.create_index(
        "ix_conversations_application_id", "conversations", ["application_id"], unique=False
    )
    op.create_index(
        "uq_conversations_pair_general",
        "conversations",
        ["participant_a", "participant_b"],
        unique=True,
        sqlite_where=sa.text("application_id IS NULL"),
        postgresql_where=sa.text("application_id IS NULL"),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "conversation_id",
            sa.String(length=36),
            sa.ForeignKey("conversations.id"),
            nullable=False,
        ),
        sa.Column("sender_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "recipient_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("application_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_messages_conversation_id", "messages", ["conversation_id"], unique=False
    )
    op.create_index("ix_messages_recipient_id", "messages", ["recipient_id"], unique=False)

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "type",
            sa.Enum(*NOTIFICATION_TYPE_VALUES, name="notification_type"),
            nullable=False,
        ),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("application_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"], unique=False)


def downgrade() -> None:
    """Drop the case-management schema."""

    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_messages_recipient_id", table_name="messages")
    op.drop_index("ix_messages_conversation_id", table_name="messages")
    op.drop_table("messages")
    op.drop_index("uq_conversations_pair_general", table_name="conversations")
    op.drop_index("ix_conversations_application_id", table_name="conversations")
    op.drop_table("conversations")
    op.drop_index("ix_appointments_appointment_date", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_documents_application_id", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_applications_user_id", table_name="applications")
    op.drop_table("applications")
    op.drop_index("ix_users_verification_token", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for name in ENUM_NAMES:
        sa.Enum(name=name).drop(bind, checkfirst=True)
