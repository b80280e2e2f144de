# app/models/notification.py
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class NotificationChannel(str, PyEnum):
    EMAIL = "EMAIL"


class NotificationStatus(str, PyEnum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


NOTIFICATION_CHANNEL_ENUM = SAEnum(
    NotificationChannel,
    name="notification_channel_enum",
    native_enum=False,
    length=20,
)

NOTIFICATION_STATUS_ENUM = SAEnum(
    NotificationStatus,
    name="notification_status_enum",
    native_enum=False,
    length=20,
)


class NotificationLog(Base):
    """
    Delivery log for outbound notifications.

    One row per job: written once the job has either been delivered or has
    exhausted its attempts. The appointment write never depends on it.
    """

    __tablename__ = "notification_logs"

    # Primary Key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign Keys
    appointment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("appointments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Notification Details
    channel: Mapped[NotificationChannel] = mapped_column(
        NOTIFICATION_CHANNEL_ENUM,
        nullable=False,
    )
    recipient: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Email address.",
    )
    subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str] = mapped_column(String(2000), nullable=False)

    # Status
    status: Mapped[NotificationStatus] = mapped_column(
        NOTIFICATION_STATUS_ENUM,
        nullable=False,
        server_default=text("'PENDING'"),
    )
    attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )
    error_message: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
