# app/models/appointment.py
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.doctor import Doctor
from app.models.patient import Patient
from app.utils.datetime_utils import utc_now


class AppointmentStatus(str, PyEnum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Stored as VARCHAR + CHECK constraint so the same schema works on SQLite and Postgres
APPOINTMENT_STATUS_ENUM = SAEnum(
    AppointmentStatus,
    name="appointment_status_enum",
    native_enum=False,
    create_constraint=True,
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    length=20,
)


class Appointment(Base):
    __tablename__ = "appointments"

    # Primary Key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Foreign Keys
    patient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    doctor_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("doctors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Appointment Details
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        APPOINTMENT_STATUS_ENUM,
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
        server_default=text("'scheduled'"),
    )
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    # Consultation lifecycle
    actual_start_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="When the consultation actually began; feeds wait-time predictions",
    )

    # Teleconsultation details
    is_teleconsultation: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    meeting_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        doc="Planned length; slot calculations assume 30 minutes when unset",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
    )

    patient: Mapped["Patient"] = relationship("Patient", back_populates="appointments")
    doctor: Mapped["Doctor | None"] = relationship("Doctor")
