# app/models/patient.py
from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Enum as SAEnum,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.utils.datetime_utils import utc_now


class PatientStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SmokingStatus(str, Enum):
    NEVER = "never"
    FORMER = "former"
    CURRENT = "current"


class ExerciseFrequency(str, Enum):
    NEVER = "never"
    RARELY = "rarely"
    MODERATE = "moderate"
    REGULAR = "regular"


class PreferredCommunication(str, Enum):
    EMAIL = "email"
    PHONE = "phone"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Patient(Base):
    """
    Demographic and medical-summary record.

    Patients are soft-classified through `status` (active/inactive); the hard
    delete endpoint removes the row together with its appointments.
    """

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Medical summary (lists of strings, validated at the API boundary)
    health_conditions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    medications: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    allergies: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    chronic_conditions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Lifestyle
    smoking_status: Mapped[SmokingStatus] = mapped_column(
        SAEnum(
            SmokingStatus,
            name="smoking_status_enum",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=False,
        default=SmokingStatus.NEVER,
    )
    exercise_frequency: Mapped[ExerciseFrequency] = mapped_column(
        SAEnum(
            ExerciseFrequency,
            name="exercise_frequency_enum",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=False,
        default=ExerciseFrequency.NEVER,
    )
    preferred_communication: Mapped[PreferredCommunication] = mapped_column(
        SAEnum(
            PreferredCommunication,
            name="preferred_communication_enum",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=False,
        default=PreferredCommunication.EMAIL,
    )

    status: Mapped[PatientStatus] = mapped_column(
        SAEnum(
            PatientStatus,
            name="patient_status_enum",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
            length=20,
        ),
        nullable=False,
        default=PatientStatus.ACTIVE,
        server_default=text("'active'"),
    )

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

    appointments: Mapped[list["Appointment"]] = relationship(  # noqa: F821
        "Appointment",
        back_populates="patient",
        cascade="all, delete-orphan",
    )
