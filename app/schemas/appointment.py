# app/schemas/appointment.py
from pydantic import Field, PositiveInt, computed_field

from app.models.appointment import AppointmentStatus
from app.schemas.base import CamelModel, UTCDateTime
from app.services.appointment_status import actions_for


class AppointmentCreate(CamelModel):
    patient_id: PositiveInt
    doctor_id: PositiveInt | None = None
    scheduled_at: UTCDateTime = Field(alias="date")
    notes: str | None = Field(default=None, max_length=2000)

    # Teleconsultation details (optional)
    is_teleconsultation: bool = False
    meeting_url: str | None = Field(default=None, max_length=500)
    duration_minutes: int | None = Field(default=None, gt=0, le=480)


class AppointmentUpdate(CamelModel):
    """Partial update of editable fields; status is changed through /status only."""

    patient_id: PositiveInt | None = None
    doctor_id: PositiveInt | None = None
    scheduled_at: UTCDateTime | None = Field(default=None, alias="date")
    notes: str | None = Field(default=None, max_length=2000)
    is_teleconsultation: bool | None = None
    meeting_url: str | None = Field(default=None, max_length=500)
    duration_minutes: int | None = Field(default=None, gt=0, le=480)


class AppointmentStatusUpdate(CamelModel):
    # Free-form here so unknown values get a 400 listing the valid ones
    status: str


class AppointmentReschedule(CamelModel):
    scheduled_at: UTCDateTime = Field(alias="date")
    reason: str | None = Field(default=None, max_length=500)


class PatientSummary(CamelModel):
    id: int
    name: str
    email: str | None = None
    phone: str | None = None


class DoctorSummary(CamelModel):
    id: int
    name: str
    email: str | None = None


class AppointmentResponse(CamelModel):
    id: int
    patient_id: int
    doctor_id: int | None = None
    scheduled_at: UTCDateTime = Field(alias="date")
    status: AppointmentStatus
    notes: str | None = None
    actual_start_time: UTCDateTime | None = None

    is_teleconsultation: bool = False
    meeting_url: str | None = None
    duration_minutes: int | None = None

    created_at: UTCDateTime | None = None
    updated_at: UTCDateTime | None = None

    patient: PatientSummary | None = None
    doctor: DoctorSummary | None = None

    @computed_field(alias="availableActions")
    @property
    def available_actions(self) -> list[str]:
        return actions_for(self.status)
