# app/services/appointment_service.py
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.appointment import Appointment, AppointmentStatus
from app.models.doctor import Doctor
from app.models.patient import Patient
from app.schemas.appointment import AppointmentCreate, AppointmentUpdate
from app.services.appointment_status import ensure_transition, parse_status
from app.services.doctor_service import DoctorNotFoundError
from app.services.patient_service import PatientNotFoundError
from app.utils.datetime_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


class AppointmentNotFoundError(Exception):
    def __init__(self, appointment_id: int):
        self.appointment_id = appointment_id
        super().__init__(f"Appointment {appointment_id} not found")


class AppointmentStateError(Exception):
    """Raised when a lifecycle action does not apply to the appointment's current state."""


def _with_relations(db: Session):
    return db.query(Appointment).options(
        joinedload(Appointment.patient),
        joinedload(Appointment.doctor),
    )


def _ensure_references(db: Session, *, patient_id: int | None, doctor_id: int | None) -> None:
    if patient_id is not None and not db.query(Patient.id).filter(Patient.id == patient_id).first():
        raise PatientNotFoundError(patient_id)
    if doctor_id is not None and not db.query(Doctor.id).filter(Doctor.id == doctor_id).first():
        raise DoctorNotFoundError(doctor_id)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def list_appointments(
    db: Session,
    *,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    doctor_id: int | None = None,
    patient_id: int | None = None,
    status: AppointmentStatus | None = None,
) -> list[Appointment]:
    """
    Appointment listing with optional filters, newest first.
    """
    query = _with_relations(db)

    if doctor_id is not None:
        query = query.filter(Appointment.doctor_id == doctor_id)
    if patient_id is not None:
        query = query.filter(Appointment.patient_id == patient_id)
    if status is not None:
        query = query.filter(Appointment.status == status)
    if from_date is not None:
        query = query.filter(Appointment.scheduled_at >= as_utc(from_date))
    if to_date is not None:
        query = query.filter(Appointment.scheduled_at <= as_utc(to_date))

    return query.order_by(Appointment.scheduled_at.desc(), Appointment.id.desc()).all()


def list_doctor_appointments(db: Session, doctor_id: int) -> list[Appointment]:
    """All of a doctor's appointments, the input for scheduling analytics."""
    return db.query(Appointment).filter(Appointment.doctor_id == doctor_id).all()


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    appointment = _with_relations(db).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise AppointmentNotFoundError(appointment_id)
    return appointment


def create_appointment(db: Session, payload: AppointmentCreate) -> Appointment:
    """
    Persist a new appointment in `scheduled` state.

    Past dates are accepted so historical visits can be recorded.
    """
    _ensure_references(db, patient_id=payload.patient_id, doctor_id=payload.doctor_id)

    appointment = Appointment(
        patient_id=payload.patient_id,
        doctor_id=payload.doctor_id,
        scheduled_at=as_utc(payload.scheduled_at),
        notes=payload.notes,
        status=AppointmentStatus.SCHEDULED,
        is_teleconsultation=payload.is_teleconsultation,
        meeting_url=payload.meeting_url,
        duration_minutes=payload.duration_minutes,
    )
    db.add(appointment)
    _commit(db)
    logger.info(
        "Created appointment id=%s patient=%s doctor=%s at %s",
        appointment.id,
        appointment.patient_id,
        appointment.doctor_id,
        as_utc(appointment.scheduled_at).isoformat(),
    )
    return get_appointment(db, appointment.id)


def update_status(db: Session, appointment_id: int, value: str) -> Appointment:
    """
    Change only the status field.

    Raises InvalidStatusError for values outside the enumeration and
    InvalidStatusTransitionError when the lifecycle forbids the move.
    Writing the current status again is a successful no-op.
    """
    requested = parse_status(value)
    appointment = get_appointment(db, appointment_id)
    current = AppointmentStatus(appointment.status)

    ensure_transition(current, requested)
    if current == requested:
        return appointment

    appointment.status = requested
    _commit(db)
    logger.info("Appointment id=%s status %s -> %s", appointment_id, current.value, requested.value)
    return get_appointment(db, appointment_id)


def update_appointment(db: Session, appointment_id: int, payload: AppointmentUpdate) -> Appointment:
    """
    Partial update of editable fields. Status is left untouched.
    """
    appointment = get_appointment(db, appointment_id)
    update_data = payload.model_dump(exclude_unset=True)

    for required in ("patient_id", "scheduled_at"):
        if required in update_data and update_data[required] is None:
            raise ValueError(f"{required} cannot be null")

    _ensure_references(
        db,
        patient_id=update_data.get("patient_id"),
        doctor_id=update_data.get("doctor_id"),
    )

    if "scheduled_at" in update_data:
        update_data["scheduled_at"] = as_utc(update_data["scheduled_at"])
    if update_data.get("is_teleconsultation") is None:
        update_data.pop("is_teleconsultation", None)

    for field, value in update_data.items():
        setattr(appointment, field, value)

    _commit(db)
    return get_appointment(db, appointment_id)


def delete_appointment(db: Session, appointment_id: int) -> None:
    appointment = get_appointment(db, appointment_id)
    db.delete(appointment)
    _commit(db)
    logger.info("Deleted appointment id=%s", appointment_id)


def start_consultation(db: Session, appointment_id: int, *, now: datetime | None = None) -> Appointment:
    """
    Record when the consultation actually began; feeds wait-time predictions.
    """
    appointment = get_appointment(db, appointment_id)
    if appointment.status == AppointmentStatus.CANCELLED:
        raise AppointmentStateError("Cannot start a cancelled appointment.")
    if appointment.actual_start_time is not None:
        raise AppointmentStateError("Consultation has already started.")

    appointment.actual_start_time = as_utc(now or utc_now())
    _commit(db)
    logger.info("Consultation started for appointment id=%s", appointment_id)
    return get_appointment(db, appointment_id)


def reschedule_appointment(
    db: Session,
    appointment_id: int,
    new_date: datetime,
    reason: str | None = None,
) -> Appointment:
    """
    Move an appointment to a new date. The status returns to `scheduled`
    and the reason, if given, is appended to the notes.
    """
    appointment = get_appointment(db, appointment_id)
    if appointment.status == AppointmentStatus.CANCELLED:
        raise AppointmentStateError("Cannot reschedule a cancelled appointment.")

    appointment.scheduled_at = as_utc(new_date)
    appointment.status = AppointmentStatus.SCHEDULED
    appointment.actual_start_time = None
    if reason and reason.strip():
        line = f"Rescheduled: {reason.strip()}"
        appointment.notes = f"{appointment.notes}\n{line}" if appointment.notes else line

    _commit(db)
    logger.info("Rescheduled appointment id=%s to %s", appointment_id, as_utc(new_date).isoformat())
    return get_appointment(db, appointment_id)


def reinstate_appointment(db: Session, appointment_id: int) -> Appointment:
    """
    Administrator override: bring a cancelled appointment back to `scheduled`.
    Authorization is checked by the caller.
    """
    appointment = get_appointment(db, appointment_id)
    if appointment.status != AppointmentStatus.CANCELLED:
        raise AppointmentStateError("Only cancelled appointments can be reinstated.")

    appointment.status = AppointmentStatus.SCHEDULED
    _commit(db)
    logger.info("Reinstated appointment id=%s", appointment_id)
    return get_appointment(db, appointment_id)
