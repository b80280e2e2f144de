# app/services/doctor_service.py
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.appointment import Appointment
from app.models.doctor import Doctor, Specialty
from app.schemas.doctor import DoctorCreate, DoctorUpdate, SpecialtyCreate

logger = logging.getLogger(__name__)


class DoctorNotFoundError(Exception):
    def __init__(self, doctor_id: int):
        self.doctor_id = doctor_id
        super().__init__(f"Doctor {doctor_id} not found")


class SpecialtyNotFoundError(Exception):
    def __init__(self, specialty_id: int):
        self.specialty_id = specialty_id
        super().__init__(f"Specialty {specialty_id} not found")


class DuplicateSpecialtyError(ValueError):
    pass


# -------------------------
# Specialties
# -------------------------


def list_specialties(db: Session) -> list[Specialty]:
    return db.query(Specialty).order_by(Specialty.name.asc()).all()


def create_specialty(db: Session, payload: SpecialtyCreate) -> Specialty:
    existing = db.query(Specialty).filter(Specialty.name == payload.name).first()
    if existing:
        raise DuplicateSpecialtyError(f"Specialty '{payload.name}' already exists")

    specialty = Specialty(name=payload.name, description=payload.description)
    try:
        db.add(specialty)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateSpecialtyError(f"Specialty '{payload.name}' already exists") from None
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(specialty)
    return specialty


def _ensure_specialty(db: Session, specialty_id: int | None) -> None:
    if specialty_id is None:
        return
    if not db.query(Specialty.id).filter(Specialty.id == specialty_id).first():
        raise SpecialtyNotFoundError(specialty_id)


# -------------------------
# Doctors
# -------------------------


def list_doctors(db: Session) -> list[Doctor]:
    return db.query(Doctor).options(joinedload(Doctor.specialty)).order_by(Doctor.name.asc()).all()


def get_doctor(db: Session, doctor_id: int) -> Doctor:
    doctor = (
        db.query(Doctor)
        .options(joinedload(Doctor.specialty))
        .filter(Doctor.id == doctor_id)
        .first()
    )
    if not doctor:
        raise DoctorNotFoundError(doctor_id)
    return doctor


def create_doctor(db: Session, payload: DoctorCreate) -> Doctor:
    _ensure_specialty(db, payload.specialty_id)
    doctor = Doctor(**payload.model_dump())
    try:
        db.add(doctor)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Created doctor id=%s", doctor.id)
    return get_doctor(db, doctor.id)


def update_doctor(db: Session, doctor_id: int, payload: DoctorUpdate) -> Doctor:
    doctor = get_doctor(db, doctor_id)

    update_data = payload.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        raise ValueError("Doctor name cannot be empty")
    if "specialty_id" in update_data:
        _ensure_specialty(db, update_data["specialty_id"])
    if "available_days" in update_data and update_data["available_days"] is None:
        update_data["available_days"] = []

    for field, value in update_data.items():
        setattr(doctor, field, value)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return get_doctor(db, doctor_id)


def delete_doctor(db: Session, doctor_id: int) -> None:
    """
    Remove a doctor. Their appointments stay on record without a doctor.
    """
    doctor = get_doctor(db, doctor_id)
    try:
        detached = (
            db.query(Appointment)
            .filter(Appointment.doctor_id == doctor_id)
            .update({Appointment.doctor_id: None}, synchronize_session=False)
        )
        db.delete(doctor)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Deleted doctor id=%s; %s appointment(s) unassigned", doctor_id, detached)
