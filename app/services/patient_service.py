# app/services/patient_service.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.appointment import Appointment
from app.models.lab_result import LabResult
from app.models.patient import Patient
from app.schemas.lab_result import LabResultCreate
from app.schemas.patient import PatientCreate, PatientUpdate

logger = logging.getLogger(__name__)


class PatientNotFoundError(Exception):
    def __init__(self, patient_id: int):
        self.patient_id = patient_id
        super().__init__(f"Patient {patient_id} not found")


def list_patients(db: Session) -> list[Patient]:
    return db.query(Patient).order_by(Patient.created_at.desc(), Patient.id.desc()).all()


def get_patient(db: Session, patient_id: int) -> Patient:
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if not patient:
        raise PatientNotFoundError(patient_id)
    return patient


def create_patient(db: Session, payload: PatientCreate) -> Patient:
    patient = Patient(**payload.model_dump())
    try:
        db.add(patient)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(patient)
    logger.info("Created patient id=%s", patient.id)
    return patient


def update_patient(db: Session, patient_id: int, payload: PatientUpdate) -> Patient:
    """
    Partial update: only fields present in the request body are written.
    """
    patient = get_patient(db, patient_id)

    update_data = payload.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        raise ValueError("Patient name cannot be empty")
    for field, value in update_data.items():
        if field in ("health_conditions", "medications", "allergies", "chronic_conditions") and value is None:
            value = []
        setattr(patient, field, value)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(patient)
    return patient


def delete_patient(db: Session, patient_id: int) -> None:
    """
    Hard delete. The patient's appointments and lab results are removed in the same transaction.
    """
    patient = get_patient(db, patient_id)
    try:
        removed = (
            db.query(Appointment)
            .filter(Appointment.patient_id == patient_id)
            .delete(synchronize_session=False)
        )
        labs = (
            db.query(LabResult)
            .filter(LabResult.patient_id == patient_id)
            .delete(synchronize_session=False)
        )
        db.delete(patient)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info(
        "Deleted patient id=%s with %s appointment(s) and %s lab result(s)", patient_id, removed, labs
    )


def list_patient_appointments(db: Session, patient_id: int) -> list[Appointment]:
    get_patient(db, patient_id)
    return (
        db.query(Appointment)
        .options(joinedload(Appointment.patient), joinedload(Appointment.doctor))
        .filter(Appointment.patient_id == patient_id)
        .order_by(Appointment.scheduled_at.desc())
        .all()
    )


def list_lab_results(db: Session, patient_id: int) -> list[LabResult]:
    """Newest test first."""
    get_patient(db, patient_id)
    return (
        db.query(LabResult)
        .filter(LabResult.patient_id == patient_id)
        .order_by(LabResult.test_date.desc(), LabResult.id.desc())
        .all()
    )


def create_lab_result(db: Session, patient_id: int, payload: LabResultCreate) -> LabResult:
    get_patient(db, patient_id)
    lab_result = LabResult(patient_id=patient_id, **payload.model_dump())
    try:
        db.add(lab_result)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(lab_result)
    logger.info("Recorded lab result id=%s (%s) for patient id=%s", lab_result.id, lab_result.test_name, patient_id)
    return lab_result
