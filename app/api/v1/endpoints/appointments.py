# app/api/v1/endpoints/appointments.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.background.tasks import enqueue_task
from app.core.config import get_settings
from app.core.database import get_db, get_session_factory
from app.dependencies.authz import require_admin
from app.models.user import User
from app.schemas.analytics import SlotRecommendationResponse, WaitTimeResponse
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from app.services import appointment_service, scheduling_service
from app.services.appointment_service import AppointmentNotFoundError, AppointmentStateError
from app.services.appointment_status import InvalidStatusError, InvalidStatusTransitionError, parse_status
from app.services.cache_service import CacheResource, ResourceCache, get_resource_cache
from app.services.doctor_service import DoctorNotFoundError, get_doctor
from app.services.notification_service import dispatch_appointment_created
from app.services.patient_service import PatientNotFoundError
from app.utils.datetime_utils import utc_now

router = APIRouter()
logger = logging.getLogger(__name__)
settings = get_settings()


# -------------------------
# Helpers
# -------------------------
def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, (AppointmentNotFoundError, PatientNotFoundError, DoctorNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (InvalidStatusTransitionError, AppointmentStateError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    # InvalidStatusError and other ValueErrors
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


DOMAIN_ERRORS = (
    AppointmentNotFoundError,
    PatientNotFoundError,
    DoctorNotFoundError,
    InvalidStatusTransitionError,
    AppointmentStateError,
    ValueError,
)


def _serialize(appointments) -> list[dict]:
    return [AppointmentResponse.model_validate(a).model_dump(mode="json", by_alias=True) for a in appointments]


# -------------------------
# Scheduling analytics
# -------------------------


@router.get("/analytics/wait-time", response_model=WaitTimeResponse)
def get_wait_time_prediction(
    doctor_id: int = Query(..., alias="doctorId", gt=0),
    scheduled_time: datetime = Query(..., alias="scheduledTime"),
    db: Session = Depends(get_db),
) -> WaitTimeResponse:
    """
    Predicted wait in minutes for a booking with this doctor at this time.
    """
    try:
        get_doctor(db, doctor_id)
    except DoctorNotFoundError as exc:
        raise _to_http(exc) from exc

    history = appointment_service.list_doctor_appointments(db, doctor_id)
    prediction = scheduling_service.predict_wait_time(
        history,
        scheduled_time,
        default_minutes=settings.default_wait_time_minutes,
    )
    return WaitTimeResponse.model_validate(prediction)


@router.get("/analytics/slots", response_model=SlotRecommendationResponse)
def get_slot_recommendations(
    doctor_id: int = Query(..., alias="doctorId", gt=0),
    target_date: date = Query(..., alias="date"),
    duration: int = Query(30),
    db: Session = Depends(get_db),
) -> SlotRecommendationResponse:
    """
    Ranked free slots for a doctor on a given day.
    """
    try:
        doctor = get_doctor(db, doctor_id)
        scheduling_service.validate_duration(duration)
    except (DoctorNotFoundError, ValueError) as exc:
        raise _to_http(exc) from exc

    recommendation = scheduling_service.recommend_slots(
        appointment_service.list_doctor_appointments(db, doctor_id),
        target_date,
        duration,
        open_hour=settings.clinic_open_hour,
        close_hour=settings.clinic_close_hour,
        default_wait_minutes=settings.default_wait_time_minutes,
        available_days=doctor.available_days,
        now=utc_now(),
    )
    return SlotRecommendationResponse.model_validate(recommendation)


# -------------------------
# Create
# -------------------------


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_appointment(
    payload: AppointmentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    cache: ResourceCache = Depends(get_resource_cache),
) -> AppointmentResponse:
    """
    Create an appointment in `scheduled` state.

    Rules:
    - Patient must exist; doctor must exist when given.
    - Past dates are accepted (historical records feed analytics).
    - Patient and doctor are emailed after the response is sent; delivery
      problems never fail the request.
    """
    try:
        appointment = appointment_service.create_appointment(db, payload)
    except DOMAIN_ERRORS as exc:
        raise _to_http(exc) from exc

    cache.invalidate_for(CacheResource.APPOINTMENTS)
    enqueue_task(background_tasks, dispatch_appointment_created, appointment.id, session_factory)
    return AppointmentResponse.model_validate(appointment)


# -------------------------
# List / Get
# -------------------------


@router.get("", response_model=list[AppointmentResponse])
def list_appointments(
    doctor_id: Optional[int] = Query(None, alias="doctorId", gt=0),
    patient_id: Optional[int] = Query(None, alias="patientId", gt=0),
    status_filter: Optional[str] = Query(None, alias="status"),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
):
    try:
        status_value = parse_status(status_filter) if status_filter else None
    except InvalidStatusError as exc:
        raise _to_http(exc) from exc

    cache_key = (
        f"list:doctor={doctor_id}:patient={patient_id}:status={status_value.value if status_value else None}"
        f":from={date_from.isoformat() if date_from else None}:to={date_to.isoformat() if date_to else None}"
    )
    return cache.get_or_set(
        CacheResource.APPOINTMENTS,
        cache_key,
        lambda: _serialize(
            appointment_service.list_appointments(
                db,
                doctor_id=doctor_id,
                patient_id=patient_id,
                status=status_value,
                from_date=date_from,
                to_date=date_to,
            )
        ),
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
) -> AppointmentResponse:
    try:
        appointment = appointment_service.get_appointment(db, appointment_id)
    except AppointmentNotFoundError as exc:
        raise _to_http(exc) from exc
    return AppointmentResponse.model_validate(appointment)


# -------------------------
# Updates
# -------------------------


@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> AppointmentResponse:
    """
    Change only the status. Re-sending the current status is a no-op success.
    """
    try:
        appointment = appointment_service.update_status(db, appointment_id, payload.status)
    except DOMAIN_ERRORS as exc:
        raise _to_http(exc) from exc

    cache.invalidate_for(CacheResource.APPOINTMENTS)
    return AppointmentResponse.model_validate(appointment)


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> AppointmentResponse:
    try:
        appointment = appointment_service.update_appointment(db, appointment_id, payload)
    except DOMAIN_ERRORS as exc:
        raise _to_http(exc) from exc

    cache.invalidate_for(CacheResource.APPOINTMENTS)
    return AppointmentResponse.model_validate(appointment)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> Response:
    try:
        appointment_service.delete_appointment(db, appointment_id)
    except AppointmentNotFoundError as exc:
        raise _to_http(exc) from exc

    cache.invalidate_for(CacheResource.APPOINTMENTS)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------------------------
# Lifecycle actions
# -------------------------


@router.post("/{appointment_id}/start", response_model=AppointmentResponse)
def start_consultation(
    appointment_id: int,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> AppointmentResponse:
    try:
        appointment = appointment_service.start_consultation(db, appointment_id)
    except DOMAIN_ERRORS as exc:
        raise _to_http(exc) from exc

    cache.invalidate_for(CacheResource.APPOINTMENTS)
    return AppointmentResponse.model_validate(appointment)


@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    payload: AppointmentReschedule,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> AppointmentResponse:
    try:
        appointment = appointment_service.reschedule_appointment(
            db,
            appointment_id,
            payload.scheduled_at,
            payload.reason,
        )
    except DOMAIN_ERRORS as exc:
        raise _to_http(exc) from exc

    cache.invalidate_for(CacheResource.APPOINTMENTS)
    return AppointmentResponse.model_validate(appointment)


@router.post("/{appointment_id}/reinstate", response_model=AppointmentResponse)
def reinstate_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
    admin: User = Depends(require_admin),
) -> AppointmentResponse:
    """
    Administrator override: `cancelled -> scheduled`.
    """
    try:
        appointment = appointment_service.reinstate_appointment(db, appointment_id)
    except DOMAIN_ERRORS as exc:
        raise _to_http(exc) from exc

    logger.info("Appointment id=%s reinstated by admin id=%s", appointment_id, admin.id)
    cache.invalidate_for(CacheResource.APPOINTMENTS)
    return AppointmentResponse.model_validate(appointment)
