# app/services/notification_service.py
"""
Appointment notifications.

`dispatch_appointment_created` is queued by the create endpoint and runs after
the response has been sent. It opens its own session, sends one email per
recipient with bounded retries, and records each outcome in `notification_logs`.
Nothing raised here reaches the caller: the appointment already exists.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.config import get_settings
from app.models.appointment import Appointment
from app.models.notification import NotificationChannel, NotificationLog, NotificationStatus
from app.notifications.email.base import EmailConfigurationError, send_email
from app.utils.datetime_utils import as_utc
from app.utils.email_templates import (
    render_doctor_appointment_email,
    render_patient_appointment_email,
)

logger = logging.getLogger(__name__)

MAX_LOG_MESSAGE_LENGTH = 2000


@dataclass
class NotificationJob:
    recipient: str
    subject: str
    body: str
    reason: str
    appointment_id: Optional[int] = None


@dataclass
class DeliveryResult:
    status: NotificationStatus
    attempts: int
    error_message: Optional[str] = None


def build_appointment_jobs(appointment: Appointment) -> list[NotificationJob]:
    """
    One job for the patient and one for the doctor, for whoever has an email address.
    """
    jobs: list[NotificationJob] = []
    patient = appointment.patient
    doctor = appointment.doctor
    scheduled_at = as_utc(appointment.scheduled_at)
    details = {
        "scheduled_at": scheduled_at,
        "is_teleconsultation": appointment.is_teleconsultation,
        "meeting_url": appointment.meeting_url,
        "notes": appointment.notes,
    }

    if patient is not None and patient.email:
        subject, body = render_patient_appointment_email(
            patient_name=patient.name,
            doctor_name=doctor.name if doctor else None,
            **details,
        )
        jobs.append(
            NotificationJob(
                recipient=patient.email,
                subject=subject,
                body=body,
                reason="appointment_created_patient",
                appointment_id=appointment.id,
            )
        )

    if doctor is not None and doctor.email:
        subject, body = render_doctor_appointment_email(
            doctor_name=doctor.name,
            patient_name=patient.name if patient else "Unknown patient",
            **details,
        )
        jobs.append(
            NotificationJob(
                recipient=doctor.email,
                subject=subject,
                body=body,
                reason="appointment_created_doctor",
                appointment_id=appointment.id,
            )
        )

    return jobs


def deliver_job(
    job: NotificationJob,
    *,
    send: Callable[..., None] = send_email,
    max_attempts: Optional[int] = None,
    retry_delay_seconds: float = 0.5,
) -> DeliveryResult:
    """
    Send one job, retrying transient failures up to `max_attempts` times.
    Configuration errors are not retried.
    """
    if max_attempts is None:
        max_attempts = get_settings().notification_max_attempts
    max_attempts = max(1, max_attempts)

    last_error: Optional[str] = None
    for attempt in range(1, max_attempts + 1):
        try:
            send(
                to_email=job.recipient,
                subject=job.subject,
                body=job.body,
                reason=job.reason,
                html=True,
            )
            return DeliveryResult(status=NotificationStatus.SENT, attempts=attempt)
        except EmailConfigurationError as exc:
            logger.error(f"Email configuration error, not retrying ({job.reason}): {exc}")
            return DeliveryResult(status=NotificationStatus.FAILED, attempts=attempt, error_message=str(exc))
        except Exception as exc:
            last_error = str(exc)
            logger.warning(
                f"Email attempt {attempt}/{max_attempts} to {job.recipient} failed ({job.reason}): {exc}"
            )
            if attempt < max_attempts and retry_delay_seconds > 0:
                time.sleep(retry_delay_seconds * attempt)

    return DeliveryResult(status=NotificationStatus.FAILED, attempts=max_attempts, error_message=last_error)


def _log_message(job: NotificationJob) -> str:
    if len(job.body) <= MAX_LOG_MESSAGE_LENGTH:
        return job.body
    return f"[HTML Email - {job.reason}] Subject: {job.subject}"


def log_delivery(db: Session, job: NotificationJob, result: DeliveryResult) -> Optional[NotificationLog]:
    """
    Record the outcome of a job. Logging must never break the main flow.
    """
    entry = NotificationLog(
        appointment_id=job.appointment_id,
        channel=NotificationChannel.EMAIL,
        recipient=job.recipient,
        subject=job.subject,
        message=_log_message(job),
        status=result.status,
        attempts=result.attempts,
        error_message=result.error_message[:1000] if result.error_message else None,
    )
    try:
        db.add(entry)
        db.commit()
        return entry
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"[NOTIFICATION LOG ERROR] Failed to log notification: {e}", exc_info=True)
        return None


def dispatch_appointment_created(
    appointment_id: int,
    session_factory: Callable[[], Session],
    *,
    send: Callable[..., None] = send_email,
    retry_delay_seconds: float = 0.5,
) -> None:
    """
    Background job: notify patient and doctor about a new appointment.
    """
    db = session_factory()
    try:
        appointment = (
            db.query(Appointment)
            .options(joinedload(Appointment.patient), joinedload(Appointment.doctor))
            .filter(Appointment.id == appointment_id)
            .first()
        )
        if not appointment:
            logger.warning("Appointment id=%s vanished before notifications were sent", appointment_id)
            return

        for job in build_appointment_jobs(appointment):
            result = deliver_job(job, send=send, retry_delay_seconds=retry_delay_seconds)
            log_delivery(db, job, result)
            if result.status == NotificationStatus.FAILED:
                logger.error(
                    "Notification for appointment id=%s to %s failed after %s attempt(s): %s",
                    appointment_id,
                    job.recipient,
                    result.attempts,
                    result.error_message,
                )
    except Exception:
        logger.exception("Non-fatal: appointment notification dispatch failed. apt=%s", appointment_id)
    finally:
        db.close()
