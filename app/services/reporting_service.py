# app/services/reporting_service.py
"""
Reporting aggregator for the analytics dashboard.

Every function here is a pure function over already-fetched rows (ORM objects
or anything exposing the same attributes). Results never depend on input order,
and an empty input yields 0 / empty structures rather than an error.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Iterable, Sequence

from dateutil.relativedelta import relativedelta

from app.models.appointment import AppointmentStatus
from app.utils.datetime_utils import (
    as_utc,
    start_of_month,
    start_of_week,
    utc_now,
)


class TimeRange(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


AGE_BANDS: tuple[tuple[str, int, int | None], ...] = (
    ("0-17", 0, 17),
    ("18-30", 18, 30),
    ("31-45", 31, 45),
    ("46-60", 46, 60),
    ("61+", 61, None),
)

UNKNOWN_LABEL = "Unknown"


def _status_value(appointment: Any) -> str:
    status = appointment.status
    return getattr(status, "value", status)


def _percentage(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(part / total * 100)


def calculate_completion_rate(appointments: Sequence[Any]) -> int:
    completed = sum(1 for a in appointments if _status_value(a) == AppointmentStatus.CONFIRMED.value)
    return _percentage(completed, len(appointments))


def calculate_cancellation_rate(appointments: Sequence[Any]) -> int:
    cancelled = sum(1 for a in appointments if _status_value(a) == AppointmentStatus.CANCELLED.value)
    return _percentage(cancelled, len(appointments))


def _bucket_start(day: date, time_range: TimeRange) -> date:
    if time_range == TimeRange.WEEKLY:
        return start_of_week(day)
    if time_range == TimeRange.MONTHLY:
        return start_of_month(day)
    return day


def _next_bucket(bucket: date, time_range: TimeRange) -> date:
    if time_range == TimeRange.WEEKLY:
        return bucket + timedelta(days=7)
    if time_range == TimeRange.MONTHLY:
        return bucket + relativedelta(months=1)
    return bucket + timedelta(days=1)


def _bucket_label(bucket: date, time_range: TimeRange) -> str:
    if time_range == TimeRange.MONTHLY:
        return f"{bucket:%b} {bucket.year}"
    return f"{bucket:%b} {bucket.day}"


def get_appointments_by_time_range(
    appointments: Iterable[Any],
    time_range: TimeRange | str,
    months: int = 6,
    now: datetime | None = None,
) -> list[dict]:
    """
    Count appointments per calendar-aligned bucket over the trailing window.

    The window starts `months` calendar months before `now`; buckets are whole
    days, Sunday-based weeks, or calendar months, and the first bucket is the
    one containing the window start. Appointments outside every bucket are ignored.
    """
    time_range = TimeRange(time_range)
    now = as_utc(now or utc_now())
    today = now.date()
    # relativedelta clamps to the end of shorter months (Mar 31 - 1 month -> Feb 28)
    window_start = today - relativedelta(months=months)

    first_bucket = _bucket_start(window_start, time_range)
    last_bucket = _bucket_start(today, time_range)

    counts: Counter[date] = Counter()
    for appointment in appointments:
        day = as_utc(appointment.scheduled_at).date()
        counts[_bucket_start(day, time_range)] += 1

    series = []
    bucket = first_bucket
    while bucket <= last_bucket:
        series.append({"name": _bucket_label(bucket, time_range), "count": counts.get(bucket, 0)})
        bucket = _next_bucket(bucket, time_range)
    return series


def get_status_distribution(
    appointments: Iterable[Any],
    time_range: tuple[datetime, datetime] | None = None,
) -> dict[str, int]:
    distribution = {status.value: 0 for status in AppointmentStatus}
    window = (as_utc(time_range[0]), as_utc(time_range[1])) if time_range else None
    for appointment in appointments:
        if window and not (window[0] <= as_utc(appointment.scheduled_at) <= window[1]):
            continue
        status = _status_value(appointment)
        if status in distribution:
            distribution[status] += 1
    return distribution


def _age_on(birth_date: date, today: date) -> int:
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def calculate_age_distribution(patients: Iterable[Any], today: date | None = None) -> list[dict]:
    today = today or utc_now().date()
    counts = {label: 0 for label, _, _ in AGE_BANDS}
    for patient in patients:
        if not patient.date_of_birth:
            continue
        age = _age_on(patient.date_of_birth, today)
        for label, low, high in AGE_BANDS:
            if age >= low and (high is None or age <= high):
                counts[label] += 1
                break
    return [{"age": label, "count": counts[label]} for label, _, _ in AGE_BANDS]


def _group_by_field(items: Iterable[Any], field: str) -> dict[str, int]:
    counts: Counter[str] = Counter()
    for item in items:
        value = getattr(item, field, None)
        label = value.strip() if isinstance(value, str) and value.strip() else UNKNOWN_LABEL
        counts[label] += 1
    return dict(sorted(counts.items()))


def calculate_gender_distribution(patients: Iterable[Any]) -> dict[str, int]:
    return _group_by_field(patients, "gender")


def calculate_region_distribution(patients: Iterable[Any]) -> dict[str, int]:
    return _group_by_field(patients, "region")


def calculate_health_conditions_distribution(patients: Iterable[Any]) -> list[dict]:
    counts: Counter[str] = Counter()
    for patient in patients:
        for condition in patient.health_conditions or []:
            if condition and condition.strip():
                counts[condition.strip()] += 1
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [{"condition": name, "count": count} for name, count in ordered]


def _visits_per_patient(appointments: Iterable[Any]) -> Counter:
    return Counter(a.patient_id for a in appointments)


def get_patient_visit_frequency(appointments: Iterable[Any]) -> list[dict]:
    histogram = Counter(_visits_per_patient(appointments).values())
    return [{"visits": visits, "count": histogram[visits]} for visits in sorted(histogram)]


def calculate_patient_retention_rate(appointments: Iterable[Any]) -> int:
    visits = _visits_per_patient(appointments)
    returning = sum(1 for count in visits.values() if count > 1)
    return _percentage(returning, len(visits))


def build_dashboard(
    appointments: Sequence[Any],
    patients: Sequence[Any],
    *,
    time_range: TimeRange | str = TimeRange.MONTHLY,
    months: int = 6,
    now: datetime | None = None,
) -> dict:
    now = as_utc(now or utc_now())
    return {
        "total_appointments": len(appointments),
        "total_patients": len(patients),
        "completion_rate": calculate_completion_rate(appointments),
        "cancellation_rate": calculate_cancellation_rate(appointments),
        "status_distribution": get_status_distribution(appointments),
        "appointment_trend": get_appointments_by_time_range(appointments, time_range, months=months, now=now),
        "age_distribution": calculate_age_distribution(patients, today=now.date()),
        "gender_distribution": calculate_gender_distribution(patients),
        "region_distribution": calculate_region_distribution(patients),
        "health_conditions": calculate_health_conditions_distribution(patients),
        "visit_frequency": get_patient_visit_frequency(appointments),
        "retention_rate": calculate_patient_retention_rate(appointments),
    }
