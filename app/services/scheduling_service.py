# app/services/scheduling_service.py
"""
Scheduling analytics: wait-time prediction and time-slot recommendation.

Both work from a doctor's appointment rows, already fetched by the caller.
Only history strictly before the target day, on the same weekday, and not
cancelled contributes to the load profile.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

from app.models.appointment import AppointmentStatus
from app.models.doctor import WEEKDAY_NAMES
from app.utils.datetime_utils import as_utc, minutes_between, start_of_day

logger = logging.getLogger(__name__)

SUPPORTED_DURATIONS = (15, 30, 45, 60)

# Appointments without a planned length block this many minutes
DEFAULT_OCCUPANCY_MINUTES = 30
# Heuristic weight: minutes of wait per booking already in the same hour
MINUTES_PER_QUEUED_BOOKING = 10
# Distinct historical days needed for full confidence
CONFIDENCE_SAMPLE_DAYS = 8

NEUTRAL_PROBABILITY = 0.5
RECOMMEND_THRESHOLD = 0.4
HIGH_VOLUME_REASON = "High patient volume expected"

ACTIVE_STATUSES = (AppointmentStatus.SCHEDULED.value, AppointmentStatus.CONFIRMED.value)


@dataclass(frozen=True)
class WaitTimePrediction:
    predicted_wait_time: int
    confidence: float
    sample_size: int


@dataclass(frozen=True)
class TimeSlot:
    start_time: str
    end_time: str
    starts_at: datetime
    expected_wait_time: int
    probability: float


@dataclass(frozen=True)
class AlternativeSlot:
    time: str
    start_time: str
    end_time: str
    reason: str


@dataclass
class SlotRecommendation:
    date: date
    duration: int
    suggested_time_slots: list[TimeSlot] = field(default_factory=list)
    alternative_slots: list[AlternativeSlot] = field(default_factory=list)
    confidence_score: float = 0.0
    unavailable_reason: str | None = None


def _status_value(appointment: Any) -> str:
    status = appointment.status
    return getattr(status, "value", status)


class WeekdayLoadProfile:
    """
    Historical load for one weekday: bookings per hour and observed start delays.
    """

    def __init__(self, history: Iterable[Any], weekday: int):
        self.weekday = weekday
        self.days: set[date] = set()
        self.hour_counts: Counter[int] = Counter()
        self.delays_by_hour: dict[int, list[float]] = defaultdict(list)
        self.bookings = 0

        for appointment in history:
            if _status_value(appointment) == AppointmentStatus.CANCELLED.value:
                continue
            scheduled = as_utc(appointment.scheduled_at)
            if scheduled.weekday() != weekday:
                continue
            self.days.add(scheduled.date())
            self.hour_counts[scheduled.hour] += 1
            self.bookings += 1
            actual_start = getattr(appointment, "actual_start_time", None)
            if actual_start is not None:
                self.delays_by_hour[scheduled.hour].append(max(0.0, minutes_between(scheduled, actual_start)))

    @property
    def sample_days(self) -> int:
        return len(self.days)

    @property
    def confidence(self) -> float:
        return round(min(1.0, self.sample_days / CONFIDENCE_SAMPLE_DAYS), 2)

    def hour_load(self, hour: int) -> float:
        if not self.days:
            return 0.0
        return self.hour_counts[hour] / len(self.days)

    def day_load(self) -> float:
        if not self.days:
            return 0.0
        return self.bookings / len(self.days)

    def wait_minutes(self, hour: int, default_minutes: int) -> int:
        if not self.days:
            return default_minutes

        same_hour = self.delays_by_hour.get(hour)
        if same_hour:
            return max(0, round(sum(same_hour) / len(same_hour)))

        all_delays = [d for delays in self.delays_by_hour.values() for d in delays]
        if all_delays:
            return max(0, round(sum(all_delays) / len(all_delays)))

        return max(0, round(self.hour_load(hour) * MINUTES_PER_QUEUED_BOOKING + self.day_load()))


def _history_before(appointments: Iterable[Any], day: date) -> list[Any]:
    cutoff = start_of_day(day)
    return [a for a in appointments if as_utc(a.scheduled_at) < cutoff]


def predict_wait_time(
    appointments: Sequence[Any],
    scheduled_time: datetime,
    *,
    default_minutes: int = 10,
) -> WaitTimePrediction:
    """
    Estimate how long a patient booked at `scheduled_time` will wait, in minutes.

    Returns `default_minutes` with zero confidence when the doctor has no
    history for that weekday.
    """
    scheduled_time = as_utc(scheduled_time)
    profile = WeekdayLoadProfile(_history_before(appointments, scheduled_time.date()), scheduled_time.weekday())
    prediction = WaitTimePrediction(
        predicted_wait_time=profile.wait_minutes(scheduled_time.hour, default_minutes),
        confidence=profile.confidence,
        sample_size=profile.sample_days,
    )
    logger.debug(
        "Wait-time prediction for %s: %s min (days=%s)",
        scheduled_time.isoformat(),
        prediction.predicted_wait_time,
        prediction.sample_size,
    )
    return prediction


def validate_duration(duration: int) -> int:
    if duration not in SUPPORTED_DURATIONS:
        raise ValueError(
            f"Unsupported duration {duration}. Must be one of: {', '.join(str(d) for d in SUPPORTED_DURATIONS)} minutes."
        )
    return duration


def _busy_intervals(appointments: Iterable[Any], day: date) -> list[tuple[datetime, datetime]]:
    intervals = []
    for appointment in appointments:
        if _status_value(appointment) not in ACTIVE_STATUSES:
            continue
        start = as_utc(appointment.scheduled_at)
        if start.date() != day:
            continue
        length = getattr(appointment, "duration_minutes", None) or DEFAULT_OCCUPANCY_MINUTES
        intervals.append((start, start + timedelta(minutes=length)))
    return intervals


def _overlaps(start: datetime, end: datetime, busy: list[tuple[datetime, datetime]]) -> bool:
    return any(start < busy_end and busy_start < end for busy_start, busy_end in busy)


def recommend_slots(
    appointments: Sequence[Any],
    target_date: date,
    duration: int,
    *,
    open_hour: int = 9,
    close_hour: int = 17,
    default_wait_minutes: int = 10,
    available_days: Sequence[str] | None = None,
    now: datetime | None = None,
) -> SlotRecommendation:
    """
    Rank the free slots of `target_date` for one doctor.

    Candidates start every `duration` minutes from opening and must end by
    closing time. Slots overlapping a scheduled/confirmed appointment, or
    starting before `now`, are dropped. An empty result is a valid answer.
    """
    validate_duration(duration)
    recommendation = SlotRecommendation(date=target_date, duration=duration)

    weekday_name = WEEKDAY_NAMES[target_date.weekday()]
    if available_days and weekday_name not in available_days:
        recommendation.unavailable_reason = f"Doctor is not available on {weekday_name}"
        return recommendation

    busy = _busy_intervals(appointments, target_date)
    profile = WeekdayLoadProfile(_history_before(appointments, target_date), target_date.weekday())
    recommendation.confidence_score = profile.confidence

    max_load = max((profile.hour_load(hour) for hour in range(open_hour, close_hour)), default=0.0)
    now = as_utc(now) if now else None

    day_start = start_of_day(target_date)
    cursor = day_start + timedelta(hours=open_hour)
    closing = day_start + timedelta(hours=close_hour)
    step = timedelta(minutes=duration)

    suggested: list[TimeSlot] = []
    while cursor + step <= closing:
        slot_end = cursor + step
        if not _overlaps(cursor, slot_end, busy) and (now is None or cursor >= now):
            if max_load > 0:
                probability = round(1.0 - 0.8 * profile.hour_load(cursor.hour) / max_load, 2)
            else:
                probability = NEUTRAL_PROBABILITY
            slot = TimeSlot(
                start_time=f"{cursor:%H:%M}",
                end_time=f"{slot_end:%H:%M}",
                starts_at=cursor,
                expected_wait_time=profile.wait_minutes(cursor.hour, default_wait_minutes),
                probability=probability,
            )
            if probability >= RECOMMEND_THRESHOLD:
                suggested.append(slot)
            else:
                recommendation.alternative_slots.append(
                    AlternativeSlot(
                        time=slot.start_time,
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                        reason=HIGH_VOLUME_REASON,
                    )
                )
        cursor = slot_end

    recommendation.suggested_time_slots = sorted(
        suggested,
        key=lambda s: (-s.probability, s.expected_wait_time, s.starts_at),
    )
    return recommendation
