# app/schemas/analytics.py
from datetime import date as date_type

from pydantic import Field

from app.schemas.base import CamelModel, UTCDateTime


class WaitTimeResponse(CamelModel):
    predicted_wait_time: int
    confidence: float
    sample_size: int


class TimeSlotResponse(CamelModel):
    start_time: str
    end_time: str
    starts_at: UTCDateTime
    expected_wait_time: int
    probability: float


class AlternativeSlotResponse(CamelModel):
    time: str
    start_time: str
    end_time: str
    reason: str


class SlotRecommendationResponse(CamelModel):
    target_date: date_type = Field(alias="date")
    duration: int
    suggested_time_slots: list[TimeSlotResponse]
    alternative_slots: list[AlternativeSlotResponse]
    confidence_score: float
    unavailable_reason: str | None = None


class TrendPoint(CamelModel):
    name: str
    count: int


class AgeBand(CamelModel):
    age: str
    count: int


class ConditionCount(CamelModel):
    condition: str
    count: int


class VisitFrequency(CamelModel):
    visits: int
    count: int


class DashboardResponse(CamelModel):
    total_appointments: int
    total_patients: int
    completion_rate: int
    cancellation_rate: int
    status_distribution: dict[str, int]
    appointment_trend: list[TrendPoint]
    age_distribution: list[AgeBand]
    gender_distribution: dict[str, int]
    region_distribution: dict[str, int]
    health_conditions: list[ConditionCount]
    visit_frequency: list[VisitFrequency]
    retention_rate: int
