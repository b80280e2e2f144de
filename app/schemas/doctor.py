# app/schemas/doctor.py
from datetime import date

from pydantic import EmailStr, Field, PositiveInt, field_validator

from app.models.doctor import WEEKDAY_NAMES
from app.schemas.base import CamelModel, UTCDateTime


def _validate_doctor_name(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if len(v) < 3:
        raise ValueError("Doctor name must be at least 3 characters")
    return v


def _validate_available_days(v: list[str] | None) -> list[str] | None:
    """Normalise weekday names to their capitalised form and drop duplicates."""
    if v is None:
        return None
    by_lower = {name.lower(): name for name in WEEKDAY_NAMES}
    days: list[str] = []
    for raw in v:
        name = by_lower.get(raw.strip().lower())
        if name is None:
            raise ValueError(f"Unknown weekday '{raw}'. Must be one of: {', '.join(WEEKDAY_NAMES)}")
        if name not in days:
            days.append(name)
    return days


class SpecialtyCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Specialty name is required")
        return v


class SpecialtyResponse(CamelModel):
    id: int
    name: str
    description: str | None = None


class DoctorCreate(CamelModel):
    name: str = Field(max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    specialty_id: PositiveInt | None = None
    qualification: str | None = Field(default=None, max_length=200)
    experience: int | None = Field(default=None, ge=0, le=80)
    available_days: list[str] = Field(default_factory=list)
    start_date: date | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_doctor_name(v)

    @field_validator("available_days")
    @classmethod
    def validate_available_days(cls, v):
        return _validate_available_days(v)


class DoctorUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    specialty_id: PositiveInt | None = None
    qualification: str | None = Field(default=None, max_length=200)
    experience: int | None = Field(default=None, ge=0, le=80)
    available_days: list[str] | None = None
    start_date: date | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_doctor_name(v)

    @field_validator("available_days")
    @classmethod
    def validate_available_days(cls, v):
        return _validate_available_days(v)


class DoctorResponse(CamelModel):
    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    specialty_id: int | None = None
    specialty: SpecialtyResponse | None = None
    qualification: str | None = None
    experience: int | None = None
    available_days: list[str] = Field(default_factory=list)
    start_date: date | None = None
    created_at: UTCDateTime | None = None
    updated_at: UTCDateTime | None = None
