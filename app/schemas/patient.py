# app/schemas/patient.py
import re
from datetime import date

from pydantic import EmailStr, Field, field_validator

from app.models.patient import (
    ExerciseFrequency,
    PatientStatus,
    PreferredCommunication,
    SmokingStatus,
)
from app.schemas.base import CamelModel, UTCDateTime, clean_string_list


def normalize_phone(phone: str) -> str:
    """Normalize phone number: remove spaces, dashes, parentheses, keep + and digits."""
    if not phone:
        return ""
    return re.sub(r"[\s\-\(\)]", "", phone)


def _validate_name(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        raise ValueError("Name is required")
    return v


def _validate_dob(v: date | None) -> date | None:
    if v is not None and v > date.today():
        raise ValueError("Date of birth cannot be in the future")
    return v


class PatientCreate(CamelModel):
    name: str = Field(max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=20)
    city: str | None = Field(default=None, max_length=100)
    region: str | None = Field(default=None, max_length=100)

    health_conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    chronic_conditions: list[str] = Field(default_factory=list)

    smoking_status: SmokingStatus = SmokingStatus.NEVER
    exercise_frequency: ExerciseFrequency = ExerciseFrequency.NEVER
    preferred_communication: PreferredCommunication = PreferredCommunication.EMAIL
    status: PatientStatus = PatientStatus.ACTIVE

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_dob(cls, v):
        return _validate_dob(v)

    @field_validator("health_conditions", "medications", "allergies", "chronic_conditions", mode="before")
    @classmethod
    def validate_lists(cls, v):
        return clean_string_list(v) if isinstance(v, list) or v is None else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_phone(v) or None


class PatientUpdate(CamelModel):
    """All fields optional; only the ones sent are written."""

    name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=20)
    city: str | None = Field(default=None, max_length=100)
    region: str | None = Field(default=None, max_length=100)

    health_conditions: list[str] | None = None
    medications: list[str] | None = None
    allergies: list[str] | None = None
    chronic_conditions: list[str] | None = None

    smoking_status: SmokingStatus | None = None
    exercise_frequency: ExerciseFrequency | None = None
    preferred_communication: PreferredCommunication | None = None
    status: PatientStatus | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_dob(cls, v):
        return _validate_dob(v)

    @field_validator("health_conditions", "medications", "allergies", "chronic_conditions", mode="before")
    @classmethod
    def validate_lists(cls, v):
        return clean_string_list(v) if isinstance(v, list) else v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return normalize_phone(v) or None


class PatientResponse(CamelModel):
    id: int
    name: str
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    city: str | None = None
    region: str | None = None

    health_conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    chronic_conditions: list[str] = Field(default_factory=list)

    smoking_status: SmokingStatus
    exercise_frequency: ExerciseFrequency
    preferred_communication: PreferredCommunication
    status: PatientStatus

    created_at: UTCDateTime | None = None
    updated_at: UTCDateTime | None = None
