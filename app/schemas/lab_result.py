# app/schemas/lab_result.py
from pydantic import Field, computed_field, field_validator, model_validator

from app.schemas.base import CamelModel, UTCDateTime


class LabResultCreate(CamelModel):
    test_name: str = Field(max_length=200)
    test_date: UTCDateTime
    value: float = Field(allow_inf_nan=False)
    unit: str | None = Field(default=None, max_length=50)
    reference_min: float | None = Field(default=None, allow_inf_nan=False)
    reference_max: float | None = Field(default=None, allow_inf_nan=False)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("test_name")
    @classmethod
    def validate_test_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Test name is required")
        return v

    @field_validator("unit")
    @classmethod
    def validate_unit(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def check_reference_range(self):
        if (
            self.reference_min is not None
            and self.reference_max is not None
            and self.reference_min > self.reference_max
        ):
            raise ValueError("referenceMin cannot be greater than referenceMax")
        return self


class LabResultResponse(CamelModel):
    id: int
    patient_id: int
    test_name: str
    test_date: UTCDateTime
    value: float
    unit: str | None = None
    reference_min: float | None = None
    reference_max: float | None = None
    notes: str | None = None
    created_at: UTCDateTime | None = None

    @computed_field(alias="isAbnormal")
    @property
    def is_abnormal(self) -> bool:
        """Outside whichever reference bounds are recorded."""
        if self.reference_min is not None and self.value < self.reference_min:
            return True
        if self.reference_max is not None and self.value > self.reference_max:
            return True
        return False
