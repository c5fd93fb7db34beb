from __future__ import annotations
import secrets
import uuid
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import ACCESS_CODE_LENGTH, ATHLETES_TABLE, METRIC_FIELDS, PROGRESS_TABLE, WORKOUT_LOGS_TABLE

PaymentStatus = Literal["active", "pending"]

def new_temp_id() -> str:
    return str(uuid.uuid4())

def generate_access_code() -> str:
    return secrets.token_hex(ACCESS_CODE_LENGTH)[:ACCESS_CODE_LENGTH].upper()

def _as_text(v):
    # spreadsheet / numeric columns come back as numbers; store them as text
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)

class AthleteDraft(BaseModel):
    """Athlete fields without identity; what the dashboard and the importer submit."""
    model_config = ConfigDict(extra="forbid")

    name: str
    avatar_url: Optional[str] = None
    payment_status: PaymentStatus = "pending"
    cut_day: Optional[str] = None
    referral_source: Optional[str] = None
    access_code: Optional[str] = None

    snatch_rm: Optional[str] = None
    clean_rm: Optional[str] = None
    back_squat: Optional[str] = None
    front_squat: Optional[str] = None
    bench_press: Optional[str] = None
    deadlift: Optional[str] = None
    shoulder_press: Optional[str] = None
    push_press: Optional[str] = None
    karen: Optional[str] = None
    burpees_100: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_nonempty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name must be a non-empty string")
        return v

    @field_validator("cut_day", "referral_source", "access_code", *METRIC_FIELDS, mode="before")
    @classmethod
    def _textify(cls, v):
        return _as_text(v)

class Athlete(AthleteDraft):
    id: str
    created_at: Optional[str] = None

    @field_validator("id", "created_at", mode="before")
    @classmethod
    def _id_text(cls, v):
        return _as_text(v)

class WorkoutLog(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = None
    athlete_id: str
    energy: int = Field(default=3, ge=1, le=5)
    rpe: int = Field(default=5, ge=1, le=10)
    notes: str = ""
    date: Optional[str] = None
    created_at: Optional[str] = None

    @field_validator("id", "athlete_id", "date", "created_at", mode="before")
    @classmethod
    def _text(cls, v):
        return _as_text(v)

class ProgressSample(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = None
    athlete_id: str
    field_name: str
    value: str
    created_at: Optional[str] = None

    @field_validator("id", "athlete_id", "value", "created_at", mode="before")
    @classmethod
    def _text(cls, v):
        return _as_text(v)

# table -> record type checked at the adapter boundary
TABLE_MODELS: Dict[str, type[BaseModel]] = {
    ATHLETES_TABLE: Athlete,
    WORKOUT_LOGS_TABLE: WorkoutLog,
    PROGRESS_TABLE: ProgressSample,
}

def unknown_fields(table: str, row: Dict[str, Any]) -> List[str]:
    model = TABLE_MODELS.get(table)
    if model is None:
        return []
    return [k for k in row if k not in model.model_fields]

def athlete_from_row(row: Dict[str, Any]) -> Athlete:
    """Build an Athlete from a stored row, ignoring columns the record type does not carry."""
    known = {k: v for k, v in row.items() if k in Athlete.model_fields}
    return Athlete.model_validate(known)

class AdapterError(BaseModel):
    message: str
    code: Optional[str] = None
    details: Optional[str] = None

class AdapterResult(BaseModel):
    data: Optional[Any] = None
    error: Optional[AdapterError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def fail(cls, message: str, code: Optional[str] = None, details: Optional[str] = None) -> "AdapterResult":
        return cls(error=AdapterError(message=message, code=code, details=details))
