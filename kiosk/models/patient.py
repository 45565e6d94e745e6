"""Patient data models."""

import math
from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field, field_validator


@dataclass
class PatientRecord:
    """Patient queue business model."""

    name: str
    age: int
    token: str

    def as_dict(self) -> dict[str, str | int]:
        return {"name": self.name, "age": self.age, "token": self.token}


@dataclass
class AddOutcome:
    """Result of queueing a patient."""

    record: PatientRecord
    storage: Literal["store", "fallback"]

    @property
    def degraded(self) -> bool:
        return self.storage == "fallback"


@dataclass
class UndoOutcome:
    """Result of undoing the most recent add."""

    record: PatientRecord | None
    rows_deleted: int = 0
    store_available: bool = True
    removed_from_fallback: bool = False

    @property
    def status(self) -> str:
        if self.record is None:
            return "NOTHING_TO_UNDO"
        if self.removed_from_fallback:
            return "REMOVED_FROM_FALLBACK"
        if not self.store_available:
            return "STORE_UNAVAILABLE"
        return "UNDONE" if self.rows_deleted else "NOT_IN_STORE"


@dataclass
class SyncOutcome:
    """Result of flushing fallback records into the store."""

    synced: list[PatientRecord] = field(default_factory=list)
    pending: list[PatientRecord] = field(default_factory=list)


@dataclass
class QueueStatus:
    """Snapshot of the queue manager's in-process state."""

    undo_depth: int
    fallback_size: int
    store_available: bool


class AddPatientRequest(BaseModel):
    """Request model for queueing a patient.

    Kiosk front-ends are loose about types: ``age`` may arrive as a number
    (fractions are truncated) or as an integer string, and a numeric
    ``name`` is taken as its text.
    """

    name: str = Field(min_length=1)
    age: int = Field(ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Name must not be blank")
        return stripped

    @field_validator("age", mode="before")
    @classmethod
    def coerce_age(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        return value


class AddPatientResponse(BaseModel):
    """Response model for a queued patient."""

    status: Literal["Success", "Degraded"]
    token: str
    name: str
    age: int
    storage: Literal["store", "fallback"]


class PatientOut(BaseModel):
    """A patient row as returned by the API."""

    name: str
    age: int
    token: str


class PatientListResponse(BaseModel):
    """Response model for the queue listing."""

    patients: list[PatientOut]
    store_available: bool


class DeletePatientResponse(BaseModel):
    """Response model for deleting a patient by token."""

    status: str
    token: str
    deleted: int


class UndoResponse(BaseModel):
    """Response model for undo."""

    status: str
    token: str | None = None
    deleted: int = 0


class SyncResponse(BaseModel):
    """Response model for flushing fallback records."""

    synced: list[PatientOut]
    pending: list[PatientOut]


class QueueStatusResponse(BaseModel):
    """Response model for queue state."""

    undo_depth: int
    fallback_size: int
    store_available: bool
