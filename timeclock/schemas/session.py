from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# The service still emits the Portuguese tags it was first built with.
LEGACY_RECORD_TYPES = {
    "ENTRADA": "ENTRY",
    "SAIDA": "EXIT",
    "PAUSA_INICIO": "PAUSE_START",
    "PAUSA_FIM": "PAUSE_END",
}


class RecordType(str, Enum):
    ENTRY = "ENTRY"
    EXIT = "EXIT"
    PAUSE_START = "PAUSE_START"
    PAUSE_END = "PAUSE_END"


class TimeRecord(BaseModel):
    id: int
    session_id: int = Field(..., alias="sessionId")
    record_type: RecordType = Field(..., alias="recordType")
    timestamp: datetime

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("record_type", mode="before")
    @classmethod
    def normalize_record_type(cls, value: object) -> object:
        if isinstance(value, str):
            upper = value.strip().upper()
            return LEGACY_RECORD_TYPES.get(upper, upper)
        return value


class WorkSession(BaseModel):
    id: int
    user_id: int | str = Field(..., alias="userId")
    start_time: datetime = Field(..., alias="startTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    total_hours: Optional[float] = Field(default=None, alias="totalHours")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    time_records: list[TimeRecord] = Field(default_factory=list, alias="timeRecords")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("time_records", mode="before")
    @classmethod
    def default_records(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def is_open(self) -> bool:
        return self.end_time is None


class CurrentSession(BaseModel):
    has_open_session: bool = Field(..., alias="hasOpenSession")
    session: Optional[WorkSession] = None

    model_config = {"populate_by_name": True, "extra": "ignore"}


class SessionStats(BaseModel):
    total_sessions: int = Field(default=0, alias="totalSessions")
    total_hours: float = Field(default=0, alias="totalHours")
    average_session_duration: float = Field(default=0, alias="averageSessionDuration")

    model_config = {"populate_by_name": True, "extra": "ignore"}
