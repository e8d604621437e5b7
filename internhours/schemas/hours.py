from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from internhours.models.time_logs import TimeLogRecord, EditRequest


class SessionsRequest(BaseModel):
    logs: List[TimeLogRecord] = Field(default_factory=list)
    as_of: Optional[datetime] = Field(None, description="Snapshot instant. Defaults to the time of the request.")
    freeze_at: Optional[datetime] = Field(
        None,
        description="Instant a live session stopped advancing, e.g. when the daily cap was reached."
    )

    class Config:
        json_schema_extra = {
            "example": {
                "logs": [
                    {"id": 1, "user_id": 7, "time_in": "2025-03-03T09:00:00Z", "time_out": "2025-03-03T12:00:00Z"},
                    {"id": 2, "user_id": 7, "time_in": "2025-03-03T12:00:00Z", "time_out": None}
                ],
                "as_of": "2025-03-03T13:30:00Z"
            }
        }


class ProgressRequest(BaseModel):
    logs: List[TimeLogRecord] = Field(default_factory=list)
    owner_id: str
    required_hours: Optional[float] = Field(None, description="Hours the internship requires.")
    include_edit_requests: bool = False
    edit_requests: List[EditRequest] = Field(default_factory=list)

    @field_validator("owner_id", mode="before")
    @classmethod
    def stringify_ids(cls, value):
        return str(value) if isinstance(value, int) else value

    class Config:
        json_schema_extra = {
            "example": {
                "owner_id": "7",
                "required_hours": 520,
                "include_edit_requests": True,
                "logs": [
                    {"id": 1, "user_id": 7, "time_in": "2025-03-03T09:00:00Z", "time_out": "2025-03-03T17:00:00Z"}
                ],
                "edit_requests": [
                    {"id": 3, "log_id": 1, "requested_time_in": "2025-03-03T09:00:00Z",
                     "requested_time_out": "2025-03-03T18:00:00Z", "status": "approved"}
                ]
            }
        }


class LongLogsRequest(BaseModel):
    logs: List[TimeLogRecord] = Field(default_factory=list)
