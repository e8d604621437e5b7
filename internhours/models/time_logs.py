from pydantic import BaseModel, Field, AliasChoices, field_validator, model_validator
from datetime import datetime
from typing import Optional, Union
from enum import Enum


class LogStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class LogType(str, Enum):
    REGULAR = "regular"
    OVERTIME = "overtime"
    EXTENDED_OVERTIME = "extended_overtime"


class OvertimeStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EditRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVERTED = "reverted"


Timestamp = Union[datetime, str]


class TimeLogRecord(BaseModel):
    id: str
    owner_id: str = Field(validation_alias=AliasChoices("owner_id", "user_id", "intern_id"))
    time_in: Optional[Timestamp] = None
    time_out: Optional[Timestamp] = None  # None while the session is still open
    status: LogStatus = LogStatus.PENDING
    log_type: LogType = LogType.REGULAR
    overtime_status: Optional[OvertimeStatus] = None

    class Config:
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def default_status(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("status"):
            data["status"] = LogStatus.COMPLETED if data.get("time_out") else LogStatus.PENDING
        if not data.get("log_type"):
            data.pop("log_type", None)
        if not data.get("overtime_status"):
            data["overtime_status"] = None
        return data

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def stringify_ids(cls, value):
        return str(value) if isinstance(value, int) else value

    @property
    def is_overtime(self) -> bool:
        return self.log_type != LogType.REGULAR


class EditRequest(BaseModel):
    id: str
    log_id: str
    requested_time_in: Optional[Timestamp] = None
    requested_time_out: Optional[Timestamp] = None
    original_time_in: Optional[Timestamp] = None
    original_time_out: Optional[Timestamp] = None
    status: EditRequestStatus = EditRequestStatus.PENDING

    class Config:
        frozen = True

    @field_validator("id", "log_id", mode="before")
    @classmethod
    def stringify_ids(cls, value):
        return str(value) if isinstance(value, int) else value
