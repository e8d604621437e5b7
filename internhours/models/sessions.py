from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum

from internhours.models.time_logs import TimeLogRecord, LogType, OvertimeStatus


class ClockState(str, Enum):
    NOT_CLOCKED_IN = "not_clocked_in"
    CLOCKED_IN = "clocked_in"
    CLOCKED_OUT = "clocked_out"
    AUTO_TIMED_OUT = "auto_timed_out"  # cap crossed, time-out not yet written
    OVERTIME_ELIGIBLE = "overtime_eligible"
    OVERTIME_CLOCKED_IN = "overtime_clocked_in"
    OVERTIME_CLOCKED_OUT = "overtime_clocked_out"


class Session(BaseModel):
    owner_id: str
    day: str  # owner-local YYYY-MM-DD
    time_in: datetime
    time_out: Optional[datetime] = None
    session_type: LogType = LogType.REGULAR
    overtime_status: OvertimeStatus = OvertimeStatus.NONE
    is_continuous_session: bool = False
    is_active: bool = False
    measured_until: Optional[datetime] = None  # live end of an active session
    logs: List[TimeLogRecord] = Field(default_factory=list)

    class Config:
        frozen = True

    @property
    def is_overtime_session(self) -> bool:
        return self.session_type != LogType.REGULAR


class SessionDuration(BaseModel):
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    overtime_status: OvertimeStatus = OvertimeStatus.NONE

    class Config:
        frozen = True


class SessionAccounting(BaseModel):
    session: Session
    raw_hours: float  # untruncated worked time
    accurate: SessionDuration
    raw: SessionDuration

    class Config:
        frozen = True


class OvertimeBreakdown(BaseModel):
    total: float = 0.0
    approved: float = 0.0
    pending: float = 0.0
    rejected: float = 0.0


class DailyAccounting(BaseModel):
    owner_id: str
    day: str
    sessions: List[SessionAccounting] = Field(default_factory=list)
    regular_hours: float = 0.0
    overtime_hours: OvertimeBreakdown = Field(default_factory=OvertimeBreakdown)
