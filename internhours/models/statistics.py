from pydantic import BaseModel, Field
from typing import List

from internhours.models.sessions import DailyAccounting, OvertimeBreakdown, ClockState


class InternshipProgress(BaseModel):
    internship_progress: float = 0.0
    progress_percentage: float = 0.0

    @property
    def display_percentage(self) -> float:
        return max(0.0, min(self.progress_percentage, 100.0))


class TimeStatistics(InternshipProgress):
    owner_id: str
    regular_hours: float = 0.0
    overtime_hours: OvertimeBreakdown = Field(default_factory=OvertimeBreakdown)
    total_hours_rendered: float = 0.0
    required_hours: float = 0.0
    remaining_hours: float = 0.0
    days_worked: int = 0
    active_session: bool = False
    clock_state: ClockState = ClockState.NOT_CLOCKED_IN
    days: List[DailyAccounting] = Field(default_factory=list)

    def to_progress(self) -> InternshipProgress:
        return InternshipProgress(
            internship_progress=self.internship_progress,
            progress_percentage=self.progress_percentage,
        )


class LongLogSummary(BaseModel):
    has_long_logs: bool = False
    count: int = 0
    log_ids: List[str] = Field(default_factory=list)
