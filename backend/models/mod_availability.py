from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime
from enum import Enum
from backend.utils.utl_intervals import SegmentState

class ExceptionType(str, Enum):
    BLOCKED = "BLOCKED"  # never available in that window
    BUSY = "BUSY"        # available but occupied

class RecurringAvailability(BaseModel):
    day_of_week: int    # 0=Saturday ... 6=Friday
    start_time: str     # "HH:mm"
    end_time: str

class TeacherAvailability(BaseModel):
    id: str             # same as teacher_id, one document per teacher
    teacher_id: str
    slots: List[RecurringAvailability] = []
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AvailabilityException(BaseModel):
    id: str
    teacher_id: str
    date: date
    type: ExceptionType = ExceptionType.BLOCKED
    start_time: Optional[str] = None   # both omitted means the whole day
    end_time: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_whole_day(self) -> bool:
        return not self.start_time or not self.end_time

class TimeInterval(BaseModel):
    start: str
    end: str

class ScheduleSegment(BaseModel):
    start: str
    end: str
    state: SegmentState

class DaySchedule(BaseModel):
    day_of_week: int
    date: str           # ISO calendar date
    segments: List[ScheduleSegment]
