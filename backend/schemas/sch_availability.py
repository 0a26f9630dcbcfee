from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import date, datetime
from backend.models.mod_availability import (
    ExceptionType,
    RecurringAvailability,
    AvailabilityException,
    TimeInterval,
    DaySchedule
)
from backend.utils.utl_time import is_valid_time, time_to_minutes

def _check_time(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_time(value):
        raise ValueError('time must be in HH:mm 24-hour format')
    return value

class RecurringSlotCreate(BaseModel):
    day_of_week: int = Field(description="0=Saturday ... 6=Friday")
    start_time: str = Field(description="Start time as HH:mm")
    end_time: str = Field(description="End time as HH:mm")

    @validator('day_of_week')
    def validate_day_of_week(cls, v):
        if not (0 <= v <= 6):
            raise ValueError('day_of_week must be between 0 and 6')
        return v

    @validator('start_time')
    def validate_start_time(cls, v):
        return _check_time(v)

    @validator('end_time')
    def end_time_must_be_after_start_time(cls, v, values):
        _check_time(v)
        if 'start_time' in values and time_to_minutes(v) <= time_to_minutes(values['start_time']):
            raise ValueError('end_time must be after start_time')
        return v

class AvailabilityReplace(BaseModel):
    slots: List[RecurringSlotCreate]

class ExceptionCreate(BaseModel):
    date: date
    type: ExceptionType = ExceptionType.BLOCKED
    start_time: Optional[str] = Field(
        default=None,
        description="HH:mm, omit together with end_time for a whole-day exception"
    )
    end_time: Optional[str] = None

    @validator('start_time')
    def validate_start_time(cls, v):
        return _check_time(v or None)

    @validator('end_time')
    def validate_end_time(cls, v):
        return _check_time(v or None)

class AvailabilityResponse(BaseModel):
    slots: List[RecurringAvailability]
    exceptions: List[AvailabilityException]

class AvailabilityReplaceResponse(BaseModel):
    success: bool = True
    slots: List[RecurringAvailability]

class WeeklyScheduleResponse(BaseModel):
    schedule: List[DaySchedule]

class FreeSlotsResponse(BaseModel):
    date: date
    duration: int
    free_slots: List[TimeInterval]

class SessionFitResponse(BaseModel):
    start: datetime
    duration: int
    fits: bool
