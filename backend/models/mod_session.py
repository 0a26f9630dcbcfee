from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

class TeachingClass(BaseModel):
    id: str
    title: Optional[str] = None
    session_duration: int               # minutes
    teacher_ids: List[str] = []

    class Config:
        from_attributes = True

class SessionBooking(BaseModel):
    id: Optional[str] = None
    class_id: str
    date: datetime                      # session start
    duration_minutes: int               # inherited from the class
    cancelled: bool = False

    class Config:
        from_attributes = True
