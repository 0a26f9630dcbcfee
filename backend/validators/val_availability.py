from fastapi import HTTPException
from backend.schemas.sch_availability import ExceptionCreate, RecurringSlotCreate
from backend.utils.utl_time import time_to_minutes
from typing import List
from backend.models.mod_auth import UserRole

SCHEDULE_ROLES = {UserRole.TEACHER.value, UserRole.ADMIN.value}

class AvailabilityValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)

class TeacherNotFoundError(HTTPException):
    def __init__(self, teacher_id: str):
        super().__init__(status_code=404, detail=f"Teacher {teacher_id} not found")

class AvailabilityValidator:
    @staticmethod
    def validate_slots(slots: List[RecurringSlotCreate]):
        """Validate the recurring slots submitted for a full replacement"""
        for slot in slots:
            if not (0 <= slot.day_of_week <= 6):
                raise AvailabilityValidationError(
                    "day_of_week must be between 0 and 6"
                )
            if time_to_minutes(slot.end_time) <= time_to_minutes(slot.start_time):
                raise AvailabilityValidationError(
                    "Slot end time must be after its start time"
                )

    @staticmethod
    def validate_exception_times(exception: ExceptionCreate):
        """Validate that an exception is either whole-day or a proper time range"""
        if bool(exception.start_time) != bool(exception.end_time):
            raise AvailabilityValidationError(
                "start_time and end_time must be given together or both omitted"
            )
        if exception.start_time and \
                time_to_minutes(exception.end_time) <= time_to_minutes(exception.start_time):
            raise AvailabilityValidationError(
                "Exception end time must be after its start time"
            )

    @staticmethod
    def validate_create_exception(exception: ExceptionCreate):
        """Validate all rules for creating an availability exception"""
        AvailabilityValidator.validate_exception_times(exception)

    @staticmethod
    def validate_duration(duration: int):
        """Validate a requested session length"""
        if duration <= 0:
            raise AvailabilityValidationError(
                "Duration must be a positive number of minutes"
            )

    @staticmethod
    def validate_teacher_exists(users_db, teacher_id: str):
        """Raise TeacherNotFoundError unless the id belongs to a teacher or an admin"""
        query = "SELECT c.id, c.role FROM c WHERE c.id = @teacher_id"
        items = list(users_db.query_items(
            query=query,
            parameters=[{"name": "@teacher_id", "value": teacher_id}],
            enable_cross_partition_query=True
        ))
        if not any(item.get("role") in SCHEDULE_ROLES for item in items):
            raise TeacherNotFoundError(teacher_id)
