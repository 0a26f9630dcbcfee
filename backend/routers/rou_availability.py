from fastapi import APIRouter, HTTPException, Depends, Query
from azure.cosmos import ContainerProxy
from backend.schemas.sch_availability import (
    AvailabilityReplace,
    AvailabilityReplaceResponse,
    AvailabilityResponse,
    ExceptionCreate,
    FreeSlotsResponse,
    SessionFitResponse,
    WeeklyScheduleResponse
)
from backend.models.mod_auth import AuthUser, UserRole
from backend.models.mod_availability import AvailabilityException
from backend.services.svc_availability import AvailabilityService
from backend.services.svc_schedule import ScheduleService
from backend.configuration.database import (
    get_availabilities_container,
    get_exceptions_container,
    get_schedule_containers,
    ScheduleContainers
)
from backend.dependencies.dep_auth import get_current_user, get_current_teacher
from backend.utils.utl_time import today
from datetime import date, datetime
from typing import Optional

router = APIRouter(
    prefix="/teachers",
    tags=["Availability"],
    responses={404: {"description": "Not found"}},
)

def _ensure_can_edit(current_user: AuthUser, teacher_id: str):
    """Admins edit any schedule, teachers only their own"""
    if current_user.role == UserRole.ADMIN:
        return
    if current_user.id != teacher_id:
        raise HTTPException(
            status_code=403,
            detail="Teachers can only manage their own availability"
        )

@router.get("/{teacher_id}/availability", response_model=AvailabilityResponse)
def get_teacher_availability(
    teacher_id: str,
    availability_db: ContainerProxy = Depends(get_availabilities_container),
    exception_db: ContainerProxy = Depends(get_exceptions_container),
    current_user: AuthUser = Depends(get_current_user)
):
    """
    Get a teacher's recurring weekly slots and all of their exceptions.
    """
    return AvailabilityService.get_teacher_availability(availability_db, exception_db, teacher_id)

@router.put("/{teacher_id}/availability", response_model=AvailabilityReplaceResponse)
def replace_teacher_availability(
    teacher_id: str,
    availability: AvailabilityReplace,
    db: ContainerProxy = Depends(get_availabilities_container),
    current_user: AuthUser = Depends(get_current_teacher)
):
    """
    Replace every recurring slot of a teacher.

    - The submitted list becomes the whole weekly availability, nothing is merged
    - Overlapping slots are allowed and read as their union
    - Teachers can only replace their own availability
    - Admins can replace any teacher's availability
    """
    _ensure_can_edit(current_user, teacher_id)
    saved = AvailabilityService.replace_recurring_slots(db, teacher_id, availability.slots)
    return AvailabilityReplaceResponse(success=True, slots=saved.slots)

@router.post("/{teacher_id}/availability/exceptions", response_model=AvailabilityException, status_code=201)
def create_exception(
    teacher_id: str,
    exception: ExceptionCreate,
    db: ContainerProxy = Depends(get_exceptions_container),
    current_user: AuthUser = Depends(get_current_teacher)
):
    """
    Record a one-off exception for one calendar date.

    - BLOCKED removes the window from the teacher's availability
    - BUSY keeps the availability but marks the window as occupied
    - Omitting start_time and end_time applies the exception to the whole day
    """
    _ensure_can_edit(current_user, teacher_id)
    return AvailabilityService.create_exception(db, teacher_id, exception)

@router.delete("/{teacher_id}/availability/exceptions/{exception_id}", status_code=204)
def delete_exception(
    teacher_id: str,
    exception_id: str,
    db: ContainerProxy = Depends(get_exceptions_container),
    current_user: AuthUser = Depends(get_current_teacher)
):
    """
    Delete an exception.

    Returns:
    - 204: Successfully deleted
    - 404: Exception not found
    """
    _ensure_can_edit(current_user, teacher_id)
    deleted = AvailabilityService.delete_exception(db, teacher_id, exception_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Exception not found")

@router.get("/{teacher_id}/availability/weekly-schedule", response_model=WeeklyScheduleResponse)
def get_weekly_schedule(
    teacher_id: str,
    date: Optional[date] = Query(None, description="Any date inside the week, defaults to today"),
    containers: ScheduleContainers = Depends(get_schedule_containers),
    current_user: AuthUser = Depends(get_current_user)
):
    """
    Get the Saturday-to-Friday schedule of the week containing the given date.

    Each day splits 07:00-22:00 into unavailable, available and busy segments.
    """
    schedule = ScheduleService.get_teacher_weekly_schedule(containers, teacher_id, date or today())
    return WeeklyScheduleResponse(schedule=schedule)

@router.get("/{teacher_id}/availability/free-slots", response_model=FreeSlotsResponse)
def get_free_slots(
    teacher_id: str,
    date: date = Query(..., description="Calendar date to search"),
    duration: int = Query(90, description="Required session length in minutes"),
    containers: ScheduleContainers = Depends(get_schedule_containers),
    current_user: AuthUser = Depends(get_current_user)
):
    """
    Get the windows on a date long enough to hold a session of the given length.
    """
    free_slots = ScheduleService.get_teacher_free_slots(containers, teacher_id, date, duration)
    return FreeSlotsResponse(date=date, duration=duration, free_slots=free_slots)

@router.get("/{teacher_id}/availability/fits", response_model=SessionFitResponse)
def check_session_fits(
    teacher_id: str,
    start: datetime = Query(..., description="Proposed session start"),
    duration: int = Query(90, description="Session length in minutes"),
    containers: ScheduleContainers = Depends(get_schedule_containers),
    current_user: AuthUser = Depends(get_current_user)
):
    """
    Check whether a session starting at the given time fits one of the teacher's free slots.
    """
    fits = ScheduleService.can_schedule_session(containers, teacher_id, start, duration)
    return SessionFitResponse(start=start, duration=duration, fits=fits)
