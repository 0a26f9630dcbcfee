from concurrent.futures import ThreadPoolExecutor
from backend.configuration.database import ScheduleContainers
from backend.models.mod_availability import (
    AvailabilityException,
    DaySchedule,
    ExceptionType,
    RecurringAvailability,
    ScheduleSegment,
    TimeInterval
)
from backend.models.mod_session import SessionBooking
from backend.services.svc_availability import AvailabilityService
from backend.services.svc_session import SessionService
from backend.validators.val_availability import AvailabilityValidator
from backend.utils.utl_intervals import (
    WORK_DAY_END,
    WORK_DAY_START,
    Interval,
    build_day_segments,
    merge_intervals,
    subtract_intervals
)
from backend.utils.utl_time import (
    DAYS_PER_WEEK,
    minutes_to_time,
    time_to_minutes,
    to_local,
    to_saturday_based,
    week_dates
)
from datetime import date, datetime, time, timedelta
from typing import List
from backend.configuration.monitor import bind_context, log_event, log_exception, log_metric, start_span

class ScheduleService:
    """
    Read-only views over a teacher's availability: the three-state weekly
    schedule and the free windows on one date. Every call recomputes from
    storage; nothing is cached or written.
    """

    @staticmethod
    def _day_start(day: date) -> datetime:
        return datetime.combine(day, time.min)

    @staticmethod
    def _slot_interval(slot: RecurringAvailability) -> Interval:
        return Interval(time_to_minutes(slot.start_time), time_to_minutes(slot.end_time))

    @staticmethod
    def _exception_interval(exception: AvailabilityException) -> Interval:
        return Interval(time_to_minutes(exception.start_time), time_to_minutes(exception.end_time))

    @staticmethod
    def _to_time_interval(interval: Interval) -> TimeInterval:
        return TimeInterval(start=minutes_to_time(interval.start), end=minutes_to_time(interval.end))

    @staticmethod
    def _as_calendar_day(value) -> date:
        if isinstance(value, datetime):
            return to_local(value).date()
        return value

    @staticmethod
    def build_day(
        day: date,
        recurring: List[RecurringAvailability],
        exceptions: List[AvailabilityException],
        sessions: List[SessionBooking]
    ) -> DaySchedule:
        """Classify one calendar day of the work window from already-fetched data"""
        day_of_week = to_saturday_based(day)
        available = merge_intervals(
            ScheduleService._slot_interval(slot) for slot in recurring if slot.day_of_week == day_of_week
        )
        day_exceptions = [exception for exception in exceptions if exception.date == day]

        for exception in day_exceptions:
            if exception.type != ExceptionType.BLOCKED:
                continue
            if exception.is_whole_day:
                available = []
                break
            available = subtract_intervals(available, [ScheduleService._exception_interval(exception)])

        busy = []
        for exception in day_exceptions:
            if exception.type != ExceptionType.BUSY:
                continue
            if exception.is_whole_day:
                busy.append(Interval(WORK_DAY_START, WORK_DAY_END))
            else:
                busy.append(ScheduleService._exception_interval(exception))
        busy.extend(
            SessionService.session_interval(booking)
            for booking in sessions
            if SessionService.session_day(booking) == day
        )

        segments = build_day_segments(available, busy, WORK_DAY_START, WORK_DAY_END)
        return DaySchedule(
            day_of_week=day_of_week,
            date=day.isoformat(),
            segments=[
                ScheduleSegment(
                    start=minutes_to_time(segment.start),
                    end=minutes_to_time(segment.end),
                    state=segment.state
                )
                for segment in segments
            ]
        )

    @staticmethod
    def get_teacher_weekly_schedule(containers: ScheduleContainers, teacher_id: str, any_date) -> List[DaySchedule]:
        """
        Build the Saturday-to-Friday schedule of the week containing any_date.

        The recurring slots, the week's exceptions and the week's sessions are
        independent reads, so they are fetched concurrently and joined before
        any day is classified.
        """
        try:
            day = ScheduleService._as_calendar_day(any_date)
            with start_span("get_teacher_weekly_schedule", attributes={"teacher_id": teacher_id, "date": day.isoformat()}):
                log_event("Weekly schedule requested", {"teacher_id": teacher_id, "date": day.isoformat()})

                AvailabilityValidator.validate_teacher_exists(containers.users, teacher_id)

                days = week_dates(day)
                week_begin = days[0]
                week_end = week_begin + timedelta(days=DAYS_PER_WEEK)

                with ThreadPoolExecutor(max_workers=3) as executor:
                    recurring_future = executor.submit(
                        bind_context(AvailabilityService.get_recurring_slots),
                        containers.availabilities, teacher_id
                    )
                    exceptions_future = executor.submit(
                        bind_context(AvailabilityService.get_exceptions),
                        containers.exceptions, teacher_id, week_begin, week_end
                    )
                    sessions_future = executor.submit(
                        bind_context(SessionService.get_teacher_sessions),
                        containers.classes, containers.sessions, teacher_id,
                        ScheduleService._day_start(week_begin), ScheduleService._day_start(week_end)
                    )
                    recurring = recurring_future.result()
                    exceptions = exceptions_future.result()
                    sessions = sessions_future.result()

                schedule = [
                    ScheduleService.build_day(calendar_day, recurring, exceptions, sessions)
                    for calendar_day in days
                ]

                log_event("Weekly schedule built", {
                    "teacher_id": teacher_id,
                    "week_start": week_begin.isoformat(),
                    "exceptions": len(exceptions),
                    "sessions": len(sessions)
                })
                return schedule
        except Exception as e:
            log_exception(e, {"operation": "get_teacher_weekly_schedule", "teacher_id": teacher_id})
            raise

    @staticmethod
    def _free_intervals(containers: ScheduleContainers, teacher_id: str, day: date, duration: int) -> List[Interval]:
        day_of_week = to_saturday_based(day)
        recurring = AvailabilityService.get_recurring_slots(containers.availabilities, teacher_id, day_of_week)
        if not recurring:
            return []

        available = merge_intervals(ScheduleService._slot_interval(slot) for slot in recurring)

        exceptions = AvailabilityService.get_exceptions(
            containers.exceptions, teacher_id, day, day + timedelta(days=1)
        )
        exceptions = [exception for exception in exceptions if exception.date == day]
        for exception in exceptions:
            # A whole-day exception of either type closes the day
            if exception.is_whole_day:
                return []
            if exception.type == ExceptionType.BUSY:
                continue
            available = subtract_intervals(available, [ScheduleService._exception_interval(exception)])

        sessions = SessionService.get_teacher_sessions(
            containers.classes, containers.sessions, teacher_id,
            ScheduleService._day_start(day), ScheduleService._day_start(day + timedelta(days=1))
        )
        busy = [
            SessionService.session_interval(booking)
            for booking in sessions
            if SessionService.session_day(booking) == day
        ]
        busy.extend(
            ScheduleService._exception_interval(exception)
            for exception in exceptions
            if exception.type == ExceptionType.BUSY
        )

        available = subtract_intervals(available, busy)
        return sorted(interval for interval in available if interval.length >= duration)

    @staticmethod
    def get_teacher_free_slots(containers: ScheduleContainers, teacher_id: str, day, duration: int) -> List[TimeInterval]:
        """
        Windows on ``day`` at least ``duration`` minutes long in which the
        teacher is available and not occupied, sorted by start.
        """
        try:
            day = ScheduleService._as_calendar_day(day)
            with start_span("get_teacher_free_slots", attributes={
                "teacher_id": teacher_id,
                "date": day.isoformat(),
                "duration": duration
            }):
                log_event("Free slots requested", {
                    "teacher_id": teacher_id,
                    "date": day.isoformat(),
                    "duration": duration
                })

                AvailabilityValidator.validate_duration(duration)
                AvailabilityValidator.validate_teacher_exists(containers.users, teacher_id)

                free = ScheduleService._free_intervals(containers, teacher_id, day, duration)

                log_metric("free_slot_count", len(free), {"teacher_id": teacher_id, "date": day.isoformat()})
                return [ScheduleService._to_time_interval(interval) for interval in free]
        except Exception as e:
            log_exception(e, {"operation": "get_teacher_free_slots", "teacher_id": teacher_id})
            raise

    @staticmethod
    def can_schedule_session(containers: ScheduleContainers, teacher_id: str, start: datetime, duration: int) -> bool:
        """Whether a session of ``duration`` minutes starting at ``start`` fits a free window"""
        try:
            local_start = to_local(start)
            with start_span("can_schedule_session", attributes={
                "teacher_id": teacher_id,
                "start": local_start.isoformat(),
                "duration": duration
            }):
                AvailabilityValidator.validate_duration(duration)
                AvailabilityValidator.validate_teacher_exists(containers.users, teacher_id)

                begin = local_start.hour * 60 + local_start.minute
                free = ScheduleService._free_intervals(containers, teacher_id, local_start.date(), duration)
                fits = any(interval.start <= begin and begin + duration <= interval.end for interval in free)

                log_event("Session fit checked", {
                    "teacher_id": teacher_id,
                    "start": local_start.isoformat(),
                    "duration": duration,
                    "fits": fits
                })
                return fits
        except Exception as e:
            log_exception(e, {"operation": "can_schedule_session", "teacher_id": teacher_id})
            raise
