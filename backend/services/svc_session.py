from azure.cosmos import ContainerProxy
from backend.models.mod_session import SessionBooking, TeachingClass
from backend.utils.utl_intervals import Interval
from backend.utils.utl_time import minute_of_day, parse_timestamp, to_local, wall_clock
from datetime import date, datetime, timedelta
from typing import List
from backend.configuration.monitor import log_event, log_exception, start_span

# Widest gap between a stored offset and school wall-clock time
STORAGE_MARGIN = timedelta(days=1)

class SessionService:
    @staticmethod
    def get_teacher_classes(db: ContainerProxy, teacher_id: str) -> List[TeachingClass]:
        """Get every class the teacher is assigned to"""
        query = "SELECT c.id, c.title, c.session_duration, c.teacher_ids FROM c WHERE ARRAY_CONTAINS(c.teacher_ids, @teacher_id)"
        items = db.query_items(
            query=query,
            parameters=[{"name": "@teacher_id", "value": teacher_id}],
            enable_cross_partition_query=True
        )
        return [TeachingClass(**item) for item in items]

    @staticmethod
    def get_teacher_sessions(
        classes_db: ContainerProxy,
        sessions_db: ContainerProxy,
        teacher_id: str,
        start: datetime,
        end: datetime
    ) -> List[SessionBooking]:
        """
        Get the non-cancelled sessions with start <= date < end across all of
        the teacher's classes. Each booking carries its class's session length.

        start and end are naive school wall-clock bounds. Stored timestamps may
        carry any offset, so storage is queried a day wider on each side and
        the result is filtered on wall-clock time.
        """
        try:
            with start_span("get_teacher_sessions", attributes={"teacher_id": teacher_id}):
                log_event("Retrieving teacher sessions", {
                    "teacher_id": teacher_id,
                    "start": start.isoformat(),
                    "end": end.isoformat()
                })

                classes = SessionService.get_teacher_classes(classes_db, teacher_id)
                if not classes:
                    log_event("Teacher has no classes", {"teacher_id": teacher_id})
                    return []

                durations = {teaching_class.id: teaching_class.session_duration for teaching_class in classes}
                query = '''
                SELECT * FROM c
                WHERE ARRAY_CONTAINS(@class_ids, c.class_id)
                AND c.cancelled = false
                AND c.date >= @start
                AND c.date < @end
                '''
                items = sessions_db.query_items(
                    query=query,
                    parameters=[
                        {"name": "@class_ids", "value": list(durations)},
                        {"name": "@start", "value": (start - STORAGE_MARGIN).isoformat()},
                        {"name": "@end", "value": (end + STORAGE_MARGIN).isoformat()}
                    ],
                    enable_cross_partition_query=True
                )

                bookings = []
                for item in items:
                    if item.get("cancelled") or item.get("class_id") not in durations:
                        continue
                    session_start = parse_timestamp(item["date"])
                    if not start <= wall_clock(session_start) < end:
                        continue
                    bookings.append(SessionBooking(
                        id=item.get("id"),
                        class_id=item["class_id"],
                        date=session_start,
                        duration_minutes=durations[item["class_id"]],
                        cancelled=False
                    ))

                log_event("Teacher sessions retrieved", {
                    "teacher_id": teacher_id,
                    "count": len(bookings)
                })
                return bookings
        except Exception as e:
            log_exception(e, {"operation": "get_teacher_sessions", "teacher_id": teacher_id})
            raise

    @staticmethod
    def session_day(booking: SessionBooking) -> date:
        """The calendar day a session starts on, in school wall-clock time"""
        return to_local(booking.date).date()

    @staticmethod
    def session_interval(booking: SessionBooking) -> Interval:
        """
        The minutes a session occupies on its own day. An end past midnight
        is kept as is; the caller clips to the work window.
        """
        start = minute_of_day(booking.date)
        return Interval(start, start + booking.duration_minutes)
