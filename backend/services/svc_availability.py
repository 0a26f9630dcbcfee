from azure.cosmos import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from backend.models.mod_availability import (
    AvailabilityException,
    RecurringAvailability,
    TeacherAvailability
)
from backend.schemas.sch_availability import ExceptionCreate, RecurringSlotCreate
from backend.validators.val_availability import AvailabilityValidator
from backend.utils.utl_time import time_to_minutes
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional
from backend.configuration.monitor import log_event, log_exception, start_span

class AvailabilityService:
    @staticmethod
    def _sort_slots(slots: List[RecurringAvailability]) -> List[RecurringAvailability]:
        return sorted(slots, key=lambda s: (s.day_of_week, time_to_minutes(s.start_time)))

    @staticmethod
    def _get_document(db: ContainerProxy, teacher_id: str) -> Optional[dict]:
        query = "SELECT * FROM c WHERE c.teacher_id = @teacher_id"
        items = list(db.query_items(
            query=query,
            parameters=[{"name": "@teacher_id", "value": teacher_id}],
            enable_cross_partition_query=True
        ))
        return items[0] if items else None

    @staticmethod
    def get_recurring_slots(db: ContainerProxy, teacher_id: str, day_of_week: Optional[int] = None) -> List[RecurringAvailability]:
        """Get a teacher's recurring weekly slots, optionally for a single weekday"""
        try:
            with start_span("get_recurring_slots", attributes={"teacher_id": teacher_id}):
                log_event("Retrieving recurring availability", {
                    "teacher_id": teacher_id,
                    "day_of_week": day_of_week
                })

                item = AvailabilityService._get_document(db, teacher_id)
                slots = [RecurringAvailability(**slot) for slot in item.get("slots", [])] if item else []
                if day_of_week is not None:
                    slots = [slot for slot in slots if slot.day_of_week == day_of_week]

                log_event("Recurring availability retrieved", {
                    "teacher_id": teacher_id,
                    "count": len(slots)
                })
                return AvailabilityService._sort_slots(slots)
        except Exception as e:
            log_exception(e, {"operation": "get_recurring_slots", "teacher_id": teacher_id})
            raise

    @staticmethod
    def replace_recurring_slots(db: ContainerProxy, teacher_id: str, slots: List[RecurringSlotCreate]) -> TeacherAvailability:
        """
        Replace every recurring slot of a teacher with the submitted list.

        All slots live in a single document per teacher, so the replacement
        is one upsert and readers never observe a half-written schedule.
        """
        try:
            with start_span("replace_recurring_slots", attributes={"teacher_id": teacher_id}):
                log_event("Replace recurring availability started", {
                    "teacher_id": teacher_id,
                    "slot_count": len(slots)
                })

                AvailabilityValidator.validate_slots(slots)

                current_time = datetime.now(timezone.utc)
                availability_dict = {
                    "id": teacher_id,
                    "teacher_id": teacher_id,
                    "slots": [
                        {
                            "day_of_week": slot.day_of_week,
                            "start_time": slot.start_time,
                            "end_time": slot.end_time
                        }
                        for slot in slots
                    ],
                    "updated_at": current_time.isoformat()
                }

                db.upsert_item(body=availability_dict)

                log_event("Recurring availability replaced", {
                    "teacher_id": teacher_id,
                    "slot_count": len(slots)
                })

                return TeacherAvailability(
                    id=teacher_id,
                    teacher_id=teacher_id,
                    slots=AvailabilityService._sort_slots(
                        [RecurringAvailability(**slot) for slot in availability_dict["slots"]]
                    ),
                    updated_at=current_time
                )
        except Exception as e:
            log_exception(e, {"operation": "replace_recurring_slots", "teacher_id": teacher_id})
            raise

    @staticmethod
    def _convert_exception(item: dict) -> AvailabilityException:
        """Convert a dictionary from storage format to model format"""
        converted = {
            "id": item["id"],
            "teacher_id": item["teacher_id"],
            "date": date.fromisoformat(item["date"][:10]),
            "type": item.get("type", "BLOCKED"),
            "start_time": item.get("start_time") or None,
            "end_time": item.get("end_time") or None
        }
        if item.get("created_at"):
            converted["created_at"] = datetime.fromisoformat(item["created_at"])
        return AvailabilityException(**converted)

    @staticmethod
    def get_exceptions(
        db: ContainerProxy,
        teacher_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[AvailabilityException]:
        """Get a teacher's exceptions, optionally those with start_date <= date < end_date"""
        try:
            with start_span("get_exceptions", attributes={"teacher_id": teacher_id}):
                log_event("Retrieving availability exceptions", {
                    "teacher_id": teacher_id,
                    "start_date": start_date.isoformat() if start_date else None,
                    "end_date": end_date.isoformat() if end_date else None
                })

                query = "SELECT * FROM c WHERE c.teacher_id = @teacher_id"
                parameters = [{"name": "@teacher_id", "value": teacher_id}]
                if start_date is not None:
                    query += " AND c.date >= @start_date"
                    parameters.append({"name": "@start_date", "value": start_date.isoformat()})
                if end_date is not None:
                    query += " AND c.date < @end_date"
                    parameters.append({"name": "@end_date", "value": end_date.isoformat()})
                query += " ORDER BY c.date ASC"

                items = list(db.query_items(
                    query=query,
                    parameters=parameters,
                    enable_cross_partition_query=True
                ))
                result = [AvailabilityService._convert_exception(item) for item in items]

                log_event("Availability exceptions retrieved", {
                    "teacher_id": teacher_id,
                    "count": len(result)
                })
                return result
        except Exception as e:
            log_exception(e, {"operation": "get_exceptions", "teacher_id": teacher_id})
            raise

    @staticmethod
    def create_exception(db: ContainerProxy, teacher_id: str, exception: ExceptionCreate) -> AvailabilityException:
        try:
            with start_span("create_exception", attributes={"teacher_id": teacher_id}):
                log_event("Create availability exception started", {
                    "teacher_id": teacher_id,
                    "date": exception.date.isoformat(),
                    "type": exception.type
                })

                # Validate business rules
                AvailabilityValidator.validate_create_exception(exception)

                exception_id = str(uuid.uuid4())
                current_time = datetime.now(timezone.utc)
                exception_dict = {
                    "id": exception_id,
                    "teacher_id": teacher_id,
                    "date": exception.date.isoformat(),
                    "type": exception.type.value,
                    "start_time": exception.start_time or None,
                    "end_time": exception.end_time or None,
                    "created_at": current_time.isoformat()
                }

                db.create_item(body=exception_dict)

                log_event("Availability exception created", {
                    "exception_id": exception_id,
                    "teacher_id": teacher_id
                })

                return AvailabilityService._convert_exception(exception_dict)
        except Exception as e:
            log_exception(e, {"operation": "create_exception", "teacher_id": teacher_id})
            raise

    @staticmethod
    def delete_exception(db: ContainerProxy, teacher_id: str, exception_id: str) -> bool:
        try:
            with start_span("delete_exception", attributes={"exception_id": exception_id}):
                log_event("Delete availability exception started", {
                    "teacher_id": teacher_id,
                    "exception_id": exception_id
                })

                db.delete_item(item=exception_id, partition_key=teacher_id)

                log_event("Availability exception deleted", {"exception_id": exception_id})
                return True
        except CosmosResourceNotFoundError:
            log_event("Availability exception not found", {"exception_id": exception_id})
            return False
        except Exception as e:
            log_exception(e, {"operation": "delete_exception", "exception_id": exception_id})
            raise

    @staticmethod
    def get_teacher_availability(
        availability_db: ContainerProxy,
        exception_db: ContainerProxy,
        teacher_id: str
    ) -> dict:
        """Recurring slots plus every exception, the payload the editor loads"""
        return {
            "slots": AvailabilityService.get_recurring_slots(availability_db, teacher_id),
            "exceptions": AvailabilityService.get_exceptions(exception_db, teacher_id)
        }
