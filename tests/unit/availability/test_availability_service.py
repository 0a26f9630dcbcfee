import pytest
from unittest.mock import MagicMock, patch
from datetime import date, datetime, timezone
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from backend.services.svc_availability import AvailabilityService
from backend.schemas.sch_availability import ExceptionCreate, RecurringSlotCreate
from backend.models.mod_availability import ExceptionType
from backend.validators.val_availability import AvailabilityValidationError

class TestAvailabilityService:
    @pytest.fixture
    def mock_db(self):
        return MagicMock()

    @pytest.fixture
    def stored_document(self):
        return {
            "id": "teacher123",
            "teacher_id": "teacher123",
            "slots": [
                {"day_of_week": 2, "start_time": "14:00", "end_time": "16:00"},
                {"day_of_week": 0, "start_time": "09:00", "end_time": "12:00"},
                {"day_of_week": 2, "start_time": "09:00", "end_time": "11:00"}
            ],
            "updated_at": "2025-03-31T12:00:00+00:00"
        }

    @pytest.fixture
    def sample_exception_item(self):
        return {
            "id": "exception-1",
            "teacher_id": "teacher123",
            "date": "2025-04-05",
            "type": "BLOCKED",
            "start_time": "12:00",
            "end_time": "13:00",
            "created_at": "2025-03-31T12:00:00+00:00"
        }

    def test_get_recurring_slots_sorted(self, mock_db, stored_document):
        mock_db.query_items.return_value = [stored_document]

        result = AvailabilityService.get_recurring_slots(mock_db, "teacher123")

        assert [(s.day_of_week, s.start_time) for s in result] == [(0, "09:00"), (2, "09:00"), (2, "14:00")]
        mock_db.query_items.assert_called_once()
        call_args = mock_db.query_items.call_args
        assert call_args.kwargs["parameters"] == [{"name": "@teacher_id", "value": "teacher123"}]

    def test_get_recurring_slots_for_one_day(self, mock_db, stored_document):
        mock_db.query_items.return_value = [stored_document]

        result = AvailabilityService.get_recurring_slots(mock_db, "teacher123", day_of_week=2)

        assert len(result) == 2
        assert all(s.day_of_week == 2 for s in result)

    def test_get_recurring_slots_without_document(self, mock_db):
        mock_db.query_items.return_value = []

        assert AvailabilityService.get_recurring_slots(mock_db, "teacher123") == []

    @patch('backend.services.svc_availability.datetime')
    def test_replace_recurring_slots(self, mock_datetime, mock_db):
        mock_now = datetime(2025, 3, 31, 12, 0, 0, tzinfo=timezone.utc)
        mock_datetime.now.return_value = mock_now
        slots = [
            RecurringSlotCreate(day_of_week=3, start_time="10:00", end_time="12:00"),
            RecurringSlotCreate(day_of_week=1, start_time="08:00", end_time="09:30")
        ]

        result = AvailabilityService.replace_recurring_slots(mock_db, "teacher123", slots)

        mock_db.upsert_item.assert_called_once()
        body = mock_db.upsert_item.call_args.kwargs["body"]
        assert body["id"] == "teacher123"
        assert body["teacher_id"] == "teacher123"
        assert body["slots"] == [
            {"day_of_week": 3, "start_time": "10:00", "end_time": "12:00"},
            {"day_of_week": 1, "start_time": "08:00", "end_time": "09:30"}
        ]
        assert body["updated_at"] == mock_now.isoformat()
        assert [s.day_of_week for s in result.slots] == [1, 3]
        assert result.updated_at == mock_now

    def test_replace_with_empty_list_clears(self, mock_db):
        result = AvailabilityService.replace_recurring_slots(mock_db, "teacher123", [])

        assert mock_db.upsert_item.call_args.kwargs["body"]["slots"] == []
        assert result.slots == []

    def test_replace_rejects_bad_slot_before_writing(self, mock_db):
        bad_slot = RecurringSlotCreate.model_construct(day_of_week=2, start_time="12:00", end_time="10:00")

        with pytest.raises(AvailabilityValidationError) as exc_info:
            AvailabilityService.replace_recurring_slots(mock_db, "teacher123", [bad_slot])

        assert exc_info.value.status_code == 400
        mock_db.upsert_item.assert_not_called()

    def test_replace_propagates_storage_error(self, mock_db):
        mock_db.upsert_item.side_effect = Exception("Database error")
        slots = [RecurringSlotCreate(day_of_week=0, start_time="09:00", end_time="10:00")]

        with pytest.raises(Exception) as exc_info:
            AvailabilityService.replace_recurring_slots(mock_db, "teacher123", slots)

        assert str(exc_info.value) == "Database error"

    def test_get_exceptions_with_range(self, mock_db, sample_exception_item):
        mock_db.query_items.return_value = [sample_exception_item]

        result = AvailabilityService.get_exceptions(mock_db, "teacher123", date(2025, 4, 5), date(2025, 4, 12))

        assert len(result) == 1
        assert result[0].date == date(2025, 4, 5)
        assert result[0].type == ExceptionType.BLOCKED
        assert not result[0].is_whole_day
        call_args = mock_db.query_items.call_args
        assert "c.date >= @start_date" in call_args.kwargs["query"]
        assert "c.date < @end_date" in call_args.kwargs["query"]
        assert call_args.kwargs["parameters"] == [
            {"name": "@teacher_id", "value": "teacher123"},
            {"name": "@start_date", "value": "2025-04-05"},
            {"name": "@end_date", "value": "2025-04-12"}
        ]

    def test_get_exceptions_without_range(self, mock_db):
        mock_db.query_items.return_value = [{
            "id": "exception-2",
            "teacher_id": "teacher123",
            "date": "2025-04-07T00:00:00",
            "type": "BUSY",
            "start_time": "",
            "end_time": ""
        }]

        result = AvailabilityService.get_exceptions(mock_db, "teacher123")

        assert result[0].date == date(2025, 4, 7)
        assert result[0].type == ExceptionType.BUSY
        assert result[0].is_whole_day
        assert "@start_date" not in mock_db.query_items.call_args.kwargs["query"]

    @patch('backend.services.svc_availability.uuid.uuid4', return_value="exception-id")
    def test_create_exception(self, mock_uuid, mock_db):
        exception = ExceptionCreate(date=date(2025, 4, 5), type="BUSY", start_time="10:00", end_time="11:00")

        result = AvailabilityService.create_exception(mock_db, "teacher123", exception)

        body = mock_db.create_item.call_args.kwargs["body"]
        assert body["id"] == "exception-id"
        assert body["teacher_id"] == "teacher123"
        assert body["date"] == "2025-04-05"
        assert body["type"] == "BUSY"
        assert result.id == "exception-id"
        assert result.start_time == "10:00"

    def test_create_whole_day_exception(self, mock_db):
        exception = ExceptionCreate(date=date(2025, 4, 5))

        result = AvailabilityService.create_exception(mock_db, "teacher123", exception)

        body = mock_db.create_item.call_args.kwargs["body"]
        assert body["type"] == "BLOCKED"
        assert body["start_time"] is None and body["end_time"] is None
        assert result.is_whole_day

    def test_create_exception_with_one_time(self, mock_db):
        exception = ExceptionCreate(date=date(2025, 4, 5), start_time="10:00")

        with pytest.raises(AvailabilityValidationError):
            AvailabilityService.create_exception(mock_db, "teacher123", exception)

        mock_db.create_item.assert_not_called()

    def test_create_exception_with_reversed_times(self, mock_db):
        exception = ExceptionCreate(date=date(2025, 4, 5), start_time="11:00", end_time="10:00")

        with pytest.raises(AvailabilityValidationError):
            AvailabilityService.create_exception(mock_db, "teacher123", exception)

    def test_delete_exception(self, mock_db):
        result = AvailabilityService.delete_exception(mock_db, "teacher123", "exception-1")

        assert result is True
        mock_db.delete_item.assert_called_once_with(item="exception-1", partition_key="teacher123")

    def test_delete_exception_not_found(self, mock_db):
        mock_db.delete_item.side_effect = CosmosResourceNotFoundError(message="Not found")

        assert AvailabilityService.delete_exception(mock_db, "teacher123", "missing") is False

    def test_delete_exception_storage_error(self, mock_db):
        mock_db.delete_item.side_effect = Exception("Database error")

        with pytest.raises(Exception):
            AvailabilityService.delete_exception(mock_db, "teacher123", "exception-1")

    def test_get_teacher_availability(self, stored_document, sample_exception_item):
        availability_db = MagicMock()
        availability_db.query_items.return_value = [stored_document]
        exception_db = MagicMock()
        exception_db.query_items.return_value = [sample_exception_item]

        result = AvailabilityService.get_teacher_availability(availability_db, exception_db, "teacher123")

        assert len(result["slots"]) == 3
        assert result["exceptions"][0].id == "exception-1"
