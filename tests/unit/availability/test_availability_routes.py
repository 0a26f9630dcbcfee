import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient
from fastapi import FastAPI
from datetime import date, datetime, timezone

from backend.routers.rou_availability import router
from backend.services.svc_availability import AvailabilityService
from backend.models.mod_auth import AuthUser, UserRole
from backend.models.mod_availability import (
    AvailabilityException,
    ExceptionType,
    RecurringAvailability,
    TeacherAvailability
)
from backend.configuration.database import get_availabilities_container, get_exceptions_container
from backend.dependencies.dep_auth import get_current_user

app = FastAPI()
app.include_router(router)

TEACHER = AuthUser(id="teacher123", email="teacher@example.com", name="Sara", role=UserRole.TEACHER)
OTHER_TEACHER = AuthUser(id="teacher999", email="other@example.com", role=UserRole.TEACHER)
ADMIN = AuthUser(id="admin1", email="admin@example.com", role=UserRole.ADMIN)
STUDENT = AuthUser(id="student1", email="student@example.com", role=UserRole.STUDENT)

@pytest.fixture
def client():
    app.dependency_overrides[get_availabilities_container] = lambda: MagicMock()
    app.dependency_overrides[get_exceptions_container] = lambda: MagicMock()
    yield TestClient(app)
    app.dependency_overrides.clear()

def login_as(user):
    app.dependency_overrides[get_current_user] = lambda: user

@pytest.fixture
def mock_availability_service():
    with patch.object(AvailabilityService, 'get_teacher_availability') as mock_get, \
         patch.object(AvailabilityService, 'replace_recurring_slots') as mock_replace, \
         patch.object(AvailabilityService, 'create_exception') as mock_create, \
         patch.object(AvailabilityService, 'delete_exception') as mock_delete:

        yield {
            'get_teacher_availability': mock_get,
            'replace_recurring_slots': mock_replace,
            'create_exception': mock_create,
            'delete_exception': mock_delete
        }

@pytest.fixture
def sample_exception():
    return AvailabilityException(
        id="exception-1",
        teacher_id="teacher123",
        date=date(2025, 4, 5),
        type=ExceptionType.BLOCKED,
        start_time="12:00",
        end_time="13:00",
        created_at=datetime(2025, 3, 31, 12, 0, 0, tzinfo=timezone.utc)
    )

def test_get_availability(client, mock_availability_service, sample_exception):
    login_as(STUDENT)
    mock_availability_service['get_teacher_availability'].return_value = {
        "slots": [RecurringAvailability(day_of_week=0, start_time="09:00", end_time="17:00")],
        "exceptions": [sample_exception]
    }

    response = client.get("/teachers/teacher123/availability")

    assert response.status_code == 200
    data = response.json()
    assert data["slots"] == [{"day_of_week": 0, "start_time": "09:00", "end_time": "17:00"}]
    assert data["exceptions"][0]["date"] == "2025-04-05"
    assert data["exceptions"][0]["type"] == "BLOCKED"

def test_replace_availability_own(client, mock_availability_service):
    login_as(TEACHER)
    mock_availability_service['replace_recurring_slots'].return_value = TeacherAvailability(
        id="teacher123",
        teacher_id="teacher123",
        slots=[RecurringAvailability(day_of_week=1, start_time="08:00", end_time="10:00")]
    )

    response = client.put(
        "/teachers/teacher123/availability",
        json={"slots": [{"day_of_week": 1, "start_time": "08:00", "end_time": "10:00"}]}
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "slots": [{"day_of_week": 1, "start_time": "08:00", "end_time": "10:00"}]
    }
    args = mock_availability_service['replace_recurring_slots'].call_args.args
    assert args[1] == "teacher123"
    assert args[2][0].start_time == "08:00"

def test_replace_availability_admin(client, mock_availability_service):
    login_as(ADMIN)
    mock_availability_service['replace_recurring_slots'].return_value = TeacherAvailability(
        id="teacher123", teacher_id="teacher123", slots=[]
    )

    response = client.put("/teachers/teacher123/availability", json={"slots": []})

    assert response.status_code == 200
    assert response.json()["slots"] == []

def test_replace_availability_other_teacher(client, mock_availability_service):
    login_as(OTHER_TEACHER)

    response = client.put("/teachers/teacher123/availability", json={"slots": []})

    assert response.status_code == 403
    assert response.json()["detail"] == "Teachers can only manage their own availability"
    mock_availability_service['replace_recurring_slots'].assert_not_called()

def test_replace_availability_student(client, mock_availability_service):
    login_as(STUDENT)

    response = client.put("/teachers/student1/availability", json={"slots": []})

    assert response.status_code == 403
    mock_availability_service['replace_recurring_slots'].assert_not_called()

@pytest.mark.parametrize("slot", [
    {"day_of_week": 7, "start_time": "08:00", "end_time": "10:00"},
    {"day_of_week": 1, "start_time": "8:00", "end_time": "10:00"},
    {"day_of_week": 1, "start_time": "10:00", "end_time": "10:00"},
    {"day_of_week": 1, "start_time": "10:00", "end_time": "24:00"},
])
def test_replace_availability_invalid_slot(client, mock_availability_service, slot):
    login_as(TEACHER)

    response = client.put("/teachers/teacher123/availability", json={"slots": [slot]})

    assert response.status_code == 422
    mock_availability_service['replace_recurring_slots'].assert_not_called()

def test_create_exception(client, mock_availability_service, sample_exception):
    login_as(TEACHER)
    mock_availability_service['create_exception'].return_value = sample_exception

    response = client.post(
        "/teachers/teacher123/availability/exceptions",
        json={"date": "2025-04-05", "type": "BLOCKED", "start_time": "12:00", "end_time": "13:00"}
    )

    assert response.status_code == 201
    assert response.json()["id"] == "exception-1"
    created = mock_availability_service['create_exception'].call_args.args[2]
    assert created.date == date(2025, 4, 5)
    assert created.type == ExceptionType.BLOCKED

def test_create_exception_invalid_type(client, mock_availability_service):
    login_as(TEACHER)

    response = client.post(
        "/teachers/teacher123/availability/exceptions",
        json={"date": "2025-04-05", "type": "HOLIDAY"}
    )

    assert response.status_code == 422

def test_create_exception_other_teacher(client, mock_availability_service):
    login_as(OTHER_TEACHER)

    response = client.post(
        "/teachers/teacher123/availability/exceptions",
        json={"date": "2025-04-05"}
    )

    assert response.status_code == 403
    mock_availability_service['create_exception'].assert_not_called()

def test_delete_exception(client, mock_availability_service):
    login_as(TEACHER)
    mock_availability_service['delete_exception'].return_value = True

    response = client.delete("/teachers/teacher123/availability/exceptions/exception-1")

    assert response.status_code == 204
    mock_availability_service['delete_exception'].assert_called_once()

def test_delete_exception_not_found(client, mock_availability_service):
    login_as(TEACHER)
    mock_availability_service['delete_exception'].return_value = False

    response = client.delete("/teachers/teacher123/availability/exceptions/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Exception not found"

def test_requires_authentication(client, mock_availability_service):
    app.dependency_overrides.pop(get_current_user, None)

    response = client.get("/teachers/teacher123/availability")

    assert response.status_code == 401
    mock_availability_service['get_teacher_availability'].assert_not_called()
