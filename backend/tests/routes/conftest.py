import pytest
from fastapi.testclient import TestClient

from mentorhub.database import get_db
from mentorhub.dependencies.services import get_availability_service, get_booking_service
from mentorhub.main import create_app
from mentorhub.services.availability_service import AvailabilityService
from mentorhub.services.booking_service import BookingService

from tests.helpers import TODAY


@pytest.fixture
def app(db):
    app = create_app()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_service] = lambda: BookingService(
        db, today_provider=lambda: TODAY
    )
    app.dependency_overrides[get_availability_service] = lambda: AvailabilityService(
        db, today_provider=lambda: TODAY
    )
    return app


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client

