"""
Integration Tests Package for the Parking Reservation Backend

These tests run the services against SQLAlchemy on in-memory SQLite:
1. Repository mapping and unique constraints
2. Cascading deletes and transaction rollback
3. Service wiring per service mode
4. CLI bootstrap
"""

import sys
import unittest
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

# Add the src directory to Python path for imports
src_root = Path(__file__).parent.parent.parent / "src"
sys.path.insert(0, str(src_root))

from parkhub.application.dtos import (  # noqa: E402
    ParkingAreaCreateDTO, ParkingSpotCreateDTO, UserCreateDTO, ReservationCreateDTO
)
from parkhub.application.service_factory import ServiceFactory  # noqa: E402
from parkhub.config import AppConfig  # noqa: E402
from parkhub.infrastructure.repositories import RepositoryFactory  # noqa: E402


class IntegrationTestConfig:
    """Configuration for integration tests"""

    DATABASE_URL = "sqlite:///:memory:"

    SAMPLE_AREA_DATA = {
        "name": "Test Parking Area",
        "address": "123 Test Street",
        "city": "Test City",
        "hourly_rate": Decimal("4.00"),
        "latitude": 50.0614,
        "longitude": 19.9366,
    }

    SAMPLE_USER_DATA = {
        "username": "tester",
        "email": "tester@example.com",
        "first_name": "Test",
        "last_name": "User",
        "role": "USER",
    }

    RESERVATION_START = datetime(2024, 1, 1, 10, 0)
    RESERVATION_END = datetime(2024, 1, 1, 13, 0)


class DatabaseTestBase(unittest.TestCase):
    """Services wired over a fresh in-memory SQLite database"""

    config = AppConfig(database_url=IntegrationTestConfig.DATABASE_URL)

    def setUp(self):
        self.uow = RepositoryFactory.create_sqlalchemy_uow(self.config.database_url)
        self.services = ServiceFactory.create_services(self.config, self.uow, Mock())

    def create_area(self, **overrides):
        data = dict(IntegrationTestConfig.SAMPLE_AREA_DATA, **overrides)
        return self.services.parking_areas.create_parking_area(ParkingAreaCreateDTO(**data))

    def create_spot(self, area_id, spot_number="A1", is_available=True):
        return self.services.parking_spots.create_parking_spot(ParkingSpotCreateDTO(
            spot_number=spot_number, parking_area_id=area_id, is_available=is_available
        ))

    def create_user(self, **overrides):
        data = dict(IntegrationTestConfig.SAMPLE_USER_DATA, **overrides)
        return self.services.users.create_user(UserCreateDTO(**data))

    def create_reservation(self, user_id, spot_id,
                           start=IntegrationTestConfig.RESERVATION_START,
                           end=IntegrationTestConfig.RESERVATION_END):
        return self.services.reservations.create_reservation(ReservationCreateDTO(
            user_id=user_id, parking_spot_id=spot_id, start_time=start, end_time=end
        ))

    def count(self, repository_name):
        with self.uow:
            return getattr(self.uow, repository_name).count()
