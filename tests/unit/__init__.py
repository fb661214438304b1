"""
Unit Tests Package for the Parking Reservation Backend

Services are exercised over the in-memory unit of work; the partner rental
service is replaced by mocks.
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

FIXED_NOW = datetime(2024, 1, 1, 8, 0, 0)


class ServiceTestBase(unittest.TestCase):
    """Base class wiring all services over one in-memory unit of work"""

    config = AppConfig()

    def setUp(self):
        self.uow = RepositoryFactory.create_in_memory_uow()
        self.gateway = Mock()
        self.services = ServiceFactory.create_services(self.config, self.uow, self.gateway)
        self.services.reservations.clock = lambda: FIXED_NOW

    def make_area(self, name="Central", address="1 Main St", city="Springfield",
                  hourly_rate=Decimal("2.50"), **kwargs):
        return self.services.parking_areas.create_parking_area(ParkingAreaCreateDTO(
            name=name, address=address, city=city, hourly_rate=hourly_rate, **kwargs
        ))

    def make_spot(self, area_id, spot_number="A1", is_available=True):
        return self.services.parking_spots.create_parking_spot(ParkingSpotCreateDTO(
            spot_number=spot_number, parking_area_id=area_id, is_available=is_available
        ))

    def make_user(self, username="jdoe", **kwargs):
        kwargs.setdefault("email", f"{username}@example.com")
        return self.services.users.create_user(UserCreateDTO(username=username, **kwargs))

    def make_reservation(self, user_id, spot_id, start=datetime(2024, 1, 2, 9, 0),
                         end=datetime(2024, 1, 2, 11, 0), total_cost=None):
        return self.services.reservations.create_reservation(ReservationCreateDTO(
            user_id=user_id, parking_spot_id=spot_id,
            start_time=start, end_time=end, total_cost=total_cost
        ))
