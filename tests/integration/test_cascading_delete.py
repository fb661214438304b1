#!/usr/bin/env python3
"""
Critical scenario tests: booking flow and cascading deletes on SQLite
"""

import unittest
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from parkhub.application.exceptions import ModelAlreadyExistsError, ModelValidationError
from parkhub.infrastructure.repositories import SQLAlchemyParkingSpotRepository

from . import DatabaseTestBase, IntegrationTestConfig


class TestBookingFlow(DatabaseTestBase):

    def test_reservation_cost_and_duplicate_guard(self):
        area = self.create_area()
        spot = self.create_spot(area.id)
        user = self.create_user()

        reservation = self.create_reservation(user.id, spot.id)
        self.assertEqual(reservation.total_cost, Decimal("12.00"))

        with self.assertRaises(ModelAlreadyExistsError):
            self.create_reservation(user.id, spot.id)

        later = IntegrationTestConfig.RESERVATION_END + timedelta(hours=1)
        self.create_reservation(user.id, spot.id, start=later, end=later + timedelta(hours=1))
        self.assertEqual(self.count("reservations"), 2)

    def test_missing_references(self):
        area = self.create_area()
        spot = self.create_spot(area.id)
        user = self.create_user()

        with self.assertRaises(ModelValidationError):
            self.create_reservation(user.id + 100, spot.id)
        with self.assertRaises(ModelValidationError):
            self.create_reservation(user.id, spot.id + 100)
        self.assertEqual(self.count("reservations"), 0)


class TestCascadingDelete(DatabaseTestBase):

    def setUp(self):
        super().setUp()
        self.area = self.create_area()
        self.other_area = self.create_area(name="Other Area")
        self.user = self.create_user()

        self.spots = [self.create_spot(self.area.id, f"S{i}") for i in range(4)]
        for spot in self.spots:
            self.create_reservation(self.user.id, spot.id)

        self.other_spot = self.create_spot(self.other_area.id, "S0")
        self.other_reservation = self.create_reservation(self.user.id, self.other_spot.id)

    def test_area_delete_removes_spots_and_reservations(self):
        self.assertTrue(self.services.parking_areas.delete_parking_area(self.area.id))

        self.assertIsNone(self.services.parking_areas.get_parking_area(self.area.id))
        self.assertEqual(self.services.parking_spots.list_all_by_parking_area(self.other_area.id), [self.other_spot])
        for spot in self.spots:
            self.assertIsNone(self.services.reservations.get_reservation_by_parking_spot(spot.id))
        self.assertEqual(self.count("parking_spots"), 1)
        self.assertEqual(self.count("reservations"), 1)

    def test_area_delete_rolls_back_on_failure(self):
        original_delete = SQLAlchemyParkingSpotRepository.delete
        failing_id = self.spots[2].id

        def flaky_delete(repo, spot_id):
            if spot_id == failing_id:
                raise OperationalError("DELETE FROM parking_spots", {}, Exception("database is locked"))
            return original_delete(repo, spot_id)

        with patch.object(SQLAlchemyParkingSpotRepository, "delete", flaky_delete):
            with self.assertRaises(OperationalError):
                self.services.parking_areas.delete_parking_area(self.area.id)

        self.assertIsNotNone(self.services.parking_areas.get_parking_area(self.area.id))
        self.assertEqual(self.count("parking_spots"), 5)
        self.assertEqual(self.count("reservations"), 5)

    def test_spot_delete(self):
        self.assertTrue(self.services.parking_spots.delete_parking_spot(self.spots[0].id))
        self.assertEqual(self.count("parking_spots"), 4)
        self.assertEqual(self.count("reservations"), 4)

    def test_user_delete_removes_reservations(self):
        self.services.users.delete_user(self.user.id)
        self.assertEqual(self.count("reservations"), 0)
        self.assertEqual(self.count("parking_spots"), 5)


if __name__ == '__main__':
    unittest.main()
