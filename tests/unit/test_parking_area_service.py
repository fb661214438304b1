#!/usr/bin/env python3
"""
Unit tests for ParkingAreaService
"""

import unittest
from decimal import Decimal

from parkhub.application.dtos import ParkingAreaCreateDTO
from parkhub.application.exceptions import (
    ModelAlreadyExistsError, ModelNotFoundError, ModelValidationError
)

from . import ServiceTestBase


class TestParkingAreaLifecycle(ServiceTestBase):

    def test_create_then_get(self):
        created = self.make_area(name="North", address="5 Oak Ave", city="Shelbyville",
                                 latitude=50.1, longitude=19.9)

        self.assertIsNotNone(created.id)
        fetched = self.services.parking_areas.get_parking_area(created.id)
        self.assertEqual(fetched, created)
        self.assertEqual(fetched.name, "North")
        self.assertEqual(fetched.hourly_rate, Decimal("2.50"))

    def test_get_missing_returns_none(self):
        self.assertIsNone(self.services.parking_areas.get_parking_area(404))

    def test_duplicate_name_rejected(self):
        self.make_area(name="Central")
        with self.assertRaises(ModelAlreadyExistsError):
            self.make_area(name="Central", address="Elsewhere 2")

    def test_name_uniqueness_is_case_sensitive(self):
        self.make_area(name="Central")
        other = self.make_area(name="central")
        self.assertIsNotNone(other.id)

    def test_update_replaces_all_fields(self):
        area = self.make_area(latitude=1.0, longitude=2.0)
        updated = self.services.parking_areas.update_parking_area(area.id, ParkingAreaCreateDTO(
            name="Renamed", address="9 Elm St", city="Capital City"
        ))

        self.assertEqual(updated.id, area.id)
        self.assertEqual(updated.name, "Renamed")
        self.assertIsNone(updated.hourly_rate)
        self.assertIsNone(updated.latitude)
        self.assertEqual(self.services.parking_areas.get_parking_area(area.id), updated)

    def test_update_missing_area(self):
        with self.assertRaises(ModelNotFoundError):
            self.services.parking_areas.update_parking_area(99, ParkingAreaCreateDTO(
                name="X", address="Y", city="Z"
            ))

    def test_update_to_name_of_other_area_rejected(self):
        self.make_area(name="First")
        second = self.make_area(name="Second")
        with self.assertRaises(ModelAlreadyExistsError):
            self.services.parking_areas.update_parking_area(second.id, ParkingAreaCreateDTO(
                name="First", address="Y", city="Z"
            ))

    def test_update_keeping_own_name(self):
        area = self.make_area(name="Keep")
        updated = self.services.parking_areas.update_parking_area(area.id, ParkingAreaCreateDTO(
            name="Keep", address="New address", city="Z"
        ))
        self.assertEqual(updated.address, "New address")

    def test_delete_missing_returns_false(self):
        self.assertFalse(self.services.parking_areas.delete_parking_area(12))


class TestParkingAreaCascade(ServiceTestBase):

    def test_delete_removes_spots_and_reservations(self):
        area = self.make_area()
        other_area = self.make_area(name="Other")
        user = self.make_user()

        spots = [self.make_spot(area.id, f"A{i}") for i in range(3)]
        for spot in spots:
            self.make_reservation(user.id, spot.id)
        kept_spot = self.make_spot(other_area.id, "A0")
        kept = self.make_reservation(user.id, kept_spot.id)

        self.assertTrue(self.services.parking_areas.delete_parking_area(area.id))

        self.assertIsNone(self.services.parking_areas.get_parking_area(area.id))
        for spot in spots:
            self.assertIsNone(self.services.parking_spots.get_parking_spot(spot.id))
            self.assertIsNone(self.services.reservations.get_reservation_by_parking_spot(spot.id))
        self.assertEqual(self.uow.parking_spots.count(), 1)
        self.assertEqual(self.uow.reservations.count(), 1)
        self.assertIsNotNone(self.services.reservations.get_reservation(kept.id))

    def test_failed_cascade_leaves_everything_in_place(self):
        area = self.make_area()
        user = self.make_user()
        first = self.make_spot(area.id, "A1")
        second = self.make_spot(area.id, "A2")
        self.make_reservation(user.id, first.id)
        self.make_reservation(user.id, second.id)

        original_delete = self.uow.parking_spots.delete

        def failing_delete(spot_id):
            if spot_id == second.id:
                raise RuntimeError("disk full")
            return original_delete(spot_id)

        self.uow.parking_spots.delete = failing_delete
        with self.assertRaises(RuntimeError):
            self.services.parking_areas.delete_parking_area(area.id)
        self.uow.parking_spots.delete = original_delete

        self.assertIsNotNone(self.services.parking_areas.get_parking_area(area.id))
        self.assertEqual(self.uow.parking_spots.count(), 2)
        self.assertEqual(self.uow.reservations.count(), 2)


class TestParkingAreaListing(ServiceTestBase):

    def setUp(self):
        super().setUp()
        self.make_area(name="Gamma", address="3 Ccc Road", city="Warsaw")
        self.make_area(name="Alpha", address="1 Aaa Road", city="Krakow")
        self.make_area(name="Beta Krak", address="2 Bbb Road", city="Gdansk")

    def names(self, page):
        return [area.name for area in page.items]

    def test_sorted_by_address(self):
        page = self.services.parking_areas.list_parking_areas(0, 10)
        self.assertEqual(self.names(page), ["Alpha", "Beta Krak", "Gamma"])
        self.assertEqual(page.total, 3)

    def test_sorted_descending(self):
        page = self.services.parking_areas.list_parking_areas(0, 10, "DESC")
        self.assertEqual(self.names(page), ["Gamma", "Beta Krak", "Alpha"])

    def test_filter_on_one_field(self):
        page = self.services.parking_areas.list_parking_areas(0, 10, search_query="KRAK", search_field="city")
        self.assertEqual(self.names(page), ["Alpha"])

    def test_filter_on_all_fields(self):
        page = self.services.parking_areas.list_parking_areas(0, 10, search_query="krak")
        self.assertEqual(self.names(page), ["Alpha", "Beta Krak"])
        self.assertEqual(page.total, 2)

    def test_unknown_search_field(self):
        with self.assertRaises(ModelValidationError):
            self.services.parking_areas.list_parking_areas(0, 10, search_query="x", search_field="zip")

    def test_paging(self):
        page = self.services.parking_areas.list_parking_areas(1, 2)
        self.assertEqual(self.names(page), ["Gamma"])
        self.assertEqual(page.total, 3)

        beyond = self.services.parking_areas.list_parking_areas(4, 2)
        self.assertEqual(beyond.items, [])
        self.assertEqual(beyond.total, 3)


if __name__ == '__main__':
    unittest.main()
