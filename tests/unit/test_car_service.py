#!/usr/bin/env python3
"""
Unit tests for CarRentalService (gateway mocked)
"""

import unittest
from datetime import datetime
from unittest.mock import Mock, call

from parkhub.application.car_service import CarRentalService
from parkhub.application.dtos import CarDTO, CarReservationDTO
from parkhub.application.exceptions import ModelValidationError, UpstreamServiceError

# Roughly 1 km per 0.009 degrees of latitude
KM = 0.009


def car(car_id, lat, lon):
    return CarDTO.model_validate({
        "id": car_id,
        "location": {"latitude": lat, "longitude": lon},
    })


class TestProximitySearch(unittest.TestCase):

    def setUp(self):
        self.gateway = Mock()
        self.service = CarRentalService(self.gateway)

    def test_ranks_then_pages(self):
        self.gateway.fetch_all_cars.return_value = [
            car("far", 5 * KM, 0), car("here", 0, 0), car("near", 2 * KM, 0),
            car("farther", 9 * KM, 0), car("farthest", 20 * KM, 0),
        ]

        first = self.service.search_cars_by_proximity(0, 3, longitude=0.0, latitude=0.0)
        self.assertEqual([c.id for c in first.items], ["here", "near", "far"])
        self.assertEqual(first.total, 5)
        self.assertTrue(first.has_next)

        second = self.service.search_cars_by_proximity(1, 3, longitude=0.0, latitude=0.0)
        self.assertEqual([c.id for c in second.items], ["farther", "farthest"])

    def test_page_beyond_results(self):
        self.gateway.fetch_all_cars.return_value = [car(1, 0, 0), car(2, 1, 1)]
        page = self.service.search_cars_by_proximity(3, 10, longitude=0.0, latitude=0.0)
        self.assertEqual(page.items, [])
        self.assertEqual(page.total, 2)

    def test_invalid_position_rejected_before_calling_partner(self):
        with self.assertRaises(ModelValidationError):
            self.service.search_cars_by_proximity(0, 10, longitude=200.0, latitude=0.0)
        with self.assertRaises(ModelValidationError):
            self.service.search_cars_by_proximity(0, 0, longitude=0.0, latitude=0.0)
        self.gateway.fetch_all_cars.assert_not_called()

    def test_out_of_range_latitude_reported(self):
        with self.assertRaises(ModelValidationError) as ctx:
            self.service.search_cars_by_proximity(0, 10, longitude=0.0, latitude=-91.0)
        self.assertIn("Latitude", str(ctx.exception))

    def test_car_on_antipode_ranked_last(self):
        lat, lon = 69.51232454868148, 86.5812282599507
        self.gateway.fetch_all_cars.return_value = [car("antipode", -lat, lon - 180), car("nearby", lat, lon)]

        page = self.service.search_cars_by_proximity(0, 10, longitude=lon, latitude=lat)
        self.assertEqual([c.id for c in page.items], ["nearby", "antipode"])

    def test_upstream_failure_propagates(self):
        self.gateway.fetch_all_cars.side_effect = UpstreamServiceError("down")
        with self.assertRaises(UpstreamServiceError):
            self.service.search_cars_by_proximity(0, 10, longitude=0.0, latitude=0.0)


class TestReserveCar(unittest.TestCase):

    def setUp(self):
        self.gateway = Mock()
        self.service = CarRentalService(self.gateway)
        self.request = CarReservationDTO(
            user_email="driver@example.com", car_id=42,
            start_time=datetime(2024, 6, 1, 8), end_time=datetime(2024, 6, 3, 8)
        )

    def test_registers_customer_then_rents(self):
        self.gateway.create_rental.return_value = {"id": 5}

        self.assertEqual(self.service.reserve_car(self.request), {"id": 5})
        self.assertEqual(self.gateway.mock_calls, [
            call.ensure_customer("driver@example.com"),
            call.create_rental("driver@example.com", 42, datetime(2024, 6, 1, 8), datetime(2024, 6, 3, 8)),
        ])

    def test_customer_failure_stops_rental(self):
        self.gateway.ensure_customer.side_effect = UpstreamServiceError("nope", status_code=500)
        with self.assertRaises(UpstreamServiceError):
            self.service.reserve_car(self.request)
        self.gateway.create_rental.assert_not_called()


if __name__ == '__main__':
    unittest.main()
