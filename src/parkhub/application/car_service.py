# File: src/parkhub/application/car_service.py
"""
Car rental application service

Proximity search over the partner's cars and cross-system car reservations.
Ranking and paging happen locally over the full partner listing.
"""

import logging
from typing import Any, Dict

from ..domain.proximity import rank_by_distance
from ..domain.models import Coordinates
from ..infrastructure.rental_gateway import RentalPartnerGateway
from .dtos import CarReservationDTO, Page, build_page_request, paginate
from .exceptions import ModelValidationError


class CarRentalService:
    """Application service for partner car search and rental"""

    def __init__(self, gateway: RentalPartnerGateway):
        self.gateway = gateway
        self.logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def _origin(longitude: float, latitude: float) -> Coordinates:
        """Caller position, out-of-range degrees rejected as a validation error"""
        try:
            return Coordinates(latitude, longitude)
        except ValueError as e:
            raise ModelValidationError(str(e)) from e

    def search_cars_by_proximity(self, page: int, size: int, longitude: float, latitude: float) -> Page:
        """Page of partner cars ordered closest first to (latitude, longitude)"""
        origin = self._origin(longitude, latitude)
        request = build_page_request(page, size)

        cars = self.gateway.fetch_all_cars()
        ranked = rank_by_distance(cars, origin.longitude, origin.latitude, lambda car: car.position)

        result = paginate(ranked, request.page, request.size)
        self.logger.debug(
            f"Ranked {result.total} cars around {origin}, returning page {request.page} with {len(result.items)}"
        )
        return result

    def reserve_car(self, request: CarReservationDTO) -> Dict[str, Any]:
        """
        Reserve a partner car: register the customer, then create the rental.
        Succeeds only if both partner calls succeed.
        """
        self.gateway.ensure_customer(request.user_email)
        rental = self.gateway.create_rental(
            request.user_email,
            request.car_id,
            request.start_time,
            request.end_time
        )
        self.logger.info(f"Reserved car {request.car_id} for {request.user_email}")
        return rental
