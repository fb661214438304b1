# File: src/parkhub/application/reservation_service.py
"""
Reservation Application Service

Core booking logic. A reservation is created only when:
1. The user exists                     (else ModelValidationError "User not found")
2. The parking spot exists             (else ModelValidationError "ParkingSpot not found")
3. The exact (user, spot, start, end) tuple is not booked yet
                                       (else ModelAlreadyExistsError)

The duplicate guard rejects repeated submissions only. Two different users
may still hold overlapping bookings of the same spot.

When no total cost is supplied it is computed from the hourly rate of the
spot's parking area. ``created_at`` is stamped at creation and kept on update.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..domain.models import Reservation, ReservationCostCalculator, TimeRange
from ..infrastructure.repositories import UnitOfWork, SearchSpecification
from .dtos import ReservationCreateDTO, ReservationDTO, Page, build_page_request
from .exceptions import ModelAlreadyExistsError, ModelNotFoundError, ModelValidationError
from .parking_spot_service import ParkingSpotService
from .user_service import UserService


class ReservationService:
    """Application service for reservations"""

    def __init__(
        self,
        uow: UnitOfWork,
        user_service: UserService,
        parking_spot_service: ParkingSpotService,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.uow = uow
        self.user_service = user_service
        self.parking_spot_service = parking_spot_service
        self.clock = clock
        self.cost_calculator = ReservationCostCalculator()
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _list(self, specification: SearchSpecification, page: int, size: int, sort_direction: str) -> Page:
        request = build_page_request(page, size, sort_direction)
        specification.sort_by = ("start_time", "end_time")
        specification.descending = request.descending
        specification.offset = request.offset
        specification.limit = request.size

        with self.uow:
            reservations = self.uow.reservations.search(specification)
            total = self.uow.reservations.count_matching(specification)

        return Page.of([ReservationDTO.from_model(r) for r in reservations], total, request.page, request.size)

    def list_reservations(self, page: int = 0, size: int = 10, sort_direction: str = "asc") -> Page:
        """All reservations ordered by start then end time"""
        return self._list(SearchSpecification(), page, size, sort_direction)

    def list_reservations_by_user(
        self,
        user_id: int,
        page: int = 0,
        size: int = 10,
        sort_direction: str = "asc"
    ) -> Page:
        """Reservations of one user ordered by start then end time"""
        return self._list(SearchSpecification(equals={"user_id": user_id}), page, size, sort_direction)

    def get_reservation(self, reservation_id: int) -> Optional[ReservationDTO]:
        with self.uow:
            reservation = self.uow.reservations.get(reservation_id)
        return ReservationDTO.from_model(reservation) if reservation else None

    def get_reservation_by_parking_spot(self, parking_spot_id: int) -> Optional[ReservationDTO]:
        """Earliest reservation of the spot, if any"""
        with self.uow:
            reservations = self.uow.reservations.find_by_parking_spot(parking_spot_id)
        return ReservationDTO.from_model(reservations[0]) if reservations else None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _validate_references(self, request: ReservationCreateDTO):
        """Check user then spot, returning the spot"""
        if self.user_service.get_user(request.user_id) is None:
            raise ModelValidationError("User not found")

        spot = self.parking_spot_service.get_parking_spot(request.parking_spot_id)
        if spot is None:
            raise ModelValidationError("ParkingSpot not found")
        return spot

    def _resolve_cost(self, request: ReservationCreateDTO, parking_area_id: int):
        area = self.uow.parking_areas.get(parking_area_id)
        hourly_rate = area.hourly_rate if area else None
        return self.cost_calculator.resolve(
            request.total_cost,
            hourly_rate,
            TimeRange(request.start_time, request.end_time)
        )

    def create_reservation(self, request: ReservationCreateDTO) -> ReservationDTO:
        """Book a spot for a user"""
        self.logger.info(
            f"Creating reservation of spot {request.parking_spot_id} for user {request.user_id} "
            f"from {request.start_time} to {request.end_time}"
        )

        with self.uow:
            spot = self._validate_references(request)

            duplicate = self.uow.reservations.find_by_user_spot_and_times(
                request.user_id, request.parking_spot_id, request.start_time, request.end_time
            )
            if duplicate:
                raise ModelAlreadyExistsError("Reservation already exists")

            reservation = request.to_model()
            reservation.total_cost = self._resolve_cost(request, spot.parking_area_id)
            reservation.created_at = self.clock()
            reservation = self.uow.reservations.add(reservation)

        self.logger.info(f"Created reservation {reservation.id} (cost {reservation.total_cost})")
        return ReservationDTO.from_model(reservation)

    def update_reservation(self, reservation_id: int, request: ReservationCreateDTO) -> ReservationDTO:
        """
        Replace spot, user, times and cost of a reservation.
        The same checks as creation apply; ``created_at`` is preserved.
        """
        with self.uow:
            existing = self.uow.reservations.get(reservation_id)
            if existing is None:
                raise ModelNotFoundError(f"Reservation {reservation_id} not found")

            spot = self._validate_references(request)

            duplicate = self.uow.reservations.find_by_user_spot_and_times(
                request.user_id, request.parking_spot_id, request.start_time, request.end_time
            )
            if duplicate and duplicate.id != reservation_id:
                raise ModelAlreadyExistsError("Reservation already exists")

            reservation = Reservation(
                id=reservation_id,
                parking_spot_id=request.parking_spot_id,
                user_id=request.user_id,
                start_time=request.start_time,
                end_time=request.end_time,
                total_cost=self._resolve_cost(request, spot.parking_area_id),
                created_at=existing.created_at
            )
            reservation = self.uow.reservations.update(reservation)

        self.logger.info(f"Updated reservation {reservation_id}")
        return ReservationDTO.from_model(reservation)

    def delete_reservation(self, reservation_id: int) -> None:
        with self.uow:
            if not self.uow.reservations.delete(reservation_id):
                raise ModelNotFoundError(f"Reservation {reservation_id} not found")

        self.logger.info(f"Deleted reservation {reservation_id}")
