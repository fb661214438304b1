# File: src/parkhub/application/parking_spot_service.py
"""
Parking Spot Application Service

Lifecycle and uniqueness rules for spots inside parking areas:
- A spot can only be created or moved into an existing parking area
- (parking_area_id, spot_number) is unique
- Deleting a spot first deletes every reservation referencing it

Every operation runs inside one unit-of-work scope.
"""

import logging
from typing import List, Optional

from ..infrastructure.repositories import UnitOfWork, SearchSpecification
from .dtos import ParkingSpotCreateDTO, ParkingSpotDTO, Page, build_page_request
from .exceptions import ModelAlreadyExistsError, ModelNotFoundError, ModelValidationError


class ParkingSpotService:
    """Application service for parking spots"""

    def __init__(self, uow: UnitOfWork, available_spots_only: bool = False):
        self.uow = uow
        self.available_spots_only = available_spots_only
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_parking_spots(self, page: int = 0, size: int = 10, sort_direction: str = "asc") -> Page:
        """All spots ordered by spot number"""
        request = build_page_request(page, size, sort_direction)
        specification = SearchSpecification(
            sort_by=("spot_number",),
            descending=request.descending,
            offset=request.offset,
            limit=request.size
        )

        with self.uow:
            spots = self.uow.parking_spots.search(specification)
            total = self.uow.parking_spots.count_matching(specification)

        return Page.of([ParkingSpotDTO.from_model(s) for s in spots], total, request.page, request.size)

    def get_parking_spot(self, spot_id: int) -> Optional[ParkingSpotDTO]:
        with self.uow:
            spot = self.uow.parking_spots.get(spot_id)
        return ParkingSpotDTO.from_model(spot) if spot else None

    def list_all_by_parking_area(self, parking_area_id: int) -> List[ParkingSpotDTO]:
        """Every spot of the area regardless of availability"""
        return self._list_by_parking_area(parking_area_id, available_only=False)

    def list_available_by_parking_area(self, parking_area_id: int) -> List[ParkingSpotDTO]:
        """Only the available spots of the area"""
        return self._list_by_parking_area(parking_area_id, available_only=True)

    def list_by_parking_area(self, parking_area_id: int) -> List[ParkingSpotDTO]:
        """Spots of the area, filtered according to the configured default"""
        return self._list_by_parking_area(parking_area_id, available_only=self.available_spots_only)

    def _list_by_parking_area(self, parking_area_id: int, available_only: bool) -> List[ParkingSpotDTO]:
        with self.uow:
            if not self.uow.parking_areas.exists(parking_area_id):
                raise ModelValidationError("ParkingArea not found")
            spots = self.uow.parking_spots.find_by_parking_area(parking_area_id, available_only)

        self.logger.debug(f"Found {len(spots)} spots in area {parking_area_id} (available_only={available_only})")
        return [ParkingSpotDTO.from_model(s) for s in spots]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_parking_spot(self, request: ParkingSpotCreateDTO) -> ParkingSpotDTO:
        """Create a spot in an existing area"""
        self.logger.info(f"Creating spot {request.spot_number} in area {request.parking_area_id}")

        with self.uow:
            if not self.uow.parking_areas.exists(request.parking_area_id):
                raise ModelValidationError("ParkingArea not found")

            if self.uow.parking_spots.exists_by_area_and_spot_number(request.parking_area_id, request.spot_number):
                raise ModelAlreadyExistsError(
                    f"ParkingSpot {request.spot_number} already exists in area {request.parking_area_id}"
                )

            spot = self.uow.parking_spots.add(request.to_model())

        self.logger.info(f"Created parking spot {spot.id}")
        return ParkingSpotDTO.from_model(spot)

    def update_parking_spot(self, spot_id: int, request: ParkingSpotCreateDTO) -> ParkingSpotDTO:
        """Replace availability, spot number and area reference"""
        with self.uow:
            if not self.uow.parking_spots.exists(spot_id):
                raise ModelNotFoundError(f"ParkingSpot {spot_id} not found")

            if not self.uow.parking_areas.exists(request.parking_area_id):
                raise ModelValidationError("ParkingArea not found")

            clash = self.uow.parking_spots.find_by_area_and_spot_number(
                request.parking_area_id, request.spot_number
            )
            if clash and clash.id != spot_id:
                raise ModelAlreadyExistsError(
                    f"ParkingSpot {request.spot_number} already exists in area {request.parking_area_id}"
                )

            spot = request.to_model()
            spot.id = spot_id
            spot = self.uow.parking_spots.update(spot)

        self.logger.info(f"Updated parking spot {spot_id}")
        return ParkingSpotDTO.from_model(spot)

    def delete_parking_spot(self, spot_id: int) -> bool:
        """
        Delete a spot and every reservation referencing it.
        Returns False if the spot does not exist.
        """
        with self.uow:
            if not self.uow.parking_spots.exists(spot_id):
                self.logger.info(f"Parking spot {spot_id} not found, nothing to delete")
                return False

            reservations = self.uow.reservations.find_by_parking_spot(spot_id)
            for reservation in reservations:
                self.uow.reservations.delete(reservation.id)

            self.uow.parking_spots.delete(spot_id)

        self.logger.info(f"Deleted parking spot {spot_id} and {len(reservations)} reservations")
        return True
