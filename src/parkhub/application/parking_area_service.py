# File: src/parkhub/application/parking_area_service.py
"""
Parking Area Application Service

Use cases for parking areas:
1. Paged, sorted listing with an optional substring filter
2. Create/update with a unique name
3. Cascading delete: reservations -> spots -> area, in one transaction
"""

import logging
from typing import Optional

from ..infrastructure.repositories import UnitOfWork, SearchSpecification
from .dtos import ParkingAreaCreateDTO, ParkingAreaDTO, Page, build_page_request
from .exceptions import ModelAlreadyExistsError, ModelNotFoundError, ModelValidationError
from .parking_spot_service import ParkingSpotService

# Fields a listing can be filtered on
SEARCH_FIELDS = ("address", "city", "name")


class ParkingAreaService:
    """Application service for parking areas"""

    def __init__(self, uow: UnitOfWork, parking_spot_service: ParkingSpotService):
        self.uow = uow
        self.parking_spot_service = parking_spot_service
        self.logger = logging.getLogger(self.__class__.__name__)

    def list_parking_areas(
        self,
        page: int = 0,
        size: int = 10,
        sort_direction: str = "asc",
        search_query: Optional[str] = None,
        search_field: Optional[str] = None
    ) -> Page:
        """
        Page of areas sorted by address.

        ``search_query`` is matched case-insensitively as a substring of
        ``search_field``, or of any of address, city and name when no field
        is given.
        """
        request = build_page_request(page, size, sort_direction)
        query = search_query or ""

        if search_field:
            field = search_field.strip().lower()
            if field not in SEARCH_FIELDS:
                raise ModelValidationError(
                    f"Unknown search field '{search_field}', expected one of {', '.join(SEARCH_FIELDS)}"
                )
            filters = {field: query}
        else:
            filters = {name: query for name in SEARCH_FIELDS}

        specification = SearchSpecification(
            contains_any=filters,
            sort_by=("address",),
            descending=request.descending,
            offset=request.offset,
            limit=request.size
        )

        with self.uow:
            areas = self.uow.parking_areas.search(specification)
            total = self.uow.parking_areas.count_matching(specification)

        return Page.of([ParkingAreaDTO.from_model(a) for a in areas], total, request.page, request.size)

    def get_parking_area(self, area_id: int) -> Optional[ParkingAreaDTO]:
        with self.uow:
            area = self.uow.parking_areas.get(area_id)
        return ParkingAreaDTO.from_model(area) if area else None

    def create_parking_area(self, request: ParkingAreaCreateDTO) -> ParkingAreaDTO:
        """Create an area, rejecting a name already in use"""
        self.logger.info(f"Creating parking area '{request.name}'")

        with self.uow:
            if self.uow.parking_areas.exists_by_name(request.name):
                raise ModelAlreadyExistsError(f"ParkingArea with name '{request.name}' already exists")

            area = self.uow.parking_areas.add(request.to_model())

        self.logger.info(f"Created parking area {area.id}")
        return ParkingAreaDTO.from_model(area)

    def update_parking_area(self, area_id: int, request: ParkingAreaCreateDTO) -> ParkingAreaDTO:
        """Replace all mutable fields of an area"""
        with self.uow:
            if not self.uow.parking_areas.exists(area_id):
                raise ModelNotFoundError(f"ParkingArea {area_id} not found")

            clash = self.uow.parking_areas.find_by_name(request.name)
            if clash and clash.id != area_id:
                raise ModelAlreadyExistsError(f"ParkingArea with name '{request.name}' already exists")

            area = request.to_model()
            area.id = area_id
            area = self.uow.parking_areas.update(area)

        self.logger.info(f"Updated parking area {area_id}")
        return ParkingAreaDTO.from_model(area)

    def delete_parking_area(self, area_id: int) -> bool:
        """
        Delete an area with all of its spots and their reservations.

        The cascade runs in a single transaction: if any step fails nothing
        is deleted. Returns False if the area does not exist.
        """
        with self.uow:
            if not self.uow.parking_areas.exists(area_id):
                self.logger.info(f"Parking area {area_id} not found, nothing to delete")
                return False

            spots = self.uow.parking_spots.find_by_parking_area(area_id)
            for spot in spots:
                self.parking_spot_service.delete_parking_spot(spot.id)

            self.uow.parking_areas.delete(area_id)

        self.logger.info(f"Deleted parking area {area_id} with {len(spots)} spots")
        return True
