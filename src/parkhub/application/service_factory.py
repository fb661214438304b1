# File: src/parkhub/application/service_factory.py
"""
Service wiring

ServiceFactory builds every application service around one shared unit of
work. The service mode from the configuration picks the implementation:

- STANDARD: one entity per create call
- BATCH:    adds all-or-nothing bulk creation of areas and spots
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config import AppConfig, ServiceMode
from ..infrastructure.repositories import UnitOfWork, RepositoryFactory
from ..infrastructure.rental_gateway import RentalPartnerGateway
from .car_service import CarRentalService
from .dtos import ParkingAreaCreateDTO, ParkingAreaDTO, ParkingSpotCreateDTO, ParkingSpotDTO
from .exceptions import ModelAlreadyExistsError
from .parking_area_service import ParkingAreaService
from .parking_spot_service import ParkingSpotService
from .reservation_service import ReservationService
from .user_service import UserService


# ============================================================================
# BATCH SERVICES
# ============================================================================

class BatchParkingSpotService(ParkingSpotService):
    """Parking spot service with bulk creation"""

    def create_parking_spots(self, requests: Sequence[ParkingSpotCreateDTO]) -> List[ParkingSpotDTO]:
        """Create every spot or none of them"""
        keys = [(r.parking_area_id, r.spot_number) for r in requests]
        if len(set(keys)) != len(keys):
            raise ModelAlreadyExistsError("Batch contains the same spot number twice in one area")

        self.logger.info(f"Creating {len(requests)} parking spots in one batch")
        with self.uow:
            return [self.create_parking_spot(request) for request in requests]


class BatchParkingAreaService(ParkingAreaService):
    """Parking area service with bulk creation"""

    def create_parking_areas(self, requests: Sequence[ParkingAreaCreateDTO]) -> List[ParkingAreaDTO]:
        """Create every area or none of them"""
        names = [r.name for r in requests]
        if len(set(names)) != len(names):
            raise ModelAlreadyExistsError("Batch contains the same parking area name twice")

        self.logger.info(f"Creating {len(requests)} parking areas in one batch")
        with self.uow:
            return [self.create_parking_area(request) for request in requests]


# ============================================================================
# SERVICE FACTORY
# ============================================================================

@dataclass
class ServiceRegistry:
    """All application services sharing one unit of work"""
    uow: UnitOfWork
    parking_spots: ParkingSpotService
    parking_areas: ParkingAreaService
    users: UserService
    reservations: ReservationService
    cars: CarRentalService


class ServiceFactory:
    """Factory for creating application services"""

    @staticmethod
    def create_services(
        config: AppConfig,
        uow: Optional[UnitOfWork] = None,
        gateway: Optional[RentalPartnerGateway] = None
    ) -> ServiceRegistry:
        """
        Wire the services for ``config``.

        Without an explicit unit of work one is created for
        ``config.database_url``; without a gateway one is created for
        ``config.partner``.
        """
        logger = logging.getLogger("ServiceFactory")

        if uow is None:
            uow = RepositoryFactory.create_sqlalchemy_uow(config.database_url)
        if gateway is None:
            gateway = RentalPartnerGateway(config.partner)

        if config.service_mode is ServiceMode.BATCH:
            spot_service_class, area_service_class = BatchParkingSpotService, BatchParkingAreaService
        else:
            spot_service_class, area_service_class = ParkingSpotService, ParkingAreaService

        parking_spots = spot_service_class(uow, available_spots_only=config.available_spots_only)
        parking_areas = area_service_class(uow, parking_spots)
        users = UserService(uow)
        reservations = ReservationService(uow, users, parking_spots)

        logger.info(f"Services created in {config.service_mode.value} mode")
        return ServiceRegistry(
            uow=uow,
            parking_spots=parking_spots,
            parking_areas=parking_areas,
            users=users,
            reservations=reservations,
            cars=CarRentalService(gateway)
        )
