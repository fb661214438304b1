# File: src/parkhub/infrastructure/repositories.py
"""
Repository Pattern Implementation for the Parking Reservation Backend

This module implements the Repository Pattern for data persistence.
Repositories provide a collection-like interface for accessing domain entities
while abstracting the underlying data storage implementation.

Repository Types:
1. ParkingAreaRepository - areas, unique by name
2. ParkingSpotRepository - spots, unique by (parking area, spot number)
3. ReservationRepository - reservations, unique by (user, spot, start, end)
4. UserRepository - users, unique by username

Storage Implementations:
- InMemoryRepository - For testing and development
- SQLAlchemyRepository - For relational databases

Queries that list entities take a SearchSpecification, which both storage
implementations evaluate the same way: case-insensitive substring filters,
equality filters, ordering (always tie-broken by id) and an offset/limit window.

Transactions are managed by a UnitOfWork. A unit of work is re-entrant: only
the outermost ``with`` block commits or rolls back, so a service operation
that calls other services still runs as one transaction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import (
    Type, TypeVar, Generic, Optional, List, Dict, Any, Tuple, Callable
)
import logging

from sqlalchemy import (
    create_engine, Column, Integer, String, Boolean, Float,
    DateTime, ForeignKey, DECIMAL, UniqueConstraint,
    func, or_, true
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.pool import StaticPool

from ..domain.models import ParkingArea, ParkingSpot, Reservation, User, UserRole

# Type variables for generic repositories
T = TypeVar('T')  # Entity type
ID = TypeVar('ID')  # ID type (integer surrogate keys)


# ============================================================================
# SEARCH SPECIFICATION
# ============================================================================

@dataclass
class SearchSpecification:
    """
    Filter, order and window for a repository query

    contains_any: field -> substring, at least one must match (OR)
    contains_all: field -> substring, every one must match (AND)
    equals: field -> value, every one must match
    An empty substring matches every row.
    """
    contains_any: Dict[str, str] = field(default_factory=dict)
    contains_all: Dict[str, str] = field(default_factory=dict)
    equals: Dict[str, Any] = field(default_factory=dict)
    sort_by: Tuple[str, ...] = ()
    descending: bool = False
    offset: int = 0
    limit: Optional[int] = None

    @staticmethod
    def _contains(value: Any, needle: str) -> bool:
        if not needle:
            return True
        if value is None:
            return False
        return needle.lower() in str(value).lower()

    def matches(self, entity: Any) -> bool:
        """Evaluate the filters against an entity"""
        if self.contains_any and not any(
            self._contains(getattr(entity, name), needle)
            for name, needle in self.contains_any.items()
        ):
            return False

        if not all(
            self._contains(getattr(entity, name), needle)
            for name, needle in self.contains_all.items()
        ):
            return False

        return all(getattr(entity, name) == value for name, value in self.equals.items())

    def unpaged(self) -> 'SearchSpecification':
        """Same filters without the window, for counting"""
        return replace(self, offset=0, limit=None)


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class Repository(ABC, Generic[T, ID]):
    """Base repository interface"""

    @abstractmethod
    def add(self, entity: T) -> T:
        """Add a new entity and return it with its assigned id"""
        pass

    @abstractmethod
    def get(self, id: ID) -> Optional[T]:
        """Get entity by ID"""
        pass

    @abstractmethod
    def get_all(self, skip: int = 0, limit: int = 100) -> List[T]:
        """Get all entities with pagination"""
        pass

    @abstractmethod
    def update(self, entity: T) -> T:
        """Replace every stored field of an existing entity"""
        pass

    @abstractmethod
    def delete(self, id: ID) -> bool:
        """Delete an entity by ID"""
        pass

    @abstractmethod
    def exists(self, id: ID) -> bool:
        """Check if an entity exists"""
        pass

    @abstractmethod
    def count(self) -> int:
        """Count all entities"""
        pass

    @abstractmethod
    def search(self, specification: SearchSpecification) -> List[T]:
        """Filtered, ordered and windowed query"""
        pass

    @abstractmethod
    def count_matching(self, specification: SearchSpecification) -> int:
        """Number of entities matching the filters, ignoring the window"""
        pass


class ParkingAreaRepository(Repository[ParkingArea, int], ABC):

    @abstractmethod
    def exists_by_name(self, name: str) -> bool:
        pass

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[ParkingArea]:
        pass


class ParkingSpotRepository(Repository[ParkingSpot, int], ABC):

    @abstractmethod
    def find_by_parking_area(self, parking_area_id: int, available_only: bool = False) -> List[ParkingSpot]:
        """Spots of one area ordered by spot number"""
        pass

    @abstractmethod
    def exists_by_area_and_spot_number(self, parking_area_id: int, spot_number: str) -> bool:
        pass

    @abstractmethod
    def find_by_area_and_spot_number(self, parking_area_id: int, spot_number: str) -> Optional[ParkingSpot]:
        pass


class ReservationRepository(Repository[Reservation, int], ABC):

    @abstractmethod
    def find_by_user_spot_and_times(
        self,
        user_id: int,
        parking_spot_id: int,
        start_time: datetime,
        end_time: datetime
    ) -> Optional[Reservation]:
        """Exact booking tuple lookup"""
        pass

    @abstractmethod
    def find_by_parking_spot(self, parking_spot_id: int) -> List[Reservation]:
        """Reservations of one spot ordered by start and end time"""
        pass

    @abstractmethod
    def find_by_user(self, user_id: int) -> List[Reservation]:
        pass


class UserRepository(Repository[User, int], ABC):

    @abstractmethod
    def exists_by_username(self, username: str) -> bool:
        pass

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[User]:
        pass


# ============================================================================
# UNIT OF WORK PATTERN
# ============================================================================

class UnitOfWork(ABC):
    """
    Unit of Work pattern for transaction management

    Usage:
        with uow:
            uow.parking_spots.delete(spot_id)
            uow.parking_areas.delete(area_id)

    Nested ``with`` blocks join the outer transaction.
    """

    def __init__(self):
        self._depth = 0
        self._logger = logging.getLogger(self.__class__.__name__)

    def __enter__(self):
        if self._depth == 0:
            self._begin()
        self._depth += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._depth -= 1
        if self._depth > 0:
            return False

        try:
            if exc_type is not None:
                self._logger.warning(f"Rolling back unit of work: {exc_val}")
                self.rollback()
            else:
                self.commit()
        finally:
            self._end()
        return False

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @abstractmethod
    def _begin(self):
        """Open the outermost transaction"""
        pass

    @abstractmethod
    def _end(self):
        """Release resources after commit or rollback"""
        pass

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @property
    @abstractmethod
    def parking_areas(self) -> ParkingAreaRepository:
        pass

    @property
    @abstractmethod
    def parking_spots(self) -> ParkingSpotRepository:
        pass

    @property
    @abstractmethod
    def reservations(self) -> ReservationRepository:
        pass

    @property
    @abstractmethod
    def users(self) -> UserRepository:
        pass


# ============================================================================
# SQLALCHEMY MODELS
# ============================================================================

Base = declarative_base()


class ParkingAreaModel(Base):
    """SQLAlchemy model for ParkingArea"""
    __tablename__ = 'parking_areas'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    address = Column(String(200), nullable=False, index=True)
    city = Column(String(100), nullable=False)
    hourly_rate = Column(DECIMAL(10, 2))
    latitude = Column(Float)
    longitude = Column(Float)

    __table_args__ = (
        UniqueConstraint('name', name='uq_parking_area_name'),
    )


class ParkingSpotModel(Base):
    """SQLAlchemy model for ParkingSpot"""
    __tablename__ = 'parking_spots'

    id = Column(Integer, primary_key=True, autoincrement=True)
    parking_area_id = Column(Integer, ForeignKey('parking_areas.id'), nullable=False, index=True)
    spot_number = Column(String(20), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint('parking_area_id', 'spot_number', name='uq_spot_area_number'),
    )


class UserModel(Base):
    """SQLAlchemy model for User"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False)
    email = Column(String(255))
    first_name = Column(String(50))
    last_name = Column(String(50))
    role = Column(String(10), nullable=False, default=UserRole.USER.value)

    __table_args__ = (
        UniqueConstraint('username', name='uq_user_username'),
    )


class ReservationModel(Base):
    """SQLAlchemy model for Reservation"""
    __tablename__ = 'reservations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    parking_spot_id = Column(Integer, ForeignKey('parking_spots.id'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)

    # Times
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    # Pricing
    total_cost = Column(DECIMAL(10, 2))

    created_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'parking_spot_id', 'start_time', 'end_time',
                         name='uq_reservation_booking'),
    )


# ============================================================================
# DOMAIN <-> ORM MAPPERS
# ============================================================================

class Mapper:
    """Maps between domain models and ORM models"""

    @staticmethod
    def parking_area_to_orm(area: ParkingArea) -> ParkingAreaModel:
        return ParkingAreaModel(
            id=area.id,
            name=area.name,
            address=area.address,
            city=area.city,
            hourly_rate=area.hourly_rate,
            latitude=area.latitude,
            longitude=area.longitude
        )

    @staticmethod
    def parking_area_to_domain(model: ParkingAreaModel) -> ParkingArea:
        return ParkingArea(
            id=model.id,
            name=model.name,
            address=model.address,
            city=model.city,
            hourly_rate=model.hourly_rate,
            latitude=model.latitude,
            longitude=model.longitude
        )

    @staticmethod
    def parking_spot_to_orm(spot: ParkingSpot) -> ParkingSpotModel:
        return ParkingSpotModel(
            id=spot.id,
            parking_area_id=spot.parking_area_id,
            spot_number=spot.spot_number,
            is_available=spot.is_available
        )

    @staticmethod
    def parking_spot_to_domain(model: ParkingSpotModel) -> ParkingSpot:
        return ParkingSpot(
            id=model.id,
            parking_area_id=model.parking_area_id,
            spot_number=model.spot_number,
            is_available=bool(model.is_available)
        )

    @staticmethod
    def user_to_orm(user: User) -> UserModel:
        return UserModel(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value
        )

    @staticmethod
    def user_to_domain(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            first_name=model.first_name,
            last_name=model.last_name,
            role=UserRole.parse(model.role)
        )

    @staticmethod
    def reservation_to_orm(reservation: Reservation) -> ReservationModel:
        return ReservationModel(
            id=reservation.id,
            parking_spot_id=reservation.parking_spot_id,
            user_id=reservation.user_id,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
            total_cost=reservation.total_cost,
            created_at=reservation.created_at
        )

    @staticmethod
    def reservation_to_domain(model: ReservationModel) -> Reservation:
        return Reservation(
            id=model.id,
            parking_spot_id=model.parking_spot_id,
            user_id=model.user_id,
            start_time=model.start_time,
            end_time=model.end_time,
            total_cost=model.total_cost,
            created_at=model.created_at
        )


# ============================================================================
# IN-MEMORY REPOSITORIES (For Testing)
# ============================================================================

class InMemoryRepository(Repository[T, int]):
    """
    In-memory repository for testing

    Entities are copied on the way in and out, so callers never hold a
    reference into the store and a snapshot of ``_storage`` is a full backup.
    """

    def __init__(self):
        self._storage: Dict[int, T] = {}
        self._next_id = 1
        self._logger = logging.getLogger(self.__class__.__name__)

    def add(self, entity: T) -> T:
        entity_id = getattr(entity, 'id', None)
        if not entity_id:
            entity_id = self._next_id
        self._next_id = max(self._next_id, entity_id + 1)

        stored = replace(entity, id=entity_id)
        self._storage[entity_id] = stored
        self._logger.debug(f"Added entity {entity_id}")
        return replace(stored)

    def get(self, id: int) -> Optional[T]:
        entity = self._storage.get(id)
        return replace(entity) if entity is not None else None

    def get_all(self, skip: int = 0, limit: int = 100) -> List[T]:
        items = [self._storage[key] for key in sorted(self._storage)]
        return [replace(item) for item in items[skip:skip + limit]]

    def update(self, entity: T) -> T:
        entity_id = getattr(entity, 'id')
        if entity_id not in self._storage:
            raise KeyError(f"Entity {entity_id} not found")

        self._storage[entity_id] = replace(entity)
        self._logger.debug(f"Updated entity {entity_id}")
        return replace(entity)

    def delete(self, id: int) -> bool:
        if id in self._storage:
            del self._storage[id]
            self._logger.debug(f"Deleted entity {id}")
            return True
        return False

    def exists(self, id: int) -> bool:
        return id in self._storage

    def count(self) -> int:
        return len(self._storage)

    def search(self, specification: SearchSpecification) -> List[T]:
        matching = [e for e in self._storage.values() if specification.matches(e)]

        def sort_key(entity):
            return tuple(getattr(entity, name) for name in specification.sort_by) + (entity.id,)

        matching.sort(key=sort_key, reverse=specification.descending)

        end = None if specification.limit is None else specification.offset + specification.limit
        return [replace(e) for e in matching[specification.offset:end]]

    def count_matching(self, specification: SearchSpecification) -> int:
        return sum(1 for e in self._storage.values() if specification.matches(e))

    def _find(self, predicate: Callable[[T], bool]) -> List[T]:
        """Matching entities in id order"""
        return [replace(self._storage[key]) for key in sorted(self._storage)
                if predicate(self._storage[key])]

    def snapshot(self) -> Tuple[Dict[int, T], int]:
        return dict(self._storage), self._next_id

    def restore(self, snapshot: Tuple[Dict[int, T], int]):
        self._storage, self._next_id = dict(snapshot[0]), snapshot[1]


class InMemoryParkingAreaRepository(InMemoryRepository[ParkingArea], ParkingAreaRepository):
    """In-memory repository for parking areas"""

    def exists_by_name(self, name: str) -> bool:
        return any(area.name == name for area in self._storage.values())

    def find_by_name(self, name: str) -> Optional[ParkingArea]:
        found = self._find(lambda area: area.name == name)
        return found[0] if found else None


class InMemoryParkingSpotRepository(InMemoryRepository[ParkingSpot], ParkingSpotRepository):
    """In-memory repository for parking spots"""

    def find_by_parking_area(self, parking_area_id: int, available_only: bool = False) -> List[ParkingSpot]:
        spots = self._find(
            lambda s: s.parking_area_id == parking_area_id and (s.is_available or not available_only)
        )
        return sorted(spots, key=lambda s: (s.spot_number, s.id))

    def exists_by_area_and_spot_number(self, parking_area_id: int, spot_number: str) -> bool:
        return self.find_by_area_and_spot_number(parking_area_id, spot_number) is not None

    def find_by_area_and_spot_number(self, parking_area_id: int, spot_number: str) -> Optional[ParkingSpot]:
        found = self._find(
            lambda s: s.parking_area_id == parking_area_id and s.spot_number == spot_number
        )
        return found[0] if found else None


class InMemoryReservationRepository(InMemoryRepository[Reservation], ReservationRepository):
    """In-memory repository for reservations"""

    def find_by_user_spot_and_times(
        self,
        user_id: int,
        parking_spot_id: int,
        start_time: datetime,
        end_time: datetime
    ) -> Optional[Reservation]:
        key = (user_id, parking_spot_id, start_time, end_time)
        found = self._find(lambda r: r.booking_key == key)
        return found[0] if found else None

    def find_by_parking_spot(self, parking_spot_id: int) -> List[Reservation]:
        found = self._find(lambda r: r.parking_spot_id == parking_spot_id)
        return sorted(found, key=lambda r: (r.start_time, r.end_time, r.id))

    def find_by_user(self, user_id: int) -> List[Reservation]:
        return self._find(lambda r: r.user_id == user_id)


class InMemoryUserRepository(InMemoryRepository[User], UserRepository):
    """In-memory repository for users"""

    def exists_by_username(self, username: str) -> bool:
        return any(user.username == username for user in self._storage.values())

    def find_by_username(self, username: str) -> Optional[User]:
        found = self._find(lambda user: user.username == username)
        return found[0] if found else None


class InMemoryUnitOfWork(UnitOfWork):
    """Unit of Work over in-memory repositories, rollback restores a snapshot"""

    def __init__(self):
        super().__init__()
        self._parking_areas = InMemoryParkingAreaRepository()
        self._parking_spots = InMemoryParkingSpotRepository()
        self._reservations = InMemoryReservationRepository()
        self._users = InMemoryUserRepository()
        self._snapshots = None

    def _repositories(self) -> List[InMemoryRepository]:
        return [self._parking_areas, self._parking_spots, self._reservations, self._users]

    def _begin(self):
        self._snapshots = [repo.snapshot() for repo in self._repositories()]

    def _end(self):
        self._snapshots = None

    def commit(self):
        # Keep a savepoint for the rest of the scope
        self._snapshots = [repo.snapshot() for repo in self._repositories()]
        self._logger.debug("Transaction committed")

    def rollback(self):
        if self._snapshots is not None:
            for repo, snapshot in zip(self._repositories(), self._snapshots):
                repo.restore(snapshot)
        self._logger.debug("Transaction rolled back")

    @property
    def parking_areas(self) -> InMemoryParkingAreaRepository:
        return self._parking_areas

    @property
    def parking_spots(self) -> InMemoryParkingSpotRepository:
        return self._parking_spots

    @property
    def reservations(self) -> InMemoryReservationRepository:
        return self._reservations

    @property
    def users(self) -> InMemoryUserRepository:
        return self._users


# ============================================================================
# SQLALCHEMY REPOSITORIES
# ============================================================================

class SQLAlchemyRepository(Repository[T, int], ABC):
    """Base SQLAlchemy repository"""

    def __init__(self, session: Session):
        self.session = session
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def model_class(self) -> Type[Base]:
        """Return SQLAlchemy model class"""
        pass

    @abstractmethod
    def to_domain(self, model: Base) -> T:
        """Convert ORM model to domain model"""
        pass

    @abstractmethod
    def to_orm(self, entity: T) -> Base:
        """Convert domain model to ORM model"""
        pass

    def add(self, entity: T) -> T:
        try:
            model = self.to_orm(entity)
            self.session.add(model)
            self.session.flush()

            self._logger.debug(f"Added entity: {model.id}")
            return self.to_domain(model)
        except IntegrityError as e:
            self.session.rollback()
            self._logger.error(f"Integrity error adding entity: {e}")
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            self._logger.error(f"Database error adding entity: {e}")
            raise

    def get(self, id: int) -> Optional[T]:
        try:
            model = self.session.get(self.model_class, id)
            if model:
                return self.to_domain(model)
            return None
        except SQLAlchemyError as e:
            self._logger.error(f"Database error getting entity {id}: {e}")
            raise

    def get_all(self, skip: int = 0, limit: int = 100) -> List[T]:
        try:
            query = self.session.query(self.model_class).order_by(self.model_class.id)
            models = query.offset(skip).limit(limit).all()
            return [self.to_domain(model) for model in models]
        except SQLAlchemyError as e:
            self._logger.error(f"Database error getting all entities: {e}")
            raise

    def update(self, entity: T) -> T:
        try:
            entity_id = getattr(entity, 'id')
            model = self.session.get(self.model_class, entity_id)
            if not model:
                raise ValueError(f"Entity {entity_id} not found")

            updated_model = self.to_orm(entity)

            # Full replacement, cleared fields are written as NULL
            for column in self.model_class.__table__.columns:
                if column.name != 'id':
                    setattr(model, column.name, getattr(updated_model, column.name, None))

            self.session.flush()
            self._logger.debug(f"Updated entity: {entity_id}")
            return self.to_domain(model)
        except IntegrityError as e:
            self.session.rollback()
            self._logger.error(f"Integrity error updating entity: {e}")
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            self._logger.error(f"Database error updating entity: {e}")
            raise

    def delete(self, id: int) -> bool:
        try:
            model = self.session.get(self.model_class, id)
            if model:
                self.session.delete(model)
                self.session.flush()
                self._logger.debug(f"Deleted entity: {id}")
                return True
            return False
        except SQLAlchemyError as e:
            self.session.rollback()
            self._logger.error(f"Database error deleting entity {id}: {e}")
            raise

    def exists(self, id: int) -> bool:
        try:
            count = self.session.query(self.model_class).filter(
                self.model_class.id == id
            ).count()
            return count > 0
        except SQLAlchemyError as e:
            self._logger.error(f"Database error checking existence of {id}: {e}")
            raise

    def count(self) -> int:
        try:
            return self.session.query(self.model_class).count()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error counting entities: {e}")
            raise

    def _contains(self, name: str, needle: str):
        if not needle:
            return true()
        column = getattr(self.model_class, name)
        return func.lower(column).contains(needle.lower(), autoescape=True)

    def _filtered_query(self, specification: SearchSpecification):
        query = self.session.query(self.model_class)

        if specification.contains_any:
            query = query.filter(or_(*[
                self._contains(name, needle)
                for name, needle in specification.contains_any.items()
            ]))

        for name, needle in specification.contains_all.items():
            query = query.filter(self._contains(name, needle))

        for name, value in specification.equals.items():
            if isinstance(value, Enum):
                value = value.value
            query = query.filter(getattr(self.model_class, name) == value)

        return query

    def search(self, specification: SearchSpecification) -> List[T]:
        try:
            query = self._filtered_query(specification)

            columns = [getattr(self.model_class, name) for name in specification.sort_by]
            columns.append(self.model_class.id)
            if specification.descending:
                columns = [column.desc() for column in columns]
            query = query.order_by(*columns)

            if specification.offset:
                query = query.offset(specification.offset)
            if specification.limit is not None:
                query = query.limit(specification.limit)

            return [self.to_domain(model) for model in query.all()]
        except SQLAlchemyError as e:
            self._logger.error(f"Database error searching entities: {e}")
            raise

    def count_matching(self, specification: SearchSpecification) -> int:
        try:
            return self._filtered_query(specification).count()
        except SQLAlchemyError as e:
            self._logger.error(f"Database error counting entities: {e}")
            raise


class SQLAlchemyParkingAreaRepository(SQLAlchemyRepository[ParkingArea], ParkingAreaRepository):
    """Repository for parking areas"""

    @property
    def model_class(self) -> Type[Base]:
        return ParkingAreaModel

    def to_domain(self, model: ParkingAreaModel) -> ParkingArea:
        return Mapper.parking_area_to_domain(model)

    def to_orm(self, entity: ParkingArea) -> ParkingAreaModel:
        return Mapper.parking_area_to_orm(entity)

    def exists_by_name(self, name: str) -> bool:
        return self.find_by_name(name) is not None

    def find_by_name(self, name: str) -> Optional[ParkingArea]:
        """Find parking area by its exact name"""
        try:
            model = self.session.query(ParkingAreaModel).filter(
                ParkingAreaModel.name == name
            ).first()

            if model:
                return self.to_domain(model)
            return None
        except SQLAlchemyError as e:
            self._logger.error(f"Database error finding parking area by name: {e}")
            raise


class SQLAlchemyParkingSpotRepository(SQLAlchemyRepository[ParkingSpot], ParkingSpotRepository):
    """Repository for parking spots"""

    @property
    def model_class(self) -> Type[Base]:
        return ParkingSpotModel

    def to_domain(self, model: ParkingSpotModel) -> ParkingSpot:
        return Mapper.parking_spot_to_domain(model)

    def to_orm(self, entity: ParkingSpot) -> ParkingSpotModel:
        return Mapper.parking_spot_to_orm(entity)

    def find_by_parking_area(self, parking_area_id: int, available_only: bool = False) -> List[ParkingSpot]:
        """Find spots by parking area"""
        try:
            query = self.session.query(ParkingSpotModel).filter(
                ParkingSpotModel.parking_area_id == parking_area_id
            )
            if available_only:
                query = query.filter(ParkingSpotModel.is_available == True)  # noqa: E712

            models = query.order_by(ParkingSpotModel.spot_number, ParkingSpotModel.id).all()
            return [self.to_domain(model) for model in models]
        except SQLAlchemyError as e:
            self._logger.error(f"Database error finding spots by parking area: {e}")
            raise

    def exists_by_area_and_spot_number(self, parking_area_id: int, spot_number: str) -> bool:
        return self.find_by_area_and_spot_number(parking_area_id, spot_number) is not None

    def find_by_area_and_spot_number(self, parking_area_id: int, spot_number: str) -> Optional[ParkingSpot]:
        try:
            model = self.session.query(ParkingSpotModel).filter(
                ParkingSpotModel.parking_area_id == parking_area_id,
                ParkingSpotModel.spot_number == spot_number
            ).first()

            if model:
                return self.to_domain(model)
            return None
        except SQLAlchemyError as e:
            self._logger.error(f"Database error finding spot by area and number: {e}")
            raise


class SQLAlchemyReservationRepository(SQLAlchemyRepository[Reservation], ReservationRepository):
    """Repository for reservations"""

    @property
    def model_class(self) -> Type[Base]:
        return ReservationModel

    def to_domain(self, model: ReservationModel) -> Reservation:
        return Mapper.reservation_to_domain(model)

    def to_orm(self, entity: Reservation) -> ReservationModel:
        return Mapper.reservation_to_orm(entity)

    def find_by_user_spot_and_times(
        self,
        user_id: int,
        parking_spot_id: int,
        start_time: datetime,
        end_time: datetime
    ) -> Optional[Reservation]:
        try:
            model = self.session.query(ReservationModel).filter(
                ReservationModel.user_id == user_id,
                ReservationModel.parking_spot_id == parking_spot_id,
                ReservationModel.start_time == start_time,
                ReservationModel.end_time == end_time
            ).first()

            if model:
                return self.to_domain(model)
            return None
        except SQLAlchemyError as e:
            self._logger.error(f"Database error finding reservation by booking: {e}")
            raise

    def find_by_parking_spot(self, parking_spot_id: int) -> List[Reservation]:
        try:
            models = self.session.query(ReservationModel).filter(
                ReservationModel.parking_spot_id == parking_spot_id
            ).order_by(
                ReservationModel.start_time, ReservationModel.end_time, ReservationModel.id
            ).all()
            return [self.to_domain(model) for model in models]
        except SQLAlchemyError as e:
            self._logger.error(f"Database error finding reservations by spot: {e}")
            raise

    def find_by_user(self, user_id: int) -> List[Reservation]:
        try:
            models = self.session.query(ReservationModel).filter(
                ReservationModel.user_id == user_id
            ).order_by(ReservationModel.id).all()
            return [self.to_domain(model) for model in models]
        except SQLAlchemyError as e:
            self._logger.error(f"Database error finding reservations by user: {e}")
            raise


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """Repository for users"""

    @property
    def model_class(self) -> Type[Base]:
        return UserModel

    def to_domain(self, model: UserModel) -> User:
        return Mapper.user_to_domain(model)

    def to_orm(self, entity: User) -> UserModel:
        return Mapper.user_to_orm(entity)

    def exists_by_username(self, username: str) -> bool:
        return self.find_by_username(username) is not None

    def find_by_username(self, username: str) -> Optional[User]:
        try:
            model = self.session.query(UserModel).filter(
                UserModel.username == username
            ).first()

            if model:
                return self.to_domain(model)
            return None
        except SQLAlchemyError as e:
            self._logger.error(f"Database error finding user by username: {e}")
            raise


class SQLAlchemyUnitOfWork(UnitOfWork):
    """Unit of Work implementation with SQLAlchemy"""

    def __init__(self, session_factory: Callable[[], Session]):
        super().__init__()
        self.session_factory = session_factory
        self.session: Optional[Session] = None

    def _begin(self):
        self.session = self.session_factory()

        # Initialize repositories
        self._parking_areas = SQLAlchemyParkingAreaRepository(self.session)
        self._parking_spots = SQLAlchemyParkingSpotRepository(self.session)
        self._reservations = SQLAlchemyReservationRepository(self.session)
        self._users = SQLAlchemyUserRepository(self.session)

    def _end(self):
        self.session.close()
        self.session = None

    def commit(self):
        """Commit the transaction"""
        try:
            self.session.commit()
            self._logger.debug("Transaction committed")
        except SQLAlchemyError as e:
            self._logger.error(f"Error committing transaction: {e}")
            self.session.rollback()
            raise

    def rollback(self):
        """Rollback the transaction"""
        self.session.rollback()
        self._logger.debug("Transaction rolled back")

    def _require_session(self):
        if self.session is None:
            raise RuntimeError("Repositories are only available inside a unit of work")

    @property
    def parking_areas(self) -> SQLAlchemyParkingAreaRepository:
        self._require_session()
        return self._parking_areas

    @property
    def parking_spots(self) -> SQLAlchemyParkingSpotRepository:
        self._require_session()
        return self._parking_spots

    @property
    def reservations(self) -> SQLAlchemyReservationRepository:
        self._require_session()
        return self._reservations

    @property
    def users(self) -> SQLAlchemyUserRepository:
        self._require_session()
        return self._users


# ============================================================================
# REPOSITORY FACTORY
# ============================================================================

class RepositoryFactory:
    """Factory for creating units of work"""

    @staticmethod
    def create_engine(database_url: str) -> Engine:
        """Create an engine, sharing one connection for in-memory SQLite"""
        if database_url.startswith("sqlite") and (":memory:" in database_url or database_url == "sqlite://"):
            return create_engine(
                database_url,
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool
            )
        return create_engine(database_url, echo=False)

    @staticmethod
    def create_schema(engine: Engine):
        """Create tables if they don't exist"""
        Base.metadata.create_all(bind=engine)

    @staticmethod
    def create_sqlalchemy_uow(database_url: str) -> SQLAlchemyUnitOfWork:
        """Create SQLAlchemy Unit of Work"""
        engine = RepositoryFactory.create_engine(database_url)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        RepositoryFactory.create_schema(engine)

        return SQLAlchemyUnitOfWork(SessionLocal)

    @staticmethod
    def create_in_memory_uow() -> InMemoryUnitOfWork:
        """Create in-memory Unit of Work for testing"""
        return InMemoryUnitOfWork()
