# File: src/parkhub/application/dtos.py
"""
Data Transfer Objects (DTOs) for the Parking Reservation Backend

This module defines DTOs for data transfer between layers:
1. Create DTOs - Input for create/update operations, convertible to models
2. Return DTOs - Output representations built from models
3. Partner DTOs - Shapes of the partner rental service payloads
4. Paging DTOs - Page requests and windowed result pages

DTO Principles:
- Validation at creation (pydantic)
- No business logic, only data
- Every DTO/model pair that defines both directions round-trips:
  ``X.from_model(dto.to_model(...)) == dto``
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Any, Sequence, Union

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..domain.models import ParkingArea, ParkingSpot, User, Reservation, UserRole
from .exceptions import ModelValidationError


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(
        from_attributes=True,  # Allow creation from domain models
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    def to_json(self, **kwargs) -> str:
        """Convert DTO to JSON string"""
        return self.model_dump_json(**kwargs)


def _check_amount(v: Optional[Decimal]) -> Optional[Decimal]:
    """Non-negative with at most 2 decimal places"""
    if v is None:
        return v
    if v < 0:
        raise ValueError("Amount cannot be negative")
    if v.as_tuple().exponent < -2:
        raise ValueError("Amount cannot have more than 2 decimal places")
    return v


def _check_email(v: Optional[str]) -> Optional[str]:
    """Basic email validation"""
    if v and '@' not in v:
        raise ValueError("Invalid email address")
    return v


def _check_time_order(start_time: datetime, end_time: datetime) -> None:
    """Both naive or both aware, and end strictly after start"""
    if (start_time.tzinfo is None) != (end_time.tzinfo is None):
        raise ValueError("Start and end time must both carry a timezone or both omit it")
    if end_time <= start_time:
        raise ValueError("End time must be after start time")


# ============================================================================
# PAGING DTOs
# ============================================================================

def is_descending(sort_direction: Optional[str]) -> bool:
    """Only "desc" (any case) sorts descending, anything else ascending"""
    return bool(sort_direction) and sort_direction.strip().lower() == "desc"


class PageRequest(BaseDTO):
    """Zero-based page index plus page size"""
    page: int = Field(default=0, ge=0, description="Page number (0-based)")
    size: int = Field(default=10, ge=1, description="Items per page")
    sort_direction: str = Field(default="asc", description="Sort direction (asc/desc)")

    @property
    def offset(self) -> int:
        return self.page * self.size

    @property
    def descending(self) -> bool:
        return is_descending(self.sort_direction)


def build_page_request(page: int, size: int, sort_direction: Optional[str] = "asc") -> PageRequest:
    """Build a PageRequest, reporting bad paging input as a model validation error"""
    try:
        return PageRequest(page=page, size=size, sort_direction=sort_direction or "asc")
    except PydanticValidationError as e:
        raise ModelValidationError(f"Invalid page request: {e.errors()[0]['msg']}") from e


class Page(BaseDTO):
    """A windowed slice of a larger ordered result set"""
    items: List[Any]
    total: int = Field(ge=0, description="Total number of matching elements")
    page: int = Field(ge=0, description="Page number (0-based)")
    page_size: int = Field(ge=1)
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def of(cls, items: Sequence[Any], total: int, page: int, page_size: int) -> 'Page':
        """Build a page and derive its navigation fields"""
        total_pages = math.ceil(total / page_size) if total else 0
        return cls(
            items=list(items),
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages,
            has_next=page + 1 < total_pages,
            has_prev=page > 0
        )


def paginate(items: Sequence[Any], page: int, size: int) -> Page:
    """
    Slice an already ordered sequence into page ``page`` of ``size`` items.

    The window is [page*size, min(page*size + size, total)). A start index at
    or beyond the end yields an empty page which still reports the true total.
    """
    request = build_page_request(page, size)
    total = len(items)
    start = request.offset

    if start >= total:
        content: Sequence[Any] = []
    else:
        content = items[start:min(start + request.size, total)]

    return Page.of(content, total, request.page, request.size)


# ============================================================================
# PARKING AREA DTOs
# ============================================================================

class ParkingAreaCreateDTO(BaseDTO):
    """DTO for creating or replacing a parking area"""
    name: str = Field(min_length=1, max_length=100, description="Unique parking area name")
    address: str = Field(min_length=1, max_length=200, description="Street address")
    city: str = Field(min_length=1, max_length=100, description="City")
    hourly_rate: Optional[Decimal] = Field(default=None, description="Hourly parking rate")
    longitude: Optional[float] = Field(default=None, ge=-180, le=180, description="Longitude")
    latitude: Optional[float] = Field(default=None, ge=-90, le=90, description="Latitude")

    @field_validator('hourly_rate')
    @classmethod
    def validate_hourly_rate(cls, v):
        return _check_amount(v)

    @model_validator(mode='after')
    def validate_coordinates(self):
        """Coordinates are optional but come in pairs"""
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must be given together")
        return self

    @classmethod
    def from_model(cls, area: ParkingArea) -> 'ParkingAreaCreateDTO':
        return cls(
            name=area.name,
            address=area.address,
            city=area.city,
            hourly_rate=area.hourly_rate,
            longitude=area.longitude,
            latitude=area.latitude
        )

    def to_model(self) -> ParkingArea:
        return ParkingArea(
            name=self.name,
            address=self.address,
            city=self.city,
            hourly_rate=self.hourly_rate,
            latitude=self.latitude,
            longitude=self.longitude
        )


class ParkingAreaDTO(ParkingAreaCreateDTO):
    """Complete parking area DTO"""
    id: int = Field(description="Parking area ID")

    @classmethod
    def from_model(cls, area: ParkingArea) -> 'ParkingAreaDTO':
        return cls(id=area.id, **ParkingAreaCreateDTO.from_model(area).model_dump())

    def to_model(self) -> ParkingArea:
        area = super().to_model()
        area.id = self.id
        return area


# ============================================================================
# PARKING SPOT DTOs
# ============================================================================

class ParkingSpotCreateDTO(BaseDTO):
    """DTO for creating or replacing a parking spot"""
    spot_number: str = Field(min_length=1, max_length=20, description="Spot label, e.g. A1")
    parking_area_id: int = Field(description="Owning parking area ID")
    is_available: bool = Field(default=True, description="Is spot available")

    @field_validator('spot_number')
    @classmethod
    def validate_spot_number(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Spot number cannot be blank")
        return v

    @classmethod
    def from_model(cls, spot: ParkingSpot) -> 'ParkingSpotCreateDTO':
        return cls(
            spot_number=spot.spot_number,
            parking_area_id=spot.parking_area_id,
            is_available=spot.is_available
        )

    def to_model(self) -> ParkingSpot:
        return ParkingSpot(
            spot_number=self.spot_number,
            parking_area_id=self.parking_area_id,
            is_available=self.is_available
        )


class ParkingSpotDTO(ParkingSpotCreateDTO):
    """Complete parking spot DTO"""
    id: int = Field(description="Parking spot ID")

    @classmethod
    def from_model(cls, spot: ParkingSpot) -> 'ParkingSpotDTO':
        return cls(id=spot.id, **ParkingSpotCreateDTO.from_model(spot).model_dump())

    def to_model(self) -> ParkingSpot:
        spot = super().to_model()
        spot.id = self.id
        return spot


# ============================================================================
# USER DTOs
# ============================================================================

class UserCreateDTO(BaseDTO):
    """DTO for creating or replacing a user"""
    username: str = Field(min_length=1, max_length=50, description="Unique username")
    email: Optional[str] = Field(default=None, description="Email address")
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    role: UserRole = Field(default=UserRole.USER, description="User role")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @field_validator('role', mode='before')
    @classmethod
    def parse_role(cls, v):
        return UserRole.parse(v)

    @classmethod
    def from_model(cls, user: User) -> 'UserCreateDTO':
        return cls(
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role
        )

    def to_model(self) -> User:
        return User(
            username=self.username,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            role=UserRole.parse(self.role)
        )


class UserDTO(UserCreateDTO):
    """Complete user DTO"""
    id: int = Field(description="User ID")

    @classmethod
    def from_model(cls, user: User) -> 'UserDTO':
        return cls(id=user.id, **UserCreateDTO.from_model(user).model_dump())

    def to_model(self) -> User:
        user = super().to_model()
        user.id = self.id
        return user


# ============================================================================
# RESERVATION DTOs
# ============================================================================

class ReservationCreateDTO(BaseDTO):
    """DTO for creating or updating a reservation"""
    parking_spot_id: int = Field(description="Reserved parking spot ID")
    user_id: int = Field(description="Reserving user ID")
    start_time: datetime = Field(description="Start time")
    end_time: datetime = Field(description="End time")
    total_cost: Optional[Decimal] = Field(default=None, description="Total cost, computed when omitted")

    @field_validator('total_cost')
    @classmethod
    def validate_total_cost(cls, v):
        return _check_amount(v)

    @model_validator(mode='after')
    def validate_times(self):
        """Validate that end time is after start time"""
        _check_time_order(self.start_time, self.end_time)
        return self

    @classmethod
    def from_model(cls, reservation: Reservation) -> 'ReservationCreateDTO':
        return cls(
            parking_spot_id=reservation.parking_spot_id,
            user_id=reservation.user_id,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
            total_cost=reservation.total_cost
        )

    def to_model(self) -> Reservation:
        return Reservation(
            parking_spot_id=self.parking_spot_id,
            user_id=self.user_id,
            start_time=self.start_time,
            end_time=self.end_time,
            total_cost=self.total_cost
        )


class ReservationDTO(BaseDTO):
    """Complete reservation DTO"""
    id: int
    parking_spot_id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    total_cost: Optional[Decimal] = None
    created_at: datetime

    @classmethod
    def from_model(cls, reservation: Reservation) -> 'ReservationDTO':
        return cls(
            id=reservation.id,
            parking_spot_id=reservation.parking_spot_id,
            user_id=reservation.user_id,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
            total_cost=reservation.total_cost,
            created_at=reservation.created_at
        )

    def to_model(self) -> Reservation:
        return Reservation(
            id=self.id,
            parking_spot_id=self.parking_spot_id,
            user_id=self.user_id,
            start_time=self.start_time,
            end_time=self.end_time,
            total_cost=self.total_cost,
            created_at=self.created_at
        )


# ============================================================================
# PARTNER RENTAL SERVICE DTOs
# ============================================================================

class PartnerDTO(BaseDTO):
    """Partner payloads use camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class CarLocationDTO(PartnerDTO):
    id: Optional[Union[int, str]] = None
    full_address: Optional[str] = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class CarModelDTO(PartnerDTO):
    id: Optional[Union[int, str]] = None
    brand_name: Optional[str] = None
    name: Optional[str] = None
    production_year: Optional[int] = None
    fuel_type: Optional[str] = None
    fuel_capacity: Optional[int] = None
    seat_count: Optional[int] = None
    door_count: Optional[int] = None
    daily_rate: Optional[float] = None


class CarDTO(PartnerDTO):
    """A rentable car as listed by the partner"""
    id: Union[int, str]
    location: CarLocationDTO
    model: Optional[CarModelDTO] = None

    @property
    def position(self):
        """(latitude, longitude) of the car"""
        return (self.location.latitude, self.location.longitude)


class CarReservationDTO(BaseDTO):
    """Request to rent a partner car on behalf of a user"""
    user_email: str = Field(min_length=3, description="Customer email, also the partner identity")
    car_id: Union[int, str] = Field(description="Partner car ID")
    start_time: datetime
    end_time: datetime

    @field_validator('user_email')
    @classmethod
    def validate_email(cls, v):
        return _check_email(v)

    @model_validator(mode='after')
    def validate_times(self):
        _check_time_order(self.start_time, self.end_time)
        return self


# ============================================================================
# RESPONSE DTOs
# ============================================================================

class ErrorResponseDTO(BaseDTO):
    """Standard error response DTO"""
    success: bool = Field(default=False, description="Success flag")
    error: str = Field(description="Error message")
    error_code: Optional[str] = Field(default=None, description="Error code")
    timestamp: datetime = Field(default_factory=datetime.now, description="Error timestamp")
