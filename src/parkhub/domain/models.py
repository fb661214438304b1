# File: src/parkhub/domain/models.py
"""
Domain Models for the Parking Reservation Backend

This module contains:
1. Value Objects: Coordinates and TimeRange (immutable, validated)
2. Enums: UserRole
3. Entities: ParkingArea, ParkingSpot, User, Reservation
4. Domain Services: ReservationCostCalculator

Entities reference each other by identity only. A ParkingSpot holds the id
of its ParkingArea, a Reservation holds the ids of its ParkingSpot and User.
Identity is a surrogate integer assigned by the repository on first save,
so a freshly built entity has ``id = None``.
"""

from dataclasses import dataclass
from typing import Optional, Any, Tuple
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum


# Fixed-point precision used for rates and costs (matches DECIMAL(10, 2) columns)
CENTS = Decimal("0.01")


def quantize_amount(amount: Optional[Decimal]) -> Optional[Decimal]:
    """Round a monetary amount half-up to two decimal places"""
    if amount is None:
        return None
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


# ============================================================================
# VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)
class Coordinates:
    """
    Value Object: Geographic point (WGS84 degrees)
    """
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be between -90 and 90: {self.latitude}")

        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be between -180 and 180: {self.longitude}")

    def __str__(self) -> str:
        return f"({self.latitude:.6f}, {self.longitude:.6f})"


@dataclass(frozen=True)
class TimeRange:
    """
    Value Object: Time range with start and end times
    Provides duration calculation and validation
    """
    start_time: datetime
    end_time: datetime

    def __post_init__(self):
        """Validate time range"""
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")

    @property
    def duration(self) -> timedelta:
        """Calculate duration of time range"""
        return self.end_time - self.start_time

    @property
    def duration_hours(self) -> Decimal:
        """Duration in hours as an exact decimal"""
        return Decimal(int(self.duration.total_seconds())) / Decimal(3600)

    def overlaps(self, other: 'TimeRange') -> bool:
        """Check if this time range overlaps with another"""
        return (self.start_time < other.end_time and
                self.end_time > other.start_time)

    def __str__(self) -> str:
        start_str = self.start_time.strftime("%Y-%m-%d %H:%M")
        end_str = self.end_time.strftime("%Y-%m-%d %H:%M")
        return f"{start_str} to {end_str}"


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class UserRole(Enum):
    """
    Enumeration of user roles
    ADMIN manages areas and spots, USER books reservations, GUEST browses
    """
    ADMIN = "ADMIN"
    USER = "USER"
    GUEST = "GUEST"

    @classmethod
    def parse(cls, value: Any) -> 'UserRole':
        """Parse a role name case-insensitively"""
        if isinstance(value, cls):
            return value
        if value is None:
            raise ValueError("User role cannot be empty")
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown user role: {value}") from None

    @property
    def is_admin(self) -> bool:
        return self is UserRole.ADMIN

    @property
    def is_user(self) -> bool:
        return self is UserRole.USER

    @property
    def is_admin_or_user(self) -> bool:
        return self in (UserRole.ADMIN, UserRole.USER)

    def __str__(self) -> str:
        return self.value


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

@dataclass
class ParkingArea:
    """
    Entity: A named physical location containing parking spots
    The name is unique across all areas (enforced by ParkingAreaService)
    """
    name: str
    address: str
    city: str
    hourly_rate: Optional[Decimal] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    id: Optional[int] = None

    def __post_init__(self):
        self._validate()
        self.hourly_rate = quantize_amount(self.hourly_rate)

    def _validate(self) -> None:
        """Validate area attributes"""
        if not self.name or not self.name.strip():
            raise ValueError("Parking area name cannot be empty")

        if not self.address or not self.address.strip():
            raise ValueError("Parking area address cannot be empty")

        if not self.city or not self.city.strip():
            raise ValueError("Parking area city cannot be empty")

        if self.hourly_rate is not None and Decimal(str(self.hourly_rate)) < 0:
            raise ValueError("Hourly rate cannot be negative")

        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must be given together")

        if self.latitude is not None:
            # Raises on out-of-range values
            Coordinates(self.latitude, self.longitude)

    @property
    def coordinates(self) -> Optional[Coordinates]:
        """Get coordinates if the area is geolocated"""
        if self.latitude is not None and self.longitude is not None:
            return Coordinates(self.latitude, self.longitude)
        return None

    def __str__(self) -> str:
        return f"{self.name} ({self.address}, {self.city})"


@dataclass
class ParkingSpot:
    """
    Entity: Individually reservable unit within a parking area
    (parking_area_id, spot_number) is unique
    """
    spot_number: str
    parking_area_id: int
    is_available: bool = True
    id: Optional[int] = None

    def __post_init__(self):
        if not self.spot_number or not str(self.spot_number).strip():
            raise ValueError("Spot number cannot be empty")

        if self.parking_area_id is None:
            raise ValueError("Parking spot must belong to a parking area")


@dataclass
class User:
    """
    Entity: Account that can own reservations
    """
    username: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole = UserRole.USER
    id: Optional[int] = None

    def __post_init__(self):
        if not self.username or not self.username.strip():
            raise ValueError("Username cannot be empty")
        self.role = UserRole.parse(self.role)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass
class Reservation:
    """
    Entity: Time-bounded claim by one user on one parking spot

    Lifecycle is create -> (update in place)* -> delete. ``created_at`` is set
    once at creation and never changes afterwards.
    """
    parking_spot_id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    total_cost: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    id: Optional[int] = None

    def __post_init__(self):
        if self.parking_spot_id is None:
            raise ValueError("Reservation must reference a parking spot")

        if self.user_id is None:
            raise ValueError("Reservation must reference a user")

        # Raises if end_time <= start_time
        TimeRange(self.start_time, self.end_time)

        if self.total_cost is not None and Decimal(str(self.total_cost)) < 0:
            raise ValueError("Total cost cannot be negative")
        self.total_cost = quantize_amount(self.total_cost)

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def booking_key(self) -> Tuple[int, int, datetime, datetime]:
        """Tuple guarded against duplicate submission"""
        return (self.user_id, self.parking_spot_id, self.start_time, self.end_time)


# ============================================================================
# DOMAIN SERVICES
# ============================================================================

class ReservationCostCalculator:
    """
    Domain Service: Computes the total cost of a reservation
    Stateless, hourly rate times duration, rounded half-up to cents
    """

    @staticmethod
    def calculate(hourly_rate: Optional[Decimal], time_range: TimeRange) -> Optional[Decimal]:
        """
        Calculate the cost for the given rate and time range.
        Returns None when the area has no hourly rate.
        """
        if hourly_rate is None:
            return None
        return quantize_amount(Decimal(str(hourly_rate)) * time_range.duration_hours)

    @staticmethod
    def resolve(
        requested_cost: Optional[Decimal],
        hourly_rate: Optional[Decimal],
        time_range: TimeRange
    ) -> Optional[Decimal]:
        """Use the client supplied cost when present, otherwise compute it"""
        if requested_cost is not None:
            return quantize_amount(requested_cost)
        return ReservationCostCalculator.calculate(hourly_rate, time_range)
