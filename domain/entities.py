"""Domain Entities - Aggregates"""
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import Optional
from decimal import Decimal

from domain.enums import ReservationStatus
from domain.exceptions import InvalidArgumentError, InvalidRangeError
from domain.time_utils import to_utc

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Room(BaseModel):
    """Room Aggregate Root Entity"""

    model_config = ConfigDict(from_attributes=True)

    # Identity (assigned by the store)
    room_id: Optional[int] = None

    room_type: str
    price_per_night: Decimal

    # Cached summary of the booking state, owned by the reservation lifecycle.
    # Never authoritative for overlap detection.
    available: bool = True

    # ==================== VALIDATION ====================
    def validate_for_registration(self) -> None:
        """Validate registration business rules"""
        if not self.room_type or not self.room_type.strip():
            raise InvalidArgumentError("The type of room is mandatory.")

        if self.price_per_night <= 0:
            raise InvalidArgumentError("The price per night must be greater than zero.")


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    model_config = ConfigDict(from_attributes=True)

    # Identity (assigned by the store)
    reservation_id: Optional[int] = None

    # References to other aggregates
    client_id: int
    room_id: int

    start_date: datetime
    end_date: datetime

    status: ReservationStatus = ReservationStatus.CONFIRMED
    is_notified: bool = False

    # ==================== STATE TRANSITION METHODS ====================
    def confirm(self) -> None:
        """Normalize the stay to UTC and mark the reservation confirmed"""
        start, end = to_utc(self.start_date), to_utc(self.end_date)
        if start >= end:
            raise InvalidRangeError("The start date must be earlier than the end date.")

        self.start_date = start
        self.end_date = end
        self.status = ReservationStatus.CONFIRMED

    def cancel(self) -> None:
        self.status = ReservationStatus.CANCELED

    def mark_notified(self) -> None:
        """Record the check-in notice; a notice is never undone"""
        self.is_notified = True

    # ==================== QUERY METHODS ====================
    @property
    def is_confirmed(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Open-interval overlap; a stay ending when another begins does not overlap"""
        return to_utc(start) < to_utc(self.end_date) and to_utc(end) > to_utc(self.start_date)

    def get_nights(self) -> int:
        """Whole days between start and end, fractions truncated"""
        return (to_utc(self.end_date) - to_utc(self.start_date)).days


class Invoice(BaseModel):
    """Invoice Entity - immutable snapshot of a finished stay"""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    invoice_id: Optional[int] = None
    reservation_id: int
    issue_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    nights_stayed: int
    room_price_per_night: Decimal
    total_amount: Decimal

    @staticmethod
    def create(reservation_id: int, nights_stayed: int, room_price_per_night: Decimal,
               issue_date: datetime) -> "Invoice":
        """Build an invoice, computing the total from nights and nightly price"""
        return Invoice(
            reservation_id=reservation_id,
            issue_date=issue_date,
            nights_stayed=nights_stayed,
            room_price_per_night=room_price_per_night,
            total_amount=nights_stayed * room_price_per_night
        )


class Client(BaseModel):
    """Client Entity"""

    model_config = ConfigDict(from_attributes=True)

    client_id: Optional[int] = None
    name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None

    @field_validator("name", "last_name", "email")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    def validate_for_registration(self) -> None:
        """Validate registration business rules"""
        if not self.name:
            raise InvalidArgumentError("The user name is required.")

        if not self.last_name:
            raise InvalidArgumentError("The user last name is required.")

        if not self.email:
            raise InvalidArgumentError("The user email is required.")

        if not EMAIL_PATTERN.match(self.email):
            raise InvalidArgumentError("The user email is not valid.")
