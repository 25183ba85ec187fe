"""Domain Exceptions - error kinds surfaced by the core operations"""
from typing import Optional


class ReservationSystemError(Exception):
    """Base class for every failure the core reports to its callers"""


class NullInputError(ReservationSystemError, ValueError):
    """A required argument was not supplied"""


class InvalidArgumentError(ReservationSystemError, ValueError):
    """An argument value is malformed (bad price, bad id, ...)"""


class InvalidRangeError(InvalidArgumentError):
    """A date range is badly ordered or outside the allowed window"""


class PastDateError(ReservationSystemError, ValueError):
    """A date lies before the current UTC date"""


class ConflictError(ReservationSystemError):
    """The room cannot be booked for the requested range"""


class NotFoundError(ReservationSystemError, LookupError):
    """A referenced entity does not exist"""


class InvalidStateError(ReservationSystemError):
    """The entity exists but does not allow the requested transition"""


class NoInventoryError(ReservationSystemError):
    """An aggregate operation found no rooms to work on"""


class LockTimeoutError(ReservationSystemError):
    """A room, or another shared resource, could not be locked within the configured timeout"""

    def __init__(self, room_id: Optional[int], timeout: float, resource: Optional[str] = None):
        label = resource or f"Room {room_id}"
        super().__init__(f"{label} is busy, could not acquire lock within {timeout} seconds.")
        self.room_id = room_id
        self.timeout = timeout
