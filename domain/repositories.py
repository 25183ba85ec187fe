"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from domain.entities import Room, Reservation, Invoice, Client


class RoomRepository(ABC):
    """Repository interface for Room Aggregate"""

    @abstractmethod
    async def add(self, room: Room) -> Room:
        """Persist a new room, assigning its identity"""
        pass

    @abstractmethod
    async def find_by_id(self, room_id: int) -> Optional[Room]:
        """Find room by ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Room]:
        """Find all rooms"""
        pass

    @abstractmethod
    async def count(self, room_type: Optional[str] = None) -> int:
        """Count rooms, optionally of one exact type"""
        pass

    @abstractmethod
    async def search(
        self,
        room_type: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        available: Optional[bool] = None
    ) -> List[Room]:
        """Find rooms matching every given filter"""
        pass

    @abstractmethod
    async def update_availability(self, room_id: int, available: bool) -> None:
        """Set the cached availability flag of a room"""
        pass

    @abstractmethod
    async def find_available_in_range(self, start: datetime, end: datetime) -> List[Room]:
        """Find flagged-available rooms with no confirmed reservation overlapping the range"""
        pass


class ReservationRepository(ABC):
    """Repository interface for Reservation Aggregate"""

    @abstractmethod
    async def add(self, reservation: Reservation) -> Reservation:
        """Persist a new reservation, assigning its identity"""
        pass

    @abstractmethod
    async def find_by_id(self, reservation_id: int) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass

    @abstractmethod
    async def find_by_client_id(self, client_id: int) -> List[Reservation]:
        """Find reservations by client ID"""
        pass

    @abstractmethod
    async def find_by_start_date_range(self, start: date, end: date) -> List[Reservation]:
        """Find confirmed reservations whose start date lies in [start, end]"""
        pass

    @abstractmethod
    async def find_overlapping(self, start: datetime, end: datetime) -> List[Reservation]:
        """Find confirmed reservations overlapping [start, end)"""
        pass

    @abstractmethod
    async def has_overlapping_confirmed(
        self,
        room_id: int,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[int] = None
    ) -> bool:
        """Check for a confirmed reservation of the room overlapping [start, end)"""
        pass


class InvoiceRepository(ABC):
    """Repository interface for Invoice Entity"""

    @abstractmethod
    async def add(self, invoice: Invoice) -> Invoice:
        """Persist a new invoice, assigning its identity"""
        pass

    @abstractmethod
    async def find_by_reservation_id(self, reservation_id: int) -> Optional[Invoice]:
        """Find the invoice issued for a reservation"""
        pass


class ClientRepository(ABC):
    """Repository interface for Client Entity"""

    @abstractmethod
    async def add(self, client: Client) -> Client:
        """Persist a new client, assigning its identity"""
        pass

    @abstractmethod
    async def find_by_id(self, client_id: int) -> Optional[Client]:
        """Find client by ID"""
        pass
