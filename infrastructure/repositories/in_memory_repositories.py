"""In-Memory Repository Implementations"""
import itertools
from typing import Optional, List, Dict
from datetime import date, datetime
from decimal import Decimal

from domain.repositories import RoomRepository, ReservationRepository, InvoiceRepository, ClientRepository
from domain.entities import Room, Reservation, Invoice, Client
from domain.time_utils import utc_date


class InMemoryDatabase:
    """Tables and identity sequences shared by the in-memory repositories.

    Rows are stored as private copies, so an entity handed out by a
    repository only changes stored state through an explicit update.
    """

    def __init__(self):
        self.rooms: Dict[int, Room] = {}
        self.reservations: Dict[int, Reservation] = {}
        self.invoices: Dict[int, Invoice] = {}
        self.clients: Dict[int, Client] = {}
        self._sequences: Dict[str, itertools.count] = {}

    def next_id(self, table: str) -> int:
        if table not in self._sequences:
            self._sequences[table] = itertools.count(1)
        return next(self._sequences[table])


class InMemoryRoomRepository(RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self, database: Optional[InMemoryDatabase] = None):
        self._db = database or InMemoryDatabase()

    async def add(self, room: Room) -> Room:
        """Save room to memory"""
        stored = room.model_copy(update={"room_id": self._db.next_id("rooms")})
        self._db.rooms[stored.room_id] = stored
        return stored.model_copy()

    async def find_by_id(self, room_id: int) -> Optional[Room]:
        """Find room by ID"""
        room = self._db.rooms.get(room_id)
        return room.model_copy() if room else None

    async def find_all(self) -> List[Room]:
        """Find all rooms"""
        return [r.model_copy() for r in self._db.rooms.values()]

    async def count(self, room_type: Optional[str] = None) -> int:
        """Count rooms, optionally of one exact type"""
        if room_type is None:
            return len(self._db.rooms)
        return sum(1 for r in self._db.rooms.values() if r.room_type == room_type)

    async def search(
        self,
        room_type: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        available: Optional[bool] = None
    ) -> List[Room]:
        """Find rooms matching every given filter"""
        results = []
        for room in self._db.rooms.values():
            if room_type and room_type not in room.room_type:
                continue
            if min_price is not None and room.price_per_night < min_price:
                continue
            if max_price is not None and room.price_per_night > max_price:
                continue
            if available is not None and room.available != available:
                continue
            results.append(room.model_copy())
        return results

    async def update_availability(self, room_id: int, available: bool) -> None:
        """Set the cached availability flag"""
        if room_id not in self._db.rooms:
            raise ValueError(f"Room with ID {room_id} not found.")
        self._db.rooms[room_id] = self._db.rooms[room_id].model_copy(update={"available": available})

    async def find_available_in_range(self, start: datetime, end: datetime) -> List[Room]:
        """Join rooms against confirmed reservations overlapping [start, end).

        A room flagged unavailable only qualifies when the flag stems from
        its own confirmed bookings; without any it is blocked.
        """
        confirmed = [r for r in self._db.reservations.values() if r.is_confirmed]
        booked = {r.room_id for r in confirmed}
        occupied = {r.room_id for r in confirmed if r.overlaps(start, end)}
        return [
            room.model_copy() for room in self._db.rooms.values()
            if (room.available or room.room_id in booked) and room.room_id not in occupied
        ]


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository"""

    def __init__(self, database: Optional[InMemoryDatabase] = None):
        self._db = database or InMemoryDatabase()

    async def add(self, reservation: Reservation) -> Reservation:
        """Save reservation to memory"""
        stored = reservation.model_copy(update={"reservation_id": self._db.next_id("reservations")})
        self._db.reservations[stored.reservation_id] = stored
        return stored.model_copy()

    async def find_by_id(self, reservation_id: int) -> Optional[Reservation]:
        """Find reservation by ID"""
        reservation = self._db.reservations.get(reservation_id)
        return reservation.model_copy() if reservation else None

    async def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        if reservation.reservation_id in self._db.reservations:
            self._db.reservations[reservation.reservation_id] = reservation.model_copy()
            return reservation
        raise ValueError("Reservation not found")

    async def find_by_client_id(self, client_id: int) -> List[Reservation]:
        """Find reservations by client ID"""
        return [r.model_copy() for r in self._db.reservations.values() if r.client_id == client_id]

    async def find_by_start_date_range(self, start: date, end: date) -> List[Reservation]:
        """Find confirmed reservations starting between two dates, both inclusive"""
        return [
            r.model_copy() for r in self._db.reservations.values()
            if r.is_confirmed and start <= utc_date(r.start_date) <= end
        ]

    async def find_overlapping(self, start: datetime, end: datetime) -> List[Reservation]:
        """Find confirmed reservations overlapping [start, end)"""
        return [
            r.model_copy() for r in self._db.reservations.values()
            if r.is_confirmed and r.overlaps(start, end)
        ]

    async def has_overlapping_confirmed(
        self,
        room_id: int,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[int] = None
    ) -> bool:
        """Check for a confirmed reservation of the room overlapping [start, end)"""
        return any(
            r.room_id == room_id
            and r.is_confirmed
            and r.reservation_id != exclude_reservation_id
            and r.overlaps(start, end)
            for r in self._db.reservations.values()
        )


class InMemoryInvoiceRepository(InvoiceRepository):
    """In-memory implementation of InvoiceRepository"""

    def __init__(self, database: Optional[InMemoryDatabase] = None):
        self._db = database or InMemoryDatabase()

    async def add(self, invoice: Invoice) -> Invoice:
        """Save invoice to memory, one per reservation"""
        if any(i.reservation_id == invoice.reservation_id for i in self._db.invoices.values()):
            raise ValueError(f"Invoice for reservation {invoice.reservation_id} already exists")
        stored = invoice.model_copy(update={"invoice_id": self._db.next_id("invoices")})
        self._db.invoices[stored.invoice_id] = stored
        return stored

    async def find_by_reservation_id(self, reservation_id: int) -> Optional[Invoice]:
        """Find the invoice issued for a reservation"""
        for invoice in self._db.invoices.values():
            if invoice.reservation_id == reservation_id:
                return invoice
        return None


class InMemoryClientRepository(ClientRepository):
    """In-memory implementation of ClientRepository"""

    def __init__(self, database: Optional[InMemoryDatabase] = None):
        self._db = database or InMemoryDatabase()

    async def add(self, client: Client) -> Client:
        """Save client to memory"""
        stored = client.model_copy(update={"client_id": self._db.next_id("clients")})
        self._db.clients[stored.client_id] = stored
        return stored.model_copy()

    async def find_by_id(self, client_id: int) -> Optional[Client]:
        """Find client by ID"""
        client = self._db.clients.get(client_id)
        return client.model_copy() if client else None
