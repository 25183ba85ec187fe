"""Shared fixtures for the hotel reservation test suite"""
import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from application.availability import AvailabilityEngine
from application.services import (
    RoomService, ReservationService, InvoiceService, OccupancyReportService, ClientService
)
from domain.entities import Room, Reservation
from domain.enums import ReservationStatus
from infrastructure.locks import RoomLockRegistry
from infrastructure.repositories.in_memory_repositories import (
    InMemoryDatabase, InMemoryRoomRepository, InMemoryReservationRepository,
    InMemoryInvoiceRepository, InMemoryClientRepository
)


class YieldingReservationRepository(InMemoryReservationRepository):
    """In-memory store that yields to the event loop around its reads and writes,
    the way a networked store would, so concurrent operations interleave"""

    async def has_overlapping_confirmed(self, room_id, start, end, exclude_reservation_id=None):
        await asyncio.sleep(0)
        found = await super().has_overlapping_confirmed(room_id, start, end, exclude_reservation_id)
        await asyncio.sleep(0)
        return found

    async def add(self, reservation):
        await asyncio.sleep(0)
        return await super().add(reservation)

    async def find_by_id(self, reservation_id):
        await asyncio.sleep(0)
        return await super().find_by_id(reservation_id)

    async def update(self, reservation):
        await asyncio.sleep(0)
        return await super().update(reservation)


class FrozenClock:
    """Clock returning a settable instant"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def today_at(self, days: int = 0, hour: int = 12) -> datetime:
        """Instant ``days`` after the clock's current date, at ``hour`` UTC"""
        day = self.now.date() + timedelta(days=days)
        return datetime(day.year, day.month, day.day, hour, tzinfo=timezone.utc)


# ============================================================================
# CLOCK & DATABASE
# ============================================================================

@pytest.fixture
def clock():
    return FrozenClock(datetime(2030, 6, 15, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def database():
    return InMemoryDatabase()


# ============================================================================
# REPOSITORIES
# ============================================================================

@pytest.fixture
def room_repository(database):
    return InMemoryRoomRepository(database)


@pytest.fixture
def reservation_repository(database):
    return YieldingReservationRepository(database)


@pytest.fixture
def invoice_repository(database):
    return InMemoryInvoiceRepository(database)


@pytest.fixture
def client_repository(database):
    return InMemoryClientRepository(database)


# ============================================================================
# SERVICES
# ============================================================================

@pytest.fixture
def room_locks():
    return RoomLockRegistry(timeout=1.0)


@pytest.fixture
def availability_engine(room_repository, reservation_repository):
    return AvailabilityEngine(room_repository, reservation_repository)


@pytest.fixture
def room_service(room_repository, availability_engine):
    return RoomService(room_repository, availability_engine)


@pytest.fixture
def reservation_service(reservation_repository, room_repository, availability_engine, room_locks, clock):
    return ReservationService(reservation_repository, room_repository, availability_engine, room_locks, clock=clock)


@pytest.fixture
def invoice_service(invoice_repository, reservation_repository, room_repository, clock):
    return InvoiceService(invoice_repository, reservation_repository, room_repository, clock=clock)


@pytest.fixture
def occupancy_service(room_repository, reservation_repository, clock):
    return OccupancyReportService(room_repository, reservation_repository, clock=clock)


@pytest.fixture
def client_service(client_repository):
    return ClientService(client_repository)


# ============================================================================
# SAMPLE DATA
# ============================================================================

@pytest.fixture
def add_room(room_repository):
    """Register a room straight in the store"""
    async def _add(room_type: str = "Single", price: str = "100.00", available: bool = True) -> Room:
        return await room_repository.add(
            Room(room_type=room_type, price_per_night=Decimal(price), available=available)
        )
    return _add


@pytest.fixture
def add_reservation(reservation_repository, clock):
    """Store a confirmed reservation directly, bypassing the date preconditions"""
    async def _add(room_id: int, start_days: int, end_days: int, client_id: int = 1,
                   status: ReservationStatus = ReservationStatus.CONFIRMED,
                   is_notified: bool = False) -> Reservation:
        return await reservation_repository.add(Reservation(
            client_id=client_id,
            room_id=room_id,
            start_date=clock.today_at(start_days),
            end_date=clock.today_at(end_days),
            status=status,
            is_notified=is_notified
        ))
    return _add


@pytest.fixture
def make_reservation(clock):
    """Build an unsaved reservation relative to the clock's date"""
    def _make(room_id: int, start_days: int, end_days: int, client_id: int = 1) -> Reservation:
        return Reservation(
            client_id=client_id,
            room_id=room_id,
            start_date=clock.today_at(start_days),
            end_date=clock.today_at(end_days)
        )
    return _make
