"""Application Services - Business use cases"""
import asyncio
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from domain.repositories import RoomRepository, ReservationRepository, InvoiceRepository, ClientRepository
from domain.entities import Room, Reservation, Invoice, Client
from domain.exceptions import (
    NullInputError, InvalidArgumentError, InvalidRangeError, PastDateError,
    ConflictError, NotFoundError, InvalidStateError, NoInventoryError
)
from domain.time_utils import Clock, utc_now, to_utc, utc_date, utc_today, format_short_date
from application.availability import AvailabilityEngine
from config import settings
from infrastructure.locks import RoomLockRegistry, acquire_within

logger = logging.getLogger(__name__)


class RoomService:
    """Service for Room registration and search use cases"""

    def __init__(self, repository: RoomRepository, availability: AvailabilityEngine):
        self.repository = repository
        self.availability = availability

    async def register_room(self, room: Optional[Room]) -> Room:
        """Register a new room"""
        if room is None:
            raise NullInputError("The room cannot be null.")

        room.validate_for_registration()

        registered = await self.repository.add(room)
        logger.info("Registered room %s (%s, %s per night)",
                    registered.room_id, registered.room_type, registered.price_per_night)
        return registered

    async def get_room(self, room_id: int) -> Room:
        """Get room by ID"""
        room = await self.repository.find_by_id(room_id)
        if room is None:
            raise NotFoundError(f"Room with ID {room_id} not found.")
        return room

    async def search_rooms(
        self,
        room_type: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        available: Optional[bool] = None
    ) -> List[Room]:
        """Search rooms by type, price range and cached availability"""
        if (min_price is not None and min_price < 0) or \
                (max_price is not None and max_price < 0) or \
                (min_price is not None and max_price is not None and min_price > max_price):
            raise InvalidArgumentError("Invalid price range provided.")

        return await self.repository.search(room_type, min_price, max_price, available)

    async def check_availability(self, start: datetime, end: datetime) -> List[Room]:
        """List rooms that can be booked for [start, end)"""
        if to_utc(start) >= to_utc(end):
            raise InvalidRangeError("Start date must be before end date.")

        return await self.availability.find_available_rooms(start, end)


class ReservationService:
    """Service for the reservation lifecycle.

    Reserve and cancel run under the room's lock, so the availability check,
    the reservation write and the room flag update form one sequence that
    never interleaves with another reserve or cancel on the same room.
    Check-in notices are written under the same lock, so they never
    overwrite a cancel.
    """

    def __init__(self,
                 repository: ReservationRepository,
                 room_repo: RoomRepository,
                 availability: Optional[AvailabilityEngine] = None,
                 locks: Optional[RoomLockRegistry] = None,
                 clock: Clock = utc_now,
                 notice_days: int = settings.CHECK_IN_NOTICE_DAYS,
                 date_format: str = settings.NOTIFICATION_DATE_FORMAT):
        self.repository = repository
        self.room_repo = room_repo
        self.availability = availability or AvailabilityEngine(room_repo, repository)
        self.locks = locks or RoomLockRegistry()
        self.clock = clock
        self.notice_days = notice_days
        self.date_format = date_format
        self._notify_lock = asyncio.Lock()

    async def reserve_room(self, reservation: Optional[Reservation]) -> Reservation:
        """Book a room for the reservation's stay"""
        if reservation is None:
            raise NullInputError("The reservation cannot be null.")

        start, end = to_utc(reservation.start_date), to_utc(reservation.end_date)
        if start >= end:
            raise InvalidRangeError("The start date must be earlier than the end date.")

        if utc_date(start) < utc_today(self.clock):
            raise PastDateError("The start date cannot be in the past.")

        pending = reservation.model_copy()
        pending.confirm()

        async with self.locks.hold(pending.room_id):
            if not await self.availability.is_room_available(pending.room_id, start, end):
                logger.warning("Rejected reservation of room %s for %s - %s: not available",
                               pending.room_id, start, end)
                raise ConflictError("The room is not available for the selected dates.")

            # The reservation is recorded before the flag flips, so a failure
            # in between leaves the room showing available.
            registered = await self.repository.add(pending)
            await self.room_repo.update_availability(registered.room_id, False)

        logger.info("Reservation %s confirmed: client %s, room %s, %s - %s",
                    registered.reservation_id, registered.client_id, registered.room_id,
                    registered.start_date, registered.end_date)
        return registered

    async def cancel_reservation(self, reservation_id: int) -> None:
        """Cancel a confirmed reservation that has not started"""
        reservation = await self.repository.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation not found.")

        async with self.locks.hold(reservation.room_id):
            # Re-read under the lock; a concurrent cancel may have won.
            reservation = await self.repository.find_by_id(reservation_id)

            if not reservation.is_confirmed:
                raise InvalidStateError("Only confirmed reservations can be canceled.")

            if utc_date(reservation.start_date) < utc_today(self.clock):
                raise InvalidStateError("Cannot cancel a reservation that has already started or passed.")

            reservation.cancel()
            await self.repository.update(reservation)

            still_held = await self.availability.has_confirmed_reservations(
                reservation.room_id,
                reservation.start_date,
                reservation.end_date,
                exclude_reservation_id=reservation.reservation_id
            ) or await self.availability.has_pending_stays(
                reservation.room_id,
                self.clock(),
                exclude_reservation_id=reservation.reservation_id
            )

            if not still_held:
                await self.room_repo.update_availability(reservation.room_id, True)

        logger.info("Reservation %s canceled, room %s %s", reservation_id, reservation.room_id,
                    "still held" if still_held else "released")

    async def get_reservation(self, reservation_id: int) -> Reservation:
        """Get reservation by ID"""
        reservation = await self.repository.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation not found.")
        return reservation

    async def get_reservation_history(self, client_id: int) -> List[Reservation]:
        """Get every reservation a client has made"""
        if client_id <= 0:
            raise InvalidArgumentError("User ID must be greater than zero.")

        reservations = await self.repository.find_by_client_id(client_id)
        if not reservations:
            raise NotFoundError(f"No reservations found for user ID {client_id}.")
        return reservations

    async def notify_check_in(self) -> List[str]:
        """Build check-in notices for confirmed stays starting within the notice window"""
        window_start = utc_today(self.clock)
        window_end = window_start + timedelta(days=self.notice_days)
        window = (f"{format_short_date(window_start, self.date_format)} to "
                  f"{format_short_date(window_end, self.date_format)}")

        async with acquire_within(self._notify_lock, self.locks.timeout, resource="Check-in notification"):
            upcoming = await self.repository.find_by_start_date_range(window_start, window_end)
            pending = [r for r in upcoming if not r.is_notified]
            already_notified = [r for r in upcoming if r.is_notified]

            notifications = []
            for candidate in pending:
                async with self.locks.hold(candidate.room_id):
                    # Re-read under the room lock; a cancel may have landed since the query.
                    reservation = await self.repository.find_by_id(candidate.reservation_id)
                    if reservation is None or not reservation.is_confirmed or reservation.is_notified:
                        continue

                    notifications.append(
                        f"Notification: Dear Client {reservation.client_id}, your reservation "
                        f"(ID: {reservation.reservation_id}) check-in is on "
                        f"{format_short_date(reservation.start_date, self.date_format)}. "
                        f"We look forward to welcoming you!"
                    )
                    reservation.mark_notified()
                    await self.repository.update(reservation)

        if notifications:
            logger.info("Sent %d check-in notifications for %s", len(notifications), window)
            return notifications

        if already_notified:
            ids = ", ".join(str(r.reservation_id) for r in already_notified)
            return [
                f"All reservations in the date range ({window}) have already been notified. "
                f"Reservation IDs: {ids}"
            ]

        return [f"No confirmed reservations found in the date range ({window})."]


class InvoiceService:
    """Service for post-stay invoicing"""

    def __init__(self,
                 repository: InvoiceRepository,
                 reservation_repo: ReservationRepository,
                 room_repo: RoomRepository,
                 clock: Clock = utc_now):
        self.repository = repository
        self.reservation_repo = reservation_repo
        self.room_repo = room_repo
        self.clock = clock
        self._lock = asyncio.Lock()

    async def generate_invoice(self, reservation_id: int) -> Invoice:
        """Issue the invoice of a finished stay"""
        reservation = await self.reservation_repo.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation not found.")

        if not reservation.is_confirmed:
            raise InvalidStateError("Only confirmed reservations can generate invoices.")

        now = to_utc(self.clock())
        if to_utc(reservation.end_date) > now:
            raise InvalidStateError("Invoice can only be generated after check-out.")

        nights_stayed = reservation.get_nights()
        if nights_stayed <= 0:
            raise InvalidStateError("Nights stayed must be greater than zero.")

        room = await self.room_repo.find_by_id(reservation.room_id)
        if room is None:
            raise NotFoundError(f"Room with ID {reservation.room_id} not found.")

        if room.price_per_night <= 0:
            raise InvalidStateError("Price per night must be greater than zero.")

        async with acquire_within(self._lock, settings.ROOM_LOCK_TIMEOUT_SECONDS, resource="Invoicing"):
            if await self.repository.find_by_reservation_id(reservation_id) is not None:
                raise InvalidStateError("An invoice has already been generated for this reservation.")

            invoice = await self.repository.add(Invoice.create(
                reservation_id=reservation_id,
                nights_stayed=nights_stayed,
                room_price_per_night=room.price_per_night,
                issue_date=now
            ))

        logger.info("Invoice %s issued for reservation %s: %s nights x %s = %s",
                    invoice.invoice_id, reservation_id, invoice.nights_stayed,
                    invoice.room_price_per_night, invoice.total_amount)
        return invoice

    async def get_invoice(self, reservation_id: int) -> Invoice:
        """Get the invoice issued for a reservation"""
        invoice = await self.repository.find_by_reservation_id(reservation_id)
        if invoice is None:
            raise NotFoundError(f"No invoice found for reservation {reservation_id}.")
        return invoice


class OccupancyReportService:
    """Service for occupancy statistics"""

    def __init__(self,
                 room_repo: RoomRepository,
                 reservation_repo: ReservationRepository,
                 clock: Clock = utc_now):
        self.room_repo = room_repo
        self.reservation_repo = reservation_repo
        self.clock = clock

    async def generate_occupancy_report(self, start: datetime, end: datetime) -> Dict[str, float]:
        """Percentage of rooms of each type booked at some point in [start, end)"""
        start, end = to_utc(start), to_utc(end)
        if utc_date(start) <= utc_today(self.clock):
            raise InvalidRangeError("Start date must be in the future.")

        if start >= end:
            raise InvalidRangeError("Start date must be before end date.")

        rooms = await self.room_repo.find_all()
        if not rooms:
            raise NoInventoryError("No rooms found in the system.")

        room_types = {room.room_id: room.room_type for room in rooms}
        occupied: Dict[str, set] = {}
        for reservation in await self.reservation_repo.find_overlapping(start, end):
            room_type = room_types.get(reservation.room_id)
            if room_type is not None:
                occupied.setdefault(room_type, set()).add(reservation.room_id)

        report = {}
        for room_type, room_ids in occupied.items():
            total_rooms = await self.room_repo.count(room_type)
            if total_rooms > 0:
                report[room_type] = round(len(room_ids) / total_rooms * 100, 2)
        return report


class ClientService:
    """Service for client registration"""

    def __init__(self, repository: ClientRepository):
        self.repository = repository

    async def register_client(self, client: Optional[Client]) -> Client:
        """Register a new client"""
        if client is None:
            raise NullInputError("The user cannot be null.")

        client.validate_for_registration()

        registered = await self.repository.add(client)
        logger.info("Registered client %s", registered.client_id)
        return registered

    async def get_client(self, client_id: int) -> Client:
        """Get client by ID"""
        client = await self.repository.find_by_id(client_id)
        if client is None:
            raise NotFoundError(f"Client with ID {client_id} not found.")
        return client
