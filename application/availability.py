"""Availability Engine - decides whether rooms are free for a date range.

The overlap predicate evaluated against confirmed reservations is the only
source of truth for booking conflicts. A room's cached ``available`` flag
is consulted as a fast path: a room flagged unavailable that holds no
confirmed reservation at all is blocked and never bookable, while a room
flagged unavailable because of its own bookings is re-derived from the
predicate, so back-to-back stays remain bookable.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from domain.entities import Room
from domain.repositories import RoomRepository, ReservationRepository
from domain.time_utils import to_utc

logger = logging.getLogger(__name__)

BEGINNING_OF_TIME = datetime.min.replace(tzinfo=timezone.utc)
END_OF_TIME = datetime.max.replace(tzinfo=timezone.utc)


class AvailabilityEngine:
    """Answers availability questions for the reservation lifecycle and room search"""

    def __init__(self, room_repo: RoomRepository, reservation_repo: ReservationRepository):
        self.room_repo = room_repo
        self.reservation_repo = reservation_repo

    async def is_room_available(self, room_id: int, start: datetime, end: datetime) -> bool:
        """Check whether a room exists, is not blocked, and has no confirmed overlap"""
        start, end = to_utc(start), to_utc(end)

        room = await self.room_repo.find_by_id(room_id)
        if room is None:
            logger.debug("Room %s does not exist", room_id)
            return False

        if not room.available and await self._is_blocked(room):
            logger.debug("Room %s is blocked", room_id)
            return False

        overlapping = await self.reservation_repo.has_overlapping_confirmed(room_id, start, end)
        logger.debug("Room %s overlap check for %s - %s: %s", room_id, start, end, overlapping)
        return not overlapping

    async def has_confirmed_reservations(
        self,
        room_id: int,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[int] = None
    ) -> bool:
        """Check for confirmed reservations of the room overlapping [start, end)"""
        return await self.reservation_repo.has_overlapping_confirmed(
            room_id, to_utc(start), to_utc(end), exclude_reservation_id
        )

    async def has_pending_stays(
        self,
        room_id: int,
        now: datetime,
        exclude_reservation_id: Optional[int] = None
    ) -> bool:
        """Check for confirmed reservations of the room that have not ended yet"""
        return await self.reservation_repo.has_overlapping_confirmed(
            room_id, to_utc(now), END_OF_TIME, exclude_reservation_id
        )

    async def find_available_rooms(self, start: datetime, end: datetime) -> List[Room]:
        """Find every room that ``is_room_available`` accepts for the range"""
        return await self.room_repo.find_available_in_range(to_utc(start), to_utc(end))

    async def _is_blocked(self, room: Room) -> bool:
        return not await self.reservation_repo.has_overlapping_confirmed(
            room.room_id, BEGINNING_OF_TIME, END_OF_TIME
        )
