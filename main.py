import logging

from fastapi import FastAPI, HTTPException, Depends
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from api.schemas import (
    # Room
    RegisterRoomRequest, RoomResponse,
    # Reservation
    CreateReservationRequest, ReservationResponse, NotificationResponse,
    # Invoice & occupancy
    InvoiceResponse, OccupancyReportResponse,
    # Client
    RegisterClientRequest, ClientResponse
)

from config import settings
from application.availability import AvailabilityEngine
from application.services import (
    RoomService, ReservationService, InvoiceService, OccupancyReportService, ClientService
)
from infrastructure.locks import RoomLockRegistry
from infrastructure.repositories.in_memory_repositories import (
    InMemoryDatabase, InMemoryRoomRepository, InMemoryReservationRepository,
    InMemoryInvoiceRepository, InMemoryClientRepository
)
from domain.entities import Room, Reservation, Client
from domain.exceptions import ReservationSystemError, NotFoundError, ConflictError, LockTimeoutError

# --- Logging configuration ---
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("hotel.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, settings.DEBUG)

app = FastAPI(
    title=settings.APP_NAME,
    description="Room inventory, reservations, invoicing and occupancy reporting",
    version="1.0.0"
)

# Initialize repositories
database = InMemoryDatabase()
room_repo = InMemoryRoomRepository(database)
reservation_repo = InMemoryReservationRepository(database)
invoice_repo = InMemoryInvoiceRepository(database)
client_repo = InMemoryClientRepository(database)
availability_engine = AvailabilityEngine(room_repo, reservation_repo)
room_locks = RoomLockRegistry()
reservation_service = ReservationService(reservation_repo, room_repo, availability_engine, room_locks)
invoice_service = InvoiceService(invoice_repo, reservation_repo, room_repo)

# Dependency injection
def get_room_service() -> RoomService:
    return RoomService(room_repo, availability_engine)

def get_reservation_service() -> ReservationService:
    return reservation_service

def get_invoice_service() -> InvoiceService:
    return invoice_service

def get_occupancy_report_service() -> OccupancyReportService:
    return OccupancyReportService(room_repo, reservation_repo)

def get_client_service() -> ClientService:
    return ClientService(client_repo)


def _to_http_exception(error: ReservationSystemError) -> HTTPException:
    """Map a domain error kind to the HTTP status the caller sees"""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, LockTimeoutError):
        return HTTPException(status_code=503, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))

# ============================================================================
# HEALTH
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

# ============================================================================
# ROOM ENDPOINTS
# ============================================================================

@app.post("/hotel-reservation/rooms", response_model=RoomResponse, status_code=201, tags=["Rooms"])
async def register_room(
    request: RegisterRoomRequest,
    service: RoomService = Depends(get_room_service)
):
    """Register a new room"""
    try:
        room = await service.register_room(Room(**request.model_dump()))
        return _room_to_response(room)
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.get("/hotel-reservation/rooms", response_model=List[RoomResponse], tags=["Rooms"])
async def search_rooms(
    room_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    available: Optional[bool] = None,
    service: RoomService = Depends(get_room_service)
):
    """Search rooms by type, price range and availability flag"""
    try:
        rooms = await service.search_rooms(room_type, min_price, max_price, available)
        return [_room_to_response(r) for r in rooms]
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.get("/hotel-reservation/rooms/availability", response_model=List[RoomResponse], tags=["Rooms"])
async def check_availability(
    start_date: datetime,
    end_date: datetime,
    service: RoomService = Depends(get_room_service)
):
    """List rooms that can be booked for the given range"""
    try:
        rooms = await service.check_availability(start_date, end_date)
        return [_room_to_response(r) for r in rooms]
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.get("/hotel-reservation/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
async def get_room(
    room_id: int,
    service: RoomService = Depends(get_room_service)
):
    """Get room by ID"""
    try:
        return _room_to_response(await service.get_room(room_id))
    except ReservationSystemError as e:
        raise _to_http_exception(e)

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/hotel-reservation/reservations", response_model=ReservationResponse, status_code=201, tags=["Reservations"])
async def reserve_room(
    request: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service)
):
    """Reserve a room for a date range"""
    try:
        reservation = await service.reserve_room(Reservation(**request.model_dump()))
        return _reservation_to_response(reservation)
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.get("/hotel-reservation/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
async def get_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service)
):
    """Get reservation by ID"""
    try:
        return _reservation_to_response(await service.get_reservation(reservation_id))
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.post("/hotel-reservation/reservations/{reservation_id}/cancel", status_code=204, tags=["Reservations"])
async def cancel_reservation(
    reservation_id: int,
    service: ReservationService = Depends(get_reservation_service)
):
    """Cancel a confirmed reservation"""
    try:
        await service.cancel_reservation(reservation_id)
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.get("/hotel-reservation/clients/{client_id}/reservations", response_model=List[ReservationResponse], tags=["Reservations"])
async def get_reservation_history(
    client_id: int,
    service: ReservationService = Depends(get_reservation_service)
):
    """Get the reservation history of a client"""
    try:
        reservations = await service.get_reservation_history(client_id)
        return [_reservation_to_response(r) for r in reservations]
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.post("/hotel-reservation/reservations/check-in-notifications", response_model=NotificationResponse, tags=["Reservations"])
async def notify_check_in(
    service: ReservationService = Depends(get_reservation_service)
):
    """Build check-in notices for stays starting soon"""
    messages = await service.notify_check_in()
    return NotificationResponse(messages=messages)

# ============================================================================
# INVOICE ENDPOINTS
# ============================================================================

@app.post("/hotel-reservation/invoices/{reservation_id}", response_model=InvoiceResponse, status_code=201, tags=["Invoices"])
async def generate_invoice(
    reservation_id: int,
    service: InvoiceService = Depends(get_invoice_service)
):
    """Generate the invoice of a finished stay"""
    try:
        invoice = await service.generate_invoice(reservation_id)
        return InvoiceResponse(**invoice.model_dump())
    except ReservationSystemError as e:
        raise _to_http_exception(e)

@app.get("/hotel-reservation/invoices/{reservation_id}", response_model=InvoiceResponse, tags=["Invoices"])
async def get_invoice(
    reservation_id: int,
    service: InvoiceService = Depends(get_invoice_service)
):
    """Get the invoice issued for a reservation"""
    try:
        invoice = await service.get_invoice(reservation_id)
        return InvoiceResponse(**invoice.model_dump())
    except ReservationSystemError as e:
        raise _to_http_exception(e)

# ============================================================================
# OCCUPANCY ENDPOINTS
# ============================================================================

@app.get("/hotel-reservation/occupancy-report", response_model=OccupancyReportResponse, tags=["Reports"])
async def generate_occupancy_report(
    start_date: datetime,
    end_date: datetime,
    service: OccupancyReportService = Depends(get_occupancy_report_service)
):
    """Occupancy rate per room type over a future date range"""
    try:
        rates = await service.generate_occupancy_report(start_date, end_date)
        return OccupancyReportResponse(start_date=start_date, end_date=end_date, occupancy_rates=rates)
    except ReservationSystemError as e:
        raise _to_http_exception(e)

# ============================================================================
# CLIENT ENDPOINTS
# ============================================================================

@app.post("/hotel-reservation/clients", response_model=ClientResponse, status_code=201, tags=["Clients"])
async def register_client(
    request: RegisterClientRequest,
    service: ClientService = Depends(get_client_service)
):
    """Register a new client"""
    try:
        client = await service.register_client(Client(**request.model_dump()))
        return ClientResponse(**client.model_dump())
    except ReservationSystemError as e:
        raise _to_http_exception(e)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _room_to_response(room: Room) -> RoomResponse:
    """Convert Room entity to RoomResponse"""
    return RoomResponse(
        room_id=room.room_id,
        room_type=room.room_type,
        price_per_night=room.price_per_night,
        available=room.available
    )

def _reservation_to_response(reservation: Reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        client_id=reservation.client_id,
        room_id=reservation.room_id,
        start_date=reservation.start_date,
        end_date=reservation.end_date,
        status=reservation.status.value,
        is_notified=reservation.is_notified
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
