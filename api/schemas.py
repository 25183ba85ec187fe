"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


# ============================================================================
# ROOM SCHEMAS
# ============================================================================

class RegisterRoomRequest(BaseModel):
    """Register room request DTO"""
    room_type: str
    price_per_night: Decimal
    available: bool = True


class RoomResponse(BaseModel):
    """Room response DTO"""
    room_id: int
    room_type: str
    price_per_night: Decimal
    available: bool


# ============================================================================
# RESERVATION SCHEMAS
# ============================================================================

class CreateReservationRequest(BaseModel):
    """Create reservation request DTO"""
    client_id: int
    room_id: int
    start_date: datetime
    end_date: datetime


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: int
    client_id: int
    room_id: int
    start_date: datetime
    end_date: datetime
    status: str
    is_notified: bool


class NotificationResponse(BaseModel):
    """Check-in notification response DTO"""
    messages: List[str]


# ============================================================================
# INVOICE SCHEMAS
# ============================================================================

class InvoiceResponse(BaseModel):
    """Invoice response DTO"""
    invoice_id: int
    reservation_id: int
    issue_date: datetime
    nights_stayed: int
    room_price_per_night: Decimal
    total_amount: Decimal


# ============================================================================
# OCCUPANCY SCHEMAS
# ============================================================================

class OccupancyReportResponse(BaseModel):
    """Occupancy report response DTO"""
    start_date: datetime
    end_date: datetime
    occupancy_rates: Dict[str, float] = Field(default_factory=dict, description="Percentage per room type")


# ============================================================================
# CLIENT SCHEMAS
# ============================================================================

class RegisterClientRequest(BaseModel):
    """Register client request DTO"""
    name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None


class ClientResponse(BaseModel):
    """Client response DTO"""
    client_id: int
    name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
