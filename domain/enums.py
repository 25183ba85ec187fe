"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"
