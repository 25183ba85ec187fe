import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Hotel Reservation System")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

    # Booking consistency
    ROOM_LOCK_TIMEOUT_SECONDS: float = float(os.getenv("ROOM_LOCK_TIMEOUT_SECONDS", "5.0"))

    # Check-in notices cover [today, today + CHECK_IN_NOTICE_DAYS]
    CHECK_IN_NOTICE_DAYS: int = int(os.getenv("CHECK_IN_NOTICE_DAYS", "2"))
    NOTIFICATION_DATE_FORMAT: str = os.getenv("NOTIFICATION_DATE_FORMAT", "%d/%m/%Y")


settings = Settings()
