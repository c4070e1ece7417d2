"""
Application settings and configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # Application
    APP_NAME = os.getenv("APP_NAME", "Fleet Booking API")
    VERSION = "1.0.0"
    DEBUG = os.getenv("DEBUG", "True") == "True"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Caller identity (tokens are decoded when present, never required)
    SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 24 hours

    # CORS
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]
    CORS_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

    # Bookings
    BOOKING_NUMBER_PREFIX = "BK-"

    # Vehicles
    COMPLIANCE_WINDOW_DAYS = int(os.getenv("COMPLIANCE_WINDOW_DAYS", "30"))

    # Pagination
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100

    # Timestamps are stored as naive UTC and rendered in this zone
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")

settings = Settings()
