import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mindbridge.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Session tokens are issued by the auth service and only verified here
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# Frontend base URL for redirects
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Google Calendar OAuth Configuration
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", f"{FRONTEND_URL}/auth/google-calendar")
GOOGLE_API_TIMEOUT = float(os.getenv("GOOGLE_API_TIMEOUT", "10"))

# Working hours template used to generate bookable slots (hours, end exclusive)
WORKING_HOURS_START = int(os.getenv("WORKING_HOURS_START", "9"))
WORKING_HOURS_END = int(os.getenv("WORKING_HOURS_END", "17"))
WORKING_TIMEZONE = os.getenv("WORKING_TIMEZONE", "UTC")
SLOT_DURATION_MINUTES = 60

# Availability cache
SLOTS_CACHE_TTL = int(os.getenv("SLOTS_CACHE_TTL", "60"))  # seconds
CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory").lower()  # memory or redis
REDIS_URL = os.getenv("REDIS_URL")

if not 0 <= WORKING_HOURS_START < WORKING_HOURS_END <= 24:
    raise ValueError(
        f"Invalid working hours: {WORKING_HOURS_START}-{WORKING_HOURS_END} (expected 0 <= start < end <= 24)"
    )
