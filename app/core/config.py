"""
Application configuration.

All settings are read once from the environment (and an optional .env file)
and exposed as module-level constants.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# ============================================
# DATABASE CONFIGURATION
# ============================================
DATABASE_URL = os.getenv("DATABASE_URL")

# Create tables on startup (disable when migrations manage the schema)
AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "true").lower() in ("1", "true", "yes")


# ============================================
# AUTHENTICATION (JWT)
# ============================================
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRY = int(os.getenv("JWT_EXPIRY", "3600"))  # seconds


# ============================================
# QUOTAS
# ============================================
# Daily quotas roll over at midnight in this timezone
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")


# ============================================
# REDIS CONFIGURATION (Rate Limiting storage)
# ============================================
REDIS_URL = os.getenv("REDIS_URL", "memory://")


# ============================================
# HTTP
# ============================================
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Page size for article and video listings
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "10"))


# ============================================
# LOGGING
# ============================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ============================================
# RATE LIMITING
# ============================================
# Applied to every route by the SlowAPI middleware
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "1000/hour")
