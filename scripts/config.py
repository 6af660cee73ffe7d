"""
Settings shared by the maintenance scripts.

Values come from the environment (or .env), like the API's own settings.
"""
import os
import sys
from dotenv import load_dotenv

load_dotenv()


# Where quota_walkthrough sends its requests
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
API_TIMEOUT = int(os.getenv("API_TIMEOUT", "30"))

# Articles created by quota_walkthrough (one more than the Free plan allows)
WALKTHROUGH_ARTICLES = int(os.getenv("WALKTHROUGH_ARTICLES", "4"))
WALKTHROUGH_PLAN_SLUG = os.getenv("WALKTHROUGH_PLAN_SLUG", "free")


def require_database_url() -> str:
    """
    Exit with a readable message when DATABASE_URL is missing.

    Call before importing app.core.database, which raises on a missing URL.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("❌ DATABASE_URL not configured in .env")
        sys.exit(1)
    return database_url
