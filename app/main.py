from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.core.config import AUTO_CREATE_TABLES, CORS_ORIGINS, APP_TIMEZONE
from app.core.database import engine, Base
from app.core.errors import register_exception_handlers
from app.core.log import setup_logging
from app.api.v1.router import api_v1_router
from app.core.rate_limit import limiter

# Register every model on Base.metadata before create_all
from app.models import user, plan, subscription, article, video, article_view, video_view  # noqa: F401

logger = setup_logging()


# --- Lifespan events (startup / shutdown) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context.

    On startup:
      - Log startup banner.
      - Ensure all database tables exist (unless AUTO_CREATE_TABLES is off).

    On shutdown:
      - Log shutdown banner and dispose of the engine.
    """
    logger.info("-" * 50)
    logger.info("      STARTING UP CONTENT SUBSCRIPTIONS API      ")
    logger.info(f"      Quota day timezone: {APP_TIMEZONE}")
    logger.info("-" * 50)

    if AUTO_CREATE_TABLES:
        async with engine.begin() as conn:
            # Create tables automatically if they do not exist
            await conn.run_sync(Base.metadata.create_all)

    yield

    await engine.dispose()
    logger.info("-" * 50)
    logger.info("      SHUTTING DOWN API      ")
    logger.info("-" * 50)


# --- FastAPI application instance ---
app = FastAPI(
    title="Content Subscriptions API",
    version="1.0.0",
    lifespan=lifespan,
    description="""
    Subscription-gated articles and videos.

    ## Authentication

    Register or log in through `/api/v1/auth` and send the returned token
    in the header: `Authorization: Bearer <token>`

    ## Plans and quotas

    Each plan sets a daily limit of distinct articles and videos a member
    may open. `-1` means unlimited, `0` means no access. Re-opening an item
    already viewed never consumes quota. Listings only require an active
    subscription.

    ## Errors

    Every error body has the shape `{"message": ..., "error": CODE, ...}`,
    e.g. `DAILY_LIMIT_REACHED` carries `limit` and `used`.
    """
)

register_exception_handlers(app)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# --- CORS configuration ---
# Allowed origins for browser-based clients, from CORS_ORIGINS.
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Root health / welcome endpoint ---
@app.get("/")
@limiter.limit("10/minute")
async def root(request: Request, response: Response):
    """
    Simple health/welcome endpoint.

    Can be used by uptime checks or to verify that the API is running.
    """
    return {
        "message": "Welcome to the Content Subscriptions API",
        "status": "OK",
        "docs": "/docs",
        "authentication": "Authorization: Bearer <token>",
    }


# --- Mount versioned API routers ---
# All versioned routes are exposed under /api/v1.
app.include_router(api_v1_router, prefix="/api/v1")
