# app/api/v1/router.py
from fastapi import APIRouter

from app.api.v1.endpoints import auth, articles, videos, plans, subscriptions

api_v1_router = APIRouter()
api_v1_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_v1_router.include_router(articles.router, prefix="/articles", tags=["articles"])
api_v1_router.include_router(videos.router, prefix="/videos", tags=["videos"])
api_v1_router.include_router(plans.router, prefix="/plans", tags=["plans"])
api_v1_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
