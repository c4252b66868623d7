"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from giftbuddy.api.routes import users, events, contributions, stats

api_router = APIRouter()

# Include all route modules
api_router.include_router(users.router)
api_router.include_router(events.router)
api_router.include_router(contributions.router)
api_router.include_router(stats.router)
