"""
API v1 router combining all v1 endpoints.
"""
from fastapi import APIRouter
from proftest.api.v1 import health, tests, user

api_router = APIRouter()

# Include all v1 routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(tests.router, prefix="/tests", tags=["tests"])
api_router.include_router(user.router, prefix="/users", tags=["user"])
