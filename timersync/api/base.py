from fastapi import APIRouter
from timersync.api import health, timers

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(timers.router)
