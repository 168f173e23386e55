# API module exports
from timersync.api import health, timers
from timersync.api.base import api_router

__all__ = ["health", "timers", "api_router"]
