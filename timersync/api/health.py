"""Health check and monitoring endpoints"""

from fastapi import APIRouter, Depends

from timersync.api.deps import get_participant
from timersync.services.sync import Participant

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check(participant: Participant = Depends(get_participant)):
    """
    Basic health check endpoint.

    Reports "degraded" while the realtime channel is down: ticking and local
    mutations still work, but other participants will not see them.
    """
    connected = participant.is_connected
    return {
        "status": "healthy" if connected else "degraded",
        "service": "timersync-backend",
        "realtime_connected": connected,
        "tick_loop_running": participant.is_running,
        "role": participant.coordinator.role().value,
    }
