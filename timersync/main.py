import logging
import os

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from timersync import config  # noqa: E402
from timersync.api.base import api_router  # noqa: E402
from timersync.infra.local_cache import LocalFallbackCache  # noqa: E402
from timersync.infra.supabase import get_supabase_client  # noqa: E402
from timersync.infra.supabase.broadcast import SupabaseBroadcastChannel  # noqa: E402
from timersync.infra.supabase.repositories import TimerRepository  # noqa: E402
from timersync.services.sync import Participant  # noqa: E402

logger = logging.getLogger(__name__)


async def build_participant() -> Participant:
    """Wire a participant to Supabase and the on-disk cache"""
    client = await get_supabase_client()
    return Participant(
        store=TimerRepository(client),
        channel=SupabaseBroadcastChannel(client),
        cache=LocalFallbackCache(config.LOCAL_CACHE_PATH),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    participant = await build_participant()
    await participant.start()
    app.state.participant = participant
    logger.info("Timer sync participant started")
    try:
        yield
    finally:
        await participant.stop()
        app.state.participant = None


app = FastAPI(
    title="Timer Sync API",
    description="Shared countdown timers synchronized between participants",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Specify your frontend URL in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Timer Sync API",
        "docs": "/docs",
        "version": "1.0.0"
    }


def run():
    import uvicorn

    uvicorn.run("timersync.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
