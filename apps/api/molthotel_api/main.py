"""FastAPI entrypoint for Molt Hotel."""

from __future__ import annotations

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers.hotel import router as hotel_router
from .routers.hotel import ws_router as hotel_ws_router
from .services.hotel_context import get_world
from .services.runtime_scheduler import (
    start_hotel_runtime_scheduler,
    stop_hotel_runtime_scheduler,
)
from .services.simulated_agents import spawn_simulated_agents
from .settings import load_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("molthotel_api")

app = FastAPI(title="Molt Hotel API", version="0.1.0")

_cors_origins = list(load_settings().cors_origins)
_cors_allow_credentials = "*" not in _cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(hotel_router)
app.include_router(hotel_ws_router)


@app.on_event("startup")
async def startup() -> None:
    settings = load_settings()
    if not settings.autostart_scheduler:
        logger.info("[STARTUP] Party scheduler autostart disabled")
        return
    start_hotel_runtime_scheduler()
    if settings.simulated_agents > 0:
        world = get_world()
        count = settings.simulated_agents
        world.timers.schedule(
            settings.simulated_spawn_delay_seconds,
            lambda: spawn_simulated_agents(world, count),
            label="spawn-simulated-agents",
        )
        logger.info(
            "[STARTUP] %d simulated agents will join in %.1fs",
            count,
            settings.simulated_spawn_delay_seconds,
        )


@app.on_event("shutdown")
async def shutdown() -> None:
    await stop_hotel_runtime_scheduler()


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
