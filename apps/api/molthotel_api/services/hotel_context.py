"""Process-wide hotel instance shared by the router and the runtime loop."""

from __future__ import annotations

import logging
import random

from packages.molthotel_core.llm.chat import ChatGenerator
from packages.molthotel_core.sim.clock import Clock
from packages.molthotel_core.sim.hotel import HotelWorld
from packages.molthotel_core.sim.scheduler import PartyScheduler

from ..settings import load_settings
from .connection_hub import ConnectionHub


logger = logging.getLogger("molthotel_api.hotel_context")


def _chat_log_sink(entry: dict[str, object]) -> None:
    logger.debug(
        "[LLM] %s %s route_model=%s success=%s latency_ms=%s error=%s",
        entry.get("task_name"),
        entry.get("speaker_id"),
        entry.get("model_name"),
        entry.get("success"),
        entry.get("latency_ms"),
        entry.get("error_code"),
    )


def _build(
    *,
    chat: ChatGenerator | None = None,
    clock: Clock | None = None,
    rng: random.Random | None = None,
) -> tuple[ConnectionHub, HotelWorld, PartyScheduler]:
    rng = rng or random.Random(load_settings().random_seed)
    hub = ConnectionHub()
    world = HotelWorld(
        sink=hub,
        clock=clock,
        rng=rng,
        chat=chat or ChatGenerator(rng=rng, log_sink=_chat_log_sink),
    )
    return hub, world, PartyScheduler(world)


_HUB, _WORLD, _PARTY = _build()


def get_hub() -> ConnectionHub:
    return _HUB


def get_world() -> HotelWorld:
    return _WORLD


def get_party_scheduler() -> PartyScheduler:
    return _PARTY


def reset_hotel_for_tests(
    *,
    chat: ChatGenerator | None = None,
    clock: Clock | None = None,
    rng: random.Random | None = None,
) -> HotelWorld:
    global _HUB, _WORLD, _PARTY
    _HUB, _WORLD, _PARTY = _build(chat=chat, clock=clock, rng=rng)
    return _WORLD
