"""Environment-driven settings for the Molt Hotel API."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os


def _truthy_env(name: str, default: bool = False) -> bool:
    raw = str(os.environ.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _float_env(name: str, default: float, *, minimum: float) -> float:
    raw = str(os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return max(minimum, float(raw))
    except ValueError:
        return default


def _int_env(name: str, default: int, *, minimum: int) -> int:
    raw = str(os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class HotelSettings:
    primary_interval_seconds: float = 10.0
    secondary_interval_seconds: float = 15.0
    relationships_interval_seconds: float = 15.0
    timer_poll_seconds: float = 0.25
    autostart_scheduler: bool = True
    simulated_agents: int = 40
    simulated_spawn_delay_seconds: float = 2.0
    cors_origins: tuple[str, ...] = ("*",)
    random_seed: int | None = None


@lru_cache(maxsize=1)
def load_settings() -> HotelSettings:
    seed_raw = str(os.environ.get("MOLTHOTEL_RANDOM_SEED") or "").strip()
    try:
        seed = int(seed_raw) if seed_raw else None
    except ValueError:
        seed = None
    origins = tuple(
        origin.strip()
        for origin in str(os.environ.get("MOLTHOTEL_CORS_ORIGINS") or "*").split(",")
        if origin.strip()
    )
    return HotelSettings(
        primary_interval_seconds=_float_env("MOLTHOTEL_TICK_PRIMARY_SECONDS", 10.0, minimum=0.1),
        secondary_interval_seconds=_float_env("MOLTHOTEL_TICK_SECONDARY_SECONDS", 15.0, minimum=0.1),
        relationships_interval_seconds=_float_env("MOLTHOTEL_TICK_RELATIONSHIPS_SECONDS", 15.0, minimum=0.1),
        autostart_scheduler=_truthy_env("MOLTHOTEL_AUTOSTART_SCHEDULER", True),
        simulated_agents=_int_env("MOLTHOTEL_SIMULATED_AGENTS", 40, minimum=0),
        simulated_spawn_delay_seconds=_float_env("MOLTHOTEL_SIMULATED_SPAWN_DELAY_SECONDS", 2.0, minimum=0.0),
        cors_origins=origins or ("*",),
        random_seed=seed,
    )


def reset_settings_cache_for_tests() -> None:
    load_settings.cache_clear()
