"""Background driver for the party scheduler's periodic ticks."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import Awaitable, Callable
import uuid

from packages.molthotel_core.sim.scheduler import PartyScheduler

from ..settings import HotelSettings, load_settings
from .hotel_context import get_party_scheduler


logger = logging.getLogger("molthotel_api.runtime_scheduler")

TickFn = Callable[[], Awaitable[object]]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class HotelRuntimeScheduler:
    """Fires each tick on its own fixed interval.

    Every firing runs as its own task, so a tick stuck on a slow chat backend
    does not delay the next firing of any loop.
    """

    def __init__(
        self,
        *,
        party_lookup: Callable[[], PartyScheduler] = get_party_scheduler,
        settings_lookup: Callable[[], HotelSettings] = load_settings,
    ) -> None:
        self._party_lookup = party_lookup
        self._settings_lookup = settings_lookup
        self._loops: list[asyncio.Task] = []
        self._in_flight: set[asyncio.Task] = set()
        self._tick_counts: dict[str, int] = {}
        self._last_tick_at: dict[str, str] = {}
        self._last_error: str | None = None
        self._started_at: str | None = None
        self._scheduler_instance_id = f"scheduler-{uuid.uuid4().hex[:12]}"

    def running(self) -> bool:
        return any(not task.done() for task in self._loops)

    def start(self) -> bool:
        if self.running():
            return False
        settings = self._settings_lookup()
        loop = asyncio.get_running_loop()
        plan: list[tuple[str, float, Callable[[PartyScheduler], TickFn]]] = [
            ("primary", settings.primary_interval_seconds, lambda party: party.primary_tick),
            ("secondary", settings.secondary_interval_seconds, lambda party: party.secondary_tick),
            ("relationships", settings.relationships_interval_seconds, lambda party: party.relationships_tick),
            ("timers", settings.timer_poll_seconds, lambda party: party.run_due),
        ]
        self._loops = [
            loop.create_task(self._run_every(name, interval, pick), name=f"molthotel-{name}-loop")
            for name, interval, pick in plan
        ]
        self._started_at = _utc_now_iso()
        logger.info("[SCHEDULER] Party scheduler started (%s)", self._scheduler_instance_id)
        return True

    async def stop(self) -> bool:
        if not self._loops:
            return False
        tasks = self._loops + list(self._in_flight)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loops = []
        self._in_flight.clear()
        logger.info("[SCHEDULER] Party scheduler stopped")
        return True

    def status(self) -> dict[str, object]:
        return {
            "running": self.running(),
            "instance_id": self._scheduler_instance_id,
            "started_at": self._started_at,
            "tick_counts": dict(self._tick_counts),
            "last_tick_at": dict(self._last_tick_at),
            "in_flight": len(self._in_flight),
            "last_error": self._last_error,
        }

    async def _run_every(self, name: str, interval: float, pick: Callable[[PartyScheduler], TickFn]) -> None:
        while True:
            await asyncio.sleep(interval)
            task = asyncio.create_task(self._run_tick(name, pick(self._party_lookup())))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

    async def _run_tick(self, name: str, tick: TickFn) -> None:
        self._last_tick_at[name] = _utc_now_iso()
        self._tick_counts[name] = self._tick_counts.get(name, 0) + 1
        try:
            await tick()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._last_error = f"{exc.__class__.__name__}: {exc}"
            logger.exception("[SCHEDULER] %s tick failed: %s", name, exc)


_SCHEDULER = HotelRuntimeScheduler()


def start_hotel_runtime_scheduler() -> bool:
    return _SCHEDULER.start()


async def stop_hotel_runtime_scheduler() -> bool:
    return await _SCHEDULER.stop()


def hotel_runtime_scheduler_status() -> dict[str, object]:
    return _SCHEDULER.status()
