#!/usr/bin/env python3

from __future__ import annotations

import asyncio
import unittest

from apps.api.molthotel_api.services.runtime_scheduler import HotelRuntimeScheduler
from apps.api.molthotel_api.settings import HotelSettings


class FakeParty:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.release = asyncio.Event()

    async def primary_tick(self) -> None:
        self.calls.append("primary")
        # A slow tick must not hold back later firings.
        await self.release.wait()

    async def secondary_tick(self) -> None:
        self.calls.append("secondary")
        raise RuntimeError("bad tick")

    async def relationships_tick(self) -> None:
        self.calls.append("relationships")

    async def run_due(self) -> int:
        self.calls.append("timers")
        return 0


class HotelRuntimeSchedulerTests(unittest.IsolatedAsyncioTestCase):
    async def test_loops_fire_independently_and_record_errors(self) -> None:
        party = FakeParty()
        settings = HotelSettings(
            primary_interval_seconds=0.01,
            secondary_interval_seconds=0.01,
            relationships_interval_seconds=0.01,
            timer_poll_seconds=0.01,
        )
        scheduler = HotelRuntimeScheduler(party_lookup=lambda: party, settings_lookup=lambda: settings)

        self.assertTrue(scheduler.start())
        self.assertFalse(scheduler.start())
        with self.assertLogs("molthotel_api.runtime_scheduler", level="ERROR"):
            await asyncio.sleep(0.1)

        status = scheduler.status()
        self.assertTrue(status["running"])
        self.assertGreaterEqual(status["tick_counts"]["primary"], 2)
        self.assertGreaterEqual(status["in_flight"], 2)
        self.assertEqual(status["last_error"], "RuntimeError: bad tick")
        self.assertEqual(set(party.calls), {"primary", "secondary", "relationships", "timers"})

        self.assertTrue(await scheduler.stop())
        self.assertFalse(scheduler.status()["running"])
        self.assertEqual(scheduler.status()["in_flight"], 0)
        self.assertFalse(await scheduler.stop())


if __name__ == "__main__":
    unittest.main()
