#!/usr/bin/env python3
"""Run the party scheduler headless on a virtual clock and report what happened."""

from __future__ import annotations

import argparse
import asyncio
from collections import Counter
import json
import logging
import random
import sys
import time
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate a Molt Hotel party without a network")
    parser.add_argument("--agents", type=int, default=40, help="Number of simulated guests")
    parser.add_argument("--minutes", type=float, default=10.0, help="Virtual minutes to simulate")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    parser.add_argument(
        "--use-llm",
        action="store_true",
        help="Call the configured chat backend instead of always using fallback lines",
    )
    parser.add_argument(
        "--output",
        default="",
        help="Optional JSON output path",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Keep hotel logs enabled during the run",
    )
    return parser.parse_args()


def _offline_provider(**_: Any):
    from packages.molthotel_core.llm.providers import ProviderUnavailableError

    raise ProviderUnavailableError("Offline simulation", error_code="offline")


async def _simulate(args: argparse.Namespace) -> dict[str, Any]:
    from apps.api.molthotel_api.services.simulated_agents import spawn_simulated_agents
    from packages.molthotel_core.llm.chat import ChatGenerator
    from packages.molthotel_core.sim.clock import ManualClock
    from packages.molthotel_core.sim.events import RecordingEventSink
    from packages.molthotel_core.sim.hotel import HotelWorld
    from packages.molthotel_core.sim.scheduler import (
        PRIMARY_INTERVAL_SECONDS,
        RELATIONSHIPS_INTERVAL_SECONDS,
        SECONDARY_INTERVAL_SECONDS,
        PartyScheduler,
    )

    rng = random.Random(args.seed)
    clock = ManualClock()
    sink = RecordingEventSink()
    chat = ChatGenerator(rng=rng, provider_invoker=None if args.use_llm else _offline_provider)
    world = HotelWorld(sink=sink, clock=clock, rng=rng, chat=chat)
    party = PartyScheduler(world)
    await spawn_simulated_agents(world, args.agents)

    total_seconds = int(max(0.0, args.minutes) * 60)
    for second in range(1, total_seconds + 1):
        clock.advance(1.0)
        await party.run_due()
        if second % int(PRIMARY_INTERVAL_SECONDS) == 0:
            await party.primary_tick()
        if second % int(SECONDARY_INTERVAL_SECONDS) == 0:
            await party.secondary_tick()
        if second % int(RELATIONSHIPS_INTERVAL_SECONDS) == 0:
            await party.relationships_tick()

    event_counts = Counter(str(event.get("type")) for event, _ in sink.broadcasts)
    tier_counts = Counter(rel.tier for rel in world.relationships)
    return {
        "agents": len(world.registry),
        "virtual_seconds": total_seconds,
        "event_counts": dict(sorted(event_counts.items())),
        "relationship_tiers": dict(sorted(tier_counts.items())),
        "relationships": len(world.relationships),
        "pending_replies": len(world.pending_replies),
        "pending_timers": len(world.timers),
        "timestamp_utc_epoch": time.time(),
    }


def main() -> None:
    args = parse_args()
    if args.agents < 2:
        raise SystemExit("--agents must be >= 2")
    if not args.verbose:
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger("molthotel_api").setLevel(logging.WARNING)
        logging.getLogger("molthotel_core").setLevel(logging.ERROR)

    output = asyncio.run(_simulate(args))
    if args.output:
        output_path = Path(args.output).resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(output, indent=2) + "\n", encoding="utf-8")
        print(f"Wrote party report: {output_path}")
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
