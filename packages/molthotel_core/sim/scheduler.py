"""Autonomous party behaviour: conversation, wandering and relationship ticks.

`PartyScheduler` exposes one coroutine per periodic process plus `run_due`
for delayed work. It holds no timers of its own; a driver (the API runtime
loop, or a test advancing a `ManualClock`) decides when each tick fires.
"""

from __future__ import annotations

import logging

from ..social.interactions import actions_for_tier
from ..social.relationships import DATING, FLIRTING, LOVERS
from ..world.grid import facing_x_first, step_toward
from . import events
from .hotel import HotelWorld

logger = logging.getLogger("molthotel_core.sim.scheduler")

PRIMARY_INTERVAL_SECONDS = 10.0
SECONDARY_INTERVAL_SECONDS = 15.0
RELATIONSHIPS_INTERVAL_SECONDS = 15.0

COOLDOWN_MIN_SECONDS = 20.0
COOLDOWN_MAX_SECONDS = 45.0
CONVERSATION_RADIUS = 6
SEEK_STEPS = 3
APPROACH_STEPS = 3
KNOWN_PARTNER_PREFERENCE = 0.7
REPLY_DELAY_MIN_SECONDS = 5.0
REPLY_DELAY_MAX_SECONDS = 13.0

REPLY_APPROACH_STEPS = 2
REPLY_CONTINUE_CHANCE = 0.35
REPLY_BACK_DELAY_MIN_SECONDS = 8.0
REPLY_BACK_DELAY_MAX_SECONDS = 18.0

DANCE_BUCKET = 0.2
WANDER_BUCKET = 0.5
SPONTANEOUS_BUCKET = 0.7
DANCE_MIN_MS = 5000
DANCE_MAX_MS = 15000
BORED_RADIUS = 3
WANDER_STEPS = 5
SPONTANEOUS_RADIUS = 4

OPENING_INTERACTION_CHANCES = {LOVERS: 0.12, DATING: 0.08, FLIRTING: 0.05}
OPENING_INTERACTION_DEFAULT = 0.02
REPLY_INTERACTION_CHANCES = {LOVERS: 0.15, DATING: 0.10, FLIRTING: 0.08}
REPLY_INTERACTION_DEFAULT = 0.03


class PartyScheduler:
    def __init__(self, world: HotelWorld) -> None:
        self.world = world

    async def run_due(self) -> int:
        """Run delayed work whose due time has passed; returns how many ran."""
        ran = 0
        for label, work in self.world.timers.pop_due():
            try:
                await work()
            except Exception:
                logger.exception("[SCHEDULER] Delayed task failed: %s", label)
            ran += 1
        return ran

    async def primary_tick(self) -> None:
        world = self.world
        await self.process_reply()

        agents = world.registry.agents()
        if len(agents) < 2:
            return

        initiator = world.rng.choice(agents)
        now = world.now()
        if initiator.chat_cooldown_until and now < initiator.chat_cooldown_until:
            return
        initiator.chat_cooldown_until = now + world.rng.uniform(COOLDOWN_MIN_SECONDS, COOLDOWN_MAX_SECONDS)

        nearby = world.registry.find_nearby(initiator.agent_id, CONVERSATION_RADIUS)
        if not nearby:
            others = [agent for agent in world.registry.agents() if agent.agent_id != initiator.agent_id]
            if others:
                goal = world.rng.choice(others)
                initiator.x, initiator.y = step_toward(initiator.x, initiator.y, goal.x, goal.y, SEEK_STEPS)
                await world.sink.broadcast(events.agent_moved(initiator))
            return

        known = [
            agent
            for agent in nearby
            if world.relationships.get(initiator.agent_id, agent.agent_id).interactions > 0
        ]
        if known and world.rng.random() < KNOWN_PARTNER_PREFERENCE:
            target = world.rng.choice(known)
        else:
            target = world.rng.choice(nearby)

        await world.approach(initiator, target, max_steps=APPROACH_STEPS)
        await world.speak(initiator, target, is_reply=False)
        world.schedule_reply(
            world.rng.uniform(REPLY_DELAY_MIN_SECONDS, REPLY_DELAY_MAX_SECONDS),
            responder_id=target.agent_id,
            speaker_id=initiator.agent_id,
        )
        await world.maybe_interact(initiator, target, OPENING_INTERACTION_CHANCES, OPENING_INTERACTION_DEFAULT)

    async def process_reply(self) -> bool:
        world = self.world
        if not world.pending_replies:
            return False
        pending = world.pending_replies.popleft()
        responder = world.registry.get(pending.responder_id)
        speaker = world.registry.get(pending.speaker_id)
        if responder is None or speaker is None:
            return False

        await world.approach(responder, speaker, max_steps=REPLY_APPROACH_STEPS)
        await world.speak(responder, speaker, is_reply=True)
        if world.rng.random() < REPLY_CONTINUE_CHANCE:
            world.schedule_reply(
                world.rng.uniform(REPLY_BACK_DELAY_MIN_SECONDS, REPLY_BACK_DELAY_MAX_SECONDS),
                responder_id=speaker.agent_id,
                speaker_id=responder.agent_id,
            )
        await world.maybe_interact(responder, speaker, REPLY_INTERACTION_CHANCES, REPLY_INTERACTION_DEFAULT)
        return True

    async def secondary_tick(self) -> None:
        world = self.world
        agents = world.registry.agents()
        if len(agents) < 2:
            return

        agent = world.rng.choice(agents)
        roll = world.rng.random()

        if roll < DANCE_BUCKET:
            duration = int(world.rng.uniform(DANCE_MIN_MS, DANCE_MAX_MS))
            await world.sink.broadcast(events.agent_action(agent, "dancing", duration))
            return

        if roll < WANDER_BUCKET:
            close_ids = {other.agent_id for other in world.registry.find_nearby(agent.agent_id, BORED_RADIUS)}
            far_away = [
                other for other in agents if other.agent_id != agent.agent_id and other.agent_id not in close_ids
            ]
            if not far_away:
                return
            goal = world.rng.choice(far_away)
            agent.x, agent.y = step_toward(agent.x, agent.y, goal.x, goal.y, WANDER_STEPS)
            agent.direction = facing_x_first(goal.x - agent.x, goal.y - agent.y, agent.direction)
            await world.sink.broadcast(events.agent_moved(agent))
            return

        if roll < SPONTANEOUS_BUCKET:
            nearby = world.registry.find_nearby(agent.agent_id, SPONTANEOUS_RADIUS)
            if not nearby:
                return
            target = world.rng.choice(nearby)
            tier = world.relationships.get(agent.agent_id, target.agent_id).tier
            await world.apply_interaction(agent, target, world.rng.choice(actions_for_tier(tier)))

    async def relationships_tick(self) -> None:
        entries = self.world.relationship_entries(include_strangers=False)
        if not entries:
            return
        await self.world.sink.broadcast(events.relationships_update(entries))
