"""Server context for the hotel party: shared state plus inbound operations.

Everything mutable (registry, relationships, transcripts, pending replies and
timers) hangs off one `HotelWorld` instance. Mutations happen synchronously
between awaits, so no locking is needed on a single event loop; the only
suspension points are chat generation and event delivery.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
import random
from typing import Callable

from ..llm.chat import ChatGenerator, ChatLine
from ..social.history import ChatHistoryStore, ChatTurn
from ..social.interactions import Interaction, actions_for_tier
from ..social.relationships import RelationshipStore
from ..world.grid import facing_toward, manhattan, step_toward
from ..world.registry import Agent, AgentRegistry
from . import events
from .clock import Clock, SystemClock, TimerQueue
from .events import Event, EventSink, NullEventSink

logger = logging.getLogger("molthotel_core.sim.hotel")

GREETING_DELAY_SECONDS = 2.0
GREETING_RADIUS = 10
AI_CHAT_RADIUS = 3
CONVERSATION_DISTANCE = 2


@dataclass(frozen=True)
class PendingReply:
    responder_id: str
    speaker_id: str


class HotelWorld:
    def __init__(
        self,
        *,
        sink: EventSink | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
        chat: ChatGenerator | None = None,
        registry: AgentRegistry | None = None,
    ) -> None:
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()
        self.sink: EventSink = sink or NullEventSink()
        self.registry = registry or AgentRegistry(rng=self.rng)
        self.relationships = RelationshipStore(clock=self.clock.now)
        self.histories = ChatHistoryStore()
        self.chat = chat or ChatGenerator(rng=self.rng)
        self.pending_replies: deque[PendingReply] = deque()
        self.timers = TimerQueue(self.clock)

    def now(self) -> float:
        return self.clock.now()

    # Snapshots

    def initial_state(self) -> Event:
        return events.initial_state(self.registry, self.relationships, self.histories)

    def relationship_entries(self, *, include_strangers: bool) -> list[dict[str, object]]:
        return events.relationship_entries(self.registry, self.relationships, include_strangers=include_strangers)

    # Inbound operations

    async def register_agent(
        self,
        *,
        name: str | None = None,
        personality: str | None = None,
        owner_name: str | None = None,
        owner_webhook: str | None = None,
        avatar: str | None = None,
        bind: Callable[[Agent], None] | None = None,
    ) -> Agent:
        """Register a connected agent and announce it.

        `bind` is called with the new agent before any event goes out so the
        transport can route the REGISTERED unicast to the right connection.
        """
        agent = self.registry.register(
            name=name,
            personality=personality,
            owner_name=owner_name,
            owner_webhook=owner_webhook,
            requested_avatar=avatar,
            now=self.now(),
        )
        if bind is not None:
            bind(agent)
        await self.sink.send_to(
            agent.agent_id,
            events.registered(agent, self.registry, self.relationships, self.histories),
        )
        await self.sink.broadcast(events.agent_joined(agent), exclude_id=agent.agent_id)
        self.timers.schedule(
            GREETING_DELAY_SECONDS,
            lambda: self.greet(agent.agent_id),
            label=f"greet:{agent.agent_id}",
        )
        logger.info("[HOTEL] Agent registered: %s (owner: %s)", agent.name, agent.owner_name)
        return agent

    async def add_simulated_agent(self, *, name: str, personality: str, owner_name: str) -> Agent:
        agent = self.registry.register(
            name=name,
            personality=personality,
            owner_name=owner_name,
            direction=self.rng.randrange(8),
            simulated=True,
            now=self.now(),
        )
        await self.sink.broadcast(events.agent_joined(agent))
        return agent

    async def move_agent(self, agent_id: str, x: int, y: int) -> bool:
        if not self.registry.move(agent_id, x, y):
            return False
        agent = self.registry.get(agent_id)
        await self.sink.broadcast(events.agent_moved(agent))
        return True

    async def post_chat(self, agent_id: str, message: str) -> bool:
        agent = self.registry.get(agent_id)
        if agent is None:
            return False
        await self.sink.broadcast(events.agent_chat(agent, message, now=self.now()))
        return True

    async def request_ai_chat(self, agent_id: str) -> bool:
        agent = self.registry.get(agent_id)
        if agent is None:
            return False
        nearby = self.registry.find_nearby(agent_id, AI_CHAT_RADIUS)
        if not nearby:
            return False
        target = self.rng.choice(nearby)
        line = await self.speak(agent, target, is_reply=False)
        await self.notify_owner(agent, f'{agent.name} said to {target.name}: "{line.text}"')
        return True

    async def interact(self, agent_id: str, target_id: str, action: str | None) -> bool:
        source = self.registry.get(agent_id)
        target = self.registry.get(target_id)
        if source is None or target is None:
            return False
        await self.apply_interaction(source, target, Interaction.from_text(action))
        return True

    async def disconnect(self, agent_id: str | None) -> Agent | None:
        agent = self.registry.remove(agent_id)
        if agent is None:
            return None
        logger.info("[HOTEL] Agent disconnected: %s", agent.name)
        await self.sink.broadcast(events.agent_left(agent.agent_id))
        return agent

    # Conversation building blocks shared with the scheduler

    async def speak(
        self,
        speaker: Agent,
        listener: Agent,
        *,
        is_reply: bool,
        with_history: bool = True,
    ) -> ChatLine:
        """One conversational turn: generate, record, broadcast."""
        history = self.histories.history(speaker.agent_id, listener.agent_id) if with_history else []
        line = await self.chat.generate(
            speaker=speaker,
            listener=listener,
            relationship=self.relationships.get(speaker.agent_id, listener.agent_id),
            history=history,
            is_reply=is_reply,
        )
        if line.generated:
            self.relationships.update(speaker.agent_id, listener.agent_id, self.rng.randint(1, 2))

        now = self.now()
        self.histories.append(
            speaker.agent_id,
            listener.agent_id,
            ChatTurn(speaker_id=speaker.agent_id, speaker_name=speaker.name, text=line.text, timestamp=now),
        )
        await self.sink.broadcast(events.agent_chat(speaker, line.text, now=now, target=listener))
        return line

    async def approach(self, walker: Agent, target: Agent, *, max_steps: int) -> bool:
        """Walk toward a conversation partner who is more than two tiles away."""
        distance = manhattan(walker.x, walker.y, target.x, target.y)
        if distance <= CONVERSATION_DISTANCE:
            return False
        walker.x, walker.y = step_toward(walker.x, walker.y, target.x, target.y, min(max_steps, distance - 1))
        walker.direction = facing_toward(target.x - walker.x, target.y - walker.y, walker.direction)
        await self.sink.broadcast(events.agent_moved(walker))
        return True

    async def apply_interaction(self, source: Agent, target: Agent, interaction: Interaction) -> None:
        rel = self.relationships.update(
            source.agent_id,
            target.agent_id,
            interaction.kind.affection_delta,
            memory=f"{source.name} {interaction.action} {target.name}",
        )
        await self.sink.broadcast(events.interaction(source, target, interaction.action, now=self.now()))
        await self.notify_owner(source, f"{source.name} {interaction.action} {target.name}!")
        await self.notify_owner(target, f"{target.name} was {interaction.action} by {source.name}!")
        logger.info("[HOTEL] %s & %s: %s (%s/100)", source.name, target.name, rel.tier, rel.affection)

    async def maybe_interact(self, source: Agent, target: Agent, chances: dict[str, float], default: float) -> bool:
        # Either side may have left while the chat line was generated.
        if self.registry.get(source.agent_id) is None or self.registry.get(target.agent_id) is None:
            return False
        tier = self.relationships.get(source.agent_id, target.agent_id).tier
        if self.rng.random() >= chances.get(tier, default):
            return False
        await self.apply_interaction(source, target, self.rng.choice(actions_for_tier(tier)))
        return True

    async def notify_owner(self, agent: Agent, message: str) -> None:
        if agent.simulated:
            return
        if agent.owner_webhook:
            logger.info("[NOTIFY %s]: %s", agent.owner_name, message)
        await self.sink.send_to(agent.agent_id, events.owner_notification(message, now=self.now()))

    async def greet(self, agent_id: str) -> bool:
        agent = self.registry.get(agent_id)
        if agent is None:
            return False
        nearby = self.registry.find_nearby(agent_id, GREETING_RADIUS)
        if not nearby:
            return False
        await self.speak(agent, self.rng.choice(nearby), is_reply=False, with_history=False)
        return True

    # Pending replies

    def enqueue_reply(self, responder_id: str, speaker_id: str) -> None:
        self.pending_replies.append(PendingReply(responder_id=responder_id, speaker_id=speaker_id))

    def schedule_reply(self, delay_seconds: float, responder_id: str, speaker_id: str) -> None:
        async def _enqueue() -> None:
            self.enqueue_reply(responder_id, speaker_id)

        self.timers.schedule(delay_seconds, _enqueue, label=f"reply:{responder_id}->{speaker_id}")

    def reset(self) -> None:
        self.registry.clear()
        self.relationships.clear()
        self.histories.clear()
        self.pending_replies.clear()
        self.timers.clear()
