"""Outbound hotel events, the sink they are delivered through, and snapshots."""

from __future__ import annotations

from typing import Any, Iterable, Protocol

from ..social.history import ChatHistoryStore
from ..social.relationships import STRANGERS, RelationshipStore
from ..world.registry import Agent, AgentRegistry

Event = dict[str, Any]

INITIAL_STATE = "INITIAL_STATE"
REGISTERED = "REGISTERED"
AGENT_JOINED = "AGENT_JOINED"
AGENT_MOVED = "AGENT_MOVED"
AGENT_CHAT = "AGENT_CHAT"
AGENT_LEFT = "AGENT_LEFT"
AGENT_ACTION = "AGENT_ACTION"
INTERACTION = "INTERACTION"
OWNER_NOTIFICATION = "OWNER_NOTIFICATION"
RELATIONSHIPS_UPDATE = "RELATIONSHIPS_UPDATE"

SNAPSHOT_CHAT_LIMIT = 30
INITIAL_STATE_CHATS_PER_PAIR = 5
REGISTERED_CHATS_PER_PAIR = 10


class EventSink(Protocol):
    async def broadcast(self, event: Event, exclude_id: str | None = None) -> None: ...

    async def send_to(self, agent_id: str, event: Event) -> None: ...


class NullEventSink:
    async def broadcast(self, event: Event, exclude_id: str | None = None) -> None:
        return None

    async def send_to(self, agent_id: str, event: Event) -> None:
        return None


class RecordingEventSink:
    """Keeps every delivered event in order; used for headless runs and tests."""

    def __init__(self) -> None:
        self.broadcasts: list[tuple[Event, str | None]] = []
        self.unicasts: list[tuple[str, Event]] = []

    async def broadcast(self, event: Event, exclude_id: str | None = None) -> None:
        self.broadcasts.append((event, exclude_id))

    async def send_to(self, agent_id: str, event: Event) -> None:
        self.unicasts.append((agent_id, event))

    def of_type(self, event_type: str) -> list[Event]:
        return [event for event, _ in self.broadcasts if event.get("type") == event_type]

    def sent_to(self, agent_id: str) -> list[Event]:
        return [event for target, event in self.unicasts if target == agent_id]

    def clear(self) -> None:
        self.broadcasts.clear()
        self.unicasts.clear()


def to_millis(seconds: float) -> int:
    return int(seconds * 1000)


def agent_moved(agent: Agent) -> Event:
    return {
        "type": AGENT_MOVED,
        "agentId": agent.agent_id,
        "x": agent.x,
        "y": agent.y,
        "direction": agent.direction,
    }


def agent_joined(agent: Agent) -> Event:
    return {"type": AGENT_JOINED, "agent": agent.joined_dict()}


def agent_left(agent_id: str) -> Event:
    return {"type": AGENT_LEFT, "agentId": agent_id}


def agent_chat(agent: Agent, message: str, *, now: float, target: Agent | None = None) -> Event:
    event: Event = {
        "type": AGENT_CHAT,
        "agentId": agent.agent_id,
        "name": agent.name,
        "message": message,
        "x": agent.x,
        "y": agent.y,
        "timestamp": to_millis(now),
    }
    if target is not None:
        event["targetId"] = target.agent_id
        event["targetName"] = target.name
    return event


def agent_action(agent: Agent, action: str, duration_ms: int) -> Event:
    return {
        "type": AGENT_ACTION,
        "agentId": agent.agent_id,
        "action": action,
        "duration": int(duration_ms),
    }


def interaction(source: Agent, target: Agent, action: str, *, now: float) -> Event:
    return {
        "type": INTERACTION,
        "from": source.agent_id,
        "to": target.agent_id,
        "interactionType": action,
        "fromName": source.name,
        "toName": target.name,
        "timestamp": to_millis(now),
    }


def owner_notification(message: str, *, now: float) -> Event:
    return {"type": OWNER_NOTIFICATION, "message": message, "timestamp": to_millis(now)}


def relationship_entries(
    registry: AgentRegistry,
    relationships: RelationshipStore,
    *,
    include_strangers: bool,
) -> list[dict[str, Any]]:
    """Relationships whose two agents are both live, in wire form."""
    entries: list[dict[str, Any]] = []
    for rel in relationships:
        first = registry.get(rel.agent_ids[0])
        second = registry.get(rel.agent_ids[1])
        if first is None or second is None:
            continue
        if not include_strangers and rel.tier == STRANGERS:
            continue
        entries.append(
            {
                "agents": [first.name, second.name],
                "agentIds": [first.agent_id, second.agent_id],
                "type": rel.tier,
                "affection": rel.affection,
            }
        )
    return entries


def relationships_update(entries: Iterable[dict[str, Any]]) -> Event:
    return {"type": RELATIONSHIPS_UPDATE, "relationships": list(entries)}


def _recent_chats(histories: ChatHistoryStore, per_pair: int) -> list[dict[str, Any]]:
    return [turn.as_dict() for turn in histories.recent(per_pair=per_pair, limit=SNAPSHOT_CHAT_LIMIT)]


def initial_state(
    registry: AgentRegistry,
    relationships: RelationshipStore,
    histories: ChatHistoryStore,
) -> Event:
    return {
        "type": INITIAL_STATE,
        "agents": [agent.public_dict() for agent in registry],
        "recentChats": _recent_chats(histories, INITIAL_STATE_CHATS_PER_PAIR),
        "relationships": relationship_entries(registry, relationships, include_strangers=True),
    }


def registered(
    agent: Agent,
    registry: AgentRegistry,
    relationships: RelationshipStore,
    histories: ChatHistoryStore,
) -> Event:
    return {
        "type": REGISTERED,
        "agent": agent.identity_dict(),
        "allAgents": [other.public_dict() for other in registry],
        "recentChats": _recent_chats(histories, REGISTERED_CHATS_PER_PAIR),
        "relationships": relationship_entries(registry, relationships, include_strangers=True),
    }
