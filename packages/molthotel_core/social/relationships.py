"""Pairwise relationship state: affection, derived tier and a short memory log."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import time
from typing import Callable, Iterator

STRANGERS = "strangers"
ACQUAINTANCES = "acquaintances"
FRIENDS = "friends"
CLOSE_FRIENDS = "close_friends"
FLIRTING = "flirting"
DATING = "dating"
LOVERS = "lovers"
ENEMIES = "enemies"

TIERS: tuple[str, ...] = (
    STRANGERS,
    ACQUAINTANCES,
    FRIENDS,
    CLOSE_FRIENDS,
    FLIRTING,
    DATING,
    LOVERS,
    ENEMIES,
)

INITIAL_AFFECTION = 50
MIN_AFFECTION = 0
MAX_AFFECTION = 100
MEMORY_CAPACITY = 10

# Checked in order, first match wins. 15..19 deliberately falls through to strangers.
_TIER_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (90, LOVERS),
    (80, DATING),
    (70, FLIRTING),
    (55, CLOSE_FRIENDS),
    (40, FRIENDS),
    (20, ACQUAINTANCES),
)
_ENEMIES_BELOW = 15


def tier_for_affection(affection: int) -> str:
    for threshold, tier in _TIER_THRESHOLDS:
        if affection >= threshold:
            return tier
    if affection < _ENEMIES_BELOW:
        return ENEMIES
    return STRANGERS


def clamp_affection(value: int) -> int:
    return max(MIN_AFFECTION, min(MAX_AFFECTION, int(value)))


def pair_key(a: str, b: str) -> tuple[str, str]:
    return (a, b) if a <= b else (b, a)


@dataclass(frozen=True)
class RelationshipMemory:
    text: str
    timestamp: float

    def as_dict(self) -> dict[str, object]:
        return {"text": self.text, "timestamp": int(self.timestamp * 1000)}


@dataclass
class Relationship:
    agent_ids: tuple[str, str]
    first_met: float
    affection: int = INITIAL_AFFECTION
    tier: str = STRANGERS
    interactions: int = 0
    last_interaction: float | None = None
    memories: deque[RelationshipMemory] = field(default_factory=lambda: deque(maxlen=MEMORY_CAPACITY))

    def recent_memories(self, limit: int = 3) -> list[RelationshipMemory]:
        if limit <= 0:
            return []
        return list(self.memories)[-limit:]

    def as_dict(self) -> dict[str, object]:
        return {
            "agent_ids": list(self.agent_ids),
            "affection": self.affection,
            "type": self.tier,
            "interactions": self.interactions,
            "first_met": int(self.first_met * 1000),
            "last_interaction": int(self.last_interaction * 1000) if self.last_interaction is not None else None,
            "memories": [memory.as_dict() for memory in self.memories],
        }


class RelationshipStore:
    """Relationships keyed by the sorted pair of agent ids.

    Entries are created on first lookup and are never evicted, so a pair's
    history is kept even after both agents leave.
    """

    def __init__(self, *, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.time
        self._relationships: dict[tuple[str, str], Relationship] = {}

    def __len__(self) -> int:
        return len(self._relationships)

    def __iter__(self) -> Iterator[Relationship]:
        return iter(list(self._relationships.values()))

    def peek(self, a: str, b: str) -> Relationship | None:
        return self._relationships.get(pair_key(a, b))

    def get(self, a: str, b: str) -> Relationship:
        key = pair_key(a, b)
        rel = self._relationships.get(key)
        if rel is None:
            rel = Relationship(agent_ids=key, first_met=self._clock())
            self._relationships[key] = rel
        return rel

    def update(self, a: str, b: str, delta: int, memory: str | None = None) -> Relationship:
        rel = self.get(a, b)
        now = self._clock()
        rel.affection = clamp_affection(rel.affection + int(delta))
        rel.interactions += 1
        rel.last_interaction = now
        if memory:
            rel.memories.append(RelationshipMemory(text=memory, timestamp=now))
        rel.tier = tier_for_affection(rel.affection)
        return rel

    def clear(self) -> None:
        self._relationships.clear()
