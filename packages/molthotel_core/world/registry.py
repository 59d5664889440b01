"""Authoritative in-memory registry of live hotel agents."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Callable, Iterator
import uuid

from .avatars import AvatarPool
from .grid import EAST, direction_for_delta, is_walkable, random_spawn

DEFAULT_PERSONALITY = "friendly and curious"
DEFAULT_OWNER = "Unknown"

IdFactory = Callable[[], str]


def _uuid4_str() -> str:
    return str(uuid.uuid4())


@dataclass
class Agent:
    agent_id: str
    name: str
    personality: str
    owner_name: str
    avatar: str
    x: int
    y: int
    direction: int = EAST
    owner_webhook: str | None = None
    chat_cooldown_until: float = 0.0
    connected_at: float = 0.0
    simulated: bool = False

    def public_dict(self) -> dict[str, object]:
        return {
            "id": self.agent_id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "avatar": self.avatar,
            "direction": self.direction,
            "personality": self.personality,
        }

    def joined_dict(self) -> dict[str, object]:
        return {
            "id": self.agent_id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "avatar": self.avatar,
            "personality": self.personality,
        }

    def identity_dict(self) -> dict[str, object]:
        return {
            "id": self.agent_id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "avatar": self.avatar,
        }


class AgentRegistry:
    def __init__(
        self,
        *,
        rng: random.Random,
        avatars: AvatarPool | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        self._rng = rng
        self._avatars = avatars or AvatarPool(rng=rng)
        self._id_factory = id_factory or _uuid4_str
        self._agents: dict[str, Agent] = {}

    @property
    def avatars(self) -> AvatarPool:
        return self._avatars

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def __iter__(self) -> Iterator[Agent]:
        return iter(list(self._agents.values()))

    def get(self, agent_id: str | None) -> Agent | None:
        if not agent_id:
            return None
        return self._agents.get(agent_id)

    def agents(self) -> list[Agent]:
        return list(self._agents.values())

    def register(
        self,
        *,
        name: str | None = None,
        personality: str | None = None,
        owner_name: str | None = None,
        owner_webhook: str | None = None,
        requested_avatar: str | None = None,
        direction: int = EAST,
        simulated: bool = False,
        now: float = 0.0,
    ) -> Agent:
        agent_id = self._id_factory()
        assert agent_id not in self._agents, f"duplicate agent id {agent_id}"

        display_name = name or f"Agent_{agent_id[:6]}"
        avatar = self._avatars.allocate(name or "Agent", requested_avatar)
        x, y = random_spawn(self._rng)
        agent = Agent(
            agent_id=agent_id,
            name=display_name,
            personality=personality or DEFAULT_PERSONALITY,
            owner_name=owner_name or DEFAULT_OWNER,
            owner_webhook=owner_webhook or None,
            avatar=avatar,
            x=x,
            y=y,
            direction=direction,
            connected_at=now,
            simulated=simulated,
        )
        self._agents[agent_id] = agent
        return agent

    def move(self, agent_id: str, x: int, y: int) -> bool:
        agent = self._agents.get(agent_id)
        if agent is None or not is_walkable(x, y):
            return False
        agent.direction = direction_for_delta(x - agent.x, y - agent.y, agent.direction)
        agent.x = x
        agent.y = y
        return True

    def remove(self, agent_id: str | None) -> Agent | None:
        if not agent_id:
            return None
        agent = self._agents.pop(agent_id, None)
        if agent is not None:
            self._avatars.release(agent.avatar)
        return agent

    def find_nearby(self, agent_id: str, radius: int) -> list[Agent]:
        """Other agents within `radius` on each axis independently."""
        origin = self._agents.get(agent_id)
        if origin is None:
            return []
        return [
            other
            for other in self._agents.values()
            if other.agent_id != agent_id
            and abs(other.x - origin.x) <= radius
            and abs(other.y - origin.y) <= radius
        ]

    def clear(self) -> None:
        for agent_id in list(self._agents):
            self.remove(agent_id)
