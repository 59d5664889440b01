"""Hotel floor geometry, avatars and the live agent registry."""

from .avatars import AvatarPool, GenderClassifier, classify_gender
from .grid import BLOCKED_TILES, ROOM_H, ROOM_W, direction_for_delta, facing_toward, is_walkable, step_toward
from .registry import Agent, AgentRegistry

__all__ = [
    "Agent",
    "AgentRegistry",
    "AvatarPool",
    "GenderClassifier",
    "classify_gender",
    "BLOCKED_TILES",
    "ROOM_W",
    "ROOM_H",
    "direction_for_delta",
    "facing_toward",
    "is_walkable",
    "step_toward",
]
