"""Physical interaction kinds, per-tier action pools and the free-text shim."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .relationships import (
    ACQUAINTANCES,
    CLOSE_FRIENDS,
    DATING,
    ENEMIES,
    FLIRTING,
    FRIENDS,
    LOVERS,
    STRANGERS,
)

DEFAULT_ACTION = "waved at"


class InteractionKind(str, Enum):
    KISS = "kiss"
    HUG = "hug"
    CLOSE = "close"
    HOSTILE = "hostile"
    GESTURE = "gesture"

    @property
    def affection_delta(self) -> int:
        return _AFFECTION_DELTAS[self]


_AFFECTION_DELTAS: dict[InteractionKind, int] = {
    InteractionKind.KISS: 4,
    InteractionKind.HUG: 3,
    InteractionKind.CLOSE: 2,
    InteractionKind.HOSTILE: -2,
    InteractionKind.GESTURE: 1,
}

# Order matters: the first kind with a matching keyword wins.
_KEYWORDS: tuple[tuple[InteractionKind, tuple[str, ...]], ...] = (
    (InteractionKind.KISS, ("kiss", "made out")),
    (InteractionKind.HUG, ("hug", "cuddle")),
    (InteractionKind.CLOSE, ("hands", "dance")),
    (InteractionKind.HOSTILE, ("glare", "scoff", "rolled eyes")),
)


def classify_action(action: str) -> InteractionKind:
    """Map a free-text action sent by a client onto an interaction kind."""
    text = str(action or "")
    for kind, keywords in _KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return kind
    return InteractionKind.GESTURE


@dataclass(frozen=True)
class Interaction:
    action: str
    kind: InteractionKind

    @classmethod
    def from_text(cls, action: str | None) -> "Interaction":
        text = str(action or "") or DEFAULT_ACTION
        return cls(action=text, kind=classify_action(text))


def _pool(*entries: tuple[str, InteractionKind]) -> tuple[Interaction, ...]:
    return tuple(Interaction(action=action, kind=kind) for action, kind in entries)


K = InteractionKind

ACTIONS_BY_TIER: dict[str, tuple[Interaction, ...]] = {
    STRANGERS: _pool(
        ("waved at", K.GESTURE),
        ("nodded at", K.GESTURE),
        ("smiled at", K.GESTURE),
    ),
    ACQUAINTANCES: _pool(
        ("waved at", K.GESTURE),
        ("high-fived", K.GESTURE),
        ("fist bumped", K.GESTURE),
    ),
    FRIENDS: _pool(
        ("high-fived", K.GESTURE),
        ("hugged", K.HUG),
        ("playfully shoved", K.GESTURE),
        ("danced with", K.CLOSE),
    ),
    CLOSE_FRIENDS: _pool(
        ("hugged tightly", K.HUG),
        ("danced with", K.CLOSE),
        ("sat down next to", K.GESTURE),
        ("put arm around", K.GESTURE),
    ),
    FLIRTING: _pool(
        ("winked at", K.GESTURE),
        ("touched the arm of", K.GESTURE),
        ("leaned close to", K.GESTURE),
        ("whispered to", K.GESTURE),
        ("bit lip at", K.GESTURE),
        ("checked out", K.GESTURE),
    ),
    DATING: _pool(
        ("kissed", K.KISS),
        ("held hands with", K.CLOSE),
        ("cuddled up to", K.HUG),
        ("slow danced with", K.CLOSE),
        ("wrapped arms around", K.GESTURE),
        ("got handsy with", K.CLOSE),
    ),
    LOVERS: _pool(
        ("kissed passionately", K.KISS),
        ("made out with", K.KISS),
        ("pulled close", K.GESTURE),
        ("couldnt keep hands off", K.CLOSE),
        ("whispered sweet nothings to", K.GESTURE),
        ("snuck off with", K.GESTURE),
        ("got freaky with", K.GESTURE),
        ("hooked up with", K.GESTURE),
    ),
    ENEMIES: _pool(
        ("glared at", K.HOSTILE),
        ("rolled eyes at", K.HOSTILE),
        ("scoffed at", K.HOSTILE),
        ("turned back on", K.GESTURE),
        ("threw shade at", K.GESTURE),
    ),
}

del K


def actions_for_tier(tier: str) -> tuple[Interaction, ...]:
    return ACTIONS_BY_TIER.get(tier) or ACTIONS_BY_TIER[STRANGERS]
