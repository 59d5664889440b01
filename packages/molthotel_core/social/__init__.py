"""Relationship state machine, interaction kinds and chat transcripts."""

from .history import ChatHistoryStore, ChatTurn
from .interactions import ACTIONS_BY_TIER, Interaction, InteractionKind, actions_for_tier, classify_action
from .relationships import Relationship, RelationshipStore, TIERS, pair_key, tier_for_affection
from .topics import TOPICS_BY_TIER, relationship_context, topics_for_tier

__all__ = [
    "ChatHistoryStore",
    "ChatTurn",
    "ACTIONS_BY_TIER",
    "Interaction",
    "InteractionKind",
    "actions_for_tier",
    "classify_action",
    "Relationship",
    "RelationshipStore",
    "TIERS",
    "pair_key",
    "tier_for_affection",
    "TOPICS_BY_TIER",
    "relationship_context",
    "topics_for_tier",
]
