#!/usr/bin/env python3

from __future__ import annotations

import unittest

from packages.molthotel_core.social.history import ChatHistoryStore, ChatTurn
from packages.molthotel_core.social.interactions import (
    ACTIONS_BY_TIER,
    Interaction,
    InteractionKind,
    classify_action,
)
from packages.molthotel_core.social.relationships import (
    MEMORY_CAPACITY,
    TIERS,
    RelationshipStore,
    tier_for_affection,
)
from packages.molthotel_core.social.topics import TOPICS_BY_TIER, relationship_context


class _Tick:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


class TierTableTests(unittest.TestCase):
    def test_every_affection_value_maps_to_expected_tier(self) -> None:
        for affection in range(0, 101):
            if affection >= 90:
                expected = "lovers"
            elif affection >= 80:
                expected = "dating"
            elif affection >= 70:
                expected = "flirting"
            elif affection >= 55:
                expected = "close_friends"
            elif affection >= 40:
                expected = "friends"
            elif affection >= 20:
                expected = "acquaintances"
            elif affection < 15:
                expected = "enemies"
            else:
                expected = "strangers"
            self.assertEqual(tier_for_affection(affection), expected, affection)

    def test_fifteen_to_nineteen_is_strangers_not_acquaintances(self) -> None:
        for affection in range(15, 20):
            self.assertEqual(tier_for_affection(affection), "strangers")
        self.assertEqual(tier_for_affection(14), "enemies")
        self.assertEqual(tier_for_affection(20), "acquaintances")


class RelationshipStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Tick()
        self.store = RelationshipStore(clock=self.clock)

    def test_lazy_creation_defaults(self) -> None:
        rel = self.store.get("b", "a")
        self.assertEqual(rel.agent_ids, ("a", "b"))
        self.assertEqual(rel.affection, 50)
        self.assertEqual(rel.tier, "strangers")
        self.assertEqual(rel.interactions, 0)
        self.assertIsNone(rel.last_interaction)
        self.assertIs(self.store.get("a", "b"), rel)

    def test_single_update_moves_pair_to_friends(self) -> None:
        rel = self.store.update("agent-a", "agent-b", 2)
        self.assertEqual(rel.affection, 52)
        self.assertEqual(rel.tier, "friends")
        self.assertEqual(rel.interactions, 1)
        self.assertIsNotNone(rel.last_interaction)

    def test_ten_kisses_reach_lovers(self) -> None:
        kiss = InteractionKind.KISS.affection_delta
        tiers = []
        for _ in range(10):
            tiers.append(self.store.update("a", "b", kiss).tier)
        self.assertEqual(tiers[-1], "lovers")
        self.assertNotIn("lovers", tiers[:-1])
        self.assertEqual(self.store.get("a", "b").affection, 90)

    def test_affection_is_clamped(self) -> None:
        self.assertEqual(self.store.update("a", "b", 500).affection, 100)
        self.assertEqual(self.store.update("a", "b", -1000).affection, 0)
        self.assertEqual(self.store.get("a", "b").tier, "enemies")
        self.assertEqual(self.store.update("a", "b", -2).affection, 0)

    def test_memory_log_keeps_latest_ten(self) -> None:
        for i in range(14):
            self.store.update("a", "b", 1, memory=f"moment {i}")
        rel = self.store.get("a", "b")
        self.assertEqual(len(rel.memories), MEMORY_CAPACITY)
        self.assertEqual(rel.memories[0].text, "moment 4")
        self.assertEqual([m.text for m in rel.recent_memories(3)], ["moment 11", "moment 12", "moment 13"])

    def test_relationships_are_never_evicted(self) -> None:
        self.store.get("a", "b")
        self.store.get("c", "d")
        self.assertEqual(len(self.store), 2)
        self.assertIsNotNone(self.store.peek("b", "a"))


class InteractionTests(unittest.TestCase):
    def test_free_text_shim_uses_first_matching_keyword(self) -> None:
        self.assertEqual(classify_action("kissed"), InteractionKind.KISS)
        self.assertEqual(classify_action("made out with"), InteractionKind.KISS)
        self.assertEqual(classify_action("hugged and kissed"), InteractionKind.KISS)
        self.assertEqual(classify_action("cuddled up to"), InteractionKind.HUG)
        self.assertEqual(classify_action("slow danced with"), InteractionKind.CLOSE)
        self.assertEqual(classify_action("rolled eyes at"), InteractionKind.HOSTILE)
        self.assertEqual(classify_action("waved at"), InteractionKind.GESTURE)
        self.assertEqual(classify_action(""), InteractionKind.GESTURE)

    def test_affection_deltas_per_kind(self) -> None:
        deltas = {kind: kind.affection_delta for kind in InteractionKind}
        self.assertEqual(
            deltas,
            {
                InteractionKind.KISS: 4,
                InteractionKind.HUG: 3,
                InteractionKind.CLOSE: 2,
                InteractionKind.HOSTILE: -2,
                InteractionKind.GESTURE: 1,
            },
        )

    def test_pool_tags_agree_with_free_text_shim(self) -> None:
        self.assertEqual(set(ACTIONS_BY_TIER), set(TIERS))
        for tier, pool in ACTIONS_BY_TIER.items():
            for interaction in pool:
                self.assertEqual(classify_action(interaction.action), interaction.kind, (tier, interaction.action))

    def test_missing_action_defaults_to_wave(self) -> None:
        self.assertEqual(Interaction.from_text(None), Interaction("waved at", InteractionKind.GESTURE))

    def test_topic_pools_cover_every_tier(self) -> None:
        self.assertEqual(set(TOPICS_BY_TIER), set(TIERS))
        self.assertEqual(len(TOPICS_BY_TIER["lovers"]), 6)
        self.assertEqual(len(TOPICS_BY_TIER["strangers"]), 5)


class RelationshipContextTests(unittest.TestCase):
    def test_strangers_text_depends_on_interactions(self) -> None:
        store = RelationshipStore(clock=_Tick())
        rel = store.get("a", "b")
        self.assertEqual(
            relationship_context(rel),
            "You just met and dont know each other yet. Affection: 50/100",
        )
        rel = store.update("a", "b", -33)
        self.assertEqual(rel.tier, "strangers")
        self.assertEqual(
            relationship_context(rel),
            "You just met recently and are still getting to know each other. Affection: 17/100",
        )

    def test_other_tiers_append_affection(self) -> None:
        store = RelationshipStore(clock=_Tick())
        dating = store.update("a", "b", 35)
        self.assertEqual(
            relationship_context(dating),
            "You're dating! You really like them and want to be around them all the time. Affection: 85/100",
        )
        lovers = store.update("a", "b", 10)
        self.assertEqual(
            relationship_context(lovers),
            "You're in love ❤️ They're your person. You're crazy about them. Affection: 95/100",
        )


class ChatHistoryTests(unittest.TestCase):
    def test_history_is_capped_per_pair(self) -> None:
        histories = ChatHistoryStore(capacity=50)
        for i in range(60):
            histories.append("a", "b", ChatTurn("a", "Ann", f"line {i}", float(i)))
        turns = histories.history("b", "a")
        self.assertEqual(len(turns), 50)
        self.assertEqual(turns[0].text, "line 10")
        self.assertEqual(turns[-1].content, "Ann: line 59")

    def test_recent_takes_tail_of_each_pair_then_overall_limit(self) -> None:
        histories = ChatHistoryStore()
        for i in range(8):
            histories.append("a", "b", ChatTurn("a", "Ann", f"ab {i}", float(i)))
            histories.append("c", "d", ChatTurn("c", "Cid", f"cd {i}", float(i)))
        recent = histories.recent(per_pair=5, limit=30)
        self.assertEqual([t.text for t in recent[:5]], [f"ab {i}" for i in range(3, 8)])
        self.assertEqual(len(recent), 10)
        self.assertEqual(len(histories.recent(per_pair=5, limit=4)), 4)


if __name__ == "__main__":
    unittest.main()
