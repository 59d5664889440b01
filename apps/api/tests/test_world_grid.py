#!/usr/bin/env python3

from __future__ import annotations

import itertools
import random
import unittest

from packages.molthotel_core.world.avatars import (
    BOY,
    BOY_AVATARS,
    GIRL,
    GIRL_AVATARS,
    AvatarPool,
    classify_gender,
)
from packages.molthotel_core.world.grid import (
    BLOCKED_TILES,
    EAST,
    NORTH,
    NORTH_EAST,
    NORTH_WEST,
    ROOM_H,
    ROOM_W,
    SOUTH,
    SOUTH_EAST,
    SOUTH_WEST,
    WEST,
    direction_for_delta,
    facing_toward,
    random_spawn,
    step_toward,
)
from packages.molthotel_core.world.registry import AgentRegistry


class GridTests(unittest.TestCase):
    def test_blocked_tiles_match_furniture_layout(self) -> None:
        self.assertEqual(len(BLOCKED_TILES), 34)
        for tile in [(6, 2), (9, 3), (30, 2), (32, 3), (24, 3), (28, 4), (2, 20), (5, 21)]:
            self.assertIn(tile, BLOCKED_TILES)
        for tile in [(10, 2), (29, 3), (23, 4), (6, 4), (2, 22)]:
            self.assertNotIn(tile, BLOCKED_TILES)

    def test_spawn_stays_inside_margin_and_off_furniture(self) -> None:
        rng = random.Random(3)
        for _ in range(500):
            x, y = random_spawn(rng)
            self.assertTrue(2 <= x <= ROOM_W - 3)
            self.assertTrue(2 <= y <= ROOM_H - 3)
            self.assertNotIn((x, y), BLOCKED_TILES)

    def test_direction_covers_all_sign_combinations(self) -> None:
        expected = {
            (1, 0): EAST,
            (-1, 0): WEST,
            (0, 1): SOUTH,
            (0, -1): NORTH,
            (3, 2): SOUTH_EAST,
            (2, -5): NORTH_EAST,
            (-1, 4): SOUTH_WEST,
            (-2, -2): NORTH_WEST,
        }
        for (dx, dy), direction in expected.items():
            self.assertEqual(direction_for_delta(dx, dy, current=EAST), direction)
        self.assertEqual(direction_for_delta(0, 0, current=SOUTH_WEST), SOUTH_WEST)

    def test_facing_prefers_horizontal_on_ties(self) -> None:
        self.assertEqual(facing_toward(2, 2, NORTH), EAST)
        self.assertEqual(facing_toward(-3, 3, NORTH), WEST)
        self.assertEqual(facing_toward(1, -4, EAST), NORTH)
        self.assertEqual(facing_toward(0, 0, SOUTH_WEST), SOUTH_WEST)

    def test_step_toward_skips_blocked_tiles(self) -> None:
        # (6, 2) is furniture: a diagonal step from (5, 1) toward (8, 3) is skipped each time.
        self.assertEqual(step_toward(5, 1, 8, 3, 3), (5, 1))
        self.assertEqual(step_toward(10, 10, 14, 8, 3), (13, 8))
        self.assertEqual(step_toward(10, 10, 11, 10, 5), (11, 10))


class AvatarTests(unittest.TestCase):
    def test_classifier_uses_word_lists_then_suffixes(self) -> None:
        rng = random.Random(1)
        self.assertEqual(classify_gender("LunaBot", rng), GIRL)
        self.assertEqual(classify_gender("xX_MaxPower_Xx", rng), BOY)
        self.assertEqual(classify_gender("Zelda", rng), GIRL)
        self.assertEqual(classify_gender("Brittanie", rng), GIRL)
        # "bella" is checked before any boy pattern.
        self.assertEqual(classify_gender("BellaTheKing", rng), GIRL)

    def test_requested_avatar_wins_when_free(self) -> None:
        pool = AvatarPool(rng=random.Random(1))
        self.assertEqual(pool.allocate("Max", requested="/npc3.png"), "/npc3.png")
        self.assertEqual(pool.allocate("Luna", requested="/npc3.png"), GIRL_AVATARS[1])

    def test_falls_back_to_other_gender_then_reuse(self) -> None:
        pool = AvatarPool(rng=random.Random(1), classifier=lambda name, rng: BOY)
        taken = [pool.allocate(f"guy{i}") for i in range(12)]
        self.assertEqual(taken[:6], list(BOY_AVATARS))
        self.assertEqual(taken[6:], list(GIRL_AVATARS))
        reused = pool.allocate("guy12")
        self.assertIn(reused, BOY_AVATARS + GIRL_AVATARS)

    def test_release_makes_avatar_available_again(self) -> None:
        pool = AvatarPool(rng=random.Random(1), classifier=lambda name, rng: GIRL)
        first = pool.allocate("a")
        second = pool.allocate("b")
        self.assertNotEqual(first, second)
        pool.release(first)
        self.assertEqual(pool.allocate("c"), first)

    def test_reused_avatar_stays_held_until_every_holder_releases(self) -> None:
        pool = AvatarPool(rng=random.Random(1))
        for i in range(12):
            pool.allocate(f"agent{i}")
        reused = pool.allocate("extra")
        pool.release(reused)
        self.assertTrue(pool.is_held(reused))
        pool.release(reused)
        self.assertFalse(pool.is_held(reused))


class RegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = AgentRegistry(rng=random.Random(11))

    def test_register_applies_defaults(self) -> None:
        agent = self.registry.register()
        self.assertTrue(agent.name.startswith("Agent_"))
        self.assertEqual(agent.name, f"Agent_{agent.agent_id[:6]}")
        self.assertEqual(agent.personality, "friendly and curious")
        self.assertEqual(agent.owner_name, "Unknown")
        self.assertEqual(agent.direction, EAST)
        self.assertIn(agent, self.registry.agents())

    def test_live_agents_never_share_avatars(self) -> None:
        agents = [self.registry.register(name=f"Guest{i}") for i in range(12)]
        self.assertEqual(len({agent.avatar for agent in agents}), 12)

    def test_duplicate_identity_is_an_assertion(self) -> None:
        ids = itertools.cycle(["same-id"])
        registry = AgentRegistry(rng=random.Random(1), id_factory=lambda: next(ids))
        registry.register(name="A")
        with self.assertRaises(AssertionError):
            registry.register(name="B")

    def test_rejected_moves_leave_agent_untouched(self) -> None:
        agent = self.registry.register(name="Mover")
        agent.x, agent.y, agent.direction = 10, 10, SOUTH
        for x, y in [(-1, 5), (ROOM_W, 5), (5, ROOM_H), (7, 2), (26, 4)]:
            self.assertFalse(self.registry.move(agent.agent_id, x, y))
            self.assertEqual((agent.x, agent.y, agent.direction), (10, 10, SOUTH))

    def test_move_updates_position_and_direction(self) -> None:
        agent = self.registry.register(name="Mover")
        agent.x, agent.y = 10, 10
        self.assertTrue(self.registry.move(agent.agent_id, 9, 12))
        self.assertEqual((agent.x, agent.y, agent.direction), (9, 12, SOUTH_WEST))
        self.assertTrue(self.registry.move(agent.agent_id, 9, 12))
        self.assertEqual(agent.direction, SOUTH_WEST)
        self.assertFalse(self.registry.move("missing", 3, 3))

    def test_remove_is_idempotent_and_releases_avatar(self) -> None:
        agent = self.registry.register(name="Leaver")
        self.assertTrue(self.registry.avatars.is_held(agent.avatar))
        self.assertIs(self.registry.remove(agent.agent_id), agent)
        self.assertFalse(self.registry.avatars.is_held(agent.avatar))
        self.assertIsNone(self.registry.remove(agent.agent_id))
        self.assertIsNone(self.registry.remove(None))

    def test_find_nearby_uses_per_axis_radius(self) -> None:
        origin = self.registry.register(name="Origin")
        corner = self.registry.register(name="Corner")
        far = self.registry.register(name="Far")
        origin.x, origin.y = 10, 10
        corner.x, corner.y = 13, 13
        far.x, far.y = 14, 10
        nearby = self.registry.find_nearby(origin.agent_id, 3)
        self.assertEqual([agent.name for agent in nearby], ["Corner"])
        self.assertEqual(self.registry.find_nearby("missing", 3), [])


if __name__ == "__main__":
    unittest.main()
