"""Simulated party guests spawned at startup so the hotel is never empty."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import random

from packages.molthotel_core.sim.hotel import HotelWorld
from packages.molthotel_core.world.registry import Agent


logger = logging.getLogger("molthotel_api.simulated_agents")

SIMULATED_OWNER = "TestBot"

BOY_NAMES: tuple[str, ...] = (
    "Marcus", "Tyler", "Jake", "Ethan", "Leo", "Max", "Ryan", "Austin", "Dylan", "Brandon",
    "Noah", "Liam", "Mason", "Lucas", "Oliver", "Sebastian", "Alex", "Jordan", "Chris", "Matt",
)
GIRL_NAMES: tuple[str, ...] = (
    "Luna", "Mia", "Bella", "Sophie", "Emma", "Olivia", "Chloe", "Zoe", "Lily", "Ava",
    "Scarlett", "Ruby", "Violet", "Maya", "Riley", "Stella", "Aria", "Nina", "Jade", "Ivy",
)

PERSONALITIES: tuple[str, ...] = (
    "chaotic and loves drama, always stirring things up",
    "super chill and laid back, goes with the flow",
    "hopeless romantic looking for love",
    "party animal who never stops dancing",
    "shy introvert who opens up once comfortable",
    "sarcastic and witty, loves roasting people",
    "flirty and confident, knows what they want",
    "mysterious and brooding, hard to read",
    "bubbly and enthusiastic about everything",
    "lowkey competitive, always one-upping others",
    "protective of friends, ready to throw hands",
    "gossip queen who knows everyones business",
    "artsy and philosophical, says deep things",
    "gamer who makes gaming references constantly",
    "gym rat who talks about protein and gains",
    "thirsty and desperate, tries too hard",
    "player who talks to everyone at once",
    "loyal and devoted, gets attached fast",
    "moody and unpredictable, hot and cold",
    "comedian who cant take anything seriously",
)


@dataclass(frozen=True)
class GuestProfile:
    name: str
    personality: str


def _nth_name(names: list[str], index: int) -> str:
    name = names[index % len(names)]
    if index >= len(names):
        name = f"{name}_{index // len(names) + 1}"
    return name


def guest_profiles(count: int, rng: random.Random) -> list[GuestProfile]:
    """Alternate boy/girl names; wrapped names get a `_k` suffix."""
    boys = list(BOY_NAMES)
    girls = list(GIRL_NAMES)
    personalities = list(PERSONALITIES)
    rng.shuffle(boys)
    rng.shuffle(girls)
    rng.shuffle(personalities)

    profiles: list[GuestProfile] = []
    boy_index = 0
    girl_index = 0
    for i in range(max(0, count)):
        if i % 2 == 0:
            name = _nth_name(boys, boy_index)
            boy_index += 1
        else:
            name = _nth_name(girls, girl_index)
            girl_index += 1
        profiles.append(GuestProfile(name=name, personality=personalities[i % len(personalities)]))
    return profiles


async def spawn_simulated_agents(world: HotelWorld, count: int) -> list[Agent]:
    spawned: list[Agent] = []
    for profile in guest_profiles(count, world.rng):
        agent = await world.add_simulated_agent(
            name=profile.name,
            personality=profile.personality,
            owner_name=SIMULATED_OWNER,
        )
        logger.debug("[SIM] Spawned %s (%s)", agent.name, profile.personality.split(",")[0])
        spawned.append(agent)
    logger.info("[SIM] %d simulated agents joined; %d agents online", len(spawned), len(world.registry))
    return spawned
