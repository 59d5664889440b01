"""Avatar pool with name-based gender matching."""

from __future__ import annotations

from collections import Counter
import random
from typing import Callable

BOY = "boy"
GIRL = "girl"

BOY_AVATARS: tuple[str, ...] = ("/npc1.png", "/npc2.png", "/npc5.png", "/npc6.png", "/npc9.png", "/npc10.png")
GIRL_AVATARS: tuple[str, ...] = ("/npc3.png", "/npc4.png", "/npc7.png", "/npc8.png", "/npc11.png", "/npc12.png")

GIRL_NAME_PATTERNS: tuple[str, ...] = (
    "emma", "olivia", "ava", "sophia", "isabella", "mia", "charlotte", "amelia", "harper", "evelyn",
    "luna", "ella", "elizabeth", "sofia", "emily", "avery", "scarlett", "grace", "chloe", "victoria",
    "riley", "aria", "lily", "aurora", "zoey", "nora", "camila", "hannah", "sarah", "bella",
    "madison", "natalie", "zoe", "stella", "lucy", "anna", "maya", "leah", "audrey", "claire",
    "violet", "savannah", "ruby", "eva", "naomi", "alice", "julia", "willow", "ivy", "ellie",
    "jessica", "ashley", "brittany", "megan", "jennifer", "amanda", "stephanie", "nicole", "rachel",
    "samantha", "katherine", "rebecca", "lauren", "chelsea", "vanessa", "maria", "diana", "rose",
    "queen", "princess", "girl", "lady", "miss", "babe", "diva", "goddess", "angel", "pixie",
    "luna", "crystal", "diamond", "ruby", "pearl", "jade", "amber", "candy", "honey", "cherry",
    "mika", "yuki", "sakura", "hana", "mei", "suki", "akira", "lena", "nina", "tina", "gina",
)

BOY_NAME_PATTERNS: tuple[str, ...] = (
    "liam", "noah", "oliver", "james", "elijah", "william", "henry", "lucas", "benjamin", "theodore",
    "jack", "levi", "alexander", "mason", "ethan", "daniel", "jacob", "michael", "sebastian", "owen",
    "aiden", "samuel", "ryan", "nathan", "adam", "leo", "david", "joseph", "matthew", "luke",
    "dylan", "andrew", "joshua", "christopher", "anthony", "tyler", "hunter", "logan", "austin",
    "jason", "justin", "kevin", "brian", "brandon", "eric", "steven", "patrick", "nick", "scott",
    "king", "prince", "boy", "dude", "bro", "guy", "lord", "chief", "boss", "duke", "ace",
    "max", "jake", "chad", "brad", "mike", "dave", "steve", "john", "tom", "bob", "rob", "joe",
    "jarvis", "tyler", "jordan", "alex", "chris", "matt", "dan", "mark", "paul", "peter",
)

_GIRL_SUFFIXES = ("a", "ie", "y", "elle", "ette", "ina")

GenderClassifier = Callable[[str, random.Random], str]


def classify_gender(name: str, rng: random.Random) -> str:
    """Guess boy/girl from substrings, then suffixes, then a coin flip."""
    lowered = str(name or "").lower()
    for pattern in GIRL_NAME_PATTERNS:
        if pattern in lowered:
            return GIRL
    for pattern in BOY_NAME_PATTERNS:
        if pattern in lowered:
            return BOY
    if lowered.endswith(_GIRL_SUFFIXES):
        return GIRL
    return BOY if rng.random() > 0.5 else GIRL


class AvatarPool:
    """Hands out avatars so that no two live agents share one.

    Holds are counted rather than flagged: once every avatar is taken the pool
    falls back to reusing a random one, and releasing one holder of a reused
    avatar must not free it for the other.
    """

    def __init__(
        self,
        *,
        rng: random.Random,
        classifier: GenderClassifier | None = None,
    ) -> None:
        self._rng = rng
        self._classifier = classifier or classify_gender
        self._holders: Counter[str] = Counter()

    def is_held(self, avatar: str) -> bool:
        return self._holders[avatar] > 0

    def in_use(self) -> set[str]:
        return {avatar for avatar, count in self._holders.items() if count > 0}

    def allocate(self, name: str, requested: str | None = None) -> str:
        if requested and not self.is_held(requested):
            return self._hold(requested)

        gender = self._classifier(name, self._rng)
        preferred, other = (GIRL_AVATARS, BOY_AVATARS) if gender == GIRL else (BOY_AVATARS, GIRL_AVATARS)
        for pool in (preferred, other):
            for avatar in pool:
                if not self.is_held(avatar):
                    return self._hold(avatar)

        fallback_pool = BOY_AVATARS if self._rng.random() > 0.5 else GIRL_AVATARS
        return self._hold(self._rng.choice(fallback_pool))

    def release(self, avatar: str | None) -> None:
        if not avatar or self._holders[avatar] <= 0:
            return
        self._holders[avatar] -= 1
        if self._holders[avatar] <= 0:
            del self._holders[avatar]

    def _hold(self, avatar: str) -> str:
        self._holders[avatar] += 1
        return avatar
