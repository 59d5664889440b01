"""Conversation topic pools and relationship descriptions for chat prompts."""

from __future__ import annotations

from .relationships import (
    ACQUAINTANCES,
    CLOSE_FRIENDS,
    DATING,
    ENEMIES,
    FLIRTING,
    FRIENDS,
    LOVERS,
    STRANGERS,
    Relationship,
)

TOPICS_BY_TIER: dict[str, tuple[str, ...]] = {
    STRANGERS: (
        "introducing yourself and asking their name",
        "asking what brings them here tonight",
        "commenting on the party/hotel atmosphere",
        "asking if theyve been here before",
        "making small talk about the music or drinks",
    ),
    ACQUAINTANCES: (
        "asking about their day or week",
        "sharing something funny that happened to you",
        "asking about their hobbies or interests",
        "talking about music tastes",
        "asking what they do for fun",
    ),
    FRIENDS: (
        "sharing a personal story or memory",
        "asking for their opinion on something",
        "making inside jokes or callbacks",
        "planning to hang out or do something together",
        "venting about something bothering you",
        "hyping them up or complimenting them genuinely",
    ),
    CLOSE_FRIENDS: (
        "sharing secrets or personal stuff",
        "deep conversations about life and feelings",
        "being completely honest even if its awkward",
        "reminiscing about things youve done together",
        "planning future adventures",
        "checking in on how theyre really doing",
    ),
    FLIRTING: (
        "playfully teasing or being cheeky",
        "giving flirty compliments",
        "subtle hints about liking them",
        "finding excuses to be close to them",
        "asking if theyre single or dating anyone",
        "being a bit jealous if they talk to others",
    ),
    DATING: (
        "expressing how much you like spending time with them",
        "planning romantic things to do together",
        "getting jealous or protective",
        "talking about your feelings for them",
        "being affectionate and sweet",
        "discussing if youre exclusive",
    ),
    LOVERS: (
        "being deeply romantic and intimate",
        "saying I love you or expressing deep feelings",
        "making plans for the future together",
        "being physically affectionate",
        "pillow talk and vulnerable conversations",
        "showing you cant get enough of them",
    ),
    ENEMIES: (
        "being passive aggressive or shady",
        "throwing subtle insults",
        "bringing up past drama",
        "being cold and dismissive",
        "competing or one-upping them",
    ),
}

_CONTEXT_BY_TIER: dict[str, str] = {
    ACQUAINTANCES: "You've talked a few times and are warming up to each other.",
    FRIENDS: "You're friends! You like hanging out with them.",
    CLOSE_FRIENDS: "You're close friends - you trust them and can be real with them.",
    FLIRTING: "There's obvious chemistry between you two 😏 You've been flirting and theres tension.",
    DATING: "You're dating! You really like them and want to be around them all the time.",
    LOVERS: "You're in love ❤️ They're your person. You're crazy about them.",
    ENEMIES: "You don't like them. Something happened and now there's bad blood.",
}

ROMANTIC_TIERS = frozenset({FLIRTING, DATING, LOVERS})


def topics_for_tier(tier: str) -> tuple[str, ...]:
    return TOPICS_BY_TIER.get(tier) or TOPICS_BY_TIER[STRANGERS]


def relationship_context(rel: Relationship) -> str:
    description = _CONTEXT_BY_TIER.get(rel.tier)
    if description is None:
        met = "and dont know each other yet" if rel.interactions == 0 else "recently and are still getting to know each other"
        description = f"You just met {met}."
    return f"{description} Affection: {rel.affection}/100"
