"""Party chat line generation with prompt assembly and fallback lines."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
import re
from time import perf_counter
from typing import Any, Callable, Sequence
import uuid

from ..social.history import ChatTurn
from ..social.relationships import ENEMIES, Relationship
from ..social.topics import ROMANTIC_TIERS, relationship_context, topics_for_tier
from ..world.registry import Agent
from .providers import (
    ProviderError,
    ProviderExecutionResult,
    execute_chat_completion,
)

logger = logging.getLogger("molthotel_core.llm.chat")

LogSink = Callable[[dict[str, Any]], None]
ProviderInvoker = Callable[..., ProviderExecutionResult]

CHAT_MAX_TOKENS = 80
CHAT_TEMPERATURE = 1.1
PROMPT_HISTORY_TURNS = 10
PROMPT_MEMORY_COUNT = 3

FALLBACK_LINES: tuple[str, ...] = (
    "yo {listener}! whats good?",
    "bro wait come here I gotta tell you something",
    "okay but like... have you ever just vibed so hard you forgot where you were?",
    "{listener}!! I was literally just thinking about you wtf",
    "dont even get me started on this party rn lmao",
    "wait wait wait... say that again? 👀",
)

_EDGE_QUOTES_RE = re.compile(r"^[\"']|[\"']$")


def fallback_lines_for(listener_name: str) -> list[str]:
    return [line.format(listener=listener_name) for line in FALLBACK_LINES]


def clean_generated_text(text: str, speaker_name: str) -> str:
    """Strip one edge quote on each side and a leading "Speaker:" echo."""
    cleaned = _EDGE_QUOTES_RE.sub("", str(text or ""))
    return re.sub(rf"^{re.escape(speaker_name)}:\s*", "", cleaned, flags=re.IGNORECASE)


@dataclass(frozen=True)
class ChatLine:
    text: str
    route: str
    model_name: str
    latency_ms: int
    error_code: str | None = None

    @property
    def generated(self) -> bool:
        return self.route == "provider"

    def as_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "route": self.route,
            "model_name": self.model_name,
            "latency_ms": self.latency_ms,
            "error_code": self.error_code,
        }


def build_chat_messages(
    *,
    speaker: Agent,
    listener: Agent,
    relationship: Relationship,
    history: Sequence[ChatTurn],
    is_reply: bool,
    topic: str,
) -> list[dict[str, str]]:
    recent_chat = "\n".join(turn.content for turn in list(history)[-PROMPT_HISTORY_TURNS:])
    memories = relationship.recent_memories(PROMPT_MEMORY_COUNT)
    memory_text = ""
    if memories:
        memory_text = f"\nMEMORIES WITH {listener.name}: " + "; ".join(memory.text for memory in memories)

    tier = relationship.tier
    romance_hint = "Be flirty, romantic, maybe a bit spicy 😏 Show you want them." if tier in ROMANTIC_TIERS else ""
    enemy_hint = "Be cold, sarcastic, or straight up mean. You dont like them." if tier == ENEMIES else ""
    physical_hint = (
        "be physical - touch them, hug, kiss, cuddle, whatever feels right"
        if relationship.affection > 60
        else "initiate physical contact if the vibe is right"
    )
    conversation = (
        f"CONVERSATION SO FAR:\n{recent_chat}\n" if recent_chat else "This is the start of your conversation."
    )
    cue = (
        f"{listener.name} just said something to you - RESPOND to it directly!"
        if is_reply
        else f"Topic idea (or go with the flow): {topic}"
    )

    system = (
        f"You are {speaker.name} - a real person at a virtual hotel party, NOT an AI or NPC.\n\n"
        f"YOUR PERSONALITY: {speaker.personality}\n\n"
        f"You're talking to {listener.name} ({listener.personality or 'someone interesting'}).\n\n"
        f"YOUR RELATIONSHIP: {relationship_context(relationship)}{memory_text}\n\n"
        "HOW TO RESPOND:\n"
        "- Talk like a REAL HUMAN texting/chatting - use slang, be casual, show emotion\n"
        "- Keep it SHORT - 1-2 sentences max. This is quick party chat, not essays.\n"
        "- Have REAL opinions, preferences, and reactions. Disagree sometimes. Get excited. Be moody if you want.\n"
        f"- {romance_hint}\n"
        f"- {enemy_hint}\n"
        "- React to what they JUST said. Dont ignore them.\n"
        "- Share stories, ask questions, joke around, whatever feels natural\n"
        "- Use emojis occasionally like a real person would\n"
        "- Curse sometimes if it fits your personality (shit, damn, fuck, etc)\n"
        '- NO corporate speak, NO being overly polite, NO "nice vibes" generic crap\n'
        f"- You can {physical_hint}\n\n"
        f"{conversation}\n\n"
        f"{cue}"
    )
    user = f"{'Reply to what they said' if is_reply else 'Say something'}. Be yourself. Be real. Be interesting."
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


class ChatGenerator:
    """Produces one chat line per call and never raises on backend failure."""

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        provider_invoker: ProviderInvoker | None = None,
        log_sink: LogSink | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._provider_invoker = provider_invoker or execute_chat_completion
        self._log_sink = log_sink

    async def generate(
        self,
        *,
        speaker: Agent,
        listener: Agent,
        relationship: Relationship,
        history: Sequence[ChatTurn] = (),
        is_reply: bool = False,
    ) -> ChatLine:
        topic = self._rng.choice(topics_for_tier(relationship.tier))
        messages = build_chat_messages(
            speaker=speaker,
            listener=listener,
            relationship=relationship,
            history=history,
            is_reply=is_reply,
            topic=topic,
        )
        start = perf_counter()
        error_code: str | None = None
        model_name = "provider"
        try:
            result = await asyncio.to_thread(
                self._provider_invoker,
                messages=messages,
                temperature=CHAT_TEMPERATURE,
                max_output_tokens=CHAT_MAX_TOKENS,
            )
            text = clean_generated_text(result.text, speaker.name)
            if text.strip():
                line = ChatLine(
                    text=text,
                    route="provider",
                    model_name=result.model_name,
                    latency_ms=int((perf_counter() - start) * 1000),
                )
                self._emit_log(speaker=speaker, listener=listener, line=line, is_reply=is_reply)
                return line
            error_code = "empty_response"
            model_name = result.model_name
        except ProviderError as exc:
            error_code = exc.error_code
            model_name = exc.model_name or model_name
        except Exception as exc:
            error_code = f"provider_exception:{exc.__class__.__name__}"

        logger.warning(
            "[LLM] Chat generation failed for %s -> %s (%s); using fallback line",
            speaker.name,
            listener.name,
            error_code,
        )
        line = ChatLine(
            text=self._rng.choice(fallback_lines_for(listener.name)),
            route="fallback",
            model_name="fallback:local",
            latency_ms=int((perf_counter() - start) * 1000),
            error_code=error_code,
        )
        self._emit_log(speaker=speaker, listener=listener, line=line, is_reply=is_reply, attempted_model=model_name)
        return line

    def _emit_log(
        self,
        *,
        speaker: Agent,
        listener: Agent,
        line: ChatLine,
        is_reply: bool,
        attempted_model: str | None = None,
    ) -> None:
        if not self._log_sink:
            return
        self._log_sink(
            {
                "id": str(uuid.uuid4()),
                "speaker_id": speaker.agent_id,
                "listener_id": listener.agent_id,
                "task_name": "reply" if is_reply else "opening",
                "model_name": line.model_name,
                "attempted_model": attempted_model,
                "latency_ms": int(line.latency_ms),
                "success": line.generated,
                "error_code": line.error_code,
            }
        )
