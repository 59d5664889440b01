"""Per-pair chat transcripts used as conversational context."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator

from .relationships import pair_key

HISTORY_CAPACITY = 50


@dataclass(frozen=True)
class ChatTurn:
    speaker_id: str
    speaker_name: str
    text: str
    timestamp: float

    @property
    def content(self) -> str:
        return f"{self.speaker_name}: {self.text}"

    def as_dict(self) -> dict[str, object]:
        return {
            "role": "assistant",
            "content": self.content,
            "speakerId": self.speaker_id,
            "speaker": self.speaker_name,
            "message": self.text,
            "timestamp": int(self.timestamp * 1000),
        }


class ChatHistoryStore:
    def __init__(self, *, capacity: int = HISTORY_CAPACITY) -> None:
        self._capacity = max(1, int(capacity))
        self._histories: dict[tuple[str, str], deque[ChatTurn]] = {}

    def __len__(self) -> int:
        return len(self._histories)

    def __iter__(self) -> Iterator[tuple[tuple[str, str], list[ChatTurn]]]:
        return iter([(key, list(turns)) for key, turns in self._histories.items()])

    def history(self, a: str, b: str) -> list[ChatTurn]:
        return list(self._histories.get(pair_key(a, b), ()))

    def append(self, a: str, b: str, turn: ChatTurn) -> None:
        key = pair_key(a, b)
        turns = self._histories.get(key)
        if turns is None:
            turns = deque(maxlen=self._capacity)
            self._histories[key] = turns
        turns.append(turn)

    def recent(self, *, per_pair: int, limit: int) -> list[ChatTurn]:
        """Last `per_pair` turns of every transcript, capped to the last `limit` overall.

        Transcripts are concatenated in first-seen order, so the overall cap
        keeps the tail of that concatenation.
        """
        collected: list[ChatTurn] = []
        for turns in self._histories.values():
            if per_pair > 0:
                collected.extend(list(turns)[-per_pair:])
        if limit <= 0:
            return []
        return collected[-limit:]

    def clear(self) -> None:
        self._histories.clear()
