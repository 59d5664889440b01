"""Inbound WebSocket message parsing."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


logger = logging.getLogger("molthotel_api.protocol")


class _Inbound(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegisterMessage(_Inbound):
    name: Optional[str] = None
    personality: Optional[str] = None
    owner_name: Optional[str] = Field(default=None, alias="ownerName")
    owner_webhook: Optional[str] = Field(default=None, alias="ownerWebhook")
    avatar: Optional[str] = None


class MoveMessage(_Inbound):
    x: int
    y: int


class ChatMessage(_Inbound):
    message: str


class RequestAiChatMessage(_Inbound):
    pass


class InteractMessage(_Inbound):
    target_id: str = Field(alias="targetId", min_length=1)
    action: Optional[str] = None


InboundMessage = Union[RegisterMessage, MoveMessage, ChatMessage, RequestAiChatMessage, InteractMessage]

MESSAGE_TYPES: dict[str, type[_Inbound]] = {
    "AGENT_REGISTER": RegisterMessage,
    "MOVE": MoveMessage,
    "CHAT": ChatMessage,
    "REQUEST_AI_CHAT": RequestAiChatMessage,
    "INTERACT": InteractMessage,
}


def parse_inbound(raw: str) -> InboundMessage | None:
    """Decode one frame; anything unusable comes back as None."""
    try:
        payload: Any = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("[PROTOCOL] Dropping non-JSON frame")
        return None
    if not isinstance(payload, dict):
        return None
    model = MESSAGE_TYPES.get(str(payload.get("type") or ""))
    if model is None:
        logger.debug("[PROTOCOL] Dropping frame with unknown type: %r", payload.get("type"))
        return None
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        logger.debug("[PROTOCOL] Dropping invalid %s frame: %s", payload.get("type"), exc.error_count())
        return None
