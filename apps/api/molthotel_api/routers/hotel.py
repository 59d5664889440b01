"""WebSocket protocol endpoint and read-only hotel views."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from ..services.connection_hub import ConnectionHub
from ..services.hotel_context import get_hub, get_world
from ..services.protocol import (
    ChatMessage,
    InboundMessage,
    InteractMessage,
    MoveMessage,
    RegisterMessage,
    RequestAiChatMessage,
    parse_inbound,
)
from ..services.runtime_scheduler import hotel_runtime_scheduler_status

from packages.molthotel_core.sim.hotel import HotelWorld


logger = logging.getLogger("molthotel_api.hotel")

router = APIRouter(prefix="/api/v1/hotel", tags=["hotel"])
ws_router = APIRouter(tags=["hotel-ws"])


async def _dispatch(
    *,
    world: HotelWorld,
    hub: ConnectionHub,
    connection_id: str,
    message: InboundMessage,
) -> None:
    agent_id = hub.agent_for(connection_id)

    if isinstance(message, RegisterMessage):
        if agent_id is not None:
            return
        await world.register_agent(
            name=message.name,
            personality=message.personality,
            owner_name=message.owner_name,
            owner_webhook=message.owner_webhook,
            avatar=message.avatar,
            bind=lambda agent: hub.bind(connection_id, agent.agent_id),
        )
        return

    if agent_id is None:
        return
    if isinstance(message, MoveMessage):
        await world.move_agent(agent_id, message.x, message.y)
    elif isinstance(message, ChatMessage):
        await world.post_chat(agent_id, message.message)
    elif isinstance(message, RequestAiChatMessage):
        await world.request_ai_chat(agent_id)
    elif isinstance(message, InteractMessage):
        await world.interact(agent_id, message.target_id, message.action)


def _frame_text(frame: dict[str, object]) -> str | None:
    text = frame.get("text")
    if isinstance(text, str):
        return text
    data = frame.get("bytes")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return None


async def _handle(
    *,
    world: HotelWorld,
    hub: ConnectionHub,
    connection_id: str,
    message: InboundMessage,
) -> None:
    try:
        await _dispatch(world=world, hub=hub, connection_id=connection_id, message=message)
    except Exception as exc:
        logger.exception("[HOTEL] Failed to handle %s: %s", type(message).__name__, exc)


async def _serve_connection(websocket: WebSocket) -> None:
    await websocket.accept()
    hub = get_hub()
    world = get_world()
    connection_id = hub.add(websocket)
    # Handlers that wait on the chat backend; later frames keep flowing meanwhile.
    generating: set[asyncio.Task] = set()
    logger.info("[HOTEL] New connection %s", connection_id[:8])
    try:
        await hub.send_direct(connection_id, world.initial_state())
        while True:
            frame = await websocket.receive()
            if frame.get("type") == "websocket.disconnect":
                break
            raw = _frame_text(frame)
            if raw is None:
                continue
            message = parse_inbound(raw)
            if message is None:
                continue
            handler = _handle(world=world, hub=hub, connection_id=connection_id, message=message)
            if isinstance(message, RequestAiChatMessage):
                task = asyncio.create_task(handler)
                generating.add(task)
                task.add_done_callback(generating.discard)
            else:
                await handler
    except WebSocketDisconnect:
        pass
    finally:
        for task in list(generating):
            task.cancel()
        if generating:
            await asyncio.gather(*generating, return_exceptions=True)
        agent_id = hub.discard(connection_id)
        if agent_id is not None:
            await world.disconnect(agent_id)


@ws_router.websocket("/ws")
async def hotel_socket(websocket: WebSocket) -> None:
    await _serve_connection(websocket)


@ws_router.websocket("/")
async def hotel_socket_root(websocket: WebSocket) -> None:
    await _serve_connection(websocket)


@router.get("/agents")
def list_agents() -> dict[str, object]:
    agents = [agent.public_dict() for agent in get_world().registry]
    return {"ok": True, "count": len(agents), "items": agents}


@router.get("/agents/{agent_id}/relationships")
def list_agent_relationships(agent_id: str) -> dict[str, object]:
    world = get_world()
    if world.registry.get(agent_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown agent: {agent_id}")
    items = [
        rel.as_dict()
        for rel in world.relationships
        if agent_id in rel.agent_ids
    ]
    return {"ok": True, "agent_id": agent_id, "count": len(items), "items": items}


@router.get("/relationships")
def list_relationships(include_strangers: bool = Query(default=False)) -> dict[str, object]:
    items = get_world().relationship_entries(include_strangers=include_strangers)
    return {"ok": True, "count": len(items), "items": items}


@router.get("/chats")
def list_recent_chats(
    per_pair: int = Query(default=10, ge=1, le=50),
    limit: int = Query(default=30, ge=1, le=200),
) -> dict[str, object]:
    turns = get_world().histories.recent(per_pair=per_pair, limit=limit)
    items = [turn.as_dict() for turn in turns]
    return {"ok": True, "count": len(items), "items": items}


@router.get("/scheduler/status")
def scheduler_status() -> dict[str, object]:
    world = get_world()
    return {
        "ok": True,
        "scheduler": hotel_runtime_scheduler_status(),
        "pending_replies": len(world.pending_replies),
        "pending_timers": len(world.timers),
        "connections": get_hub().connection_count(),
    }
