#!/usr/bin/env python3

from __future__ import annotations

import json
import random
import unittest

from apps.api.molthotel_api.services.connection_hub import ConnectionHub
from apps.api.molthotel_api.services.protocol import (
    ChatMessage,
    InteractMessage,
    MoveMessage,
    RegisterMessage,
    RequestAiChatMessage,
    parse_inbound,
)
from packages.molthotel_core.llm.chat import ChatGenerator
from packages.molthotel_core.llm.providers import ProviderExecutionResult
from packages.molthotel_core.sim.clock import ManualClock
from packages.molthotel_core.sim.hotel import HotelWorld


class FakeSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.sent: list[dict] = []
        self.broken = broken

    async def send_text(self, message: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(message))

    def types(self) -> list[str]:
        return [event["type"] for event in self.sent]


class ConnectionHubTests(unittest.IsolatedAsyncioTestCase):
    async def test_broadcast_reaches_every_socket_except_excluded_agent(self) -> None:
        hub = ConnectionHub()
        first, second, anonymous = FakeSocket(), FakeSocket(), FakeSocket()
        first_id = hub.add(first)
        second_id = hub.add(second)
        hub.add(anonymous)
        hub.bind(first_id, "agent-1")
        hub.bind(second_id, "agent-2")

        await hub.broadcast({"type": "AGENT_JOINED"}, exclude_id="agent-1")
        await hub.send_to("agent-1", {"type": "REGISTERED"})
        await hub.send_to("nobody", {"type": "REGISTERED"})

        self.assertEqual(first.types(), ["REGISTERED"])
        self.assertEqual(second.types(), ["AGENT_JOINED"])
        self.assertEqual(anonymous.types(), ["AGENT_JOINED"])

    async def test_failed_send_drops_socket_but_keeps_binding(self) -> None:
        hub = ConnectionHub()
        broken, healthy = FakeSocket(broken=True), FakeSocket()
        broken_id = hub.add(broken)
        hub.add(healthy)
        hub.bind(broken_id, "agent-1")

        with self.assertLogs("molthotel_api.connection_hub", level="INFO"):
            await hub.broadcast({"type": "AGENT_MOVED"})
        self.assertEqual(healthy.types(), ["AGENT_MOVED"])
        self.assertEqual(hub.connection_count(), 1)
        self.assertEqual(hub.agent_for(broken_id), "agent-1")

        self.assertEqual(hub.discard(broken_id), "agent-1")
        self.assertIsNone(hub.agent_for(broken_id))
        self.assertIsNone(hub.discard(broken_id))

    async def test_bind_ignores_unknown_connection(self) -> None:
        hub = ConnectionHub()
        hub.bind("missing", "agent-1")
        self.assertIsNone(hub.agent_for("missing"))

    async def test_joins_and_departures_fan_out_to_other_clients(self) -> None:
        hub = ConnectionHub()
        world = HotelWorld(
            sink=hub,
            clock=ManualClock(),
            rng=random.Random(4),
            chat=ChatGenerator(
                rng=random.Random(4),
                provider_invoker=lambda **_: ProviderExecutionResult(text="hey", model_name="fake:model"),
            ),
        )
        watcher, joiner = FakeSocket(), FakeSocket()
        hub.add(watcher)
        joiner_id = hub.add(joiner)

        agent = await world.register_agent(name="Nova", bind=lambda a: hub.bind(joiner_id, a.agent_id))
        await world.move_agent(agent.agent_id, 12, 12)

        self.assertEqual(joiner.types(), ["REGISTERED", "AGENT_MOVED"])
        self.assertEqual(watcher.types(), ["AGENT_JOINED", "AGENT_MOVED"])
        self.assertEqual(watcher.sent[0]["agent"]["name"], "Nova")

        self.assertEqual(hub.discard(joiner_id), agent.agent_id)
        await world.disconnect(agent.agent_id)
        self.assertEqual(watcher.sent[-1], {"type": "AGENT_LEFT", "agentId": agent.agent_id})
        self.assertEqual(len(joiner.sent), 2)


class ProtocolTests(unittest.TestCase):
    def test_known_message_types_parse_with_wire_aliases(self) -> None:
        register = parse_inbound(
            json.dumps({"type": "AGENT_REGISTER", "name": "Nova", "ownerName": "Sam", "ownerWebhook": "https://x"})
        )
        self.assertIsInstance(register, RegisterMessage)
        self.assertEqual((register.owner_name, register.owner_webhook), ("Sam", "https://x"))
        self.assertIsInstance(parse_inbound('{"type": "MOVE", "x": 3, "y": 4}'), MoveMessage)
        self.assertIsInstance(parse_inbound('{"type": "CHAT", "message": "hi"}'), ChatMessage)
        self.assertIsInstance(parse_inbound('{"type": "REQUEST_AI_CHAT"}'), RequestAiChatMessage)
        interact = parse_inbound('{"type": "INTERACT", "targetId": "abc"}')
        self.assertIsInstance(interact, InteractMessage)
        self.assertIsNone(interact.action)

    def test_long_free_text_fields_are_accepted(self) -> None:
        personality = "loves karaoke and late-night snacks " * 20
        register = parse_inbound(
            json.dumps({"type": "AGENT_REGISTER", "name": "N" * 150, "personality": personality, "avatar": "/" + "a" * 300})
        )
        self.assertIsInstance(register, RegisterMessage)
        self.assertEqual(register.personality, personality)
        interact = parse_inbound(json.dumps({"type": "INTERACT", "targetId": "abc", "action": "twirled " * 40}))
        self.assertEqual(interact.action, "twirled " * 40)
        chat = parse_inbound(json.dumps({"type": "CHAT", "message": "la" * 2000}))
        self.assertEqual(len(chat.message), 4000)

    def test_unusable_frames_are_dropped(self) -> None:
        for raw in ("not json", "[1, 2]", '{"type": "DANCE"}', '{"type": "MOVE", "x": "left"}', '{"type": "CHAT"}'):
            self.assertIsNone(parse_inbound(raw), raw)


if __name__ == "__main__":
    unittest.main()
