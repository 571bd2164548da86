"""tests/conftest.py

Shared fakes and fixtures: an in-memory panel gateway, a scripted reasoning
engine, a recording output channel and a virtual clock.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from asuna.core.config import Settings
from asuna.core.orchestrator import DialogueOrchestrator
from asuna.core.provisioning import MonitorPool
from asuna.core.tool_registry import ToolRegistry
from asuna.models.common import Message, ToolCall
from asuna.models.panel import (
    Allocation,
    Category,
    CreatedServer,
    CreateServerRequest,
    ResourceState,
    ServerSummary,
    ServerType,
    TypeDetails,
    TypeVariable,
)
from asuna.tools.base_tool import ToolContext


def make_server(name: str, identifier: str, status: Optional[str] = None, is_installing: bool = False,
                uuid: Optional[str] = None) -> ServerSummary:
    return ServerSummary(
        name=name,
        identifier=identifier,
        uuid=uuid or f"{identifier}-0000-uuid",
        status=status,
        is_installing=is_installing,
    )


def tool_call_message(*calls: tuple) -> Message:
    """Builds an assistant message requesting (name, arguments) tool calls in order."""
    return Message(
        role="assistant",
        tool_calls=[
            ToolCall(id=f"call_{index}", function={"name": name, "arguments": json.dumps(arguments)})
            for index, (name, arguments) in enumerate(calls)
        ],
    )


def tool_payloads(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Decodes every tool-result message of a conversation, in order."""
    return [json.loads(m["content"]) for m in messages if m["role"] == "tool"]


class FakeGateway:
    """
    In-memory Backend Gateway. 'listings' and 'resource_states' are scripts:
    each call consumes the next entry and the last entry repeats. Every call
    yields to the event loop once, like a real network round trip.
    """

    def __init__(self,
                 servers: Optional[List[ServerSummary]] = None,
                 categories: Optional[List[Category]] = None,
                 type_details: Optional[Dict[int, TypeDetails]] = None,
                 allocation: Optional[Allocation] = None,
                 created: Optional[CreatedServer] = None):
        self.listings: List[List[ServerSummary]] = [servers or []]
        self.resource_states: List[Optional[ResourceState]] = [None]
        self.categories = categories or []
        self.type_details = type_details or {}
        self.allocation = allocation
        self.created = created
        self.power_result = True
        self.calls: List[tuple] = []
        self.create_requests: List[CreateServerRequest] = []

    @staticmethod
    def _next(script: list):
        return script.pop(0) if len(script) > 1 else script[0]

    def calls_to(self, method: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == method]

    async def list_servers(self) -> List[ServerSummary]:
        await asyncio.sleep(0)
        self.calls.append(("list_servers",))
        return list(self._next(self.listings))

    async def get_server_resources(self, server_id: str) -> Optional[ResourceState]:
        await asyncio.sleep(0)
        self.calls.append(("get_server_resources", server_id))
        return self._next(self.resource_states)

    async def send_power_signal(self, server_id: str, signal: str) -> bool:
        await asyncio.sleep(0)
        self.calls.append(("send_power_signal", server_id, signal))
        return self.power_result

    async def list_categories_with_types(self) -> List[Category]:
        await asyncio.sleep(0)
        self.calls.append(("list_categories_with_types",))
        return list(self.categories)

    async def get_type_details(self, category_id: int, type_id: int) -> Optional[TypeDetails]:
        await asyncio.sleep(0)
        self.calls.append(("get_type_details", category_id, type_id))
        return self.type_details.get(type_id)

    async def find_free_allocation(self, node_id: int) -> Optional[Allocation]:
        await asyncio.sleep(0)
        self.calls.append(("find_free_allocation", node_id))
        return self.allocation

    async def create_server(self, request: CreateServerRequest) -> Optional[CreatedServer]:
        await asyncio.sleep(0)
        self.calls.append(("create_server", request.name))
        self.create_requests.append(request)
        return self.created

    async def aclose(self):
        pass


Step = Union[Message, Callable[[List[Dict[str, Any]]], Message]]


class ScriptedEngine:
    """
    Reasoning engine replaying a script. Each entry is a Message or a callable
    receiving the conversation sent to the model. The last entry repeats.
    """

    def __init__(self, *steps: Step):
        self.steps = list(steps)
        self.requests: List[List[Dict[str, Any]]] = []
        self.tool_specs: List[Optional[List[Dict[str, Any]]]] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def complete(self, messages, tools=None) -> Message:
        self.requests.append(list(messages))
        self.tool_specs.append(tools)
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        if isinstance(step, Exception):
            raise step
        return step(messages) if callable(step) else step

    async def aclose(self):
        pass


class RecordingChannel:
    def __init__(self):
        self.sent: List[str] = []

    async def send(self, text: str) -> None:
        self.sent.append(text)


class FakeClock:
    """Virtual clock: sleeping advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.current = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds
        await asyncio.sleep(0)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        PTERODACTYL_API_URL="https://panel.test",
        PTERODACTYL_CLIENT_API_KEY="client-key",
        PTERODACTYL_APP_API_KEY="app-key",
        PTERODACTYL_DEFAULT_OWNER_ID=1,
        PTERODACTYL_DEFAULT_NODE_ID=3,
        OPENAI_API_KEY="sk-test",
    )


@pytest.fixture
def minecraft_catalog() -> Dict[str, Any]:
    paper = ServerType(id=5, nest=1, name="Paper", docker_image="ghcr.io/java:21", startup="java -jar server.jar")
    forge = ServerType(id=6, nest=1, name="Forge Enhanced", docker_image="ghcr.io/java:17", startup="java -jar forge.jar")
    rust = ServerType(id=9, nest=2, name="Rust", docker_image="ghcr.io/rust", startup="./RustDedicated")
    categories = [
        Category(id=1, name="Minecraft", types=[paper, forge]),
        Category(id=2, name="Rust", types=[rust]),
    ]
    details = {
        5: TypeDetails(
            **paper.model_dump(),
            variables=[
                TypeVariable(name="Version", env_variable="MINECRAFT_VERSION", default_value="latest"),
                TypeVariable(name="Jar", env_variable="SERVER_JARFILE", default_value="server.jar"),
                TypeVariable(name="Build", env_variable="BUILD_NUMBER", default_value="latest"),
            ],
        ),
    }
    return {"categories": categories, "details": details}


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def monitor_pool() -> MonitorPool:
    return MonitorPool()


@pytest.fixture
def registry(settings: Settings, gateway: FakeGateway, monitor_pool: MonitorPool, clock: FakeClock) -> ToolRegistry:
    return ToolRegistry(ToolContext(settings=settings, gateway=gateway, monitor_pool=monitor_pool, clock=clock))


@pytest.fixture
def make_orchestrator(registry: ToolRegistry) -> Callable[..., DialogueOrchestrator]:
    def _make(engine: ScriptedEngine, max_iterations: int = 5) -> DialogueOrchestrator:
        return DialogueOrchestrator(engine, registry, max_iterations=max_iterations)
    return _make
