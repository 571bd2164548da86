# A tool to fetch the live status and resource usage of one server.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import TYPE_CHECKING, Type

from pydantic import BaseModel, Field

from .base_tool import BaseTool, ToolFailure, ToolOutput
from asuna.utils.formatting import format_bytes, format_uptime
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.models.common import Conversation


class ServerResourcesInput(BaseModel):
    """Input model for the server resources tool."""
    server: str = Field(..., description="The short ID (e.g. '261bf2bb') or the name (e.g. 'My Minecraft Server') of the server.")


class ServerResourcesTool(BaseTool):
    """
    Reports current state, CPU, memory, disk, network and uptime of a server.
    Raw figures are returned next to human-readable ones so the model can
    summarise without doing unit conversions itself.
    """
    name: str = "get_server_resources"
    description: str = "Get detailed resource usage (CPU, memory, disk, network, uptime) and the current " \
    "state of one server. Use when the user asks for the status or details of a particular server by name or ID."
    args_schema: Type[BaseModel] = ServerResourcesInput

    async def execute(self, conversation: "Conversation", server: str) -> ToolOutput:
        console.info(f"Executing tool '{self.name}' for server: '{server}'")
        target = await self.resolve_server(server)

        state = await self.gateway.get_server_resources(target.identifier)
        if state is None:
            raise ToolFailure(
                f"Found server '{target.name}' but could not fetch its resources.",
                reason="backend_unavailable",
                identifier=target.identifier,
            )

        usage = state.resources
        return ToolOutput(data={
            "name": target.name,
            "identifier": target.identifier,
            "current_state": state.current_state,
            "is_suspended": state.is_suspended,
            "cpu_percent": round(usage.cpu_absolute, 2),
            "memory": format_bytes(usage.memory_bytes),
            "disk": format_bytes(usage.disk_bytes),
            "network_rx": format_bytes(usage.network_rx_bytes),
            "network_tx": format_bytes(usage.network_tx_bytes),
            "uptime": format_uptime(usage.uptime),
            "raw": usage.model_dump(),
        })
