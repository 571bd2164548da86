# A tool to start, stop, restart or kill a server.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import TYPE_CHECKING, Type

from pydantic import BaseModel, Field

from .base_tool import BaseTool, ToolFailure, ToolOutput
from asuna.models.panel import PowerSignal
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.models.common import Conversation


class PowerSignalInput(BaseModel):
    """Input model for the power signal tool."""
    server: str = Field(..., description="The short ID or the name of the server.")
    signal: PowerSignal = Field(..., description="The power action to perform.")


class PowerSignalTool(BaseTool):
    name: str = "send_power_signal"
    description: str = "Start, stop, restart or kill a server. 'kill' force-stops it and may lose unsaved data; " \
    "only use it when the user explicitly asks to kill the server."
    args_schema: Type[BaseModel] = PowerSignalInput

    async def execute(self, conversation: "Conversation", server: str, signal: str) -> ToolOutput:
        console.info(f"Executing tool '{self.name}': '{signal}' -> '{server}'")
        target = await self.resolve_server(server)

        if not await self.gateway.send_power_signal(target.identifier, signal):
            raise ToolFailure(
                f"The panel did not accept the '{signal}' signal for '{target.name}'.",
                reason="backend_unavailable",
                identifier=target.identifier,
            )
        return ToolOutput(data={"name": target.name, "identifier": target.identifier, "signal": signal, "sent": True})
