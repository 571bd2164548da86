# A tool that reports the live running state of every server.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import TYPE_CHECKING, Type

from pydantic import BaseModel

from .base_tool import BaseTool, ToolFailure, ToolOutput
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.models.common import Conversation


class OnlineStatusInput(BaseModel):
    """The tool takes no arguments."""


class OnlineStatusTool(BaseTool):
    """
    Combines the server listing with one live resource lookup per server.
    This is slower than list_servers, so the description steers the model to
    use it only for questions about what is online right now.
    """
    name: str = "get_servers_online_status"
    description: str = "Get the real-time state (running, offline, starting, stopping) and default port " \
    "of every server. Use for 'Which servers are online?' or 'What port is X on?'."
    args_schema: Type[BaseModel] = OnlineStatusInput

    async def execute(self, conversation: "Conversation") -> ToolOutput:
        console.info(f"Executing tool '{self.name}'")
        servers = await self.gateway.list_servers()
        if not servers:
            raise ToolFailure("No servers were found, or the panel could not be reached.", reason="empty")

        statuses = []
        for index, server in enumerate(servers, start=1):
            console.debug(f"Getting status for server {index}/{len(servers)}: {server.name} ({server.identifier})")
            state = await self.gateway.get_server_resources(server.identifier)
            statuses.append({
                "name": server.name,
                "identifier": server.identifier,
                "current_state": state.current_state if state else "unknown",
                "default_port": server.default_port,
            })
        return ToolOutput(data=statuses)
