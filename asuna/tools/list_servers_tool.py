# A tool to list every server visible to the panel client key.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import TYPE_CHECKING, Type

from pydantic import BaseModel

from .base_tool import BaseTool, ToolFailure, ToolOutput
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.models.common import Conversation


class ListServersInput(BaseModel):
    """The tool takes no arguments."""


class ListServersTool(BaseTool):
    name: str = "list_servers"
    description: str = "Get a list of all game servers with their short ID and summary status " \
    "(installing, suspended, or ready). Useful for 'What servers do I have?'. For whether servers are running " \
    "or offline right now, use get_servers_online_status instead."
    args_schema: Type[BaseModel] = ListServersInput

    async def execute(self, conversation: "Conversation") -> ToolOutput:
        console.info(f"Executing tool '{self.name}'")
        servers = await self.gateway.list_servers()
        if not servers:
            raise ToolFailure("No servers were found, or the panel could not be reached.", reason="empty")

        return ToolOutput(data=[
            {
                "name": server.name,
                "identifier": server.identifier,
                "status": server.status or ("installing" if server.is_installing else "ready"),
                "is_installing": server.is_installing,
                "is_suspended": server.is_suspended,
                "default_port": server.default_port,
            }
            for server in servers
        ])
