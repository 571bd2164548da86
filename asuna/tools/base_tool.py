# The module is to define the base class for all tools in the application.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel

from asuna.core.config import Settings
from asuna.core.provisioning import Clock, SystemClock
from asuna.core.resolver import Ambiguous, NotFound, Resolved, resolve_server, resolve_server_type
from asuna.models.panel import Category, ServerSummary, ServerType

if TYPE_CHECKING:
    from asuna.core.provisioning import MonitorPool
    from asuna.models.common import Conversation
    from asuna.services.panel_gateway import PanelGateway


@dataclass
class ToolContext:
    """Process-wide collaborators shared by every tool instance."""
    settings: Settings
    gateway: "PanelGateway"
    monitor_pool: "MonitorPool"
    clock: Clock = field(default_factory=SystemClock)


class ToolOutput(BaseModel):
    """
    Successful tool output.
    Attributes:
        data (Any): JSON-serialisable payload for the reasoning engine.
        message_to_user (Optional[str]): Text to show the user verbatim.
    """
    data: Any = None
    message_to_user: Optional[str] = None


class ToolFailure(Exception):
    """
    A recoverable tool failure, reported to the reasoning engine as a
    structured error payload instead of propagating.
    Attributes:
        message (str): What went wrong, phrased for the model.
        reason (str): Machine-readable code, e.g. 'not_found' or 'ambiguous'.
        details (dict): Extra structured fields such as candidate names.
    """
    def __init__(self, message: str, reason: str = "error", **details: Any):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = details


class BaseTool(ABC):
    """
    Abstract Base Class for all tools.

    Attributes:
        name (str): The name of the tool, used for identification.
        description (str): What the tool does, written for the reasoning engine.
        args_schema (Type[BaseModel]): A Pydantic model defining the arguments
            that the tool accepts, validated before execution.
    """
    name: str
    description: str
    args_schema: Type[BaseModel]

    def __init__(self, context: ToolContext):
        self.context = context

    @property
    def gateway(self) -> "PanelGateway":
        return self.context.gateway

    @abstractmethod
    async def execute(self, conversation: "Conversation", **kwargs) -> ToolOutput:
        """
        The core logic of the tool.

        Args:
            conversation: The current conversation, including its output channel.
            **kwargs: The arguments for the tool, validated against args_schema.

        Returns:
            A ToolOutput on success.

        Raises:
            ToolFailure: For recoverable, user-explainable failures.
        """
        pass

    def get_definition(self) -> Dict[str, Any]:
        """
        Returns the tool's definition in a format compliant with OpenAI's
        function-calling specification.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.args_schema.model_json_schema()
            }
        }

    async def resolve_server(self, query: str) -> ServerSummary:
        """Resolves a server by ID or name, or raises a not_found/ambiguous ToolFailure."""
        servers = await self.gateway.list_servers()
        outcome = resolve_server(query, servers)
        if isinstance(outcome, Resolved):
            return outcome.match
        raise resolution_failure(outcome, available_servers=[f"{s.name} ({s.identifier})" for s in servers])

    async def resolve_server_type(self, query: str, category: Optional[str] = None) -> Tuple[Category, ServerType]:
        """Resolves a server type, optionally within a category, or raises a ToolFailure."""
        categories = await self.gateway.list_categories_with_types()
        if not categories:
            raise ToolFailure("No server types could be loaded from the panel.", reason="backend_unavailable")

        outcome = resolve_server_type(query, categories, category_query=category)
        if isinstance(outcome, Resolved):
            return outcome.match
        if outcome.entity == "category":
            raise resolution_failure(outcome, available_categories=[c.name for c in categories])
        raise resolution_failure(outcome, available_types=_type_labels(categories))


def resolution_failure(outcome: Union[Ambiguous, NotFound], **available: Any) -> ToolFailure:
    kind = outcome.entity or "entry"
    if isinstance(outcome, Ambiguous):
        return ToolFailure(
            f"Several entries match {kind} '{outcome.query}'. Ask the user which one they mean.",
            reason="ambiguous",
            query=outcome.query,
            candidates=outcome.candidates,
        )
    return ToolFailure(
        f"The {kind} '{outcome.query}' was not found.",
        reason="not_found",
        query=outcome.query,
        **available,
    )


def _type_labels(categories: List[Category]) -> List[str]:
    return [f"{t.name} ({c.name})" for c in categories for t in c.types]
