# Tools that browse the panel's catalog of installable server types.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import TYPE_CHECKING, Optional, Type

from pydantic import BaseModel, Field

from .base_tool import BaseTool, ToolFailure, ToolOutput, resolution_failure
from asuna.core.resolver import Resolved, resolve_category
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.models.common import Conversation


class ListServerTypesInput(BaseModel):
    """Input model for the list server types tool."""
    category: Optional[str] = Field(default=None, description="Optional category name or ID, e.g. 'Minecraft', to narrow the list.")


class ListServerTypesTool(BaseTool):
    name: str = "list_server_types"
    description: str = "List the categories of installable server software and the server types in each " \
    "(e.g. category 'Minecraft' with types 'Paper', 'Forge'). Use before creating a server when unsure of the exact type."
    args_schema: Type[BaseModel] = ListServerTypesInput

    async def execute(self, conversation: "Conversation", category: Optional[str] = None) -> ToolOutput:
        console.info(f"Executing tool '{self.name}' (category: {category or 'all'})")
        categories = await self.gateway.list_categories_with_types()
        if not categories:
            raise ToolFailure("No server types could be loaded from the panel.", reason="backend_unavailable")

        if category:
            scope = resolve_category(category, categories)
            if not isinstance(scope, Resolved):
                raise resolution_failure(scope, available_categories=[c.name for c in categories])
            categories = [scope.match]

        return ToolOutput(data=[
            {
                "category": c.name,
                "category_id": c.id,
                "types": [{"name": t.name, "id": t.id, "description": t.description} for t in c.types],
            }
            for c in categories
        ])


class TypeVariablesInput(BaseModel):
    """Input model for the server type variables tool."""
    server_type: str = Field(..., description="Name or ID of the server type, e.g. 'Paper'.")
    category: Optional[str] = Field(default=None, description="Optional category name or ID the type belongs to.")


class TypeVariablesTool(BaseTool):
    """
    Shows the configuration variables a server type accepts, with defaults.
    The model uses this to know which keys are valid in create_server's
    'environment' overrides.
    """
    name: str = "get_server_type_variables"
    description: str = "Get the configurable environment variables of a server type with their default values " \
    "and whether the user may change them. Use when the user wants to customise a new server (version, seed, etc.)."
    args_schema: Type[BaseModel] = TypeVariablesInput

    async def execute(self, conversation: "Conversation", server_type: str, category: Optional[str] = None) -> ToolOutput:
        console.info(f"Executing tool '{self.name}' for type: '{server_type}'")
        found_category, found_type = await self.resolve_server_type(server_type, category)

        details = await self.gateway.get_type_details(found_category.id, found_type.id)
        if details is None:
            raise ToolFailure(f"Could not load the configuration of '{found_type.name}'.", reason="backend_unavailable")

        return ToolOutput(data={
            "server_type": details.name,
            "category": found_category.name,
            "variables": [
                {
                    "name": v.name,
                    "env_variable": v.env_variable,
                    "default_value": v.default_value,
                    "description": v.description,
                    "user_editable": v.user_editable,
                    "rules": v.rules,
                }
                for v in details.variables if v.user_viewable
            ],
        })
