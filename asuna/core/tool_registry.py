# Discovers the panel tools and dispatches tool calls to them.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

import importlib
import inspect
import pkgutil
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from asuna import tools as tools_package
from asuna.models.common import ToolCall, ToolResult
from asuna.tools.base_tool import BaseTool, ToolContext, ToolFailure
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.models.common import Conversation


def _discover_tool_classes() -> List[type]:
    """
    Scans the asuna.tools package, imports its modules and collects every
    concrete BaseTool subclass.
    """
    classes = []
    for _, modname, _ in pkgutil.iter_modules(tools_package.__path__, f"{tools_package.__name__}."):
        if modname.endswith(".base_tool"):
            continue
        module = importlib.import_module(modname)
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if issubclass(obj, BaseTool) and not inspect.isabstract(obj) and obj.__module__ == module.__name__:
                classes.append(obj)
    return classes


class ToolRegistry:
    """
    The tool catalog: maps each tool name to one handler instance.

    Dispatch never raises. Unknown names, undecodable or invalid arguments,
    ToolFailure and unexpected exceptions all become an error ToolResult, so
    one failing call cannot stop the rest of a batch.
    """

    def __init__(self, context: ToolContext, tool_classes: Optional[Iterable[type]] = None):
        self.tools: Dict[str, BaseTool] = {}
        for tool_class in tool_classes if tool_classes is not None else _discover_tool_classes():
            self.register(tool_class(context))
        console.success(f"Tool discovery complete. Found {len(self.tools)} tools: {list(self.tools.keys())}")

    def register(self, tool: BaseTool):
        if tool.name in self.tools:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        self.tools[tool.name] = tool

    def get_definitions(self) -> List[Dict[str, Any]]:
        """Returns the OpenAI function specs of every registered tool."""
        return [tool.get_definition() for tool in self.tools.values()]

    async def dispatch(self, call: ToolCall, conversation: "Conversation") -> ToolResult:
        tool = self.tools.get(call.name)
        if tool is None:
            console.warning(f"Model tried to call unknown tool: {call.name}")
            return ToolResult(call_id=call.id, name=call.name, ok=False,
                              error=f"Unknown tool: {call.name}", reason="unknown_tool")

        try:
            arguments = tool.args_schema.model_validate(call.parse_arguments())
        except (ValueError, ValidationError) as e:
            console.warning(f"Invalid arguments for tool '{call.name}': {e}")
            return ToolResult(call_id=call.id, name=call.name, ok=False,
                              error=f"Invalid arguments: {e}", reason="invalid_arguments")

        try:
            output = await tool.execute(conversation=conversation, **arguments.model_dump())
        except ToolFailure as e:
            console.warning(f"Tool '{call.name}' failed: {e.message}")
            return ToolResult(call_id=call.id, name=call.name, ok=False,
                              error=e.message, reason=e.reason, details=e.details)
        except Exception as e:
            console.exception(f"Error executing tool '{call.name}'")
            return ToolResult(call_id=call.id, name=call.name, ok=False,
                              error=f"Unexpected error: {e}", reason="internal_error")

        console.success(f"Tool '{call.name}' executed successfully.")
        return ToolResult(call_id=call.id, name=call.name, ok=True,
                          data=output.data, message_to_user=output.message_to_user)
