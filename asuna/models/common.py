# The module is to define the conversation models shared by the orchestrator and tools.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["system", "user",
               "assistant", "tool"]


class ToolCall(BaseModel):
    """
    Represents a tool call made by the assistant, including the function name and arguments.
    Attributes:
        id (str): The opaque ID the reasoning engine gave this call.
        function (dict): The function name and its JSON-encoded arguments.
        type (str): The type of the tool call, e.g., 'function'.
    """
    id: str = Field(..., description="The unique ID for the tool call.")
    function: Dict[str, Any] = Field(..., description="The function name and arguments.")
    type: str = Field(default="function", description="The type of the tool call, e.g., 'function'.")

    @property
    def name(self) -> str:
        return self.function.get("name", "")

    def parse_arguments(self) -> Dict[str, Any]:
        """
        Decodes the argument payload. Raises ValueError when it is not a JSON object.
        """
        raw = self.function.get("arguments") or "{}"
        if isinstance(raw, dict):
            return raw
        arguments = json.loads(raw)
        if not isinstance(arguments, dict):
            raise ValueError("Tool arguments must be a JSON object.")
        return arguments


class Message(BaseModel):
    """
    Represents a message in the conversation, which can be from the system, user, assistant, or tool.
    Attributes:
        role (Role): The role of the message sender.
        content (Optional[str]): The text of the message.
        tool_calls (Optional[List[ToolCall]]): Tool invocations requested by the assistant.
        tool_call_id (Optional[str]): The ID of the tool call this message is a result of.
    """
    role: Role = Field(..., description="The role of the message sender.")
    content: Optional[str] = Field(default=None, description="The content of the message.")
    tool_calls: Optional[List[ToolCall]] = Field(default=None, description="A list of tool calls requested by the assistant.")
    tool_call_id: Optional[str] = Field(default=None, description="The ID of the tool call this message is a result of.")


class ToolResult(BaseModel):
    """
    The outcome of one tool invocation, fed back to the reasoning engine.
    Attributes:
        call_id (str): ID of the originating tool call.
        name (str): Tool name.
        ok (bool): Whether the tool succeeded.
        data (Any): Success payload.
        error (Optional[str]): Human-readable error on failure.
        reason (Optional[str]): Machine-readable failure code, e.g. 'ambiguous'.
        details (Dict[str, Any]): Structured failure details such as candidate names.
        message_to_user (Optional[str]): Text to show the user verbatim.
    """
    call_id: str
    name: str
    ok: bool
    data: Any = None
    error: Optional[str] = None
    reason: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    message_to_user: Optional[str] = None

    def payload(self) -> Dict[str, Any]:
        if self.ok:
            body: Dict[str, Any] = {"ok": True, "data": self.data}
        else:
            body = {"ok": False, "error": self.error, "reason": self.reason, **self.details}
        if self.message_to_user:
            body["message_to_user"] = self.message_to_user
        return body

    def to_message(self) -> Message:
        return Message(
            role="tool",
            tool_call_id=self.call_id,
            content=json.dumps(self.payload(), ensure_ascii=False, default=str),
        )


class Conversation(BaseModel):
    """
    The message history of a single orchestration run. It only lives as long as
    the run; 'channel' is where out-of-band updates for this run are posted.
    """
    messages: List[Message] = Field(default_factory=list, description="The history of messages in the conversation.")
    channel: Optional[Any] = Field(default=None, exclude=True, description="Output channel of the originating request.")

    def for_llm(self) -> List[Dict[str, Any]]:
        return [msg.model_dump(exclude_none=True) for msg in self.messages]
