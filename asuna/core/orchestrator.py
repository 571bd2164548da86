# asuna/core/orchestrator.py
# The tool-calling dialogue loop that turns one utterance into an answer.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import TYPE_CHECKING, List, Optional

from asuna.models.common import Conversation, Message, ToolResult
from asuna.services.llm_connector import ReasoningEngineError, ReasoningEngineUnavailable
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.core.tool_registry import ToolRegistry
    from asuna.services.channels import OutputChannel
    from asuna.services.llm_connector import OpenAIReasoningEngine

SYSTEM_PROMPT = """You are Asuna, a friendly assistant that manages game servers on a Pterodactyl panel for the people in this chat.

Rules:
1. Always use the provided tools to get up-to-date information. Never invent server names, IDs, states or numbers.
2. When the user names a server, pass that name (or ID) as-is to the tool; the tool resolves it.
3. If a tool reports 'ambiguous', list the candidate names and ask the user which one they mean. Do not pick one yourself.
4. If a tool reports 'not_found', say so and suggest the closest available names from the result.
5. To create a server, use create_server. If you are unsure of the exact server type, call list_server_types first.
   Only pass environment overrides the user asked for; use get_server_type_variables to find valid keys.
6. Only use the 'kill' power signal when the user explicitly asks to kill a server.
7. Summarise tool results in a few short lines. Never paste raw JSON.
8. If a tool result contains 'message_to_user', relay that message to the user.
"""

GREETING = "Hey there! How can I help you manage your servers today?"
LOOP_APOLOGY = "Sorry, I got stuck in a loop trying to work that out. Could you try asking in a simpler way?"
EMPTY_RESPONSE_APOLOGY = "I processed the information, but I'm having a little trouble phrasing my response."
ENGINE_FAILURE_APOLOGY = "I encountered an issue while trying to process your request with the language model and its tools."
ENGINE_UNAVAILABLE_APOLOGY = "I'm sorry, but my connection to the advanced language model is currently unavailable."


class DialogueOrchestrator:
    """
    Runs the loop: model turn -> tool batch -> model turn ... -> final text.

    Each model turn sees the whole conversation and the tool catalog. Tool
    calls from one turn run in the order given and all their results are
    recorded before the next turn. The loop is capped at max_iterations model
    round trips; tool calls requested on the last allowed round trip are not
    executed and the user gets LOOP_APOLOGY.
    """

    def __init__(self,
                 engine: "OpenAIReasoningEngine",
                 registry: "ToolRegistry",
                 max_iterations: int = 5,
                 system_prompt: str = SYSTEM_PROMPT):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self._engine = engine
        self._registry = registry
        self._max_iterations = max_iterations
        self._system_prompt = system_prompt

    async def run(self, user_utterance: str, channel: Optional["OutputChannel"] = None) -> str:
        conversation = Conversation(
            messages=[
                Message(role="system", content=self._system_prompt),
                Message(role="user", content=user_utterance),
            ],
            channel=channel,
        )
        try:
            return await self._loop(conversation)
        except ReasoningEngineUnavailable:
            console.error("Reasoning engine is not configured; cannot answer.")
            return ENGINE_UNAVAILABLE_APOLOGY
        except ReasoningEngineError:
            console.exception("Reasoning engine failed during orchestration.")
            return ENGINE_FAILURE_APOLOGY
        except Exception:
            console.exception("Unexpected error during orchestration.")
            return ENGINE_FAILURE_APOLOGY

    async def _loop(self, conversation: Conversation) -> str:
        tool_definitions = self._registry.get_definitions()

        for round_idx in range(self._max_iterations):
            console.rule(f"Model round {round_idx + 1}/{self._max_iterations}")
            reply = await self._engine.complete(conversation.for_llm(), tool_definitions)

            if not reply.tool_calls:
                if reply.content and reply.content.strip():
                    console.success("Model returned a final answer.")
                    return reply.content.strip()
                console.error("Model returned neither text nor tool calls.")
                return EMPTY_RESPONSE_APOLOGY

            if round_idx == self._max_iterations - 1:
                break

            console.info(f"Model requested {len(reply.tool_calls)} tool call(s): {[c.name for c in reply.tool_calls]}")
            conversation.messages.append(reply)
            results = await self._execute_batch(reply, conversation)
            conversation.messages.extend(result.to_message() for result in results)

            direct = [r.message_to_user for r in results]
            if all(direct):
                console.info("Every tool result carries a message for the user; answering directly.")
                return "\n\n".join(direct)

        console.warning(f"Reached the limit of {self._max_iterations} model round trips.")
        return LOOP_APOLOGY

    async def _execute_batch(self, reply: Message, conversation: Conversation) -> List[ToolResult]:
        results = []
        for call in reply.tool_calls or []:
            results.append(await self._registry.dispatch(call, conversation))
        return results


async def handle_user_utterance(orchestrator: DialogueOrchestrator, text: str,
                                channel: Optional["OutputChannel"] = None) -> str:
    """
    Entry point for the calling surface. Empty input gets a greeting and 'ping'
    is answered locally; everything else goes through the orchestrator.
    """
    text = (text or "").strip()
    if not text:
        return GREETING
    if text.lower() == "ping":
        return "Pong!"
    return await orchestrator.run(text, channel=channel)
