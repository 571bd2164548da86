# Builds the long-lived collaborators of the assistant from one Settings object.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from dataclasses import dataclass
from typing import Optional

from asuna.core.config import Settings
from asuna.core.orchestrator import DialogueOrchestrator, handle_user_utterance
from asuna.core.provisioning import MonitorPool
from asuna.core.tool_registry import ToolRegistry
from asuna.services.channels import OutputChannel, channel_for
from asuna.services.llm_connector import OpenAIReasoningEngine
from asuna.services.panel_gateway import PanelGateway
from asuna.tools.base_tool import ToolContext
from asuna.utils.logger import console


@dataclass
class Runtime:
    settings: Settings
    gateway: PanelGateway
    engine: OpenAIReasoningEngine
    monitor_pool: MonitorPool
    registry: ToolRegistry
    orchestrator: DialogueOrchestrator

    async def handle(self, text: str, callback_url: Optional[str] = None) -> str:
        channel: OutputChannel = channel_for(callback_url, self.settings.NOTIFY_WEBHOOK_URL)
        return await handle_user_utterance(self.orchestrator, text, channel)

    async def aclose(self):
        await self.monitor_pool.shutdown()
        await self.gateway.aclose()
        await self.engine.aclose()


def report_configuration(settings: Settings):
    """Logs the effective settings and every degraded capability once at startup."""
    console.set_level(settings.LOG_LEVEL)
    console.display_data_as_table(settings.public_summary(), "Asuna configuration")
    problems = settings.configuration_problems()
    for problem in problems:
        console.warning(problem)
    if problems:
        console.display_warning_panel("Degraded capabilities", problems)


def build_runtime(settings: Settings) -> Runtime:
    report_configuration(settings)
    gateway = PanelGateway(settings)
    engine = OpenAIReasoningEngine(settings)
    monitor_pool = MonitorPool()
    registry = ToolRegistry(ToolContext(settings=settings, gateway=gateway, monitor_pool=monitor_pool))
    orchestrator = DialogueOrchestrator(engine, registry, max_iterations=settings.MAX_TOOL_ITERATIONS)
    return Runtime(
        settings=settings,
        gateway=gateway,
        engine=engine,
        monitor_pool=monitor_pool,
        registry=registry,
        orchestrator=orchestrator,
    )
