# A tool to create a new server and hand it to a provisioning monitor.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import TYPE_CHECKING, Dict, Mapping, Optional, Type

from pydantic import BaseModel, Field

from .base_tool import BaseTool, ToolFailure, ToolOutput
from asuna.core.config import ConfigurationError, ProvisioningDefaults
from asuna.core.provisioning import ProvisioningMonitor
from asuna.models.panel import CreateServerRequest, EnvValue
from asuna.models.provisioning import ProvisioningSession
from asuna.services.channels import LogChannel
from asuna.utils.logger import console

if TYPE_CHECKING:
    from asuna.models.common import Conversation


def merge_environment(defaults: Mapping[str, str], overrides: Optional[Mapping[str, EnvValue]]) -> Dict[str, EnvValue]:
    """Type defaults overlaid by user overrides; the user's value wins on a shared key."""
    merged: Dict[str, EnvValue] = dict(defaults)
    merged.update(overrides or {})
    return merged


class CreateServerInput(BaseModel):
    """Input model for the create server tool."""
    server_name: str = Field(..., description="Name for the new server, as the user asked for it.")
    server_type: str = Field(..., description="Name or ID of the server type to install, e.g. 'Paper' or 'Vanilla Minecraft'.")
    category: Optional[str] = Field(default=None, description="Optional category name or ID of the server type, e.g. 'Minecraft'.")
    environment: Optional[Dict[str, EnvValue]] = Field(
        default=None,
        description="Optional overrides for the type's environment variables, keyed by env_variable name.",
    )


class CreateServerTool(BaseTool):
    """
    Creates a server from a server type and starts watching its installation.

    The request is assembled from the resolved type (image, startup command,
    variable defaults merged with the user's overrides), a free allocation on
    the configured default node and the configured default limits. Creation is
    refused before any panel call when the default owner or node is missing,
    or while another server with the same name is still being provisioned.
    """
    name: str = "create_server"
    description: str = "Create a new game server of a given type. Installation continues in the background " \
    "and the user is notified when the server is running. Confirm the server type with list_server_types if unsure."
    args_schema: Type[BaseModel] = CreateServerInput

    async def execute(self,
                      conversation: "Conversation",
                      server_name: str,
                      server_type: str,
                      category: Optional[str] = None,
                      environment: Optional[Dict[str, EnvValue]] = None) -> ToolOutput:
        console.info(f"Executing tool '{self.name}': '{server_name}' as '{server_type}'")
        settings = self.context.settings
        pool = self.context.monitor_pool

        try:
            defaults = settings.provisioning_defaults()
        except ConfigurationError as e:
            console.error(f"Refusing to create '{server_name}': {e}")
            raise ToolFailure(
                "Server creation is not configured on this assistant. Tell the user to ask an administrator.",
                reason="configuration_error",
                missing=e.missing,
            )

        if not pool.reserve(server_name):
            raise ToolFailure(
                f"A server named '{server_name}' is already being set up. Wait for it to finish.",
                reason="already_provisioning",
                server_name=server_name,
            )
        try:
            return await self._create(conversation, server_name, server_type, category, environment, defaults)
        finally:
            pool.release(server_name)

    async def _create(self,
                      conversation: "Conversation",
                      server_name: str,
                      server_type: str,
                      category: Optional[str],
                      environment: Optional[Dict[str, EnvValue]],
                      defaults: ProvisioningDefaults) -> ToolOutput:
        found_category, found_type = await self.resolve_server_type(server_type, category)
        details = await self.gateway.get_type_details(found_category.id, found_type.id)
        if details is None:
            raise ToolFailure(f"Could not load the configuration of '{found_type.name}'.", reason="backend_unavailable")

        allocation = await self.gateway.find_free_allocation(defaults.node_id)
        if allocation is None:
            raise ToolFailure("There is no free network port on the server node.", reason="no_allocation")

        request = CreateServerRequest(
            name=server_name,
            user=defaults.owner_id,
            egg=details.id,
            docker_image=details.docker_image,
            startup=details.startup,
            environment=merge_environment(details.default_environment(), environment),
            limits=defaults.limits,
            feature_limits=defaults.feature_limits,
            allocation={"default": allocation.id},
        )
        created = await self.gateway.create_server(request)
        if created is None:
            raise ToolFailure(f"The panel refused to create '{server_name}'.", reason="backend_unavailable")

        session = ProvisioningSession(
            server_uuid=created.uuid,
            identifier=created.identifier,
            name=created.name,
            started_at=self.context.clock.now(),
        )
        monitor = ProvisioningMonitor(
            session,
            gateway=self.gateway,
            channel=conversation.channel or LogChannel(),
            settings=self.context.settings,
            clock=self.context.clock,
        )
        if not self.context.monitor_pool.spawn(monitor):
            raise ToolFailure(
                f"'{created.name}' was created, but another server with that name is already being watched, "
                "so no completion message will follow. Tell the user to check the panel.",
                reason="already_provisioning",
                identifier=created.identifier,
            )
        address = f"{allocation.ip_alias or allocation.ip}:{allocation.port}"

        return ToolOutput(
            data={
                "name": created.name,
                "identifier": created.identifier,
                "server_type": details.name,
                "category": found_category.name,
                "address": address,
                "status": "installing",
            },
            message_to_user=(
                f"🛠️ Creating **{created.name}** ({details.name}) on `{address}`. "
                "I'll post here once it has finished installing and is running."
            ),
        )
