# The module wraps the Pterodactyl panel REST API behind a narrow async gateway.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from asuna.core.config import Settings
from asuna.models.panel import (
    POWER_SIGNALS,
    Allocation,
    Category,
    CreatedServer,
    CreateServerRequest,
    ResourceState,
    ServerSummary,
    TypeDetails,
)
from asuna.utils.logger import console


def _describe_error(e: Exception) -> str:
    if isinstance(e, httpx.HTTPStatusError):
        return f"HTTP {e.response.status_code}: {e.response.text[:500]}"
    return f"{type(e).__name__}: {e}"


class PanelGateway:
    """
    Backend Gateway for the game-server panel.

    Every operation is a single request/response round trip. Failures (network,
    HTTP status, malformed bodies) are logged and converted into an absent
    result, so callers never see an exception from here.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = settings
        base_url = (settings.PTERODACTYL_API_URL or "").rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=self._headers(settings.PTERODACTYL_CLIENT_API_KEY),
            timeout=settings.PTERODACTYL_REQUEST_TIMEOUT,
            transport=transport,
        )
        self._app_client = httpx.AsyncClient(
            base_url=base_url,
            headers=self._headers(settings.PTERODACTYL_APP_API_KEY),
            timeout=settings.PTERODACTYL_REQUEST_TIMEOUT,
            transport=transport,
        )

    @staticmethod
    def _headers(api_key: Optional[str]) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key or ''}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def aclose(self):
        await self._client.aclose()
        await self._app_client.aclose()

    async def _get_json(self, client: httpx.AsyncClient, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    # --- Client API -----------------------------------------------------------

    async def list_servers(self) -> List[ServerSummary]:
        """Lists every server the client key can see, including allocations."""
        if not self._settings.client_api_ready:
            console.error("Panel client API is not configured. Cannot list servers.")
            return []
        try:
            body = await self._get_json(self._client, "/api/client", params={"include": "allocations"})
            servers = [ServerSummary.from_api(item) for item in body.get("data", [])]
            console.info(f"Listed {len(servers)} servers.")
            return servers
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            console.error(f"Failed to list servers: {_describe_error(e)}")
            return []

    async def get_server_resources(self, server_id: str) -> Optional[ResourceState]:
        """Fetches live state and usage for one server, by short identifier."""
        if not self._settings.client_api_ready:
            console.error("Panel client API is not configured. Cannot get server resources.")
            return None
        if not server_id:
            console.error("A server ID is required to get server resources.")
            return None
        try:
            body = await self._get_json(self._client, f"/api/client/servers/{server_id}/resources")
            state = ResourceState.model_validate(body.get("attributes", {}))
            console.info(f"Server '{server_id}' is {state.current_state}.")
            return state
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            console.error(f"Failed to fetch resources for server '{server_id}': {_describe_error(e)}")
            return None

    async def send_power_signal(self, server_id: str, signal: str) -> bool:
        """Sends start/stop/restart/kill. The panel answers 204 on success."""
        if not self._settings.client_api_ready:
            console.error("Panel client API is not configured. Cannot send power signal.")
            return False
        if not server_id:
            console.error("A server ID is required to send a power signal.")
            return False
        if signal not in POWER_SIGNALS:
            console.error(f"Invalid power signal '{signal}'. Must be one of {', '.join(POWER_SIGNALS)}.")
            return False
        try:
            response = await self._client.post(f"/api/client/servers/{server_id}/power", json={"signal": signal})
            response.raise_for_status()
            console.success(f"Power signal '{signal}' sent to server '{server_id}'.")
            return True
        except httpx.HTTPError as e:
            console.error(f"Failed to send '{signal}' to server '{server_id}': {_describe_error(e)}")
            return False

    # --- Application API ------------------------------------------------------

    async def list_categories_with_types(self) -> List[Category]:
        """Lists every nest together with its eggs."""
        if not self._settings.application_api_ready:
            console.error("Panel application API is not configured. Cannot list server types.")
            return []
        try:
            body = await self._get_json(self._app_client, "/api/application/nests", params={"include": "eggs"})
            categories = [Category.from_api(item) for item in body.get("data", [])]
            for category in categories:
                console.debug(f"Category '{category.name}' (ID: {category.id}) has {len(category.types)} type(s).")
            console.info(f"Listed {len(categories)} server categories.")
            return categories
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            console.error(f"Failed to list server categories: {_describe_error(e)}")
            return []

    async def get_type_details(self, category_id: int, type_id: int) -> Optional[TypeDetails]:
        """Fetches one egg with its configuration variables."""
        if not self._settings.application_api_ready:
            console.error("Panel application API is not configured. Cannot get server type details.")
            return None
        try:
            body = await self._get_json(
                self._app_client,
                f"/api/application/nests/{category_id}/eggs/{type_id}",
                params={"include": "variables"},
            )
            details = TypeDetails.from_api(body)
            console.info(f"Fetched server type '{details.name}' with {len(details.variables)} variable(s).")
            return details
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            console.error(f"Failed to fetch server type {type_id} in category {category_id}: {_describe_error(e)}")
            return None

    async def find_free_allocation(self, node_id: int) -> Optional[Allocation]:
        """Returns the first unassigned allocation on a node, walking every page."""
        if not self._settings.application_api_ready:
            console.error("Panel application API is not configured. Cannot find allocations.")
            return None
        page = 1
        try:
            while True:
                body = await self._get_json(
                    self._app_client, f"/api/application/nodes/{node_id}/allocations", params={"page": page}
                )
                for item in body.get("data", []):
                    allocation = Allocation.model_validate(item.get("attributes", item))
                    if not allocation.assigned:
                        console.info(f"Found free allocation {allocation.id} ({allocation.ip}:{allocation.port}) on node {node_id}.")
                        return allocation
                pagination = (body.get("meta") or {}).get("pagination") or {}
                if page >= pagination.get("total_pages", 1):
                    break
                page += 1
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            console.error(f"Failed to fetch allocations for node {node_id}: {_describe_error(e)}")
            return None

        console.warning(f"No free allocations on node {node_id}.")
        return None

    async def create_server(self, request: CreateServerRequest) -> Optional[CreatedServer]:
        """Creates a server. The panel starts the install script immediately."""
        if not self._settings.application_api_ready:
            console.error("Panel application API is not configured. Cannot create server.")
            return None
        console.info(f"Creating server '{request.name}' from type {request.egg}...")
        try:
            response = await self._app_client.post("/api/application/servers", json=request.model_dump())
            response.raise_for_status()
            created = CreatedServer.from_api(response.json())
            console.success(f"Created server '{created.name}' (ID: {created.identifier}, UUID: {created.uuid}).")
            return created
        except httpx.HTTPStatusError as e:
            console.error(f"Panel rejected creation of '{request.name}': {_describe_error(e)}")
            return None
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            console.error(f"Failed to create server '{request.name}': {_describe_error(e)}")
            return None
