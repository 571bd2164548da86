# The module is to define the panel entities returned by the Backend Gateway.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from asuna.core.config import FeatureLimits, ServerLimits

PowerSignal = Literal["start", "stop", "restart", "kill"]
POWER_SIGNALS = ("start", "stop", "restart", "kill")

EnvValue = Union[str, int, float, bool]


def _attributes(obj: Dict[str, Any]) -> Dict[str, Any]:
    """Unwraps the panel's {'object': ..., 'attributes': {...}} envelope."""
    return obj.get("attributes", obj)


def _related(attributes: Dict[str, Any], relation: str) -> List[Dict[str, Any]]:
    relationships = attributes.get("relationships") or {}
    return (relationships.get(relation) or {}).get("data") or []


class ServerAllocation(BaseModel):
    id: int
    ip: str
    port: int
    ip_alias: Optional[str] = None
    is_default: bool = False


class ServerSummary(BaseModel):
    """
    A server as seen through the client API listing.
    Attributes:
        identifier (str): Short client-facing ID, e.g. '261bf2bb'.
        uuid (str): Full UUID, the creation-time identity.
        name (str): Display name.
        status (Optional[str]): Summary status ('installing', 'suspended', None when ready).
        is_installing (bool): Whether the install script is still running.
    """
    identifier: str
    uuid: str = ""
    name: str
    description: Optional[str] = None
    node: Optional[str] = None
    status: Optional[str] = None
    is_installing: bool = False
    is_suspended: bool = False
    allocations: List[ServerAllocation] = Field(default_factory=list)

    @property
    def default_port(self) -> Optional[int]:
        for allocation in self.allocations:
            if allocation.is_default:
                return allocation.port
        return None

    @classmethod
    def from_api(cls, obj: Dict[str, Any]) -> "ServerSummary":
        attributes = _attributes(obj)
        allocations = [ServerAllocation.model_validate(_attributes(a)) for a in _related(attributes, "allocations")]
        return cls.model_validate({**attributes, "allocations": allocations})


class ResourceUsage(BaseModel):
    memory_bytes: int = 0
    cpu_absolute: float = 0.0
    disk_bytes: int = 0
    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    uptime: int = 0


class ResourceState(BaseModel):
    """Live state of a server; current_state is 'running', 'offline', 'starting' or 'stopping'."""
    current_state: str
    is_suspended: bool = False
    resources: ResourceUsage = Field(default_factory=ResourceUsage)


class ServerType(BaseModel):
    """An installable server configuration (a panel 'egg')."""
    id: int
    uuid: Optional[str] = None
    nest: Optional[int] = None
    name: str
    description: Optional[str] = None
    docker_image: str = ""
    startup: str = ""

    @classmethod
    def from_api(cls, obj: Dict[str, Any]) -> "ServerType":
        return cls.model_validate(_attributes(obj))


class Category(BaseModel):
    """A group of server types (a panel 'nest')."""
    id: int
    name: str
    description: Optional[str] = None
    types: List[ServerType] = Field(default_factory=list)

    @classmethod
    def from_api(cls, obj: Dict[str, Any]) -> "Category":
        attributes = _attributes(obj)
        types = [ServerType.from_api(egg) for egg in _related(attributes, "eggs")]
        return cls.model_validate({**attributes, "types": types})


class TypeVariable(BaseModel):
    name: str
    env_variable: str
    default_value: Optional[str] = ""
    description: Optional[str] = None
    user_viewable: bool = True
    user_editable: bool = True
    rules: Optional[str] = None


class TypeDetails(ServerType):
    variables: List[TypeVariable] = Field(default_factory=list)

    @classmethod
    def from_api(cls, obj: Dict[str, Any]) -> "TypeDetails":
        attributes = _attributes(obj)
        variables = [TypeVariable.model_validate(_attributes(v)) for v in _related(attributes, "variables")]
        return cls.model_validate({**attributes, "variables": variables})

    def default_environment(self) -> Dict[str, str]:
        return {v.env_variable: v.default_value or "" for v in self.variables}


class Allocation(BaseModel):
    id: int
    ip: str
    port: int
    ip_alias: Optional[str] = None
    assigned: bool = False


class CreateServerRequest(BaseModel):
    """Body of the application API's server creation call."""
    name: str
    user: int
    egg: int
    docker_image: str
    startup: str
    environment: Dict[str, EnvValue] = Field(default_factory=dict)
    limits: ServerLimits
    feature_limits: FeatureLimits
    allocation: Dict[str, int]
    start_on_completion: bool = True


class CreatedServer(BaseModel):
    """
    The application API's view of a freshly created server.
    'id' is the numeric admin ID; 'identifier' is the short client-facing ID.
    """
    id: int
    uuid: str
    identifier: str
    name: str

    @classmethod
    def from_api(cls, obj: Dict[str, Any]) -> "CreatedServer":
        return cls.model_validate(_attributes(obj))
