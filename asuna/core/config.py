# The module is to define the configuration settings for the application.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings


class ConfigurationError(Exception):
    """
    Raised when an operation needs configuration that is absent.
    Attributes:
        missing (List[str]): The environment keys that were not provided.
    """
    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing configuration: {', '.join(missing)}")


class ServerLimits(BaseModel):
    """Resource limits applied to every server created by the assistant."""
    memory: int
    swap: int
    disk: int
    io: int
    cpu: int

    class Config:
        frozen = True


class FeatureLimits(BaseModel):
    databases: int
    allocations: int
    backups: int

    class Config:
        frozen = True


class ProvisioningDefaults(BaseModel):
    """
    The operator-level values server creation cannot do without.
    Attributes:
        owner_id (int): Panel user that will own created servers.
        node_id (int): Node whose allocations new servers are placed on.
        limits (ServerLimits): Default resource limits.
        feature_limits (FeatureLimits): Default feature limits.
    """
    owner_id: int
    node_id: int
    limits: ServerLimits
    feature_limits: FeatureLimits

    class Config:
        frozen = True


class Settings(BaseSettings):
    """
    The Settings class defines the configuration of the assistant.
    It is loaded once from the environment (and an optional .env file) and is
    read-only afterwards; every collaborator receives it explicitly.
    Attributes:
        PTERODACTYL_API_URL (str): Base URL of the panel.
        PTERODACTYL_CLIENT_API_KEY (str): Client-scope key (listing, status, power).
        PTERODACTYL_APP_API_KEY (str): Application-scope key (catalog, allocations, creation).
        PTERODACTYL_DEFAULT_OWNER_ID (int): Owner of servers created by the assistant.
        PTERODACTYL_DEFAULT_NODE_ID (int): Node used to find free allocations.
        OPENAI_API_KEY (str): Credential for the reasoning engine.
        OPENAI_MODEL (str): Chat model used for tool calling.
        MAX_TOOL_ITERATIONS (int): Maximum model round trips per utterance.
        PROVISION_* (float): Provisioning monitor poll intervals and time budget, in seconds.
        NOTIFY_WEBHOOK_URL (str): Default output channel for provisioning notifications.
    """
    # Panel
    PTERODACTYL_API_URL: Optional[str] = None
    PTERODACTYL_CLIENT_API_KEY: Optional[str] = None
    PTERODACTYL_APP_API_KEY: Optional[str] = None
    PTERODACTYL_DEFAULT_OWNER_ID: Optional[int] = None
    PTERODACTYL_DEFAULT_NODE_ID: Optional[int] = None
    PTERODACTYL_REQUEST_TIMEOUT: float = 15.0

    # Reasoning engine
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_TEMPERATURE: float = 0.2
    MAX_TOOL_ITERATIONS: int = 5

    # Provisioning monitor
    PROVISION_INSTALL_POLL_SECONDS: float = 15.0
    PROVISION_RUNNING_POLL_SECONDS: float = 10.0
    PROVISION_TIMEOUT_SECONDS: float = 600.0

    # Defaults for created servers
    DEFAULT_SERVER_MEMORY_MB: int = 2048
    DEFAULT_SERVER_SWAP_MB: int = 0
    DEFAULT_SERVER_DISK_MB: int = 10240
    DEFAULT_SERVER_IO: int = 500
    DEFAULT_SERVER_CPU: int = 100
    DEFAULT_SERVER_DATABASES: int = 0
    DEFAULT_SERVER_ALLOCATIONS: int = 1
    DEFAULT_SERVER_BACKUPS: int = 0

    # Output channel
    NOTIFY_WEBHOOK_URL: Optional[str] = None

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        # Blank values such as 'PTERODACTYL_DEFAULT_NODE_ID=' count as unset
        env_ignore_empty = True
        extra = "ignore"
        frozen = True

    @property
    def client_api_ready(self) -> bool:
        return bool(self.PTERODACTYL_API_URL and self.PTERODACTYL_CLIENT_API_KEY)

    @property
    def application_api_ready(self) -> bool:
        return bool(self.PTERODACTYL_API_URL and self.PTERODACTYL_APP_API_KEY)

    def provisioning_defaults(self) -> ProvisioningDefaults:
        """
        Returns the validated creation defaults.

        Raises:
            ConfigurationError: If the default owner or node is not configured.
        """
        missing = []
        if self.PTERODACTYL_DEFAULT_OWNER_ID is None:
            missing.append("PTERODACTYL_DEFAULT_OWNER_ID")
        if self.PTERODACTYL_DEFAULT_NODE_ID is None:
            missing.append("PTERODACTYL_DEFAULT_NODE_ID")
        if missing:
            raise ConfigurationError(missing)

        return ProvisioningDefaults(
            owner_id=self.PTERODACTYL_DEFAULT_OWNER_ID,
            node_id=self.PTERODACTYL_DEFAULT_NODE_ID,
            limits=ServerLimits(
                memory=self.DEFAULT_SERVER_MEMORY_MB,
                swap=self.DEFAULT_SERVER_SWAP_MB,
                disk=self.DEFAULT_SERVER_DISK_MB,
                io=self.DEFAULT_SERVER_IO,
                cpu=self.DEFAULT_SERVER_CPU,
            ),
            feature_limits=FeatureLimits(
                databases=self.DEFAULT_SERVER_DATABASES,
                allocations=self.DEFAULT_SERVER_ALLOCATIONS,
                backups=self.DEFAULT_SERVER_BACKUPS,
            ),
        )

    def configuration_problems(self) -> List[str]:
        """Lists every degraded capability, evaluated once at startup."""
        problems = []
        if not self.client_api_ready:
            problems.append("PTERODACTYL_API_URL or PTERODACTYL_CLIENT_API_KEY is missing: "
                            "server listing, status and power control are disabled.")
        if not self.PTERODACTYL_APP_API_KEY:
            problems.append("PTERODACTYL_APP_API_KEY is missing: server types and creation are disabled.")
        try:
            self.provisioning_defaults()
        except ConfigurationError as e:
            problems.append(f"{', '.join(e.missing)} missing: server creation will be refused.")
        if not self.OPENAI_API_KEY:
            problems.append("OPENAI_API_KEY is missing: the language model is unavailable.")
        return problems

    def public_summary(self) -> Dict[str, object]:
        """Non-secret settings, for the startup table."""
        return {
            "Panel URL": self.PTERODACTYL_API_URL,
            "Client API key": "set" if self.PTERODACTYL_CLIENT_API_KEY else None,
            "Application API key": "set" if self.PTERODACTYL_APP_API_KEY else None,
            "Default owner": self.PTERODACTYL_DEFAULT_OWNER_ID,
            "Default node": self.PTERODACTYL_DEFAULT_NODE_ID,
            "Model": self.OPENAI_MODEL,
            "Max tool iterations": self.MAX_TOOL_ITERATIONS,
            "Provisioning timeout (s)": self.PROVISION_TIMEOUT_SECONDS,
        }

# lru_cache to cache the settings instance.
@lru_cache
def get_settings() -> Settings:
    return Settings()
