# The module is to define the API models for the application.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import Optional

from pydantic import BaseModel, Field

from asuna.models.provisioning import ProvisioningPhase


class ChatRequest(BaseModel):
    """
    Defines the request body for the /v1/chat endpoint.
    Attributes:
        user_input (str): The user's text, with any mention prefix already removed.
        callback_url (Optional[str]): Webhook that receives provisioning updates for this request.
    """
    user_input: str = Field(..., description="The user's text input.")
    callback_url: Optional[str] = Field(default=None, description="Webhook for out-of-band notifications.")


class ChatResponse(BaseModel):
    role: str = "assistant"
    content: str


class ProvisioningSessionView(BaseModel):
    """Defines one entry of the /v1/provisioning listing."""
    name: str
    identifier: str
    server_uuid: str
    phase: ProvisioningPhase
    elapsed_seconds: float
    polls: int
