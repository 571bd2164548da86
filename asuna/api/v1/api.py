# The module is to define the API router for the application.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from fastapi import APIRouter
from asuna.api.v1.endpoints import chat, provisioning

api_router = APIRouter()

# Include the chat router with a '/chat' prefix
api_router.include_router(chat.router, prefix="/chat", tags=["Conversation"])

# Include the provisioning router with a '/provisioning' prefix
api_router.include_router(provisioning.router, prefix="/provisioning", tags=["Provisioning"])
