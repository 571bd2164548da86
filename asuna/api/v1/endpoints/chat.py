# The module is to define the API endpoint for chat interactions.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from fastapi import APIRouter, Request
from asuna.utils.logger import console
from asuna.models.api_models import ChatRequest, ChatResponse

router = APIRouter()

@router.post("/",
          response_model=ChatResponse)
async def chat_with_asuna(request: ChatRequest, http_request: Request):
    """
    Answers one utterance. Provisioning updates triggered by it are posted
    later to the request's callback_url (or the configured default webhook).
    """
    console.info(f"Received chat request: '{request.user_input[:100]}'")

    runtime = http_request.app.state.runtime
    answer = await runtime.handle(request.user_input, callback_url=request.callback_url)

    console.success("Sending chat response.")
    return ChatResponse(content=answer)
