# Output channels for unsolicited messages (provisioning notifications).
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

from typing import Optional, Protocol

import httpx

from asuna.utils.logger import console


class OutputChannel(Protocol):
    async def send(self, text: str) -> None:
        ...


class LogChannel:
    """Writes notifications to the console when no chat destination is known."""

    async def send(self, text: str) -> None:
        console.info(f"[notification] {text}")


class WebhookChannel:
    """
    Posts notifications as {"content": text} to a webhook URL, the body
    chat-platform incoming webhooks accept. Delivery failures are logged only.
    """

    def __init__(self, url: str, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self.url = url
        self._transport = transport
        self._timeout = timeout

    async def send(self, text: str) -> None:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(self.url, json={"content": text})
                response.raise_for_status()
            console.info("Notification delivered to webhook.")
        except httpx.HTTPError as e:
            console.error(f"Failed to deliver notification to webhook: {e}")


def channel_for(callback_url: Optional[str], default_url: Optional[str] = None) -> OutputChannel:
    url = callback_url or default_url
    if url:
        return WebhookChannel(url)
    return LogChannel()
