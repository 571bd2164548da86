"""tests/test_channels.py

Tests for notification delivery (services/channels.py) and for how the
runtime picks a channel per utterance (core/runtime.py).
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

import httpx
import pytest

from asuna.core.runtime import Runtime
from asuna.services.channels import LogChannel, WebhookChannel, channel_for

HOOK = "https://chat.test/hooks/abc"


class RecordingTransport(httpx.MockTransport):
    """Answers every request with one status code and keeps the requests."""

    def __init__(self, status_code: int = 204):
        self.requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(status_code)

        super().__init__(handler)


class TestWebhookChannel:

    @pytest.mark.asyncio
    async def test_posts_text_as_content(self) -> None:
        transport = RecordingTransport()

        await WebhookChannel(HOOK, transport=transport).send("✅ Survival is up!")

        assert len(transport.requests) == 1
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == HOOK
        assert json.loads(request.content) == {"content": "✅ Survival is up!"}

    @pytest.mark.asyncio
    async def test_error_status_is_logged_not_raised(self, caplog) -> None:
        caplog.set_level(logging.INFO, logger="Asuna")

        await WebhookChannel(HOOK, transport=RecordingTransport(status_code=500)).send("hi")

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "Failed to deliver notification" in errors[0].getMessage()

    @pytest.mark.asyncio
    async def test_connection_error_is_logged_not_raised(self, caplog) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        caplog.set_level(logging.INFO, logger="Asuna")

        await WebhookChannel(HOOK, transport=httpx.MockTransport(refuse)).send("hi")

        assert any("connection refused" in r.getMessage() for r in caplog.records if r.levelno == logging.ERROR)


class TestLogChannel:

    @pytest.mark.asyncio
    async def test_writes_notification_to_log(self, caplog) -> None:
        caplog.set_level(logging.INFO, logger="Asuna")

        await LogChannel().send("Survival is up")

        assert "[notification] Survival is up" in caplog.messages


class TestChannelFor:

    def test_callback_wins_over_default(self) -> None:
        channel = channel_for("https://chat.test/callback", HOOK)

        assert isinstance(channel, WebhookChannel)
        assert channel.url == "https://chat.test/callback"

    def test_default_used_without_callback(self) -> None:
        channel = channel_for(None, HOOK)

        assert isinstance(channel, WebhookChannel)
        assert channel.url == HOOK

    def test_log_when_nothing_is_configured(self) -> None:
        assert isinstance(channel_for(None, None), LogChannel)
        assert isinstance(channel_for("", ""), LogChannel)


class RecordingOrchestrator:
    """Stands in for DialogueOrchestrator and keeps the channel of each run."""

    def __init__(self):
        self.channels: list = []

    async def run(self, user_utterance: str, channel: Optional[object] = None) -> str:
        self.channels.append(channel)
        return "done"


class TestRuntimeChannel:

    @staticmethod
    def make_runtime(settings, gateway, monitor_pool, registry, notify_url: Optional[str]):
        orchestrator = RecordingOrchestrator()
        runtime = Runtime(
            settings=settings.model_copy(update={"NOTIFY_WEBHOOK_URL": notify_url}),
            gateway=gateway,
            engine=None,
            monitor_pool=monitor_pool,
            registry=registry,
            orchestrator=orchestrator,
        )
        return runtime, orchestrator

    @pytest.mark.asyncio
    async def test_callback_url_overrides_configured_webhook(self, settings, gateway, monitor_pool,
                                                             registry) -> None:
        runtime, orchestrator = self.make_runtime(settings, gateway, monitor_pool, registry, HOOK)

        assert await runtime.handle("create a server", callback_url="https://chat.test/callback") == "done"

        channel = orchestrator.channels[0]
        assert isinstance(channel, WebhookChannel)
        assert channel.url == "https://chat.test/callback"

    @pytest.mark.asyncio
    async def test_configured_webhook_without_callback(self, settings, gateway, monitor_pool, registry) -> None:
        runtime, orchestrator = self.make_runtime(settings, gateway, monitor_pool, registry, HOOK)

        await runtime.handle("create a server")

        assert isinstance(orchestrator.channels[0], WebhookChannel)
        assert orchestrator.channels[0].url == HOOK

    @pytest.mark.asyncio
    async def test_log_channel_when_nothing_is_configured(self, settings, gateway, monitor_pool,
                                                          registry) -> None:
        runtime, orchestrator = self.make_runtime(settings, gateway, monitor_pool, registry, None)

        await runtime.handle("create a server")

        assert isinstance(orchestrator.channels[0], LogChannel)
