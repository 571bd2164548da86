"""tests/test_config.py

Tests for settings loading and validation (core/config.py).
"""

from __future__ import annotations

import pytest

from asuna.core.config import ConfigurationError, Settings


class TestSettings:

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.MAX_TOOL_ITERATIONS == 5
        assert settings.PROVISION_INSTALL_POLL_SECONDS == 15
        assert settings.PROVISION_RUNNING_POLL_SECONDS == 10
        assert settings.PROVISION_TIMEOUT_SECONDS == 600

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("PTERODACTYL_API_URL", "https://panel.example.com")
        monkeypatch.setenv("PTERODACTYL_DEFAULT_NODE_ID", "4")
        monkeypatch.setenv("MAX_TOOL_ITERATIONS", "8")

        settings = Settings(_env_file=None)

        assert settings.PTERODACTYL_API_URL == "https://panel.example.com"
        assert settings.PTERODACTYL_DEFAULT_NODE_ID == 4
        assert settings.MAX_TOOL_ITERATIONS == 8

    def test_api_readiness(self, settings: Settings) -> None:
        assert settings.client_api_ready and settings.application_api_ready

        no_app_key = Settings(_env_file=None, PTERODACTYL_API_URL="https://panel.test",
                              PTERODACTYL_CLIENT_API_KEY="c", PTERODACTYL_APP_API_KEY=None)
        assert no_app_key.client_api_ready is True
        assert no_app_key.application_api_ready is False


class TestProvisioningDefaults:

    def test_defaults_carry_limits(self, settings: Settings) -> None:
        defaults = settings.provisioning_defaults()

        assert (defaults.owner_id, defaults.node_id) == (1, 3)
        assert defaults.limits.memory == 2048
        assert defaults.limits.swap == 0
        assert defaults.limits.disk == 10240
        assert defaults.limits.io == 500
        assert defaults.limits.cpu == 100
        assert (defaults.feature_limits.databases, defaults.feature_limits.allocations,
                defaults.feature_limits.backups) == (0, 1, 0)

    def test_missing_node_is_reported(self) -> None:
        settings = Settings(_env_file=None, PTERODACTYL_DEFAULT_OWNER_ID=1, PTERODACTYL_DEFAULT_NODE_ID=None)

        with pytest.raises(ConfigurationError) as excinfo:
            settings.provisioning_defaults()

        assert excinfo.value.missing == ["PTERODACTYL_DEFAULT_NODE_ID"]

    def test_configuration_problems_lists_degraded_capabilities(self) -> None:
        settings = Settings(_env_file=None, PTERODACTYL_API_URL=None, PTERODACTYL_CLIENT_API_KEY=None,
                            PTERODACTYL_APP_API_KEY=None, PTERODACTYL_DEFAULT_OWNER_ID=None,
                            PTERODACTYL_DEFAULT_NODE_ID=None, OPENAI_API_KEY=None)

        problems = settings.configuration_problems()

        assert len(problems) == 4
        assert any("OPENAI_API_KEY" in p for p in problems)

    def test_fully_configured_has_no_problems(self, settings: Settings) -> None:
        assert settings.configuration_problems() == []

    def test_public_summary_hides_secrets(self, settings: Settings) -> None:
        summary = settings.public_summary()

        assert "client-key" not in summary.values()
        assert "app-key" not in summary.values()
        assert summary["Client API key"] == "set"


class TestBlankValues:
    """A .env template leaves optional ids as 'NAME=' with nothing after it."""

    def test_blank_ids_in_environment_are_unset(self, monkeypatch) -> None:
        monkeypatch.setenv("PTERODACTYL_DEFAULT_OWNER_ID", "")
        monkeypatch.setenv("PTERODACTYL_DEFAULT_NODE_ID", "")

        settings = Settings(_env_file=None)

        assert settings.PTERODACTYL_DEFAULT_OWNER_ID is None
        assert settings.PTERODACTYL_DEFAULT_NODE_ID is None
        with pytest.raises(ConfigurationError) as excinfo:
            settings.provisioning_defaults()
        assert excinfo.value.missing == ["PTERODACTYL_DEFAULT_OWNER_ID", "PTERODACTYL_DEFAULT_NODE_ID"]

    def test_blank_ids_in_env_file_are_unset(self, tmp_path, monkeypatch) -> None:
        monkeypatch.delenv("PTERODACTYL_DEFAULT_OWNER_ID", raising=False)
        monkeypatch.delenv("PTERODACTYL_DEFAULT_NODE_ID", raising=False)
        monkeypatch.delenv("PTERODACTYL_API_URL", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("PTERODACTYL_API_URL=https://panel.test\n"
                            "PTERODACTYL_DEFAULT_OWNER_ID=\n"
                            "PTERODACTYL_DEFAULT_NODE_ID=\n")

        settings = Settings(_env_file=env_file)

        assert settings.PTERODACTYL_API_URL == "https://panel.test"
        assert settings.PTERODACTYL_DEFAULT_OWNER_ID is None
        assert any("PTERODACTYL_DEFAULT_NODE_ID" in p for p in settings.configuration_problems())
