"""Tests for configuration loading."""

import pytest

from fabric_provider.config import AppConfig, FabricAPIConfig, Settings, get_config
from fabric_provider.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for var in (
        "EQUINIX_API_ENDPOINT",
        "EQUINIX_API_CLIENTID",
        "EQUINIX_API_CLIENTSECRET",
        "EQUINIX_API_TOKEN",
        "EQUINIX_API_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    config = AppConfig()

    assert config.fabric.base_url == "https://api.equinix.com"
    assert config.timeouts.l2_connection.create == 300
    assert config.timeouts.l2_connection.delete == 300
    assert config.timeouts.l2_connection_accepter.create == 600
    assert config.polling.l2_connection.interval == 2.0
    assert config.polling.not_found_checks == 20


def test_missing_file_gives_defaults(tmp_path, clean_env):
    config = get_config(Settings(config_path=str(tmp_path / "absent.yaml")))

    assert config == AppConfig()


def test_yaml_file(tmp_path, clean_env):
    path = tmp_path / "config.yaml"
    path.write_text(
        "fabric:\n"
        "  base_url: https://sandbox.equinix.test\n"
        "  client_id: my-id\n"
        "  client_secret: my-secret\n"
        "timeouts:\n"
        "  l2_connection:\n"
        "    create: 900\n"
        "polling:\n"
        "  l2_connection:\n"
        "    interval: 10\n"
    )

    config = get_config(Settings(config_path=str(path)))

    assert config.fabric.base_url == "https://sandbox.equinix.test"
    assert config.fabric.client_id == "my-id"
    assert config.timeouts.l2_connection.create == 900
    assert config.timeouts.l2_connection.delete == 300
    assert config.polling.l2_connection.interval == 10
    assert config.polling.l2_connection.delay == 2.0


def test_environment_overrides_file(tmp_path, clean_env, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("fabric:\n  client_id: from-file\n  client_secret: file-secret\n")
    monkeypatch.setenv("EQUINIX_API_CLIENTID", "from-env")
    monkeypatch.setenv("EQUINIX_API_TIMEOUT", "30")

    config = get_config(Settings(config_path=str(path)))

    assert config.fabric.client_id == "from-env"
    assert config.fabric.client_secret == "file-secret"
    assert config.fabric.request_timeout == 30


def test_effective_request_timeout():
    assert FabricAPIConfig().effective_request_timeout() == 5.0
    assert FabricAPIConfig(request_timeout=12).effective_request_timeout() == 12


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"base_url": ""}, "baseURL cannot be empty"),
        ({}, "clientId cannot be empty"),
        ({"client_id": "id"}, "clientSecret cannot be empty"),
    ],
)
def test_validate_credentials_errors(fields, message):
    with pytest.raises(ConfigurationError, match=message):
        FabricAPIConfig(**fields).validate_credentials()


@pytest.mark.parametrize(
    "fields",
    [{"token": "t"}, {"client_id": "id", "client_secret": "secret"}],
)
def test_validate_credentials_ok(fields):
    FabricAPIConfig(**fields).validate_credentials()


def test_settings_only_carry_config_path_and_api_overrides():
    assert set(Settings.model_fields) == {
        "config_path",
        "equinix_api_endpoint",
        "equinix_api_clientid",
        "equinix_api_clientsecret",
        "equinix_api_token",
        "equinix_api_timeout",
    }
