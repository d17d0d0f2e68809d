"""Configuration loader for the Fabric L2 provider."""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings

from fabric_provider.exceptions import ConfigurationError


class FabricAPIConfig(BaseModel):
    """Provider block: where the Fabric API lives and how to authenticate."""

    base_url: str = "https://api.equinix.com"
    client_id: str = ""
    client_secret: str = ""
    token: str = ""
    request_timeout: float = 0  # seconds, 0 = default

    def effective_request_timeout(self) -> float:
        if not self.request_timeout:
            return 5.0
        return self.request_timeout

    def validate_credentials(self) -> None:
        """Check that a client can be built from this block."""
        if not self.base_url:
            raise ConfigurationError("baseURL cannot be empty")
        if self.token:
            return
        if not self.client_id:
            raise ConfigurationError("clientId cannot be empty")
        if not self.client_secret:
            raise ConfigurationError("clientSecret cannot be empty")


class L2ConnectionTimeouts(BaseModel):
    create: float = 300  # seconds
    delete: float = 300


class L2ConnectionAccepterTimeouts(BaseModel):
    create: float = 600


class TimeoutsConfig(BaseModel):
    l2_connection: L2ConnectionTimeouts = L2ConnectionTimeouts()
    l2_connection_accepter: L2ConnectionAccepterTimeouts = L2ConnectionAccepterTimeouts()


class PollCadence(BaseModel):
    delay: float = 2.0  # before the first poll
    interval: float = 2.0  # between polls


class PollingConfig(BaseModel):
    l2_connection: PollCadence = PollCadence()
    l2_connection_accepter: PollCadence = PollCadence(delay=1.0, interval=1.0)
    not_found_checks: int = 20


class AppConfig(BaseModel):
    fabric: FabricAPIConfig = FabricAPIConfig()
    timeouts: TimeoutsConfig = TimeoutsConfig()
    polling: PollingConfig = PollingConfig()


class Settings(BaseSettings):
    """Environment-based settings."""

    config_path: str = "../config/config.yaml"

    # Provider block overrides, same variable names as the Terraform provider
    equinix_api_endpoint: Optional[str] = None
    equinix_api_clientid: Optional[str] = None
    equinix_api_clientsecret: Optional[str] = None
    equinix_api_token: Optional[str] = None
    equinix_api_timeout: Optional[float] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def load_yaml_config(path: str) -> dict[str, Any]:
    """Load a YAML configuration file."""
    config_path = Path(path)
    if not config_path.is_absolute():
        config_path = Path(__file__).parent.parent / path

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _apply_env_overrides(config: AppConfig, settings: Settings) -> AppConfig:
    overrides = {
        "base_url": settings.equinix_api_endpoint,
        "client_id": settings.equinix_api_clientid,
        "client_secret": settings.equinix_api_clientsecret,
        "token": settings.equinix_api_token,
        "request_timeout": settings.equinix_api_timeout,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return config
    fabric = config.fabric.model_copy(update=overrides)
    return config.model_copy(update={"fabric": fabric})


def get_config(settings: Settings | None = None) -> AppConfig:
    """Load and return the application configuration."""
    settings = settings or Settings()
    yaml_config = load_yaml_config(settings.config_path)
    return _apply_env_overrides(AppConfig(**yaml_config), settings)


# Singleton instance
settings = Settings()
