"""Bridge configuration, read from the environment."""

import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, field_validator

from .exceptions import ConfigError

SERVER_URL_ENV = "MCP_SERVER_URL"


class BridgeConfig(BaseModel):
    """Configuration for the stdio bridge."""
    server_url: str
    endpoint_path: str = "/mcp"
    health_path: str = "/health"
    request_timeout: float = 30.0
    probe_timeout: float = 5.0
    teardown_timeout: float = 5.0
    verify_ssl: bool = True
    max_workers: int = 1
    debug: bool = False

    @field_validator("server_url")
    @classmethod
    def _strip_server_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError(f"{SERVER_URL_ENV} must not be empty")
        return value

    @field_validator("max_workers")
    @classmethod
    def _check_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_workers must be at least 1")
        return value

    @property
    def endpoint_url(self) -> str:
        return f"{self.server_url}/{self.endpoint_path.lstrip('/')}"

    @property
    def health_url(self) -> str:
        return f"{self.server_url}/{self.health_path.lstrip('/')}"

    @classmethod
    def from_env(cls, server_url: Optional[str] = None, load_dotenv_file: bool = True, **overrides):
        """
        Create config from environment variables.

        Args:
            server_url: Explicit server URL, takes precedence over MCP_SERVER_URL
            load_dotenv_file: Read a .env file from the working directory (or a parent) first
            **overrides: Field values that take precedence over the environment

        Raises:
            ConfigError: If MCP_SERVER_URL is missing or a value is malformed
        """
        if load_dotenv_file:
            load_dotenv(find_dotenv(usecwd=True))

        url = server_url or os.getenv(SERVER_URL_ENV, "")
        if not url.strip():
            raise ConfigError(f"{SERVER_URL_ENV} environment variable is required")

        values = {
            "server_url": url,
            "request_timeout": os.getenv("MCP_REQUEST_TIMEOUT", "30"),
            "probe_timeout": os.getenv("MCP_PROBE_TIMEOUT", "5"),
            "teardown_timeout": os.getenv("MCP_TEARDOWN_TIMEOUT", "5"),
            "verify_ssl": os.getenv("MCP_VERIFY_SSL", "true").lower() == "true",
            "max_workers": os.getenv("MCP_BRIDGE_WORKERS", "1"),
            "debug": os.getenv("MCP_BRIDGE_DEBUG", "").lower() in ("true", "1", "yes"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValueError as e:
            # pydantic.ValidationError subclasses ValueError
            raise ConfigError(f"Invalid bridge configuration: {e}") from e
