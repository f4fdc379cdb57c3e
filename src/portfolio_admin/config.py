"""Configuration and logging setup for the portfolio admin tools."""

import logging
import sys

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import APIConfiguration


class ServerConfig(BaseSettings):
    """Settings read from ``PORTFOLIO_ADMIN_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_ADMIN_",
        env_file=".env",
        extra="ignore",
    )

    api_url: str = "http://localhost:8080"
    api_token: SecretStr | None = None
    email: str | None = None
    password: SecretStr | None = None
    timeout: float = 30.0
    log_level: str = "INFO"

    def get_api_config(self) -> APIConfiguration:
        """Build the HTTP client configuration."""
        return APIConfiguration(
            base_url=self.api_url.rstrip("/"),
            api_token=self.api_token,
            timeout=self.timeout,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.email and self.password)


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout belongs to the MCP stdio transport."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    has_console = any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in root.handlers
    )
    if not has_console:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
