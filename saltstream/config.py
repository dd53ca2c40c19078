"""
Configuration settings for the Salt API event streamer.
"""
import logging
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Credentials


class Settings(BaseSettings):
    """
    Streamer configuration loaded from SALTAPI_* environment variables.
    """
    model_config = SettingsConfigDict(
        env_prefix="SALTAPI_",
        env_file=".env",
        case_sensitive=False,
        env_parse_none_str="none",
        extra="ignore",
        populate_by_name=True,
    )

    # Salt API credentials
    url: str = "https://localhost:8000"
    user: str = ""
    password: str = Field(
        default="",
        validation_alias=AliasChoices("SALTAPI_PASS", "SALTAPI_PASSWORD"),
    )
    eauth: str = "pam"

    # Transport settings
    verify_ssl: bool = False  # salt-api is usually deployed with a self-signed cert
    connect_timeout: float = 10.0  # seconds
    read_timeout: Optional[float] = 300.0  # idle stream timeout, None = wait forever

    # Lifecycle settings
    join_timeout: float = 5.0  # seconds
    backlog_warning: int = 1000

    debug: bool = False

    def credentials(self) -> Credentials:
        """Build the immutable login credentials."""
        return Credentials(
            url=self.url,
            username=self.user,
            password=self.password,
            eauth=self.eauth,
        )


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()


def configure_logging(debug: bool = False) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
