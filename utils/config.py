"""Configuration management utilities for the Trip Planner.

Provides:
- A small Config base class (dict view of the settings)
- AppConfig, the environment-driven settings shared by the API server,
  the API client and the desktop GUI
"""

import os as _os
from pathlib import Path
from typing import Any, Dict


class Config:
    """Base configuration class for organizing application settings."""

    def __init__(self):
        """Initialize configuration with default values."""
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary.

        Returns:
            Dictionary of all config attributes
        """
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}


def _split_origins(raw: str) -> list[str]:
    if raw.strip() == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


class AppConfig(Config):
    """Application-level configuration loaded from environment variables.

    All env vars have sensible defaults so the application works out of the
    box without any configuration.

    Environment variables:
        APP_DB_PATH: Path to the SQLite trip store (default: trips.sqlite)
        APP_PORT: API server port (default: 3001)
        APP_HOST: API server bind address (default: 0.0.0.0)
        APP_LOG_FORMAT: Logging format — "text" or "json" (default: text)
        APP_CORS_ORIGINS: Comma-separated allowed frontend origins
            (default: http://localhost:3000)
        TRIP_API_URL: Public API base URL used by the client
            (default: http://localhost:3001)
        APP_AUTH_USERNAME / APP_AUTH_PASSWORD: The single login credential
            pair checked by the client auth gate (default: admin / password)
        APP_SESSION_FILE: Where the client persists the logged-in user
            (default: ~/.trip_planner/session.json)
    """

    def __init__(self) -> None:
        super().__init__()
        self.db_path = Path(_os.getenv("APP_DB_PATH", "trips.sqlite"))
        self.api_port = int(_os.getenv("APP_PORT", "3001"))
        self.api_host = _os.getenv("APP_HOST", "0.0.0.0")
        self.log_format = _os.getenv("APP_LOG_FORMAT", "text")
        self.cors_origins: list[str] = _split_origins(
            _os.getenv("APP_CORS_ORIGINS", "http://localhost:3000")
        )
        self.api_base_url = _os.getenv("TRIP_API_URL", "http://localhost:3001").rstrip("/")
        self.auth_username = _os.getenv("APP_AUTH_USERNAME", "admin")
        self.auth_password = _os.getenv("APP_AUTH_PASSWORD", "password")
        self.session_file = Path(
            _os.getenv("APP_SESSION_FILE", str(Path.home() / ".trip_planner" / "session.json"))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Settings as a dict, with the login password masked for logging."""
        data = super().to_dict()
        data["auth_password"] = "***"
        return data

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create an AppConfig instance populated from environment variables."""
        return cls()
