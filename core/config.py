"""
Configuration management for the video job client.

Centralizes all configuration including:
- API endpoint and request timeout
- Local storage location and keys
- Status refresh interval
- Notification dismiss delays
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else None


@dataclass
class APIConfig:
    """API configuration for the video generation service."""

    api_base: str = field(
        default_factory=lambda: os.getenv("VIDEO_API_BASE", "https://api.openai.com/v1")
    )

    # None means no timeout, matching the behavior of the browser client
    request_timeout: Optional[float] = field(
        default_factory=lambda: _optional_float("VIDEO_API_TIMEOUT")
    )


@dataclass
class StorageConfig:
    """Persistent key-value storage for client-side state."""

    # Empty path keeps the store in memory only
    path: str = field(
        default_factory=lambda: os.getenv(
            "VIDEO_CLIENT_STORAGE_PATH",
            os.path.join(os.path.expanduser("~"), ".video_job_client", "storage.json"),
        )
    )
    token_key: str = "openAI_bearer_token"
    videos_key: str = "generated_videos"


@dataclass
class PollingConfig:
    """In-flight job status refresh settings."""
    interval_seconds: float = field(
        default_factory=lambda: float(os.getenv("VIDEO_POLL_INTERVAL", "15"))
    )


@dataclass
class NotificationConfig:
    """Auto-dismiss delays for user-visible notifications."""
    info_delay_seconds: float = 7.0
    error_delay_seconds: float = 10.0


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.api.api_base.startswith(("http://", "https://")):
            issues.append(f"VIDEO_API_BASE is not an http(s) URL: {self.api.api_base!r}")

        if self.polling.interval_seconds <= 0:
            issues.append("VIDEO_POLL_INTERVAL must be positive")

        if self.api.request_timeout is not None and self.api.request_timeout <= 0:
            issues.append("VIDEO_API_TIMEOUT must be positive when set")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
