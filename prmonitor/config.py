"""Configuration loading from YAML and environment.

The GitHub token is taken from the config file, the environment or a file
named by an environment variable (Docker secrets). Never put real tokens in
config files committed to a repo.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Poll intervals offered to the user, in seconds
POLL_INTERVALS = (60, 300, 900, 1800)
DEFAULT_POLL_INTERVAL = 300


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path and Path(file_path).is_file():
        return Path(file_path).read_text().strip() or None
    return None


# Injected by load_config so validators can read env/file
_current_env: dict[str, str] = {}


def validate_poll_interval(value: int) -> int:
    """Return value if it is one of POLL_INTERVALS, else raise ValueError."""
    if value not in POLL_INTERVALS:
        allowed = ", ".join(str(i) for i in POLL_INTERVALS)
        raise ValueError(f"poll interval must be one of {allowed} seconds, got {value}")
    return value


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="REST API base URL")
    graphql_url: str = Field(default="https://api.github.com/graphql", description="GraphQL endpoint")
    release_repo: str = Field(default="prmonitor/prmonitor", description="Repo checked for new releases")
    timeout: int = Field(default=30, ge=1, description="HTTP timeout in seconds")


class PollingConfig(BaseSettings):
    """Polling settings."""

    model_config = SettingsConfigDict(env_prefix="POLLING_", extra="ignore")

    interval_seconds: int = Field(default=DEFAULT_POLL_INTERVAL, description="Poll interval in seconds")

    @field_validator("interval_seconds")
    @classmethod
    def _check_interval(cls, value: int) -> int:
        return validate_poll_interval(value)


class NotificationsConfig(BaseSettings):
    """Notification settings."""

    model_config = SettingsConfigDict(env_prefix="NOTIFICATIONS_", extra="ignore")

    enabled: bool = Field(default=True, description="Emit notifications for new PR activity")


class StorageConfig(BaseSettings):
    """Where snoozed PRs, settings and the saved token live."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", extra="ignore")

    data_dir: str = Field(default="~/.prmonitor", description="Data directory")

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: str | None = Field(default=None, description="Also append log records to this file")


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        github=GitHubConfig(**(raw.get("github") or {})),
        polling=PollingConfig(**(raw.get("polling") or {})),
        notifications=NotificationsConfig(**(raw.get("notifications") or {})),
        storage=StorageConfig(**(raw.get("storage") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
