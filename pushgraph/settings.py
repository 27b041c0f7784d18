"""Service settings: Taskcluster credentials, registry location and logging."""

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "pushgraph" / "projects.toml"


class PushgraphSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PUSHGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Taskcluster
    taskcluster_root_url: str | None = None
    taskcluster_client_id: str | None = None
    taskcluster_access_token: SecretStr | None = None

    # Project registry
    projects_path: Path = CONFIG_PATH

    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> PushgraphSettings:
    return PushgraphSettings()
