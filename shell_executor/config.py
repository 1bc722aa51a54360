"""Service settings, read from SHELL_EXECUTOR_* environment variables or .env."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from executor.audit import DEFAULT_AUDIT_LOG
from executor.engine import DEFAULT_MAX_OUTPUT_BYTES, default_interpreter

PLUGIN_DIR_NAME = "JellyfinShellExecutor"
SCRIPT_NAME = "script.sh"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHELL_EXECUTOR_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    data_dir: Path = Path("data")
    audit_log_path: Path = DEFAULT_AUDIT_LOG
    interpreter: str = Field(default_factory=default_interpreter)
    max_output_bytes: int = Field(default=DEFAULT_MAX_OUTPUT_BYTES, gt=0)
    api_keys: list[str] = Field(default_factory=list)

    host: str = "0.0.0.0"
    port: int = 8096
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @property
    def script_path(self) -> Path:
        return self.data_dir / PLUGIN_DIR_NAME / SCRIPT_NAME

    @property
    def configuration_path(self) -> Path:
        return self.data_dir / f"{PLUGIN_DIR_NAME}.json"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
