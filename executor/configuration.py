import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT = """#!/bin/bash
# Default script content
echo "Shell Executor Plugin initialized at $(date)"
"""


class ScriptConfiguration(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    script_content: str = Field(default=DEFAULT_SCRIPT, alias="scriptContent")


class JsonConfigurationStore:
    """Persist the plugin configuration as a JSON document."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> ScriptConfiguration:
        if not self.path.exists():
            return ScriptConfiguration()
        try:
            return ScriptConfiguration.model_validate_json(
                self.path.read_text(encoding="utf-8", errors="replace")
            )
        except ValidationError as e:
            logger.warning("Ignoring unreadable configuration %s: %s", self.path, e)
            return ScriptConfiguration()

    def save(self, config: ScriptConfiguration) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(config.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
