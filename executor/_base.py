from dataclasses import dataclass
from typing import Protocol

from executor.configuration import ScriptConfiguration


@dataclass
class ExecutionResult:
    exit_code: int | None
    stdout: str
    stderr: str
    error: str | None = None  # set when the interpreter could not be spawned
    truncated: bool = False

    @property
    def success(self) -> bool:
        return self.error is None and self.exit_code is not None


class ConfigurationStore(Protocol):
    def load(self) -> ScriptConfiguration: ...

    def save(self, config: ScriptConfiguration) -> None: ...
