import asyncio
import logging

from executor._base import ExecutionResult
from executor.audit import AuditLogger
from executor.configuration import JsonConfigurationStore, ScriptConfiguration
from executor.engine import ExecutionEngine
from executor.store import ScriptStore
from shell_executor.config import Settings

logger = logging.getLogger(__name__)


class ShellExecutorPlugin:
    """Lifecycle hooks wired to the script store and execution engine.

    Every store mutation and every run goes through one lock, so a startup
    run and an HTTP trigger never overlap.
    """

    id = "eb5d7894-8eef-4b36-aa7f-5d124e828ce1"
    name = "Shell Executor"
    description = "Execute shell scripts on plugin initialization"

    def __init__(self, store: ScriptStore, engine: ExecutionEngine):
        self.store = store
        self.engine = engine
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ShellExecutorPlugin":
        audit = AuditLogger(settings.audit_log_path)
        store = ScriptStore(
            settings.script_path,
            JsonConfigurationStore(settings.configuration_path),
            audit,
        )
        engine = ExecutionEngine(
            store,
            audit,
            interpreter=settings.interpreter,
            max_output_bytes=settings.max_output_bytes,
        )
        return cls(store, engine)

    @property
    def configuration(self) -> ScriptConfiguration:
        return self.store.configuration

    async def on_load(self) -> ExecutionResult | None:
        async with self._lock:
            try:
                await self.store.load()
            except OSError:
                logger.error("Script initialisation failed, continuing startup")
            return await self.engine.execute()

    async def on_configuration_updated(self, content: str) -> ScriptConfiguration:
        async with self._lock:
            await self.store.save(content)
            await self.store.ensure_synced()
            return self.store.configuration

    async def execute(self) -> ExecutionResult | None:
        async with self._lock:
            return await self.engine.execute()
