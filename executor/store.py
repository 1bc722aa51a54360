import asyncio
import logging
import os
from pathlib import Path

from executor._base import ConfigurationStore
from executor.audit import AuditLogger
from executor.configuration import ScriptConfiguration

logger = logging.getLogger(__name__)


def _is_posix() -> bool:
    return os.name == "posix"


class ScriptStore:
    """Keep the configured script text and the on-disk script file in step."""

    def __init__(
        self,
        script_path: Path,
        config_store: ConfigurationStore,
        audit: AuditLogger,
    ):
        self.script_path = Path(script_path)
        self.config_store = config_store
        self.audit = audit
        self.configuration = config_store.load()

    @property
    def exists(self) -> bool:
        return self.script_path.is_file()

    def read(self, errors: str = "surrogateescape") -> str | None:
        """Return the on-disk script, or None when there is no file.

        Undecodable bytes survive as surrogates, so such a file never
        compares equal to the configured text.
        """
        if not self.exists:
            return None
        # newline="" keeps CRLF scripts byte-for-byte comparable
        with self.script_path.open(encoding="utf-8", errors=errors, newline="") as fh:
            return fh.read()

    async def save(self, content: str) -> None:
        try:
            self.script_path.parent.mkdir(parents=True, exist_ok=True)
            with self.script_path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(content)
            if _is_posix():
                await self._make_executable()
            updated = ScriptConfiguration(script_content=content)
            self.config_store.save(updated)
            self.configuration = updated
        except OSError as e:
            logger.exception("Failed to save script")
            self.audit.append(f"SAVE FAILED: {e}")
            raise

        logger.info("Script saved to %s", self.script_path)
        self.audit.append(f"SCRIPT SAVED: {self.script_path}")

    async def _make_executable(self) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                "chmod",
                "+x",
                str(self.script_path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await proc.communicate()
        except OSError as e:
            logger.warning("Could not run chmod on %s: %s", self.script_path, e)
            return
        if proc.returncode != 0:
            logger.warning(
                "chmod +x %s exited with %d: %s",
                self.script_path,
                proc.returncode,
                stderr.decode(errors="replace").strip(),
            )

    async def ensure_synced(self) -> bool:
        """Rewrite the script file if it drifted from the configuration.

        Returns True when a write happened.
        """
        wanted = self.configuration.script_content
        if self.read() == wanted:
            return False
        await self.save(wanted)
        return True

    async def load(self) -> None:
        """First-run initialisation.

        A script already on disk wins over the stored configuration so a
        hand-edited file is never silently replaced.
        """
        current = self.read(errors="replace")
        if current is None:
            await self.save(self.configuration.script_content)
            return
        self.configuration = ScriptConfiguration(script_content=current)
        self.config_store.save(self.configuration)
        logger.info("Loaded existing script from %s", self.script_path)
