import asyncio
import logging
import os
import shutil
from pathlib import Path

from executor._base import ExecutionResult
from executor.audit import AuditLogger
from executor.store import ScriptStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024
_CHUNK_SIZE = 64 * 1024


def default_interpreter() -> str:
    if os.name == "nt":
        return "bash"
    if Path("/bin/bash").exists():
        return "/bin/bash"
    return shutil.which("sh") or "/bin/sh"


async def _drain(stream: asyncio.StreamReader, limit: int) -> tuple[bytes, bool]:
    """Read a pipe to EOF, keeping at most `limit` bytes."""
    kept = bytearray()
    truncated = False
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            break
        room = limit - len(kept)
        if room > 0:
            kept.extend(chunk[:room])
        if len(chunk) > room:
            truncated = True
    return bytes(kept), truncated


class ExecutionEngine:
    def __init__(
        self,
        store: ScriptStore,
        audit: AuditLogger,
        interpreter: str | None = None,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ):
        self.store = store
        self.audit = audit
        self.interpreter = interpreter or default_interpreter()
        self.max_output_bytes = max_output_bytes

    async def execute(self) -> ExecutionResult | None:
        """Run the stored script to completion.

        Returns None when there is no script file to run. A non-zero exit
        code is reported, not raised.
        """
        try:
            await self.store.ensure_synced()
        except OSError:
            # already logged by the store; fall through to the existence check
            pass

        script_path = self.store.script_path
        if not self.store.exists:
            logger.warning("Script file not found at %s", script_path)
            self.audit.append(f"SCRIPT NOT FOUND: {script_path}")
            return None

        self.audit.append(f"EXECUTING SCRIPT: {script_path}")
        try:
            proc = await asyncio.create_subprocess_exec(
                self.interpreter,
                str(script_path),
                cwd=str(script_path.parent),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.exception("Failed to start %s for %s", self.interpreter, script_path)
            self.audit.append(f"EXECUTION FAILED: {e}")
            self.audit.separator()
            return ExecutionResult(exit_code=None, stdout="", stderr="", error=str(e))

        (out, out_cut), (err, err_cut) = await asyncio.gather(
            _drain(proc.stdout, self.max_output_bytes),
            _drain(proc.stderr, self.max_output_bytes),
        )
        exit_code = await proc.wait()

        result = ExecutionResult(
            exit_code=exit_code,
            stdout=out.decode(errors="replace"),
            stderr=err.decode(errors="replace"),
            truncated=out_cut or err_cut,
        )
        self._report(result)
        return result

    def _report(self, result: ExecutionResult) -> None:
        if result.stdout:
            logger.info("Script output: %s", result.stdout)
            self.audit.append(f"STDOUT: {result.stdout}")
        if result.stderr:
            logger.error("Script error: %s", result.stderr)
            self.audit.append(f"STDERR: {result.stderr}")
        if result.truncated:
            logger.warning("Script output exceeded %d bytes and was truncated", self.max_output_bytes)
            self.audit.append(f"OUTPUT TRUNCATED AT {self.max_output_bytes} BYTES")
        logger.info("Script executed with exit code: %d", result.exit_code)
        self.audit.append(f"EXIT CODE: {result.exit_code}")
        self.audit.append("EXECUTION COMPLETED")
        self.audit.separator()
