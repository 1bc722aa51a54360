import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_LOG = Path("/tmp/executor.log")


class AuditLogger:
    """Append-only trail of script activity, kept apart from application logging.

    Writes never raise: a missing directory or a read-only file only costs
    the entry.
    """

    def __init__(self, path: Path = DEFAULT_AUDIT_LOG):
        self.path = Path(path)

    def append(self, message: str) -> None:
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._write(f"[{stamp}] {message}\n")

    def separator(self) -> None:
        self._write("\n")

    def _write(self, line: str) -> None:
        try:
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line)
        except Exception as e:  # noqa: BLE001
            logger.debug("Audit log %s not writable: %s", self.path, e)
