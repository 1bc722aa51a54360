"""
Shared pytest fixtures for the shell executor tests.

Everything lives under tmp_path: script file, persisted configuration and
audit log.
"""

import os

import pytest

from executor.audit import AuditLogger
from executor.configuration import JsonConfigurationStore
from executor.engine import ExecutionEngine
from executor.store import ScriptStore
from shell_executor.config import Settings

posix_only = pytest.mark.skipif(os.name != "posix", reason="needs a POSIX shell")


@pytest.fixture
def audit_path(tmp_path):
    return tmp_path / "executor.log"


@pytest.fixture
def audit(audit_path):
    return AuditLogger(audit_path)


@pytest.fixture
def script_path(tmp_path):
    return tmp_path / "plugins" / "JellyfinShellExecutor" / "script.sh"


@pytest.fixture
def config_store(tmp_path):
    return JsonConfigurationStore(tmp_path / "plugins" / "JellyfinShellExecutor.json")


@pytest.fixture
def store(script_path, config_store, audit):
    return ScriptStore(script_path, config_store, audit)


@pytest.fixture
def engine(store, audit):
    return ExecutionEngine(store, audit, interpreter="/bin/sh")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        data_dir=tmp_path / "plugins",
        audit_log_path=tmp_path / "executor.log",
        interpreter="/bin/sh",
        api_keys=["secret-key"],
    )
