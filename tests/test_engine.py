"""Tests for running the stored script through the interpreter."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from executor.engine import ExecutionEngine, default_interpreter
from tests.conftest import posix_only


@posix_only
class TestExecute:
    @pytest.mark.asyncio
    async def test_exit_code_is_passed_through(self, engine, store):
        await store.save("exit 7\n")

        result = await engine.execute()

        assert result.exit_code == 7
        assert result.success is True

    @pytest.mark.asyncio
    async def test_stdout_is_captured(self, engine, store):
        await store.save("echo hello\n")

        result = await engine.execute()

        assert "hello" in result.stdout
        assert result.exit_code == 0
        assert result.stderr == ""

    @pytest.mark.asyncio
    async def test_stderr_is_captured(self, engine, store):
        await store.save("echo oops >&2\nexit 1\n")

        result = await engine.execute()

        assert result.stderr.strip() == "oops"
        assert result.exit_code == 1

    @pytest.mark.asyncio
    async def test_runs_in_script_directory(self, engine, store, script_path):
        await store.save("pwd\n")

        result = await engine.execute()

        assert Path(result.stdout.strip()).resolve() == script_path.parent.resolve()

    @pytest.mark.asyncio
    async def test_resyncs_before_running(self, engine, store, script_path):
        await store.save("echo configured\n")
        script_path.write_text("echo tampered\n")

        result = await engine.execute()

        assert result.stdout.strip() == "configured"

    @pytest.mark.asyncio
    async def test_audit_trail(self, engine, store, audit_path):
        await store.save("echo out\necho err >&2\nexit 2\n")

        await engine.execute()

        log = audit_path.read_text()
        order = [
            log.index("EXECUTING SCRIPT"),
            log.index("STDOUT: out"),
            log.index("STDERR: err"),
            log.index("EXIT CODE: 2"),
            log.index("EXECUTION COMPLETED"),
        ]
        assert order == sorted(order)
        assert log.endswith("\n\n")

    @pytest.mark.asyncio
    async def test_output_is_capped(self, store, audit):
        engine = ExecutionEngine(store, audit, interpreter="/bin/sh", max_output_bytes=10)
        await store.save("i=0\nwhile [ $i -lt 1000 ]; do echo 0123456789; i=$((i+1)); done\n")

        result = await engine.execute()

        assert result.stdout == "0123456789"
        assert result.truncated is True
        assert result.exit_code == 0

    @pytest.mark.asyncio
    async def test_spawn_failure_is_reported_not_raised(self, store, audit, audit_path, tmp_path):
        engine = ExecutionEngine(store, audit, interpreter=str(tmp_path / "no-such-shell"))
        await store.save("echo hi\n")

        result = await engine.execute()

        assert result.exit_code is None
        assert result.error
        assert result.success is False
        assert "EXECUTION FAILED" in audit_path.read_text()

    @pytest.mark.asyncio
    async def test_undecodable_script_is_resynced_and_run(self, engine, store, script_path):
        await store.save("echo hi\n")
        script_path.write_bytes(b"echo caf\xe9\n")

        result = await engine.execute()

        assert result.stdout == "hi\n"
        assert result.exit_code == 0

    @pytest.mark.asyncio
    async def test_unwritable_audit_log_does_not_break_execute(self, engine, store, tmp_path):
        await store.save("echo hi\n")
        engine.audit.path = tmp_path / "missing-dir" / "executor.log"

        result = await engine.execute()

        assert result.exit_code == 0


class TestMissingScript:
    @pytest.mark.asyncio
    async def test_no_op_when_script_cannot_be_written(self, engine, store, script_path, audit_path):
        script_path.parent.parent.mkdir(parents=True)
        script_path.parent.write_text("not a directory")

        with patch(
            "executor.engine.asyncio.create_subprocess_exec", AsyncMock()
        ) as spawn:
            result = await engine.execute()

        assert result is None
        spawn.assert_not_awaited()
        assert "SCRIPT NOT FOUND" in audit_path.read_text()


def test_interpreter_defaults_to_platform_shell(store, audit):
    assert ExecutionEngine(store, audit).interpreter == default_interpreter()
