"""Tests for relmeta.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from relmeta.core.result import Err, Ok
from relmeta.platform.process import LAUNCH_FAILED, ProcessError, run


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "log"),
            returncode=128,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git log failed (exit 128)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(("git", "-C", "/repo", "rev-list", "--count", "HEAD"), 1, "", "")
        assert str(error) == "git -C /repo ... failed (exit 1)"

    def test_detail_is_first_stderr_line(self) -> None:
        error = ProcessError(("git",), 128, "", "\nfatal: bad revision 'HEAD'\nmore\n")
        assert error.detail == "fatal: bad revision 'HEAD'"

    def test_detail_falls_back_to_str(self) -> None:
        error = ProcessError(("git", "log"), 1, "", "")
        assert error.detail == "git log failed (exit 1)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path, timeout=30)

        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path, timeout=30)

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert not result.error.timed_out

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path, timeout=30)

        assert isinstance(result, Err)
        assert result.error.returncode == LAUNCH_FAILED
        assert "nonexistent_command_12345" in result.error.detail

    def test_timeout(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import time; time.sleep(5)"],
            cwd=tmp_path,
            timeout=0.2,
        )

        assert isinstance(result, Err)
        assert result.error.timed_out
        assert result.error.detail == "timed out after 0.2s"

    def test_env_is_layered(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RELMETA_TEST_BASE", "kept")
        script = "import os; print(os.environ['RELMETA_TEST_BASE'], os.environ['EXTRA'])"

        result = run([sys.executable, "-c", script], cwd=tmp_path, timeout=30, env={"EXTRA": "x"})

        assert result == Ok("kept x\n")
