from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path

import pytest

import relmeta.git.hooks as hooks_module
from relmeta.core.result import Err, Ok, Result
from relmeta.git.hooks import (
    HOOK_MARKER,
    install_post_commit_hook,
    post_commit_script,
    resolve_hooks_dir,
)
from relmeta.platform.process import ProcessError


def _git_dir(tmp_path: Path) -> Path:
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    return git_dir


def test_script_runs_post_commit_hook() -> None:
    script = post_commit_script("relmeta")
    assert script.startswith("#!/bin/sh\n")
    assert HOOK_MARKER in script
    assert script.rstrip().endswith("exec relmeta post-commit-hook")


def test_install_writes_executable_hook(tmp_path: Path) -> None:
    git_dir = _git_dir(tmp_path)

    result = install_post_commit_hook(hooks_dir=git_dir / "hooks")

    assert isinstance(result, Ok)
    hook = result.value
    assert hook == git_dir / "hooks" / "post-commit"
    assert hook.read_text(encoding="utf-8") == post_commit_script()
    assert os.access(hook, os.X_OK)


def test_install_replaces_own_hook(tmp_path: Path) -> None:
    git_dir = _git_dir(tmp_path)
    install_post_commit_hook(hooks_dir=git_dir / "hooks")

    result = install_post_commit_hook(hooks_dir=git_dir / "hooks", command="uv run relmeta")

    assert isinstance(result, Ok)
    assert "exec uv run relmeta post-commit-hook" in result.value.read_text(encoding="utf-8")


def test_foreign_hook_is_kept_without_force(tmp_path: Path) -> None:
    hooks = _git_dir(tmp_path) / "hooks"
    hooks.mkdir()
    (hooks / "post-commit").write_text("#!/bin/sh\necho mine\n", encoding="utf-8")

    result = install_post_commit_hook(hooks_dir=hooks)

    assert isinstance(result, Err)
    assert result.error.hint is not None and "--force" in result.error.hint
    assert (hooks / "post-commit").read_text(encoding="utf-8") == "#!/bin/sh\necho mine\n"


def test_foreign_hook_replaced_with_force(tmp_path: Path) -> None:
    hooks = _git_dir(tmp_path) / "hooks"
    hooks.mkdir()
    (hooks / "post-commit").write_text("#!/bin/sh\necho mine\n", encoding="utf-8")

    result = install_post_commit_hook(hooks_dir=hooks, force=True)

    assert isinstance(result, Ok)
    assert HOOK_MARKER in result.value.read_text(encoding="utf-8")


def test_requires_git_directory(tmp_path: Path) -> None:
    result = install_post_commit_hook(hooks_dir=tmp_path / ".git" / "hooks")

    assert isinstance(result, Err)
    assert "not a git directory" in result.error.message


def _fake_run(output: Result[str, ProcessError], seen: list[list[str]]):
    def fake(
        cmd: list[str],
        *,
        cwd: Path,
        timeout: float,
        env: Mapping[str, str] | None = None,
    ) -> Result[str, ProcessError]:
        seen.append(cmd)
        return output

    return fake


class TestResolveHooksDir:
    def test_asks_git_for_the_hooks_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        seen: list[list[str]] = []
        monkeypatch.setattr(hooks_module, "run_process", _fake_run(Ok(".git/hooks\n"), seen))

        result = resolve_hooks_dir(tmp_path)

        assert result == Ok(tmp_path / ".git" / "hooks")
        assert seen == [["git", "-C", str(tmp_path), "rev-parse", "--git-path", "hooks"]]

    def test_absolute_path_is_kept(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        common = tmp_path / "main" / ".git" / "hooks"
        monkeypatch.setattr(hooks_module, "run_process", _fake_run(Ok(f"{common}\n"), []))

        assert resolve_hooks_dir(tmp_path / "worktree") == Ok(common)

    def test_git_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        failure = ProcessError(
            command=("git", "rev-parse"),
            returncode=128,
            stdout="",
            stderr="fatal: not a git repository",
        )
        monkeypatch.setattr(hooks_module, "run_process", _fake_run(Err(failure), []))

        result = resolve_hooks_dir(tmp_path)

        assert isinstance(result, Err)
        assert "not a git repository" in result.error.message
        assert result.error.hint is not None

    def test_empty_output(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(hooks_module, "run_process", _fake_run(Ok("\n"), []))

        assert isinstance(resolve_hooks_dir(tmp_path), Err)


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestResolveHooksDirWithGit:
    def _git(self, cwd: Path, *args: str) -> None:
        subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)

    def test_plain_repository(self, tmp_path: Path) -> None:
        self._git(tmp_path, "init", "-q")

        result = resolve_hooks_dir(tmp_path)

        assert isinstance(result, Ok)
        assert result.value.resolve() == (tmp_path / ".git" / "hooks").resolve()

    def test_git_file_points_at_separate_git_dir(self, tmp_path: Path) -> None:
        repo = tmp_path / "repo"
        store = tmp_path / "store"
        self._git(tmp_path, "init", "-q", "--separate-git-dir", str(store), str(repo))
        assert (repo / ".git").is_file()

        hooks = resolve_hooks_dir(repo)
        assert isinstance(hooks, Ok)
        assert hooks.value.resolve() == (store / "hooks").resolve()

        installed = install_post_commit_hook(hooks_dir=hooks.value)
        assert isinstance(installed, Ok)
        assert (store / "hooks" / "post-commit").is_file()

    def test_core_hooks_path(self, tmp_path: Path) -> None:
        self._git(tmp_path, "init", "-q")
        self._git(tmp_path, "config", "core.hooksPath", ".githooks")

        hooks = resolve_hooks_dir(tmp_path)
        assert isinstance(hooks, Ok)
        assert hooks.value.resolve() == (tmp_path / ".githooks").resolve()

        installed = install_post_commit_hook(hooks_dir=hooks.value)
        assert isinstance(installed, Ok)
        assert (tmp_path / ".githooks" / "post-commit").is_file()
        assert not (tmp_path / ".git" / "hooks" / "post-commit").exists()
