"""Post-commit hook installation.

The hook runs ``relmeta post-commit-hook`` after every commit so the
release date follows the last commit without anyone remembering to.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from relmeta.core.config import DEFAULT_GIT_TIMEOUT_SECONDS
from relmeta.core.result import Err, Ok, Result
from relmeta.platform.files import atomic_write_text
from relmeta.platform.process import run as run_process

from .oracle import GIT_ENV

__all__ = [
    "HOOK_MARKER",
    "HookError",
    "install_post_commit_hook",
    "post_commit_script",
    "resolve_hooks_dir",
]

HOOK_MARKER = "# managed by relmeta"


@dataclass(frozen=True, slots=True)
class HookError:
    message: str
    hint: str | None = None


def post_commit_script(command: str = "relmeta") -> str:
    return (
        "#!/bin/sh\n"
        f"{HOOK_MARKER}\n"
        "# Keeps release_date in step with the date of the last commit.\n"
        f"exec {command} post-commit-hook\n"
    )


def resolve_hooks_dir(
    root: Path,
    *,
    timeout: float = DEFAULT_GIT_TIMEOUT_SECONDS,
) -> Result[Path, HookError]:
    """Directory git runs hooks from, as git itself resolves it.

    Follows `core.hooksPath` and the `.git` file of worktrees and submodules.
    """
    result = run_process(
        ["git", "-C", str(root), "rev-parse", "--git-path", "hooks"],
        cwd=root,
        timeout=timeout,
        env=GIT_ENV,
    )
    match result:
        case Err(e):
            return Err(
                HookError(
                    message=f"cannot locate the git hooks directory: {e.detail}",
                    hint="Run inside a repository created with `git init` or `git clone`",
                )
            )
        case Ok(stdout):
            line = stdout.strip()
            if not line:
                return Err(HookError(message="git did not report a hooks directory"))
            hooks = Path(line).expanduser()
            return Ok(hooks if hooks.is_absolute() else root / hooks)


def install_post_commit_hook(
    *,
    hooks_dir: Path,
    command: str = "relmeta",
    force: bool = False,
) -> Result[Path, HookError]:
    """Write the post-commit hook into ``hooks_dir``.

    An existing hook written by relmeta is replaced. A foreign hook is left
    alone unless ``force`` is set.
    """
    if not hooks_dir.parent.is_dir():
        return Err(
            HookError(
                message=f"not a git directory: {hooks_dir.parent}",
                hint="Run inside a repository created with `git init` or `git clone`",
            )
        )

    hook = hooks_dir / "post-commit"
    if hook.exists() and not force:
        try:
            existing = hook.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(HookError(message=f"cannot read existing hook {hook}: {e}"))
        if HOOK_MARKER not in existing:
            return Err(
                HookError(
                    message=f"a post-commit hook already exists: {hook}",
                    hint="Re-run with --force to replace it",
                )
            )

    try:
        atomic_write_text(hook, post_commit_script(command))
        mode = hook.stat().st_mode
        os.chmod(hook, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        return Err(HookError(message=f"cannot write {hook}: {e}"))
    return Ok(hook)
