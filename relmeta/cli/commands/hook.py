"""Install-hook command - wire post-commit-hook into git."""

from __future__ import annotations

import typer

from relmeta.cli.context import build_context
from relmeta.core.errors import ErrorCode
from relmeta.core.result import Err, Ok
from relmeta.git.hooks import install_post_commit_hook, resolve_hooks_dir
from relmeta.output.console import Style


def install_hook(
    force: bool = typer.Option(False, "--force", help="Replace a post-commit hook not written by relmeta"),
    command: str = typer.Option("relmeta", "--command", help="Command the hook runs"),
) -> None:
    """Install a git post-commit hook that runs `relmeta post-commit-hook`."""
    ctx = build_context()
    result = resolve_hooks_dir(ctx.project.root, timeout=ctx.config.git.timeout).and_then(
        lambda hooks_dir: install_post_commit_hook(
            hooks_dir=hooks_dir,
            command=command,
            force=force,
        )
    )
    match result:
        case Ok(path):
            ctx.console.success(f"installed {path}")
        case Err(e):
            ctx.console.error(e.message)
            if e.hint:
                ctx.console.print(f"hint: {e.hint}", Style.DIM)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
