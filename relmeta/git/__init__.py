"""Git access: the commit oracle and hook installation.

Usage:
    from relmeta.git import CommitOracle

    oracle = CommitOracle(project.root, timeout=config.git.timeout)
    count = oracle.commit_count()
"""

from relmeta.git.hooks import (
    HookError,
    install_post_commit_hook,
    post_commit_script,
    resolve_hooks_dir,
)
from relmeta.git.oracle import CommitOracle, parse_commit_count, parse_commit_date

__all__ = [
    # Oracle
    "CommitOracle",
    "parse_commit_count",
    "parse_commit_date",
    # Hooks
    "HookError",
    "install_post_commit_hook",
    "post_commit_script",
    "resolve_hooks_dir",
]
