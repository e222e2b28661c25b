"""Project root detection and paths.

The project is the repository whose release record relmeta maintains. Its
root is the nearest directory holding ``relmeta.toml`` or a ``.git`` entry
(a directory, or a file for worktrees and submodules).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .config import CONFIG_FILE_NAME, Config
from .result import Err, Ok, Result

__all__ = [
    "ENV_VAR",
    "Project",
    "ProjectError",
    "ProjectInfo",
    "detect_project",
    "find_project_upward",
    "is_project_root",
]

ENV_VAR = "RELMETA_ROOT"

ProjectSource = Literal["env", "cwd"]


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    def record_path(self, config: Config) -> Path:
        """Absolute path of the release record for this config."""
        return self.root / config.record.path

    def lock_path(self, config: Config) -> Path:
        """Sidecar lock file guarding the record's read-modify-write cycle."""
        record = self.record_path(config)
        return record.with_name(record.name + ".lock")

    def __str__(self) -> str:
        return str(self.root)


@dataclass(frozen=True, slots=True)
class ProjectInfo:
    project: Project
    source: ProjectSource


def is_project_root(path: Path) -> bool:
    return (path / CONFIG_FILE_NAME).is_file() or (path / ".git").exists()


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start for a project root."""
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = ENV_VAR,
) -> Result[ProjectInfo, ProjectError]:
    """Detect the project root directory.

    Detection order:
    1. RELMETA_ROOT environment variable (set by ``--root`` as well)
    2. Search upward from start_dir (or cwd)
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir():
            return Ok(ProjectInfo(project=Project(root=env_path), source="env"))
        return Err(
            ProjectError(
                message=f"${env_var} is set to '{env_value}' but it is not a directory",
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(search_start)
    if found is None:
        return Err(
            ProjectError(
                message=f"Could not find project root ({CONFIG_FILE_NAME} or .git not found)",
                searched_from=search_start,
            )
        )
    return Ok(ProjectInfo(project=Project(root=found), source="cwd"))
