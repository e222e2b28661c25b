from __future__ import annotations

from dataclasses import dataclass

import typer

from relmeta.core.config import Config, load_config_or_default
from relmeta.core.errors import ErrorCode
from relmeta.core.project import Project, detect_project
from relmeta.core.result import Err
from relmeta.git.oracle import CommitOracle
from relmeta.output.console import ConsoleProtocol, RichConsole
from relmeta.platform.clock import Today
from relmeta.sync.service import SyncService


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    config: Config
    console: ConsoleProtocol
    oracle: CommitOracle | None = None
    today: Today | None = None

    def sync_service(self) -> SyncService:
        return SyncService(
            project=self.project,
            config=self.config,
            console=self.console,
            oracle=self.oracle,
            today=self.today,
        )


def build_context() -> CLIContext:
    project_result = detect_project()
    if isinstance(project_result, Err):
        typer.echo(f"error: {project_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    project = project_result.value.project
    config_result = load_config_or_default(project.config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        project=project,
        config=config_result.value,
        console=RichConsole(),
    )
