"""Typed configuration loading and access.

Configuration lives in an optional ``relmeta.toml`` at the project root.
Every key has a default, so a project without the file works out of the
box:

    [record]
    path = "version_info.py"
    variable = "RELEASE"

    [git]
    timeout = 30.0

    [lock]
    timeout = 10.0

    [dates]
    utc = true
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, Table, as_str_dict

__all__ = [
    "CONFIG_FILE_NAME",
    "DEFAULT_GIT_TIMEOUT_SECONDS",
    "DEFAULT_LOCK_TIMEOUT_SECONDS",
    "DEFAULT_RECORD_PATH",
    "DEFAULT_RECORD_VARIABLE",
    "Config",
    "ConfigError",
    "DatesConfig",
    "GitConfig",
    "LockConfig",
    "RecordConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "relmeta.toml"

DEFAULT_RECORD_PATH = "version_info.py"
DEFAULT_RECORD_VARIABLE = "RELEASE"

# Local git queries (log, rev-list) should answer in well under a second.
DEFAULT_GIT_TIMEOUT_SECONDS = 30.0
DEFAULT_LOCK_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RecordConfig:
    """Where the release record lives.

    ``path`` is relative to the project root.
    """

    path: str = DEFAULT_RECORD_PATH
    variable: str = DEFAULT_RECORD_VARIABLE


@dataclass(frozen=True, slots=True)
class GitConfig:
    timeout: float = DEFAULT_GIT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class LockConfig:
    timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class DatesConfig:
    """Calendar used for "today".

    ``utc`` picks the UTC date; otherwise the local date is used.
    """

    utc: bool = True


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    record: RecordConfig = field(default_factory=RecordConfig)
    git: GitConfig = field(default_factory=GitConfig)
    lock: LockConfig = field(default_factory=LockConfig)
    dates: DatesConfig = field(default_factory=DatesConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: A value is present but has the wrong type or range.
        """
        root = Table(data)
        record = root.table("record")
        git = root.table("git")
        lock = root.table("lock")
        dates = root.table("dates")

        variable = record.string("variable") or DEFAULT_RECORD_VARIABLE
        if not variable.isidentifier():
            raise ValueError(f"record.variable is not a Python identifier: {variable!r}")

        git_timeout = git.number("timeout")
        if git_timeout is not None and git_timeout <= 0:
            raise ValueError("git.timeout must be positive")

        lock_timeout = lock.number("timeout")
        if lock_timeout is not None and lock_timeout < 0:
            raise ValueError("lock.timeout must not be negative")

        utc = dates.boolean("utc")

        return cls(
            record=RecordConfig(
                path=record.string("path") or DEFAULT_RECORD_PATH,
                variable=variable,
            ),
            git=GitConfig(
                timeout=DEFAULT_GIT_TIMEOUT_SECONDS if git_timeout is None else git_timeout
            ),
            lock=LockConfig(
                timeout=DEFAULT_LOCK_TIMEOUT_SECONDS if lock_timeout is None else lock_timeout
            ),
            dates=DatesConfig(utc=True if utc is None else utc),
        )


def _read_toml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        with path.open("rb") as handle:
            data = as_str_dict(tomllib.load(handle))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax in {path.name}: {e}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Cannot read {path}: {e}", path=path))
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load relmeta.toml; a missing file is an error here."""
    raw = _read_toml(path)
    if isinstance(raw, Err):
        return raw
    try:
        return Ok(Config.from_dict(raw.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config in {path.name}: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, otherwise return defaults.

    A present but broken file is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
