"""Typed reads from untyped TOML tables.

``tomllib`` hands back plain dicts. ``Table`` narrows values at that
boundary and names the offending key (``git.timeout``) when one has the
wrong type, so config dataclasses only ever see the expected types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeGuard, cast

__all__ = ["StrDict", "Table", "as_str_dict"]

StrDict = dict[str, object]


def _is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    return all(isinstance(k, str) for k in cast(dict[object, object], obj))


def as_str_dict(obj: object) -> StrDict | None:
    return obj if _is_str_dict(obj) else None


@dataclass(frozen=True, slots=True)
class Table:
    """A TOML table plus its dotted location, for error messages.

    Every getter returns None for a missing key and raises ValueError for
    a present key of the wrong type.
    """

    data: Mapping[str, object]
    path: str = ""

    def _where(self, key: str) -> str:
        return f"{self.path}.{key}" if self.path else key

    def table(self, key: str) -> Table:
        """Nested table; an absent one reads as empty."""
        value = self.data.get(key)
        if value is None:
            return Table({}, self._where(key))
        nested = as_str_dict(value)
        if nested is None:
            raise ValueError(f"[{self._where(key)}] must be a table")
        return Table(nested, self._where(key))

    def string(self, key: str) -> str | None:
        value = self.data.get(key)
        if value is None:
            return None
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{self._where(key)} must be a non-empty string")
        return value.strip()

    def number(self, key: str) -> float | None:
        value = self.data.get(key)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{self._where(key)} must be a number")
        return float(value)

    def boolean(self, key: str) -> bool | None:
        value = self.data.get(key)
        if value is None:
            return None
        if not isinstance(value, bool):
            raise ValueError(f"{self._where(key)} must be true or false")
        return value
