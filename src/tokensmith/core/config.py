"""
Resolver configuration.

Read from the ``[resolver]`` table of a ``tokensmith.toml``:

    [resolver]
    max_passes = 10
    max_inheritance_depth = 100
    on_unresolved = "drop"   # or "error"
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "tokensmith.toml"


class UnresolvedPolicy(StrEnum):
    """What to do with tokens still unresolved after the last pass."""

    DROP = "drop"
    ERROR = "error"


@dataclass(frozen=True)
class ResolverConfig:
    """Bounds and policies for a TokenResolver."""

    max_passes: int = 10
    max_inheritance_depth: int = 100
    on_unresolved: UnresolvedPolicy = UnresolvedPolicy.DROP

    def __post_init__(self) -> None:
        if not isinstance(self.max_passes, int) or self.max_passes < 1:
            raise ConfigError(f"resolver.max_passes must be >= 1, got {self.max_passes}")
        if not isinstance(self.max_inheritance_depth, int) or self.max_inheritance_depth < 1:
            raise ConfigError(
                f"resolver.max_inheritance_depth must be >= 1, got {self.max_inheritance_depth}"
            )
        try:
            object.__setattr__(self, "on_unresolved", UnresolvedPolicy(self.on_unresolved))
        except ValueError:
            valid = ", ".join(p.value for p in UnresolvedPolicy)
            raise ConfigError(
                f"resolver.on_unresolved must be one of {valid}, got {self.on_unresolved!r}"
            ) from None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResolverConfig:
        unknown = set(data) - {"max_passes", "max_inheritance_depth", "on_unresolved"}
        if unknown:
            logger.warning(f"Ignoring unknown resolver settings: {', '.join(sorted(unknown))}")
        return cls(
            max_passes=data.get("max_passes", 10),
            max_inheritance_depth=data.get("max_inheritance_depth", 100),
            on_unresolved=data.get("on_unresolved", UnresolvedPolicy.DROP),
        )


def find_config(start: Path) -> Path | None:
    """Search ``start`` and its parents for a tokensmith.toml."""
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None) -> ResolverConfig:
    """Load resolver settings, falling back to defaults when absent.

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values.
    """
    if path is None or not path.exists():
        logger.debug("No tokensmith.toml found, using default resolver settings")
        return ResolverConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    resolver_data = data.get("resolver", {})
    if not isinstance(resolver_data, dict):
        raise ConfigError(f"[resolver] in {path} must be a table")
    return ResolverConfig.from_dict(resolver_data)
