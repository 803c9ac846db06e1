"""
Token source files.

Reads and writes token sources as YAML (JSON files load too, being a YAML
subset). A file holds a top-level ``sources`` list:

    sources:
      - id: base
        name: Base
        tokens:
          spacing:
            unit: 4px
            sm: {$compute: scale, args: ["{spacing.unit}", 2]}
      - id: brand-a
        name: Brand A
        extends: base
        tokens:
          colors:
            primary: 142 76% 36%
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import SourceFileError
from .ir.tokens import TokenSource

logger = logging.getLogger(__name__)


def parse_sources(data: Any, origin: str = "<data>") -> list[TokenSource]:
    """Build TokenSources from already-parsed file data.

    Raises:
        SourceFileError: If the data does not hold a valid ``sources`` list.
    """
    if not isinstance(data, dict) or not isinstance(data.get("sources"), list):
        raise SourceFileError(f"Expected a top-level 'sources' list in {origin}")

    sources: list[TokenSource] = []
    seen: set[str] = set()
    for index, entry in enumerate(data["sources"]):
        try:
            source = TokenSource.model_validate(entry)
        except ValidationError as e:
            raise SourceFileError(f"Invalid token source #{index} in {origin}: {e}") from e
        if source.id in seen:
            raise SourceFileError(f"Duplicate token source id '{source.id}' in {origin}")
        seen.add(source.id)
        sources.append(source)

    logger.debug(f"Parsed {len(sources)} token source(s) from {origin}")
    return sources


def load_sources(path: Path) -> list[TokenSource]:
    """Load token sources from a YAML or JSON file.

    Raises:
        SourceFileError: If the file is missing, unparseable, or invalid.
    """
    if not path.exists():
        raise SourceFileError(f"Token source file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SourceFileError(f"Invalid YAML in {path}: {e}") from e

    return parse_sources(data, str(path))


def dump_sources(sources: Iterable[TokenSource]) -> dict[str, Any]:
    """Serialize sources to plain data with ``$ref``/``$compute`` keys."""
    return {
        "sources": [
            source.model_dump(mode="json", by_alias=True, exclude_none=True) for source in sources
        ]
    }


def save_sources(path: Path, sources: Iterable[TokenSource]) -> Path:
    """Write token sources to a YAML file.

    Returns:
        Path to the written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        yaml.dump(
            dump_sources(sources),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    logger.info(f"Saved token sources to {path}")
    return path
