"""Shared pytest fixtures for tokensmith tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tokensmith.core.ir import TokenSource, compute, ref
from tokensmith.core.resolver import TokenResolver

SOURCES_YAML = """\
sources:
  - id: base
    name: Base
    tokens:
      colors:
        primary: 221 83% 53%
        background: 0 0% 100%
        link: {$ref: colors.primary}
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


@pytest.fixture
def resolver() -> TokenResolver:
    """Return an empty resolver with default settings."""
    return TokenResolver()


@pytest.fixture
def base_source() -> TokenSource:
    """Return a base theme with literals, a reference and a computed token."""
    return TokenSource(
        id="base",
        name="Base",
        tokens={
            "colors": {
                "primary": "221 83% 53%",
                "background": "0 0% 100%",
                "link": ref("colors.primary"),
            },
            "spacing": {
                "unit": "4px",
                "sm": compute("scale", "{spacing.unit}", 2),
                "md": compute("scale", "{spacing.unit}", 4),
            },
        },
    )


@pytest.fixture
def sources_file(tmp_path: Path) -> Path:
    """Write a two-source YAML file and return its path."""
    path = tmp_path / "tokens.yaml"
    path.write_text(SOURCES_YAML, encoding="utf-8")
    return path
