"""
Token IR types for the resolution engine.

Defines the value shapes a token may take (literal, reference, computed),
the TokenSource a theme is registered as, and the flat Theme that resolved
tokens are projected back into for exporters and mappers.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..errors import UnknownComputeFunctionError

# =============================================================================
# Categories
# =============================================================================

STANDARD_CATEGORIES: tuple[str, ...] = (
    "colors",
    "spacing",
    "typography",
    "borderRadius",
    "shadows",
    "effects",
    "opacity",
)

# Theme fields that are not token categories.
RESERVED_CATEGORIES: frozenset[str] = frozenset({"id", "name", "description"})


class ComputeFunction(StrEnum):
    """Functions available to ``$compute`` token values."""

    DARKEN = "darken"
    LIGHTEN = "lighten"
    OPACITY = "opacity"
    SCALE = "scale"
    ADD = "add"
    SUBTRACT = "subtract"
    CLAMP = "clamp"


def parse_compute_function(name: str) -> ComputeFunction:
    """Map a function name onto the closed ComputeFunction set.

    Raises:
        UnknownComputeFunctionError: If ``name`` is not a known function.
    """
    try:
        return ComputeFunction(name)
    except ValueError:
        raise UnknownComputeFunctionError(name) from None


# =============================================================================
# Token values
# =============================================================================


class TokenReference(BaseModel):
    """
    Reference to another token by dot path.

    Example:
        TokenReference(ref="colors.primary")  # {"$ref": "colors.primary"}
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    ref: str = Field(alias="$ref", description="Dot path of the referenced token")


class TokenComputed(BaseModel):
    """
    Token computed from a function applied to literal or referenced args.

    The function name is kept as a plain string so sources loaded from files
    round-trip; it is checked against ComputeFunction at resolution time.

    Example:
        TokenComputed(fn="scale", args=["{spacing.unit}", 2])
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    fn: str = Field(alias="$compute", description="Compute function name")
    args: list[str | int | float] = Field(default_factory=list, description="Positional args")


TokenValue = str | int | float | TokenReference | TokenComputed

TokenDefinition = dict[str, dict[str, TokenValue]]

ResolvedTokens = dict[str, dict[str, str]]


def ref(path: str) -> TokenReference:
    """Build a reference token value."""
    return TokenReference(ref=path)


def compute(fn: str, *args: str | int | float) -> TokenComputed:
    """Build a computed token value.

    Raises:
        UnknownComputeFunctionError: If ``fn`` is not a known compute function.
    """
    return TokenComputed(fn=parse_compute_function(fn).value, args=list(args))


# =============================================================================
# Sources
# =============================================================================


class TokenSource(BaseModel):
    """
    A registrable bundle of token definitions, optionally extending a parent.

    Sources are replaced whole by re-registering; mutating ``tokens`` after
    registration bypasses cache invalidation.

    Example:
        TokenSource(
            id="brand-a",
            name="Brand A",
            extends="base",
            tokens={"colors": {"primary": "142 76% 36%"}},
        )
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique source id")
    name: str = Field(description="Human-readable name")
    extends: str | None = Field(default=None, description="Parent source id")
    tokens: TokenDefinition = Field(default_factory=dict, description="Token definitions")

    def token_count(self) -> int:
        return sum(len(category) for category in self.tokens.values())


# =============================================================================
# Themes
# =============================================================================


class Theme(BaseModel):
    """
    Flat theme as consumed by exporters and per-library mappers.

    Every token is a concrete string. Categories beyond the standard ones
    (e.g. ``sidebar``) are kept as extra fields.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str = Field(description="Theme id")
    name: str = Field(description="Theme name")
    description: str | None = Field(default=None, description="Theme description")
    colors: dict[str, str] = Field(default_factory=dict)
    spacing: dict[str, str] = Field(default_factory=dict)
    typography: dict[str, str] = Field(default_factory=dict)
    border_radius: dict[str, str] = Field(default_factory=dict, alias="borderRadius")
    shadows: dict[str, str] = Field(default_factory=dict)
    effects: dict[str, str] = Field(default_factory=dict)
    opacity: dict[str, str] = Field(default_factory=dict)

    def token_categories(self) -> dict[str, dict[str, Any]]:
        """Return every token category keyed by its token-tree name."""
        data = self.model_dump(by_alias=True, exclude={"id", "name", "description"})
        return {name: dict(values) for name, values in data.items() if isinstance(values, dict)}


def theme_to_token_source(theme: Theme, extends_id: str | None = None) -> TokenSource:
    """Convert a flat Theme into a TokenSource ready for registration."""
    return TokenSource(
        id=theme.id,
        name=theme.name,
        extends=extends_id,
        tokens=theme.token_categories(),
    )
