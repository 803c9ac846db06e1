"""
Single-value token evaluation.

Reduces one TokenValue to a string against a context: the (partially)
resolved category tree of the source being resolved.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .compute import Arg, call_compute, format_number
from .errors import ReferenceNotFoundError
from .ir.tokens import TokenComputed, TokenReference, TokenValue

REFERENCE_RE = re.compile(r"\{([a-zA-Z0-9._-]+)\}")


def contains_reference(value: str) -> bool:
    """Check whether a string holds a ``{path}`` reference."""
    return REFERENCE_RE.search(value) is not None


def is_literal(value: Any) -> bool:
    """True for numbers and for strings without reference syntax."""
    if isinstance(value, str):
        return not contains_reference(value)
    return isinstance(value, int | float)


def _arg_paths(arg: Any) -> list[str]:
    if not isinstance(arg, str):
        return []
    if contains_reference(arg):
        return REFERENCE_RE.findall(arg)
    if arg.startswith("{") and arg.endswith("}"):
        return [arg[1:-1]]
    return []


def referenced_paths(value: TokenValue) -> list[str]:
    """Every dot path ``value`` looks up, in order of appearance."""
    if isinstance(value, str):
        return REFERENCE_RE.findall(value)
    if isinstance(value, TokenReference):
        return [value.ref]
    if isinstance(value, TokenComputed):
        return [path for arg in value.args for path in _arg_paths(arg)]
    return []


def lookup_reference(path: str, context: Mapping[str, Any]) -> str:
    """Traverse ``context`` by dot path and return the leaf as a string.

    Raises:
        ReferenceNotFoundError: If a segment is missing or the path ends on
            a category rather than a token.
    """
    current: Any = context
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            raise ReferenceNotFoundError(path)

    if isinstance(current, str):
        return current
    if isinstance(current, int | float):
        return format_number(current)
    raise ReferenceNotFoundError(path, f"Invalid token reference value: {path}")


def resolve_inline_references(value: str, context: Mapping[str, Any]) -> str:
    """Substitute every ``{path}`` in ``value``; all must resolve."""
    return REFERENCE_RE.sub(lambda match: lookup_reference(match.group(1), context), value)


def _resolve_arg(arg: Arg, context: Mapping[str, Any]) -> Arg:
    if isinstance(arg, str):
        if contains_reference(arg):
            return resolve_inline_references(arg, context)
        if arg.startswith("{") and arg.endswith("}"):
            return lookup_reference(arg[1:-1], context)
    return arg


def resolve_computed(value: TokenComputed, context: Mapping[str, Any]) -> str:
    args = [_resolve_arg(arg, context) for arg in value.args]
    return call_compute(value.fn, args)


def resolve_value(value: TokenValue, context: Mapping[str, Any]) -> str:
    """Resolve one token value.

    Args:
        value: Literal, TokenReference or TokenComputed.
        context: Category -> key -> value tree to look references up in.

    Returns:
        The concrete string value.

    Raises:
        ReferenceNotFoundError: If a referenced path does not exist in context.
        UnknownComputeFunctionError: If a computed value names an unknown function.
        ComputeError: If a compute function rejects its arguments.
    """
    if isinstance(value, str):
        if contains_reference(value):
            return resolve_inline_references(value, context)
        return value
    if isinstance(value, int | float):
        return format_number(value)
    if isinstance(value, TokenReference):
        return lookup_reference(value.ref, context)
    if isinstance(value, TokenComputed):
        return resolve_computed(value, context)
    return str(value)
