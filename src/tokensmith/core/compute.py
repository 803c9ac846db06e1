"""
Compute functions for ``$compute`` token values.

Every function is a pure transform over color or dimension strings. The
table is keyed by ComputeFunction so that each supported name maps to
exactly one implementation.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence

from . import colors
from .errors import ComputeError
from .ir.tokens import ComputeFunction, parse_compute_function

Arg = str | int | float

_LEADING_NUMBER_RE = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_NUMERIC_CHARS_RE = re.compile(r"[\d.-]")


def format_number(value: float) -> str:
    """Stringify a number without a trailing ``.0`` for integral values."""
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def leading_number(value: Arg) -> float:
    """Parse the numeric magnitude at the start of a dimension like ``"4px"``.

    Raises:
        ComputeError: If the value does not start with a number.
    """
    if isinstance(value, int | float):
        return float(value)
    match = _LEADING_NUMBER_RE.match(value)
    if not match:
        raise ComputeError(f"Expected a numeric value, got {value!r}")
    return float(match.group(0))


def to_number(value: Arg) -> float:
    """Convert a whole argument to a number (factors, amounts, alphas)."""
    try:
        return float(value)
    except ValueError:
        raise ComputeError(f"Expected a number, got {value!r}") from None


def unit_of(value: Arg) -> str:
    """Return ``value`` with its digits, dots and minus signs removed."""
    return _NUMERIC_CHARS_RE.sub("", str(value))


# =============================================================================
# Functions
# =============================================================================


def darken(color: Arg, amount: Arg) -> str:
    return colors.darken(str(color), to_number(amount))


def lighten(color: Arg, amount: Arg) -> str:
    return colors.lighten(str(color), to_number(amount))


def opacity(color: Arg, alpha: Arg) -> str:
    return colors.with_alpha(str(color), to_number(alpha))


def scale(base: Arg, factor: Arg) -> str:
    """Multiply the magnitude of ``base`` and keep its unit: 4px * 2 -> 8px."""
    return f"{format_number(leading_number(base) * to_number(factor))}{unit_of(base)}"


def add(a: Arg, b: Arg) -> str:
    unit = unit_of(a) or unit_of(b)
    return f"{format_number(leading_number(a) + leading_number(b))}{unit}"


def subtract(a: Arg, b: Arg) -> str:
    unit = unit_of(a) or unit_of(b)
    return f"{format_number(leading_number(a) - leading_number(b))}{unit}"


def clamp(value: Arg, minimum: Arg, maximum: Arg) -> str:
    clamped = max(leading_number(minimum), min(leading_number(maximum), leading_number(value)))
    return f"{format_number(clamped)}{unit_of(value)}"


COMPUTE_FUNCTIONS: dict[ComputeFunction, tuple[Callable[..., str], int]] = {
    ComputeFunction.DARKEN: (darken, 2),
    ComputeFunction.LIGHTEN: (lighten, 2),
    ComputeFunction.OPACITY: (opacity, 2),
    ComputeFunction.SCALE: (scale, 2),
    ComputeFunction.ADD: (add, 2),
    ComputeFunction.SUBTRACT: (subtract, 2),
    ComputeFunction.CLAMP: (clamp, 3),
}


def call_compute(name: str | ComputeFunction, args: Sequence[Arg]) -> str:
    """Invoke a compute function with already-resolved positional args.

    Raises:
        UnknownComputeFunctionError: If ``name`` is not a compute function.
        ComputeError: On a wrong argument count or non-numeric magnitude.
    """
    fn = parse_compute_function(name)
    impl, arity = COMPUTE_FUNCTIONS[fn]
    if len(args) != arity:
        raise ComputeError(f"{fn.value}() takes {arity} arguments, got {len(args)}")
    return impl(*args)
