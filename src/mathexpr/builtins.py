"""
Built-in constants and functions.

The catalog is read-only module data shared by the static ``Builtins``
context and by every ``Context`` created with built-ins. Function
implementations are numpy ufuncs (or compositions of them), so domain
errors give NaN, poles give infinities, and the same catalog evaluates
elementwise over arrays.

Constants:
    pi, e

Functions of one argument:
    sqrt exp ln abs sin cos tan asin acos atan sinh cosh tanh
    asinh acosh atanh floor ceil round signum

Functions of two arguments:
    atan2

Functions of one or more arguments:
    max min
"""

import math
from dataclasses import dataclass
from functools import reduce
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence, Union

import numpy as np

from .errors import NumberArgs, TooFewArguments


# =============================================================================
# Arity
# =============================================================================

def check_arity(args: Sequence, expected: int, name: Optional[str] = None) -> None:
    """Raise NumberArgs unless exactly ``expected`` arguments were given."""
    if len(args) != expected:
        raise NumberArgs(expected, name, len(args))


def check_min_arity(args: Sequence, minimum: int, name: Optional[str] = None) -> None:
    """Raise TooFewArguments unless at least ``minimum`` arguments were given."""
    if len(args) < minimum:
        raise TooFewArguments(name, minimum)


@dataclass(frozen=True)
class Arity:
    """
    Number of arguments a function accepts.

    Usage:
        Arity.exact(2)       # exactly two
        Arity.at_least(1)    # one or more
    """
    minimum: int
    variadic: bool = False

    def __post_init__(self):
        if self.minimum < 0:
            raise ValueError(f"arity cannot be negative: {self.minimum}")

    @classmethod
    def exact(cls, count: int) -> "Arity":
        return cls(count)

    @classmethod
    def at_least(cls, minimum: int) -> "Arity":
        return cls(minimum, variadic=True)

    @classmethod
    def coerce(cls, arity: Union[int, "Arity"]) -> "Arity":
        """Accept a plain int as an exact arity."""
        if isinstance(arity, Arity):
            return arity
        return cls.exact(arity)

    def check(self, args: Sequence, name: Optional[str] = None) -> None:
        if self.variadic:
            check_min_arity(args, self.minimum, name)
        else:
            check_arity(args, self.minimum, name)

    def __str__(self) -> str:
        if self.variadic:
            return f"{self.minimum}+"
        return str(self.minimum)


@dataclass(frozen=True)
class Function:
    """A named function with its arity and implementation."""
    name: str
    arity: Arity
    implementation: Callable[..., float]
    doc: str = ""

    def __call__(self, args: Sequence) -> float:
        self.arity.check(args, self.name)
        return self.implementation(*args)


# =============================================================================
# Implementations
# =============================================================================

def round_half_away(x):
    """Round to nearest, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    r = np.trunc(x)
    return np.where(np.abs(x - r) >= 0.5, r + np.sign(x), r)


def signum(x):
    """1.0 or -1.0 by sign bit, so signum(-0.0) is -1.0; NaN for NaN."""
    return np.where(np.isnan(x), np.nan, np.copysign(1.0, x))


def max_of(*args):
    """Largest argument, ignoring NaN unless every argument is NaN."""
    return reduce(np.fmax, args)


def min_of(*args):
    """Smallest argument, ignoring NaN unless every argument is NaN."""
    return reduce(np.fmin, args)


_UNARY = [
    ("sqrt", np.sqrt, "square root"),
    ("exp", np.exp, "e raised to x"),
    ("ln", np.log, "natural logarithm"),
    ("abs", np.fabs, "absolute value"),
    ("sin", np.sin, "sine (radians)"),
    ("cos", np.cos, "cosine (radians)"),
    ("tan", np.tan, "tangent (radians)"),
    ("asin", np.arcsin, "inverse sine"),
    ("acos", np.arccos, "inverse cosine"),
    ("atan", np.arctan, "inverse tangent"),
    ("sinh", np.sinh, "hyperbolic sine"),
    ("cosh", np.cosh, "hyperbolic cosine"),
    ("tanh", np.tanh, "hyperbolic tangent"),
    ("asinh", np.arcsinh, "inverse hyperbolic sine"),
    ("acosh", np.arccosh, "inverse hyperbolic cosine"),
    ("atanh", np.arctanh, "inverse hyperbolic tangent"),
    ("floor", np.floor, "largest integer not greater than x"),
    ("ceil", np.ceil, "smallest integer not less than x"),
    ("round", round_half_away, "nearest integer, ties away from zero"),
    ("signum", signum, "sign of x as 1.0 or -1.0"),
]


def _build_functions() -> Mapping[str, Function]:
    functions = {}
    for name, impl, doc in _UNARY:
        functions[name] = Function(name, Arity.exact(1), impl, doc)
    functions["atan2"] = Function("atan2", Arity.exact(2), np.arctan2,
                                  "four-quadrant inverse tangent of y/x")
    functions["max"] = Function("max", Arity.at_least(1), max_of, "largest argument")
    functions["min"] = Function("min", Arity.at_least(1), min_of, "smallest argument")
    return MappingProxyType(functions)


BUILTIN_CONSTANTS: Mapping[str, float] = MappingProxyType({
    "pi": math.pi,
    "e": math.e,
})

BUILTIN_FUNCTIONS: Mapping[str, Function] = _build_functions()


# =============================================================================
# Dispatch helpers for hand-matched contexts
# =============================================================================

def one_arg(name: str, args: Sequence, func: Callable):
    check_arity(args, 1, name)
    return func(args[0])


def two_args(name: str, args: Sequence, func: Callable):
    check_arity(args, 2, name)
    return func(args[0], args[1])


def one_or_more_args(name: str, args: Sequence, func: Callable):
    check_min_arity(args, 1, name)
    return func(*args)
