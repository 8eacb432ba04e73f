"""
Contexts resolve variable and function names during evaluation.

Every context implements three operations:

- get_var(name): the value of a variable or constant, or None
- get_func(name): the Function descriptor, or None
- eval_func(name, args): call a function, raising UnknownFunction,
  NumberArgs or TooFewArguments

Realizations:

- Builtins: a fixed, hand-matched table of the built-in catalog
- Context: an extensible mapping of constants and functions
- ChainedContext: an outer context shadowing an inner one

Contexts are not locked. Register everything first, then share the
context read-only between threads.
"""

import math
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence, Union

import numpy as np

from .builtins import (
    Arity, Function, BUILTIN_CONSTANTS, BUILTIN_FUNCTIONS,
    one_arg, two_args, one_or_more_args,
    round_half_away, signum, max_of, min_of,
)
from .errors import UnknownFunction


class ContextProvider(ABC):
    """Base class for name resolution during evaluation."""

    @abstractmethod
    def get_var(self, name: str) -> Optional[float]:
        """Look up a variable or constant. Returns None if not defined."""
        pass

    @abstractmethod
    def get_func(self, name: str) -> Optional[Function]:
        """Look up a function descriptor. Returns None if not defined."""
        pass

    def eval_func(self, name: str, args: Sequence[float]) -> float:
        """Call function ``name`` with ``args``."""
        func = self.get_func(name)
        if func is None:
            raise UnknownFunction(name)
        return func(args)


class Builtins(ContextProvider):
    """
    The built-in catalog as a fixed match over names.

    Stateless and immutable; use the shared ``BUILTINS`` instance.
    """

    def get_var(self, name: str) -> Optional[float]:
        if name == "pi":
            return math.pi
        elif name == "e":
            return math.e
        return None

    def get_func(self, name: str) -> Optional[Function]:
        return BUILTIN_FUNCTIONS.get(name)

    def eval_func(self, name: str, args: Sequence[float]) -> float:
        if name == "sqrt":
            return one_arg(name, args, np.sqrt)
        elif name == "exp":
            return one_arg(name, args, np.exp)
        elif name == "ln":
            return one_arg(name, args, np.log)
        elif name == "abs":
            return one_arg(name, args, np.fabs)
        elif name == "sin":
            return one_arg(name, args, np.sin)
        elif name == "cos":
            return one_arg(name, args, np.cos)
        elif name == "tan":
            return one_arg(name, args, np.tan)
        elif name == "asin":
            return one_arg(name, args, np.arcsin)
        elif name == "acos":
            return one_arg(name, args, np.arccos)
        elif name == "atan":
            return one_arg(name, args, np.arctan)
        elif name == "sinh":
            return one_arg(name, args, np.sinh)
        elif name == "cosh":
            return one_arg(name, args, np.cosh)
        elif name == "tanh":
            return one_arg(name, args, np.tanh)
        elif name == "asinh":
            return one_arg(name, args, np.arcsinh)
        elif name == "acosh":
            return one_arg(name, args, np.arccosh)
        elif name == "atanh":
            return one_arg(name, args, np.arctanh)
        elif name == "floor":
            return one_arg(name, args, np.floor)
        elif name == "ceil":
            return one_arg(name, args, np.ceil)
        elif name == "round":
            return one_arg(name, args, round_half_away)
        elif name == "signum":
            return one_arg(name, args, signum)
        elif name == "atan2":
            return two_args(name, args, np.arctan2)
        elif name == "max":
            return one_or_more_args(name, args, max_of)
        elif name == "min":
            return one_or_more_args(name, args, min_of)
        raise UnknownFunction(name)

    def __repr__(self) -> str:
        return "Builtins()"


BUILTINS = Builtins()


class Context(ContextProvider):
    """
    Extensible mapping of constants and functions.

    Usage:
        ctx = (Context()
               .with_constant("g", 9.81)
               .with_unary("double", lambda x: 2 * x)
               .with_function("clamp", 3, lambda x, lo, hi: min(max(x, lo), hi)))

    ``Context()`` starts with the built-in catalog; ``Context.empty()``
    starts with nothing. Builder methods return the context itself.
    """

    def __init__(self, builtins: bool = True):
        self._constants = {}
        self._functions = {}
        if builtins:
            self._constants.update(BUILTIN_CONSTANTS)
            self._functions.update(BUILTIN_FUNCTIONS)

    @classmethod
    def empty(cls) -> "Context":
        return cls(builtins=False)

    @property
    def constants(self) -> Mapping[str, float]:
        """Read-only view of the registered constants."""
        return MappingProxyType(self._constants)

    @property
    def functions(self) -> Mapping[str, Function]:
        """Read-only view of the registered functions."""
        return MappingProxyType(self._functions)

    def with_constant(self, name: str, value: float) -> "Context":
        """Define (or redefine) a constant."""
        self._constants[name] = float(value)
        return self

    def with_function(self, name: str, arity: Union[int, Arity],
                      implementation: Callable[..., float], doc: str = "") -> "Context":
        """
        Define (or redefine) a function.

        Args:
            name: Function name as written in expressions
            arity: Exact argument count, or an Arity such as Arity.at_least(1)
            implementation: Called with the argument values positionally
            doc: Optional description
        """
        self._functions[name] = Function(name, Arity.coerce(arity), implementation, doc)
        return self

    def with_unary(self, name: str, implementation: Callable[[float], float]) -> "Context":
        return self.with_function(name, 1, implementation)

    def with_binary(self, name: str, implementation: Callable[[float, float], float]) -> "Context":
        return self.with_function(name, 2, implementation)

    def with_nary(self, name: str, implementation: Callable[..., float],
                  minimum: int = 1) -> "Context":
        return self.with_function(name, Arity.at_least(minimum), implementation)

    def without(self, name: str) -> "Context":
        """Remove a constant and/or function of this name, if present."""
        self._constants.pop(name, None)
        self._functions.pop(name, None)
        return self

    def get_var(self, name: str) -> Optional[float]:
        return self._constants.get(name)

    def get_func(self, name: str) -> Optional[Function]:
        return self._functions.get(name)

    def __repr__(self) -> str:
        return f"Context({len(self._constants)} constants, {len(self._functions)} functions)"


class ChainedContext(ContextProvider):
    """
    Two contexts searched in order: ``outer`` first, then ``inner``.

    Names defined in ``outer`` shadow the same names in ``inner``; anything
    ``outer`` does not define falls through.
    """

    def __init__(self, outer: ContextProvider, inner: ContextProvider):
        self.outer = outer
        self.inner = inner

    def get_var(self, name: str) -> Optional[float]:
        value = self.outer.get_var(name)
        if value is None:
            return self.inner.get_var(name)
        return value

    def get_func(self, name: str) -> Optional[Function]:
        func = self.outer.get_func(name)
        if func is None:
            return self.inner.get_func(name)
        return func

    def eval_func(self, name: str, args: Sequence[float]) -> float:
        if self.outer.get_func(name) is not None:
            return self.outer.eval_func(name, args)
        return self.inner.eval_func(name, args)

    def __repr__(self) -> str:
        return f"ChainedContext({self.outer!r}, {self.inner!r})"


def chained(outer: ContextProvider, inner: ContextProvider,
            *more: ContextProvider) -> ChainedContext:
    """
    Chain contexts, most specific first.

    ``chained(a, b, c)`` looks in ``a``, then ``b``, then ``c``.
    """
    if more:
        return ChainedContext(outer, chained(inner, *more))
    return ChainedContext(outer, inner)
