"""
Binding expressions to free variables.

A BoundFunction closes over an Expression, a context and an ordered list of
free variable names. Calling it with values for those names re-runs the
evaluator with the values layered ahead of the context, so repeated calls
never re-parse.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from .builtins import Function
from .context import ContextProvider, ChainedContext, BUILTINS
from .evaluator import evaluate, evaluate_array
from .expression import Expression
from .errors import UnknownVariable

logger = logging.getLogger(__name__)


class _FreeVariables(ContextProvider):
    """Values of the free variables for a single call."""

    __slots__ = ("_values",)

    def __init__(self, values: Dict[str, float]):
        self._values = values

    def get_var(self, name: str) -> Optional[float]:
        return self._values.get(name)

    def get_func(self, name: str) -> Optional[Function]:
        return None


class BoundFunction:
    """
    An expression turned into a function of its free variables.

    Usage:
        f = bind(parse("x^2 + y"), BUILTINS, ["x", "y"])
        f(2.0, 1.0)                                  # 5.0
        f.sample(np.linspace(0, 1, 5), 1.0)          # array of 5 values
    """

    def __init__(self, expression: Expression, context: ContextProvider,
                 names: Tuple[str, ...]):
        self._expression = expression
        self._context = context
        self._names = names

    @property
    def expression(self) -> Expression:
        return self._expression

    @property
    def context(self) -> ContextProvider:
        return self._context

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def arity(self) -> int:
        return len(self._names)

    def _layered(self, values: Sequence) -> ContextProvider:
        if len(values) != len(self._names):
            raise TypeError(
                f"{self!r} takes {len(self._names)} argument"
                f"{'s' if len(self._names) != 1 else ''} ({len(values)} given)"
            )
        if not self._names:
            return self._context
        return ChainedContext(_FreeVariables(dict(zip(self._names, values))), self._context)

    def __call__(self, *values: float) -> float:
        return evaluate(self._expression, self._layered(values))

    def sample(self, *arrays) -> np.ndarray:
        """
        Evaluate over arrays of values, one array (or scalar) per free variable.

        Inputs are broadcast against each other; the result has the
        broadcast shape.
        """
        inputs = np.broadcast_arrays(*[np.asarray(a, dtype=float) for a in arrays])
        result = evaluate_array(self._expression, self._layered(inputs))
        shape = inputs[0].shape if inputs else ()
        return np.array(np.broadcast_to(result, shape), dtype=float)

    def __repr__(self) -> str:
        return f"<BoundFunction ({', '.join(self._names)}) -> {self._expression}>"


def bind(expression: Expression,
         context: Optional[ContextProvider] = None,
         names: Union[str, Iterable[str]] = ()) -> BoundFunction:
    """
    Bind an expression to an ordered list of free variables.

    Args:
        expression: A parsed Expression
        context: Resolution for every other name; defaults to the built-ins
        names: Free variable names in positional argument order (a single
               name may be passed as a string)

    Returns:
        A BoundFunction taking one float per name

    Raises:
        UnknownVariable: A variable is neither free nor defined in the context
        ValueError: A name is listed twice

    Function names are resolved when the BoundFunction is called.
    """
    if context is None:
        context = BUILTINS
    if isinstance(names, str):
        names = (names,)
    names = tuple(names)

    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"free variable names must be unique: {', '.join(duplicates)}")

    for name in expression.variables():
        if name not in names and context.get_var(name) is None:
            raise UnknownVariable(name)

    logger.debug("bound %r over (%s)", str(expression), ", ".join(names))
    return BoundFunction(expression, context, names)
