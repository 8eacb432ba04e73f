"""
Expression evaluation.

Walks the Expression arena front to back, storing each node's value by
position, and resolves names through a context. Evaluation never modifies
the Expression or the context.
"""

from typing import Any, List, Optional

import numpy as np

from .context import ContextProvider, BUILTINS
from .expression import (
    Expression, Literal, Variable, UnaryOp, BinaryOp, FunctionCall,
)
from .operators import UNARY_IMPLEMENTATIONS, BINARY_IMPLEMENTATIONS
from .parser import parse
from .errors import UnknownVariable


def _run(expression: Expression, context: ContextProvider) -> Any:
    """Evaluate every node and return the value of the last one."""
    values: List[Any] = [None] * len(expression.nodes)

    # inf and NaN results are silent
    with np.errstate(all="ignore"):
        for position, node in enumerate(expression.nodes):
            if isinstance(node, Literal):
                values[position] = node.value
            elif isinstance(node, Variable):
                value = context.get_var(node.name)
                if value is None:
                    raise UnknownVariable(node.name)
                values[position] = value
            elif isinstance(node, UnaryOp):
                values[position] = UNARY_IMPLEMENTATIONS[node.operator](values[node.operand])
            elif isinstance(node, BinaryOp):
                values[position] = BINARY_IMPLEMENTATIONS[node.operator](
                    values[node.left], values[node.right]
                )
            elif isinstance(node, FunctionCall):
                args = [values[i] for i in node.args]
                values[position] = context.eval_func(node.name, args)
            else:
                raise RuntimeError(f"Unknown node type: {type(node).__name__}")

    return values[-1]


def evaluate(expression: Expression, context: Optional[ContextProvider] = None) -> float:
    """
    Evaluate an expression to a float.

    Args:
        expression: A parsed Expression
        context: Name resolution; defaults to the built-in catalog

    Raises:
        UnknownVariable: A variable is not defined in the context
        UnknownFunction: A function is not defined in the context
        NumberArgs: A fixed-arity function got the wrong number of arguments
        TooFewArguments: A variadic function got too few arguments
    """
    if context is None:
        context = BUILTINS
    return float(_run(expression, context))


def evaluate_array(expression: Expression, context: Optional[ContextProvider] = None) -> np.ndarray:
    """
    Evaluate an expression whose variables may resolve to numpy arrays.

    Operators and built-in functions apply elementwise; custom functions in
    the context must accept arrays too.
    """
    if context is None:
        context = BUILTINS
    return np.asarray(_run(expression, context), dtype=float)


def eval_str(source: str, context: Optional[ContextProvider] = None) -> float:
    """Parse and evaluate ``source`` in one step."""
    return evaluate(parse(source), context)
