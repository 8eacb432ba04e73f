"""
Parsed expression representation.

An Expression is a flat, immutable arena of nodes in evaluation order.
Operator and function nodes refer to their operands by position in the
arena, and every position points at an earlier node, so evaluating the
nodes front to back always finds operand values ready. The last node is
the result.

Expressions hold no bindings: the same Expression can be evaluated any
number of times against any number of contexts.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .operators import Operator


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class Node:
    """Base class for expression nodes."""

    def operands(self) -> Tuple[int, ...]:
        """Positions of the nodes this node consumes."""
        return ()


@dataclass(frozen=True)
class Literal(Node):
    """A numeric literal."""
    value: float


@dataclass(frozen=True)
class Variable(Node):
    """A variable or constant reference, resolved by the context."""
    name: str


@dataclass(frozen=True)
class UnaryOp(Node):
    """A prefix or postfix operation (-x, +x, x!)."""
    operator: Operator
    operand: int

    def operands(self) -> Tuple[int, ...]:
        return (self.operand,)


@dataclass(frozen=True)
class BinaryOp(Node):
    """A binary operation (a + b, a ^ b)."""
    operator: Operator
    left: int
    right: int

    def operands(self) -> Tuple[int, ...]:
        return (self.left, self.right)


@dataclass(frozen=True)
class FunctionCall(Node):
    """A call of a named function, resolved by the context."""
    name: str
    args: Tuple[int, ...]

    @property
    def arg_count(self) -> int:
        return len(self.args)

    def operands(self) -> Tuple[int, ...]:
        return self.args


# =============================================================================
# Expression
# =============================================================================

@dataclass(frozen=True)
class Expression:
    """
    Immutable parsed expression.

    Usage:
        expr = parse("abs(sin(x + 1) * (x^2 + x + 1))")
        f = expr.bind("x")
        f(0.5)

        parse("1 + 2 * 3").eval()   # 7.0
    """
    nodes: Tuple[Node, ...]
    source: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        if not self.nodes:
            raise ValueError("an expression needs at least one node")
        for position, node in enumerate(self.nodes):
            for operand in node.operands():
                if not 0 <= operand < position:
                    raise ValueError(
                        f"node {position} ({type(node).__name__}) refers to "
                        f"position {operand}, which is not an earlier node"
                    )

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __getitem__(self, position: int) -> Node:
        return self.nodes[position]

    def __str__(self) -> str:
        if self.source is not None:
            return self.source
        return self.to_rpn()

    def __repr__(self) -> str:
        return f"Expression({str(self)!r})"

    def variables(self) -> List[str]:
        """Names of referenced variables, in order of first use."""
        return _unique(n.name for n in self.nodes if isinstance(n, Variable))

    def functions(self) -> List[str]:
        """Names of called functions, in order of first use."""
        return _unique(n.name for n in self.nodes if isinstance(n, FunctionCall))

    def to_rpn(self) -> str:
        """Render in reverse Polish notation, e.g. ``x 1 + sin/1``."""
        parts = []
        for node in self.nodes:
            if isinstance(node, Literal):
                parts.append(repr(node.value))
            elif isinstance(node, Variable):
                parts.append(node.name)
            elif isinstance(node, UnaryOp):
                if node.operator == Operator.FACT:
                    parts.append("!")
                else:
                    parts.append(f"u{node.operator.symbol}")
            elif isinstance(node, BinaryOp):
                parts.append(node.operator.symbol)
            elif isinstance(node, FunctionCall):
                parts.append(f"{node.name}/{node.arg_count}")
        return " ".join(parts)

    def eval(self, context=None) -> float:
        """Evaluate against ``context``, or the built-in constants and functions."""
        from .evaluator import evaluate
        return evaluate(self, context)

    def bind(self, *names: str, context=None):
        """
        Create a reusable function of the given free variables.

        Args:
            names: Free variable names, in positional argument order
            context: Context for all other names (defaults to the built-ins)

        Raises:
            UnknownVariable: If a variable is neither free nor in the context
        """
        from .binder import bind
        return bind(self, context, names)


def _unique(names) -> List[str]:
    seen = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)
