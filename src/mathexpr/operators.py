"""
Operator table: symbols, precedence, associativity and arithmetic.

Arithmetic goes through numpy ufuncs so that every operator follows IEEE 754
rules (1/0 is inf, 0/0 and (-8)^(1/3) are NaN, overflow is inf) and works
elementwise when free variables are bound to arrays. Callers evaluate inside
``numpy.errstate(all="ignore")``.
"""

import math
from enum import Enum, auto

import numpy as np

from .tokens import TokenType


class Operator(Enum):
    """Arithmetic operators."""
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    REM = auto()
    POW = auto()
    NEG = auto()    # prefix -
    POS = auto()    # prefix +
    FACT = auto()   # postfix !

    @property
    def symbol(self) -> str:
        return SYMBOLS[self]

    @property
    def precedence(self) -> int:
        return PRECEDENCE[self]

    @property
    def right_associative(self) -> bool:
        return self in RIGHT_ASSOCIATIVE

    @property
    def is_unary(self) -> bool:
        return self in UNARY_OPERATORS


# Precedence levels (higher = tighter binding)
PRECEDENCE = {
    Operator.ADD: 1,
    Operator.SUB: 1,
    Operator.MUL: 2,
    Operator.DIV: 2,
    Operator.REM: 2,
    Operator.NEG: 3,
    Operator.POS: 3,
    Operator.POW: 4,
    Operator.FACT: 5,
}

RIGHT_ASSOCIATIVE = {Operator.POW, Operator.NEG, Operator.POS}

UNARY_OPERATORS = {Operator.NEG, Operator.POS, Operator.FACT}

SYMBOLS = {
    Operator.ADD: "+",
    Operator.SUB: "-",
    Operator.MUL: "*",
    Operator.DIV: "/",
    Operator.REM: "%",
    Operator.POW: "^",
    Operator.NEG: "-",
    Operator.POS: "+",
    Operator.FACT: "!",
}

# Token -> operator, by position in the expression
BINARY_TOKENS = {
    TokenType.PLUS: Operator.ADD,
    TokenType.MINUS: Operator.SUB,
    TokenType.STAR: Operator.MUL,
    TokenType.SLASH: Operator.DIV,
    TokenType.PERCENT: Operator.REM,
    TokenType.CARET: Operator.POW,
}

PREFIX_TOKENS = {
    TokenType.MINUS: Operator.NEG,
    TokenType.PLUS: Operator.POS,
}

POSTFIX_TOKENS = {
    TokenType.BANG: Operator.FACT,
}


def _factorial_scalar(x: float) -> float:
    """x! for non-negative integers, NaN otherwise."""
    x = float(x)
    if math.isnan(x) or x < 0.0:
        return math.nan
    if math.isinf(x):
        return math.inf
    if not x.is_integer():
        return math.nan
    try:
        return math.gamma(x + 1.0)
    except OverflowError:
        return math.inf


factorial = np.vectorize(_factorial_scalar, otypes=[float])


UNARY_IMPLEMENTATIONS = {
    Operator.NEG: np.negative,
    Operator.POS: np.positive,
    Operator.FACT: factorial,
}

BINARY_IMPLEMENTATIONS = {
    Operator.ADD: np.add,
    Operator.SUB: np.subtract,
    Operator.MUL: np.multiply,
    Operator.DIV: np.divide,
    Operator.REM: np.fmod,
    Operator.POW: np.power,
}
