"""
mathexpr: runtime-configurable arithmetic expressions.

This package provides:
- Lexer: Tokenizes expression text
- Parser: Builds an Expression from tokens (shunting-yard)
- Contexts: Resolve constants and functions (static built-ins, extensible
  mappings, chains of both)
- Evaluator: Computes an Expression against a context
- Binder: Turns an Expression into a reusable function of its variables

Usage:
    from mathexpr import parse, Context, chained, BUILTINS

    parse("1 + 2 * 3").eval()                       # 7.0

    f = parse("abs(sin(x + 1) * (x^2 + x + 1))").bind("x")
    f(0.0)

    ctx = chained(Context.empty().with_constant("pi", 1.0), BUILTINS)
    parse("pi + cos(0)").eval(ctx)                  # 2.0
"""

from importlib.metadata import PackageNotFoundError, version

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .operators import Operator

from .expression import (
    Expression,
    Node,
    Literal,
    Variable,
    UnaryOp,
    BinaryOp,
    FunctionCall,
)

from .parser import (
    Parser,
    parse,
)

from .errors import (
    Diagnostic,
    ExprError,
    # Parse errors
    ParseError,
    UnexpectedToken,
    UnknownOperator,
    UnmatchedParenthesis,
    MissingArgument,
    UnexpectedEndOfInput,
    # Evaluation errors
    EvalError,
    UnknownVariable,
    UnknownFunction,
    NumberArgs,
    TooFewArguments,
)

from .builtins import (
    Arity,
    Function,
    BUILTIN_CONSTANTS,
    BUILTIN_FUNCTIONS,
)

from .context import (
    ContextProvider,
    Builtins,
    BUILTINS,
    Context,
    ChainedContext,
    chained,
)

from .evaluator import (
    evaluate,
    evaluate_array,
    eval_str,
)

from .binder import (
    BoundFunction,
    bind,
)

from .config import (
    load_context,
    context_from_mapping,
)

try:
    __version__ = version("mathexpr")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'SourceLocation',
    'SourceSpan',

    # Lexer / parser
    'Lexer',
    'tokenize',
    'Parser',
    'parse',

    # Expression
    'Expression',
    'Node',
    'Literal',
    'Variable',
    'UnaryOp',
    'BinaryOp',
    'FunctionCall',
    'Operator',

    # Errors
    'Diagnostic',
    'ExprError',
    'ParseError',
    'UnexpectedToken',
    'UnknownOperator',
    'UnmatchedParenthesis',
    'MissingArgument',
    'UnexpectedEndOfInput',
    'EvalError',
    'UnknownVariable',
    'UnknownFunction',
    'NumberArgs',
    'TooFewArguments',

    # Contexts
    'Arity',
    'Function',
    'BUILTIN_CONSTANTS',
    'BUILTIN_FUNCTIONS',
    'ContextProvider',
    'Builtins',
    'BUILTINS',
    'Context',
    'ChainedContext',
    'chained',

    # Evaluation
    'evaluate',
    'evaluate_array',
    'eval_str',
    'BoundFunction',
    'bind',

    # Configuration
    'load_context',
    'context_from_mapping',
]
