"""
Expression errors and diagnostics.

Two disjoint families are raised:

- ParseError: the expression text is malformed (E0xx lexer, E1xx parser)
- EvalError: the expression is well formed but references a name or
  function the context cannot resolve (E4xx)

Floating point domain problems (sqrt of a negative number, division by
zero) are never errors; they produce NaN or infinities.
"""

from dataclasses import dataclass, field
from typing import Optional, List
from .tokens import SourceSpan


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    span: Optional[SourceSpan] = None
    source_line: Optional[str] = None   # The line of source containing the error
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        # Header: location: error[code]: message
        if self.span is not None:
            parts.append(f"{self.span.start}: error[{self.code}]: {self.message}")
        else:
            parts.append(f"error[{self.code}]: {self.message}")

        # Source line with caret
        if show_source and self.span is not None and self.source_line is not None:
            parts.append(f"  |")
            line_num = str(self.span.start.line)
            parts.append(f"{line_num:>3} | {self.source_line}")

            col = self.span.start.column
            end_col = self.span.end.column if self.span.start.line == self.span.end.line else len(self.source_line) + 1
            underline_len = max(1, end_col - col)
            parts.append(f"    | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        data = {
            "code": self.code,
            "message": self.message,
            "hints": self.hints,
        }
        if self.span is not None:
            data["range"] = {
                "start": {
                    "line": self.span.start.line,
                    "column": self.span.start.column,
                    "offset": self.span.start.offset,
                },
                "end": {
                    "line": self.span.end.line,
                    "column": self.span.end.column,
                    "offset": self.span.end.offset,
                },
            }
        return data


class ExprError(Exception):
    """Base exception for expression errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    def __str__(self) -> str:
        return self.diagnostic.format()


# --- Parse errors ---

class ParseError(ExprError):
    """Malformed expression text (E0xx, E1xx)."""

    @property
    def span(self) -> Optional[SourceSpan]:
        return self.diagnostic.span

    @property
    def offset(self) -> Optional[int]:
        """0-indexed character offset where the error starts."""
        if self.diagnostic.span is None:
            return None
        return self.diagnostic.span.start.offset


class UnexpectedToken(ParseError):
    """A token or character appeared where the grammar does not allow it."""

    def __init__(self, diagnostic: Diagnostic, found: str):
        self.found = found
        super().__init__(diagnostic)


class UnknownOperator(UnexpectedToken):
    """An operator-like character the grammar does not define."""
    pass


class UnmatchedParenthesis(ParseError):
    """An opening parenthesis without a close, or the reverse."""
    pass


class MissingArgument(ParseError):
    """An empty group or function argument."""
    pass


class UnexpectedEndOfInput(ParseError):
    """Input ended where an operand was required."""
    pass


# --- Evaluation errors ---

class EvalError(ExprError):
    """Valid expression referencing something the context cannot provide (E4xx)."""
    pass


class UnknownVariable(EvalError):
    """E401: a variable or constant is not defined in the context."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(Diagnostic(
            code="E401",
            message=f"unknown variable '{name}'",
        ))


class UnknownFunction(EvalError):
    """E402: a function is not defined in the context."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(Diagnostic(
            code="E402",
            message=f"unknown function '{name}'",
        ))


class NumberArgs(EvalError):
    """E403: a fixed-arity function was called with the wrong number of arguments."""

    def __init__(self, expected: int, name: Optional[str] = None, found: Optional[int] = None):
        self.expected = expected
        self.name = name
        self.found = found
        subject = f"'{name}'" if name else "function"
        message = f"{subject} expects {expected} argument{'s' if expected != 1 else ''}"
        if found is not None:
            message += f", got {found}"
        super().__init__(Diagnostic(code="E403", message=message))


class TooFewArguments(EvalError):
    """E404: a variadic function was called with fewer than its minimum arguments."""

    def __init__(self, name: Optional[str] = None, minimum: int = 1):
        self.name = name
        self.minimum = minimum
        subject = f"'{name}'" if name else "function"
        super().__init__(Diagnostic(
            code="E404",
            message=f"{subject} expects at least {minimum} argument{'s' if minimum != 1 else ''}",
        ))


# --- Lexer error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> UnexpectedToken:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message=f"unexpected character '{char}' at offset {span.start.offset}",
        span=span,
        source_line=source_line,
    )
    return UnexpectedToken(diag, char)


def error_unknown_operator(char: str, span: SourceSpan, source_line: str = None) -> UnknownOperator:
    """E002: Unsupported operator character."""
    diag = Diagnostic(
        code="E002",
        message=f"unknown operator '{char}' at offset {span.start.offset}",
        span=span,
        source_line=source_line,
        hints=["supported operators: + - * / % ^ !"],
    )
    return UnknownOperator(diag, char)


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> UnexpectedToken:
    """E101: Unexpected token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        span=span,
        source_line=source_line,
    )
    return UnexpectedToken(diag, found)


def error_unexpected_eof(expected: str, span: SourceSpan,
                         source_line: str = None) -> UnexpectedEndOfInput:
    """E102: Unexpected end of input."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of input, expected {expected}",
        span=span,
        source_line=source_line,
    )
    return UnexpectedEndOfInput(diag)


def error_unmatched_paren(paren: str, span: SourceSpan,
                          source_line: str = None) -> UnmatchedParenthesis:
    """E103: Unmatched parenthesis."""
    if paren == "(":
        message = "unclosed '('"
        hints = ["add a matching ')'"]
    else:
        message = "unmatched ')'"
        hints = []
    diag = Diagnostic(
        code="E103",
        message=message,
        span=span,
        source_line=source_line,
        hints=hints,
    )
    return UnmatchedParenthesis(diag)


def error_missing_argument(span: SourceSpan, source_line: str = None) -> MissingArgument:
    """E104: Empty group or argument."""
    diag = Diagnostic(
        code="E104",
        message="missing argument",
        span=span,
        source_line=source_line,
        hints=["every group and every comma-separated argument needs an expression"],
    )
    return MissingArgument(diag)
