"""
Lexer for arithmetic expressions.

Converts source text into a stream of tokens for the parser.
Supports:
- Decimal number literals with optional fraction and exponent (1.5e-3)
- Identifiers (letters, digits and underscores, not starting with a digit)
- Single-character operators + - * / % ^ ! and punctuation ( ) ,
- Whitespace, including newlines, between tokens
"""

from typing import List, Optional, Iterator
from .tokens import (
    Token, TokenType, SourceLocation, SourceSpan,
    SINGLE_CHAR_TOKENS, UNSUPPORTED_OPERATORS,
)
from .errors import (
    error_unexpected_character,
    error_unknown_operator,
)


def _is_digit(ch: str) -> bool:
    # str.isdigit() also accepts characters such as '²' that float() rejects
    return '0' <= ch <= '9'


class Lexer:
    """
    Tokenizer for arithmetic expressions.

    Usage:
        lexer = Lexer("sin(x) + 1")
        tokens = lexer.tokenize()

    Or lazily:
        for token in Lexer("sin(x) + 1"):
            process(token)

    Iteration always restarts from the beginning of the source, so a Lexer
    can be iterated any number of times.
    """

    def __init__(self, source: str):
        self.source = source
        self._lines: Optional[List[str]] = None
        self._reset()

    def _reset(self) -> None:
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)

    @property
    def lines(self) -> List[str]:
        """Lazy-load line list for error reporting."""
        if self._lines is None:
            self._lines = self.source.splitlines()
        return self._lines

    def get_source_line(self, line_num: int) -> Optional[str]:
        """Get a specific line of source (1-indexed)."""
        if 1 <= line_num <= len(self.lines):
            return self.lines[line_num - 1]
        return None

    def _location(self) -> SourceLocation:
        return SourceLocation(self.line, self.column, self.pos)

    def _span(self, start: SourceLocation) -> SourceSpan:
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _skip_whitespace(self) -> None:
        while not self._is_at_end() and self._peek().isspace():
            self._advance()

    def _make_token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        span = self._span(start)
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, span)

    def _scan_number(self) -> Token:
        """Scan a numeric literal."""
        start = self._location()

        while _is_digit(self._peek()):
            self._advance()

        if self._peek() == '.':
            self._advance()  # consume '.'
            while _is_digit(self._peek()):
                self._advance()

        # Exponent only if digits follow, otherwise 'e' starts the next token
        if self._peek() in 'eE':
            if _is_digit(self._peek(1)):
                self._advance()
            elif self._peek(1) in '+-' and _is_digit(self._peek(2)):
                self._advance()
                self._advance()
            while _is_digit(self._peek()):
                self._advance()

        lexeme = self.source[start.offset:self.pos]
        return self._make_token(TokenType.NUMBER, float(lexeme), start)

    def _scan_identifier(self) -> Token:
        start = self._location()
        while self._peek().isalnum() or self._peek() == '_':
            self._advance()
        lexeme = self.source[start.offset:self.pos]
        return self._make_token(TokenType.IDENTIFIER, lexeme, start)

    def _scan_token(self) -> Token:
        """Scan the next token."""
        self._skip_whitespace()

        start = self._location()
        if self._is_at_end():
            return Token(TokenType.EOF, None, "", SourceSpan(start, start))

        ch = self._peek()

        if _is_digit(ch) or (ch == '.' and _is_digit(self._peek(1))):
            return self._scan_number()

        if ch.isalpha() or ch == '_':
            return self._scan_identifier()

        self._advance()

        if ch in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[ch], ch, start)

        if ch in UNSUPPORTED_OPERATORS:
            raise error_unknown_operator(
                ch, self._span(start), self.get_source_line(start.line)
            )

        raise error_unexpected_character(
            ch, self._span(start), self.get_source_line(start.line)
        )

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list ending with EOF."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens, starting from the beginning of the source."""
        self._reset()
        while True:
            token = self._scan_token()
            yield token
            if token.type == TokenType.EOF:
                break


def tokenize(source: str) -> List[Token]:
    """
    Convenience function to tokenize an expression.

    Raises:
        UnexpectedToken: On the first character that cannot start a token
        UnknownOperator: If that character is an unsupported operator symbol
    """
    return Lexer(source).tokenize()
