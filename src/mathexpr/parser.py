"""
Operator-precedence (shunting-yard) parser for arithmetic expressions.

Converts a token stream into an Expression arena in evaluation order.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .tokens import Token, TokenType
from .lexer import tokenize
from .operators import Operator, BINARY_TOKENS, PREFIX_TOKENS, POSTFIX_TOKENS
from .expression import (
    Expression, Node, Literal, Variable, UnaryOp, BinaryOp, FunctionCall,
)
from .errors import (
    error_unexpected_token,
    error_unexpected_eof,
    error_unmatched_paren,
    error_missing_argument,
)

logger = logging.getLogger(__name__)


@dataclass
class _Group:
    """An open parenthesis on the operator stack."""
    token: Token                        # the '(' token
    function: Optional[str] = None      # name when the group is a call
    args: List[int] = field(default_factory=list)


@dataclass
class _PendingOperator:
    operator: Operator
    token: Token


class Parser:
    """
    Shunting-yard parser.

    Usage:
        parser = Parser(tokenize(source), source)
        expr = parser.parse_expression()

    Precedence, lowest to highest:
        + -
        * / %
        unary - +
        ^        (right-associative)
        !        (postfix)

    The parser alternates between expecting an operand and expecting an
    operator. A '-' or '+' where an operand is expected is a prefix operator.
    An identifier directly followed by '(' starts a function call; otherwise
    it is a variable. Names are not resolved here.
    """

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source
        self.pos = 0

        self.nodes: List[Node] = []
        self.operands: List[int] = []
        self.stack: List[Union[_PendingOperator, _Group]] = []

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _token_before_last(self) -> Optional[Token]:
        """The token preceding the one just consumed."""
        if self.pos < 2:
            return None
        return self.tokens[self.pos - 2]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _advance(self) -> Token:
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _source_line(self, token: Token) -> Optional[str]:
        if self.source is None:
            return None
        lines = self.source.splitlines()
        line_num = token.span.start.line
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def _error(self, expected: str, token: Token) -> None:
        """Raise an error for ``token`` appearing where ``expected`` was required."""
        if token.type == TokenType.EOF:
            raise error_unexpected_eof(expected, token.span, self._source_line(token))
        raise error_unexpected_token(
            expected, token.describe(), token.span, self._source_line(token)
        )

    # =========================================================================
    # Output
    # =========================================================================

    def _emit(self, node: Node) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def _push_operand(self, node: Node) -> None:
        self.operands.append(self._emit(node))

    def _apply(self, operator: Operator) -> None:
        """Pop the operator's operands and push the combined node."""
        if operator.is_unary:
            operand = self.operands.pop()
            self._push_operand(UnaryOp(operator, operand))
        else:
            right = self.operands.pop()
            left = self.operands.pop()
            self._push_operand(BinaryOp(operator, left, right))

    def _reduce_to_group(self) -> Optional[_Group]:
        """Apply pending operators down to the innermost open group and pop it."""
        while self.stack:
            entry = self.stack.pop()
            if isinstance(entry, _Group):
                return entry
            self._apply(entry.operator)
        return None

    # =========================================================================
    # Token handlers
    # =========================================================================

    def _operand_token(self, token: Token) -> bool:
        """Handle a token where an operand is expected.

        Returns True once an operand is complete.
        """
        if token.type == TokenType.NUMBER:
            self._push_operand(Literal(token.value))
            return True

        if token.type == TokenType.IDENTIFIER:
            if self._check(TokenType.LPAREN):
                paren = self._advance()
                self.stack.append(_Group(paren, function=token.value))
                return False
            self._push_operand(Variable(token.value))
            return True

        if token.type in PREFIX_TOKENS:
            # Nothing to the left, so nothing to reduce
            self.stack.append(_PendingOperator(PREFIX_TOKENS[token.type], token))
            return False

        if token.type == TokenType.LPAREN:
            self.stack.append(_Group(token))
            return False

        previous = self._token_before_last()
        empty_slot = previous is not None and previous.type in (TokenType.LPAREN, TokenType.COMMA)

        if token.type == TokenType.RPAREN:
            top = self.stack[-1] if self.stack else None
            if (previous is not None and previous.type == TokenType.LPAREN
                    and isinstance(top, _Group) and top.function is not None):
                # Zero-argument call: name()
                self.stack.pop()
                self._push_operand(FunctionCall(top.function, ()))
                return True
            if empty_slot:
                raise error_missing_argument(token.span, self._source_line(token))

        if token.type == TokenType.COMMA and empty_slot:
            raise error_missing_argument(token.span, self._source_line(token))

        self._error("operand", token)

    def _operator_token(self, token: Token) -> bool:
        """Handle a token where an operator is expected.

        Returns True if an operand is expected next.
        """
        if token.type in POSTFIX_TOKENS:
            # Highest precedence: applies to the operand just completed
            self._apply(POSTFIX_TOKENS[token.type])
            return False

        if token.type in BINARY_TOKENS:
            operator = BINARY_TOKENS[token.type]
            while self.stack and isinstance(self.stack[-1], _PendingOperator):
                top = self.stack[-1].operator
                if top.precedence > operator.precedence or (
                        top.precedence == operator.precedence
                        and not operator.right_associative):
                    self.stack.pop()
                    self._apply(top)
                else:
                    break
            self.stack.append(_PendingOperator(operator, token))
            return True

        if token.type == TokenType.RPAREN:
            group = self._reduce_to_group()
            if group is None:
                raise error_unmatched_paren(")", token.span, self._source_line(token))
            if group.function is not None:
                group.args.append(self.operands.pop())
                self._push_operand(FunctionCall(group.function, tuple(group.args)))
            return False

        if token.type == TokenType.COMMA:
            group = None
            for entry in reversed(self.stack):
                if isinstance(entry, _Group):
                    group = entry
                    break
            if group is None or group.function is None:
                self._error("operator or ')'", token)
            self._reduce_to_group()
            self.stack.append(group)
            group.args.append(self.operands.pop())
            return True

        self._error("operator", token)

    def _finish(self) -> None:
        """Apply everything left on the stack at end of input."""
        while self.stack:
            entry = self.stack.pop()
            if isinstance(entry, _Group):
                raise error_unmatched_paren(
                    "(", entry.token.span, self._source_line(entry.token)
                )
            self._apply(entry.operator)

    # =========================================================================
    # Entry point
    # =========================================================================

    def parse_expression(self) -> Expression:
        """Parse the whole token list into an Expression."""
        expect_operand = True

        while True:
            token = self._advance()

            if expect_operand:
                if token.type == TokenType.EOF:
                    self._error("operand", token)
                expect_operand = not self._operand_token(token)
            else:
                if token.type == TokenType.EOF:
                    self._finish()
                    break
                expect_operand = self._operator_token(token)

        expr = Expression(tuple(self.nodes), self.source)
        logger.debug("parsed %r into %d nodes", self.source, len(expr))
        return expr


def parse(source: str) -> Expression:
    """
    Parse an expression string.

    Args:
        source: Expression text, e.g. ``"2 * sin(x) + 1"``

    Returns:
        The parsed Expression

    Raises:
        ParseError: If the text is not a well-formed expression
    """
    parser = Parser(tokenize(source), source)
    return parser.parse_expression()
