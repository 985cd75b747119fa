"""Recursive-descent parser for data-file expressions.

Grammar::

    expr    := term (('+' | '-') term)*
    term    := factor (('*' | '/') factor)*
    factor  := '-' factor | NUMBER | call | IDENT | '(' expr ')'
    call    := IDENT '(' expr (',' expr)* ')'

Identifiers are dotted key paths. Call names must be built-in functions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import cast

from datatex._errors import ExpressionSyntaxError, SourceLocation
from datatex._value import KeyPath

from ._ast import BinaryOp, BinaryOperator, Call, Expression, Negate, Node, NumberLiteral, Reference
from ._functions import BUILTIN_FUNCTIONS, check_finite


class TokenKind(StrEnum):
    NUMBER = auto()
    IDENT = auto()
    OPERATOR = auto()
    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()
    END = auto()


@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    text: str
    position: int


_TOKEN_PATTERN = re.compile(
    r"""
    (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<ident>[A-Za-z_]\w*(?:\.(?:[A-Za-z_]\w*|\d+))*)
    | (?P<operator>[-+*/])
    | (?P<lparen>\()
    | (?P<rparen>\))
    | (?P<comma>,)
    | (?P<space>\s+)
    """,
    re.VERBOSE,
)

_GROUP_KINDS = {
    "number": TokenKind.NUMBER,
    "ident": TokenKind.IDENT,
    "operator": TokenKind.OPERATOR,
    "lparen": TokenKind.LPAREN,
    "rparen": TokenKind.RPAREN,
    "comma": TokenKind.COMMA,
}


def tokenize(text: str, source: str = "<expression>") -> list[Token]:
    tokens: list[Token] = []
    position = 0
    while position < len(text):
        match = _TOKEN_PATTERN.match(text, position)
        if match is None:
            raise ExpressionSyntaxError(
                SourceLocation(source, column=position + 1),
                f"Unexpected character '{text[position]}' in '{text}'",
            )
        group = cast("str", match.lastgroup)
        if group != "space":
            tokens.append(Token(_GROUP_KINDS[group], match.group(), position))
        position = match.end()
    tokens.append(Token(TokenKind.END, "", len(text)))
    return tokens


class _Parser:
    def __init__(self, text: str, source: str) -> None:
        self.text = text
        self.source = source
        self.tokens = tokenize(text, source)
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _error(self, message: str, token: Token | None = None) -> ExpressionSyntaxError:
        token = token or self.current
        return ExpressionSyntaxError(SourceLocation(self.source, column=token.position + 1), message)

    def _expect(self, kind: TokenKind, description: str) -> Token:
        if self.current.kind != kind:
            found = self.current.text or "end of expression"
            msg = f"Expected {description}, found '{found}' in '{self.text}'"
            raise self._error(msg)
        return self._advance()

    def _at_operator(self, *ops: str) -> bool:
        return self.current.kind == TokenKind.OPERATOR and self.current.text in ops

    def parse(self) -> Node:
        if self.current.kind == TokenKind.END:
            msg = "Empty expression"
            raise self._error(msg)
        node = self.expr()
        if self.current.kind != TokenKind.END:
            msg = f"Unexpected '{self.current.text}' in '{self.text}'"
            raise self._error(msg)
        return node

    def expr(self) -> Node:
        node = self.term()
        while self._at_operator("+", "-"):
            op = BinaryOperator(self._advance().text)
            node = BinaryOp(op, node, self.term())
        return node

    def term(self) -> Node:
        node = self.factor()
        while self._at_operator("*", "/"):
            op = BinaryOperator(self._advance().text)
            node = BinaryOp(op, node, self.factor())
        return node

    def factor(self) -> Node:
        token = self.current
        if self._at_operator("-"):
            self._advance()
            return Negate(self.factor())
        if token.kind == TokenKind.NUMBER:
            self._advance()
            return NumberLiteral(_parse_number(token.text))
        if token.kind == TokenKind.IDENT:
            self._advance()
            if self.current.kind == TokenKind.LPAREN:
                return self.call(token)
            return Reference(KeyPath.parse(token.text))
        if token.kind == TokenKind.LPAREN:
            self._advance()
            node = self.expr()
            self._expect(TokenKind.RPAREN, "')'")
            return node
        found = token.text or "end of expression"
        msg = f"Expected a number, key or '(', found '{found}' in '{self.text}'"
        raise self._error(msg)

    def call(self, name_token: Token) -> Node:
        name = name_token.text
        function = BUILTIN_FUNCTIONS.get(name)
        if function is None:
            known = ", ".join(BUILTIN_FUNCTIONS)
            msg = f"Unknown function '{name}'. Available functions: {known}"
            raise self._error(msg, name_token)

        self._expect(TokenKind.LPAREN, "'('")
        args = [self.expr()]
        while self.current.kind == TokenKind.COMMA:
            self._advance()
            args.append(self.expr())
        self._expect(TokenKind.RPAREN, "')'")

        if not function.accepts(len(args)):
            msg = f"{name}() takes {function.arity} argument(s), {len(args)} given"
            raise self._error(msg, name_token)
        return Call(name, tuple(args))


def _parse_number(text: str) -> int | float:
    value = int(text) if text.isdigit() else float(text)
    return check_finite(value, f"Number literal {text}")


def parse_expression(text: str, source: str = "<expression>") -> Expression:
    """Parse expression text (without the ``expr:`` marker).

    Args:
        text: The expression text, e.g. ``"round(100 * a / b)"``.
        source: Used in error locations, typically the key path of the expression.

    Returns:
        The parsed Expression with its ordered references.

    Raises:
        ExpressionSyntaxError: If the text is not a valid expression.
        NumericOverflowError: If a number literal does not fit in a double.

    """
    stripped = text.strip()
    ast = _Parser(stripped, source).parse()
    return Expression.from_ast(stripped, ast)
