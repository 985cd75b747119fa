"""Arithmetic expression language used in data files.

This module contains:
- The AST node types and Expression (parsed text plus its references)
- parse_expression: recursive-descent parser
- evaluate: evaluator against an environment of numbers
- round_value / power: the numeric functions shared with render helpers
"""

from ._ast import (
    BinaryOp,
    BinaryOperator,
    Call,
    Expression,
    Negate,
    Node,
    NumberLiteral,
    Reference,
    iter_references,
)
from ._evaluator import Environment, evaluate
from ._functions import BUILTIN_FUNCTIONS, BuiltinFunction, normalize_number, power, round_value
from ._parser import Token, TokenKind, parse_expression, tokenize

__all__ = [
    "BUILTIN_FUNCTIONS",
    "BinaryOp",
    "BinaryOperator",
    "BuiltinFunction",
    "Call",
    "Environment",
    "Expression",
    "Negate",
    "Node",
    "NumberLiteral",
    "Reference",
    "Token",
    "TokenKind",
    "evaluate",
    "iter_references",
    "normalize_number",
    "parse_expression",
    "power",
    "round_value",
    "tokenize",
]
