"""Discovery of expression strings in a value tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from datatex._errors import ExpressionSyntaxError, NumericOverflowError, SourceLocation
from datatex._expr import parse_expression

from ._nodes import ExpressionNode

if TYPE_CHECKING:
    from datatex._value import KeyPath, ValueTree

logger = logging.getLogger(__name__)

EXPRESSION_MARKER = "expr:"


def is_expression(value: Any) -> bool:
    """Check if a value is an expression string (``"expr: ..."``)."""
    return isinstance(value, str) and value.lstrip().startswith(EXPRESSION_MARKER)


def strip_marker(value: str) -> str:
    return value.lstrip()[len(EXPRESSION_MARKER) :].strip()


def parse_expression_node(path: KeyPath, raw: str) -> ExpressionNode:
    """Parse one expression string found at ``path``.

    Raises:
        ExpressionSyntaxError: With the key path as the error location.
        NumericOverflowError: If a number literal is out of range.

    """
    text = strip_marker(raw)
    try:
        expression = parse_expression(text, source=str(path))
    except ExpressionSyntaxError as e:
        # Point at the key and the column within the expression text
        location = SourceLocation(str(path), column=e.location.column)
        raise ExpressionSyntaxError(location, e.message) from e
    except NumericOverflowError as e:
        raise e.with_path(path) from None
    return ExpressionNode(path=path, raw=raw, expression=expression)


def extract_expressions(tree: ValueTree) -> dict[KeyPath, ExpressionNode]:
    """Find and parse every expression string in the tree.

    Args:
        tree: The loaded value tree.

    Returns:
        Expression nodes keyed by key path, in document order.

    Raises:
        ExpressionSyntaxError: If any expression text is malformed.

    """
    nodes: dict[KeyPath, ExpressionNode] = {}
    for path, value in tree.iter_leaves():
        if not is_expression(value):
            continue
        node = parse_expression_node(path, value)
        deps = ", ".join(map(str, node.dependencies))
        logger.debug("Found expression %s = %r (depends on: %s)", path, node.text, deps)
        nodes[path] = node

    logger.debug("Extracted %d expression(s)", len(nodes))
    return nodes
