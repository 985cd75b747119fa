"""Resolution of expression strings into numbers.

This module contains:
- ExpressionNode / ResolutionState: parsed expressions and their progress
- extract_expressions: discovery of ``"expr: ..."`` strings in a tree
- Resolver: three-colour depth-first resolution with cycle reporting
- resolve_tree / resolve_data / resolve_file: the full pipeline
"""

from ._extract import EXPRESSION_MARKER, extract_expressions, is_expression
from ._nodes import ExpressionNode, ResolutionState
from ._pipeline import resolve_data, resolve_file, resolve_tree
from ._resolver import Resolver, TreeEnvironment, build_dependency_graph

__all__ = [
    "EXPRESSION_MARKER",
    "ExpressionNode",
    "ResolutionState",
    "Resolver",
    "TreeEnvironment",
    "build_dependency_graph",
    "extract_expressions",
    "is_expression",
    "resolve_data",
    "resolve_file",
    "resolve_tree",
]
