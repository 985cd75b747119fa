"""Resolve computed values in TOML/JSON data sets and render them into documents."""

__all__ = [
    "CircularDependencyError",
    "DataFormat",
    "DatatexError",
    "DependencyGraph",
    "DivisionByZeroError",
    "EvaluationError",
    "ExpressionNode",
    "ExpressionSyntaxError",
    "HelperArgumentError",
    "HelperCall",
    "HelperContext",
    "HelperLibrary",
    "InvalidArgumentError",
    "KeyPath",
    "MissingConfigKeyError",
    "MissingPairedKeyError",
    "NumericOverflowError",
    "ParseError",
    "Ref",
    "ResolutionState",
    "ResolvedData",
    "Resolver",
    "SourceLocation",
    "TypeMismatchError",
    "UnknownHelperError",
    "UnknownReferenceError",
    "UnsupportedFormatError",
    "ValueKind",
    "ValueTree",
    "dump_data",
    "evaluate",
    "export_data",
    "extract_expressions",
    "format_number",
    "load_data",
    "load_data_from_path",
    "load_data_from_stream",
    "parse_expression",
    "render_value",
    "resolve_data",
    "resolve_file",
    "resolve_tree",
]

from ._errors import (
    CircularDependencyError,
    DatatexError,
    DivisionByZeroError,
    EvaluationError,
    ExpressionSyntaxError,
    HelperArgumentError,
    InvalidArgumentError,
    MissingConfigKeyError,
    MissingPairedKeyError,
    NumericOverflowError,
    ParseError,
    SourceLocation,
    TypeMismatchError,
    UnknownHelperError,
    UnknownReferenceError,
    UnsupportedFormatError,
)
from ._expr import evaluate, parse_expression
from ._graph import DependencyGraph
from ._helpers import HelperCall, HelperContext, HelperLibrary, Ref, render_value
from ._loader import DataFormat, dump_data, export_data, load_data, load_data_from_path, load_data_from_stream
from ._resolve import (
    ExpressionNode,
    ResolutionState,
    Resolver,
    extract_expressions,
    resolve_data,
    resolve_file,
    resolve_tree,
)
from ._value import KeyPath, ResolvedData, ValueKind, ValueTree, format_number
