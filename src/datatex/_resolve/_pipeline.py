"""End-to-end resolution: load, extract, resolve, freeze."""

import logging
from pathlib import Path

from datatex._loader import DataFormat, load_data, load_data_from_path
from datatex._value import ResolvedData, ValueTree

from ._extract import extract_expressions
from ._resolver import Resolver

logger = logging.getLogger(__name__)


def resolve_tree(tree: ValueTree) -> ResolvedData:
    """Resolve every expression of a tree and freeze the result.

    The tree is mutated in place. Nothing is returned unless every expression
    resolved; on failure the exception propagates and the tree must not be
    rendered.

    Args:
        tree: A freshly loaded (or already resolved) value tree.

    Returns:
        The read-only resolved data.

    """
    nodes = extract_expressions(tree)
    if nodes:
        Resolver(tree, nodes).resolve()
    else:
        logger.debug("No expressions to resolve")
    return tree.freeze()


def resolve_data(content: bytes | str, data_format: DataFormat | str, *, source: str = "<string>") -> ResolvedData:
    """Load serialized data and resolve it."""
    return resolve_tree(load_data(content, data_format, source=source))


def resolve_file(path: Path | str) -> ResolvedData:
    """Load a TOML or JSON file and resolve it."""
    return resolve_tree(load_data_from_path(Path(path)))
