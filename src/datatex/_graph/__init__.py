"""Graph module providing the dependency graph over expression nodes."""

from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph"]
