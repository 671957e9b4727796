"""Graph module — dependency edges, topological order, reverse lookups."""

from dependents_engine.graph.builder import DependencyGraph, build_graph
from dependents_engine.graph.dependents import DependentRow, find_all_dependents, find_dependents
from dependents_engine.graph.toposort import toposort

__all__ = [
    "DependencyGraph",
    "build_graph",
    "DependentRow",
    "find_all_dependents",
    "find_dependents",
    "toposort",
]
