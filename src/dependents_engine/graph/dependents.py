"""Reverse dependency lookups: who depends on a package.

Transitive dependents are found by walking (dependency, dependent)
edges from the root. The closure is then ordered so that every package
comes after the packages it depends on, and each row records whether
it names the root directly in its own dependency map.
"""

from __future__ import annotations

from dataclasses import dataclass

from dependents_engine.graph.builder import DependencyGraph, Edge
from dependents_engine.graph.toposort import toposort


@dataclass(frozen=True)
class DependentRow:
    name: str
    is_transitive: bool


def find_all_dependents(root: str, edges: list[Edge]) -> list[str]:
    """Every package reachable from *root* along dependency edges.

    Discovery order, no duplicates. *root* itself is included only when
    a cycle leads back to it.
    """
    by_source: dict[str, list[str]] = {}
    for source, target in edges:
        by_source.setdefault(source, []).append(target)

    found: dict[str, None] = {}
    pending = [root]
    while pending:
        node = pending.pop()
        for dependent in by_source.get(node, []):
            if dependent not in found:
                found[dependent] = None
                pending.append(dependent)
    return list(found)


def closure_edges(closure: list[str], edges: list[Edge]) -> list[Edge]:
    """Edges of the subgraph induced by *closure*, grouped by target."""
    members = set(closure)
    sources_by_target: dict[str, list[str]] = {}
    for source, target in edges:
        sources_by_target.setdefault(target, []).append(source)

    restricted: list[Edge] = []
    for dep in closure:
        related = dict.fromkeys(
            s for s in sources_by_target.get(dep, []) if s == dep or s in members
        )
        restricted.extend((source, dep) for source in related)
    return restricted


def find_dependents(root: str, graph: DependencyGraph) -> list[DependentRow]:
    """Ordered dependents of *root*, each flagged direct or transitive.

    An unknown root or one nobody depends on yields an empty list.
    """
    closure = sorted(set(find_all_dependents(root, graph.edges)) | {root})
    ordered = toposort(closure_edges(closure, graph.edges))

    rows = []
    for name in ordered:
        if name == root:
            continue
        record = graph.records.get(name)
        direct = record is not None and record.depends_on(root)
        rows.append(DependentRow(name=name, is_transitive=not direct))
    return rows
