"""Build the dependency graph from loaded project records."""

from __future__ import annotations

from dataclasses import dataclass, field

from dependents_engine.models import ProjectRecord

Edge = tuple[str, str]


@dataclass
class DependencyGraph:
    """Packages and their (dependency, dependent) edges."""

    nodes: list[str] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    records: dict[str, ProjectRecord] = field(default_factory=dict)

    def summary(self) -> str:
        return f"Dependency Graph: {len(self.nodes)} packages, {len(self.edges)} edges"


def build_graph(projects: list[ProjectRecord]) -> DependencyGraph:
    """Build a graph from every project's latest dependency map.

    Dependencies on packages outside *projects* are dropped. Edges are
    emitted project by project in list order, each as
    ``(dependency, dependent)``. Cycles and duplicates are left in.
    """
    graph = DependencyGraph()
    graph.nodes = [p.name for p in projects]
    graph.records = {p.name: p for p in projects}
    known = set(graph.nodes)

    for project in projects:
        for dep in project.latest.dependency_names:
            if dep in known:
                graph.edges.append((dep, project.name))

    return graph
