"""Row selection for dependents lookups: owner allow-list and direct-only mode."""

from __future__ import annotations

from dataclasses import dataclass, field

from dependents_engine.graph.builder import DependencyGraph
from dependents_engine.graph.dependents import DependentRow, find_dependents
from dependents_engine.models import ProjectRecord
from dependents_engine.registry.urls import extract_owner, is_canonical_url


def is_filtered(owners: list[str] | None, project: ProjectRecord) -> bool:
    """True if *project* falls outside the owner allow-list.

    Without an allow-list nothing is filtered. With one, projects not
    hosted at a canonical GitHub URL are always filtered.
    """
    if owners is None:
        return False
    if not is_canonical_url(project.url):
        return True
    return extract_owner(project.url) not in owners


@dataclass
class LookupReport:
    """Dependents of one package, after filtering."""

    root: str
    rows: list[tuple[DependentRow, ProjectRecord]] = field(default_factory=list)
    total: int = 0

    @property
    def suppressed(self) -> int:
        return self.total - len(self.rows)


def select_rows(
    rows: list[DependentRow],
    records: dict[str, ProjectRecord],
    owners: list[str] | None = None,
    direct_only: bool = False,
) -> list[tuple[DependentRow, ProjectRecord]]:
    """Keep the rows that pass the owner filter and direct-only mode."""
    selected = []
    for row in rows:
        project = records[row.name]
        if is_filtered(owners, project):
            continue
        if direct_only and row.is_transitive:
            continue
        selected.append((row, project))
    return selected


def lookup(
    root: str,
    graph: DependencyGraph,
    owners: list[str] | None = None,
    direct_only: bool = False,
) -> LookupReport:
    """Find, order and filter the dependents of *root*."""
    rows = find_dependents(root, graph)
    return LookupReport(
        root=root,
        rows=select_rows(rows, graph.records, owners, direct_only),
        total=len(rows),
    )
