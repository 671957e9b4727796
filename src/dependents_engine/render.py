"""Text renderings of a lookup report."""

from __future__ import annotations

from dependents_engine.lookup import LookupReport
from dependents_engine.registry.urls import to_https_url


def render_plain(report: LookupReport) -> list[str]:
    """``name - url`` lines; transitive dependents carry a ``*``."""
    lines = []
    for row, project in report.rows:
        mark = "*" if row.is_transitive else ""
        lines.append(f"{row.name}{mark} - {to_https_url(project.url)}")
    return lines


def render_markdown(report: LookupReport) -> list[str]:
    """A markdown checklist, one linked item per dependent."""
    lines = []
    for row, project in report.rows:
        mark = "*" if row.is_transitive else ""
        lines.append(f"- [ ] [{row.name}]({to_https_url(project.url)}){mark}")
    return lines


def render(report: LookupReport, *, markdown: bool = False) -> str:
    header = f"Dependants of {report.root}:"
    body = render_markdown(report) if markdown else render_plain(report)
    return "\n".join([header, "", *body])
