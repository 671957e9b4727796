"""Deterministic, cycle-tolerant topological sort."""

from __future__ import annotations

from collections import defaultdict


def unique_nodes(edges: list[tuple[str, str]]) -> list[str]:
    """Nodes of *edges* in order of first appearance."""
    seen: dict[str, None] = {}
    for source, target in edges:
        seen.setdefault(source, None)
        seen.setdefault(target, None)
    return list(seen)


def toposort(edges: list[tuple[str, str]]) -> list[str]:
    """Order the nodes of *edges* so every source precedes its targets.

    Depth-first post-order, walking nodes from the last-seen backwards
    and each node's outgoing edges from the last backwards; the same
    input always gives the same order. An edge that leads back into the
    current path (a cycle, or a self-loop) is skipped instead of
    raising, so every node still appears exactly once.
    """
    nodes = unique_nodes(edges)
    outgoing: dict[str, list[str]] = defaultdict(list)
    for source, target in edges:
        outgoing[source].append(target)

    WHITE, GRAY, BLACK = 0, 1, 2
    color: dict[str, int] = defaultdict(lambda: WHITE)
    ordered: list[str] = []

    for start in reversed(nodes):
        if color[start] != WHITE:
            continue
        color[start] = GRAY
        stack = [(start, iter(reversed(outgoing[start])))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if color[child] == WHITE:
                    color[child] = GRAY
                    stack.append((child, iter(reversed(outgoing[child]))))
                    break
            else:
                stack.pop()
                color[node] = BLACK
                ordered.append(node)

    ordered.reverse()
    return ordered
