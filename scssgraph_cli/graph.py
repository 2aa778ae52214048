"""Dependency graph construction and traversal for SCSS variables."""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterator, List, Mapping, Sequence, Set, Tuple

from .errors import CircularDependencyError
from .models import VariableDefinition

DependencyGraph = Dict[str, List[str]]


def build_dependency_graph(variables: Mapping[str, VariableDefinition]) -> DependencyGraph:
    """Map each variable to the dependencies that are themselves defined.

    References to unknown names are left out of the graph but stay on the
    definition, so they only fail once something tries to resolve them.
    """
    return {
        name: [dep for dep in definition.dependencies if dep in variables]
        for name, definition in variables.items()
    }


def _walk_cycles(graph: Mapping[str, Sequence[str]], stop_at_first: bool) -> List[List[str]]:
    cycles: List[List[str]] = []
    visited: Set[str] = set()
    on_stack: Set[str] = set()

    for root in graph:
        if root in visited:
            continue

        visited.add(root)
        on_stack.add(root)
        path = [root]
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(graph.get(root, ())))]

        while stack:
            node, neighbours = stack[-1]
            for nxt in neighbours:
                if nxt not in visited:
                    visited.add(nxt)
                    on_stack.add(nxt)
                    path.append(nxt)
                    stack.append((nxt, iter(graph.get(nxt, ()))))
                    break
                if nxt in on_stack:
                    cycle = path[path.index(nxt):] + [nxt]
                    if stop_at_first:
                        raise CircularDependencyError(cycle)
                    cycles.append(cycle)
            else:
                stack.pop()
                on_stack.discard(node)
                path.pop()

    return cycles


def detect_cycles(graph: Mapping[str, Sequence[str]]) -> None:
    """Raise on the first cycle found by a depth-first walk of *graph*.

    The reported path starts and ends with the repeated variable, e.g.
    ``["a", "b", "c", "a"]``.

    Raises:
        CircularDependencyError: If the graph is not acyclic
    """
    _walk_cycles(graph, stop_at_first=True)


def find_cycles(graph: Mapping[str, Sequence[str]]) -> List[List[str]]:
    """Like :func:`detect_cycles` but collect every back edge instead of raising."""
    return _walk_cycles(graph, stop_at_first=False)


def dependency_chain(graph: Mapping[str, Sequence[str]], name: str) -> List[str]:
    """Everything *name* transitively depends on, *name* first (DFS preorder)."""
    chain: List[str] = []
    seen: Set[str] = set()
    stack = [name]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        chain.append(current)
        stack.extend(reversed(graph.get(current, ())))
    return chain


def dependents(
    graph: Mapping[str, Sequence[str]],
    name: str,
    transitive: bool = True,
) -> List[str]:
    """Variables whose value depends on *name* (the reverse direction)."""
    reverse: Dict[str, List[str]] = {}
    for node, deps in graph.items():
        for dep in deps:
            reverse.setdefault(dep, []).append(node)

    found: List[str] = []
    seen = {name}
    queue = deque([name])
    while queue:
        current = queue.popleft()
        for parent in reverse.get(current, []):
            if parent in seen:
                continue
            seen.add(parent)
            found.append(parent)
            if transitive:
                queue.append(parent)
    return found
