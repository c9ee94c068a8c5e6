"""
Prerequisites - Lock resolution and prerequisite graph checks.

Provides:
- Grouping prerequisite edges by capsule
- Lock state for a capsule given the learner's completed set
- Cycle detection for authoring and data audits (networkx)
"""

from collections import defaultdict
from typing import Iterable, Optional

import networkx as nx

from knowgraph.schemas import PrerequisiteEdge


def build_prerequisite_map(edges: Iterable[PrerequisiteEdge]) -> dict[str, list[str]]:
    """Group edges into capsule_id -> [prerequisite_capsule_id, ...], keeping edge order."""
    prereq_map = defaultdict(list)
    for edge in edges:
        if edge.prerequisite_capsule_id not in prereq_map[edge.capsule_id]:
            prereq_map[edge.capsule_id].append(edge.prerequisite_capsule_id)
    return dict(prereq_map)


def missing_prerequisites(
    prerequisite_ids: Iterable[str],
    completed_ids: set[str] | frozenset[str],
    known_ids: Optional[set[str] | frozenset[str]] = None,
) -> list[str]:
    """
    List prerequisites that are not yet satisfied.

    A prerequisite is satisfied only when it is in the completed set and,
    if known_ids is given, part of the loaded graph. Prerequisites outside
    the loaded graph stay unsatisfied whatever the completed set says.

    Args:
        prerequisite_ids: Declared prerequisites of one capsule
        completed_ids: Capsule IDs the learner has completed
        known_ids: Capsule IDs present in the loaded graph

    Returns:
        Unsatisfied prerequisite IDs in declaration order
    """
    missing = []
    for prereq_id in prerequisite_ids:
        if known_ids is not None and prereq_id not in known_ids:
            missing.append(prereq_id)
        elif prereq_id not in completed_ids:
            missing.append(prereq_id)
    return missing


def is_locked(
    prerequisite_ids: Iterable[str],
    completed_ids: set[str] | frozenset[str],
    known_ids: Optional[set[str] | frozenset[str]] = None,
) -> bool:
    """A capsule is locked while any prerequisite is unsatisfied."""
    return bool(missing_prerequisites(prerequisite_ids, completed_ids, known_ids))


# -----------------------------------------------------------------------------
# Graph checks
# -----------------------------------------------------------------------------

def build_prerequisite_graph(edges: Iterable[PrerequisiteEdge]) -> nx.DiGraph:
    """Directed graph with edges prerequisite -> dependent capsule."""
    G = nx.DiGraph()
    for edge in edges:
        G.add_edge(edge.prerequisite_capsule_id, edge.capsule_id)
    return G


def find_cycle_path(
    edges: Iterable[PrerequisiteEdge],
    capsule_id: str,
    prerequisite_id: str,
) -> Optional[list[str]]:
    """
    Check whether adding "capsule_id requires prerequisite_id" closes a cycle.

    Returns:
        The cycle in unlock order, starting and ending at capsule_id
        (e.g. [c, x, p, c]), or None if the edge is safe to add
    """
    if capsule_id == prerequisite_id:
        return [capsule_id, capsule_id]

    G = build_prerequisite_graph(edges)
    if capsule_id not in G or prerequisite_id not in G:
        return None
    if not nx.has_path(G, capsule_id, prerequisite_id):
        return None
    return nx.shortest_path(G, capsule_id, prerequisite_id) + [capsule_id]


def find_prerequisite_cycles(edges: Iterable[PrerequisiteEdge]) -> list[list[str]]:
    """
    Find every elementary cycle in existing prerequisite data.

    Each cycle is rotated to start at its smallest ID and the list is
    sorted, so the report is stable across runs.
    """
    G = build_prerequisite_graph(edges)
    cycles = []
    for cycle in nx.simple_cycles(G):
        start = cycle.index(min(cycle))
        cycles.append(cycle[start:] + cycle[:start])
    return sorted(cycles)
