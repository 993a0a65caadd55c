"""
Spike-aware single-source shortest paths (Bellman-Ford).

Every edge is relaxed |V| - 1 times, V being the distinct endpoints of all
edges plus the source. The bounded pass count keeps cyclic graphs finite.
Comparison is strict, so among equally cheap routes the first edge in input
order wins.

Costs are non-negative (SupplyEdge and the settings reject negative base
costs and penalties), so no negative-cycle pass is run.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence
import math

from .cost_model import PricedEdge, SupplyGraph, node_set
from .exceptions import MainSupplierResolutionError


@dataclass(frozen=True)
class PathResult:
    """Distances and predecessor links from one source."""
    source: str
    distances: Dict[str, float]
    predecessors: Dict[str, Optional[str]]
    passes: int
    last_update_pass: int  # 0 when no pass changed a distance

    def distance_to(self, node: str) -> float:
        return self.distances.get(node, math.inf)

    def reaches(self, node: str) -> bool:
        return math.isfinite(self.distance_to(node))

    def path_to(self, target: str) -> Optional[List[str]]:
        return reconstruct_path(self, target)


def bellman_ford(
    priced_edges: Sequence[PricedEdge],
    source: str,
    on_pass: Optional[Callable[[int, Dict[str, float]], None]] = None,
) -> PathResult:
    """
    Shortest adjusted-cost paths from *source* to every node.

    Args:
        priced_edges: Edges priced for this run (read only)
        source: Start node; need not appear in any edge
        on_pass: Optional callback(pass_number, distances_copy) after each pass

    Returns:
        PathResult with distance 0.0 for the source and inf for unreached nodes
    """
    nodes = node_set(priced_edges)
    nodes.add(source)

    distances: Dict[str, float] = {node: math.inf for node in nodes}
    predecessors: Dict[str, Optional[str]] = {node: None for node in nodes}
    distances[source] = 0.0

    passes = len(nodes) - 1
    last_update_pass = 0

    for i in range(1, passes + 1):
        updated = False
        for pe in priced_edges:
            d_from = distances[pe.source]
            if d_from == math.inf:
                continue
            candidate = d_from + pe.adjusted_cost
            if candidate < distances[pe.destination]:
                distances[pe.destination] = candidate
                predecessors[pe.destination] = pe.source
                updated = True
        if updated:
            last_update_pass = i
        if on_pass is not None:
            on_pass(i, dict(distances))

    return PathResult(
        source=source,
        distances=distances,
        predecessors=predecessors,
        passes=passes,
        last_update_pass=last_update_pass,
    )


def reconstruct_path(result: PathResult, target: str) -> Optional[List[str]]:
    """
    Walk predecessor links from *target* back to the source.

    Returns:
        Node ids from source to target, or None when the walk does not end
        at the source (no path).
    """
    if not result.reaches(target):
        return None

    path: List[str] = []
    seen = set()
    current: Optional[str] = target
    while current is not None:
        if current in seen:
            return None
        seen.add(current)
        path.append(current)
        current = result.predecessors.get(current)

    path.reverse()
    if path[0] != result.source:
        return None
    return path


def path_cost(priced_edges: Sequence[PricedEdge], path: Sequence[str]) -> float:
    """
    Sum of adjusted costs along *path*, taking the cheapest parallel edge
    between each consecutive pair.

    Raises:
        ValueError: two consecutive nodes are not connected
    """
    cheapest: Dict[tuple, float] = {}
    for pe in priced_edges:
        key = (pe.source, pe.destination)
        if key not in cheapest or pe.adjusted_cost < cheapest[key]:
            cheapest[key] = pe.adjusted_cost

    total = 0.0
    for u, v in zip(path, path[1:]):
        if (u, v) not in cheapest:
            raise ValueError(f"No supply edge {u}->{v}")
        total += cheapest[(u, v)]
    return total


def resolve_main_supplier(graph: SupplyGraph) -> str:
    """
    The unique node with outgoing and no incoming edges.

    Raises:
        MainSupplierResolutionError: zero or several candidates
    """
    candidates = graph.supplier_candidates()
    if len(candidates) != 1:
        raise MainSupplierResolutionError(candidates)
    return candidates[0]
