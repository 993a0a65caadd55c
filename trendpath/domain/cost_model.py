"""
Supply graph and spike-aware edge pricing.

    adjusted_cost(edge) = base_cost + (spike_penalty if destination spiking else 0)

Prices are derived from a SpikeSnapshot on every call and returned as a new
immutable tuple; nothing is cached between runs.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set, Tuple

from .models import SpikeSnapshot, SupplyEdge


@dataclass(frozen=True)
class PricedEdge:
    """A supply edge with its cost for one run."""
    edge: SupplyEdge
    adjusted_cost: float

    @property
    def source(self) -> str:
        return self.edge.source

    @property
    def destination(self) -> str:
        return self.edge.destination

    @property
    def penalized(self) -> bool:
        return self.adjusted_cost != self.edge.base_cost


class SupplyGraph:
    """Directed multigraph of supply edges. Nodes are the edge endpoints."""

    def __init__(self, edges: Iterable[SupplyEdge] = ()):
        self._edges: List[SupplyEdge] = []
        self._outgoing: Dict[str, List[SupplyEdge]] = {}
        self._incoming: Dict[str, List[SupplyEdge]] = {}
        self._nodes: Dict[str, None] = {}  # insertion-ordered set
        for edge in edges:
            self.add_edge(edge)

    def add_edge(self, edge: SupplyEdge) -> None:
        self._edges.append(edge)
        self._outgoing.setdefault(edge.source, []).append(edge)
        self._incoming.setdefault(edge.destination, []).append(edge)
        self._nodes.setdefault(edge.source, None)
        self._nodes.setdefault(edge.destination, None)

    @property
    def edges(self) -> Tuple[SupplyEdge, ...]:
        return tuple(self._edges)

    @property
    def nodes(self) -> List[str]:
        return list(self._nodes)

    def __contains__(self, node: str) -> bool:
        return node in self._nodes

    def __len__(self) -> int:
        return len(self._edges)

    def edges_from(self, node: str) -> List[SupplyEdge]:
        return list(self._outgoing.get(node, []))

    def in_degree(self, node: str) -> int:
        return len(self._incoming.get(node, []))

    def out_degree(self, node: str) -> int:
        return len(self._outgoing.get(node, []))

    def supplier_candidates(self) -> List[str]:
        """Nodes with outgoing edges and no incoming edges, in first-seen order."""
        return [n for n in self._nodes if self.out_degree(n) > 0 and self.in_degree(n) == 0]

    def price_edges(self, snapshot: SpikeSnapshot, spike_penalty: float) -> Tuple[PricedEdge, ...]:
        """Price every edge against *snapshot*, preserving input order."""
        return tuple(
            PricedEdge(
                edge=edge,
                adjusted_cost=edge.base_cost + (spike_penalty if snapshot.is_spike(edge.destination) else 0.0),
            )
            for edge in self._edges
        )


def node_set(priced_edges: Iterable[PricedEdge]) -> Set[str]:
    nodes: Set[str] = set()
    for pe in priced_edges:
        nodes.add(pe.source)
        nodes.add(pe.destination)
    return nodes
