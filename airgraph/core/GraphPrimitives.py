from typing import Dict, List, NamedTuple, Optional, TYPE_CHECKING

from logging import getLogger

if TYPE_CHECKING:
    from .Node import FlowNode

logger = getLogger(__name__)


# Edges are immutable relations. They never carry a value of their own, the
# source port is re-resolved on every evaluation pass.
class Edge(NamedTuple):
    id: str
    source_node_id: str
    source_port: str
    target_node_id: str
    target_port: Optional[str] = None  # None -> target variant's default input

    def __repr__(self):
        return f"Edge({self.id}: {self.source_node_id}.{self.source_port} -> {self.target_node_id}.{self.target_port or '*'})"

    def touches(self, node_id: str) -> bool:
        return self.source_node_id == node_id or self.target_node_id == node_id


class Graph:
    """
    Flat node/edge store for one editor session (Arena Pattern).

    Nodes are kept in insertion order so every evaluation pass walks them in
    the same sequence.
    """

    def __init__(self):
        self.nodes: Dict[str, 'FlowNode'] = {}
        self.edges: List[Edge] = []

    def get_node_by_id(self, node_id: str) -> Optional['FlowNode']:
        return self.nodes.get(node_id)

    def get_edge_by_id(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def add_node(self, node: 'FlowNode'):
        if node.id in self.nodes:
            raise ValueError(f"Node with id '{node.id}' already exists in the network")
        self.nodes[node.id] = node
        logger.debug("Graph: added node %s (%s)", node.id, node.variant.value)

    def delete_node(self, node_id: str) -> List[Edge]:
        """Remove a node together with every edge that references it."""
        if node_id not in self.nodes:
            raise ValueError(f"Node with id '{node_id}' does not exist in the network")

        removed = [e for e in self.edges if e.touches(node_id)]
        # Arena Pattern: connections go first so no edge ever dangles
        self.edges = [e for e in self.edges if not e.touches(node_id)]
        del self.nodes[node_id]

        logger.debug("Graph: deleted node %s and %d edge(s)", node_id, len(removed))
        return removed

    def add_edge(self, edge: Edge) -> Edge:
        if self.get_edge_by_id(edge.id) is not None:
            raise ValueError(f"Edge with id '{edge.id}' already exists in the network")
        self.edges.append(edge)
        return edge

    def delete_edge(self, edge_id: str) -> Edge:
        edge = self.get_edge_by_id(edge_id)
        if edge is None:
            raise ValueError(f"Edge with id '{edge_id}' does not exist in the network")
        self.edges.remove(edge)
        return edge

    def get_incoming_edges(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.target_node_id == node_id]

    def get_outgoing_edges(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.source_node_id == node_id]

    def reset(self):
        self.nodes.clear()
        self.edges.clear()
