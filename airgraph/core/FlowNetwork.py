import threading
from typing import Any, Callable, Dict, List, Optional
from logging import getLogger

from .Evaluator import Evaluator
from .GraphPrimitives import Edge, Graph
from .Node import FlowNode, NodeView
from .Types import NodeVariant

logger = getLogger(__name__)


class FlowNetwork:
    """
    One editor session: the graph plus the operations an editor may apply.

    Every mutation changes raw graph state only and bumps `revision`; derived
    values are never stored, callers ask for a fresh pass with evaluate().
    All public methods run under one lock, so a pass never observes a
    half-applied mutation.
    """

    def __init__(self, name: str = "network"):
        self.name = name
        self.graph = Graph()
        self.revision = 0
        self._next_id = 1
        self._lock = threading.RLock()
        self._listeners: List[Callable[['FlowNetwork'], None]] = []

    # --- Change notification ---

    def on_change(self, callback: Callable[['FlowNetwork'], None]):
        """Register a callback invoked after every mutation."""
        self._listeners.append(callback)

    def _changed(self):
        self.revision += 1
        for callback in self._listeners:
            try:
                callback(self)
            except Exception:
                logger.exception("Change listener %r failed", callback)

    def _new_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}-{self._next_id}"
            self._next_id += 1
            if candidate not in self.graph.nodes and self.graph.get_edge_by_id(candidate) is None:
                return candidate

    # --- Lookups ---

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        return self.graph.get_node_by_id(node_id)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self.graph.get_edge_by_id(edge_id)

    @property
    def nodes(self) -> Dict[str, FlowNode]:
        return self.graph.nodes

    @property
    def edges(self) -> List[Edge]:
        return self.graph.edges

    # --- Mutations ---

    def create_node(self, variant, node_id: Optional[str] = None) -> FlowNode:
        variant = NodeVariant.parse(variant)
        with self._lock:
            if node_id is None:
                node_id = self._new_id(variant.value)
            node = FlowNode.create_node(node_id, variant)
            self.graph.add_node(node)
            logger.info("Created %s node %s", variant.value, node_id)
            self._changed()
            return node

    def delete_node(self, node_id: str) -> List[Edge]:
        with self._lock:
            removed = self.graph.delete_node(node_id)
            logger.info("Deleted node %s (%d edge(s) removed)", node_id, len(removed))
            self._changed()
            return removed

    def add_edge(self,
                 source_node_id: str,
                 source_port: str,
                 target_node_id: str,
                 target_port: Optional[str] = None,
                 edge_id: Optional[str] = None) -> Edge:
        with self._lock:
            for node_id in (source_node_id, target_node_id):
                if node_id not in self.graph.nodes:
                    # Allowed, but the missing side aggregates to 0.
                    logger.warning("Edge references unknown node '%s'", node_id)

            if edge_id is None:
                edge_id = self._new_id("edge")
            edge = self.graph.add_edge(Edge(edge_id, source_node_id, source_port, target_node_id, target_port or None))
            logger.info("Added %r", edge)
            self._changed()
            return edge

    def remove_edge(self, edge_id: str) -> Edge:
        with self._lock:
            edge = self.graph.delete_edge(edge_id)
            logger.info("Removed %r", edge)
            self._changed()
            return edge

    def set_field(self, node_id: str, field: str, raw: Any):
        with self._lock:
            node = self.graph.get_node_by_id(node_id)
            if node is None:
                raise ValueError(f"Node with id '{node_id}' does not exist in the network")
            node.set_field(field, raw)
            logger.debug("Set %s.%s = %r", node_id, field, raw)
            self._changed()

    def reset(self):
        with self._lock:
            self.graph.reset()
            self._next_id = 1
            logger.info("Network '%s' reset", self.name)
            self._changed()

    # --- Read API ---

    def evaluate(self) -> Dict[str, NodeView]:
        with self._lock:
            return Evaluator(self.graph).evaluate()

    def get_view(self, node_id: str) -> NodeView:
        with self._lock:
            return Evaluator(self.graph).evaluate_node(node_id)

    def aggregate_incoming(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return Evaluator(self.graph).aggregate_incoming()
