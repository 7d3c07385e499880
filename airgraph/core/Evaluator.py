from collections import defaultdict
from typing import Dict, Iterable, Mapping
from logging import getLogger

from .GraphPrimitives import Edge, Graph
from .Node import FlowNode, NodeView, resolve_output_port
from . import FlowNodes  # noqa: F401  (registers the node variants)

logger = getLogger(__name__)


def target_port_of(edge: Edge, target: FlowNode = None) -> str:
    if edge.target_port:
        return edge.target_port
    if target is not None:
        return target.DEFAULT_INPUT_PORT
    return FlowNode.DEFAULT_INPUT_PORT


def aggregate_incoming(nodes: Mapping[str, FlowNode], edges: Iterable[Edge]) -> Dict[str, Dict[str, float]]:
    """
    Sum the values arriving at every (node, input port) pair.

    One pass over the edges. Each edge contributes its source port's stored
    value; edges sharing a target port add up. Ports without edges do not
    appear in the result and read as 0. Edges that reference unknown nodes
    contribute 0 rather than failing.
    """
    incoming: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))

    for edge in edges:
        value = resolve_output_port(nodes.get(edge.source_node_id), edge.source_port)
        port = target_port_of(edge, nodes.get(edge.target_node_id))
        incoming[edge.target_node_id][port] += value

    return {node_id: dict(ports) for node_id, ports in incoming.items()}


class Evaluator:
    """
    Runs one evaluation pass over a graph: aggregation, then every node's
    evaluate(). Holds no state between passes.
    """

    def __init__(self, graph: Graph):
        self.graph = graph

    def aggregate_incoming(self) -> Dict[str, Dict[str, float]]:
        return aggregate_incoming(self.graph.nodes, self.graph.edges)

    def evaluate(self) -> Dict[str, NodeView]:
        incoming = self.aggregate_incoming()
        views: Dict[str, NodeView] = {}
        for node_id, node in self.graph.nodes.items():
            views[node_id] = node.evaluate(incoming.get(node_id, {}))

        logger.debug("Evaluated %d node(s) over %d edge(s)", len(views), len(self.graph.edges))
        return views

    def evaluate_node(self, node_id: str) -> NodeView:
        node = self.graph.get_node_by_id(node_id)
        if node is None:
            raise ValueError(f"Node with id '{node_id}' does not exist in the network")
        # Aggregation is global, but only this node's entry is read.
        incoming = self.aggregate_incoming()
        return node.evaluate(incoming.get(node_id, {}))
