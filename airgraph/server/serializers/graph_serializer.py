"""
Graph serializer.

Converts FlowNetwork nodes, edges and NodeViews into JSON-safe dicts that
match the wire shape the editor UI expects.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from airgraph.core.FlowNetwork import FlowNetwork
from airgraph.core.GraphPrimitives import Edge
from airgraph.core.Node import FlowNode, NodeView

# ── Wire shapes (dicts, not TypedDicts, for easy JSON serialisation) ──────────

# SerializedNode keys: id, type, label, fields, inputs, outputs, position, view
# SerializedEdge keys: id, sourceNodeId, sourcePort, targetNodeId, targetPort
# SerializedNetwork keys: name, revision, nodes, edges

DEFAULT_POSITION = {"x": 0, "y": 0}


def serialize_edge(edge: Edge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "sourceNodeId": edge.source_node_id,
        "sourcePort": edge.source_port,
        "targetNodeId": edge.target_node_id,
        "targetPort": edge.target_port,
    }


def serialize_node(
    node: FlowNode,
    view: Optional[NodeView],
    positions: Dict[str, Dict[str, float]],
) -> Dict[str, Any]:
    return {
        "id": node.id,
        "type": node.variant.value,
        "label": node.LABEL,
        "fields": dict(node.fields),
        "inputs": list(node.INPUT_PORTS),
        "outputs": list(node.OUTPUT_PORTS),
        "position": positions.get(node.id, DEFAULT_POSITION),
        "view": view.to_dict() if view is not None else None,
    }


def serialize_views(views: Dict[str, NodeView]) -> Dict[str, Dict[str, Any]]:
    return {node_id: view.to_dict() for node_id, view in views.items()}


# ── Public API ─────────────────────────────────────────────────────────────────

def serialize_network(
    network: FlowNetwork,
    positions: Dict[str, Dict[str, float]],
    views: Optional[Dict[str, NodeView]] = None,
) -> Dict[str, Any]:
    """
    Serialize *network* with a fresh evaluation pass.

    :param network:   The session's FlowNetwork.
    :param positions: Dict mapping node_id -> {x, y}.
    :param views:     A pass already computed by the caller, if any.
    """
    if views is None:
        views = network.evaluate()

    nodes: List[Dict[str, Any]] = [
        serialize_node(node, views.get(node_id), positions)
        for node_id, node in network.nodes.items()
    ]

    return {
        "name": network.name,
        "revision": network.revision,
        "nodes": nodes,
        "edges": [serialize_edge(e) for e in network.edges],
    }
