"""
EditorState: the FlowNetwork of one editor session plus the UI layout
positions, and the bridge that pushes a fresh evaluation to listeners after
every mutation.

One instance is created per FastAPI app (see main.create_app) and stored on
`app.state.editor`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from airgraph.core.FlowNetwork import FlowNetwork
from airgraph.core.GraphPrimitives import Edge
from airgraph.core.Node import FlowNode
from airgraph.server.serializers.graph_serializer import serialize_views
from airgraph.server.trace.trace_emitter import EvaluationEmitter, now_ms
from airgraph.server.trace.trace_types import GraphEvaluatedEvent

logger = logging.getLogger(__name__)


class EditorState:
    """Holds the session network, node positions and the event emitter."""

    def __init__(
        self,
        network: Optional[FlowNetwork] = None,
        emitter: Optional[EvaluationEmitter] = None,
    ) -> None:
        self.network = network if network is not None else FlowNetwork("airflow")
        self.emitter = emitter if emitter is not None else EvaluationEmitter()
        # UI layout positions: node_id → {x, y}
        self.positions: Dict[str, Dict[str, float]] = {}

        self.network.on_change(self._publish_evaluation)

    # ── Live recompute ───────────────────────────────────────────────────────

    def _publish_evaluation(self, network: FlowNetwork) -> None:
        self.emitter.fire(self.evaluation_event())

    def evaluation_event(self) -> GraphEvaluatedEvent:
        return {
            "type": "GRAPH_EVALUATED",
            "networkName": self.network.name,
            "revision": self.network.revision,
            "views": serialize_views(self.network.evaluate()),
            "ts": now_ms(),
        }

    # ── Node helpers ─────────────────────────────────────────────────────────

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        return self.network.get_node(node_id)

    def create_node(
        self,
        node_type: str,
        node_id: Optional[str] = None,
        position: Optional[Dict[str, float]] = None,
    ) -> FlowNode:
        node = self.network.create_node(node_type, node_id)
        if position:
            self.set_position(node.id, position["x"], position["y"])
        return node

    def delete_node(self, node_id: str) -> List[Edge]:
        removed = self.network.delete_node(node_id)
        self.positions.pop(node_id, None)
        self.emitter.fire(
            {
                "type": "NODES_REMOVED",
                "nodeIds": [node_id],
                "edgeIds": [e.id for e in removed],
            }
        )
        return removed

    def set_field(self, node_id: str, field: str, value: Any) -> None:
        self.network.set_field(node_id, field, value)

    # ── Edge helpers ─────────────────────────────────────────────────────────

    def add_edge(
        self,
        source_node_id: str,
        source_port: str,
        target_node_id: str,
        target_port: Optional[str] = None,
        edge_id: Optional[str] = None,
    ) -> Edge:
        return self.network.add_edge(source_node_id, source_port, target_node_id, target_port, edge_id)

    def remove_edge(self, edge_id: str) -> Edge:
        return self.network.remove_edge(edge_id)

    # ── Position helpers ─────────────────────────────────────────────────────

    def set_position(self, node_id: str, x: float, y: float) -> None:
        if self.network.get_node(node_id) is None:
            raise ValueError(f"Node '{node_id}' not found")
        self.positions[node_id] = {"x": x, "y": y}

    # ── Session ──────────────────────────────────────────────────────────────

    def reset(self) -> None:
        self.network.reset()
        self.positions.clear()
        self.emitter.fire(
            {
                "type": "GRAPH_RESET",
                "networkName": self.network.name,
                "revision": self.network.revision,
            }
        )

    # ── Demo graph ───────────────────────────────────────────────────────────

    def seed_demo(self) -> None:
        """
        Small supply network so the UI has something to display on first load:

            AHU (source) ──► Mixer ◄── Recirculation (source)
                               │
                               ▼
                             Split ──► Office (room) ──► Exhaust (sink)
                                   ──► Lab (room)    ──┘
        """
        net = self.network

        ahu = self.create_node("source", "ahu", {"x": 80, "y": 100})
        recirc = self.create_node("source", "recirculation", {"x": 80, "y": 300})
        mixer = self.create_node("mixer", "mixer", {"x": 380, "y": 180})
        split = self.create_node("split", "split", {"x": 720, "y": 180})
        office = self.create_node("room", "office", {"x": 1080, "y": 60})
        lab = self.create_node("room", "lab", {"x": 1080, "y": 320})
        exhaust = self.create_node("sink", "exhaust", {"x": 1480, "y": 180})

        net.set_field(ahu.id, "out", "1200")
        net.set_field(recirc.id, "out", "300")
        net.set_field(mixer.id, "out", "1500")
        net.set_field(split.id, "out1", "900")
        net.set_field(split.id, "out2", "600")
        net.set_field(split.id, "out3", "0")
        net.set_field(office.id, "volume", "450")
        net.set_field(office.id, "out1", "900")
        net.set_field(lab.id, "volume", "120")
        net.set_field(lab.id, "out1", "600")
        net.set_field(exhaust.id, "expectedIn", "1500")

        net.add_edge(ahu.id, "out", mixer.id, "in1")
        net.add_edge(recirc.id, "out", mixer.id, "in2")
        net.add_edge(mixer.id, "out", split.id, "in")
        net.add_edge(split.id, "out1", office.id, "in1")
        net.add_edge(split.id, "out2", lab.id, "in1")
        net.add_edge(office.id, "out1", exhaust.id, "in")
        net.add_edge(lab.id, "out1", exhaust.id, "in")

        logger.info("Seeded demo network with %d nodes", len(net.nodes))
