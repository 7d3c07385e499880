"""
Graph REST routes.

All routes are mounted under /api by main.py. Every mutation returns (or
pushes over Socket.IO) a fresh evaluation; nothing derived is ever accepted
from the client.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from airgraph.core.Node import FlowNode
from airgraph.core.Types import NodeVariant
from airgraph.server.serializers.graph_serializer import (
    serialize_edge,
    serialize_network,
    serialize_node,
    serialize_views,
)
from airgraph.server.state import EditorState

logger = logging.getLogger(__name__)

router = APIRouter()


def get_editor(request: Request) -> EditorState:
    return request.app.state.editor


def _require_node(editor: EditorState, node_id: str) -> FlowNode:
    node = editor.get_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node '{node_id}' not found")
    return node


# ── GET /network ──────────────────────────────────────────────────────────────

@router.get("/network")
async def get_network(editor: EditorState = Depends(get_editor)) -> Dict[str, Any]:
    return serialize_network(editor.network, editor.positions)


# ── DELETE /network ───────────────────────────────────────────────────────────

@router.delete("/network", status_code=204)
async def reset_network(editor: EditorState = Depends(get_editor)) -> Response:
    editor.reset()
    return Response(status_code=204)


# ── GET /network/evaluation ───────────────────────────────────────────────────

@router.get("/network/evaluation")
async def get_evaluation(editor: EditorState = Depends(get_editor)) -> Dict[str, Any]:
    return {
        "revision": editor.network.revision,
        "views": serialize_views(editor.network.evaluate()),
    }


# ── GET /network/nodes/:nodeId ────────────────────────────────────────────────

@router.get("/network/nodes/{node_id}")
async def get_node(node_id: str, editor: EditorState = Depends(get_editor)) -> Dict[str, Any]:
    node = _require_node(editor, node_id)
    return serialize_node(node, editor.network.get_view(node_id), editor.positions)


# ── POST /network/nodes ───────────────────────────────────────────────────────

class PositionBody(BaseModel):
    x: float
    y: float


class CreateNodeBody(BaseModel):
    type: str
    id: Optional[str] = None
    position: Optional[PositionBody] = None


@router.post("/network/nodes", status_code=201)
async def create_node(body: CreateNodeBody, editor: EditorState = Depends(get_editor)) -> Dict[str, Any]:
    try:
        position = {"x": body.position.x, "y": body.position.y} if body.position else None
        node = editor.create_node(body.type, body.id, position)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return serialize_node(node, editor.network.get_view(node.id), editor.positions)


# ── DELETE /network/nodes/:nodeId ─────────────────────────────────────────────

@router.delete("/network/nodes/{node_id}", status_code=204)
async def delete_node(node_id: str, editor: EditorState = Depends(get_editor)) -> Response:
    _require_node(editor, node_id)
    editor.delete_node(node_id)
    return Response(status_code=204)


# ── PUT /network/nodes/:nodeId/fields/:field ──────────────────────────────────

class SetFieldBody(BaseModel):
    value: Optional[Union[str, float]] = None


@router.put("/network/nodes/{node_id}/fields/{field}", status_code=204)
async def set_field(
    node_id: str, field: str, body: SetFieldBody, editor: EditorState = Depends(get_editor)
) -> Response:
    _require_node(editor, node_id)
    try:
        editor.set_field(node_id, field, body.value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(status_code=204)


# ── PUT /network/nodes/:nodeId/position ───────────────────────────────────────

@router.put("/network/nodes/{node_id}/position", status_code=204)
async def set_node_position(
    node_id: str, body: PositionBody, editor: EditorState = Depends(get_editor)
) -> Response:
    _require_node(editor, node_id)
    editor.set_position(node_id, body.x, body.y)
    return Response(status_code=204)


# ── POST /network/edges ───────────────────────────────────────────────────────

class EdgeBody(BaseModel):
    sourceNodeId: str
    sourcePort: str
    targetNodeId: str
    targetPort: Optional[str] = None
    id: Optional[str] = None


@router.post("/network/edges", status_code=201)
async def add_edge(body: EdgeBody, editor: EditorState = Depends(get_editor)) -> Dict[str, Any]:
    try:
        edge = editor.add_edge(
            body.sourceNodeId,
            body.sourcePort,
            body.targetNodeId,
            body.targetPort,
            body.id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return serialize_edge(edge)


# ── DELETE /network/edges/:edgeId ─────────────────────────────────────────────

@router.delete("/network/edges/{edge_id}", status_code=204)
async def delete_edge(edge_id: str, editor: EditorState = Depends(get_editor)) -> Response:
    try:
        editor.remove_edge(edge_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return Response(status_code=204)


# ── GET /node-types ───────────────────────────────────────────────────────────

@router.get("/node-types")
async def get_node_types() -> List[Dict[str, Any]]:
    return [FlowNode.node_class(variant).describe() for variant in NodeVariant]
