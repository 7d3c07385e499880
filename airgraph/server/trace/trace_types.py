"""
Event shapes pushed to editor clients over Socket.IO.
All events are plain dicts so they can be emitted without Pydantic overhead.
"""
from typing import Any, Dict, List, Literal, TypedDict, Union


class GraphEvaluatedEvent(TypedDict):
    type: Literal["GRAPH_EVALUATED"]
    networkName: str
    revision: int
    views: Dict[str, Dict[str, Any]]
    ts: int


class GraphResetEvent(TypedDict):
    type: Literal["GRAPH_RESET"]
    networkName: str
    revision: int
    ts: int


class NodesRemovedEvent(TypedDict):
    type: Literal["NODES_REMOVED"]
    nodeIds: List[str]
    edgeIds: List[str]
    ts: int


TraceEvent = Union[
    GraphEvaluatedEvent,
    GraphResetEvent,
    NodesRemovedEvent,
]
