from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Type
from abc import ABC, abstractmethod
from logging import getLogger

from .Types import BalanceStatus, NodeVariant, PortDirection
from .Values import nearly_equal, number_or_zero, parse_optional_number

logger = getLogger(__name__)


class NodeView(NamedTuple):
    """
    Derived values of one node for one evaluation pass.
    Pure output of FlowNode.evaluate(); nothing here is written back to the graph.
    """
    node_id: str
    variant: NodeVariant
    incoming: Dict[str, float]           # aggregated sum per declared input port
    connected: Dict[str, bool]           # input port has at least one edge
    references: Dict[str, float]         # manual value if set, else incoming
    outputs: Dict[str, float]            # effective output values
    mismatches: Dict[str, bool]          # per input port
    output_mismatches: Dict[str, bool]
    computed: Dict[str, float]
    status: BalanceStatus
    missing_fields: Tuple[str, ...] = ()

    @property
    def balanced(self) -> Optional[bool]:
        if self.status == BalanceStatus.BALANCED:
            return True
        if self.status == BalanceStatus.UNBALANCED:
            return False
        return None

    @property
    def has_warning(self) -> bool:
        return (self.status in (BalanceStatus.UNBALANCED, BalanceStatus.INSUFFICIENT_DATA)
                or any(self.mismatches.values())
                or any(self.output_mismatches.values()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "type": self.variant.value,
            "incoming": dict(self.incoming),
            "connected": dict(self.connected),
            "references": dict(self.references),
            "outputs": dict(self.outputs),
            "mismatches": dict(self.mismatches),
            "outputMismatches": dict(self.output_mismatches),
            "computed": dict(self.computed),
            "status": self.status.value,
            "balanced": self.balanced,
            "hasWarning": self.has_warning,
            "missingFields": list(self.missing_fields),
        }


class FlowNode(ABC):
    """
    Base class for every element of an airflow network.

    A node owns its stored fields (raw, optional numeric strings typed by the
    user). Subclasses declare their ports and fields as class attributes and
    implement evaluate().
    """
    _node_registry: Dict[NodeVariant, Type['FlowNode']] = {}

    VARIANT: NodeVariant
    LABEL: str = ""
    INPUT_PORTS: Tuple[str, ...] = ()
    OUTPUT_PORTS: Tuple[str, ...] = ()
    STORED_FIELDS: Tuple[str, ...] = ()
    # Edges without an explicit target port land here
    DEFAULT_INPUT_PORT: str = "in"

    @classmethod
    def register(cls, variant: NodeVariant) -> Callable[[Type['FlowNode']], Type['FlowNode']]:
        """Decorator to register the node class that implements *variant*."""
        def decorator(subclass: Type['FlowNode']) -> Type['FlowNode']:
            if cls._node_registry.get(variant):
                raise ValueError(f"Node type '{variant.value}' is already registered.")
            subclass.VARIANT = variant
            cls._node_registry[variant] = subclass
            return subclass
        return decorator

    @classmethod
    def check_registry(cls):
        missing = [v.value for v in NodeVariant if v not in cls._node_registry]
        if missing:
            raise TypeError(f"No node class registered for: {', '.join(missing)}")

    @classmethod
    def node_class(cls, variant) -> Type['FlowNode']:
        return cls._node_registry[NodeVariant.parse(variant)]

    @classmethod
    def create_node(cls, node_id: str, variant) -> 'FlowNode':
        """Factory method to create a node instance by variant."""
        return cls.node_class(variant)(node_id)

    @classmethod
    def describe(cls) -> Dict[str, Any]:
        return {
            "type": cls.VARIANT.value,
            "label": cls.LABEL,
            "inputs": list(cls.INPUT_PORTS),
            "outputs": list(cls.OUTPUT_PORTS),
            "fields": list(cls.STORED_FIELDS),
            "defaultInput": cls.DEFAULT_INPUT_PORT,
        }

    def __init__(self, node_id: str):
        self.id = node_id
        self.fields: Dict[str, Optional[str]] = {name: None for name in self.STORED_FIELDS}

    def __repr__(self):
        return f"{type(self).__name__}({self.id})"

    @property
    def variant(self) -> NodeVariant:
        return self.VARIANT

    def has_port(self, port_id: str, direction: PortDirection) -> bool:
        ports = self.INPUT_PORTS if direction == PortDirection.INPUT else self.OUTPUT_PORTS
        return port_id in ports

    # --- Stored fields ---

    def set_field(self, name: str, raw: Any):
        if name not in self.fields:
            raise ValueError(f"Node '{self.id}' ({self.variant.value}) has no field '{name}'")
        if raw is None or isinstance(raw, str):
            self.fields[name] = raw
        else:
            self.fields[name] = str(raw)

    def get_field(self, name: str) -> Optional[str]:
        return self.fields.get(name)

    def stored_number(self, name: str) -> Optional[float]:
        return parse_optional_number(self.fields.get(name))

    # --- Evaluation ---

    def resolve_output(self, port_id: str) -> float:
        # Edges carry what was typed into the output field, never a computed value.
        if not self.has_port(port_id, PortDirection.OUTPUT):
            return 0.0
        return number_or_zero(self.fields.get(port_id))

    def input_side(self, incoming: Dict[str, float]) -> Tuple[Dict[str, float], Dict[str, bool], Dict[str, float], Dict[str, bool]]:
        """Incoming sums, connection flags, references and mismatch flags for the declared inputs."""
        sums: Dict[str, float] = {}
        connected: Dict[str, bool] = {}
        references: Dict[str, float] = {}
        mismatches: Dict[str, bool] = {}

        for port in self.INPUT_PORTS:
            sums[port] = incoming.get(port, 0.0)
            connected[port] = port in incoming
            manual = self.stored_number(port) if port in self.fields else None

            references[port] = manual if manual is not None else sums[port]
            mismatches[port] = (manual is not None
                                and connected[port]
                                and not nearly_equal(manual, sums[port]))

        return sums, connected, references, mismatches

    def stored_outputs(self) -> Tuple[Dict[str, float], List[str]]:
        """Output values (absent -> 0) and the names of outputs never filled in."""
        values: Dict[str, float] = {}
        missing: List[str] = []
        for port in self.OUTPUT_PORTS:
            value = self.stored_number(port)
            if value is None:
                missing.append(port)
            values[port] = value if value is not None else 0.0
        return values, missing

    @abstractmethod
    def evaluate(self, incoming: Dict[str, float]) -> NodeView:
        """Derive this node's view from its fields and its aggregated incoming sums."""
        pass


def resolve_output_port(node: Optional[FlowNode], port_id: str) -> float:
    if node is None:
        return 0.0
    return node.resolve_output(port_id)
