from enum import Enum, auto


class PortDirection(Enum):
    INPUT = auto()
    OUTPUT = auto()


class NodeVariant(Enum):
    SOURCE = "source"
    MIXER = "mixer"
    SPLIT = "split"
    ROOM = "room"
    SINK = "sink"

    @staticmethod
    def parse(value) -> 'NodeVariant':
        if isinstance(value, NodeVariant):
            return value
        try:
            return NodeVariant(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown node type '{value}'") from None


class BalanceStatus(Enum):
    BALANCED = "balanced"
    UNBALANCED = "unbalanced"
    INSUFFICIENT_DATA = "insufficient_data"  # Split with unset outputs
    NOT_APPLICABLE = "not_applicable"        # no verdict for this node
