"""
Airflow node variants.

Each class declares its ports and stored fields and turns (stored fields,
aggregated incoming sums) into a NodeView. Importing this module registers
every variant with FlowNode and fails loudly if one is missing.

Reference rule shared by all variants: an input port's reference value is the
manual value when one is typed, otherwise the connected sum. Manual values are
never overwritten; a conflicting manual value only raises a mismatch flag.
"""
from typing import Dict

from .Node import FlowNode, NodeView
from .Types import BalanceStatus, NodeVariant
from .Values import nearly_equal


@FlowNode.register(NodeVariant.SOURCE)
class SourceNode(FlowNode):
    LABEL = "Source"
    OUTPUT_PORTS = ("out",)
    STORED_FIELDS = ("out",)

    def evaluate(self, incoming: Dict[str, float]) -> NodeView:
        outputs, _ = self.stored_outputs()
        return NodeView(
            node_id=self.id,
            variant=self.variant,
            incoming={},
            connected={},
            references={},
            outputs=outputs,
            mismatches={},
            output_mismatches={},
            computed={},
            status=BalanceStatus.NOT_APPLICABLE,
        )


@FlowNode.register(NodeVariant.MIXER)
class MixerNode(FlowNode):
    LABEL = "Mixer"
    INPUT_PORTS = ("in1", "in2")
    OUTPUT_PORTS = ("out",)
    STORED_FIELDS = ("in1", "in2", "out")

    def evaluate(self, incoming: Dict[str, float]) -> NodeView:
        sums, connected, references, mismatches = self.input_side(incoming)
        computed_out = references["in1"] + references["in2"]

        manual_out = self.stored_number("out")
        out_ref = manual_out if manual_out is not None else computed_out
        out_mismatch = manual_out is not None and not nearly_equal(manual_out, computed_out)

        status = BalanceStatus.BALANCED if nearly_equal(out_ref, computed_out) else BalanceStatus.UNBALANCED

        return NodeView(
            node_id=self.id,
            variant=self.variant,
            incoming=sums,
            connected=connected,
            references=references,
            outputs={"out": out_ref},
            mismatches=mismatches,
            output_mismatches={"out": out_mismatch},
            computed={"computed_out": computed_out},
            status=status,
        )


@FlowNode.register(NodeVariant.SPLIT)
class SplitNode(FlowNode):
    LABEL = "Split (3 out)"
    INPUT_PORTS = ("in",)
    OUTPUT_PORTS = ("out1", "out2", "out3")
    STORED_FIELDS = ("in", "out1", "out2", "out3")

    def evaluate(self, incoming: Dict[str, float]) -> NodeView:
        sums, connected, references, mismatches = self.input_side(incoming)
        outputs, missing = self.stored_outputs()
        sum_out = outputs["out1"] + outputs["out2"] + outputs["out3"]

        # An unset output is not the same as an explicit 0: the strict check
        # waits until all three are filled in.
        if missing:
            status = BalanceStatus.INSUFFICIENT_DATA
        elif nearly_equal(references["in"], sum_out):
            status = BalanceStatus.BALANCED
        else:
            status = BalanceStatus.UNBALANCED

        return NodeView(
            node_id=self.id,
            variant=self.variant,
            incoming=sums,
            connected=connected,
            references=references,
            outputs=outputs,
            mismatches=mismatches,
            output_mismatches={},
            computed={"sum_out": sum_out},
            status=status,
            missing_fields=tuple(missing),
        )


@FlowNode.register(NodeVariant.ROOM)
class RoomNode(FlowNode):
    LABEL = "Room"
    INPUT_PORTS = ("in1", "in2", "in3")
    OUTPUT_PORTS = ("out1", "out2", "out3")
    STORED_FIELDS = ("volume", "in1", "in2", "in3", "out1", "out2", "out3")

    def evaluate(self, incoming: Dict[str, float]) -> NodeView:
        sums, connected, references, mismatches = self.input_side(incoming)
        outputs, _ = self.stored_outputs()

        connected_in_sum = sum(sums[p] for p in self.INPUT_PORTS)
        in_ref_sum = sum(references[p] for p in self.INPUT_PORTS)
        out_sum = sum(outputs[p] for p in self.OUTPUT_PORTS)

        volume = self.stored_number("volume")
        if volume is not None and volume > 0:
            air_changes_per_hour = out_sum / volume
        else:
            air_changes_per_hour = 0.0

        status = BalanceStatus.BALANCED if nearly_equal(in_ref_sum, out_sum) else BalanceStatus.UNBALANCED

        return NodeView(
            node_id=self.id,
            variant=self.variant,
            incoming=sums,
            connected=connected,
            references=references,
            outputs=outputs,
            mismatches=mismatches,
            output_mismatches={},
            computed={
                "connected_in_sum": connected_in_sum,
                "in_ref_sum": in_ref_sum,
                "out_sum": out_sum,
                "air_changes_per_hour": air_changes_per_hour,
            },
            status=status,
        )


@FlowNode.register(NodeVariant.SINK)
class SinkNode(FlowNode):
    LABEL = "Sink"
    INPUT_PORTS = ("in",)
    STORED_FIELDS = ("expectedIn",)

    def evaluate(self, incoming: Dict[str, float]) -> NodeView:
        sums, connected, references, mismatches = self.input_side(incoming)

        # Everything arriving at the sink counts, whatever port the edge named.
        incoming_total = sum(incoming.values(), 0.0)

        expected = self.stored_number("expectedIn")
        if expected is None:
            status = BalanceStatus.NOT_APPLICABLE
        elif nearly_equal(expected, incoming_total):
            status = BalanceStatus.BALANCED
        else:
            status = BalanceStatus.UNBALANCED

        return NodeView(
            node_id=self.id,
            variant=self.variant,
            incoming=sums,
            connected=connected,
            references=references,
            outputs={},
            mismatches=mismatches,
            output_mismatches={},
            computed={"incoming_total": incoming_total},
            status=status,
        )


FlowNode.check_registry()
