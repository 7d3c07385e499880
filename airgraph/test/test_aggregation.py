import random

from airgraph.core.Evaluator import Evaluator, aggregate_incoming, target_port_of
from airgraph.core.FlowNetwork import FlowNetwork
from airgraph.core.GraphPrimitives import Edge
from airgraph.core.Types import BalanceStatus


class TestAggregateIncoming:

    def setup_method(self):
        self.net = FlowNetwork("test")
        self.a = self.net.create_node("source", "a")
        self.b = self.net.create_node("source", "b")
        self.c = self.net.create_node("source", "c")
        self.mixer = self.net.create_node("mixer", "mix")
        self.net.set_field("a", "out", "2")
        self.net.set_field("b", "out", "3.5")
        self.net.set_field("c", "out", "0.25")

    def test_single_edge(self):
        self.net.add_edge("a", "out", "mix", "in1")
        assert self.net.aggregate_incoming() == {"mix": {"in1": 2.0}}

    def test_unconnected_ports_are_absent(self):
        self.net.add_edge("a", "out", "mix", "in1")
        incoming = self.net.aggregate_incoming()
        assert "in2" not in incoming["mix"]
        assert "a" not in incoming

    def test_edges_into_same_port_sum(self):
        """Two edges carrying a and b equal one edge carrying a + b."""
        self.net.add_edge("a", "out", "mix", "in1")
        self.net.add_edge("b", "out", "mix", "in1")
        summed = self.net.aggregate_incoming()["mix"]["in1"]

        other = FlowNetwork("single")
        other.create_node("source", "ab")
        other.create_node("mixer", "mix")
        other.set_field("ab", "out", "5.5")
        other.add_edge("ab", "out", "mix", "in1")

        assert summed == other.aggregate_incoming()["mix"]["in1"] == 5.5

    def test_duplicate_edges_are_not_deduplicated(self):
        self.net.add_edge("a", "out", "mix", "in1")
        self.net.add_edge("a", "out", "mix", "in1")
        assert self.net.aggregate_incoming()["mix"]["in1"] == 4.0

    def test_order_does_not_matter(self):
        edges = [
            Edge("e1", "a", "out", "mix", "in1"),
            Edge("e2", "b", "out", "mix", "in1"),
            Edge("e3", "c", "out", "mix", "in2"),
            Edge("e4", "a", "out", "mix", "in2"),
            Edge("e5", "c", "out", "mix", "in1"),
        ]
        expected = aggregate_incoming(self.net.nodes, edges)
        rng = random.Random(7)
        for _ in range(10):
            shuffled = list(edges)
            rng.shuffle(shuffled)
            assert aggregate_incoming(self.net.nodes, shuffled) == expected
        assert expected == {"mix": {"in1": 5.75, "in2": 2.25}}

    def test_missing_target_port_uses_default(self):
        split = self.net.create_node("split", "split")
        self.net.add_edge("a", "out", split.id)
        edge = self.net.edges[-1]
        assert edge.target_port is None
        assert target_port_of(edge, split) == "in"
        assert self.net.aggregate_incoming()["split"] == {"in": 2.0}

    def test_sink_default_port(self):
        self.net.create_node("sink", "sink")
        self.net.add_edge("a", "out", "sink")
        self.net.add_edge("b", "out", "sink", "in")
        assert self.net.aggregate_incoming()["sink"] == {"in": 5.5}

    def test_unknown_source_node_contributes_zero(self):
        edges = [Edge("e1", "ghost", "out", "mix", "in1")]
        assert aggregate_incoming(self.net.nodes, edges) == {"mix": {"in1": 0.0}}

    def test_undeclared_source_port_contributes_zero(self):
        self.net.add_edge("a", "out7", "mix", "in1")
        assert self.net.aggregate_incoming()["mix"]["in1"] == 0.0

    def test_undeclared_target_port_is_ignored_by_evaluation(self):
        self.net.add_edge("a", "out", "mix", "in9")
        assert self.net.aggregate_incoming()["mix"] == {"in9": 2.0}
        view = self.net.get_view("mix")
        assert view.incoming == {"in1": 0.0, "in2": 0.0}
        assert view.connected == {"in1": False, "in2": False}

    def test_edges_carry_stored_values_only(self):
        """A mixer's computed sum does not travel downstream, its typed `out` does."""
        self.net.add_edge("a", "out", "mix", "in1")
        self.net.add_edge("b", "out", "mix", "in2")
        self.net.create_node("sink", "sink")
        self.net.add_edge("mix", "out", "sink")

        assert self.net.get_view("mix").computed["computed_out"] == 5.5
        assert self.net.get_view("sink").computed["incoming_total"] == 0.0

        self.net.set_field("mix", "out", "5.5")
        assert self.net.get_view("sink").computed["incoming_total"] == 5.5

    def test_upstream_edit_changes_downstream_immediately(self):
        self.net.add_edge("a", "out", "mix", "in1")
        assert self.net.get_view("mix").incoming["in1"] == 2.0
        self.net.set_field("a", "out", "9")
        assert self.net.get_view("mix").incoming["in1"] == 9.0


class TestEvaluator:

    def setup_method(self):
        self.net = FlowNetwork("test")
        self.net.create_node("source", "src")
        self.net.create_node("split", "split")
        self.net.create_node("room", "room")
        self.net.create_node("sink", "sink")
        self.net.set_field("src", "out", "100")
        for field, value in (("out1", "60"), ("out2", "40"), ("out3", "0")):
            self.net.set_field("split", field, value)
        self.net.set_field("room", "volume", "30")
        self.net.set_field("room", "out1", "60")
        self.net.set_field("sink", "expectedIn", "60")

        self.net.add_edge("src", "out", "split", "in")
        self.net.add_edge("split", "out1", "room", "in1")
        self.net.add_edge("room", "out1", "sink", "in")

    def test_views_for_every_node(self):
        views = Evaluator(self.net.graph).evaluate()
        assert list(views) == ["src", "split", "room", "sink"]
        assert views["split"].status == BalanceStatus.BALANCED
        assert views["room"].status == BalanceStatus.BALANCED
        assert views["room"].computed["air_changes_per_hour"] == 2.0
        assert views["sink"].status == BalanceStatus.BALANCED

    def test_evaluation_is_idempotent(self):
        first = self.net.evaluate()
        second = self.net.evaluate()
        assert first == second
        assert [v.to_dict() for v in first.values()] == [v.to_dict() for v in second.values()]

    def test_evaluation_does_not_mutate_graph(self):
        fields_before = {n.id: dict(n.fields) for n in self.net.nodes.values()}
        edges_before = list(self.net.edges)
        self.net.evaluate()
        assert {n.id: dict(n.fields) for n in self.net.nodes.values()} == fields_before
        assert self.net.edges == edges_before

    def test_one_hop_only(self):
        """A change two hops upstream does not reach the sink until the room's output is edited."""
        self.net.set_field("src", "out", "500")
        views = self.net.evaluate()
        assert views["split"].status == BalanceStatus.UNBALANCED
        assert views["sink"].status == BalanceStatus.BALANCED
