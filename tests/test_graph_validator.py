"""
Module: test_graph_validator.py

Author: Michael Economou
Date: 2026-02-08

Tests for pre-run graph validation: empty graphs, cycles, execution
batches and advisory warnings.
"""

from flowcanvas.core.graph_validator import GraphValidator
from flowcanvas.core.transform import Point


class TestGraphValidator:
    def test_empty_graph_is_invalid(self, model):
        result = GraphValidator(model).validate()
        assert not result.is_valid
        assert result.errors == ["Workflow has no nodes"]

    def test_linear_chain_layers(self, model):
        a = model.add_node("start", lambda_name="a")
        b = model.add_node("task", lambda_name="b")
        c = model.add_node("end", lambda_name="c")
        model.add_connection(a, b)
        model.add_connection(b, c)

        result = GraphValidator(model).validate()

        assert result.is_valid
        assert result.warnings == []
        assert result.layers == [[a], [b], [c]]
        assert result.order == [a, b, c]

    def test_parallel_branches_share_a_layer(self, model):
        a = model.add_node("start", lambda_name="a")
        b = model.add_node("task", lambda_name="b")
        c = model.add_node("task", lambda_name="c")
        d = model.add_node("end", lambda_name="d")
        for from_id, to_id in ((a, b), (a, c), (b, d), (c, d)):
            model.add_connection(from_id, to_id)

        result = GraphValidator(model).validate()

        assert result.layers == [[a], [b, c], [d]]

    def test_cycle_detected(self, model):
        a = model.add_node("start")
        b = model.add_node("task")
        c = model.add_node("task")
        model.add_connection(a, b)
        model.add_connection(b, c)
        model.add_connection(c, b)

        result = GraphValidator(model).validate()

        assert not result.is_valid
        assert any("Cycle" in error for error in result.errors)
        assert result.layers == [[a]]

    def test_no_start_node(self, model):
        a = model.add_node("task")
        b = model.add_node("task")
        model.add_connection(a, b)
        model.add_connection(b, a)

        result = GraphValidator(model).validate()

        assert not result.is_valid
        assert any("No start node" in error for error in result.errors)

    def test_missing_lambda_name_is_a_warning(self, model):
        model.add_node("task", "Fetch")
        model.add_node("task", "Store", data={"lambdaName": "store"})

        result = GraphValidator(model).validate()

        assert result.is_valid
        assert result.warnings == ["Node 'Fetch' has no lambdaName"]

    def test_self_loop_and_duplicates_are_warnings(self, model):
        a = model.add_node("start", lambda_name="a")
        b = model.add_node("end", lambda_name="b")
        model.add_connection(a, b)
        model.add_connection(a, b)
        model.add_connection(b, b)

        result = GraphValidator(model).validate()

        assert f"Node {b} is connected to itself" in result.warnings
        assert f"2 connections between {a} and {b}" in result.warnings

    def test_start_nodes(self, model):
        a = model.add_node("start", position=Point(0, 0))
        b = model.add_node("task")
        c = model.add_node("task")
        model.add_connection(a, b)

        assert GraphValidator(model).start_nodes() == [a, c]
