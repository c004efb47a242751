"""
Module: test_codec.py

Author: Michael Economou
Date: 2026-02-08

Tests for the workflow document codec: save payload shape, loading with
identity reconciliation, legacy document shapes and workflow lookup.
"""

import pytest

from flowcanvas.core.graph_model import GraphModel, Size, resolve_lambda_name
from flowcanvas.core.transform import Point
from flowcanvas.persistence.codec import (
    InvalidWorkflowError,
    deserialize_node,
    deserialize_workflow,
    find_workflow,
    serialize_workflow,
)
from flowcanvas.utils.ids import NODE_ID_PREFIX


@pytest.fixture
def populated(model):
    """Model with three nodes and two connections."""
    a_id = model.add_node("start", "Begin", Point(0, 0))
    b_id = model.add_node("task", "Work", Point(200, 0), {"lambdaName": "doWork"})
    c_id = model.add_node("end", "Done", Point(400, 0), lambda_name="finish")
    model.add_connection(a_id, b_id, "go")
    model.add_connection(b_id, c_id)
    return model


class TestSerialize:
    def test_payload_shape(self, populated):
        payload = serialize_workflow(populated, "Flow", "desc")

        assert payload["name"] == "Flow"
        assert payload["description"] == "desc"
        assert len(payload["nodes"]) == 3
        assert len(payload["connections"]) == 2

        node = payload["nodes"][0]
        assert set(node) == {
            "id", "canvasId", "type", "label", "position",
            "width", "height", "data", "lambdaName", "status",
        }
        assert node["canvasId"] == node["id"]
        assert node["position"] == {"x": 0, "y": 0}
        assert node["width"] == 160
        assert node["height"] == 64
        assert node["status"] == "draft"

    def test_lambda_name_dual_lookup(self, populated):
        nodes = serialize_workflow(populated)["nodes"]
        assert [node["lambdaName"] for node in nodes] == ["", "doWork", "finish"]

    def test_connection_shape(self, populated):
        first = populated.nodes[0].id
        second = populated.nodes[1].id
        connection = serialize_workflow(populated)["connections"][0]
        assert connection == {"source": first, "target": second, "label": "go"}

    def test_empty_graph(self, model):
        assert serialize_workflow(model) == {
            "name": "",
            "description": "",
            "nodes": [],
            "connections": [],
        }


class TestRoundTrip:
    def test_identity_preserved(self, populated):
        payload = serialize_workflow(populated, "Flow")
        restored = GraphModel()
        report = deserialize_workflow(payload, restored)

        assert report.is_complete
        assert report.synthesized_ids == []
        assert restored.connections == populated.connections
        for original, loaded in zip(populated.nodes, restored.nodes):
            assert loaded.id == original.id
            assert loaded.type == original.type
            assert loaded.label == original.label
            assert loaded.position == original.position
            assert loaded.size == original.size
            assert loaded.data == original.data
            assert resolve_lambda_name(loaded) == resolve_lambda_name(original)
        assert len(restored.nodes) == len(populated.nodes)

    def test_load_replaces_contents_and_selection(self, populated):
        payload = serialize_workflow(populated)
        target = GraphModel()
        stale = target.add_node("task", "Stale")
        target.select_only(stale)

        deserialize_workflow(payload, target)

        assert not target.has_node(stale)
        assert target.selected_ids == []
        assert not target.has_been_modified


class TestReconciliation:
    def test_connections_by_secondary_id(self, model):
        """Test nodes saved with store ids and connections by canvas id."""
        document = {
            "_id": {"$oid": "wf1"},
            "name": "Legacy",
            "nodes": [
                {"_id": {"$oid": "m1"}, "canvasId": "c1", "type": "start"},
                {"_id": {"$oid": "m2"}, "canvasId": "c2", "type": "end"},
            ],
            "connections": [{"source": "c1", "target": "c2"}],
        }
        report = deserialize_workflow(document, model)

        assert report.workflow_id == "wf1"
        assert report.is_complete
        assert [node.id for node in model.nodes] == ["c1", "c2"]
        assert [conn.key for conn in model.connections] == [("c1", "c2")]

    def test_connections_by_wrapped_store_id(self, model):
        document = {
            "nodes": [
                {"canvasId": "c1", "_id": {"$oid": "m1"}},
                {"canvasId": "c2", "_id": {"$oid": "m2"}},
            ],
            "connections": [{"source": {"$oid": "m1"}, "target": "m2"}],
        }
        deserialize_workflow(document, model)
        assert [conn.key for conn in model.connections] == [("c1", "c2")]

    def test_one_bad_connection_is_reported_and_dropped(self, model):
        document = {
            "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
            "connections": [
                {"source": "a", "target": "b"},
                {"source": "b", "target": "ghost"},
                {"source": "b", "target": "c"},
            ],
        }
        report = deserialize_workflow(document, model)

        assert len(model.connections) == 2
        assert report.connection_count == 2
        assert len(report.errors) == 1
        error = report.errors[0]
        assert error.index == 1
        assert error.target == "ghost"
        assert "target" in error.reason
        assert not report.is_complete

    def test_non_object_connection_reported(self, model):
        report = deserialize_workflow({"nodes": [{"id": "a"}], "connections": ["a->a"]}, model)
        assert len(report.errors) == 1
        assert model.connections == []

    def test_nodes_without_id_get_synthesized_ids(self, model):
        report = deserialize_workflow({"nodes": [{"type": "task"}, {"type": "end"}]}, model)

        assert len(report.synthesized_ids) == 2
        assert [node.id for node in model.nodes] == report.synthesized_ids
        assert all(node_id.startswith(NODE_ID_PREFIX) for node_id in report.synthesized_ids)

    def test_duplicate_ids_are_made_unique(self, model):
        document = {
            "nodes": [{"id": "dup", "label": "first"}, {"id": "dup", "canvasId": "c2"}],
            "connections": [{"source": "dup", "target": "c2"}],
        }
        report = deserialize_workflow(document, model)

        ids = [node.id for node in model.nodes]
        assert ids[0] == "dup"
        assert ids[1] == report.synthesized_ids[0]
        assert [conn.key for conn in model.connections] == [("dup", ids[1])]

    def test_referential_integrity_after_load(self, model):
        document = {
            "nodes": [{"id": "a"}, {"name": "B"}, "garbage", {"canvasId": "c"}],
            "connections": [
                {"from": "a", "to": "B"},
                {"source": "c", "target": "a"},
                {"source": "x", "target": "y"},
                {"target": "a"},
            ],
        }
        deserialize_workflow(document, model)

        for conn in model.connections:
            assert model.has_node(conn.from_id)
            assert model.has_node(conn.to_id)
        assert len(model.nodes) == 3


class TestLegacyShapes:
    def test_task_list_document(self, model):
        document = {
            "name": "Old",
            "tasks": [
                {"name": "fetch", "type": "task", "status": "completed", "config": {"url": "x"}},
                {"name": "store", "type": "task"},
            ],
            "connections": [{"source": "fetch", "target": "store", "metadata": {"label": "ok"}}],
        }
        report = deserialize_workflow(document, model)

        fetch = model.get_node("fetch")
        assert fetch.label == "fetch"
        assert fetch.status == "completed"
        assert fetch.data == {"url": "x"}
        assert model.connections[0].label == "ok"
        assert report.name == "Old"

    def test_flat_position_and_size(self):
        node = deserialize_node({"x": 40, "y": 80, "width": 200, "height": 90}, "n1")
        assert node.position == Point(40, 80)
        assert node.size == Size(200, 90)

    def test_defaults_for_missing_fields(self):
        node = deserialize_node({}, "n1")
        assert node.type == "task"
        assert node.label == ""
        assert node.position == Point(0, 0)
        assert node.size == Size(160, 64)
        assert node.data == {}
        assert node.status == "draft"
        assert node.lambda_name is None

    def test_bad_field_types_fall_back(self):
        node = deserialize_node(
            {"position": {"x": "12", "y": None}, "data": "nope", "status": 3, "type": ""}, "n1"
        )
        assert node.position == Point(12.0, 0)
        assert node.data == {}
        assert node.status == "draft"
        assert node.type == "task"


class TestInvalidDocument:
    @pytest.mark.parametrize("document", [None, [], "workflow"])
    def test_raises_and_leaves_model(self, populated, document):
        before = populated.nodes
        with pytest.raises(InvalidWorkflowError):
            deserialize_workflow(document, populated)
        assert populated.nodes == before


class TestFindWorkflow:
    def test_bare_id_beats_secondary_id(self):
        documents = [
            {"workflowId": "k", "name": "secondary"},
            {"id": "k", "name": "primary"},
        ]
        assert find_workflow(documents, "k")["name"] == "primary"

    def test_wrapped_id_beats_secondary_id(self):
        documents = [
            {"canvasId": "k", "name": "secondary"},
            {"_id": {"$oid": "k"}, "name": "wrapped"},
        ]
        assert find_workflow(documents, "k")["name"] == "wrapped"

    def test_secondary_id(self):
        documents = [{"id": "other"}, {"workflowId": "k", "name": "found"}]
        assert find_workflow(documents, "k")["name"] == "found"

    def test_key_is_trimmed(self):
        assert find_workflow([{"id": "k"}], "  k ") == {"id": "k"}

    def test_not_found(self):
        assert find_workflow([{"id": "a"}, "junk"], "k") is None
