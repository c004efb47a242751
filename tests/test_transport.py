"""
Module: test_transport.py

Author: Michael Economou
Date: 2026-02-08

Tests for WorkflowApiClient with a mocked requests session.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from flowcanvas.services.transport import (
    TransportError,
    WorkflowApiClient,
    WorkflowNotFoundError,
)


def make_response(status_code=200, body=None, raw=None):
    """Build a real requests.Response carrying a JSON (or raw) body."""
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    return response


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http):
    return WorkflowApiClient(base_url="http://api.test/", timeout=3, session=http)


class TestRequests:
    def test_list_workflows(self, client, http):
        http.request.return_value = make_response(body=[{"id": "w1"}])

        assert client.list_workflows() == [{"id": "w1"}]
        http.request.assert_called_once_with("GET", "http://api.test/workflows", timeout=3)

    def test_empty_list_body(self, client, http):
        http.request.return_value = make_response(body=None)
        assert client.list_workflows() == []

    def test_create_workflow_posts_payload(self, client, http):
        payload = {"name": "Flow", "nodes": [], "connections": []}
        http.request.return_value = make_response(201, {"_id": {"$oid": "w9"}, **payload})

        created = client.create_workflow(payload)

        assert created["_id"] == {"$oid": "w9"}
        http.request.assert_called_once_with(
            "POST", "http://api.test/workflows", timeout=3, json=payload
        )

    def test_save_structure_sends_nodes_and_connections_only(self, client, http):
        http.request.return_value = make_response(body={"ok": True})
        payload = {"name": "Flow", "description": "", "nodes": [{"id": "a"}], "connections": []}

        client.save_structure("w1", payload)

        http.request.assert_called_once_with(
            "PUT",
            "http://api.test/workflows/w1/structure",
            timeout=3,
            json={"nodes": [{"id": "a"}], "connections": []},
        )

    def test_update_status(self, client, http):
        http.request.return_value = make_response(body={})
        client.update_status("w1", "running")
        http.request.assert_called_once_with(
            "PUT", "http://api.test/workflows/w1", timeout=3, json={"status": "running"}
        )

    def test_run_workflow_has_no_body(self, client, http):
        http.request.return_value = make_response(202, {"runId": "r1"})

        assert client.run_workflow("w1") == {"runId": "r1"}
        http.request.assert_called_once_with("POST", "http://api.test/workflows/w1/run", timeout=3)


class TestFetchWorkflow:
    def test_matches_by_secondary_id(self, client, http):
        http.request.return_value = make_response(
            body=[{"id": "w1"}, {"_id": {"$oid": "w2"}, "workflowId": "legacy", "name": "Old"}]
        )
        assert client.fetch_workflow("legacy")["name"] == "Old"

    def test_not_found(self, client, http):
        http.request.return_value = make_response(body=[{"id": "w1"}])
        with pytest.raises(WorkflowNotFoundError):
            client.fetch_workflow("nope")


class TestErrors:
    def test_http_error_with_detail(self, client, http):
        http.request.return_value = make_response(500, {"error": "database unavailable"})

        with pytest.raises(TransportError) as exc_info:
            client.list_workflows()

        assert exc_info.value.status_code == 500
        assert "database unavailable" in str(exc_info.value)

    def test_http_error_with_text_body(self, client, http):
        http.request.return_value = make_response(404, raw=b"404 page not found")

        with pytest.raises(TransportError) as exc_info:
            client.run_workflow("w1")

        assert exc_info.value.status_code == 404
        assert "page not found" in str(exc_info.value)

    def test_connection_error(self, client, http):
        http.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(TransportError, match="Could not connect"):
            client.list_workflows()

    def test_timeout(self, client, http):
        http.request.side_effect = requests.Timeout()
        with pytest.raises(TransportError, match="timed out"):
            client.list_workflows()

    def test_invalid_json(self, client, http):
        http.request.return_value = make_response(200, raw=b"<html>")
        with pytest.raises(TransportError, match="invalid response"):
            client.list_workflows()

    def test_list_must_be_array(self, client, http):
        http.request.return_value = make_response(body={"workflows": []})
        with pytest.raises(TransportError):
            client.list_workflows()

    def test_create_must_return_object(self, client, http):
        http.request.return_value = make_response(body=[])
        with pytest.raises(TransportError):
            client.create_workflow({})


def test_close_closes_session(client, http):
    client.close()
    http.close.assert_called_once_with()
