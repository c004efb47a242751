"""Module: transport.py

Author: Michael Economou
Date: 2026-02-06

HTTP client for the workflow API.

Endpoints:
    GET  /workflows                    list stored workflow documents
    POST /workflows                    create a workflow, returns the document
    PUT  /workflows/{id}               update workflow status
    PUT  /workflows/{id}/structure     save nodes and connections
    POST /workflows/{id}/run           start a run (empty body, opaque result)

Every failure (connection error, timeout, non-2xx status, undecodable
body) is raised as TransportError with a message fit to show the user.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from flowcanvas.config import (
    API_BASE_URL,
    REQUEST_TIMEOUT,
    WORKFLOW_ENDPOINT,
    WORKFLOW_RUN_ENDPOINT,
    WORKFLOW_STRUCTURE_ENDPOINT,
    WORKFLOWS_ENDPOINT,
)
from flowcanvas.persistence.codec import find_workflow

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """A workflow API request failed.

    Attributes:
        status_code: HTTP status of the response, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WorkflowNotFoundError(TransportError):
    """No stored workflow matches the requested key."""


class WorkflowApiClient:
    """Thin wrapper over a requests Session for the workflow API."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    def _url(self, template: str, **params: str) -> str:
        return self.base_url + template.format(**params)

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("[Transport] %s %s", method, url)
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            raise TransportError(f"Request to {url} timed out") from None
        except requests.ConnectionError:
            raise TransportError(f"Could not connect to {self.base_url}") from None
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise TransportError(self._error_message(response), response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise TransportError(
                f"Server returned an invalid response for {url}", response.status_code
            ) from None

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        detail = ""
        try:
            body = response.json()
            if isinstance(body, dict):
                detail = str(body.get("error") or body.get("message") or "")
        except ValueError:
            detail = response.text.strip()[:200]
        message = f"Server error {response.status_code}"
        return f"{message}: {detail}" if detail else message

    # Endpoints

    def list_workflows(self) -> list[dict[str, Any]]:
        body = self._request("GET", self._url(WORKFLOWS_ENDPOINT))
        if body is None:
            return []
        if not isinstance(body, list):
            raise TransportError("Server returned an invalid workflow list")
        return body

    def fetch_workflow(self, key: str) -> dict[str, Any]:
        """Fetch the document whose identifier matches ``key``.

        Raises:
            WorkflowNotFoundError: If no document matches.
        """
        document = find_workflow(self.list_workflows(), key)
        if document is None:
            raise WorkflowNotFoundError(f"Workflow {key!r} not found")
        return dict(document)

    def create_workflow(self, payload: dict[str, Any]) -> dict[str, Any]:
        body = self._request("POST", self._url(WORKFLOWS_ENDPOINT), json=payload)
        if not isinstance(body, dict):
            raise TransportError("Server returned an invalid workflow")
        return body

    def save_structure(self, workflow_id: str, payload: dict[str, Any]) -> Any:
        structure = {
            "nodes": payload.get("nodes", []),
            "connections": payload.get("connections", []),
        }
        url = self._url(WORKFLOW_STRUCTURE_ENDPOINT, workflow_id=workflow_id)
        return self._request("PUT", url, json=structure)

    def update_status(self, workflow_id: str, status: str) -> Any:
        url = self._url(WORKFLOW_ENDPOINT, workflow_id=workflow_id)
        return self._request("PUT", url, json={"status": status})

    def run_workflow(self, workflow_id: str) -> Any:
        url = self._url(WORKFLOW_RUN_ENDPOINT, workflow_id=workflow_id)
        return self._request("POST", url)

    def close(self) -> None:
        self._session.close()
