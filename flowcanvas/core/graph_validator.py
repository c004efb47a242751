"""Module: graph_validator.py

Author: Michael Economou
Date: 2026-02-04

Structural checks run before a workflow is sent for execution.

Checks:
- Graph is not empty
- Graph is acyclic (Kahn's algorithm; layers are the parallel batches)
- Nodes carry an execution binding (lambdaName)
- Self-loops and duplicate connections are reported

Validation is advisory: the editor allows every one of these states.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from flowcanvas.core.graph_model import resolve_lambda_name

if TYPE_CHECKING:
    from flowcanvas.core.graph_model import GraphModel

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of graph validation.

    Attributes:
        is_valid: Whether the graph passed validation
        errors: List of error messages
        warnings: List of warning messages
        layers: Node ids grouped into execution batches, sources first
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    layers: list[list[str]] = field(default_factory=list)

    @property
    def order(self) -> list[str]:
        return [node_id for layer in self.layers for node_id in layer]


class GraphValidator:
    """Validates a workflow graph before it is run."""

    def __init__(self, model: GraphModel) -> None:
        self._model = model

    def validate(self) -> ValidationResult:
        """Run all validation checks.

        Returns:
            ValidationResult with is_valid, errors, warnings and layers
        """
        errors: list[str] = []
        warnings: list[str] = []

        if not self._model.nodes:
            errors.append("Workflow has no nodes")
            return ValidationResult(is_valid=False, errors=errors)

        layers, cycle_error = self._topological_layers()
        if cycle_error:
            errors.append(cycle_error)

        warnings.extend(self._validate_bindings())
        warnings.extend(self._validate_connections())

        result = ValidationResult(
            is_valid=not errors, errors=errors, warnings=warnings, layers=layers
        )
        if not result.is_valid:
            logger.warning("[GraphValidator] Validation failed: %s", "; ".join(errors))
        for warning in warnings:
            logger.debug("[GraphValidator] %s", warning)
        return result

    def start_nodes(self) -> list[str]:
        """Ids of nodes without incoming connections, in insertion order."""
        targets = {conn.to_id for conn in self._model.connections}
        return [node.id for node in self._model.nodes if node.id not in targets]

    def _topological_layers(self) -> tuple[list[list[str]], str | None]:
        """Kahn's algorithm, grouping each in-degree-zero batch into a layer."""
        nodes = self._model.nodes
        adjacency: dict[str, list[str]] = {node.id: [] for node in nodes}
        in_degree: dict[str, int] = {node.id: 0 for node in nodes}

        for conn in self._model.connections:
            adjacency[conn.from_id].append(conn.to_id)
            in_degree[conn.to_id] += 1

        queue = [node_id for node_id, degree in in_degree.items() if degree == 0]
        if not queue:
            return [], "No start node found (every node has an incoming connection)"

        layers: list[list[str]] = []
        visited = 0
        while queue:
            layers.append(queue)
            visited += len(queue)
            next_queue: list[str] = []
            for node_id in queue:
                for child in adjacency[node_id]:
                    in_degree[child] -= 1
                    if in_degree[child] == 0:
                        next_queue.append(child)
            queue = next_queue

        if visited != len(nodes):
            return layers, "Cycle detected: workflow cannot be ordered"
        return layers, None

    def _validate_bindings(self) -> list[str]:
        warnings = []
        for node in self._model.nodes:
            if not resolve_lambda_name(node):
                warnings.append(f"Node '{node.label or node.id}' has no lambdaName")
        return warnings

    def _validate_connections(self) -> list[str]:
        warnings = []
        connections = self._model.connections

        for conn in connections:
            if conn.from_id == conn.to_id:
                warnings.append(f"Node {conn.from_id} is connected to itself")

        for (from_id, to_id), count in Counter(conn.key for conn in connections).items():
            if count > 1:
                warnings.append(f"{count} connections between {from_id} and {to_id}")
        return warnings
