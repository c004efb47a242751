"""Identifier sourcing for persisted workflow documents.

Saved workflows were written by several schema revisions, and each one
kept node identity in a different field: a plain ``id``, the canvas id
under ``canvasId``, a store-generated ``_id`` (possibly wrapped as
``{"$oid": ...}``), or only a ``name`` for the oldest task lists.
Connections reference nodes through whichever of these the writer used.

Identity is therefore looked up through ordered accessor lists, tried in
sequence, returning the first value present:

    NODE_IDENTIFIER_ACCESSORS      id, canvasId, _id, name
    NESTED_IDENTIFIER_ACCESSORS    data/config payload ids (aliases only)
    WORKFLOW_IDENTIFIER_ACCESSORS  bare string id, wrapped object id, secondary ids

Author:
    Michael Economou

Date:
    2026-02-04
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Container, Iterable, Mapping
from typing import Any, NamedTuple

logger = logging.getLogger(__name__)

OBJECT_ID_KEYS = ("$oid", "oid")
NESTED_PAYLOAD_KEYS = ("data", "config")


class IdentifierAccessor(NamedTuple):
    """A named lookup returning an identifier string or None."""

    name: str
    get: Callable[[Mapping[str, Any]], str | None]


def _scalar(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, int):
        return str(value)
    return None


def unwrap_object_id(value: Any) -> str | None:
    """Return the identifier string held by a bare or wrapped value.

    ``"abc"`` and ``{"$oid": "abc"}`` both give ``"abc"``. Integers are
    stringified. Anything else gives None.
    """
    if isinstance(value, Mapping):
        for key in OBJECT_ID_KEYS:
            unwrapped = _scalar(value.get(key))
            if unwrapped is not None:
                return unwrapped
        return None
    return _scalar(value)


def _field(key: str, wrapped: bool = False) -> Callable[[Mapping[str, Any]], str | None]:
    def get(raw: Mapping[str, Any]) -> str | None:
        value = raw.get(key)
        return unwrap_object_id(value) if wrapped else _scalar(value)

    return get


def _nested(container: str, key: str) -> Callable[[Mapping[str, Any]], str | None]:
    def get(raw: Mapping[str, Any]) -> str | None:
        payload = raw.get(container)
        if not isinstance(payload, Mapping):
            return None
        return unwrap_object_id(payload.get(key))

    return get


def _bare_string(key: str) -> Callable[[Mapping[str, Any]], str | None]:
    def get(raw: Mapping[str, Any]) -> str | None:
        value = raw.get(key)
        return _scalar(value) if isinstance(value, str) else None

    return get


def _wrapped(key: str) -> Callable[[Mapping[str, Any]], str | None]:
    def get(raw: Mapping[str, Any]) -> str | None:
        value = raw.get(key)
        return unwrap_object_id(value) if isinstance(value, Mapping) else None

    return get


NODE_IDENTIFIER_ACCESSORS: tuple[IdentifierAccessor, ...] = (
    IdentifierAccessor("id", _field("id")),
    IdentifierAccessor("canvasId", _field("canvasId")),
    IdentifierAccessor("_id", _field("_id", wrapped=True)),
    IdentifierAccessor("name", _field("name")),
)

NESTED_IDENTIFIER_ACCESSORS: tuple[IdentifierAccessor, ...] = tuple(
    IdentifierAccessor(f"{container}.{key}", _nested(container, key))
    for container in NESTED_PAYLOAD_KEYS
    for key in ("id", "canvasId", "_id", "nodeId")
)

WORKFLOW_IDENTIFIER_ACCESSORS: tuple[IdentifierAccessor, ...] = (
    IdentifierAccessor("id", _bare_string("id")),
    IdentifierAccessor("_id", _bare_string("_id")),
    IdentifierAccessor("_id.$oid", _wrapped("_id")),
    IdentifierAccessor("id.$oid", _wrapped("id")),
    IdentifierAccessor("workflowId", _field("workflowId", wrapped=True)),
    IdentifierAccessor("canvasId", _field("canvasId", wrapped=True)),
)


def first_identifier(
    raw: Mapping[str, Any], accessors: Iterable[IdentifierAccessor]
) -> str | None:
    """Return the first identifier any accessor finds, in accessor order."""
    for accessor in accessors:
        value = accessor.get(raw)
        if value is not None:
            return value
    return None


def all_identifiers(raw: Mapping[str, Any], accessors: Iterable[IdentifierAccessor]) -> list[str]:
    """Return every distinct identifier the accessors find, in accessor order."""
    found: list[str] = []
    for accessor in accessors:
        value = accessor.get(raw)
        if value is not None and value not in found:
            found.append(value)
    return found


def derive_node_identifier(raw: Mapping[str, Any]) -> str | None:
    """Original identifier of a persisted node, by priority."""
    return first_identifier(raw, NODE_IDENTIFIER_ACCESSORS)


def node_aliases(raw: Mapping[str, Any]) -> list[str]:
    """Every identifier a document may have used to reference this node."""
    return all_identifiers(raw, NODE_IDENTIFIER_ACCESSORS + NESTED_IDENTIFIER_ACCESSORS)


def build_reconciliation_map(
    loaded: Iterable[tuple[Mapping[str, Any], str]],
) -> dict[str, str]:
    """Map every alias of every loaded node to its normalized id.

    Args:
        loaded: Pairs of (persisted node dict, normalized id).

    Returns:
        Alias -> normalized id. Each normalized id maps to itself and
        takes precedence over any alias with the same text; among
        aliases, the first node to claim one keeps it.
    """
    loaded = list(loaded)
    mapping: dict[str, str] = {normalized: normalized for _, normalized in loaded}

    for raw, normalized in loaded:
        for alias in node_aliases(raw):
            owner = mapping.setdefault(alias, normalized)
            if owner != normalized:
                logger.debug(
                    "[Identity] Alias %r already maps to %s, not %s", alias, owner, normalized
                )
    return mapping


def resolve_endpoint(
    value: Any, reconciliation_map: Mapping[str, str], node_ids: Container[str]
) -> str | None:
    """Resolve a persisted connection endpoint to a normalized node id.

    Looks the value up in the reconciliation map first, then accepts the
    raw stored value if it already is a loaded node's id. Pass ``node_ids``
    as a set when resolving many endpoints.
    """
    key = unwrap_object_id(value)
    if key is not None and key in reconciliation_map:
        return reconciliation_map[key]

    if isinstance(value, str) and value in node_ids:
        return value
    return None


def document_identifier(document: Mapping[str, Any]) -> str | None:
    """Identifier of a workflow document, whatever shape it was stored in."""
    return first_identifier(document, WORKFLOW_IDENTIFIER_ACCESSORS)
