"""Tree serialization: JSON round-trip for mathdelim document trees.

Converts typed nodes to/from JSON-compatible dicts. This is the
full-fidelity storage form: unlike the plain-text container it keeps every
Text mark.

All output is deterministic (sorted keys) for cache-key stability.

Example:
    from mathdelim import load_document
    from mathdelim.serialization import to_json, from_json

    doc = load_document("Energy: $E=mc^2$")
    restored = from_json(to_json(doc))
    assert doc == restored

Legacy math nodes (``{"type": "math", "attrs": {"latex": ..., "displayMode":
...}}``) are accepted wherever a node is expected and become MathSpans.

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from dataclasses import fields
from typing import Any

from mathdelim.legacy import span_from_legacy_node
from mathdelim.nodes import (
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    MathSpan,
    Node,
    Paragraph,
    Text,
)
from mathdelim.utils.logger import get_logger

logger = get_logger(__name__)

# Registry of node type names to classes for deserialization
_NODE_TYPES: dict[str, type] = {
    "Document": Document,
    "Paragraph": Paragraph,
    "Heading": Heading,
    "BlockQuote": BlockQuote,
    "CodeBlock": CodeBlock,
    "Text": Text,
    "MathSpan": MathSpan,
}

# Fields that hold frozensets on the node but lists in JSON
_SET_FIELDS = {"marks"}


def to_dict(node: Node) -> dict[str, Any]:
    """Convert a node to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization.

    Args:
        node: Any mathdelim tree node.

    Returns:
        Dict with ``_type`` and all node fields.

    """
    result: dict[str, Any] = {"_type": type(node).__name__}

    for f in fields(node):
        result[f.name] = _serialize_value(getattr(node, f.name))

    return result


def _serialize_value(value: Any) -> Any:
    """Serialize a single field value."""
    if isinstance(value, Node):
        return to_dict(value)
    if isinstance(value, tuple):
        return [_serialize_value(item) for item in value]
    if isinstance(value, frozenset):
        return sorted(value)
    # Primitives: str, int, bool, None
    return value


def from_dict(data: dict[str, Any]) -> Node:
    """Reconstruct a typed node from a dict.

    Args:
        data: Dict with ``_type`` and node fields (as produced by to_dict),
            or a legacy math node.

    Returns:
        Typed node (frozen dataclass).

    Raises:
        ValueError: If ``_type`` is missing or unknown, or a legacy math
            node carries no latex.

    """
    type_name = data.get("_type")
    if type_name is None:
        if data.get("type") == "math":
            span = span_from_legacy_node(data)
            if span is None:
                msg = "Legacy math node without latex"
                raise ValueError(msg)
            return span
        msg = "Missing '_type' field in serialized node"
        raise ValueError(msg)

    node_cls = _NODE_TYPES.get(type_name)
    if node_cls is None:
        msg = f"Unknown node type: {type_name!r}"
        raise ValueError(msg)

    kwargs: dict[str, Any] = {}
    for f in fields(node_cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _deserialize_value(data[f.name], f.name)

    try:
        return node_cls(**kwargs)
    except TypeError as e:
        msg = f"Invalid fields for {type_name}: {e}"
        raise ValueError(msg) from e


def _deserialize_value(value: Any, field_name: str = "") -> Any:
    """Deserialize a single field value."""
    if isinstance(value, dict):
        if "_type" in value or "type" in value:
            return from_dict(value)
        return value
    if isinstance(value, list):
        if field_name in _SET_FIELDS:
            return frozenset(value)
        if field_name == "children":
            return tuple(_deserialize_children(value))
        return tuple(_deserialize_value(item, field_name) for item in value)
    return value


def _deserialize_children(items: list[Any]) -> list[Node]:
    children: list[Node] = []
    for item in items:
        if isinstance(item, dict) and "_type" not in item and item.get("type") == "math":
            span = span_from_legacy_node(item)
            if span is None:
                logger.warning("Dropping legacy math node without latex")
                continue
            children.append(span)
            continue
        children.append(_deserialize_value(item, "children"))
    return children


def to_json(doc: Document, *, indent: int | None = None) -> str:
    """Serialize a Document to a JSON string.

    Output is deterministic (sorted keys) for cache-key stability.

    Args:
        doc: Document to serialize.
        indent: JSON indentation level (None for compact).

    Returns:
        JSON string.

    """
    return json.dumps(to_dict(doc), sort_keys=True, indent=indent)


def from_json(data: str) -> Document:
    """Deserialize a Document from a JSON string.

    Args:
        data: JSON string (as produced by to_json).

    Returns:
        Document node.

    Raises:
        ValueError: If the JSON doesn't represent a Document.

    """
    raw = json.loads(data)
    if not isinstance(raw, dict):
        msg = f"Expected a JSON object, got {type(raw).__name__}"
        raise ValueError(msg)
    node = from_dict(raw)
    if not isinstance(node, Document):
        msg = f"Expected Document, got {type(node).__name__}"
        raise ValueError(msg)
    return node


__all__ = [
    "from_dict",
    "from_json",
    "to_dict",
    "to_json",
]
