"""Derive placeholder example values from schema nodes.

Every :class:`~specview.models.SchemaNode` is classified into one
:class:`SchemaKind` by :func:`classify`, which fixes the precedence between
the keywords a node may carry (first match wins):

1. ``LITERAL`` -- ``example`` is present and is returned verbatim.
2. ``COMPOSITE`` -- ``allOf`` branches are merged key by key, later branches
   overriding earlier ones, followed by sibling ``properties``.
3. ``REFERENCE`` -- ``$ref`` is resolved and the target synthesized; a
   ``title``/``description`` on the referencing node becomes its ``__comment``.
4. ``OBJECT`` -- ``type: object`` or ``properties``.
5. ``ARRAY`` -- ``type: array`` with ``items``; a single-element list.
6. ``SCALAR`` -- a default value for the node's ``type``.

A node that yields nothing (no type, no default, or a broken reference)
produces :data:`NO_VALUE`, which is distinct from ``None``/JSON ``null``.
Object properties that produce ``NO_VALUE`` are left out and an array of
them becomes ``[]``.

Reference errors never escape :func:`synthesize`: the names visited so far
are threaded through every call, a broken or cyclic ``$ref`` turns that one
branch into ``NO_VALUE``, and its siblings are still synthesized.
"""

from __future__ import annotations

import copy
import enum
import logging
from typing import Any, Optional

from specview.exceptions import ReferenceError_
from specview.models import Document, SchemaNode, SynthesisConfig
from specview.parser.resolver import resolve_reference

logger = logging.getLogger(__name__)

COMMENT_KEY = "__comment"
"""Key of the auxiliary, non-data field that carries a schema's title or description."""


class _NoValue:
    """Type of :data:`NO_VALUE`. There is exactly one instance."""

    _instance: Optional[_NoValue] = None

    def __new__(cls) -> _NoValue:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _NoValue:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _NoValue:
        return self


NO_VALUE = _NoValue()
"""Marker for a schema branch that produced no example value."""


class SchemaKind(str, enum.Enum):
    """How a schema node is synthesized, decided by :func:`classify`."""

    LITERAL = "literal"
    COMPOSITE = "composite"
    REFERENCE = "reference"
    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


def classify(node: SchemaNode) -> SchemaKind:
    """Return the :class:`SchemaKind` of *node*."""
    if node.has("example"):
        return SchemaKind.LITERAL
    if node.all_of is not None:
        return SchemaKind.COMPOSITE
    if node.ref is not None:
        return SchemaKind.REFERENCE
    node_type = node.primary_type
    if node_type == "object" or node.properties is not None:
        return SchemaKind.OBJECT
    if node_type == "array" and node.items is not None:
        return SchemaKind.ARRAY
    return SchemaKind.SCALAR


def synthesize(
    node: SchemaNode,
    document: Document,
    config: Optional[SynthesisConfig] = None,
    visited: tuple[str, ...] = (),
) -> Any:
    """Synthesize an example value for *node*.

    Args:
        node: The schema to synthesize.
        document: Document used to resolve ``$ref`` pointers.
        config: Placeholder settings; defaults to :class:`SynthesisConfig()`.
        visited: Schema names already being synthesized by the caller.

    Returns:
        A JSON-compatible value, or :data:`NO_VALUE`. Equal inputs always
        produce equal outputs.

    Example::

        synthesize(SchemaNode(type="array", items=SchemaNode(type="string")), doc)
        # ["string"]
    """
    return ExampleSynthesizer(document, config).synthesize(node, visited)


def strip_comments(value: Any) -> Any:
    """Return a copy of *value* with every ``__comment`` key removed, at any depth."""
    if isinstance(value, dict):
        return {
            key: strip_comments(item)
            for key, item in value.items()
            if key != COMMENT_KEY
        }
    if isinstance(value, list):
        return [strip_comments(item) for item in value]
    return value


class ExampleSynthesizer:
    """Synthesizes examples for the schemas of one document.

    Args:
        document: Document used to resolve ``$ref`` pointers.
        config: Placeholder settings.
    """

    def __init__(self, document: Document, config: Optional[SynthesisConfig] = None) -> None:
        self.document = document
        self.config = config or SynthesisConfig()

    def synthesize(self, node: SchemaNode, visited: tuple[str, ...] = ()) -> Any:
        """Synthesize *node*; see :func:`synthesize`."""
        kind = classify(node)
        if kind is SchemaKind.LITERAL:
            return copy.deepcopy(node.example)
        if kind is SchemaKind.COMPOSITE:
            return self._composite(node, visited)
        if kind is SchemaKind.REFERENCE:
            return self._reference(node, visited)
        if kind is SchemaKind.OBJECT:
            return self._object(node, visited)
        if kind is SchemaKind.ARRAY:
            return self._array(node, visited)
        return self._scalar(node)

    def _composite(self, node: SchemaNode, visited: tuple[str, ...]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for branch in node.all_of or []:
            value = self.synthesize(branch, visited)
            if isinstance(value, dict):
                result.update(value)
        if node.properties is not None:
            result.update(self._properties(node.properties, visited))
        return result

    def _reference(self, node: SchemaNode, visited: tuple[str, ...]) -> Any:
        assert node.ref is not None
        try:
            resolution = resolve_reference(node.ref, self.document, visited)
        except ReferenceError_ as exc:
            logger.debug("No example for $ref '%s': %s", node.ref, exc)
            return NO_VALUE

        value = self.synthesize(resolution.node, resolution.visited)
        if isinstance(value, dict) and self.config.include_comments and node.label:
            # The referencing node's label replaces the target's comment.
            value[COMMENT_KEY] = node.label
        return value

    def _object(self, node: SchemaNode, visited: tuple[str, ...]) -> dict[str, Any]:
        result = self._properties(node.properties or {}, visited)

        extra = node.additional_properties
        if isinstance(extra, SchemaNode):
            value = self.synthesize(extra, visited)
            if value is not NO_VALUE:
                for i in range(1, self.config.additional_properties_count + 1):
                    result[f"additionalProp{i}"] = copy.deepcopy(value)

        self._attach_comment(result, node)
        return result

    def _properties(
        self, properties: dict[str, SchemaNode], visited: tuple[str, ...]
    ) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for name, prop in properties.items():
            value = self.synthesize(prop, visited)
            if value is not NO_VALUE:
                result[name] = value
        return result

    def _array(self, node: SchemaNode, visited: tuple[str, ...]) -> list[Any]:
        assert node.items is not None
        value = self.synthesize(node.items, visited)
        return [] if value is NO_VALUE else [value]

    def _scalar(self, node: SchemaNode) -> Any:
        node_type = node.primary_type

        if node_type == "string":
            if node.format == "date":
                return self.config.date_example
            if node.format == "date-time":
                return self.config.date_time_example
            if node.enum:
                return copy.deepcopy(node.enum[0])
            if node.label:
                return f"{self.config.label_prefix}{node.label}"
            return "string"

        if node_type in ("number", "integer"):
            if node.has("default"):
                return copy.deepcopy(node.default)
            if node.minimum is not None:
                return node.minimum
            if node.maximum is not None:
                return node.maximum
            return 0

        if node_type == "boolean":
            return copy.deepcopy(node.default) if node.has("default") else False

        if node_type == "null":
            return None

        if node.has("default"):
            return copy.deepcopy(node.default)
        return NO_VALUE

    def _attach_comment(self, value: dict[str, Any], node: SchemaNode) -> None:
        # A property named __comment is kept.
        if self.config.include_comments and node.label:
            value.setdefault(COMMENT_KEY, node.label)
