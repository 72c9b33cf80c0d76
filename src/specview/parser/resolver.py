"""Resolve ``$ref`` pointers to named schemas inside one OpenAPI document.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. This module
looks references up without ever copying or modifying the document:

* :func:`resolve_reference` -- turn a schema reference into the
  :class:`~specview.models.SchemaNode` it names, following chains of
  references and detecting cycles.
* :func:`resolve_pointer` -- walk a raw (not yet validated) mapping by JSON
  pointer. The normalizer uses it for parameter, request body and response
  references.

Only **internal** references are supported. A schema reference may be
written as ``#/components/schemas/<Name>``, ``#/definitions/<Name>`` or as a
bare ``<Name>``; the name is looked up in ``components.schemas`` first and in
``definitions`` second, whichever prefix was used.

Cycle detection works on names: every call threads the tuple of names it
has already visited, and meeting one of them again raises
:class:`~specview.exceptions.CyclicReferenceError` instead of recursing.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Optional

from specview.exceptions import CyclicReferenceError, UnresolvedReferenceError
from specview.models import Document, SchemaNode

_SCHEMA_PREFIXES = ("#/components/schemas/", "#/definitions/")


class Resolution(NamedTuple):
    """Result of :func:`resolve_reference`.

    Attributes:
        name: Name of the schema the chain ended on.
        node: The target schema.
        visited: Every name visited, in order, including *name*. Callers
            that keep traversing *node* pass this on so that cycles spanning
            several lookups are still caught.
    """

    name: str
    node: SchemaNode
    visited: tuple[str, ...]


def reference_name(ref: str) -> str:
    """Extract the schema name from a reference string.

    Args:
        ref: ``"#/components/schemas/Pet"``, ``"#/definitions/Pet"`` or
            ``"Pet"``.

    Returns:
        The unescaped schema name (``~1`` -> ``/``, ``~0`` -> ``~``).

    Raises:
        UnresolvedReferenceError: For external references (anything with a
            ``#`` that is not one of the schema prefixes above, or a file/URL
            part before the ``#``).
    """
    for prefix in _SCHEMA_PREFIXES:
        if ref.startswith(prefix):
            return _unescape(ref[len(prefix):])
    if "#" in ref or "/" in ref:
        raise UnresolvedReferenceError(
            ref,
            f"Cannot resolve $ref '{ref}': only local schema references "
            "(#/components/schemas/<Name> or #/definitions/<Name>) are supported",
        )
    return ref


def lookup_schema(name: str, document: Document) -> Optional[SchemaNode]:
    """Find *name* in ``components.schemas``, then in ``definitions``."""
    node = document.component_schemas.get(name)
    if node is None and document.definitions is not None:
        node = document.definitions.get(name)
    return node


def resolve_reference(
    ref: str,
    document: Document,
    visited: tuple[str, ...] = (),
) -> Resolution:
    """Resolve a schema reference against *document*.

    When the target is itself a plain reference (it has a ``$ref`` and
    neither a literal ``example`` nor ``allOf`` that would take precedence),
    the chain is followed until a concrete schema is reached.

    Args:
        ref: The reference string; see :func:`reference_name`.
        document: The document to resolve against. It is not modified.
        visited: Names already visited by the caller.

    Returns:
        A :class:`Resolution` for the end of the chain.

    Raises:
        UnresolvedReferenceError: If a name in the chain exists in neither
            ``components.schemas`` nor ``definitions``, or is external.
        CyclicReferenceError: If a name in the chain was already visited.

    Example::

        doc = parse_document(text)
        resolution = resolve_reference("#/components/schemas/Pet", doc)
        resolution.node.properties["name"].type  # "string"
    """
    name = reference_name(ref)
    if name in visited:
        raise CyclicReferenceError(name, visited)
    visited = (*visited, name)

    node = lookup_schema(name, document)
    if node is None:
        raise UnresolvedReferenceError(name)

    if node.ref is not None and not node.has("example") and node.all_of is None:
        return resolve_reference(node.ref, document, visited)
    return Resolution(name, node, visited)


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a local JSON pointer against a raw document mapping.

    Parses references like ``#/components/parameters/Limit`` and navigates
    *root* to the referenced value, handling RFC 6901 escaping (``~0`` for
    ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (must start with ``#/``).
        root: The raw document mapping.

    Returns:
        The value found at the referenced path.

    Raises:
        UnresolvedReferenceError: If the reference is external or any
            segment of the pointer does not exist.
    """
    if not ref.startswith("#/"):
        raise UnresolvedReferenceError(
            ref,
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled.",
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = _unescape(segment)

        if isinstance(current, dict):
            if segment not in current:
                raise UnresolvedReferenceError(
                    ref,
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path",
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise UnresolvedReferenceError(
                    ref,
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'",
                ) from exc
        else:
            raise UnresolvedReferenceError(
                ref,
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}",
            )

    return current


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")
