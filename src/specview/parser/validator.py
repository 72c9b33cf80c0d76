"""Parse, normalize, and validate raw OpenAPI text into a :class:`~specview.models.Document`.

The public functions are:

* :func:`parse_document` -- raw JSON text to a validated ``Document``.
* :func:`validate_document` -- an already-decoded mapping to a ``Document``.
* :func:`normalize_document` -- the tolerant rewriting applied before
  validation (exposed for testing).
* :func:`dump_document` -- serialise a ``Document`` back to JSON text.

Validation is tolerant: only ``info.title``, ``info.version``
and ``paths`` are required, and both the OpenAPI 3.0 (``components.schemas``)
and Swagger 2.0 (``definitions``) dialects are accepted. Failures never
produce a partial document:

* text that is not JSON raises :class:`~specview.exceptions.MalformedInputError`
* JSON of the wrong shape raises :class:`~specview.exceptions.SchemaViolationError`
  naming the first failing field.

Normalization is idempotent, so ``parse_document(dump_document(doc)) == doc``.
"""

from __future__ import annotations

import copy
import json
import logging
import types
from typing import Any, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from specview.exceptions import (
    MalformedInputError,
    SchemaViolationError,
    UnresolvedReferenceError,
)
from specview.models import Document, HTTPMethod
from specview.parser.resolver import resolve_pointer

logger = logging.getLogger(__name__)

_HTTP_METHODS = tuple(m.value for m in HTTPMethod)
_DEFAULT_MEDIA_TYPE = "application/json"
_JSON_TYPE_NAMES = {
    "list": "array",
    "str": "string",
    "int": "number",
    "float": "number",
    "bool": "boolean",
    "NoneType": "null",
}


def parse_document(text: Union[str, bytes]) -> Document:
    """Parse raw JSON text into a validated :class:`~specview.models.Document`.

    Args:
        text: The document text. ``bytes`` are decoded as UTF-8.

    Returns:
        A new, frozen ``Document``.

    Raises:
        MalformedInputError: If *text* is not valid UTF-8 JSON. The message
            carries the decoder's own description of the problem.
        SchemaViolationError: If the JSON does not have the OpenAPI shape.

    Example::

        doc = parse_document('{"openapi": "3.0.3", "info": {"title": "Pets", '
                             '"version": "1.0"}, "paths": {}}')
        doc.info.title  # "Pets"
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.debug("Rejected document: not UTF-8 (%s)", exc)
            raise MalformedInputError(f"Invalid UTF-8: {exc}") from exc

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.debug("Rejected document: %s", exc)
        raise MalformedInputError(f"Invalid JSON: {exc}") from exc

    return validate_document(raw)


def validate_document(raw: Any) -> Document:
    """Normalize and validate a decoded JSON value.

    Args:
        raw: The value produced by ``json.loads``. It is not modified.

    Returns:
        A new, frozen ``Document``.

    Raises:
        SchemaViolationError: With the dotted path and message of the first
            validation error.
    """
    if not isinstance(raw, dict):
        raise SchemaViolationError(
            "<root>", f"expected a JSON object, got {_json_type(raw)}"
        )

    try:
        document = Document.model_validate(normalize_document(raw))
    except ValidationError as exc:
        first = exc.errors(include_url=False)[0]
        field_path = _format_location(first["loc"])
        logger.debug(
            "Rejected document: %d validation error(s), first at %s",
            exc.error_count(),
            field_path,
        )
        raise SchemaViolationError(field_path, first["msg"]) from exc

    logger.debug(
        "Validated %s document '%s' with %d operation(s)",
        document.spec_version,
        document.info.title,
        document.operation_count(),
    )
    return document


def dump_document(document: Document, indent: Optional[int] = None) -> str:
    """Serialise *document* back to JSON text using its original field names."""
    return document.model_dump_json(by_alias=True, exclude_unset=True, indent=indent)


# --- Normalization ---


def normalize_document(raw: dict[str, Any]) -> dict[str, Any]:
    """Return a normalized deep copy of a raw document mapping.

    * Path items keep only their HTTP-method entries, lowercased, in
      declared order.
    * Path-level parameters are merged into every operation of the path.
    * Local ``$ref`` entries in ``parameters``, ``requestBody`` and
      ``responses`` are replaced with their targets.
    * Swagger 2.0 ``body`` parameters and response ``schema``/``examples``
      are mirrored into OpenAPI 3.0 ``requestBody``/``content`` form.

    Values of an unexpected type are left alone so that validation can
    report them.
    """
    root = copy.deepcopy(raw)
    paths = root.get("paths")
    if not isinstance(paths, dict):
        return root

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        path_params = _inline_list(path_item.get("parameters"), root)
        operations: dict[str, Any] = {}
        for key, operation in path_item.items():
            method = key.lower() if isinstance(key, str) else key
            if method not in _HTTP_METHODS:
                continue
            if isinstance(operation, dict):
                _normalize_operation(operation, path_params, root)
            operations[method] = operation
        paths[path] = operations

    return root


def _normalize_operation(
    operation: dict[str, Any],
    path_params: list[Any],
    root: dict[str, Any],
) -> None:
    """Normalize a single operation mapping in place."""
    params = operation.get("parameters")
    if isinstance(params, list) or (params is None and path_params):
        operation["parameters"] = _merge_parameters(
            path_params, _inline_list(params, root)
        )

    body = operation.get("requestBody")
    if isinstance(body, dict):
        operation["requestBody"] = _inline(body, root)
    elif body is None:
        converted = _body_parameter_to_request_body(operation, root)
        if converted is not None:
            operation["requestBody"] = converted

    responses = operation.get("responses")
    if isinstance(responses, dict):
        for code, response in responses.items():
            response = _inline(response, root)
            if isinstance(response, dict):
                _mirror_response_content(response, operation, root)
            responses[code] = response


def _merge_parameters(path_params: list[Any], op_params: list[Any]) -> list[Any]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    op_keys = {_parameter_key(param) for param in op_params}
    merged = [
        param
        for param in path_params
        if _parameter_key(param) is None or _parameter_key(param) not in op_keys
    ]
    merged.extend(op_params)
    return merged


def _parameter_key(param: Any) -> Optional[tuple[Any, Any]]:
    if not isinstance(param, dict):
        return None
    return (param.get("name"), param.get("in"))


def _inline_list(values: Any, root: dict[str, Any]) -> list[Any]:
    if not isinstance(values, list):
        return []
    return [_inline(value, root) for value in values]


def _inline(value: Any, root: dict[str, Any]) -> Any:
    """Replace a ``{"$ref": "#/..."}`` mapping with a copy of its target.

    Chains are followed; a chain that loops or cannot be resolved leaves the
    reference mapping in place.
    """
    seen: set[str] = set()
    while isinstance(value, dict) and isinstance(value.get("$ref"), str):
        ref = value["$ref"]
        if ref in seen:
            logger.debug("Leaving cyclic $ref '%s' in place", ref)
            return value
        seen.add(ref)
        try:
            target = resolve_pointer(ref, root)
        except UnresolvedReferenceError as exc:
            logger.debug("Leaving unresolved $ref in place: %s", exc)
            return value
        value = copy.deepcopy(target)
    return value


def _media_types(operation: dict[str, Any], root: dict[str, Any], key: str) -> list[Any]:
    declared = operation.get(key)
    if not isinstance(declared, list) or not declared:
        declared = root.get(key)
    if not isinstance(declared, list) or not declared:
        return [_DEFAULT_MEDIA_TYPE]
    return declared


def _body_parameter_to_request_body(
    operation: dict[str, Any], root: dict[str, Any]
) -> Optional[dict[str, Any]]:
    """Build an OpenAPI 3.0 ``requestBody`` from a Swagger 2.0 ``in: body`` parameter."""
    params = operation.get("parameters")
    if not isinstance(params, list):
        return None

    for param in params:
        if isinstance(param, dict) and param.get("in") == "body":
            media: dict[str, Any] = {}
            if "schema" in param:
                media["schema"] = param["schema"]
            if "example" in param:
                media["example"] = param["example"]
            content_type = _media_types(operation, root, "consumes")[0]
            body: dict[str, Any] = {"content": {content_type: media}}
            if "required" in param:
                body["required"] = param["required"]
            if "description" in param:
                body["description"] = param["description"]
            return body

    return None


def _mirror_response_content(
    response: dict[str, Any],
    operation: dict[str, Any],
    root: dict[str, Any],
) -> None:
    """Give a Swagger 2.0 response an OpenAPI 3.0 ``content`` entry."""
    if "content" in response:
        return
    if "schema" not in response and "examples" not in response:
        return

    content_type = _media_types(operation, root, "produces")[0]
    media: dict[str, Any] = {}
    if "schema" in response:
        media["schema"] = response["schema"]

    examples = response.get("examples")
    if isinstance(examples, dict) and examples:
        if content_type in examples:
            media["example"] = examples[content_type]
        else:
            content_type, media["example"] = next(iter(examples.items()))

    response["content"] = {content_type: media}


def _format_location(loc: tuple[Union[int, str], ...]) -> str:
    """Join a pydantic error location, leaving out union-member tags.

    For a field such as ``additionalProperties: Union[bool, SchemaNode]``
    pydantic reports ``(..., "additionalProperties", "bool")``; the location
    is walked along the model types so that only document keys remain.
    """
    parts: list[str] = []
    annotation: Any = Document
    for part in loc:
        annotation, is_key = _location_step(annotation, part)
        if is_key:
            parts.append(str(part))
    return ".".join(parts) or "<root>"


def _location_step(annotation: Any, part: Union[int, str]) -> tuple[Any, bool]:
    """Return the type found under *part* and whether *part* is a document key."""
    members = _union_members(annotation)
    if len(members) == 1:
        annotation = members[0]
    elif members:
        for member in members:
            if part == _union_tag(member):
                return member, False
        return None, False

    origin = get_origin(annotation)
    if origin is None and isinstance(annotation, type) and issubclass(annotation, BaseModel):
        for name, field in annotation.model_fields.items():
            if part in (name, field.alias):
                return field.annotation, True
        return None, True

    args = get_args(annotation)
    if origin is list and args:
        return args[0], True
    if origin is dict and len(args) == 2:
        return args[1], True
    return None, True


def _union_members(annotation: Any) -> list[Any]:
    if get_origin(annotation) not in (Union, types.UnionType):
        return []
    return [arg for arg in get_args(annotation) if arg is not type(None)]


def _union_tag(member: Any) -> str:
    origin = get_origin(member)
    if origin is None:
        return getattr(member, "__name__", str(member))
    args = ",".join(_union_tag(arg) for arg in get_args(member))
    return f"{origin.__name__}[{args}]"


def _json_type(value: Any) -> str:
    name = type(value).__name__
    return _JSON_TYPE_NAMES.get(name, name)
