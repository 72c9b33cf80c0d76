"""Pick the request and response examples shown for an operation.

Literal examples written into the document always win over synthesized
ones. For the request side the first content type of ``requestBody`` is
used; for the response side the first response whose status code starts
with ``"2"``.

OpenAPI 3.0 *Example Objects* (``{"summary": ..., "value": ...}``) inside
an ``examples`` map are unwrapped to their ``value``; for responses the
``summary`` is reported alongside.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specview.examples.synthesizer import NO_VALUE, ExampleSynthesizer
from specview.exceptions import ReferenceError_
from specview.models import (
    Document,
    MediaType,
    Operation,
    OperationExamples,
    ResponseExample,
    SchemaNode,
    SynthesisConfig,
)
from specview.parser.resolver import resolve_reference

logger = logging.getLogger(__name__)


def extract_examples(
    operation: Operation,
    document: Document,
    config: Optional[SynthesisConfig] = None,
) -> OperationExamples:
    """Return the request and response examples for *operation*.

    Args:
        operation: An operation of *document*.
        document: Used to resolve schema references.
        config: Synthesizer settings for schemas without literal examples.

    Returns:
        An :class:`~specview.models.OperationExamples`. Either side is
        ``None`` when there is nothing to show; never raises for schema
        content.
    """
    synthesizer = ExampleSynthesizer(document, config)
    content_type = _first_request_content_type(operation)
    return OperationExamples(
        request_content_type=content_type,
        request_example=_request_example(operation, synthesizer),
        response_example=_response_example(operation, synthesizer),
    )


def request_example(
    operation: Operation,
    document: Document,
    config: Optional[SynthesisConfig] = None,
) -> Any:
    """Return the request body example for *operation*, or ``None``.

    Order: the media type's literal ``example``, then its first
    ``examples`` entry, then a value synthesized from its ``schema``.
    """
    return _request_example(operation, ExampleSynthesizer(document, config))


def response_example(
    operation: Operation,
    document: Document,
    config: Optional[SynthesisConfig] = None,
) -> Optional[ResponseExample]:
    """Return the example of the first 2xx response of *operation*, or ``None``.

    Order: the media type's literal ``example``, then an ``examples`` entry
    (one whose key contains ``"success"`` or whose value has ``code == 200``
    is preferred over the first), then a value synthesized from ``schema``.
    """
    return _response_example(operation, ExampleSynthesizer(document, config))


def _first_request_content_type(operation: Operation) -> Optional[str]:
    body = operation.request_body
    if body is None or not body.content:
        return None
    return next(iter(body.content))


def _request_example(operation: Operation, synthesizer: ExampleSynthesizer) -> Any:
    body = operation.request_body
    if body is None or not body.content:
        return None

    media = next(iter(body.content.values()))
    if media.has("example"):
        return media.example
    if media.examples:
        value, _ = _unwrap(next(iter(media.examples.values())))
        return value
    if media.schema_ is None:
        return None

    value = _synthesize_schema(media.schema_, synthesizer)
    return None if value is NO_VALUE else value


def _response_example(
    operation: Operation, synthesizer: ExampleSynthesizer
) -> Optional[ResponseExample]:
    success = next(
        ((code, resp) for code, resp in operation.responses.items() if code.startswith("2")),
        None,
    )
    if success is None:
        return None

    code, response = success
    if not response.content:
        return None
    content_type, media = next(iter(response.content.items()))

    if media.has("example"):
        return ResponseExample(code=code, content_type=content_type, value=media.example)

    if media.examples:
        value, summary = _unwrap(_preferred_example(media))
        return ResponseExample(
            code=code, content_type=content_type, value=value, summary=summary
        )

    if media.schema_ is not None:
        value = _synthesize_schema(media.schema_, synthesizer)
        if value is not NO_VALUE:
            return ResponseExample(code=code, content_type=content_type, value=value)

    return None


def _preferred_example(media: MediaType) -> Any:
    assert media.examples
    for key, example in media.examples.items():
        if isinstance(example, dict) and "value" in example:
            value = example["value"]
            if "success" in key or (isinstance(value, dict) and value.get("code") == 200):
                return example
    return next(iter(media.examples.values()))


def _unwrap(example: Any) -> tuple[Any, Optional[str]]:
    """Split an Example Object into ``(value, summary)``; raw values pass through."""
    if isinstance(example, dict) and "value" in example:
        summary = example.get("summary")
        return example["value"], summary if isinstance(summary, str) else None
    return example, None


def _synthesize_schema(schema: SchemaNode, synthesizer: ExampleSynthesizer) -> Any:
    # A bare reference is resolved up front so a broken one yields nothing.
    if schema.ref is not None and not schema.has("example") and schema.all_of is None:
        try:
            resolution = resolve_reference(schema.ref, synthesizer.document)
        except ReferenceError_ as exc:
            logger.debug("No example for body schema %s: %s", schema.ref, exc)
            return NO_VALUE
        return synthesizer.synthesize(resolution.node, resolution.visited)
    return synthesizer.synthesize(schema)
