"""Plain-text operation summaries meant for pasting into chats, tickets or docs.

A summary looks like::

    URL: GET /pets/{petId}

    Summary: Info for a specific pet

    Parameters:
      Name: petId
      In: path
      Type: string
      Required: true

    Response example (200, application/json):
    {
      "id": 0,
      "name": "string"
    }

Several summaries are joined with a ``---`` separator line. Auxiliary
``__comment`` keys produced by the synthesizer never appear in summaries.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from specview.examples.extractor import extract_examples
from specview.examples.synthesizer import strip_comments
from specview.models import (
    Document,
    IndexEntry,
    Parameter,
    SummaryConfig,
    SynthesisConfig,
)

SEPARATOR = "\n---\n"


def format_example(value: Any) -> str:
    """Pretty-print an example value as JSON, without ``__comment`` keys."""
    return json.dumps(strip_comments(value), indent=2, ensure_ascii=False)


def summarize_operation(
    entry: IndexEntry,
    document: Document,
    config: Optional[SummaryConfig] = None,
    synthesis: Optional[SynthesisConfig] = None,
) -> str:
    """Build the copyable summary of one operation.

    Args:
        entry: The operation, as found in the tag index.
        document: The document *entry* belongs to.
        config: Which optional sections to include.
        synthesis: Synthesizer settings for the example sections.

    Returns:
        The summary text, without a trailing newline.
    """
    config = config or SummaryConfig()
    operation = entry.operation
    blocks = [f"URL: {entry.method.upper()} {entry.path}"]

    if operation.summary:
        blocks.append(f"Summary: {operation.summary}")
    if config.include_description and operation.description:
        blocks.append(f"Description: {operation.description}")
    if operation.deprecated:
        blocks.append("Deprecated: true")

    if config.include_parameters and operation.parameters:
        lines = ["Parameters:"]
        for param in operation.parameters:
            lines.extend(_parameter_lines(param, config.include_description))
            lines.append("")
        blocks.append("\n".join(lines).rstrip())

    if config.include_examples:
        examples = extract_examples(operation, document, synthesis)
        if examples.request_example is not None:
            blocks.append(
                f"Request example ({examples.request_content_type}):\n"
                + format_example(examples.request_example)
            )
        response = examples.response_example
        if response is not None:
            heading = f"Response example ({response.code}, {response.content_type})"
            if response.summary:
                heading += f" - {response.summary}"
            blocks.append(f"{heading}:\n" + format_example(response.value))

    return "\n\n".join(blocks)


def summarize_selection(
    entries: Iterable[IndexEntry],
    document: Document,
    config: Optional[SummaryConfig] = None,
    synthesis: Optional[SynthesisConfig] = None,
) -> str:
    """Summarize several operations, separated by ``---`` lines."""
    return SEPARATOR.join(
        summarize_operation(entry, document, config, synthesis) for entry in entries
    )


def _parameter_lines(param: Parameter, include_description: bool) -> list[str]:
    lines = [f"  Name: {param.name}", f"  In: {param.location}"]
    if param.display_type:
        lines.append(f"  Type: {param.display_type}")
    if param.required is not None:
        lines.append(f"  Required: {'true' if param.required else 'false'}")
    if include_description and param.description:
        lines.append(f"  Description: {param.description}")
    return lines
