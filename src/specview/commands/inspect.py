"""Read-only commands over one OpenAPI document.

Every command takes a SOURCE (file path, ``http(s)://`` URL, or ``-`` for
stdin), parses it, and prints one view of the result:

* ``validate`` -- parse only; exit status tells whether the document is usable.
* ``tags`` / ``operations`` -- the tag index.
* ``show`` -- one operation's details and parameters.
* ``examples`` -- request and response examples of one operation.
* ``summary`` -- copyable plain-text summaries.
* ``synth`` -- a synthesized example for a named schema.

Failures are reported on stderr and exit with the error's code from
:mod:`specview.exit_codes`.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from specview.exceptions import InvalidUsageError, SpecviewError
from specview.models import Document, GlobalConfig, IndexEntry, TagIndex
from specview.output import debug, error, get_output, info, success, suggest, warning


def _config(ctx: typer.Context) -> GlobalConfig:
    if ctx.obj and isinstance(ctx.obj.get("config"), GlobalConfig):
        return ctx.obj["config"]
    return GlobalConfig()


def _fail(exc: SpecviewError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def _load_document(source: str) -> Document:
    """Read and parse *source*, exiting with the error's code on failure."""
    from specview.parser import parse_document, read_source

    try:
        text = read_source(source)
        document = parse_document(text)
    except SpecviewError as exc:
        raise _fail(exc) from None

    debug(
        f"Parsed {document.spec_version} document '{document.info.title}' "
        f"({document.operation_count()} operations)"
    )
    return document


def _load_index(source: str) -> tuple[Document, TagIndex]:
    from specview.index import build_tag_index

    document = _load_document(source)
    return document, build_tag_index(document)


def _find_entry(index: TagIndex, method: str, path: str) -> IndexEntry:
    entry = index.find(method, path)
    if entry is None:
        raise _fail(InvalidUsageError(f"No operation {method.upper()} {path} in document"))
    return entry


def validate_command(
    source: str = typer.Argument(help="Document file, URL, or '-' for stdin."),
) -> None:
    """Check that a document parses and report what it contains.

    Example::

        specview validate openapi.json
        specview --json validate https://petstore3.swagger.io/api/v3/openapi.json
    """
    document, index = _load_index(source)

    get_output().print_record(
        {
            "title": document.info.title,
            "version": document.info.version,
            "spec_version": document.spec_version,
            "operations": document.operation_count(),
            "tags": len(index.tags),
            "schemas": len(document.component_schemas) + len(document.definitions or {}),
        },
        title="Document",
    )
    success(f"Valid OpenAPI {document.spec_version} document.")
    suggest(f"List its operations with: specview operations {source}")


def tags_command(
    source: str = typer.Argument(help="Document file, URL, or '-' for stdin."),
) -> None:
    """List tags in first-seen order with their operation counts.

    Example::

        specview tags openapi.json
    """
    document, index = _load_index(source)

    rows = [
        [tag, str(len(entries)), index.descriptions.get(tag, "")]
        for tag, entries in index.buckets.items()
    ]
    get_output().print_table(
        ["Tag", "Operations", "Description"],
        rows,
        title=f"{document.info.title} -- Tags ({len(rows)})",
    )


def operations_command(
    source: str = typer.Argument(help="Document file, URL, or '-' for stdin."),
    tag: Optional[str] = typer.Option(
        None, "--tag", "-t", help="Only list operations filed under this tag."
    ),
) -> None:
    """List operations in document order, optionally for one tag.

    Example::

        specview operations openapi.json
        specview operations openapi.json --tag pets
    """
    document, index = _load_index(source)

    if tag is None:
        entries = index.entries()
    elif tag in index.buckets:
        entries = index.buckets[tag]
    else:
        raise _fail(
            InvalidUsageError(
                f"Unknown tag '{tag}'. Known tags: {', '.join(index.tags) or 'none'}"
            )
        )

    rows = [
        [
            entry.method.upper(),
            entry.path,
            entry.operation.summary or "-",
            ", ".join(entry.operation.tags),
            "Yes" if entry.operation.deprecated else "",
        ]
        for entry in entries
    ]
    title = f"{document.info.title} -- Operations ({len(rows)})"
    get_output().print_table(
        ["Method", "Path", "Summary", "Tags", "Deprecated"], rows, title=title
    )


def show_command(
    source: str = typer.Argument(help="Document file, URL, or '-' for stdin."),
    method: str = typer.Argument(help="HTTP method, e.g. get."),
    path: str = typer.Argument(help="Path template, e.g. /pets/{petId}."),
) -> None:
    """Show one operation's details and parameters.

    Example::

        specview show openapi.json get /pets/{petId}
    """
    from specview.output import OutputFormat

    _, index = _load_index(source)
    entry = _find_entry(index, method, path)
    operation = entry.operation

    details: dict[str, Any] = {
        "method": entry.method.upper(),
        "path": entry.path,
        "summary": operation.summary,
        "description": operation.description,
        "operationId": operation.operation_id,
        "tags": operation.tags,
        "deprecated": operation.deprecated,
        "responses": list(operation.responses),
    }
    parameters = [
        {
            "name": param.name,
            "in": param.location,
            "type": param.display_type,
            "required": bool(param.required),
            "description": param.description,
        }
        for param in operation.parameters
    ]

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json({**details, "parameters": parameters})
        return

    output.print_record(details, title=operation.summary)
    if parameters:
        output.print_table(
            ["Name", "In", "Type", "Required", "Description"],
            [
                [
                    p["name"],
                    p["in"],
                    p["type"] or "-",
                    "Yes" if p["required"] else "",
                    p["description"] or "",
                ]
                for p in parameters
            ],
            title="Parameters",
        )


def examples_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Document file, URL, or '-' for stdin."),
    method: str = typer.Argument(help="HTTP method, e.g. post."),
    path: str = typer.Argument(help="Path template, e.g. /pets."),
) -> None:
    """Show the request and response examples of one operation.

    Literal examples from the document are preferred; otherwise one is
    synthesized from the schema.

    Example::

        specview examples openapi.json post /pets
    """
    from specview.examples import extract_examples

    document, index = _load_index(source)
    entry = _find_entry(index, method, path)
    examples = extract_examples(entry.operation, document, _config(ctx).synthesis)

    data: dict[str, Any] = {"request": None, "response": None}
    if examples.request_example is not None:
        data["request"] = {
            "content_type": examples.request_content_type,
            "example": examples.request_example,
        }
    response = examples.response_example
    if response is not None:
        data["response"] = {
            "code": response.code,
            "content_type": response.content_type,
            "summary": response.summary,
            "example": response.value,
        }

    if data["request"] is None and data["response"] is None:
        info(f"No examples for {entry.method.upper()} {entry.path}.")
    get_output().print_json(data)


def _parse_selection(raw: str) -> tuple[str, str]:
    method, sep, path = raw.partition(":")
    if not sep or not method or not path.startswith("/"):
        raise _fail(
            InvalidUsageError(f"Invalid selection '{raw}'. Expected METHOD:PATH, e.g. get:/pets")
        )
    return method, path


def summary_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Document file, URL, or '-' for stdin."),
    select: Optional[list[str]] = typer.Option(
        None,
        "--select",
        "-s",
        help="Operation to include as METHOD:PATH (repeatable). Default: all.",
    ),
    with_description: Optional[bool] = typer.Option(
        None,
        "--with-description/--without-description",
        help="Include operation and parameter descriptions.",
    ),
    examples: Optional[bool] = typer.Option(
        None,
        "--examples/--no-examples",
        help="Include request/response examples.",
    ),
) -> None:
    """Print copyable plain-text summaries of operations.

    Example::

        specview summary openapi.json --select get:/pets --select post:/pets
        specview summary openapi.json --with-description | pbcopy
    """
    document, index = _load_index(source)
    config = _config(ctx)

    summary_config = config.summary.model_copy()
    if with_description is not None:
        summary_config.include_description = with_description
    if examples is not None:
        summary_config.include_examples = examples

    if select:
        entries = [_find_entry(index, *_parse_selection(raw)) for raw in select]
    else:
        entries = index.entries()

    if not entries:
        warning("Document has no operations.")
        return

    from specview.summary import summarize_selection

    get_output().print_data(
        summarize_selection(entries, document, summary_config, config.synthesis)
    )
    info(f"Summarized {len(entries)} operation(s).")


def synth_command(
    ctx: typer.Context,
    source: str = typer.Argument(help="Document file, URL, or '-' for stdin."),
    schema_name: str = typer.Argument(
        help="Schema name in components.schemas or definitions, or a $ref."
    ),
) -> None:
    """Synthesize an example for a named schema.

    Example::

        specview synth openapi.json Pet
        specview synth openapi.json '#/definitions/Order'
    """
    from specview.examples import NO_VALUE, synthesize
    from specview.parser.resolver import resolve_reference

    document = _load_document(source)
    config = _config(ctx)

    try:
        resolution = resolve_reference(schema_name, document)
    except SpecviewError as exc:
        raise _fail(exc) from None

    value = synthesize(resolution.node, document, config.synthesis, resolution.visited)
    if value is NO_VALUE:
        warning(f"Schema '{resolution.name}' has no type, default, or example to derive a value from.")
        return
    get_output().print_json(value)
