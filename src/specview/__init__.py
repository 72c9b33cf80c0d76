"""specview -- Browse OpenAPI 2.0/3.0 documents and derive example payloads.

The core turns raw document text into an immutable, tag-indexed view of its
operations and synthesizes example request/response bodies for any schema,
even when the document carries no literal examples. The ``specview`` console
script is a terminal front end over the same core.

Typical workflow::

    specview tags openapi.json                       # list tags
    specview examples openapi.json post /pets        # request/response examples
    specview summary openapi.json --select get:/pets # copyable summary
    specview watch openapi.json                      # re-parse on every save

Modules:
    models: Pydantic models shared across the entire package.
    parser: Reading, validation/normalization and ``$ref`` resolution.
    examples: Example synthesis and per-operation example extraction.
    index: Tag-partitioned operation index.
    summary: Plain-text operation summaries.
    session: The viewer's current document, with debounced re-parsing.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"
