"""Canonical Pydantic models shared across all specview modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`SynthesisConfig`, :class:`SummaryConfig`, :class:`ViewerConfig`,
    :class:`OutputConfig`, and :class:`GlobalConfig`.

**Document models** -- the validated, immutable view of an OpenAPI 2.0/3.0
document produced by :func:`~specview.parser.validator.parse_document`:
    :class:`SchemaNode`, :class:`Parameter`, :class:`MediaType`,
    :class:`RequestBody`, :class:`Response`, :class:`Operation`,
    :class:`Info`, :class:`TagObject`, :class:`Components`, and
    :class:`Document`.

**Derived models** -- pure values computed from a document:
    :class:`IndexEntry`, :class:`TagIndex`, :class:`ResponseExample`, and
    :class:`OperationExamples`.

Document models are frozen and use ``extra="allow"`` so that fields from
either OpenAPI dialect that specview does not interpret (``xml``,
``nullable``, ``securityDefinitions``...) survive a validate/dump round trip.
JSON names that are not valid Python identifiers are mapped with aliases
(``$ref``, ``allOf``, ``in``, ``schema``...), so serialise with
``by_alias=True``.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TAG = "default"
"""Synthetic tag given to operations that declare no tags."""

_DOCUMENT_CONFIG = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


# --- Configuration ---


class SynthesisConfig(BaseModel):
    """Knobs for the example synthesizer.

    The defaults reproduce the placeholders users of Swagger UI expect:
    three ``additionalProp`` keys for maps and fixed dates for ``date`` and
    ``date-time`` strings.
    """

    additional_properties_count: int = Field(
        default=3,
        ge=0,
        description="Number of additionalPropN keys synthesized for map schemas",
    )
    date_example: str = Field(
        default="2025-04-18", description="Value used for format=date strings"
    )
    date_time_example: str = Field(
        default="2025-04-18T00:00:00",
        description="Value used for format=date-time strings",
    )
    label_prefix: str = Field(
        default="example ",
        description="Prefix for string placeholders built from title/description",
    )
    include_comments: bool = Field(
        default=True, description="Attach __comment keys from title/description"
    )


class SummaryConfig(BaseModel):
    """Which optional sections go into copyable operation summaries."""

    include_description: bool = False
    include_parameters: bool = True
    include_examples: bool = True


class ViewerConfig(BaseModel):
    """Timing settings for live re-parsing in ``specview watch``."""

    debounce_seconds: float = Field(
        default=1.0, ge=0, description="Quiescence window before re-parsing"
    )
    poll_interval: float = Field(
        default=0.5, gt=0, description="Seconds between file modification checks"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specview/config.json``.

    Loaded and saved by :func:`~specview.config.load_global_config` and
    :func:`~specview.config.save_global_config`. See
    :func:`~specview.config.resolve_config` for how project config,
    environment variables, and CLI flags override it.
    """

    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    viewer: ViewerConfig = Field(default_factory=ViewerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Document ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operations inside an OpenAPI path item."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class SchemaNode(BaseModel):
    """A JSON-Schema-like fragment, possibly indirect via ``$ref``.

    Only the keywords the synthesizer interprets are declared; everything
    else is kept in ``model_extra``. Whether ``example`` or ``default`` was
    given at all (including an explicit ``null``) is answered by
    :meth:`has`, not by comparing against ``None``.
    """

    model_config = _DOCUMENT_CONFIG

    type: Optional[Union[str, list[str]]] = None
    format: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    properties: Optional[dict[str, SchemaNode]] = None
    items: Optional[SchemaNode] = None
    ref: Optional[str] = Field(default=None, alias="$ref")
    all_of: Optional[list[SchemaNode]] = Field(default=None, alias="allOf")
    enum: Optional[list[Any]] = None
    required: Optional[list[str]] = None
    default: Any = None
    additional_properties: Optional[Union[bool, SchemaNode]] = Field(
        default=None, alias="additionalProperties"
    )
    example: Any = None
    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None

    def has(self, field: str) -> bool:
        """Return True if *field* was present in the source document."""
        return field in self.model_fields_set

    @property
    def primary_type(self) -> Optional[str]:
        """The declared type, using the first non-null entry of an OpenAPI 3.1 type list."""
        if isinstance(self.type, list):
            non_null = [t for t in self.type if t != "null"]
            if non_null:
                return non_null[0]
            return "null" if self.type else None
        return self.type

    @property
    def label(self) -> Optional[str]:
        """``title`` if set, otherwise ``description``."""
        return self.title or self.description


class Parameter(BaseModel):
    """An OpenAPI *Parameter Object* (3.0 ``schema`` or 2.0 inline ``type``)."""

    model_config = _DOCUMENT_CONFIG

    name: str
    location: str = Field(alias="in")
    description: Optional[str] = None
    required: Optional[bool] = None
    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")
    type: Optional[str] = None
    format: Optional[str] = None
    example: Any = None

    @property
    def display_type(self) -> Optional[str]:
        """Inline 2.0 ``type``, falling back to the schema's type."""
        if self.type:
            return self.type
        if self.schema_ is not None:
            return self.schema_.primary_type
        return None


class MediaType(BaseModel):
    """One content-type entry of a request body or response."""

    model_config = _DOCUMENT_CONFIG

    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, Any]] = None

    def has(self, field: str) -> bool:
        """Return True if *field* was present in the source document."""
        return field in self.model_fields_set


class RequestBody(BaseModel):
    """An OpenAPI 3.0 *Request Body Object*."""

    model_config = _DOCUMENT_CONFIG

    content: dict[str, MediaType] = Field(default_factory=dict)
    required: Optional[bool] = None
    description: Optional[str] = None


class Response(BaseModel):
    """A single response entry, keyed by status code in :attr:`Operation.responses`.

    Swagger 2.0 responses keep their ``schema`` and ``examples`` fields; the
    normalizer additionally mirrors them into ``content`` so that consumers
    only need to look there.
    """

    model_config = _DOCUMENT_CONFIG

    description: Optional[str] = None
    content: Optional[dict[str, MediaType]] = None
    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")
    examples: Optional[dict[str, Any]] = None
    headers: Optional[dict[str, Any]] = None


class Operation(BaseModel):
    """One HTTP method under one path.

    ``tags`` is never empty: operations without tags are filed under
    :data:`DEFAULT_TAG`.
    """

    model_config = _DOCUMENT_CONFIG

    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: Optional[str] = Field(default=None, alias="operationId")
    tags: list[str] = Field(default_factory=lambda: [DEFAULT_TAG])
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = Field(default=None, alias="requestBody")
    responses: dict[str, Response] = Field(default_factory=dict)
    deprecated: bool = False

    @field_validator("tags")
    @classmethod
    def default_tag_when_empty(cls, value: list[str]) -> list[str]:
        return value or [DEFAULT_TAG]


class Info(BaseModel):
    """The document's *Info Object*. ``title`` and ``version`` are required."""

    model_config = _DOCUMENT_CONFIG

    title: str
    version: str
    description: Optional[str] = None
    terms_of_service: Optional[str] = Field(default=None, alias="termsOfService")
    contact: Optional[dict[str, Any]] = None
    license: Optional[dict[str, Any]] = None


class TagObject(BaseModel):
    """A top-level tag declaration (name plus optional description)."""

    model_config = _DOCUMENT_CONFIG

    name: str
    description: Optional[str] = None


class Components(BaseModel):
    """OpenAPI 3.0 ``components``; only ``schemas`` is interpreted."""

    model_config = _DOCUMENT_CONFIG

    schemas: dict[str, SchemaNode] = Field(default_factory=dict)


class Document(BaseModel):
    """A validated OpenAPI 2.0 or 3.0 document.

    Produced by :func:`~specview.parser.validator.parse_document` and never
    modified afterwards; a new parse produces a new instance. ``paths`` keeps
    declaration order for both paths and methods and holds only operations
    (path-level parameters have already been merged into them).

    See Also:
        :func:`~specview.index.build_tag_index`: Groups operations by tag.
        :func:`~specview.examples.extractor.extract_examples`: Picks
        request/response examples for an operation.
    """

    model_config = _DOCUMENT_CONFIG

    openapi: Optional[str] = None
    swagger: Optional[str] = None
    info: Info
    tags: Optional[list[TagObject]] = None
    paths: dict[str, dict[str, Operation]]
    components: Optional[Components] = None
    definitions: Optional[dict[str, SchemaNode]] = None

    @property
    def spec_version(self) -> str:
        """The ``openapi`` or ``swagger`` version string, or ``"unknown"``."""
        return self.openapi or self.swagger or "unknown"

    @property
    def component_schemas(self) -> dict[str, SchemaNode]:
        """``components.schemas``, or an empty mapping when absent."""
        if self.components is None:
            return {}
        return self.components.schemas

    def operation_count(self) -> int:
        return sum(len(methods) for methods in self.paths.values())


# --- Derived values ---


class IndexEntry(BaseModel):
    """A ``{path, method, operation}`` record inside a tag bucket."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: str
    operation: Operation

    @property
    def key(self) -> str:
        """Stable identifier ``"<method>::<path>"`` used for selections."""
        return f"{self.method}::{self.path}"


class TagIndex(BaseModel):
    """Operations grouped by tag, produced by :func:`~specview.index.build_tag_index`.

    ``buckets`` is ordered by first appearance of each tag; entries within a
    bucket keep document order. An operation with several tags appears in
    each of their buckets.
    """

    model_config = ConfigDict(frozen=True)

    buckets: dict[str, list[IndexEntry]] = Field(default_factory=dict)
    descriptions: dict[str, str] = Field(default_factory=dict)

    @property
    def tags(self) -> list[str]:
        """Distinct tags in first-seen order."""
        return list(self.buckets)

    def entries(self) -> list[IndexEntry]:
        """Every operation exactly once, in the order it was first indexed."""
        seen: dict[str, IndexEntry] = {}
        for bucket in self.buckets.values():
            for entry in bucket:
                seen.setdefault(entry.key, entry)
        return list(seen.values())

    def find(self, method: str, path: str) -> Optional[IndexEntry]:
        """Look up the entry for *method* and *path* (method is case-insensitive)."""
        key = f"{method.lower()}::{path}"
        for entry in self.entries():
            if entry.key == key:
                return entry
        return None


class ResponseExample(BaseModel):
    """The example chosen for an operation's first 2xx response."""

    code: str
    content_type: Optional[str] = None
    value: Any = None
    summary: Optional[str] = None


class OperationExamples(BaseModel):
    """Request and response examples for one operation.

    Either side is ``None`` when the operation offers nothing to show.
    """

    request_content_type: Optional[str] = None
    request_example: Any = None
    response_example: Optional[ResponseExample] = None
