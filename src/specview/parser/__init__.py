"""OpenAPI document parser -- read, validate, and resolve ``$ref`` pointers.

This sub-package turns raw document text into a frozen
:class:`~specview.models.Document` and answers reference lookups against it.

Typical usage::

    from specview.parser import parse_document, read_source

    doc = parse_document(read_source("openapi.json"))

Sub-modules:

* :mod:`~specview.parser.loader` -- I/O layer (URL, file, stdin) returning
  JSON text; YAML sources are converted.
* :mod:`~specview.parser.validator` -- JSON decoding, tolerant
  normalization of OpenAPI 2.0/3.0 documents, and shape validation.
* :mod:`~specview.parser.resolver` -- Schema ``$ref`` resolution with
  cycle detection.
"""

from specview.parser.loader import read_source
from specview.parser.resolver import resolve_reference
from specview.parser.validator import dump_document, parse_document, validate_document

__all__ = [
    "read_source",
    "parse_document",
    "validate_document",
    "dump_document",
    "resolve_reference",
]
