"""Example values for schemas and operations.

* :mod:`~specview.examples.synthesizer` -- derives a placeholder value from
  any schema node.
* :mod:`~specview.examples.extractor` -- picks the request and response
  examples shown for an operation, preferring literal ones.
"""

from specview.examples.extractor import extract_examples, request_example, response_example
from specview.examples.synthesizer import NO_VALUE, SchemaKind, classify, strip_comments, synthesize

__all__ = [
    "NO_VALUE",
    "SchemaKind",
    "classify",
    "extract_examples",
    "request_example",
    "response_example",
    "strip_comments",
    "synthesize",
]
