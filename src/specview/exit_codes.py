"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specview.exceptions.SpecviewError` subclass.
Shell wrappers and CI jobs can inspect the exit code to tell a broken
document apart from an unreadable source without parsing stderr.

Example::

    $ specview validate openapi.json
    $ echo $?
    4   # EXIT_DOCUMENT_ERROR -- the document is malformed or has the wrong shape
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. an unknown operation)."""

EXIT_SOURCE_ERROR = 3
"""The document text could not be read from its file, URL, or stdin."""

EXIT_DOCUMENT_ERROR = 4
"""The document is not valid JSON or does not have the OpenAPI shape."""

EXIT_REFERENCE_ERROR = 5
"""A ``$ref`` could not be resolved or forms a cycle."""
