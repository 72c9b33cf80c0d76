"""Exception hierarchy for specview.

All exceptions inherit from :class:`SpecviewError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specview.exit_codes`.
The top-level error handler in :func:`specview.app.main` catches
``SpecviewError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpecviewError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- SourceError                (exit 3)
    +-- DocumentError              (exit 4)
    |   +-- MalformedInputError
    |   +-- SchemaViolationError
    +-- ReferenceError_            (exit 5)
    |   +-- UnresolvedReferenceError
    |   +-- CyclicReferenceError
    +-- ConfigError                (exit 1)

Only :class:`MalformedInputError` and :class:`SchemaViolationError` are ever
surfaced to the user by the viewer session. The reference errors are raised
by :mod:`specview.parser.resolver` and contained by the example synthesizer.
"""

from __future__ import annotations

from typing import Iterable

from specview.exit_codes import (
    EXIT_DOCUMENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REFERENCE_ERROR,
    EXIT_SOURCE_ERROR,
)


class SpecviewError(Exception):
    """Base exception for all specview errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specview.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecviewError):
    """Raised for invalid CLI arguments, such as an operation that does not exist."""

    exit_code = EXIT_INVALID_USAGE


class SourceError(SpecviewError):
    """Raised when document text cannot be read from a file, URL, or stdin."""

    exit_code = EXIT_SOURCE_ERROR


class DocumentError(SpecviewError):
    """Base class for failures to turn raw text into a :class:`~specview.models.Document`."""

    exit_code = EXIT_DOCUMENT_ERROR


class MalformedInputError(DocumentError):
    """Raised when the raw text is not valid JSON.

    The message carries the underlying decoder message verbatim.
    """


class SchemaViolationError(DocumentError):
    """Raised when the JSON parses but does not have the OpenAPI document shape.

    Args:
        field_path: Dotted location of the first failing field
            (e.g. ``"info.title"``), or ``"<root>"`` for the document itself.
        detail: The validator's message for that field.
    """

    def __init__(self, field_path: str, detail: str):
        super().__init__(f"{field_path}: {detail}")
        self.field_path = field_path
        self.detail = detail


class ReferenceError_(SpecviewError):
    """Base class for ``$ref`` resolution failures.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ReferenceError``.
    """

    exit_code = EXIT_REFERENCE_ERROR

    def __init__(self, message: str, name: str):
        super().__init__(message)
        self.name = name


class UnresolvedReferenceError(ReferenceError_):
    """Raised when a referenced schema exists in neither ``components.schemas`` nor ``definitions``."""

    def __init__(self, name: str, reason: str | None = None):
        message = reason or (
            f"Schema '{name}' not found in components.schemas or definitions"
        )
        super().__init__(message, name)


class CyclicReferenceError(ReferenceError_):
    """Raised when a reference chain revisits a schema name.

    Args:
        name: The schema name that was seen twice.
        chain: The names visited before the cycle was detected.
    """

    def __init__(self, name: str, chain: Iterable[str] = ()):
        self.chain = tuple(chain)
        path = " -> ".join((*self.chain, name))
        super().__init__(f"Cyclic reference to schema '{name}' ({path})", name)


class ConfigError(SpecviewError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
