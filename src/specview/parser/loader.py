"""Read OpenAPI document text from a URL, local file, or stdin.

The parsing core never performs I/O: it is handed a complete string. This
module is the collaborator that produces that string for the CLI. It
supports JSON sources directly and YAML sources by converting them to JSON
text, so that :func:`~specview.parser.validator.parse_document` always sees
JSON.

The single public function is :func:`read_source`.
"""

from __future__ import annotations

import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any

import httpx
import yaml

from specview.exceptions import MalformedInputError, SourceError


def read_source(source: str) -> str:
    """Read document text from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        JSON text. YAML content (``.yaml``/``.yml`` files or YAML
        content types) is converted; anything else is returned as read.

    Raises:
        SourceError: If the source cannot be read.
        MalformedInputError: If a YAML source is not valid YAML.
    """
    if source == "-":
        return _read_stdin()
    elif source.startswith(("http://", "https://")):
        return _read_url(source)
    else:
        return _read_file(source)


def _read_stdin() -> str:
    """Read document text from stdin.

    Raises:
        SourceError: If stdin cannot be read or is empty.
    """
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SourceError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SourceError("No input received from stdin")

    return _to_json_text(content, hint="")


def _read_url(url: str) -> str:
    """Fetch document text from URL.

    Raises:
        SourceError: If the URL cannot be fetched.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = "yaml" if "yaml" in content_type or "yml" in content_type else ""
    return _to_json_text(response.text, hint=hint)


def _read_file(path: str) -> str:
    """Read document text from a local file, decoded as UTF-8.

    Raises:
        SourceError: If the file is missing, unreadable, or not UTF-8.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceError(f"Document file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceError(f"Failed to read document file {path}: {exc}") from exc

    hint = "yaml" if file_path.suffix.lower() in (".yaml", ".yml") else ""
    return _to_json_text(content, hint=hint)


def _to_json_text(content: str, hint: str) -> str:
    """Convert YAML *content* to JSON text when *hint* says it is YAML.

    JSON is passed through untouched so that decoder errors reported later
    point at the user's own text.
    """
    if hint != "yaml":
        return content

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise MalformedInputError(f"Invalid YAML: {exc}") from exc

    return json.dumps(data, ensure_ascii=False, default=_yaml_scalar)


def _yaml_scalar(value: Any) -> Any:
    """Serialise YAML-only scalars (timestamps) that JSON cannot represent."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)
