"""``specview watch`` -- re-parse a document file whenever it changes.

The file is polled for modification; each change is handed to a
:class:`~specview.session.ViewerSession`, whose debouncer only parses once
edits have been quiet for ``viewer.debounce_seconds``. Every parse attempt
prints one status line: the document's tag and operation counts, or the
parse error (the previous document is discarded).
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Optional

import typer

from specview.exceptions import SourceError
from specview.models import GlobalConfig
from specview.output import error, info, success
from specview.session import SessionState, ViewerSession

logger = logging.getLogger(__name__)


def report_state(state: SessionState) -> None:
    """Print one status line for a parse attempt."""
    if state.document is not None:
        document = state.document
        success(
            f"{document.info.title} {document.info.version}: "
            f"{document.operation_count()} operation(s)"
        )
    elif state.error is not None:
        error(state.error)
    else:
        info("Document is empty.")


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceError(f"Failed to read document file {path}: {exc}") from exc


def _signature(path: Path) -> Optional[tuple[int, int]]:
    try:
        stat = path.stat()
    except OSError:
        return None
    return (stat.st_mtime_ns, stat.st_size)


def watch_file(
    path: Path,
    session: ViewerSession,
    poll_interval: float,
    stop: Optional[threading.Event] = None,
    max_polls: Optional[int] = None,
) -> None:
    """Feed *path* into *session* now and again after every change.

    The first load is immediate; later changes go through
    :meth:`ViewerSession.submit`. Returns when *stop* is set or after
    *max_polls* polls, flushing any pending submit first.

    A file that cannot be re-read after a change is reported and polling
    goes on.

    Raises:
        SourceError: If the file cannot be read initially.
    """
    stop = stop or threading.Event()
    last = _signature(path)
    session.load(_read(path))

    polls = 0
    while not stop.is_set() and (max_polls is None or polls < max_polls):
        stop.wait(poll_interval)
        polls += 1
        current = _signature(path)
        if current is None or current == last:
            continue
        last = current
        logger.debug("Change detected in %s", path)
        try:
            text = _read(path)
        except SourceError as exc:
            # Half-written or briefly missing; the next change is re-read.
            logger.warning("Re-reading %s failed: %s", path, exc)
            error(str(exc))
            continue
        session.submit(text)

    session.flush()


def watch_command(
    ctx: typer.Context,
    file: Path = typer.Argument(help="Document file to watch."),
    debounce: Optional[float] = typer.Option(
        None, "--debounce", "-d", min=0, help="Seconds of quiet before re-parsing."
    ),
) -> None:
    """Watch a document file and report each re-parse.

    Example::

        specview watch openapi.json
        specview watch openapi.json --debounce 0.2
    """
    config: GlobalConfig = (ctx.obj or {}).get("config") or GlobalConfig()
    viewer = config.viewer.model_copy()
    if debounce is not None:
        viewer.debounce_seconds = debounce

    if not file.is_file():
        error(f"Document file not found: {file}")
        raise typer.Exit(code=SourceError.exit_code)

    session = ViewerSession(viewer, config.synthesis, on_change=report_state)
    info(f"Watching {file} (Ctrl-C to stop)")
    try:
        watch_file(file, session, viewer.poll_interval)
    except SourceError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except KeyboardInterrupt:
        info("Stopped.")
    finally:
        session.close()
