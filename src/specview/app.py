"""Typer application and CLI entry point for specview.

The root callback turns the global flags into an
:class:`~specview.output.OutputManager` and the resolved
:class:`~specview.models.GlobalConfig`, both of which sub-commands read
from ``ctx.obj``. :func:`main` is the console-script entry point declared
in ``pyproject.toml``; it maps :class:`~specview.exceptions.SpecviewError`
to its exit code and writes a crash log for anything else.

See Also:
    :mod:`specview.config`: Configuration precedence.
    :mod:`specview.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from specview import __version__
from specview.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="specview",
    help="Browse OpenAPI 2.0/3.0 documents and derive example payloads.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specview {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send ``specview.*`` log records to stderr when *verbose* is set."""
    logger = logging.getLogger("specview")
    for handler in list(logger.handlers):
        if getattr(handler, "_specview_cli", False):
            logger.removeHandler(handler)

    if not verbose:
        logger.setLevel(logging.NOTSET)
        return

    handler = RichHandler(
        console=Console(file=sys.stderr, stderr=True),
        show_time=False,
        show_path=False,
    )
    handler._specview_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves configuration, installs the global output manager, and stores
    the resolved :class:`~specview.models.GlobalConfig` in ``ctx.obj``.
    A broken config file is reported as a warning and defaults are used,
    so that ``specview config reset`` stays reachable.
    """
    from specview.config import resolve_config
    from specview.exceptions import ConfigError
    from specview.models import GlobalConfig
    from specview.output import OutputFormat, OutputManager, set_output, warning

    _configure_logging(verbose)

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    config_problem: Optional[str] = None
    try:
        config = resolve_config(cli_format=cli_format)
    except ConfigError as exc:
        config_problem = str(exc)
        config = GlobalConfig()
        if cli_format is not None:
            config.output.format = cli_format

    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        config_problem = f"Unknown output format '{config.output.format}', using auto"
        fmt = OutputFormat.AUTO

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )
    if config_problem is not None:
        warning(config_problem)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


from specview.commands.config import config_app  # noqa: E402
from specview.commands.inspect import (  # noqa: E402
    examples_command,
    operations_command,
    show_command,
    summary_command,
    synth_command,
    tags_command,
    validate_command,
)
from specview.commands.watch import watch_command  # noqa: E402

app.command("validate")(validate_command)
app.command("tags")(tags_command)
app.command("operations")(operations_command)
app.command("show")(show_command)
app.command("examples")(examples_command)
app.command("summary")(summary_command)
app.command("synth")(synth_command)
app.command("watch")(watch_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback under the data directory and return its path."""
    from specview.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specview`` console script.

    :class:`~specview.exceptions.SpecviewError` instances that escape a
    command exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specview.exceptions import SpecviewError
        from specview.output import error

        if isinstance(exc, SpecviewError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
