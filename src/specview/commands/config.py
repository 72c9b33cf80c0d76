"""``specview config`` -- view and modify the user-wide configuration.

Keys use ``section.field`` notation (``synthesis.label_prefix``,
``viewer.debounce_seconds``); see :class:`~specview.models.GlobalConfig`
for the sections.
"""

from __future__ import annotations

from typing import Optional

import typer

from specview.exceptions import ConfigError
from specview.output import error, get_output, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show the configuration after project, environment and flag overrides.",
    ),
) -> None:
    """Show the current configuration.

    Example::

        specview config show
        specview --json config show --effective
    """
    from specview.config import global_config_path, load_global_config, resolve_config

    try:
        config = resolve_config() if effective else load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config file: {global_config_path()}")
    get_output().print_json(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'synthesis.label_prefix'."),
    value: str = typer.Argument(help="New value; JSON literals (3, true) are decoded."),
) -> None:
    """Set one configuration value.

    Example::

        specview config set synthesis.additional_properties_count 1
        specview config set summary.include_description true
        specview config set output.format plain
    """
    from specview.config import load_global_config, save_global_config, set_config_value

    try:
        config = set_config_value(load_global_config(), key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    save_global_config(config)
    section, _, field = key.partition(".")
    success(f"Set {key} = {getattr(getattr(config, section), field)!r}")


@config_app.command("reset")
def config_reset(
    key: Optional[str] = typer.Argument(
        None, help="Key to reset. Omit to reset everything."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Reset one key, or the whole configuration, to defaults.

    Example::

        specview config reset viewer.debounce_seconds
        specview config reset --yes
    """
    from specview.config import load_global_config, reset_config_value, save_global_config
    from specview.models import GlobalConfig

    if key is None:
        if not yes and not typer.confirm("Reset all config to defaults?"):
            info("Cancelled.")
            raise typer.Exit()
        save_global_config(GlobalConfig())
        success("Configuration reset to defaults.")
        return

    try:
        config = reset_config_value(load_global_config(), key)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    save_global_config(config)
    success(f"Reset {key}.")
