"""Config commands -- view and modify global defaults.

Provides the ``httpstep config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~httpstep.models.GlobalConfig`): the default spec URL, the period
new steps start with, the request settings used to fetch specs, and the
default output format.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from httpstep.output import error, info, print_config, success


config_app = typer.Typer(no_args_is_help=True)

SETTABLE_KEYS = (
    "default_spec_url",
    "default_period",
    "request.timeout",
    "request.verify_ssl",
    "output.format",
)


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration (file plus environment overrides).

    Example::

        httpstep config show
        httpstep --json config show
    """
    from httpstep.config import get_config_dir, resolve_config
    from httpstep.exceptions import ConfigError

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    print_config(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help=f"One of: {', '.join(SETTABLE_KEYS)}."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is validated by the config model, so ``false``/``no``/``0``
    work for ``request.verify_ssl`` and ``default_period`` must be a
    positive number of milliseconds.

    Example::

        httpstep config set default_spec_url https://petstore.swagger.io/v2/swagger.json
        httpstep config set default_period 60000
        httpstep config set request.verify_ssl false
        httpstep config set output.format json
    """
    from httpstep.config import load_global_config, save_global_config
    from httpstep.exceptions import ConfigError
    from httpstep.models import GlobalConfig

    if key not in SETTABLE_KEYS:
        error(f"Unknown config key: {key}. Settable keys: {', '.join(SETTABLE_KEYS)}")
        raise typer.Exit(code=2)

    try:
        data = load_global_config().model_dump(mode="json")
    except ConfigError as exc:
        error(f"{exc}. Run: httpstep config reset")
        raise typer.Exit(code=exc.exit_code) from None

    section, _, field = key.rpartition(".")
    target = data[section] if section else data
    target[field] = value

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        error(f"Invalid value for {key}: {value} ({reason})")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    stored = new_config.model_dump(mode="json")
    success(f"Set {key} = {(stored[section] if section else stored)[field]}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Example::

        httpstep config reset --force
    """
    from httpstep.config import save_global_config
    from httpstep.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
