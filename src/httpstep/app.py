"""Typer application and CLI entry point for httpstep.

The ``httpstep`` command is a small host for the step-configuration core: it
loads an OpenAPI document, lists its endpoints, drives a
:class:`~httpstep.session.StepSession` from command-line options, and prints
(or saves) the resulting :class:`~httpstep.models.StepConfiguration`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under the
data directory.

See Also:
    :mod:`httpstep.config`: Global defaults and saved steps.
    :mod:`httpstep.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from httpstep import __version__
from httpstep.exceptions import ConfigError, HttpStepError, InvalidUsageError, SpecLoadError
from httpstep.exit_codes import EXIT_GENERIC_FAILURE
from httpstep.models import LoadResult, SavedStep, StepConfiguration, StepRole
from httpstep.output import (
    OutputFormat,
    debug,
    error,
    info,
    print_endpoints,
    print_period,
    print_step,
    success,
    suggest,
    warning,
)
from httpstep.session import StepHost, StepSession


app = typer.Typer(
    name="httpstep",
    help="Configure HTTP polling steps from OpenAPI 2.0/3.0/3.1 specs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

from httpstep.commands.config import config_app  # noqa: E402
from httpstep.commands.steps import steps_app  # noqa: E402

app.add_typer(config_app, name="config", help="Global defaults management.")
app.add_typer(steps_app, name="steps", help="Saved step configurations.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"httpstep {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~httpstep.output.OutputManager` and routes
    library logging to stderr (debug level with ``--verbose``).
    """
    from httpstep.output import OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _configured_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _configured_format() -> OutputFormat:
    """The output format stored in the global config, ``AUTO`` if unreadable."""
    from httpstep.config import load_global_config

    try:
        return OutputFormat(load_global_config().output.format)
    except ConfigError:
        return OutputFormat.AUTO


class _CliHost(StepHost):
    """Collects the configuration a session applies."""

    def __init__(self) -> None:
        self.config: Optional[StepConfiguration] = None

    def update_step_params(self, config: StepConfiguration) -> None:
        self.config = config

    def notify(self, event: str) -> None:
        debug(event)


def _new_session(
    initial: Optional[StepConfiguration] = None,
    role: StepRole = StepRole.SOURCE,
    host: Optional[StepHost] = None,
) -> StepSession:
    from httpstep.config import resolve_config
    from httpstep.parser import SpecLoader

    config = resolve_config()
    if initial is None:
        initial = StepConfiguration(period=config.default_period)
    loader = SpecLoader(timeout=config.request.timeout, verify_ssl=config.request.verify_ssl)
    return StepSession(initial, role=role, loader=loader, host=host)


def _default_spec(spec: Optional[str]) -> str:
    if spec:
        return spec
    from httpstep.config import resolve_config

    return resolve_config().default_spec_url


async def _load_into(session: StepSession, source: str) -> LoadResult:
    """Load *source* (URL, file path, or '-' for stdin) into *session*."""
    from httpstep.parser.loader import is_url

    if source == "-":
        return await session.load_text(sys.stdin.read())
    if is_url(source):
        return await session.load_url(source)
    return await session.load_file(source)


def _load_or_exit(session: StepSession, source: str) -> LoadResult:
    debug(f"Loading spec from {source}")
    result = asyncio.run(_load_into(session, source))
    if not result.ok:
        error(f"Failed to load spec: {result.error}")
        raise typer.Exit(code=SpecLoadError.exit_code)
    return result


def _parse_pairs(values: Optional[list[str]], option: str) -> dict[str, str]:
    """Turn repeated ``key=value`` options into a dict."""
    pairs: dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"{option} expects key=value, got: {item}")
        pairs[key] = value
    return pairs


@app.command("endpoints")
def endpoints_command(
    spec: Optional[str] = typer.Argument(
        None, help="Spec URL, file path, or '-' for stdin. Defaults to the configured spec URL."
    ),
) -> None:
    """List the endpoints declared by an OpenAPI document.

    Example::

        httpstep endpoints https://petstore.swagger.io/v2/swagger.json
        httpstep --json endpoints ./openapi.yaml
    """
    source = _default_spec(spec)
    session = _new_session()
    result = _load_or_exit(session, source)

    if result.version is not None:
        info(f"OpenAPI {result.version.value} document, base path: {session.state.base_path or '-'}")
    if not result.endpoints:
        info("The document declares no paths.")
        return

    print_endpoints(result.endpoints, session.state.base_path)


@app.command("configure")
def configure_command(
    spec: Optional[str] = typer.Argument(
        None, help="Spec URL, file path, or '-' for stdin. Defaults to the configured spec URL."
    ),
    endpoint: str = typer.Option(
        ..., "--endpoint", "-e", help="Endpoint index (see 'endpoints') or path template."
    ),
    base_path: Optional[str] = typer.Option(
        None, "--base-path", "-b", help="Override the base path derived from the spec."
    ),
    path_param: Optional[list[str]] = typer.Option(
        None, "--path-param", "-P", help="Path parameter binding, key=value. Repeatable."
    ),
    query: Optional[list[str]] = typer.Option(
        None, "--query", "-Q", help="Query parameter binding, key=value. Repeatable."
    ),
    period: Optional[float] = typer.Option(None, "--period", help="Polling period value."),
    unit: Optional[str] = typer.Option(
        None, "--unit", "-u", help="Period unit: ms, s, min, hour, day."
    ),
    content_type: Optional[str] = typer.Option(
        None, "--content-type", help="Override the response content type."
    ),
    role: Optional[StepRole] = typer.Option(None, "--role", help="Step role."),
    step_name: Optional[str] = typer.Option(
        None, "--step-name", help="Workflow step name; infers the role when --role is omitted."
    ),
    save: Optional[str] = typer.Option(None, "--save", help="Save the result under this name."),
) -> None:
    """Derive a step configuration from one endpoint of an OpenAPI document.

    Example::

        httpstep configure https://api.chucknorris.io/documentation -e /jokes/random
        httpstep configure spec.json -e 2 -P id=42 -Q verbose=true --period 5 --unit min
    """
    from httpstep.composer import unit_multiplier
    from httpstep.config import save_step, step_exists, validate_step_name

    if save:
        try:
            validate_step_name(save)
        except HttpStepError as exc:
            error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None

    if role is None:
        role = StepRole.from_step_name(step_name) if step_name else StepRole.SOURCE

    source = _default_spec(spec)
    host = _CliHost()
    session = _new_session(role=role, host=host)
    _load_or_exit(session, source)

    try:
        if endpoint.isdigit():
            session.select_endpoint(int(endpoint))
        else:
            session.select_endpoint_by_name(endpoint)

        path_params = _parse_pairs(path_param, "--path-param")
        query_params = _parse_pairs(query, "--query")
        if path_params or query_params:
            session.set_parameters(path_params, query_params)

        if base_path is not None:
            session.set_base_path(base_path)

        if unit is not None:
            unit_multiplier(unit)
            session.set_time_unit(unit)
        if period is not None:
            if period <= 0:
                raise InvalidUsageError(f"--period must be positive, got: {period}")
            session.set_period_value(period)

        if content_type is not None:
            session.set_content_type(content_type)
    except HttpStepError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    config = session.apply()
    print_step(config)

    if save:
        if step_exists(save):
            warning(f"Overwriting saved step '{save}'.")
        path = save_step(SavedStep(name=save, role=role, spec=source, step=config))
        success(f"Saved step '{save}' to {path}")
        suggest(f"Run: httpstep steps show {save}")


@app.command("period")
def period_command(
    period_ms: int = typer.Argument(help="Period in milliseconds."),
) -> None:
    """Show the unit a stored period is displayed in.

    Example::

        httpstep period 7200000    # 2 hour
    """
    print_period(period_ms)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from httpstep.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``httpstep`` console script.

    :class:`~httpstep.exceptions.HttpStepError` exits with the error's
    ``exit_code``; anything else produces a crash log and a generic failure
    exit.
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
        if isinstance(exc, HttpStepError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)


