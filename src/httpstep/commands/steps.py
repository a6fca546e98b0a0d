"""Saved-step commands -- list, show, and delete stored step configurations.

Steps are written by ``httpstep configure --save NAME`` and live under
``<config_dir>/steps/``.  ``show`` prints the stored configuration in its
wire form (``contentType``) together with the period as it would be
displayed for editing.
"""

from __future__ import annotations

import typer

from httpstep.output import error, info, print_saved_step, print_saved_steps, success


steps_app = typer.Typer(no_args_is_help=True)


@steps_app.command("list")
def steps_list() -> None:
    """List saved steps.

    Example::

        httpstep steps list
    """
    from httpstep.config import list_steps, load_step
    from httpstep.models import SavedStep

    names = list_steps()
    if not names:
        info("No saved steps. Run: httpstep configure SPEC -e ENDPOINT --save NAME")
        return

    steps: list[SavedStep] = []
    for name in names:
        try:
            saved = load_step(name)
        except Exception as exc:
            error(f"Skipping step '{name}': {exc}")
            continue
        steps.append(saved)

    print_saved_steps(steps)


@steps_app.command("show")
def steps_show(
    name: str = typer.Argument(help="Saved step name."),
) -> None:
    """Show one saved step.

    Example::

        httpstep steps show jokes
    """
    from httpstep.config import load_step
    from httpstep.exceptions import ConfigError

    try:
        saved = load_step(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_saved_step(saved)


@steps_app.command("delete")
def steps_delete(
    name: str = typer.Argument(help="Saved step name."),
) -> None:
    """Delete a saved step.

    Example::

        httpstep steps delete jokes
    """
    from httpstep.config import delete_step
    from httpstep.exceptions import ConfigError

    try:
        delete_step(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Deleted step '{name}'.")
