"""Output formatting with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (endpoint tables, step configurations).
* **stderr** -- all diagnostics (status, warnings, errors, suggestions).
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

The module exposes two layers:

1. :class:`OutputManager` -- a stateful object holding format preferences,
   Rich consoles, and quiet/verbose flags. Created once in
   :func:`~httpstep.app.main_callback` and installed via :func:`set_output`.
2. Module-level convenience functions (:func:`print_endpoints`,
   :func:`print_step`, :func:`error`, etc.) that delegate to the global
   ``OutputManager``.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from httpstep.composer import Number, derive_period_display
from httpstep.models import Endpoint, SavedStep, StepConfiguration


ENDPOINT_HEADERS = ["Index", "Path", "Methods", "Media Types"]
SAVED_STEP_HEADERS = ["Name", "Role", "URL", "Period"]


class OutputFormat(str, Enum):
    """Supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def endpoint_row(index: int, endpoint: Endpoint) -> list[str]:
    """One endpoint-table row: index, path, methods, and distinct media types."""
    media_types = dict.fromkeys(t for types in endpoint.produces.values() for t in types)
    return [
        str(index),
        endpoint.name,
        ", ".join(endpoint.methods) or "-",
        ", ".join(media_types) or "-",
    ]


def period_label(period_ms: Number) -> str:
    """Render a period the way the editor shows it, e.g. ``"5 s"``."""
    value, unit = derive_period_display(period_ms)
    return f"{value} {unit}"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_endpoints(self, endpoints: list[Endpoint], base_path: str = "") -> None:
        """Print the endpoint list of a loaded document.

        Row indexes are the ones ``configure --endpoint`` accepts.  The rich
        table carries *base_path* in its caption.
        """
        rows = [endpoint_row(index, endpoint) for index, endpoint in enumerate(endpoints)]
        caption = f"Base path: {base_path}" if base_path else None
        self._print_table(
            ENDPOINT_HEADERS, rows, title=f"Endpoints ({len(rows)})", caption=caption
        )

    def print_step(self, config: StepConfiguration) -> None:
        """Print a step configuration in its wire form (``contentType``)."""
        data = config.model_dump(mode="json", by_alias=True)
        if self._format == OutputFormat.RICH:
            table = Table(show_header=False, box=None)
            table.add_column(style="bold cyan")
            table.add_column()
            table.add_row("url", config.url or "-")
            table.add_row("period", f"{config.period} ms ({period_label(config.period)})")
            table.add_row("contentType", config.content_type or "-")
            self._stdout.print(table)
        else:
            self._print_record(data)

    def print_period(self, period_ms: int) -> None:
        """Print a stored period next to the value and unit it displays as."""
        value, unit = derive_period_display(period_ms)
        if self._format == OutputFormat.RICH:
            self._stdout.print(f"{period_ms} ms = [bold]{value}[/bold] {unit}")
        else:
            self._print_record({"period": period_ms, "value": value, "unit": unit})

    def print_saved_steps(self, steps: list[SavedStep]) -> None:
        """Print saved steps as a Name/Role/URL/Period table."""
        rows = [
            [saved.name, saved.role.value, saved.step.url, period_label(saved.step.period)]
            for saved in steps
        ]
        self._print_table(SAVED_STEP_HEADERS, rows, title=f"Saved steps ({len(rows)})")

    def print_saved_step(self, saved: SavedStep) -> None:
        """Print one saved step with its period as displayed for editing."""
        data = saved.model_dump(mode="json", by_alias=True)
        value, unit = derive_period_display(saved.step.period)
        data["display_period"] = {"value": value, "unit": unit}
        self._print_record(data)

    def print_config(self, data: dict[str, Any]) -> None:
        """Print the effective global configuration."""
        self._print_record(data)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        """Print a green success message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. NOT suppressed by ``--quiet``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def suggest(self, message: str) -> None:
        """Print a dimmed next-step suggestion to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {message}[/dim]")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown with ``--verbose``."""
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def _write(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def _print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
        caption: Optional[str] = None,
    ) -> None:
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self._write(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            self._write("\t".join(headers))
            for row in rows:
                self._write("\t".join(row))
        else:
            table = Table(title=title, caption=caption, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def _print_record(self, data: dict[str, Any]) -> None:
        if self._format == OutputFormat.JSON:
            self._write(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            for key, value in data.items():
                if isinstance(value, dict):
                    value = json.dumps(value, ensure_ascii=False, default=str)
                self._write(f"{key}\t{value}")
        else:
            json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(json_str, "json", theme="monokai", word_wrap=True))


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None`` (used by tests)."""
    global _output
    _output = None


def print_endpoints(endpoints: list[Endpoint], base_path: str = "") -> None:
    get_output().print_endpoints(endpoints, base_path)


def print_step(config: StepConfiguration) -> None:
    get_output().print_step(config)


def print_period(period_ms: int) -> None:
    get_output().print_period(period_ms)


def print_saved_steps(steps: list[SavedStep]) -> None:
    get_output().print_saved_steps(steps)


def print_saved_step(saved: SavedStep) -> None:
    get_output().print_saved_step(saved)


def print_config(data: dict[str, Any]) -> None:
    get_output().print_config(data)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def success(message: str) -> None:
    """Print success message to stderr via the global OutputManager."""
    get_output().success(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def suggest(message: str) -> None:
    """Print next-step suggestion to stderr via the global OutputManager."""
    get_output().suggest(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
